"""
Validation profiles.

A profile decides which header keys are *known*. Unknown keys are
reported by the validator (unless the profile is permissive) and end up in
``SkillProperties.metadata`` after projection.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable

from .errors import ConfigError


# Keys defined by the published skill format. ``metadata`` is the
# container key for free-form data and is therefore always known.
STANDARD_KEYS: FrozenSet[str] = frozenset({
    "name",
    "description",
    "license",
    "compatibility",
    "allowed-tools",
    "metadata",
})


class ProfileKind(str, Enum):
    """Named profile variants."""
    STANDARD = "standard"
    EXTENDED_PLATFORM = "extended-platform"
    PERMISSIVE = "permissive"


@dataclass(frozen=True)
class ValidationProfile:
    """
    Known-key policy used by the parser and the validator.

    Only the standard baseline is built in; extension keys for a platform
    are supplied by the caller through ``extra_keys``.
    """

    kind: ProfileKind = ProfileKind.STANDARD
    extra_keys: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if self.kind == ProfileKind.STANDARD and self.extra_keys:
            raise ConfigError("the standard profile does not accept extra keys")

    @classmethod
    def standard(cls) -> "ValidationProfile":
        return cls()

    @classmethod
    def extended(cls, keys: Iterable[str]) -> "ValidationProfile":
        """Standard keys plus platform extension keys."""
        return cls(ProfileKind.EXTENDED_PLATFORM, frozenset(keys))

    @classmethod
    def permissive(cls, keys: Iterable[str] = ()) -> "ValidationProfile":
        """Accept every key silently."""
        return cls(ProfileKind.PERMISSIVE, frozenset(keys))

    @property
    def known_keys(self) -> FrozenSet[str]:
        return STANDARD_KEYS | self.extra_keys

    @property
    def reports_unknown_keys(self) -> bool:
        return self.kind != ProfileKind.PERMISSIVE

    def is_known(self, key: str) -> bool:
        return key in self.known_keys


STANDARD_PROFILE = ValidationProfile.standard()
