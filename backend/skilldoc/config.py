"""
Checker configuration.

Limits, word lists and the active profile can be tuned through a YAML
document shaped like::

    skilldoc:
      profile: extended-platform
      extra_keys: [argument-hint, user-invocable]
      max_body_lines: 800
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .blocks import CONSTRUCTOR_ERRORS
from .errors import ConfigError
from .profiles import ProfileKind, ValidationProfile


DEFAULT_KEY_ORDER = [
    "name",
    "description",
    "instructions",
    "compatibility",
    "context",
    "allowed-tools",
    "license",
    "metadata",
]

DEFAULT_RESERVED_WORDS = ["anthropic", "claude"]

DEFAULT_GENERIC_NAMES = [
    "helper",
    "utils",
    "tools",
    "stuff",
    "thing",
    "misc",
    "general",
]

DEFAULT_TRIGGER_PHRASES = [
    "use when",
    "use for",
    "use this",
    "invoke when",
    "activate when",
]


class CheckerConfig(BaseModel):
    """Tunable settings for validation, linting and formatting."""

    model_config = ConfigDict(extra="forbid")

    profile: ProfileKind = ProfileKind.STANDARD
    extra_keys: List[str] = Field(default_factory=list)

    max_name_length: int = Field(default=64, ge=1)
    max_description_length: int = Field(default=1024, ge=1)
    max_compatibility_length: int = Field(default=500, ge=1)
    max_body_lines: int = Field(default=500, ge=1)

    reserved_words: List[str] = Field(default_factory=lambda: list(DEFAULT_RESERVED_WORDS))
    generic_names: List[str] = Field(default_factory=lambda: list(DEFAULT_GENERIC_NAMES))
    trigger_phrases: List[str] = Field(default_factory=lambda: list(DEFAULT_TRIGGER_PHRASES))
    min_description_chars: int = Field(default=20, ge=0)
    min_description_words: int = Field(default=4, ge=0)

    key_order: List[str] = Field(default_factory=lambda: list(DEFAULT_KEY_ORDER))

    @field_validator("reserved_words", "generic_names", "trigger_phrases")
    @classmethod
    def _lowercase(cls, values: List[str]) -> List[str]:
        return [v.lower() for v in values]

    @field_validator("key_order")
    @classmethod
    def _unique_order(cls, values: List[str]) -> List[str]:
        if len(set(values)) != len(values):
            raise ValueError("key_order must not repeat keys")
        return values

    def to_profile(self) -> ValidationProfile:
        """Build the validation profile this configuration selects."""
        if self.profile == ProfileKind.STANDARD:
            if self.extra_keys:
                raise ConfigError("extra_keys require the extended-platform or permissive profile")
            return ValidationProfile.standard()
        if self.profile == ProfileKind.EXTENDED_PLATFORM:
            return ValidationProfile.extended(self.extra_keys)
        return ValidationProfile.permissive(self.extra_keys)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CheckerConfig":
        """Load configuration from a mapping (optionally nested under ``skilldoc``)."""
        section = data.get("skilldoc", data)
        if not isinstance(section, Mapping):
            raise ConfigError("skilldoc configuration must be a mapping")
        try:
            return cls.model_validate(dict(section))
        except ValidationError as e:
            raise ConfigError(f"invalid configuration: {e}") from e

    @classmethod
    def from_yaml(cls, yaml_content: str) -> "CheckerConfig":
        """Load configuration from YAML content."""
        try:
            data = yaml.safe_load(yaml_content)
        except (yaml.YAMLError, *CONSTRUCTOR_ERRORS) as e:
            raise ConfigError(f"configuration is not valid YAML: {e}") from e
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError("configuration root must be a mapping")
        return cls.from_mapping(data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return self.model_dump(mode="json")


DEFAULT_CONFIG = CheckerConfig()
