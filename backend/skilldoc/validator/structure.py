"""
Structural Validator.

Checks a loaded header mapping and body against the document format rules
(E001-E021, W001, W002). Every rule runs independently; a rule never raises
on user content, it reports a diagnostic instead.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional

from ..config import DEFAULT_CONFIG, CheckerConfig
from ..diagnostics import (
    E001, E002, E003, E004, E005, E006, E007, E008, E009, E010, E011, E012,
    E013, E014, E015, E016, E017, E018, E019, E020, E021, W001, W002,
    Diagnostic,
    Replacement,
    Suggestion,
    error,
    warning,
)
from ..models import MISSING, ValueKind, value_kind
from ..parser import Frontmatter
from ..profiles import ValidationProfile
from .constraints import (
    collapse_hyphens,
    count_lines,
    find_reserved_word,
    find_tags,
    invalid_characters,
    normalize_name,
    suggest_name,
    truncate_name,
)


def _replace(message: str, old: str, new: str) -> Suggestion:
    # An empty replacement would leave the field without a value
    if not new:
        return Suggestion(message)
    return Suggestion(message, (Replacement(old, new),))


def _remove_tags(message: str, tags: List[str]) -> Suggestion:
    return Suggestion(message, tuple(Replacement(tag, "") for tag in tags))


class SkillValidator:
    """
    Validates header data against the format rules.

    The validator works on the raw header mapping rather than typed
    properties so that missing and mistyped fields can be reported.
    """

    def __init__(
        self,
        profile: Optional[ValidationProfile] = None,
        config: Optional[CheckerConfig] = None,
    ):
        """
        Initialize the validator.

        Args:
            profile: Active profile; defaults to the one ``config`` selects.
            config: Limits and word lists; defaults to ``DEFAULT_CONFIG``.
        """
        self.config = config or DEFAULT_CONFIG
        self.profile = profile or self.config.to_profile()

    def validate(
        self,
        data: Mapping[Any, Any],
        body: str = "",
        dir_name: Optional[str] = None,
    ) -> List[Diagnostic]:
        """
        Run every structural rule.

        Args:
            data: Header mapping as loaded by the parser.
            body: Document body.
            dir_name: Name of the containing directory, when known.

        Returns:
            Diagnostics in rule order.
        """
        diagnostics: List[Diagnostic] = []
        diagnostics.extend(self._check_name(data, dir_name))
        diagnostics.extend(self._check_description(data))
        diagnostics.extend(self._check_compatibility(data))
        diagnostics.extend(self._check_optional_strings(data))
        diagnostics.extend(self._check_metadata(data))
        diagnostics.extend(self._check_unknown_keys(data))
        diagnostics.extend(self._check_body(body))
        return diagnostics

    def validate_frontmatter(
        self,
        frontmatter: Frontmatter,
        dir_name: Optional[str] = None,
    ) -> List[Diagnostic]:
        return self.validate(frontmatter.data, frontmatter.body, dir_name)

    def _check_name(
        self,
        data: Mapping[Any, Any],
        dir_name: Optional[str],
    ) -> List[Diagnostic]:
        value = data.get("name", MISSING)
        kind = value_kind(value)
        if kind == ValueKind.MISSING:
            return [error(E017, "missing required field 'name'", "name")]
        if not isinstance(value, str):
            return [error(E014, f"name must be a string, found {kind.value}", "name")]

        name = normalize_name(value)
        if not name.strip():
            return [error(E001, "name must not be empty", "name")]

        issues: List[Diagnostic] = []
        limit = self.config.max_name_length

        if len(name) > limit:
            issues.append(error(
                E002,
                f"name exceeds {limit} characters ({len(name)})",
                "name",
                _replace(f"Shorten the name to at most {limit} characters",
                         value, truncate_name(name, limit)),
            ))

        bad_chars = invalid_characters(name)
        if bad_chars:
            listed = ", ".join(repr(c) for c in bad_chars)
            suggestion: Optional[Suggestion] = Suggestion(
                "Use lowercase letters, digits and hyphens only"
            )
            fixed = suggest_name(name)
            if fixed:
                suggestion = _replace(
                    f"Use lowercase letters, digits and hyphens only: '{fixed}'",
                    value, fixed,
                )
            issues.append(error(
                E003, f"name contains invalid characters: {listed}", "name", suggestion,
            ))

        if name.startswith("-"):
            issues.append(error(
                E004, "name must not start with a hyphen", "name",
                _replace("Remove the leading hyphen", value, name.lstrip("-")),
            ))
        if name.endswith("-"):
            issues.append(error(
                E005, "name must not end with a hyphen", "name",
                _replace("Remove the trailing hyphen", value, name.rstrip("-")),
            ))
        if "--" in name:
            issues.append(error(
                E006, "name must not contain consecutive hyphens", "name",
                _replace("Collapse consecutive hyphens", value, collapse_hyphens(name)),
            ))

        reserved = find_reserved_word(name, self.config.reserved_words)
        if reserved is not None:
            issues.append(error(
                E007, f"name contains reserved word '{reserved}'", "name",
                Suggestion(f"Choose a name without '{reserved}'"),
            ))

        tags = find_tags(value)
        if tags:
            issues.append(error(
                E008, "name contains tag-like text", "name",
                _remove_tags("Remove the tags", tags),
            ))

        if dir_name is not None:
            expected = normalize_name(dir_name)
            if name != expected:
                issues.append(error(
                    E009,
                    f"name '{name}' does not match directory name '{expected}'",
                    "name",
                    Suggestion("Rename the skill or its directory so they match"),
                ))

        return issues

    def _check_description(self, data: Mapping[Any, Any]) -> List[Diagnostic]:
        value = data.get("description", MISSING)
        kind = value_kind(value)
        if kind == ValueKind.MISSING:
            return [error(E018, "missing required field 'description'", "description")]
        if kind == ValueKind.NULL or (isinstance(value, str) and not value.strip()):
            return [error(E010, "description must not be empty", "description")]
        if not isinstance(value, str):
            return [error(
                E015, f"description must be a string, found {kind.value}", "description",
            )]

        issues: List[Diagnostic] = []
        limit = self.config.max_description_length
        if len(value) > limit:
            issues.append(error(
                E011,
                f"description exceeds {limit} characters ({len(value)})",
                "description",
                Suggestion(f"Shorten the description to at most {limit} characters"),
            ))

        tags = find_tags(value)
        if tags:
            issues.append(error(
                E012, "description contains tag-like text", "description",
                _remove_tags("Remove the tags", tags),
            ))
        return issues

    def _check_compatibility(self, data: Mapping[Any, Any]) -> List[Diagnostic]:
        value = data.get("compatibility", MISSING)
        kind = value_kind(value)
        if kind == ValueKind.MISSING:
            return []
        if not isinstance(value, str):
            return [error(
                E016, f"compatibility must be a string, found {kind.value}", "compatibility",
            )]
        limit = self.config.max_compatibility_length
        if len(value) > limit:
            return [error(
                E013,
                f"compatibility exceeds {limit} characters ({len(value)})",
                "compatibility",
            )]
        return []

    def _check_optional_strings(self, data: Mapping[Any, Any]) -> List[Diagnostic]:
        issues: List[Diagnostic] = []
        for field_name, code in (("license", E019), ("allowed-tools", E020)):
            value = data.get(field_name, MISSING)
            if value is not MISSING and not isinstance(value, str):
                kind = value_kind(value)
                issues.append(error(
                    code, f"{field_name} must be a string, found {kind.value}", field_name,
                ))
        return issues

    def _check_metadata(self, data: Mapping[Any, Any]) -> List[Diagnostic]:
        kind = value_kind(data.get("metadata", MISSING))
        if kind in (ValueKind.MISSING, ValueKind.MAPPING):
            return []
        return [error(E021, f"metadata must be a mapping, found {kind.value}", "metadata")]

    def _check_unknown_keys(self, data: Mapping[Any, Any]) -> List[Diagnostic]:
        if not self.profile.reports_unknown_keys:
            return []
        issues: List[Diagnostic] = []
        for key in data:
            key_text = str(key)
            if not self.profile.is_known(key_text):
                issues.append(warning(
                    W001,
                    f"unexpected header key '{key_text}'",
                    key_text,
                    Suggestion("Remove the key or move it under 'metadata'"),
                ))
        return issues

    def _check_body(self, body: str) -> List[Diagnostic]:
        limit = self.config.max_body_lines
        lines = count_lines(body)
        if lines > limit:
            return [warning(
                W002,
                f"body exceeds {limit} lines ({lines})",
                suggestion=Suggestion("Move detailed material into referenced files"),
            )]
        return []
