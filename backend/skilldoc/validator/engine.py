"""
Validation Engine.

Combines parsing, structural validation and linting into a single
pipeline that turns document text into a ``ValidationResult``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..config import DEFAULT_CONFIG, CheckerConfig
from ..diagnostics import E000, Diagnostic, Suggestion, error
from ..errors import ParseError
from ..parser import Frontmatter, SkillDocument, parse_frontmatter, project_properties
from ..profiles import ValidationProfile
from .linter import SkillLinter
from .structure import SkillValidator

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """
    Combined result of validating one document.

    Contains:
    - Parse outcome (``parse_error`` is set when the text could not be parsed)
    - Structural diagnostics (E and W codes)
    - Lint diagnostics (I codes)
    """

    valid: bool
    diagnostics: List[Diagnostic] = field(default_factory=list)
    frontmatter: Optional[Frontmatter] = None
    parse_error: Optional[ParseError] = None

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.is_warning]

    @property
    def infos(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.is_info]

    @property
    def fixable(self) -> List[Diagnostic]:
        """Diagnostics the fixer can apply."""
        return [d for d in self.diagnostics if d.is_fixable]

    @property
    def total_errors(self) -> int:
        return len(self.errors)

    @property
    def total_warnings(self) -> int:
        return len(self.warnings)

    def codes(self) -> List[str]:
        return [d.code for d in self.diagnostics]

    def summary(self) -> str:
        """Generate a summary of validation results."""
        lines = []
        status = "PASSED" if self.valid else "FAILED"
        lines.append(f"Validation {status}")
        lines.append(f"  Errors: {self.total_errors}")
        lines.append(f"  Warnings: {self.total_warnings}")
        lines.append(f"  Suggestions: {len(self.infos)}")
        if self.fixable:
            lines.append(f"  Fixable: {len(self.fixable)}")

        for diagnostic in self.diagnostics:
            lines.append(f"  [{diagnostic.code}] {diagnostic}")

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "valid": self.valid,
            "total_errors": self.total_errors,
            "total_warnings": self.total_warnings,
            "parse_error": self.parse_error.to_dict() if self.parse_error else None,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


class ValidationEngine:
    """
    Validation pipeline for skill documents.

    Stages:
    - Parse (failures become a single E000 diagnostic)
    - Structural rules (always, once the header parses)
    - Lint (when ``name`` and ``description`` project into typed properties)
    """

    def __init__(
        self,
        profile: Optional[ValidationProfile] = None,
        config: Optional[CheckerConfig] = None,
        lint: bool = True,
    ):
        """
        Initialize the validation engine.

        Args:
            profile: Active profile; defaults to the one ``config`` selects.
            config: Checker configuration.
            lint: Whether to run the advisory linter.
        """
        self.config = config or DEFAULT_CONFIG
        self.profile = profile or self.config.to_profile()
        self.validator = SkillValidator(self.profile, self.config)
        self.linter: Optional[SkillLinter] = SkillLinter(self.config) if lint else None

    def validate_content(
        self,
        text: str,
        dir_name: Optional[str] = None,
    ) -> ValidationResult:
        """
        Validate document text.

        Args:
            text: Complete document text.
            dir_name: Name of the directory holding the document, if known.

        Returns:
            ValidationResult with every diagnostic found.
        """
        try:
            frontmatter = parse_frontmatter(text)
        except ParseError as e:
            logger.debug("Document failed to parse: %s", e)
            diagnostic = error(
                E000, str(e),
                suggestion=Suggestion("Fix the header so it parses as a YAML mapping"),
            )
            return ValidationResult(valid=False, diagnostics=[diagnostic], parse_error=e)

        diagnostics = self.validator.validate(frontmatter.data, frontmatter.body, dir_name)

        if self.linter is not None:
            try:
                properties = project_properties(frontmatter.data, self.profile)
            except ParseError:
                # Missing or mistyped required fields are already reported
                properties = None
            if properties is not None:
                diagnostics.extend(self.linter.lint(properties, frontmatter.body))

        return ValidationResult(
            valid=not any(d.is_error for d in diagnostics),
            diagnostics=diagnostics,
            frontmatter=frontmatter,
        )

    def validate_document(
        self,
        document: SkillDocument,
        dir_name: Optional[str] = None,
    ) -> ValidationResult:
        """Validate an already parsed document."""
        frontmatter = document.frontmatter
        diagnostics = self.validator.validate(frontmatter.data, frontmatter.body, dir_name)
        if self.linter is not None:
            diagnostics.extend(self.linter.lint(document.properties, document.body))
        return ValidationResult(
            valid=not any(d.is_error for d in diagnostics),
            diagnostics=diagnostics,
            frontmatter=frontmatter,
        )

    def quick_validate(self, text: str) -> bool:
        """
        Quick validation check (structural rules only).

        Returns:
            True if the document has no errors.
        """
        try:
            frontmatter = parse_frontmatter(text)
        except ParseError:
            return False
        diagnostics = self.validator.validate(frontmatter.data, frontmatter.body)
        return not any(d.is_error for d in diagnostics)


def validate_skill_md(
    text: str,
    dir_name: Optional[str] = None,
    profile: Optional[ValidationProfile] = None,
    config: Optional[CheckerConfig] = None,
) -> ValidationResult:
    """
    Convenience function to validate document text.

    Args:
        text: Complete document text.
        dir_name: Name of the directory holding the document, if known.
        profile: Optional validation profile.
        config: Optional checker configuration.

    Returns:
        ValidationResult with every diagnostic found.
    """
    engine = ValidationEngine(profile=profile, config=config)
    return engine.validate_content(text, dir_name=dir_name)
