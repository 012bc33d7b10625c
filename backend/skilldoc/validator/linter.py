"""
Advisory Linter.

Quality heuristics for names and descriptions. Lint diagnostics are INFO
only and never affect whether a document passes validation.
"""

from __future__ import annotations

import re
from typing import Callable, List, Optional

from ..config import DEFAULT_CONFIG, CheckerConfig
from ..diagnostics import I001, I002, I003, I004, I005, Diagnostic, Suggestion, info
from ..models import SkillProperties


# Descriptions that open with a first or second person pronoun
LEADING_PERSON_PATTERN = re.compile(
    r"^\W*(?:i|i'm|i'll|i've|me|my|we|we're|our|us|you|you're|you'll|your)\b",
    re.IGNORECASE,
)

# A standalone capital "I" anywhere ("Then I convert the file")
SELF_REFERENCE_PATTERN = re.compile(r"\bI\b")


class SkillLinter:
    """Runs the advisory checks against typed properties."""

    def __init__(self, config: Optional[CheckerConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self._checks: List[Callable[[SkillProperties], Optional[Diagnostic]]] = [
            self._check_person,
            self._check_trigger,
            self._check_gerund,
            self._check_generic,
            self._check_vague,
        ]

    def lint(self, properties: SkillProperties, body: str = "") -> List[Diagnostic]:
        """
        Lint a parsed document.

        Args:
            properties: Typed header properties.
            body: Document body (currently unused by the checks).

        Returns:
            INFO diagnostics, in check order.
        """
        results: List[Diagnostic] = []
        for check in self._checks:
            diagnostic = check(properties)
            if diagnostic is not None:
                results.append(diagnostic)
        return results

    def _check_person(self, properties: SkillProperties) -> Optional[Diagnostic]:
        description = properties.description
        if LEADING_PERSON_PATTERN.match(description) or SELF_REFERENCE_PATTERN.search(description):
            return info(
                I001, "description uses first or second person", "description",
                Suggestion("Rewrite in third person, e.g. 'Processes PDFs' not 'I process PDFs'"),
            )
        return None

    def _check_trigger(self, properties: SkillProperties) -> Optional[Diagnostic]:
        lowered = properties.description.lower()
        if any(phrase in lowered for phrase in self.config.trigger_phrases):
            return None
        return info(
            I002, "description lacks a trigger phrase", "description",
            Suggestion("Say when to activate the skill, e.g. 'Use when working with PDF files.'"),
        )

    def _check_gerund(self, properties: SkillProperties) -> Optional[Diagnostic]:
        first_segment = properties.name.split("-")[0]
        if first_segment.lower().endswith("ing"):
            return None
        return info(
            I003, "name does not use gerund form", "name",
            Suggestion("Consider gerund form, e.g. 'processing-pdfs' instead of 'pdf-processor'"),
        )

    def _check_generic(self, properties: SkillProperties) -> Optional[Diagnostic]:
        first_segment = properties.name.split("-")[0].lower()
        if first_segment not in self.config.generic_names:
            return None
        return info(
            I004, f"name is overly generic: '{first_segment}'", "name",
            Suggestion("Use a specific, descriptive name"),
        )

    def _check_vague(self, properties: SkillProperties) -> Optional[Diagnostic]:
        description = properties.description
        if (len(description) >= self.config.min_description_chars
                and len(description.split()) >= self.config.min_description_words):
            return None
        return info(
            I005, "description is overly vague", "description",
            Suggestion("Add detail about what the skill does and when to use it"),
        )
