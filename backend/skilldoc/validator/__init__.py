"""
Skill document validation.

This package provides the rule engine for skill documents:
- Structural rules (required fields, name/description constraints, unknown keys)
- Advisory lint (phrasing and naming heuristics)
- Engine combining both into a single result
"""

from .constraints import (
    NAME_PATTERN,
    TAG_PATTERN,
    find_tags,
    normalize_name,
    suggest_name,
    truncate_name,
)
from .structure import SkillValidator
from .linter import SkillLinter
from .engine import ValidationEngine, ValidationResult, validate_skill_md

__all__ = [
    # Constraints
    "NAME_PATTERN",
    "TAG_PATTERN",
    "find_tags",
    "normalize_name",
    "suggest_name",
    "truncate_name",
    # Rules
    "SkillValidator",
    "SkillLinter",
    # Engine
    "ValidationEngine",
    "ValidationResult",
    "validate_skill_md",
]
