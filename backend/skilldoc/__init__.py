"""
Skilldoc: compliance tooling for skill definition documents.

This package provides tools for parsing, validating, fixing and formatting
``SKILL.md`` documents (a ``---``-delimited YAML header plus a Markdown body).
"""

from .errors import (
    SkillDocError,
    ParseError,
    MissingDelimiterError,
    UnterminatedHeaderError,
    HeaderSyntaxError,
    HeaderNotMappingError,
    MissingFieldError,
    FieldTypeError,
    ConfigError,
    DuplicateCodeError,
)
from .models import SkillProperties, ValueKind, value_kind
from .profiles import ProfileKind, ValidationProfile
from .config import CheckerConfig
from .diagnostics import (
    REGISTRY,
    CodeRegistry,
    Diagnostic,
    Replacement,
    Severity,
    Suggestion,
)
from .blocks import CommentBlock, HeaderBlocks, KeyBlock
from .parser import (
    Frontmatter,
    SkillDocument,
    parse_document,
    parse_frontmatter,
    project_properties,
    split_document,
)
from .validator import (
    SkillLinter,
    SkillValidator,
    ValidationEngine,
    ValidationResult,
    validate_skill_md,
)
from .fixer import FixAction, FixResult, apply_fixes, fix_content
from .formatter import FormatResult, diff_content, format_content, format_document

__version__ = "0.1.0"
__all__ = [
    # Errors
    "SkillDocError",
    "ParseError",
    "MissingDelimiterError",
    "UnterminatedHeaderError",
    "HeaderSyntaxError",
    "HeaderNotMappingError",
    "MissingFieldError",
    "FieldTypeError",
    "ConfigError",
    "DuplicateCodeError",
    # Models
    "SkillProperties",
    "ValueKind",
    "value_kind",
    "ProfileKind",
    "ValidationProfile",
    "CheckerConfig",
    # Diagnostics
    "REGISTRY",
    "CodeRegistry",
    "Diagnostic",
    "Replacement",
    "Severity",
    "Suggestion",
    # Parsing
    "CommentBlock",
    "HeaderBlocks",
    "KeyBlock",
    "Frontmatter",
    "SkillDocument",
    "parse_document",
    "parse_frontmatter",
    "project_properties",
    "split_document",
    # Validation
    "SkillLinter",
    "SkillValidator",
    "ValidationEngine",
    "ValidationResult",
    "validate_skill_md",
    # Fixing and formatting
    "FixAction",
    "FixResult",
    "apply_fixes",
    "fix_content",
    "FormatResult",
    "diff_content",
    "format_content",
    "format_document",
]
