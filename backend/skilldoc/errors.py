"""
Error types for skill document processing.

Parse failures describe malformed *input*; they are raised as typed
exceptions so callers can map each one to an exit code or a diagnostic.
Rule violations in well-formed input are never raised; they are reported
as diagnostics instead.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class SkillDocError(Exception):
    """Base class for all skilldoc errors."""


class ParseError(SkillDocError):
    """A document could not be parsed."""

    kind = "parse_error"

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def __str__(self) -> str:
        if self.line is not None and self.column is not None:
            return f"{self.message} (line {self.line}, column {self.column})"
        if self.line is not None:
            return f"{self.message} (line {self.line})"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        result: Dict[str, Any] = {"kind": self.kind, "message": self.message}
        if self.line is not None:
            result["line"] = self.line
        if self.column is not None:
            result["column"] = self.column
        return result


class MissingDelimiterError(ParseError):
    """The first line is not the opening ``---`` delimiter."""

    kind = "missing_delimiter"

    def __init__(self) -> None:
        super().__init__("missing opening delimiter", line=1)


class UnterminatedHeaderError(ParseError):
    """No closing ``---`` delimiter follows the header."""

    kind = "unterminated_header"

    def __init__(self) -> None:
        super().__init__("unterminated header")


class HeaderSyntaxError(ParseError):
    """The header is not valid YAML."""

    kind = "header_syntax"

    def __init__(self, problem: str, line: Optional[int] = None, column: Optional[int] = None):
        super().__init__(f"invalid YAML in header: {problem}", line=line, column=column)
        self.problem = problem


class HeaderNotMappingError(ParseError):
    """The header parsed to a list or scalar instead of a mapping."""

    kind = "header_not_mapping"

    def __init__(self, found: str):
        super().__init__(f"header is not a mapping (found {found})")
        self.found = found


class MissingFieldError(ParseError):
    """A required header field is absent."""

    kind = "missing_field"

    def __init__(self, field_name: str):
        super().__init__(f"missing required field '{field_name}'")
        self.field = field_name


class FieldTypeError(ParseError):
    """A required header field has the wrong type."""

    kind = "field_type"

    def __init__(self, field_name: str, found: str):
        super().__init__(f"field '{field_name}' must be a string, found {found}")
        self.field = field_name
        self.found = found


class ConfigError(SkillDocError):
    """Checker configuration is invalid."""


class DuplicateCodeError(SkillDocError):
    """A diagnostic code was registered twice."""

    def __init__(self, code: str, existing_namespace: str, namespace: str):
        super().__init__(
            f"diagnostic code {code} already registered in namespace "
            f"'{existing_namespace}' (attempted from '{namespace}')"
        )
        self.code = code
