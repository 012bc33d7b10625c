"""
Structured diagnostics and the central code registry.

Every rule check in the system owns exactly one stable code. Codes are
plain strings for documentation stability, but each one is declared here
through ``REGISTRY.register`` so that a collision, even with a namespace
owned by another subsystem, fails once at import time.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import DuplicateCodeError


class Severity(str, Enum):
    """Severity of a diagnostic."""
    ERROR = "error"  # Fails compliance
    WARNING = "warning"  # Advisory
    INFO = "info"  # Suggestion for improvement


@dataclass(frozen=True)
class Replacement:
    """A concrete edit: replace ``old`` text with ``new`` text."""

    old: str
    new: str


@dataclass(frozen=True)
class Suggestion:
    """
    Suggested fix attached to a diagnostic.

    ``message`` is the human-readable hint. A suggestion is *concrete*
    (machine-applicable) only when it carries replacements.
    """

    message: str
    replacements: Tuple[Replacement, ...] = ()

    @property
    def is_concrete(self) -> bool:
        return bool(self.replacements)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"message": self.message}
        if self.replacements:
            result["replacements"] = [
                {"old": r.old, "new": r.new} for r in self.replacements
            ]
        return result


@dataclass(frozen=True)
class CodeInfo:
    """Registry entry for one diagnostic code."""

    code: str
    namespace: str
    summary: str


class CodeRegistry:
    """Registry of diagnostic codes, unique across every namespace."""

    def __init__(self) -> None:
        self._codes: Dict[str, CodeInfo] = {}

    def register(self, code: str, namespace: str, summary: str) -> str:
        """
        Register a code and return it.

        Raises:
            DuplicateCodeError: If the code is already registered.
        """
        existing = self._codes.get(code)
        if existing is not None:
            raise DuplicateCodeError(code, existing.namespace, namespace)
        self._codes[code] = CodeInfo(code=code, namespace=namespace, summary=summary)
        return code

    def get(self, code: str) -> Optional[CodeInfo]:
        return self._codes.get(code)

    def codes(self, namespace: Optional[str] = None) -> List[str]:
        """List registered codes, optionally restricted to one namespace."""
        return [
            info.code for info in self._codes.values()
            if namespace is None or info.namespace == namespace
        ]

    def namespaces(self) -> List[str]:
        seen: List[str] = []
        for info in self._codes.values():
            if info.namespace not in seen:
                seen.append(info.namespace)
        return seen

    def __contains__(self, code: object) -> bool:
        return code in self._codes

    def __iter__(self) -> Iterator[CodeInfo]:
        return iter(self._codes.values())

    def __len__(self) -> int:
        return len(self._codes)


REGISTRY = CodeRegistry()
_register = REGISTRY.register

# Infrastructure
E000 = _register("E000", "infrastructure", "Document could not be parsed")

# Name rules
E001 = _register("E001", "name", "Name must not be empty")
E002 = _register("E002", "name", "Name exceeds maximum length")
E003 = _register("E003", "name", "Name contains invalid characters")
E004 = _register("E004", "name", "Name starts with a hyphen")
E005 = _register("E005", "name", "Name ends with a hyphen")
E006 = _register("E006", "name", "Name contains consecutive hyphens")
E007 = _register("E007", "name", "Name contains a reserved word")
E008 = _register("E008", "name", "Name contains a tag-like substring")
E009 = _register("E009", "name", "Name does not match directory name")

# Description rules
E010 = _register("E010", "description", "Description must not be empty")
E011 = _register("E011", "description", "Description exceeds maximum length")
E012 = _register("E012", "description", "Description contains tag-like substrings")

# Compatibility rules
E013 = _register("E013", "compatibility", "Compatibility exceeds maximum length")

# Field type rules
E014 = _register("E014", "field-type", "Name is not a string")
E015 = _register("E015", "field-type", "Description is not a string")
E016 = _register("E016", "field-type", "Compatibility is not a string")

# Missing required fields
E017 = _register("E017", "required", "Missing required field 'name'")
E018 = _register("E018", "required", "Missing required field 'description'")

# Optional field types
E019 = _register("E019", "field-type", "License is not a string")
E020 = _register("E020", "field-type", "Allowed-tools is not a string")
E021 = _register("E021", "field-type", "Metadata is not a mapping")

# Warnings
W001 = _register("W001", "header", "Header key is not known to the active profile")
W002 = _register("W002", "body", "Body exceeds maximum line count")

# Lint (advisory)
I001 = _register("I001", "lint", "Description uses first or second person")
I002 = _register("I002", "lint", "Description lacks a trigger phrase")
I003 = _register("I003", "lint", "Name does not use gerund form")
I004 = _register("I004", "lint", "Name is overly generic")
I005 = _register("I005", "lint", "Description is overly vague")

# Codes owned by other subsystems. They are registered here so the
# uniqueness check covers them too.
_EXTERNAL_CODES: Dict[str, List[Tuple[str, str]]] = {
    "structure": [
        ("S001", "Referenced file does not exist"),
        ("S002", "Script missing execute permission"),
        ("S003", "Reference depth exceeds one level"),
        ("S004", "Excessive directory nesting depth"),
        ("S005", "Symlink detected in skill directory"),
        ("S006", "Path traversal in reference link"),
    ],
    "conflict": [
        ("C001", "Name collision across skill directories"),
        ("C002", "Description overlap between skills"),
        ("C003", "Total token budget exceeded"),
    ],
    "plugin-manifest": [
        ("P001", "JSON syntax error in plugin manifest"),
        ("P002", "Manifest name missing"),
        ("P003", "Manifest name not kebab-case"),
        ("P004", "Manifest version not semver"),
        ("P005", "Manifest description empty or missing"),
        ("P006", "Custom path is absolute"),
        ("P007", "Declared component path does not exist"),
        ("P008", "Hardcoded credential detected"),
        ("P009", "Server URL uses an insecure scheme"),
        ("P010", "Missing recommended manifest field"),
    ],
    "hooks": [
        ("H001", "Invalid JSON in hooks file"),
        ("H002", "Invalid hooks structure"),
        ("H003", "Unknown hook event name"),
        ("H004", "Hook entry missing hooks array"),
        ("H005", "Hook missing type"),
        ("H006", "Unknown hook type"),
        ("H007", "Command hook missing command"),
        ("H008", "Prompt hook missing prompt"),
        ("H009", "Hook timeout outside recommended range"),
        ("H010", "Hardcoded absolute path in hook command"),
        ("H011", "Prompt hook on suboptimal event"),
    ],
    "agent": [
        ("A001", "Agent header missing"),
        ("A002", "Required agent field missing"),
        ("A003", "Agent name not kebab-case"),
        ("A004", "Agent name is generic"),
        ("A005", "Agent name length out of range"),
        ("A006", "Agent description length out of range"),
        ("A007", "Agent model not recognized"),
        ("A008", "Agent color not recognized"),
        ("A009", "Agent system prompt missing or too short"),
        ("A010", "Agent system prompt too long"),
    ],
    "command": [
        ("K001", "Command header syntax error"),
        ("K002", "Command description too long"),
        ("K003", "Command model not recognized"),
        ("K004", "Command description does not start with a verb"),
        ("K005", "Command body is empty"),
        ("K006", "Command allowed-tools has invalid format"),
        ("K007", "Command description missing"),
    ],
    "cross-component": [
        ("X001", "Component directory is empty"),
        ("X002", "Hook references a missing script"),
        ("X003", "Orphaned file in component directory"),
        ("X004", "Naming inconsistency across components"),
        ("X005", "Token budget across skills exceeded"),
        ("X006", "Duplicate component names across types"),
    ],
}

for _namespace, _entries in _EXTERNAL_CODES.items():
    for _code, _summary in _entries:
        _register(_code, _namespace, _summary)


@dataclass
class Diagnostic:
    """A single rule outcome."""

    severity: Severity
    code: str
    message: str
    field: Optional[str] = None
    suggestion: Optional[Suggestion] = None

    def __post_init__(self) -> None:
        if self.code not in REGISTRY:
            raise ValueError(f"unregistered diagnostic code: {self.code}")

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    @property
    def is_warning(self) -> bool:
        return self.severity == Severity.WARNING

    @property
    def is_info(self) -> bool:
        return self.severity == Severity.INFO

    @property
    def is_fixable(self) -> bool:
        return self.suggestion is not None and self.suggestion.is_concrete

    def __str__(self) -> str:
        if self.severity == Severity.ERROR:
            return self.message
        return f"{self.severity.value}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        result: Dict[str, Any] = {
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
        }
        if self.field is not None:
            result["field"] = self.field
        if self.suggestion is not None:
            result["suggestion"] = self.suggestion.to_dict()
        return result


def error(code: str, message: str, field: Optional[str] = None,
          suggestion: Optional[Suggestion] = None) -> Diagnostic:
    return Diagnostic(Severity.ERROR, code, message, field, suggestion)


def warning(code: str, message: str, field: Optional[str] = None,
            suggestion: Optional[Suggestion] = None) -> Diagnostic:
    return Diagnostic(Severity.WARNING, code, message, field, suggestion)


def info(code: str, message: str, field: Optional[str] = None,
         suggestion: Optional[Suggestion] = None) -> Diagnostic:
    return Diagnostic(Severity.INFO, code, message, field, suggestion)


def has_errors(diagnostics: Iterable[Diagnostic]) -> bool:
    """True if any diagnostic fails compliance."""
    return any(d.is_error for d in diagnostics)
