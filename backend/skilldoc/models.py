"""
Data models for skill document headers.

Defines the typed projection of a header (``SkillProperties``) and the
closed set of value kinds every consumer of raw header values must handle.
"""

from __future__ import annotations

import datetime
from enum import Enum
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field


class ValueKind(str, Enum):
    """Closed classification of a loaded header value."""
    MISSING = "missing"
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    TIMESTAMP = "timestamp"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


# Marker for a key that is absent from the header entirely
MISSING: Any = object()


def value_kind(value: Any) -> ValueKind:
    """Classify a value produced by ``yaml.safe_load``."""
    if value is MISSING:
        return ValueKind.MISSING
    if value is None:
        return ValueKind.NULL
    # bool is a subclass of int, so it must be checked first
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (datetime.date, datetime.datetime)):
        return ValueKind.TIMESTAMP
    if isinstance(value, (list, tuple, set)):
        return ValueKind.SEQUENCE
    if isinstance(value, dict):
        return ValueKind.MAPPING
    # safe_load yields nothing else except binary scalars
    return ValueKind.STRING


# Header keys with a dedicated typed field, in canonical order
TYPED_FIELDS = ("name", "description", "compatibility", "allowed-tools", "license")


class SkillProperties(BaseModel):
    """
    Typed view of a skill header.

    ``metadata`` collects every header key the active profile does not know;
    ``extensions`` collects keys the profile knows but that have no typed
    field of their own.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str
    license: Optional[str] = None
    compatibility: Optional[str] = None
    allowed_tools: Optional[str] = Field(default=None, alias="allowed-tools")
    extensions: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None

    def to_header(self) -> Dict[str, Any]:
        """Build the header mapping these properties describe."""
        header: Dict[str, Any] = {"name": self.name, "description": self.description}
        if self.compatibility is not None:
            header["compatibility"] = self.compatibility
        if self.allowed_tools is not None:
            header["allowed-tools"] = self.allowed_tools
        if self.license is not None:
            header["license"] = self.license
        for key, value in (self.extensions or {}).items():
            header[key] = value
        if self.metadata:
            header["metadata"] = dict(self.metadata)
        return header

    def to_yaml(self) -> str:
        """Serialize to header YAML (without delimiters)."""
        return yaml.safe_dump(
            self.to_header(),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )

    def to_document(self, body: str = "") -> str:
        """Render a complete document from these properties and a body."""
        return f"---\n{self.to_yaml()}---\n{body}"
