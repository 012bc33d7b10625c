"""
Skill document parser.

Splits raw document text into the ``---``-delimited header and the body,
loads the header with PyYAML and projects it into typed properties while
keeping a structure-preserving block list for rewriting.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import yaml

from .blocks import (
    CONSTRUCTOR_ERRORS,
    HeaderBlocks,
    ScalarTracker,
    build_blocks,
    line_content,
    split_lines,
)
from .errors import (
    FieldTypeError,
    HeaderNotMappingError,
    HeaderSyntaxError,
    MissingDelimiterError,
    MissingFieldError,
    UnterminatedHeaderError,
)
from .models import MISSING, TYPED_FIELDS, SkillProperties, value_kind
from .profiles import STANDARD_PROFILE, ValidationProfile

logger = logging.getLogger(__name__)

DELIMITER = "---"

# Document line of the first header line (the opening delimiter is line 1)
HEADER_FIRST_LINE = 2


@dataclass
class DocumentParts:
    """Raw split of a document; concatenating the parts gives the input back."""

    opening: str
    header: str
    closing: str
    body: str

    def render(self) -> str:
        return self.opening + self.header + self.closing + self.body


@dataclass
class Frontmatter:
    """
    A parsed header that has not been checked for required fields.

    Attributes:
        opening: Opening delimiter line, with its line ending.
        closing: Closing delimiter line, with its line ending (if any).
        blocks: Structure-preserving block list of the header.
        data: Header mapping as loaded by PyYAML.
        body: Text after the closing delimiter line.
    """

    opening: str
    closing: str
    blocks: HeaderBlocks
    data: Dict[Any, Any]
    body: str

    @property
    def header(self) -> str:
        return self.blocks.render()

    def get(self, key: str) -> Any:
        """Loaded value for ``key``, or ``MISSING``."""
        return self.data.get(key, MISSING)

    def render(self, header: Optional[str] = None) -> str:
        """Reassemble the document, optionally with replacement header text."""
        if header is None:
            header = self.header
        return self.opening + header + self.closing + self.body


@dataclass
class SkillDocument:
    """A fully parsed document with typed properties."""

    frontmatter: Frontmatter
    properties: SkillProperties
    profile: ValidationProfile = STANDARD_PROFILE

    @property
    def blocks(self) -> HeaderBlocks:
        return self.frontmatter.blocks

    @property
    def body(self) -> str:
        return self.frontmatter.body


def split_document(text: str) -> DocumentParts:
    """
    Locate the header delimiters.

    The opening line must be exactly ``---`` (trailing whitespace ignored).
    The closing delimiter is the next such line that is not part of a
    multi-line scalar value.

    Raises:
        MissingDelimiterError: If the first line is not ``---``.
        UnterminatedHeaderError: If no closing delimiter exists.
    """
    lines = split_lines(text)
    if not lines or line_content(lines[0]).rstrip() != DELIMITER:
        raise MissingDelimiterError()

    tracker = ScalarTracker()
    for index in range(1, len(lines)):
        content = line_content(lines[index])
        inside_scalar = tracker.feed(content)
        if not inside_scalar and content.rstrip() == DELIMITER:
            return DocumentParts(
                opening=lines[0],
                header="".join(lines[1:index]),
                closing=lines[index],
                body="".join(lines[index + 1:]),
            )

    raise UnterminatedHeaderError()


def load_header(header: str) -> Dict[Any, Any]:
    """
    Load header YAML into a mapping.

    An empty header loads as an empty mapping.

    Raises:
        HeaderSyntaxError: With document line/column when YAML is invalid.
        HeaderNotMappingError: When the root is a list or scalar.
    """
    try:
        data = yaml.safe_load(header)
    except yaml.MarkedYAMLError as e:
        mark = e.problem_mark or e.context_mark
        problem = e.problem or e.context or "syntax error"
        if mark is None:
            raise HeaderSyntaxError(problem) from e
        raise HeaderSyntaxError(
            problem, line=mark.line + HEADER_FIRST_LINE, column=mark.column + 1
        ) from e
    except yaml.YAMLError as e:
        raise HeaderSyntaxError(str(e)) from e
    except CONSTRUCTOR_ERRORS as e:
        raise HeaderSyntaxError(f"invalid tagged value: {e}") from e
    except RecursionError as e:
        raise HeaderSyntaxError("header nesting is too deep") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise HeaderNotMappingError(value_kind(data).value)
    return data


def parse_frontmatter(text: str) -> Frontmatter:
    """
    Parse the header and body without checking required fields.

    Raises:
        ParseError: Any of the delimiter, syntax or mapping failures.
    """
    parts = split_document(text)
    data = load_header(parts.header)
    blocks = build_blocks(parts.header, data, first_line=HEADER_FIRST_LINE)
    logger.debug(
        "Parsed header with %d keys and %d blocks", len(data), len(blocks)
    )
    return Frontmatter(
        opening=parts.opening,
        closing=parts.closing,
        blocks=blocks,
        data=data,
        body=parts.body,
    )


def _required_string(data: Mapping[Any, Any], field_name: str) -> str:
    value = data.get(field_name, MISSING)
    if value is MISSING:
        raise MissingFieldError(field_name)
    if not isinstance(value, str):
        raise FieldTypeError(field_name, value_kind(value).value)
    return value


def project_properties(
    data: Mapping[Any, Any],
    profile: ValidationProfile = STANDARD_PROFILE,
) -> SkillProperties:
    """
    Project a header mapping into typed properties.

    Keys known to ``profile`` without a typed field go to ``extensions``;
    every other key goes to ``metadata``, seeded from the header's own
    ``metadata`` mapping. A ``metadata`` value that is not a mapping, or
    that uses a typed field name as a key, is kept as ``metadata["metadata"]``.
    Optional typed fields holding a non-string value are left out; the
    validator reports them.

    Raises:
        MissingFieldError: If ``name`` or ``description`` is absent.
        FieldTypeError: If ``name`` or ``description`` is not a string.
    """
    name = _required_string(data, "name")
    description = _required_string(data, "description")

    optional: Dict[str, Optional[str]] = {}
    for field_name in TYPED_FIELDS[2:]:
        value = data.get(field_name)
        if isinstance(value, str):
            optional[field_name] = value

    extensions: Dict[str, Any] = {}
    metadata: Dict[str, Any] = {}

    if "metadata" in data:
        seed = data["metadata"]
        if isinstance(seed, dict) and not any(str(k) in TYPED_FIELDS for k in seed):
            metadata.update({str(k): v for k, v in seed.items()})
        else:
            # Typed field names must not become metadata keys
            metadata["metadata"] = seed

    for key, value in data.items():
        key_text = str(key)
        if key_text in TYPED_FIELDS or key_text == "metadata":
            continue
        if profile.is_known(key_text):
            extensions[key_text] = value
        else:
            metadata.setdefault(key_text, value)

    return SkillProperties.model_validate({
        "name": name,
        "description": description,
        **optional,
        "extensions": extensions or None,
        "metadata": metadata or None,
    })


def parse_document(
    text: str,
    profile: ValidationProfile = STANDARD_PROFILE,
) -> SkillDocument:
    """
    Parse a document into typed properties, block list and body.

    Raises:
        ParseError: For malformed input; never for rule violations.
    """
    frontmatter = parse_frontmatter(text)
    properties = project_properties(frontmatter.data, profile)
    return SkillDocument(frontmatter=frontmatter, properties=properties, profile=profile)
