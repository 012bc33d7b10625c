"""
Structure-preserving model of a document header.

The header is split into blocks: one ``KeyBlock`` per top-level key (the
key line plus all continuation lines) and ``CommentBlock``s for comment and
blank lines that are not attached to a key. Each header line belongs to
exactly one block, so rendering an untouched block list reproduces the
header byte-for-byte.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Mapping, Optional, Tuple, Union

import yaml

from .models import MISSING


# A top-level key: quoted, or a plain scalar that does not start with a
# YAML indicator character. The colon must be followed by whitespace or EOL.
KEY_LINE_PATTERN = re.compile(
    r"""^(?P<key>"(?:[^"\\]|\\.)*"|'(?:[^']|'')*'|[^\s#'"\[\]{},&*!|>%@`?:-](?:[^:#\r\n]|:(?!\s|$))*?)[ \t]*:(?=\s|$)"""
)

# Value that opens a block scalar: ``|``, ``>-``, ``|2+`` ... with an
# optional trailing comment
BLOCK_SCALAR_PATTERN = re.compile(r"^[|>][1-9+-]{0,2}(?:\s+#.*)?$")

# Anchors and tags that may precede a value
NODE_PROPERTIES_PATTERN = re.compile(r"^(?:[&!]\S*\s+)+")

SEQUENCE_ENTRY_PATTERN = re.compile(r"^(?:-(?:\s+|$))+")

# Raised by PyYAML constructors for explicitly tagged values (``!!int``,
# ``!!float abc``, ``!!timestamp 2020-99-99``) instead of a YAMLError
CONSTRUCTOR_ERRORS = (ValueError, TypeError, IndexError, OverflowError)


def split_lines(text: str) -> List[str]:
    """Split on ``\\n`` keeping line endings (unlike ``str.splitlines``)."""
    if not text:
        return []
    lines = text.split("\n")
    result = [line + "\n" for line in lines[:-1]]
    if lines[-1]:
        result.append(lines[-1])
    return result


def line_content(line: str) -> str:
    """Line text without its line ending."""
    return line.rstrip("\r\n")


def _indent(content: str) -> int:
    return len(content) - len(content.lstrip(" "))


def _closing_quote(text: str, quote: str) -> int:
    """Index of the quote closing a scalar in ``text``, or -1."""
    i = 0
    while i < len(text):
        char = text[i]
        if quote == '"' and char == "\\":
            i += 2
            continue
        if char == quote:
            if quote == "'" and text[i + 1:i + 2] == "'":
                i += 2
                continue
            return i
        i += 1
    return -1


def _value_part(content: str) -> str:
    """The value portion of a structural line (after key / sequence markers)."""
    rest = content.lstrip(" ")
    rest = SEQUENCE_ENTRY_PATTERN.sub("", rest)
    match = KEY_LINE_PATTERN.match(rest)
    if match:
        rest = rest[match.end():]
    rest = rest.strip()
    return NODE_PROPERTIES_PATTERN.sub("", rest)


class ScalarTracker:
    """
    Tracks multi-line scalars while scanning a header line by line.

    A line is *inside* a scalar when it continues a block scalar (``|`` or
    ``>``) or an unterminated quoted scalar. Such lines are content and are
    never interpreted as keys, comments or delimiters.
    """

    def __init__(self) -> None:
        self.block_indent: Optional[int] = None
        self.keep_trailing = False
        self.quote: Optional[str] = None

    @property
    def in_block_scalar(self) -> bool:
        return self.block_indent is not None

    def feed(self, content: str) -> bool:
        """Consume one line; return True if it lies inside a scalar."""
        if self.quote is not None:
            if _closing_quote(content, self.quote) >= 0:
                self.quote = None
            return True

        if self.block_indent is not None:
            if not content.strip() or _indent(content) > self.block_indent:
                return True
            self.block_indent = None
            self.keep_trailing = False

        value = _value_part(content)
        if BLOCK_SCALAR_PATTERN.match(value):
            self.block_indent = _indent(content)
            # ``|+`` and ``>+`` keep trailing blank lines as content
            self.keep_trailing = "+" in value.split()[0]
        elif value[:1] in ("'", '"'):
            if _closing_quote(value[1:], value[0]) < 0:
                self.quote = value[0]
        return False


def key_object(token: str) -> Any:
    """The mapping key a key token loads as (``"a"`` -> ``a``, ``1`` -> 1)."""
    try:
        loaded = yaml.safe_load(token)
    except (yaml.YAMLError, *CONSTRUCTOR_ERRORS):
        return token
    try:
        hash(loaded)
    except TypeError:
        return token
    return token if loaded is None else loaded


@dataclass
class CommentBlock:
    """Comment (and blank) lines not belonging to a key's value."""

    lines: List[str]
    start_line: int

    @property
    def text(self) -> str:
        return "".join(self.lines)

    @property
    def end_line(self) -> int:
        return self.start_line + len(self.lines) - 1

    @property
    def comments(self) -> List[str]:
        return [line_content(l) for l in self.lines if line_content(l).strip()]

    def render(self) -> str:
        return self.text


@dataclass
class KeyBlock:
    """A top-level key with its raw value text and attached comment."""

    key: str
    raw_key: str
    lines: List[str]
    start_line: int
    comment: Optional[CommentBlock] = None
    value: Any = MISSING
    value_start: int = 0

    @property
    def text(self) -> str:
        return "".join(self.lines)

    @property
    def end_line(self) -> int:
        return self.start_line + len(self.lines) - 1

    @property
    def value_text(self) -> str:
        """Raw, unparsed value text (everything after the key's colon)."""
        return self.text[self.value_start:]

    def render(self) -> str:
        prefix = self.comment.render() if self.comment is not None else ""
        return prefix + self.text


Block = Union[CommentBlock, KeyBlock]


@dataclass
class HeaderBlocks:
    """Ordered block list for a header."""

    blocks: List[Block] = field(default_factory=list)

    def render(self) -> str:
        return "".join(block.render() for block in self.blocks)

    def key_blocks(self) -> List[KeyBlock]:
        return [b for b in self.blocks if isinstance(b, KeyBlock)]

    def keys(self) -> List[str]:
        return [b.key for b in self.key_blocks()]

    def get(self, key: str) -> Optional[KeyBlock]:
        """First block for ``key`` (duplicate keys keep source order)."""
        for block in self.key_blocks():
            if block.key == key:
                return block
        return None

    @property
    def header_comment(self) -> Optional[CommentBlock]:
        """Comment lines before the first key."""
        if self.blocks and isinstance(self.blocks[0], CommentBlock):
            return self.blocks[0]
        return None

    @property
    def trailing_comment(self) -> Optional[CommentBlock]:
        """Comment lines after the last key."""
        if self.key_blocks() and isinstance(self.blocks[-1], CommentBlock):
            return self.blocks[-1]
        return None

    def value_offsets(self) -> Iterator[Tuple[KeyBlock, int]]:
        """Yield each key block with the header offset of its value text."""
        offset = 0
        for block in self.blocks:
            if isinstance(block, KeyBlock):
                if block.comment is not None:
                    offset += len(block.comment.text)
                yield block, offset + block.value_start
                offset += len(block.text)
            else:
                offset += len(block.text)

    def __len__(self) -> int:
        return len(self.blocks)

    def __iter__(self) -> Iterator[Block]:
        return iter(self.blocks)


def build_blocks(
    header: str,
    data: Optional[Mapping[Any, Any]] = None,
    first_line: int = 2,
) -> HeaderBlocks:
    """
    Split header text into blocks.

    Comments before the first key become the header comment; any other run
    of comment lines attaches to the key that follows it. Blank lines that
    precede such a run stay with the previous key. A comment run followed by
    an indented continuation line belongs to the current key's value.

    Args:
        header: Header text between the delimiters.
        data: Loaded header mapping, used to attach parsed values.
        first_line: Document line number of the first header line.
    """
    blocks: List[Block] = []
    current: Optional[KeyBlock] = None
    pending: List[str] = []
    pending_start = first_line
    tracker = ScalarTracker()

    def flush_pending_into_current() -> None:
        nonlocal pending
        if current is not None:
            current.lines.extend(pending)
            pending = []

    for index, line in enumerate(split_lines(header)):
        lineno = first_line + index
        content = line_content(line)

        if tracker.feed(content):
            if current is not None:
                flush_pending_into_current()
                current.lines.append(line)
            else:
                if not pending:
                    pending_start = lineno
                pending.append(line)
            continue

        match = KEY_LINE_PATTERN.match(content)
        is_comment_or_blank = not content.strip() or content.startswith("#")

        if match is None or is_comment_or_blank:
            if is_comment_or_blank:
                if not pending:
                    pending_start = lineno
                pending.append(line)
            elif current is not None:
                flush_pending_into_current()
                current.lines.append(line)
            else:
                if not pending:
                    pending_start = lineno
                pending.append(line)
            continue

        attached: Optional[CommentBlock] = None
        if current is None:
            if pending:
                blocks.append(CommentBlock(pending, pending_start))
        else:
            first_comment = next(
                (i for i, l in enumerate(pending) if line_content(l).startswith("#")),
                None,
            )
            if first_comment is None:
                current.lines.extend(pending)
            else:
                current.lines.extend(pending[:first_comment])
                attached = CommentBlock(
                    pending[first_comment:], pending_start + first_comment
                )
            blocks.append(current)
        pending = []

        raw_key = match.group("key")
        loaded_key = key_object(raw_key)
        key = loaded_key if isinstance(loaded_key, str) else raw_key
        value = MISSING
        if data is not None and loaded_key in data:
            value = data[loaded_key]
        current = KeyBlock(
            key=key,
            raw_key=raw_key,
            lines=[line],
            start_line=lineno,
            comment=attached,
            value=value,
            value_start=match.end(),
        )

    if current is not None:
        blocks.append(current)
    if pending:
        blocks.append(CommentBlock(pending, pending_start))

    return HeaderBlocks(blocks)
