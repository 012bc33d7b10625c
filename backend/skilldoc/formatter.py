"""
Canonical formatter.

Rewrites a document into its canonical layout: LF line endings, header keys
in canonical order with their comments, no stray whitespace and a tidy
body. Formatting is idempotent; formatting canonical output changes nothing.
"""

from __future__ import annotations

import difflib
import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

import yaml

from .blocks import (
    CONSTRUCTOR_ERRORS,
    CommentBlock,
    HeaderBlocks,
    KeyBlock,
    ScalarTracker,
    line_content,
)
from .config import DEFAULT_KEY_ORDER
from .parser import DELIMITER, parse_frontmatter

logger = logging.getLogger(__name__)

MAX_BODY_BLANK_LINES = 2


@dataclass
class FormatResult:
    """Original and canonical text of one document."""

    original: str
    content: str

    @property
    def changed(self) -> bool:
        return self.original != self.content

    def diff(self, label: str = "SKILL.md") -> str:
        """Unified diff from the original to the canonical text."""
        return diff_content(self.original, self.content, label)


def normalize_line_endings(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _clean_comment(lines: Sequence[str]) -> List[str]:
    """Trim whitespace, drop outer blank lines and collapse inner blank runs."""
    result: List[str] = []
    for line in lines:
        content = line_content(line).rstrip()
        if not content and (not result or not result[-1]):
            continue
        result.append(content)
    while result and not result[-1]:
        result.pop()
    return result


def _clean_key(block: KeyBlock) -> List[str]:
    """
    Trim a key block. Block scalar content lines are kept verbatim, and
    trailing blank lines survive when the open block scalar keeps them.
    """
    tracker = ScalarTracker()
    result: List[str] = []
    for line in block.lines:
        content = line_content(line)
        if tracker.feed(content) and tracker.in_block_scalar:
            result.append(content)
        else:
            result.append(content.rstrip())
    if tracker.in_block_scalar and tracker.keep_trailing:
        return result
    while len(result) > 1 and not result[-1]:
        result.pop()
    return result


def _emit(
    header_comment: Optional[CommentBlock],
    key_blocks: Sequence[KeyBlock],
    trailing_comment: Optional[CommentBlock],
) -> str:
    lines: List[str] = []
    if header_comment is not None:
        lines.extend(_clean_comment(header_comment.lines))
    for block in key_blocks:
        if block.comment is not None:
            lines.extend(_clean_comment(block.comment.lines))
        lines.extend(_clean_key(block))
    if trailing_comment is not None:
        lines.extend(_clean_comment(trailing_comment.lines))
    return "".join(line + "\n" for line in lines)


_UNLOADABLE: Any = object()


def _load(header: str) -> Any:
    try:
        return yaml.safe_load(header)
    except (yaml.YAMLError, RecursionError, *CONSTRUCTOR_ERRORS):
        return _UNLOADABLE


def _order(key_blocks: List[KeyBlock], key_order: Sequence[str]) -> List[KeyBlock]:
    """Stable sort: canonical keys first, the rest in original order."""
    rank = {key: index for index, key in enumerate(key_order)}
    return sorted(key_blocks, key=lambda b: rank.get(b.key, len(rank)))


def format_header(blocks: HeaderBlocks, key_order: Sequence[str] = DEFAULT_KEY_ORDER) -> str:
    """
    Render the canonical form of a header block list.

    Falls back to the original key order when reordering would change the
    loaded data (anchors defined after their aliases, duplicate keys), and
    to the untouched header when cleaning alone would change it.
    """
    raw = blocks.render()
    header_comment = blocks.header_comment
    key_blocks = blocks.key_blocks()
    trailing_comment = blocks.trailing_comment
    # With no key blocks every line is in the header comment
    original_order = _emit(header_comment, key_blocks, trailing_comment)

    original_data = _load(raw)
    if original_data is _UNLOADABLE or _load(original_order) != original_data:
        logger.debug("Cleaned header loads differently; leaving header as is")
        return raw
    if not key_blocks:
        return original_order

    ordered = _order(key_blocks, key_order)
    if [b.key for b in ordered] == [b.key for b in key_blocks]:
        return original_order

    reordered = _emit(header_comment, ordered, trailing_comment)
    if _load(reordered) != original_data:
        logger.debug("Reordering changes header data; keeping original key order")
        return original_order
    return reordered


def format_body(body: str) -> str:
    """Trim trailing whitespace and collapse blank runs; empty stays empty."""
    if not body.strip():
        return ""
    result: List[str] = []
    blank_run = 0
    for line in body.split("\n"):
        content = line.rstrip()
        if content:
            blank_run = 0
        else:
            blank_run += 1
            if blank_run > MAX_BODY_BLANK_LINES:
                continue
        result.append(content)
    while result and not result[-1]:
        result.pop()
    return "\n".join(result) + "\n"


def format_content(text: str, key_order: Optional[Sequence[str]] = None) -> str:
    """
    Format a document into canonical form.

    Args:
        text: Complete document text (LF, CRLF or CR line endings).
        key_order: Canonical key order; defaults to ``DEFAULT_KEY_ORDER``.

    Returns:
        The canonical text, with LF line endings.

    Raises:
        ParseError: If the document cannot be parsed.
    """
    frontmatter = parse_frontmatter(normalize_line_endings(text))
    header = format_header(frontmatter.blocks, key_order or DEFAULT_KEY_ORDER)
    body = format_body(frontmatter.body)
    return f"{DELIMITER}\n{header}{DELIMITER}\n{body}"


def format_document(text: str, key_order: Optional[Sequence[str]] = None) -> FormatResult:
    """Format a document and keep the original for comparison."""
    return FormatResult(original=text, content=format_content(text, key_order))


def diff_content(original: str, formatted: str, label: str = "SKILL.md") -> str:
    """
    Render a unified diff between two versions of a document.

    Lines are compared without their line endings, so a change that only
    normalizes line endings produces an empty diff.
    """
    diff = difflib.unified_diff(
        normalize_line_endings(original).split("\n"),
        formatted.split("\n"),
        fromfile=f"a/{label}",
        tofile=f"b/{label}",
        lineterm="",
    )
    lines = list(diff)
    if not lines:
        return ""
    return "\n".join(lines) + "\n"
