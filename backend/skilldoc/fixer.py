"""
Auto-fixer.

Applies the concrete replacements carried by diagnostics as targeted edits
inside the header text. Only the value span of the diagnostic's field is
touched; every other byte of the document is preserved.

Replacements describe the loaded value, so each field's new value is worked
out on the loaded string first. The same edits are then tried on the raw
value text, which keeps quoting and trailing comments intact. When that raw
edit does not load back to the new value (a block scalar, a plain scalar
continued over several lines, or text that stops being valid YAML once a
tag is removed), the whole value is rewritten as a single quoted scalar.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml

from .blocks import CONSTRUCTOR_ERRORS, KeyBlock, line_content
from .diagnostics import Diagnostic
from .parser import Frontmatter, parse_frontmatter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FixAction:
    """A single text replacement within one field's value."""

    field: str
    old: str
    new: str


@dataclass
class FixResult:
    """Outcome of applying fixes to a document."""

    content: str
    applied: int = 0
    actions: List[FixAction] = field(default_factory=list)
    skipped: List[FixAction] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.actions)


@dataclass
class _Match:
    start: int
    end: int
    index: int
    action: FixAction


@dataclass
class _Edit:
    start: int
    end: int
    text: str


def fix_actions(diagnostics: Iterable[Diagnostic]) -> List[FixAction]:
    """List the actions the given diagnostics would request."""
    actions: List[FixAction] = []
    for diagnostic in diagnostics:
        if not diagnostic.is_fixable or diagnostic.field is None:
            continue
        for replacement in diagnostic.suggestion.replacements:
            actions.append(FixAction(diagnostic.field, replacement.old, replacement.new))
    return actions


def _find_all(
    text: str,
    requested: List[Tuple[int, FixAction]],
) -> Tuple[List[_Match], List[FixAction]]:
    """Locate each action in ``text``; repeated old text maps to successive occurrences."""
    matches: List[_Match] = []
    missing: List[FixAction] = []
    cursors: Dict[Tuple[int, str], int] = {}
    for index, action in requested:
        cursor = cursors.get((index, action.old), 0)
        position = text.find(action.old, cursor)
        if position < 0:
            missing.append(action)
            continue
        cursors[(index, action.old)] = position + len(action.old)
        matches.append(_Match(position, position + len(action.old), index, action))
    return matches, missing


def _splice(text: str, matches: List[_Match]) -> str:
    pieces: List[str] = []
    cursor = 0
    for match in matches:
        pieces.append(text[cursor:match.start])
        pieces.append(match.action.new)
        cursor = match.end
    pieces.append(text[cursor:])
    return "".join(pieces)


def _value_span(block: KeyBlock) -> Tuple[int, int]:
    """
    Offsets of the value inside ``block.text``.

    The span stops before the line ending of the last value line, so blank
    and comment lines trailing the value are never edited.
    """
    last = 0
    for index, line in enumerate(block.lines[1:], start=1):
        content = line_content(line)
        if content.strip() and not content.startswith("#"):
            last = index
    end = sum(len(line) for line in block.lines[:last])
    end += len(line_content(block.lines[last]))
    return block.value_start, end


def _scalar_text(value: str) -> str:
    """``value`` as a one-line YAML scalar, quoted when plain text would not load."""
    dumped = yaml.safe_dump(
        {"v": value},
        allow_unicode=True,
        default_style='"' if "\n" in value else None,
        width=float("inf"),
    )
    return dumped[dumped.index(":") + 1:].rstrip("\n")


def _loads_as(block: KeyBlock, start: int, end: int, value_text: str, expected: str) -> bool:
    """Whether ``block`` with its value span replaced loads as ``expected``."""
    text = block.text[:start] + value_text + block.text[end:]
    try:
        loaded = yaml.safe_load(text)
    except (yaml.YAMLError, RecursionError, *CONSTRUCTOR_ERRORS):
        return False
    return (
        isinstance(loaded, dict)
        and len(loaded) == 1
        and next(iter(loaded.values())) == expected
    )


def _select(
    value: str,
    requested: List[Tuple[int, FixAction]],
) -> Tuple[List[_Match], List[FixAction]]:
    """Locate actions in the loaded value and drop overlapping ones."""
    matches, skipped = _find_all(value, requested)
    matches.sort(key=lambda m: (m.start, m.end, m.index))

    chosen: List[_Match] = []
    last_end = -1
    for match in matches:
        if match.action.old == match.action.new:
            continue
        if match.start < last_end:
            logger.debug("Skipping overlapping fix for %s", match.action.field)
            skipped.append(match.action)
            continue
        chosen.append(match)
        last_end = match.end
    return chosen, skipped


def _rewrite_value(
    block: KeyBlock,
    value: str,
    chosen: List[_Match],
) -> Optional[_Edit]:
    """Build the replacement for ``block``'s value span, or None if none loads."""
    expected = _splice(value, chosen)
    start, end = _value_span(block)
    raw = block.text[start:end]

    requested = [(m.index, m.action) for m in chosen]
    raw_matches, missing = _find_all(raw, requested)
    raw_matches.sort(key=lambda m: m.start)
    overlapping = any(
        later.start < earlier.end for earlier, later in zip(raw_matches, raw_matches[1:])
    )
    if not missing and not overlapping:
        edited = _splice(raw, raw_matches)
        if _loads_as(block, start, end, edited, expected):
            return _Edit(start, end, edited)

    quoted = " " + _scalar_text(expected)
    if _loads_as(block, start, end, quoted, expected):
        logger.debug("Rewriting %s as a single scalar", block.key)
        return _Edit(start, end, quoted)
    return None


def apply_fixes(frontmatter: Frontmatter, diagnostics: Iterable[Diagnostic]) -> FixResult:
    """
    Apply every concrete replacement carried by ``diagnostics``.

    Within a field, edits are applied in order of their position in the
    value, and an edit overlapping one already accepted is skipped. Each
    edited field is checked to load as the intended string before it is
    written. Diagnostics without replacements are ignored.

    Args:
        frontmatter: Parsed document to edit.
        diagnostics: Diagnostics produced for that document.

    Returns:
        FixResult with the new document text and the number of diagnostics
        for which at least one edit was applied.
    """
    diagnostics = list(diagnostics)
    header = frontmatter.header

    located: Dict[str, Tuple[KeyBlock, int]] = {}
    for block, offset in frontmatter.blocks.value_offsets():
        located.setdefault(block.key, (block, offset - block.value_start))

    requested: Dict[str, List[Tuple[int, FixAction]]] = {}
    skipped: List[FixAction] = []
    for index, diagnostic in enumerate(diagnostics):
        for action in fix_actions([diagnostic]):
            value: Any = frontmatter.get(action.field)
            if action.field not in located or not action.old or not isinstance(value, str):
                skipped.append(action)
                continue
            requested.setdefault(action.field, []).append((index, action))

    edits: List[_Edit] = []
    accepted: List[_Match] = []
    for field_name, field_actions in requested.items():
        block, block_start = located[field_name]
        chosen, field_skipped = _select(frontmatter.get(field_name), field_actions)
        skipped.extend(field_skipped)
        if not chosen:
            continue
        edit = _rewrite_value(block, frontmatter.get(field_name), chosen)
        if edit is None:
            logger.warning("Fixes for %s do not produce a loadable value; skipped", field_name)
            skipped.extend(match.action for match in chosen)
            continue
        edits.append(_Edit(block_start + edit.start, block_start + edit.end, edit.text))
        accepted.extend(chosen)

    if not edits:
        return FixResult(content=frontmatter.render(), skipped=skipped)

    edits.sort(key=lambda e: e.start)
    pieces: List[str] = []
    cursor = 0
    for edit in edits:
        pieces.append(header[cursor:edit.start])
        pieces.append(edit.text)
        cursor = edit.end
    pieces.append(header[cursor:])

    applied = len({match.index for match in accepted})
    logger.info("Applied %d fix(es) in %d field(s)", applied, len(edits))

    return FixResult(
        content=frontmatter.render("".join(pieces)),
        applied=applied,
        actions=[match.action for match in accepted],
        skipped=skipped,
    )


def fix_content(text: str, diagnostics: Iterable[Diagnostic]) -> FixResult:
    """
    Parse ``text`` and apply fixes from ``diagnostics``.

    Raises:
        ParseError: If the text cannot be parsed.
    """
    return apply_fixes(parse_frontmatter(text), diagnostics)
