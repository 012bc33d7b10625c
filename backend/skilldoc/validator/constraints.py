"""
Field constraint helpers.

Patterns and string transforms shared by the structural rules and their
fix suggestions. Patterns are compiled once at import and only read
afterwards.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Iterable, List, Optional


NAME_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")
INVALID_NAME_CHARS = re.compile(r"[^a-z0-9-]+")
CONSECUTIVE_HYPHENS = re.compile(r"-{2,}")
TAG_PATTERN = re.compile(r"<[a-zA-Z/][^>]*>")


def normalize_name(name: str) -> str:
    """Apply Unicode NFKC normalization."""
    return unicodedata.normalize("NFKC", name)


def matches_name_pattern(name: str) -> bool:
    return bool(NAME_PATTERN.match(name))


def invalid_characters(name: str) -> List[str]:
    """Distinct characters outside ``[a-z0-9-]``, in order of appearance."""
    seen: List[str] = []
    for char in name:
        if not ("a" <= char <= "z" or "0" <= char <= "9" or char == "-"):
            if char not in seen:
                seen.append(char)
    return seen


def collapse_hyphens(name: str) -> str:
    return CONSECUTIVE_HYPHENS.sub("-", name)


def suggest_name(name: str) -> str:
    """
    Closest valid name: NFKC, lowercase, invalid runs replaced by hyphens,
    hyphens collapsed and stripped from both ends.
    """
    candidate = normalize_name(name).lower()
    candidate = INVALID_NAME_CHARS.sub("-", candidate)
    return collapse_hyphens(candidate).strip("-")


def truncate_name(name: str, max_length: int) -> str:
    """Cut ``name`` to ``max_length``, backing up to a hyphen boundary."""
    if len(name) <= max_length:
        return name
    cut = name[:max_length]
    if name[max_length] != "-" and "-" in cut:
        cut = cut[:cut.rindex("-")]
    return cut.rstrip("-")


def find_tags(text: str) -> List[str]:
    """Tag-like substrings (``<b>``, ``</script>``) in order of appearance."""
    return TAG_PATTERN.findall(text)


def strip_tags(text: str) -> str:
    return TAG_PATTERN.sub("", text)


def find_reserved_word(name: str, reserved_words: Iterable[str]) -> Optional[str]:
    """First reserved word contained in ``name`` (case-insensitive)."""
    lowered = name.lower()
    for word in reserved_words:
        if word and word in lowered:
            return word
    return None


def count_lines(text: str) -> int:
    return len(text.splitlines())
