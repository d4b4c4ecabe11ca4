"""Forum content filter.

Matching is plain case-insensitive substring containment against a fixed term list.
There is no word-boundary or normalisation step, so clean words that embed a term
("classic" contains "ass", "hello" contains "hell") are flagged too. That limitation is
known and kept until the product decides otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

DEFAULT_TERMS: Tuple[str, ...] = (
    "damn",
    "hell",
    "crap",
    "stupid",
    "idiot",
    "moron",
    "hate",
    "kill",
    "die",
    "fuck",
    "shit",
    "bitch",
    "ass",
    "bastard",
    "piss",
    "bloody",
    "bugger",
)


@dataclass(frozen=True)
class ScanResult:
    flagged: bool
    matched_terms: List[str] = field(default_factory=list)


class ContentFilter:
    """Stateless scanner over an ordered term list."""

    def __init__(self, terms: Iterable[str] = DEFAULT_TERMS):
        self.terms: Tuple[str, ...] = tuple(t.lower() for t in terms if t)

    def scan(self, text: str) -> ScanResult:
        lowered = (text or "").lower()
        matched = [term for term in self.terms if term in lowered]
        return ScanResult(flagged=bool(matched), matched_terms=matched)


default_filter = ContentFilter()


def scan(text: str) -> ScanResult:
    """Scan `text` with the default term list."""
    return default_filter.scan(text)


def describe(matched_terms: Iterable[str]) -> str:
    """Render matched terms the way moderation messages quote them."""
    return ", ".join(matched_terms)


__all__ = ["DEFAULT_TERMS", "ScanResult", "ContentFilter", "default_filter", "scan", "describe"]
