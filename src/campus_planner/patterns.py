"""Named grammars shared by the field validators and the search engine.

Shape patterns are applied with ``fullmatch``; ``DUPLICATE_WORD`` and
``TIME_TOKEN`` are searched anywhere in the text.
"""

from __future__ import annotations

import re

TITLE_RE = re.compile(r"\S+(?:\s\S+)*")
DURATION_RE = re.compile(r"[1-9][0-9]*")
DATE_RE = re.compile(r"[0-9]{4}-(0[1-9]|1[0-2])-(0[1-9]|[12][0-9]|3[01])")
TAG_RE = re.compile(r"[A-Za-z]+(?:[ -][A-Za-z]+)*")
DUPLICATE_WORD_RE = re.compile(r"\b(\w+)\s+\1\b", re.IGNORECASE)
TAG_FILTER_RE = re.compile(r"@tag:(\w+)", re.IGNORECASE)
TIME_TOKEN_RE = re.compile(r"\b[0-9]{2}:[0-9]{2}\b")

PATTERNS: dict[str, re.Pattern[str]] = {
    "TITLE": TITLE_RE,
    "DURATION": DURATION_RE,
    "DATE": DATE_RE,
    "TAG": TAG_RE,
    "DUPLICATE_WORD": DUPLICATE_WORD_RE,
    "TAG_FILTER": TAG_FILTER_RE,
    "TIME_TOKEN": TIME_TOKEN_RE,
}


def has_time_token(text: object) -> bool:
    return TIME_TOKEN_RE.search(str(text)) is not None


def has_duplicate_words(text: object) -> bool:
    return DUPLICATE_WORD_RE.search(str(text)) is not None


def parse_tag_filter(text: str) -> str | None:
    """Return the tag named by an ``@tag:<word>`` token, or None."""
    match = TAG_FILTER_RE.fullmatch(text.strip())
    if match is None:
        return None
    return match.group(1)
