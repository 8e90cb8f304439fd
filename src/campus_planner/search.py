from __future__ import annotations

import html
import re
from collections.abc import Iterable
from dataclasses import dataclass

from campus_planner.models import DEFAULT_STATUS, Task
from campus_planner.patterns import parse_tag_filter


@dataclass(frozen=True, slots=True)
class SearchQuery:
    """A compiled user search.

    ``regex`` is None for a blank pattern (match everything) and for a
    ``@tag:`` filter. ``error`` is set when the pattern failed to compile.
    """

    pattern: str = ""
    regex: re.Pattern[str] | None = None
    tag: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def is_empty(self) -> bool:
        return self.regex is None and self.tag is None

    def matches(self, task: Task) -> bool:
        if self.error is not None:
            return False
        if self.tag is not None:
            return task.tag.lower() == self.tag.lower()
        if self.regex is None:
            return True
        return any(self.regex.search(value) for value in searchable_fields(task))


@dataclass(slots=True)
class SearchResult:
    query: SearchQuery
    tasks: list[Task] | None

    @property
    def error(self) -> str | None:
        return self.query.error


def searchable_fields(task: Task) -> tuple[str, ...]:
    return (
        task.title,
        task.tag,
        task.due_date,
        task.status or DEFAULT_STATUS,
        task.location or "",
    )


def compile_pattern(pattern: str | None, case_sensitive: bool = False) -> SearchQuery:
    text = (pattern or "").strip()
    if not text:
        return SearchQuery()

    tag = parse_tag_filter(text)
    if tag is not None:
        return SearchQuery(pattern=text, tag=tag)

    flags = 0 if case_sensitive else re.IGNORECASE
    try:
        regex = re.compile(text, flags)
    except re.error as exc:
        return SearchQuery(pattern=text, error=f"Invalid regex: {exc}")
    return SearchQuery(pattern=text, regex=regex)


def filter_tasks(tasks: Iterable[Task], query: SearchQuery) -> list[Task]:
    active = [task for task in tasks if not task.completed]
    if query.is_empty:
        return active
    return [task for task in active if query.matches(task)]


def search_tasks(tasks: Iterable[Task], pattern: str | None, case_sensitive: bool = False) -> SearchResult:
    query = compile_pattern(pattern, case_sensitive=case_sensitive)
    if not query.ok:
        return SearchResult(query=query, tasks=None)
    return SearchResult(query=query, tasks=filter_tasks(tasks, query))


def match_spans(text: str, regex: re.Pattern[str] | None) -> list[tuple[int, int]]:
    if regex is None or not text:
        return []
    return [match.span() for match in regex.finditer(text) if match.end() > match.start()]


def highlight_matches(text: str, regex: re.Pattern[str] | None, tag: str = "mark") -> str:
    """Escape ``text`` for HTML and wrap every match in ``<tag>``.

    Matching runs against the raw text and each segment is escaped on its
    own, so entities such as ``&amp;`` never produce extra matches.
    """
    if not text:
        return ""

    parts: list[str] = []
    cursor = 0
    for start, end in match_spans(text, regex):
        parts.append(html.escape(text[cursor:start]))
        parts.append(f"<{tag}>{html.escape(text[start:end])}</{tag}>")
        cursor = end
    parts.append(html.escape(text[cursor:]))
    return "".join(parts)
