from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from dateutil.relativedelta import relativedelta

from campus_planner.models import PRIORITIES
from campus_planner.patterns import DATE_RE, DURATION_RE, TAG_RE, TITLE_RE, has_duplicate_words

TITLE_MIN, TITLE_MAX = 3, 100
TAG_MIN, TAG_MAX = 3, 30
DURATION_MAX = 1440
SANITIZE_LIMIT = 200


@dataclass(frozen=True, slots=True)
class ValidationResult:
    valid: bool
    error: str = ""

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def fail(cls, error: str) -> "ValidationResult":
        return cls(valid=False, error=error)


@dataclass(frozen=True, slots=True)
class FieldError:
    field: str
    message: str


@dataclass(slots=True)
class TaskValidation:
    errors: list[FieldError] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def messages(self) -> dict[str, str]:
        return {error.field: error.message for error in self.errors}


def validate_title(title: Any) -> ValidationResult:
    if not title or not isinstance(title, str):
        return ValidationResult.fail("Title is required")

    trimmed = title.strip()
    if len(trimmed) < TITLE_MIN:
        return ValidationResult.fail(f"Title must be at least {TITLE_MIN} characters")
    if len(trimmed) > TITLE_MAX:
        return ValidationResult.fail(f"Title must not exceed {TITLE_MAX} characters")
    # length is checked on the trimmed value, the trim check on the raw one
    if title != trimmed:
        return ValidationResult.fail("Title cannot have leading or trailing spaces")
    if not TITLE_RE.fullmatch(title):
        return ValidationResult.fail("Title cannot contain consecutive spaces")
    if has_duplicate_words(title):
        return ValidationResult.fail("Title contains duplicate words")
    return ValidationResult.ok()


def validate_duration(duration: Any) -> ValidationResult:
    if duration is None or duration == "":
        return ValidationResult.fail("Duration is required")

    text = str(duration).strip()
    if isinstance(duration, bool) or not DURATION_RE.fullmatch(text):
        return ValidationResult.fail("Duration must be a positive number (e.g., 120)")

    minutes = int(text)
    if minutes <= 0:
        return ValidationResult.fail("Duration must be greater than 0")
    if minutes > DURATION_MAX:
        return ValidationResult.fail(f"Duration cannot exceed 24 hours ({DURATION_MAX} minutes)")
    return ValidationResult.ok()


def validate_due_date(due_date: Any, today: date | None = None) -> ValidationResult:
    if not due_date or not isinstance(due_date, str):
        return ValidationResult.fail("Due date is required")

    trimmed = due_date.strip()
    if not DATE_RE.fullmatch(trimmed):
        return ValidationResult.fail("Date must be in YYYY-MM-DD format")

    year, month, day = (int(part) for part in trimmed.split("-"))
    try:
        parsed = date(year, month, day)
    except ValueError:
        return ValidationResult.fail("Invalid date (e.g., Feb 30 does not exist)")

    today = today or date.today()
    if parsed < today - relativedelta(years=1):
        return ValidationResult.fail("Date cannot be more than 1 year in the past")
    if parsed > today + relativedelta(years=2):
        return ValidationResult.fail("Date cannot be more than 2 years in the future")
    return ValidationResult.ok()


def validate_tag(tag: Any) -> ValidationResult:
    if not tag or not isinstance(tag, str):
        return ValidationResult.fail("Tag is required")

    trimmed = tag.strip()
    if len(trimmed) < TAG_MIN:
        return ValidationResult.fail(f"Tag must be at least {TAG_MIN} characters")
    if len(trimmed) > TAG_MAX:
        return ValidationResult.fail(f"Tag must not exceed {TAG_MAX} characters")
    if not TAG_RE.fullmatch(trimmed):
        return ValidationResult.fail("Tag can only contain letters, spaces, or hyphens")
    return ValidationResult.ok()


def validate_priority(priority: Any) -> ValidationResult:
    if priority not in PRIORITIES:
        return ValidationResult.fail("Priority must be High, Medium, or Low")
    return ValidationResult.ok()


def validate_task(task: Mapping[str, Any], today: date | None = None) -> TaskValidation:
    """Run every field validator over a task-shaped mapping.

    Keys follow the stored JSON shape (``dueDate``). All failures are
    collected, in field order, so a form can show one message per field.
    Priority is only checked when a value is present.
    """
    checks = [
        ("title", validate_title(task.get("title"))),
        ("duration", validate_duration(task.get("duration"))),
        ("dueDate", validate_due_date(task.get("dueDate"), today=today)),
        ("tag", validate_tag(task.get("tag"))),
    ]
    if task.get("priority"):
        checks.append(("priority", validate_priority(task.get("priority"))))

    result = TaskValidation()
    for name, outcome in checks:
        if not outcome.valid:
            result.errors.append(FieldError(field=name, message=outcome.error))
    return result


def sanitize_input(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip().replace("<", "").replace(">", "")[:SANITIZE_LIMIT]


def minutes_to_hours(minutes: int) -> str:
    hours, mins = divmod(int(minutes), 60)
    if hours == 0:
        return f"{mins}min"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}min"


def hours_to_minutes(hours: float) -> int:
    return math.floor(hours * 60 + 0.5)


def format_duration(minutes: int, unit: str = "minutes") -> str:
    if unit == "hours":
        return minutes_to_hours(minutes)
    return f"{int(minutes)} min"
