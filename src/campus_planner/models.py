from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

from campus_planner.patterns import DATE_RE

PRIORITIES = ("High", "Medium", "Low")
STATUSES = ("Todo", "Completed")
TIME_UNITS = ("minutes", "hours")

DEFAULT_PRIORITY = "Medium"
DEFAULT_STATUS = "Todo"
COMPLETED = "Completed"

REQUIRED_FIELDS = ("id", "title", "dueDate", "duration", "tag")


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def check_due_date(value: Any) -> str:
    text = str(value).strip()
    if not DATE_RE.fullmatch(text):
        raise ValueError(f"dueDate must be YYYY-MM-DD: {value!r}")
    # raises ValueError for dates such as Feb 30
    date.fromisoformat(text)
    return text


def generate_id(prefix: str = "task") -> str:
    stamp = int(time.time() * 1000)
    return f"{prefix}_{stamp}_{random.randint(0, 9999)}"


@dataclass(slots=True)
class Task:
    id: str
    title: str
    due_date: str
    duration: int
    tag: str
    priority: str = DEFAULT_PRIORITY
    status: str = DEFAULT_STATUS
    completed: bool = False
    location: str = ""
    created_at: str = field(default_factory=utc_now)
    updated_at: str = field(default_factory=utc_now)
    completed_at: str | None = None

    def __post_init__(self) -> None:
        if not self.priority:
            self.priority = DEFAULT_PRIORITY
        if not self.status:
            self.status = COMPLETED if self.completed else DEFAULT_STATUS
        if self.location is None:
            self.location = ""
        self.completed = self.status == COMPLETED

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "dueDate": self.due_date,
            "duration": self.duration,
            "tag": self.tag,
            "priority": self.priority,
            "status": self.status,
            "completed": self.completed,
            "location": self.location,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "completedAt": self.completed_at,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Task":
        missing = [name for name in REQUIRED_FIELDS if name not in raw]
        if missing:
            raise ValueError(f"task missing required field: {missing[0]}")

        status = raw.get("status")
        if not status:
            status = COMPLETED if raw.get("completed") else DEFAULT_STATUS

        now = utc_now()
        return cls(
            id=str(raw["id"]),
            title=str(raw["title"]),
            due_date=check_due_date(raw["dueDate"]),
            duration=int(str(raw["duration"]).strip()),
            tag=str(raw["tag"]),
            priority=str(raw.get("priority") or DEFAULT_PRIORITY),
            status=str(status),
            location=str(raw.get("location") or ""),
            created_at=str(raw.get("createdAt") or now),
            updated_at=str(raw.get("updatedAt") or now),
            completed_at=raw.get("completedAt"),
        )


@dataclass(slots=True)
class Settings:
    time_unit: str = "minutes"
    weekly_target: float = 40
    theme: str = "light"

    def to_dict(self) -> dict[str, Any]:
        return {
            "timeUnit": self.time_unit,
            "weeklyTarget": self.weekly_target,
            "theme": self.theme,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Settings":
        defaults = cls()
        time_unit = str(raw.get("timeUnit", defaults.time_unit))
        if time_unit not in TIME_UNITS:
            time_unit = defaults.time_unit

        try:
            weekly_target = float(raw.get("weeklyTarget", defaults.weekly_target))
        except (TypeError, ValueError):
            weekly_target = defaults.weekly_target
        if weekly_target <= 0:
            weekly_target = defaults.weekly_target

        return cls(
            time_unit=time_unit,
            weekly_target=weekly_target,
            theme=str(raw.get("theme", defaults.theme)),
        )
