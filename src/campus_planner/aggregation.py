from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Iterable

from campus_planner.models import Task

WARNING_RATIO = 80.0


@dataclass(slots=True)
class DaySummary:
    day: date
    tasks: list[Task] = field(default_factory=list)

    @property
    def minutes(self) -> int:
        return total_duration(self.tasks)

    @property
    def hours(self) -> float:
        return round(self.minutes / 60, 1)


@dataclass(frozen=True, slots=True)
class TimeStatus:
    total_hours: float
    target: float
    percentage: float
    remaining: float
    level: str
    bar_level: str | None


def parse_due(task: Task) -> date:
    return date.fromisoformat(task.due_date)


def active_tasks(tasks: Iterable[Task]) -> list[Task]:
    return [task for task in tasks if not task.completed]


def completed_tasks(tasks: Iterable[Task]) -> list[Task]:
    return [task for task in tasks if task.completed is True]


def group_by_tag(tasks: Iterable[Task]) -> dict[str, list[Task]]:
    grouped: dict[str, list[Task]] = {}
    for task in tasks:
        grouped.setdefault(task.tag, []).append(task)
    return grouped


def count_by_tag(tasks: Iterable[Task]) -> dict[str, int]:
    return dict(Counter(task.tag for task in tasks))


def total_duration(tasks: Iterable[Task]) -> int:
    # int() raises ValueError for a non-numeric stored duration
    return sum(int(task.duration) for task in tasks)


def tasks_due_in_days(tasks: Iterable[Task], days: int = 7, today: date | None = None) -> list[Task]:
    start = today or date.today()
    end = start + timedelta(days=days)
    return [task for task in tasks if not task.completed and start <= parse_due(task) <= end]


def tasks_by_date_range(tasks: Iterable[Task], start: date, end: date) -> list[Task]:
    return [task for task in tasks if start <= parse_due(task) <= end]


def tasks_by_tag(tasks: Iterable[Task], tag: str) -> list[Task]:
    return [task for task in tasks if task.tag == tag]


def tasks_by_status(tasks: Iterable[Task], status: str) -> list[Task]:
    return [task for task in tasks if task.status == status]


def completion_rate(tasks: Iterable[Task]) -> float:
    task_list = list(tasks)
    if not task_list:
        return 0.0
    done = len(completed_tasks(task_list))
    return round((done / len(task_list)) * 100, 2)


def top_tags(tasks: Iterable[Task], limit: int = 5) -> list[tuple[str, int]]:
    return Counter(task.tag for task in tasks).most_common(limit)


def duration_by_tag(tasks: Iterable[Task]) -> list[tuple[str, int]]:
    """Minutes of active work per tag, largest first."""
    totals: dict[str, int] = {}
    for task in active_tasks(tasks):
        totals[task.tag] = totals.get(task.tag, 0) + int(task.duration)
    return sorted(totals.items(), key=lambda item: item[1], reverse=True)


def weekly_timeline(tasks: Iterable[Task], today: date | None = None, days: int = 7) -> list[DaySummary]:
    start = today or date.today()
    summaries: dict[date, DaySummary] = {}
    for offset in range(days):
        day = start + timedelta(days=offset)
        summaries[day] = DaySummary(day=day)

    for task in tasks_due_in_days(tasks, days=days, today=start):
        summary = summaries.get(parse_due(task))
        if summary is not None:
            summary.tasks.append(task)
    return list(summaries.values())


def time_status(tasks: Iterable[Task], weekly_target: float) -> TimeStatus:
    target = weekly_target or 40
    total_hours = total_duration(active_tasks(tasks)) / 60
    percentage = (total_hours / target) * 100
    remaining = target - total_hours

    if remaining > 0:
        level = "success"
    elif remaining == 0:
        level = "warning"
    else:
        level = "danger"

    bar_level = None
    if percentage >= 100:
        bar_level = "danger"
    elif percentage >= WARNING_RATIO:
        bar_level = "warning"

    return TimeStatus(
        total_hours=round(total_hours, 2),
        target=target,
        percentage=round(percentage, 2),
        remaining=round(remaining, 2),
        level=level,
        bar_level=bar_level,
    )


def dashboard_summary(tasks: Iterable[Task], today: date | None = None) -> dict[str, Any]:
    task_list = list(tasks)
    active = active_tasks(task_list)
    return {
        "active": len(active),
        "due_this_week": len(tasks_due_in_days(task_list, days=7, today=today)),
        "total_hours": round(total_duration(active) / 60, 1),
        "completed": len(completed_tasks(task_list)),
    }
