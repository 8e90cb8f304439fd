from __future__ import annotations

from collections import Counter
from datetime import date

from campus_planner.aggregation import (
    completed_tasks,
    completion_rate,
    count_by_tag,
    dashboard_summary,
    duration_by_tag,
    group_by_tag,
    tasks_by_date_range,
    tasks_by_status,
    tasks_by_tag,
    tasks_due_in_days,
    time_status,
    top_tags,
    total_duration,
    weekly_timeline,
)
from campus_planner.models import Task

TODAY = date(2026, 3, 10)


def make_task(task_id: str, due: str, duration: int = 60, tag: str = "Academic", done: bool = False) -> Task:
    return Task(
        id=task_id,
        title=f"Task number {task_id}",
        due_date=due,
        duration=duration,
        tag=tag,
        status="Completed" if done else "Todo",
    )


def sample_tasks() -> list[Task]:
    return [
        make_task("1", "2026-03-10", 30, "Academic"),
        make_task("2", "2026-03-12", 90, "Health"),
        make_task("3", "2026-03-17", 45, "Academic"),
        make_task("4", "2026-03-18", 60, "Social"),
        make_task("5", "2026-03-11", 120, "Health", done=True),
        make_task("6", "2026-03-09", 15, "Academic"),
    ]


def test_due_in_days_window_is_inclusive() -> None:
    due = tasks_due_in_days(sample_tasks(), days=7, today=TODAY)
    assert [task.id for task in due] == ["1", "2", "3"]


def test_due_in_days_default_window() -> None:
    assert len(tasks_due_in_days(sample_tasks(), today=TODAY)) == 3
    assert [task.id for task in tasks_due_in_days(sample_tasks(), days=0, today=TODAY)] == ["1"]


def test_group_by_tag_keeps_every_task_once() -> None:
    tasks = sample_tasks()
    grouped = group_by_tag(tasks)

    assert list(grouped) == ["Academic", "Health", "Social"]
    assert [task.id for task in grouped["Academic"]] == ["1", "3", "6"]

    flattened = [task.id for group in grouped.values() for task in group]
    assert Counter(flattened) == Counter(task.id for task in tasks)


def test_count_by_tag_and_top_tags() -> None:
    assert count_by_tag(sample_tasks()) == {"Academic": 3, "Health": 2, "Social": 1}
    assert top_tags(sample_tasks(), limit=2) == [("Academic", 3), ("Health", 2)]
    assert count_by_tag([]) == {}


def test_total_duration() -> None:
    assert total_duration(sample_tasks()) == 360
    assert total_duration([]) == 0


def test_total_duration_rejects_non_numeric_values() -> None:
    broken = make_task("x", "2026-03-10")
    broken.duration = "soon"  # type: ignore[assignment]
    try:
        total_duration([broken])
    except ValueError:
        pass
    else:
        raise AssertionError("ValueError expected")


def test_completed_and_status_filters() -> None:
    tasks = sample_tasks()
    assert [task.id for task in completed_tasks(tasks)] == ["5"]
    assert [task.id for task in tasks_by_status(tasks, "Completed")] == ["5"]
    assert len(tasks_by_status(tasks, "Todo")) == 5
    assert [task.id for task in tasks_by_tag(tasks, "Health")] == ["2", "5"]
    assert tasks_by_tag(tasks, "health") == []


def test_date_range_is_inclusive() -> None:
    tasks = tasks_by_date_range(sample_tasks(), date(2026, 3, 10), date(2026, 3, 12))
    assert [task.id for task in tasks] == ["1", "2", "5"]


def test_completion_rate() -> None:
    assert completion_rate(sample_tasks()) == 16.67
    assert completion_rate([]) == 0.0


def test_duration_by_tag_counts_active_only() -> None:
    assert duration_by_tag(sample_tasks()) == [("Academic", 90), ("Health", 90), ("Social", 60)]


def test_weekly_timeline() -> None:
    days = weekly_timeline(sample_tasks(), today=TODAY)

    assert len(days) == 7
    assert days[0].day == TODAY
    assert [task.id for task in days[0].tasks] == ["1"]
    assert days[2].minutes == 90
    assert days[2].hours == 1.5
    # completed task due on the 11th is not shown
    assert days[1].tasks == []


def test_time_status_levels() -> None:
    under = time_status([make_task("1", "2026-03-10", 30)], weekly_target=1)
    assert under.level == "success"
    assert under.percentage == 50.0
    assert under.bar_level is None

    near = time_status([make_task("1", "2026-03-10", 51)], weekly_target=1)
    assert near.level == "success"
    assert near.bar_level == "warning"

    exact = time_status([make_task("1", "2026-03-10", 90)], weekly_target=1.5)
    assert exact.level == "warning"
    assert exact.bar_level == "danger"

    over = time_status([make_task("1", "2026-03-10", 180)], weekly_target=2)
    assert over.level == "danger"
    assert over.remaining == -1.0


def test_time_status_ignores_completed_tasks() -> None:
    status = time_status([make_task("1", "2026-03-10", 600, done=True)], weekly_target=40)
    assert status.total_hours == 0
    assert status.remaining == 40


def test_dashboard_summary() -> None:
    summary = dashboard_summary(sample_tasks(), today=TODAY)
    assert summary == {"active": 5, "due_this_week": 3, "total_hours": 4.0, "completed": 1}
