from __future__ import annotations

from campus_planner.models import Settings, Task


def test_defaults_applied_at_construction() -> None:
    task = Task(id="1", title="Read notes", due_date="2026-03-12", duration=30, tag="Academic")
    assert task.priority == "Medium"
    assert task.status == "Todo"
    assert task.completed is False
    assert task.location == ""
    assert task.completed_at is None


def test_completed_mirrors_status() -> None:
    task = Task(id="1", title="Read notes", due_date="2026-03-12", duration=30, tag="Academic", status="Completed")
    assert task.completed is True

    legacy = Task.from_dict(
        {"id": "2", "title": "Old task", "dueDate": "2026-03-12", "duration": "45", "tag": "Academic", "completed": True}
    )
    assert legacy.status == "Completed"
    assert legacy.completed is True
    assert legacy.duration == 45


def test_from_dict_requires_fields() -> None:
    try:
        Task.from_dict({"id": "1", "title": "No tag", "dueDate": "2026-03-12", "duration": 30})
    except ValueError as exc:
        assert "tag" in str(exc)
    else:
        raise AssertionError("ValueError expected")


def test_settings_from_partial_dict() -> None:
    settings = Settings.from_dict({"timeUnit": "hours"})
    assert settings.time_unit == "hours"
    assert settings.weekly_target == 40
    assert settings.to_dict() == {"timeUnit": "hours", "weeklyTarget": 40, "theme": "light"}


def test_from_dict_checks_due_date() -> None:
    raw = {"id": "1", "title": "Read notes", "dueDate": " 2026-03-12 ", "duration": 30, "tag": "Academic"}
    assert Task.from_dict(raw).due_date == "2026-03-12"

    for value in ["2026/03/10", "2026-02-30", "soon"]:
        try:
            Task.from_dict({**raw, "dueDate": value})
        except ValueError:
            pass
        else:
            raise AssertionError(f"ValueError expected for {value}")
