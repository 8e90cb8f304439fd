from __future__ import annotations

import argparse
import json
import os
import re
from pathlib import Path

from campus_planner.aggregation import completion_rate, duration_by_tag, weekly_timeline
from campus_planner.exceptions import PlannerError, TaskValidationError
from campus_planner.models import PRIORITIES, TIME_UNITS, Task
from campus_planner.search import highlight_matches, match_spans
from campus_planner.service import PlannerService
from campus_planner.sorting import SORT_FIELDS, SORT_ORDERS, sort_tasks
from campus_planner.storage import SettingsStorage, TaskStorage
from campus_planner.validators import format_duration


def data_dir() -> Path:
    return Path(os.environ.get("CAMPUS_PLANNER_HOME", ".data"))


def build_service() -> PlannerService:
    root = data_dir()
    return PlannerService(TaskStorage(root / "tasks.json"), SettingsStorage(root / "settings.json"))


def format_task(task: Task, unit: str, title: str | None = None) -> str:
    state = "x" if task.completed else " "
    location = f" @ {task.location}" if task.location else ""
    return (
        f"[{state}] {task.id} {task.due_date} ({task.priority}) "
        f"{title or task.title} #{task.tag} {format_duration(task.duration, unit)}{location}"
    )


def mark_spans(text: str, regex: re.Pattern[str] | None) -> str:
    parts: list[str] = []
    cursor = 0
    for start, end in match_spans(text, regex):
        parts.append(text[cursor:start])
        parts.append(f"[{text[start:end]}]")
        cursor = end
    parts.append(text[cursor:])
    return "".join(parts)


def print_errors(exc: TaskValidationError) -> None:
    for error in exc.errors:
        print(f"{error.field}: {error.message}")


def cmd_add(args: argparse.Namespace) -> int:
    service = build_service()
    try:
        task = service.add_task(
            title=args.title,
            due_date=args.due,
            duration=args.duration,
            tag=args.tag,
            priority=args.priority,
            location=args.location,
        )
    except TaskValidationError as exc:
        print_errors(exc)
        return 1
    print(f"created: {task.id}")
    return 0


def cmd_edit(args: argparse.Namespace) -> int:
    service = build_service()
    updates = {
        name: value
        for name, value in (
            ("title", args.title),
            ("due_date", args.due),
            ("duration", args.duration),
            ("tag", args.tag),
            ("priority", args.priority),
            ("location", args.location),
        )
        if value is not None
    }
    try:
        task = service.update_task(args.task_id, **updates)
    except TaskValidationError as exc:
        print_errors(exc)
        return 1
    print("updated" if task else "not found")
    return 0 if task else 1


def cmd_list(args: argparse.Namespace) -> int:
    service = build_service()
    unit = service.settings().time_unit

    result = service.search(args.search, case_sensitive=args.case_sensitive)
    if result.error:
        print(result.error)
        return 1

    tasks = sort_tasks(result.tasks or [], args.sort, args.order)

    if not tasks:
        print("no tasks")
        return 0

    regex = result.query.regex
    for task in tasks:
        if args.html:
            title = highlight_matches(task.title, regex)
        else:
            title = mark_spans(task.title, regex)
        print(format_task(task, unit, title=title))
    return 0


def cmd_done(args: argparse.Namespace) -> int:
    task = build_service().complete_task(args.task_id)
    print("done" if task else "not found")
    return 0 if task else 1


def cmd_undo(args: argparse.Namespace) -> int:
    task = build_service().uncomplete_task(args.task_id)
    print("reopened" if task else "not found")
    return 0 if task else 1


def cmd_delete(args: argparse.Namespace) -> int:
    changed = build_service().delete_task(args.task_id)
    print("deleted" if changed else "not found")
    return 0 if changed else 1


def cmd_completed(_args: argparse.Namespace) -> int:
    service = build_service()
    tasks = service.list_tasks(include_completed=True)
    done = service.completed_tasks()
    print(f"completion={round(completion_rate(tasks))}% ({len(done)} of {len(tasks)} tasks)")
    unit = service.settings().time_unit
    for task in done:
        print(format_task(task, unit))
    return 0


def cmd_dashboard(_args: argparse.Namespace) -> int:
    summary = build_service().dashboard()
    status = summary["time_status"]
    print(
        f"active={summary['active']} due_week={summary['due_this_week']} "
        f"hours={summary['total_hours']}h completed={summary['completed']}"
    )
    if status.remaining > 0:
        print(f"{status.remaining:.1f} hours under target ({status.target} hours)")
    elif status.remaining == 0:
        print("Target reached")
    else:
        print(f"{abs(status.remaining):.1f} hours over target!")
    tags = ", ".join(f"{tag}={count}" for tag, count in summary["top_tags"]) or "no tasks yet"
    print(f"top tags: {tags}")
    return 0


def cmd_timeline(_args: argparse.Namespace) -> int:
    service = build_service()
    tasks = service.list_tasks()
    for day in weekly_timeline(tasks):
        print(f"{day.day.isoformat()}: {len(day.tasks)} tasks ({day.hours}h)")

    breakdown = duration_by_tag(tasks)
    if not breakdown:
        print("no active tasks")
        return 0
    largest = breakdown[0][1]
    for tag, minutes in breakdown:
        print(f"{tag}: {minutes / 60:.1f}h ({round(minutes / largest * 100)}%)")
    return 0


def cmd_settings(args: argparse.Namespace) -> int:
    storage = SettingsStorage(data_dir() / "settings.json")
    if args.unit is not None and not storage.update("timeUnit", args.unit):
        print("failed to save settings")
        return 1
    if args.target is not None and not storage.update("weeklyTarget", args.target):
        print("failed to save settings")
        return 1
    settings = storage.load()
    print(f"time_unit={settings.time_unit} weekly_target={settings.weekly_target}")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    payload = build_service().export_data()
    try:
        Path(args.path).write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    except OSError as exc:
        print(f"Failed to export data: {exc}")
        return 1
    print(f"exported {len(payload['tasks'])} tasks")
    return 0


def cmd_import(args: argparse.Namespace) -> int:
    path = Path(args.path)
    if path.suffix != ".json":
        print("File must be a JSON file")
        return 1
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        print(f"Invalid JSON file: {exc}")
        return 1
    result = build_service().import_data(payload)
    print(result.message)
    return 0 if result.success else 1


def cmd_clear(_args: argparse.Namespace) -> int:
    build_service().clear_tasks()
    print("cleared")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="campus-planner", description="Campus Planner CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="add task")
    add.add_argument("title")
    add.add_argument("--due", required=True, help="due date, YYYY-MM-DD")
    add.add_argument("--duration", required=True, help="minutes")
    add.add_argument("--tag", required=True)
    add.add_argument("-p", "--priority", choices=PRIORITIES)
    add.add_argument("--location", default="")
    add.set_defaults(handler=cmd_add)

    edit = sub.add_parser("edit", help="edit task")
    edit.add_argument("task_id")
    edit.add_argument("--title")
    edit.add_argument("--due")
    edit.add_argument("--duration")
    edit.add_argument("--tag")
    edit.add_argument("-p", "--priority", choices=PRIORITIES)
    edit.add_argument("--location")
    edit.set_defaults(handler=cmd_edit)

    show = sub.add_parser("list", help="list active tasks")
    show.add_argument("--search", help="regular expression, or @tag:<name>")
    show.add_argument("--case-sensitive", action="store_true")
    show.add_argument("--sort", choices=SORT_FIELDS, default="dueDate")
    show.add_argument("--order", choices=SORT_ORDERS, default="asc")
    show.add_argument("--html", action="store_true", help="escape titles and wrap matches in <mark>")
    show.set_defaults(handler=cmd_list)

    done = sub.add_parser("done", help="mark task as completed")
    done.add_argument("task_id")
    done.set_defaults(handler=cmd_done)

    undo = sub.add_parser("undo", help="reopen completed task")
    undo.add_argument("task_id")
    undo.set_defaults(handler=cmd_undo)

    delete = sub.add_parser("delete", help="delete task")
    delete.add_argument("task_id")
    delete.set_defaults(handler=cmd_delete)

    completed = sub.add_parser("completed", help="show completed tasks")
    completed.set_defaults(handler=cmd_completed)

    dashboard = sub.add_parser("dashboard", help="show dashboard metrics")
    dashboard.set_defaults(handler=cmd_dashboard)

    timeline = sub.add_parser("timeline", help="show the week ahead and time per tag")
    timeline.set_defaults(handler=cmd_timeline)

    settings = sub.add_parser("settings", help="show or change settings")
    settings.add_argument("--unit", choices=TIME_UNITS)
    settings.add_argument("--target", type=float, help="weekly target in hours")
    settings.set_defaults(handler=cmd_settings)

    export = sub.add_parser("export", help="export tasks and settings to JSON")
    export.add_argument("path")
    export.set_defaults(handler=cmd_export)

    load = sub.add_parser("import", help="import tasks and settings from JSON")
    load.add_argument("path")
    load.set_defaults(handler=cmd_import)

    clear = sub.add_parser("clear", help="delete all tasks")
    clear.set_defaults(handler=cmd_clear)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = args.handler
    try:
        return int(handler(args))
    except PlannerError as exc:
        print(f"error: {exc}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
