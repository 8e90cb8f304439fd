from __future__ import annotations

from datetime import date
from typing import Any

from campus_planner import aggregation
from campus_planner.exceptions import StorageError, TaskValidationError
from campus_planner.models import COMPLETED, DEFAULT_STATUS, Settings, Task, generate_id, utc_now
from campus_planner.search import SearchResult, search_tasks
from campus_planner.sorting import sort_tasks
from campus_planner.storage import ImportResult, SettingsStorage, TaskStore, export_data, import_data
from campus_planner.validators import validate_task

# keyword arguments accepted by update_task, mapped to stored JSON keys
_EDITABLE = {
    "title": "title",
    "due_date": "dueDate",
    "duration": "duration",
    "tag": "tag",
    "priority": "priority",
    "location": "location",
}


class PlannerService:
    def __init__(self, storage: TaskStore, settings_storage: SettingsStorage | None = None) -> None:
        self.storage = storage
        self.settings_storage = settings_storage

    def add_task(
        self,
        title: str,
        due_date: str,
        duration: int | str,
        tag: str,
        priority: str | None = None,
        location: str = "",
        today: date | None = None,
    ) -> Task:
        record = {
            "title": title,
            "dueDate": due_date,
            "duration": duration,
            "tag": tag,
            "priority": priority,
        }
        validation = validate_task(record, today=today)
        if not validation.valid:
            raise TaskValidationError(validation.errors)

        tasks = self.storage.load_all()
        task = Task(
            id=generate_id("task"),
            title=title,
            due_date=due_date.strip(),
            duration=int(str(duration).strip()),
            tag=tag.strip(),
            priority=priority or "Medium",
            location=location or "",
        )
        tasks.append(task)
        self._save(tasks)
        return task

    def update_task(self, task_id: str, today: date | None = None, **updates: Any) -> Task | None:
        unknown = set(updates) - set(_EDITABLE)
        if unknown:
            raise TypeError(f"cannot update fields: {', '.join(sorted(unknown))}")

        tasks = self.storage.load_all()
        task = self._find(tasks, task_id)
        if task is None:
            return None

        record = task.to_dict()
        for name, value in updates.items():
            record[_EDITABLE[name]] = value
        validation = validate_task(record, today=today)
        if not validation.valid:
            raise TaskValidationError(validation.errors)

        task.title = record["title"]
        task.due_date = record["dueDate"].strip()
        task.duration = int(str(record["duration"]).strip())
        task.tag = record["tag"].strip()
        task.priority = record["priority"] or "Medium"
        task.location = record["location"] or ""
        task.updated_at = utc_now()
        self._save(tasks)
        return task

    def complete_task(self, task_id: str) -> Task | None:
        return self._set_status(task_id, COMPLETED)

    def uncomplete_task(self, task_id: str) -> Task | None:
        return self._set_status(task_id, DEFAULT_STATUS)

    def delete_task(self, task_id: str) -> bool:
        tasks = self.storage.load_all()
        kept = [task for task in tasks if task.id != task_id]
        if len(kept) == len(tasks):
            return False
        self._save(kept)
        return True

    def get_task(self, task_id: str) -> Task | None:
        return self._find(self.storage.load_all(), task_id)

    def clear_tasks(self) -> None:
        if not self.storage.clear():
            raise StorageError("failed to clear tasks")

    def list_tasks(self, include_completed: bool = False) -> list[Task]:
        tasks = self.storage.load_all()
        if include_completed:
            return tasks
        return aggregation.active_tasks(tasks)

    def completed_tasks(self) -> list[Task]:
        return aggregation.completed_tasks(self.storage.load_all())

    def search(self, pattern: str | None, case_sensitive: bool = False) -> SearchResult:
        return search_tasks(self.storage.load_all(), pattern, case_sensitive=case_sensitive)

    def sorted_tasks(self, field: str, order: str = "asc") -> list[Task]:
        return sort_tasks(self.list_tasks(), field, order)

    def settings(self) -> Settings:
        if self.settings_storage is None:
            return Settings()
        return self.settings_storage.load()

    def dashboard(self, today: date | None = None) -> dict[str, Any]:
        tasks = self.storage.load_all()
        summary = aggregation.dashboard_summary(tasks, today=today)
        summary["time_status"] = aggregation.time_status(tasks, self.settings().weekly_target)
        summary["top_tags"] = aggregation.top_tags(tasks)
        return summary

    def stats(self) -> dict[str, Any]:
        tasks = self.storage.load_all()
        done = len(aggregation.completed_tasks(tasks))
        return {
            "total": len(tasks),
            "done": done,
            "open": len(tasks) - done,
            "completion_rate": aggregation.completion_rate(tasks),
        }

    def export_data(self) -> dict[str, Any]:
        return export_data(self.storage.load_all(), self.settings())

    def import_data(self, payload: Any) -> ImportResult:
        result = import_data(payload)
        if not result.success:
            return result
        if not self.storage.save_all(result.tasks):
            return ImportResult(False, "Failed to save tasks")
        if result.settings is not None and self.settings_storage is not None:
            self.settings_storage.save(result.settings)
        return result

    def _set_status(self, task_id: str, status: str) -> Task | None:
        tasks = self.storage.load_all()
        task = self._find(tasks, task_id)
        if task is None:
            return None
        task.status = status
        task.completed = status == COMPLETED
        task.completed_at = utc_now() if task.completed else None
        task.updated_at = utc_now()
        self._save(tasks)
        return task

    def _save(self, tasks: list[Task]) -> None:
        if not self.storage.save_all(tasks):
            raise StorageError("failed to save tasks")

    @staticmethod
    def _find(tasks: list[Task], task_id: str) -> Task | None:
        for task in tasks:
            if task.id == task_id:
                return task
        return None
