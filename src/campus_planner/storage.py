from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol, Sequence

from campus_planner.models import REQUIRED_FIELDS, Settings, Task

log = logging.getLogger(__name__)

CURRENT_VERSION = "1.0.0"


class TaskStore(Protocol):
    def load_all(self) -> list[Task]: ...

    def save_all(self, tasks: Sequence[Task]) -> bool: ...

    def clear(self) -> bool: ...


class TaskStorage:
    """Task list kept as a JSON array in a single file.

    Neither method raises: a missing or corrupt file loads as an empty list
    and a failed write returns False. Records that cannot be decoded are left
    out of ``load_all`` but kept in ``unreadable`` and written back unchanged
    by ``save_all``, unless a task with the same id replaces them.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.unreadable: list[Any] = []

    def load_all(self) -> list[Task]:
        self.unreadable = []
        if not self.path.exists():
            return []

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            log.error("Error loading tasks from %s: %s", self.path, exc)
            return []
        if not isinstance(data, list):
            log.error("Invalid tasks data in %s: expected a JSON list", self.path)
            return []

        tasks: list[Task] = []
        for item in data:
            try:
                tasks.append(Task.from_dict(item))
            except (TypeError, ValueError, AttributeError) as exc:
                log.warning("Keeping unreadable task record %r aside: %s", item, exc)
                self.unreadable.append(item)
        return tasks

    def save_all(self, tasks: Sequence[Task]) -> bool:
        try:
            payload: list[Any] = [task.to_dict() for task in tasks]
            ids = {task.id for task in tasks}
            payload.extend(item for item in self.unreadable if _record_id(item) not in ids)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        except (OSError, TypeError, ValueError) as exc:
            log.error("Error saving tasks to %s: %s", self.path, exc)
            return False
        return True

    def clear(self) -> bool:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as exc:
            log.error("Error clearing tasks at %s: %s", self.path, exc)
            return False
        self.unreadable = []
        return True


def _record_id(item: Any) -> str | None:
    if isinstance(item, dict) and "id" in item:
        return str(item["id"])
    return None


class SettingsStorage:
    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> Settings:
        if not self.path.exists():
            return Settings()

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            log.error("Error loading settings from %s: %s", self.path, exc)
            return Settings()
        if not isinstance(data, dict):
            return Settings()
        return Settings.from_dict(data)

    def save(self, settings: Settings) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(settings.to_dict(), indent=2), encoding="utf-8")
        except OSError as exc:
            log.error("Error saving settings to %s: %s", self.path, exc)
            return False
        return True

    def update(self, key: str, value: Any) -> bool:
        merged = self.load().to_dict()
        merged[key] = value
        return self.save(Settings.from_dict(merged))


@dataclass(slots=True)
class ImportResult:
    success: bool
    message: str
    tasks: list[Task] = field(default_factory=list)
    settings: Settings | None = None


def export_data(tasks: Sequence[Task], settings: Settings) -> dict[str, Any]:
    return {
        "version": CURRENT_VERSION,
        "exportDate": datetime.now(timezone.utc).isoformat(),
        "tasks": [task.to_dict() for task in tasks],
        "settings": settings.to_dict(),
    }


def import_data(payload: Any) -> ImportResult:
    """Check an exported snapshot and decode it; nothing is written here."""
    if not isinstance(payload, dict):
        return ImportResult(False, "Invalid data format")

    records = payload.get("tasks")
    if not isinstance(records, list):
        return ImportResult(False, "Missing or invalid tasks array")

    for record in records:
        if not isinstance(record, dict):
            return ImportResult(False, "Invalid data format")
        for name in REQUIRED_FIELDS:
            if name not in record:
                return ImportResult(False, f"Task missing required field: {name}")

    try:
        tasks = [Task.from_dict(record) for record in records]
    except (TypeError, ValueError) as exc:
        return ImportResult(False, str(exc))

    settings = None
    if isinstance(payload.get("settings"), dict):
        settings = Settings.from_dict(payload["settings"])

    return ImportResult(True, f"Successfully imported {len(tasks)} tasks", tasks, settings)
