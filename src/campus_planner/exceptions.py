from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from campus_planner.validators import FieldError


class PlannerError(Exception):
    pass


class TaskValidationError(PlannerError, ValueError):
    def __init__(self, errors: list["FieldError"]) -> None:
        self.errors = list(errors)
        summary = "; ".join(f"{error.field}: {error.message}" for error in self.errors)
        super().__init__(summary or "invalid task")


class StorageError(PlannerError):
    pass
