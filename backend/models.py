from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

try:
    from backend.errors import ValidationFailure
except ModuleNotFoundError:
    from errors import ValidationFailure


# Enums
class ProjectStatus(str, Enum):
    planning = "planning"
    in_progress = "in-progress"
    completed = "completed"
    on_hold = "on-hold"


class TaskStatus(str, Enum):
    todo = "todo"
    in_progress = "in-progress"
    review = "review"
    completed = "completed"


class Priority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    urgent = "urgent"


# Stored document field -> API (camelCase) field
PROJECT_FIELDS = {
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "start_date": "startDate",
    "end_date": "endDate",
    "progress": "progress",
}

TASK_FIELDS = {
    "title": "title",
    "description": "description",
    "status": "status",
    "priority": "priority",
    "due_date": "dueDate",
    "estimated_hours": "estimatedHours",
}

# Fields an update payload may touch. owner / project / created_by are never listed.
PROJECT_MUTABLE_FIELDS = frozenset(PROJECT_FIELDS) | {"members"}
TASK_MUTABLE_FIELDS = frozenset(TASK_FIELDS) | {"assigned_to"}

PROJECT_DEFAULTS: Dict[str, Any] = {
    "description": "",
    "status": ProjectStatus.planning.value,
    "priority": Priority.medium.value,
    "start_date": None,
    "end_date": None,
    "progress": 0,
}

TASK_DEFAULTS: Dict[str, Any] = {
    "description": "",
    "status": TaskStatus.todo.value,
    "priority": Priority.medium.value,
    "assigned_to": None,
    "due_date": None,
    "estimated_hours": None,
}


def now_iso() -> str:
    # Naive UTC ISO string; stored timestamps sort lexically by creation time
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat()


def parse_iso_date(value: Optional[str]) -> Optional[str]:
    """
    Normalize an ISO-8601 date or datetime string.

    Accepts "2024-05-01", "2024-05-01T10:00:00" and a trailing "Z".
    Returns the normalized ISO string, or None for empty input.

    Raises:
        ValueError: If the value is not a valid ISO date
    """
    if value is None or value == "":
        return None
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    return datetime.fromisoformat(raw).isoformat()


def _enum_values(enum_cls) -> set:
    return {member.value for member in enum_cls}


def _check_common(doc: Dict[str, Any], kind: str, status_enum) -> None:
    title = doc.get("title")
    if title is None or not str(title).strip():
        raise ValidationFailure(f"{kind} validation failed: title is required")

    status = doc.get("status")
    if status not in _enum_values(status_enum):
        raise ValidationFailure(f"{kind} validation failed: `{status}` is not a valid status")

    priority = doc.get("priority")
    if priority not in _enum_values(Priority):
        raise ValidationFailure(f"{kind} validation failed: `{priority}` is not a valid priority")


def validate_project_document(doc: Dict[str, Any]) -> None:
    """Schema check run on the merged project document before every write."""
    _check_common(doc, "Project", ProjectStatus)

    progress = doc.get("progress")
    if not isinstance(progress, int) or isinstance(progress, bool) or not 0 <= progress <= 100:
        raise ValidationFailure("Project validation failed: progress must be an integer between 0 and 100")

    if not doc.get("owner_id"):
        raise ValidationFailure("Project validation failed: owner is required")


def validate_task_document(doc: Dict[str, Any]) -> None:
    """Schema check run on the merged task document before every write."""
    _check_common(doc, "Task", TaskStatus)

    hours = doc.get("estimated_hours")
    if hours is not None and (isinstance(hours, bool) or not isinstance(hours, (int, float)) or hours < 0):
        raise ValidationFailure("Task validation failed: estimatedHours must be a non-negative number")

    if not doc.get("project_id"):
        raise ValidationFailure("Task validation failed: project is required")
    if not doc.get("created_by"):
        raise ValidationFailure("Task validation failed: createdBy is required")
