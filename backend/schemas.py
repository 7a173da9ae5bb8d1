"""
backend/schemas.py

Pydantic request schemas for auth, projects and tasks.

Security notes:
- Create/update schemas list only client-controllable fields. Unknown keys
  (owner, createdBy, project on update, ...) are ignored, never merged.
- Field names are camelCase on the wire; attributes are snake_case.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

try:
    from backend.models import Priority, ProjectStatus, TaskStatus, parse_iso_date
except ModuleNotFoundError:
    from models import Priority, ProjectStatus, TaskStatus, parse_iso_date


class _Request(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        use_enum_values=True,
        validate_default=True,
    )


def _trim(v):
    if isinstance(v, str):
        return v.strip()
    return v


def _iso(v):
    try:
        return parse_iso_date(v)
    except (AttributeError, TypeError, ValueError):
        raise ValueError(f"invalid date: {v!r}") from None


# ========================================================================
# AUTH SCHEMAS
# ========================================================================

class RegisterRequest(_Request):
    name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=6, max_length=128)

    @field_validator("name", mode="before")
    @classmethod
    def trim_name(cls, v):
        return _trim(v)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("email")
    @classmethod
    def validate_email_shape(cls, v):
        local, _, domain = v.partition("@")
        if not local or "." not in domain:
            raise ValueError("email must be a valid address")
        return v


class LoginRequest(_Request):
    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


# ========================================================================
# PROJECT SCHEMAS
# ========================================================================

class ProjectCreateRequest(_Request):
    """Project fields minus owner (owner always comes from the auth context)."""
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field("", max_length=5000)
    status: ProjectStatus = ProjectStatus.planning
    priority: Priority = Priority.medium
    start_date: Optional[str] = Field(None, alias="startDate")
    end_date: Optional[str] = Field(None, alias="endDate")
    progress: int = Field(0, ge=0, le=100, strict=True)
    members: List[str] = Field(default_factory=list)

    @field_validator("title", mode="before")
    @classmethod
    def trim_title(cls, v):
        return _trim(v)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def normalize_dates(cls, v):
        return _iso(v)


class ProjectUpdateRequest(_Request):
    """Partial project update. Only fields present in the payload are merged."""
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    status: Optional[ProjectStatus] = None
    priority: Optional[Priority] = None
    start_date: Optional[str] = Field(None, alias="startDate")
    end_date: Optional[str] = Field(None, alias="endDate")
    progress: Optional[int] = Field(None, ge=0, le=100, strict=True)
    members: Optional[List[str]] = None

    @field_validator("title", mode="before")
    @classmethod
    def trim_title(cls, v):
        return _trim(v)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def normalize_dates(cls, v):
        return _iso(v)


# ========================================================================
# TASK SCHEMAS
# ========================================================================

class TaskCreateRequest(_Request):
    """Task fields incl. target project id. createdBy is server-assigned."""
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field("", max_length=5000)
    status: TaskStatus = TaskStatus.todo
    priority: Priority = Priority.medium
    project: str = Field(..., min_length=1)
    assigned_to: Optional[str] = Field(None, alias="assignedTo")
    due_date: Optional[str] = Field(None, alias="dueDate")
    estimated_hours: Optional[float] = Field(None, ge=0, alias="estimatedHours", strict=True)

    @field_validator("title", mode="before")
    @classmethod
    def trim_title(cls, v):
        return _trim(v)

    @field_validator("assigned_to", mode="before")
    @classmethod
    def blank_assignee_is_none(cls, v):
        return v or None

    @field_validator("due_date", mode="before")
    @classmethod
    def normalize_due_date(cls, v):
        return _iso(v)


class TaskUpdateRequest(_Request):
    """Partial task update. project and createdBy are not accepted."""
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    status: Optional[TaskStatus] = None
    priority: Optional[Priority] = None
    assigned_to: Optional[str] = Field(None, alias="assignedTo")
    due_date: Optional[str] = Field(None, alias="dueDate")
    estimated_hours: Optional[float] = Field(None, ge=0, alias="estimatedHours", strict=True)

    @field_validator("title", mode="before")
    @classmethod
    def trim_title(cls, v):
        return _trim(v)

    @field_validator("assigned_to", mode="before")
    @classmethod
    def blank_assignee_is_none(cls, v):
        return v or None

    @field_validator("due_date", mode="before")
    @classmethod
    def normalize_due_date(cls, v):
        return _iso(v)
