"""
backend/routes_tasks.py

Task CRUD endpoints. A task has no ACL of its own: every operation is
authorized against the parent project (owner or member).

Security guarantees:
- All endpoints require authentication (require_auth_context)
- createdBy = requester on create, never taken from the body
- project and createdBy are not accepted on update
"""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Path

try:
    from backend.auth_context import get_db
    from backend.db import DbConnection
    from backend.dependencies import database_errors, get_requester_id
    from backend.schemas import TaskCreateRequest, TaskUpdateRequest
    from backend import services
except ModuleNotFoundError:
    from auth_context import get_db
    from db import DbConnection
    from dependencies import database_errors, get_requester_id
    from schemas import TaskCreateRequest, TaskUpdateRequest
    import services


router = APIRouter(
    prefix="/api/tasks",
    tags=["tasks"],
)


@router.get("/project/{project_id}")
def list_tasks_by_project(
    project_id: str = Path(..., description="Project ID"),
    requester_id: str = Depends(get_requester_id),
    conn: DbConnection = Depends(get_db),
) -> List[Dict[str, Any]]:
    """
    All tasks of a project, newest first.

    Raises:
        404: Project not found
        401: Requester is neither owner nor member of the project
    """
    with database_errors("list_tasks_by_project"):
        return services.list_tasks(conn, requester_id, project_id)


@router.get("/{task_id}")
def get_task(
    task_id: str = Path(..., description="Task ID"),
    requester_id: str = Depends(get_requester_id),
    conn: DbConnection = Depends(get_db),
) -> Dict[str, Any]:
    with database_errors("get_task"):
        return services.get_task(conn, requester_id, task_id)


@router.post("", status_code=201)
def create_task(
    request: TaskCreateRequest,
    requester_id: str = Depends(get_requester_id),
    conn: DbConnection = Depends(get_db),
) -> Dict[str, Any]:
    """
    Create a task under request.project.

    Raises:
        404: Project not found
        401: Requester is neither owner nor member of the project
    """
    with database_errors("create_task"):
        return services.create_task(conn, requester_id, request.model_dump())


@router.put("/{task_id}")
def update_task(
    request: TaskUpdateRequest,
    task_id: str = Path(..., description="Task ID"),
    requester_id: str = Depends(get_requester_id),
    conn: DbConnection = Depends(get_db),
) -> Dict[str, Any]:
    with database_errors("update_task"):
        return services.update_task(
            conn, requester_id, task_id, request.model_dump(exclude_unset=True)
        )


@router.delete("/{task_id}")
def delete_task(
    task_id: str = Path(..., description="Task ID"),
    requester_id: str = Depends(get_requester_id),
    conn: DbConnection = Depends(get_db),
) -> Dict[str, str]:
    """Delete a task. Any owner or member of the parent project may do this."""
    with database_errors("delete_task"):
        return services.delete_task(conn, requester_id, task_id)
