"""
backend/routes_projects.py

Project CRUD endpoints with owner/member authorization.

Security guarantees:
- All endpoints require authentication (require_auth_context)
- Read operations require owner or member
- Update/delete require owner
- owner is taken from the auth context ONLY, never from the body
- Input validation via Pydantic schemas
"""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Path

try:
    from backend.auth_context import get_db
    from backend.db import DbConnection
    from backend.dependencies import database_errors, get_requester_id
    from backend.schemas import ProjectCreateRequest, ProjectUpdateRequest
    from backend import services
except ModuleNotFoundError:
    from auth_context import get_db
    from db import DbConnection
    from dependencies import database_errors, get_requester_id
    from schemas import ProjectCreateRequest, ProjectUpdateRequest
    import services


router = APIRouter(
    prefix="/api/projects",
    tags=["projects"],
)


@router.get("")
def list_projects(
    requester_id: str = Depends(get_requester_id),
    conn: DbConnection = Depends(get_db),
) -> List[Dict[str, Any]]:
    """All projects the requester owns or is a member of, newest first."""
    with database_errors("list_projects"):
        return services.list_projects(conn, requester_id)


@router.get("/{project_id}")
def get_project(
    project_id: str = Path(..., description="Project ID"),
    requester_id: str = Depends(get_requester_id),
    conn: DbConnection = Depends(get_db),
) -> Dict[str, Any]:
    """
    Get a single project with owner and members expanded.

    Raises:
        404: Project not found
        401: Requester is neither owner nor member
    """
    with database_errors("get_project"):
        return services.get_project(conn, requester_id, project_id)


@router.post("", status_code=201)
def create_project(
    request: ProjectCreateRequest,
    requester_id: str = Depends(get_requester_id),
    conn: DbConnection = Depends(get_db),
) -> Dict[str, Any]:
    """
    Create a project.

    Security:
    - owner = requester (any owner in the body is dropped by the schema)
    - members default to []
    """
    with database_errors("create_project"):
        return services.create_project(conn, requester_id, request.model_dump())


@router.put("/{project_id}")
def update_project(
    request: ProjectUpdateRequest,
    project_id: str = Path(..., description="Project ID"),
    requester_id: str = Depends(get_requester_id),
    conn: DbConnection = Depends(get_db),
) -> Dict[str, Any]:
    """
    Partially update a project. Owner only.

    Only fields present in the body are merged; owner is never writable.

    Raises:
        404: Project not found
        401: Requester is not the owner
        500: Merged document fails validation
    """
    with database_errors("update_project"):
        return services.update_project(
            conn, requester_id, project_id, request.model_dump(exclude_unset=True)
        )


@router.delete("/{project_id}")
def delete_project(
    project_id: str = Path(..., description="Project ID"),
    requester_id: str = Depends(get_requester_id),
    conn: DbConnection = Depends(get_db),
) -> Dict[str, str]:
    """Delete a project and its tasks. Owner only."""
    with database_errors("delete_project"):
        return services.delete_project(conn, requester_id, project_id)
