"""
backend/authz.py

Ownership/membership authorization for projects and tasks.

Single source of truth for who may read or write a project. Tasks have no ACL
of their own: every task operation is authorized against its parent project.

Rules:
- Owner or member: read the project, list/create/read/update/delete its tasks
- Owner only: update or delete the project itself

Pure Python logic - no FastAPI imports, no database access. Predicates work
on raw stored identifiers (owner_id, members), never on expanded documents.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

try:
    from backend.config import IS_DEV
    from backend.errors import NotFoundError, UnauthorizedError
except ModuleNotFoundError:
    from config import IS_DEV
    from errors import NotFoundError, UnauthorizedError


# ============================================================================
# Predicates
# ============================================================================

def is_authorized(user_id: str, project: Optional[Dict[str, Any]]) -> bool:
    """
    Check if a user may access a project (and the tasks under it).

    Args:
        user_id: Requester ID from the auth context
        project: Stored project document with owner_id and members (list of IDs)

    Returns:
        True if user is the owner or appears in members
    """
    if not project or not user_id:
        return False
    return project.get("owner_id") == user_id or user_id in (project.get("members") or ())


def can_mutate_project(user_id: str, project: Optional[Dict[str, Any]]) -> bool:
    """
    Check if a user may update or delete the project itself.

    Membership is not enough here; only the owner qualifies.
    """
    if not project or not user_id:
        return False
    return project.get("owner_id") == user_id


# ============================================================================
# Enforcement
# ============================================================================

def require_project_access(
    user_id: str,
    project: Optional[Dict[str, Any]],
    *,
    label: str = "",
) -> Dict[str, Any]:
    """
    Enforce owner-or-member access.

    Existence is checked first, so a missing project is always NotFound even
    for a requester who would fail the membership check.

    Raises:
        NotFoundError: If project is None
        UnauthorizedError: If user is neither owner nor member
    """
    if project is None:
        raise NotFoundError("Project not found")

    if not is_authorized(user_id, project):
        if IS_DEV:
            print(f"[AUTHZ] Access denied{f' in {label}' if label else ''}: "
                  f"user_id={user_id}, project_id={project.get('id')}")
        raise UnauthorizedError()

    return project


def require_project_owner(
    user_id: str,
    project: Optional[Dict[str, Any]],
    *,
    label: str = "",
) -> Dict[str, Any]:
    """
    Enforce owner-only access (project update/delete).

    Raises:
        NotFoundError: If project is None
        UnauthorizedError: If user is not the owner
    """
    if project is None:
        raise NotFoundError("Project not found")

    if not can_mutate_project(user_id, project):
        if IS_DEV:
            print(f"[AUTHZ] Owner required{f' in {label}' if label else ''}: "
                  f"user_id={user_id}, project_id={project.get('id')}")
        raise UnauthorizedError()

    return project
