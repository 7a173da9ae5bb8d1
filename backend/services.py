"""
backend/services.py

Resource access service for projects and tasks.

Every operation follows the same shape:
1. Load the raw document(s) from the store
2. Authorize against the project (tasks: their parent project)
3. Validate and persist
4. Expand references for the response

Security guarantees:
- requester_id comes from the auth context ONLY
- Project owner is the requester on create and can never change afterwards
- Task createdBy is the requester on create; project/createdBy never change
- Update payloads are filtered through per-resource whitelists

All functions take an open connection and raise errors from backend.errors.
Mutations commit before returning; expansion reads after the commit.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List

try:
    from backend.authz import require_project_access, require_project_owner
    from backend.config import IS_DEV
    from backend.db import DbConnection, commit, rollback
    from backend.errors import NotFoundError
    from backend.models import (
        PROJECT_DEFAULTS,
        PROJECT_MUTABLE_FIELDS,
        TASK_DEFAULTS,
        TASK_MUTABLE_FIELDS,
        now_iso,
        validate_project_document,
        validate_task_document,
    )
    from backend.population import populate_project, populate_projects, populate_task, populate_tasks
    from backend import repositories as repo
except ModuleNotFoundError:
    from authz import require_project_access, require_project_owner
    from config import IS_DEV
    from db import DbConnection, commit, rollback
    from errors import NotFoundError
    from models import (
        PROJECT_DEFAULTS,
        PROJECT_MUTABLE_FIELDS,
        TASK_DEFAULTS,
        TASK_MUTABLE_FIELDS,
        now_iso,
        validate_project_document,
        validate_task_document,
    )
    from population import populate_project, populate_projects, populate_task, populate_tasks
    import repositories as repo


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _whitelist(payload: Dict[str, Any], allowed) -> Dict[str, Any]:
    return {k: _plain(v) for k, v in payload.items() if k in allowed}


def _write(conn: DbConnection, fn, *args) -> Any:
    """Run a repository mutation and commit, rolling back on any failure."""
    try:
        result = fn(conn, *args)
        commit(conn)
        return result
    except Exception:
        rollback(conn)
        raise


def _reload_project(conn: DbConnection, project_id: str) -> Dict[str, Any]:
    """Re-read after a commit. A concurrent delete in between surfaces as NotFound."""
    project = repo.get_project(conn, project_id)
    if project is None:
        raise NotFoundError("Project not found")
    return populate_project(conn, project)


def _reload_task(conn: DbConnection, task_id: str) -> Dict[str, Any]:
    task = repo.get_task(conn, task_id)
    if task is None:
        raise NotFoundError("Task not found")
    return populate_task(conn, task)


def _load_task_with_project(conn: DbConnection, requester_id: str, task_id: str, label: str):
    task = repo.get_task(conn, task_id)
    if task is None:
        raise NotFoundError("Task not found")
    project = repo.get_project(conn, task["project_id"])
    require_project_access(requester_id, project, label=label)
    return task, project


# ============================================================================
# Projects
# ============================================================================

def list_projects(conn: DbConnection, requester_id: str) -> List[Dict[str, Any]]:
    projects = repo.list_projects_for_user(conn, requester_id)
    if IS_DEV:
        print(f"[PROJECTS] List: user_id={requester_id}, results={len(projects)}")
    return populate_projects(conn, projects)


def get_project(conn: DbConnection, requester_id: str, project_id: str) -> Dict[str, Any]:
    project = repo.get_project(conn, project_id)
    require_project_access(requester_id, project, label="get_project")
    return populate_project(conn, project)


def create_project(conn: DbConnection, requester_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """Create a project owned by the requester. Any owner in payload is ignored."""
    now = now_iso()
    project = dict(PROJECT_DEFAULTS)
    project.update({k: v for k, v in _whitelist(payload, PROJECT_MUTABLE_FIELDS).items() if v is not None})
    project.update({
        "id": repo.new_id(),
        "owner_id": requester_id,
        "members": list(project.get("members") or []),
        "created_at": now,
        "updated_at": now,
    })

    validate_project_document(project)
    _write(conn, repo.insert_project, project)

    if IS_DEV:
        print(f"[PROJECTS] Created project_id={project['id']}, owner_id={requester_id}")
    return _reload_project(conn, project["id"])


def update_project(
    conn: DbConnection,
    requester_id: str,
    project_id: str,
    payload: Dict[str, Any],
) -> Dict[str, Any]:
    """Partial update, owner only."""
    project = repo.get_project(conn, project_id)
    require_project_owner(requester_id, project, label="update_project")

    changes = _whitelist(payload, PROJECT_MUTABLE_FIELDS)
    if changes.get("members") is None:
        changes.pop("members", None)

    merged = {**project, **changes}
    validate_project_document(merged)

    changes["updated_at"] = now_iso()
    if not _write(conn, repo.update_project, project_id, changes):
        # Deleted between the authorization read and the write
        raise NotFoundError("Project not found")

    if IS_DEV:
        print(f"[PROJECTS] Updated project_id={project_id}, fields={sorted(changes)}")
    return _reload_project(conn, project_id)


def delete_project(conn: DbConnection, requester_id: str, project_id: str) -> Dict[str, str]:
    """Delete a project (owner only). Its tasks are removed with it."""
    project = repo.get_project(conn, project_id)
    require_project_owner(requester_id, project, label="delete_project")

    if not _write(conn, repo.delete_project, project_id):
        raise NotFoundError("Project not found")

    if IS_DEV:
        print(f"[PROJECTS] Deleted project_id={project_id} (tasks cascaded)")
    return {"message": "Project removed"}


# ============================================================================
# Tasks
# ============================================================================

def list_tasks(conn: DbConnection, requester_id: str, project_id: str) -> List[Dict[str, Any]]:
    project = repo.get_project(conn, project_id)
    require_project_access(requester_id, project, label="list_tasks")

    tasks = repo.list_tasks_by_project(conn, project_id)
    if IS_DEV:
        print(f"[TASKS] List: project_id={project_id}, user_id={requester_id}, results={len(tasks)}")
    return populate_tasks(conn, tasks)


def get_task(conn: DbConnection, requester_id: str, task_id: str) -> Dict[str, Any]:
    task, _ = _load_task_with_project(conn, requester_id, task_id, "get_task")
    return populate_task(conn, task)


def create_task(conn: DbConnection, requester_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """Create a task under payload["project"]. createdBy is always the requester."""
    project_id = payload.get("project")
    project = repo.get_project(conn, project_id) if project_id else None
    require_project_access(requester_id, project, label="create_task")

    now = now_iso()
    task = dict(TASK_DEFAULTS)
    task.update({k: v for k, v in _whitelist(payload, TASK_MUTABLE_FIELDS).items() if v is not None})
    task.update({
        "id": repo.new_id(),
        "project_id": project_id,
        "created_by": requester_id,
        "created_at": now,
        "updated_at": now,
    })

    validate_task_document(task)
    _write(conn, repo.insert_task, task)

    if IS_DEV:
        print(f"[TASKS] Created task_id={task['id']}, project_id={project_id}, created_by={requester_id}")
    return _reload_task(conn, task["id"])


def update_task(
    conn: DbConnection,
    requester_id: str,
    task_id: str,
    payload: Dict[str, Any],
) -> Dict[str, Any]:
    """Partial update, owner or member of the parent project."""
    task, _ = _load_task_with_project(conn, requester_id, task_id, "update_task")

    changes = _whitelist(payload, TASK_MUTABLE_FIELDS)
    merged = {**task, **changes}
    validate_task_document(merged)

    changes["updated_at"] = now_iso()
    if not _write(conn, repo.update_task, task_id, changes):
        raise NotFoundError("Task not found")

    if IS_DEV:
        print(f"[TASKS] Updated task_id={task_id}, fields={sorted(changes)}")
    return _reload_task(conn, task_id)


def delete_task(conn: DbConnection, requester_id: str, task_id: str) -> Dict[str, str]:
    """Delete a task, owner or member of the parent project (not creator-only)."""
    _load_task_with_project(conn, requester_id, task_id, "delete_task")

    if not _write(conn, repo.delete_task, task_id):
        raise NotFoundError("Task not found")

    if IS_DEV:
        print(f"[TASKS] Deleted task_id={task_id}")
    return {"message": "Task removed"}
