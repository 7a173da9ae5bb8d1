"""
backend/population.py

Reference expansion for API responses.

Stored documents hold bare IDs (owner_id, members, project_id, assigned_to,
created_by). Responses replace them with reduced projections:

- users    -> {id, name, email}
- project  -> {id, title}

Expansion is a read-side join done in one query per referenced table. It
never writes back and is applied only after authorization has run on the raw
IDs. Dangling references expand to None (single refs) or are dropped
(members).
"""

from __future__ import annotations

from typing import Any, Dict, List

try:
    from backend.db import DbConnection
    from backend.models import PROJECT_FIELDS, TASK_FIELDS
    from backend import repositories as repo
except ModuleNotFoundError:
    from db import DbConnection
    from models import PROJECT_FIELDS, TASK_FIELDS
    import repositories as repo


def _user_ref(users: Dict[str, Dict[str, Any]], user_id) -> Any:
    user = users.get(user_id) if user_id else None
    if user is None:
        return None
    return {"id": user["id"], "name": user["name"], "email": user["email"]}


def serialize_project(project: Dict[str, Any], users: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    out: Dict[str, Any] = {"id": project["id"]}
    for column, key in PROJECT_FIELDS.items():
        out[key] = project.get(column)
    out["owner"] = _user_ref(users, project.get("owner_id"))
    out["members"] = [
        ref for ref in (_user_ref(users, m) for m in project.get("members") or []) if ref is not None
    ]
    out["createdAt"] = project.get("created_at")
    out["updatedAt"] = project.get("updated_at")
    return out


def serialize_task(
    task: Dict[str, Any],
    users: Dict[str, Dict[str, Any]],
    projects: Dict[str, Dict[str, Any]],
) -> Dict[str, Any]:
    out: Dict[str, Any] = {"id": task["id"]}
    for column, key in TASK_FIELDS.items():
        out[key] = task.get(column)

    project = projects.get(task.get("project_id"))
    out["project"] = {"id": project["id"], "title": project["title"]} if project else None
    out["assignedTo"] = _user_ref(users, task.get("assigned_to"))
    out["createdBy"] = _user_ref(users, task.get("created_by"))
    out["createdAt"] = task.get("created_at")
    out["updatedAt"] = task.get("updated_at")
    return out


def populate_projects(conn: DbConnection, projects: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    user_ids = []
    for p in projects:
        user_ids.append(p.get("owner_id"))
        user_ids.extend(p.get("members") or [])
    users = repo.get_user_summaries(conn, user_ids)
    return [serialize_project(p, users) for p in projects]


def populate_project(conn: DbConnection, project: Dict[str, Any]) -> Dict[str, Any]:
    return populate_projects(conn, [project])[0]


def populate_tasks(conn: DbConnection, tasks: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    user_ids = []
    for t in tasks:
        user_ids.append(t.get("assigned_to"))
        user_ids.append(t.get("created_by"))
    users = repo.get_user_summaries(conn, user_ids)
    projects = repo.get_project_titles(conn, [t.get("project_id") for t in tasks])
    return [serialize_task(t, users, projects) for t in tasks]


def populate_task(conn: DbConnection, task: Dict[str, Any]) -> Dict[str, Any]:
    return populate_tasks(conn, [task])[0]
