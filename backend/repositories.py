"""
backend/repositories.py

Persistence operations for users, projects and tasks.

Rows are returned as plain dicts in stored (snake_case) form. A project dict
always carries "members" as an ordered list of user IDs, rebuilt from the
project_members table. Nothing here commits; callers own the transaction.
"""

from __future__ import annotations

import uuid
from typing import Any, Dict, Iterable, List, Optional

try:
    from backend.db import DbConnection, execute, fetch_all, fetch_one
except ModuleNotFoundError:
    from db import DbConnection, execute, fetch_all, fetch_one


PROJECT_COLUMNS = (
    "id", "title", "description", "status", "priority", "start_date", "end_date",
    "progress", "owner_id", "created_at", "updated_at",
)

TASK_COLUMNS = (
    "id", "title", "description", "status", "priority", "project_id", "assigned_to",
    "created_by", "due_date", "estimated_hours", "created_at", "updated_at",
)


def new_id() -> str:
    return uuid.uuid4().hex


def _in_clause(prefix: str, values: List[str]):
    """Build ':p0, :p1, ...' plus the params dict for an IN (...) filter."""
    names = [f"{prefix}{i}" for i in range(len(values))]
    return ", ".join(f":{n}" for n in names), dict(zip(names, values))


def _unique(ids: Iterable[Optional[str]]) -> List[str]:
    seen: Dict[str, None] = {}
    for i in ids:
        if i and i not in seen:
            seen[i] = None
    return list(seen)


# ---------------------------------------------------------
# Users
# ---------------------------------------------------------

def insert_user(conn: DbConnection, user: Dict[str, Any]) -> None:
    execute(
        conn,
        """
        INSERT INTO users (id, name, email, password_hash, created_at)
        VALUES (:id, :name, :email, :password_hash, :created_at)
        """,
        user,
    )


def get_user_by_id(conn: DbConnection, user_id: str) -> Optional[Dict[str, Any]]:
    return fetch_one(
        conn,
        "SELECT id, name, email, created_at FROM users WHERE id = :id",
        {"id": user_id},
    )


def get_user_by_email(conn: DbConnection, email: str) -> Optional[Dict[str, Any]]:
    """Includes password_hash; only the login path should use this."""
    return fetch_one(
        conn,
        "SELECT id, name, email, password_hash, created_at FROM users WHERE email = :email",
        {"email": email},
    )


def get_user_summaries(conn: DbConnection, user_ids: Iterable[Optional[str]]) -> Dict[str, Dict[str, Any]]:
    """Return {id: {id, name, email}} for the IDs that exist."""
    ids = _unique(user_ids)
    if not ids:
        return {}
    placeholders, params = _in_clause("u", ids)
    rows = fetch_all(conn, f"SELECT id, name, email FROM users WHERE id IN ({placeholders})", params)
    return {row["id"]: row for row in rows}


# ---------------------------------------------------------
# Projects
# ---------------------------------------------------------

def _attach_members(conn: DbConnection, projects: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    if not projects:
        return projects
    placeholders, params = _in_clause("p", [p["id"] for p in projects])
    rows = fetch_all(
        conn,
        f"""
        SELECT project_id, user_id FROM project_members
        WHERE project_id IN ({placeholders})
        ORDER BY position ASC
        """,
        params,
    )
    by_project: Dict[str, List[str]] = {}
    for row in rows:
        by_project.setdefault(row["project_id"], []).append(row["user_id"])
    for project in projects:
        project["members"] = by_project.get(project["id"], [])
    return projects


def get_project(conn: DbConnection, project_id: str) -> Optional[Dict[str, Any]]:
    row = fetch_one(
        conn,
        f"SELECT {', '.join(PROJECT_COLUMNS)} FROM projects WHERE id = :id",
        {"id": project_id},
    )
    if row is None:
        return None
    return _attach_members(conn, [row])[0]


def get_project_titles(conn: DbConnection, project_ids: Iterable[Optional[str]]) -> Dict[str, Dict[str, Any]]:
    """Return {id: {id, title}} for the IDs that exist."""
    ids = _unique(project_ids)
    if not ids:
        return {}
    placeholders, params = _in_clause("p", ids)
    rows = fetch_all(conn, f"SELECT id, title FROM projects WHERE id IN ({placeholders})", params)
    return {row["id"]: row for row in rows}


def list_projects_for_user(conn: DbConnection, user_id: str) -> List[Dict[str, Any]]:
    """Projects owned by or shared with user_id, newest first."""
    rows = fetch_all(
        conn,
        f"""
        SELECT {', '.join(PROJECT_COLUMNS)} FROM projects
        WHERE owner_id = :user_id
           OR id IN (SELECT project_id FROM project_members WHERE user_id = :user_id)
        ORDER BY created_at DESC
        """,
        {"user_id": user_id},
    )
    return _attach_members(conn, rows)


def replace_members(conn: DbConnection, project_id: str, members: List[str]) -> None:
    execute(conn, "DELETE FROM project_members WHERE project_id = :project_id", {"project_id": project_id})
    for position, user_id in enumerate(_unique(members)):
        execute(
            conn,
            """
            INSERT INTO project_members (project_id, user_id, position)
            VALUES (:project_id, :user_id, :position)
            """,
            {"project_id": project_id, "user_id": user_id, "position": position},
        )


def insert_project(conn: DbConnection, project: Dict[str, Any]) -> None:
    execute(
        conn,
        f"""
        INSERT INTO projects ({', '.join(PROJECT_COLUMNS)})
        VALUES ({', '.join(':' + c for c in PROJECT_COLUMNS)})
        """,
        {c: project.get(c) for c in PROJECT_COLUMNS},
    )
    replace_members(conn, project["id"], project.get("members") or [])


def update_project(conn: DbConnection, project_id: str, fields: Dict[str, Any]) -> int:
    """Write the given columns (and members, if present). Returns rows touched."""
    fields = dict(fields)
    members = fields.pop("members", None)
    columns = [c for c in fields if c in PROJECT_COLUMNS and c not in ("id", "owner_id", "created_at")]

    params = {c: fields[c] for c in columns}
    params["id"] = project_id
    assignments = ", ".join(f"{c} = :{c}" for c in columns) or "id = id"
    cur = execute(conn, f"UPDATE projects SET {assignments} WHERE id = :id", params)

    if members is not None and cur.rowcount:
        replace_members(conn, project_id, members)
    return cur.rowcount


def delete_project(conn: DbConnection, project_id: str) -> int:
    """Delete a project together with its tasks and membership rows."""
    params = {"project_id": project_id}
    execute(conn, "DELETE FROM tasks WHERE project_id = :project_id", params)
    execute(conn, "DELETE FROM project_members WHERE project_id = :project_id", params)
    cur = execute(conn, "DELETE FROM projects WHERE id = :project_id", params)
    return cur.rowcount


# ---------------------------------------------------------
# Tasks
# ---------------------------------------------------------

def get_task(conn: DbConnection, task_id: str) -> Optional[Dict[str, Any]]:
    return fetch_one(
        conn,
        f"SELECT {', '.join(TASK_COLUMNS)} FROM tasks WHERE id = :id",
        {"id": task_id},
    )


def list_tasks_by_project(conn: DbConnection, project_id: str) -> List[Dict[str, Any]]:
    return fetch_all(
        conn,
        f"""
        SELECT {', '.join(TASK_COLUMNS)} FROM tasks
        WHERE project_id = :project_id
        ORDER BY created_at DESC
        """,
        {"project_id": project_id},
    )


def insert_task(conn: DbConnection, task: Dict[str, Any]) -> None:
    execute(
        conn,
        f"""
        INSERT INTO tasks ({', '.join(TASK_COLUMNS)})
        VALUES ({', '.join(':' + c for c in TASK_COLUMNS)})
        """,
        {c: task.get(c) for c in TASK_COLUMNS},
    )


def update_task(conn: DbConnection, task_id: str, fields: Dict[str, Any]) -> int:
    columns = [
        c for c in fields
        if c in TASK_COLUMNS and c not in ("id", "project_id", "created_by", "created_at")
    ]
    params = {c: fields[c] for c in columns}
    params["id"] = task_id
    assignments = ", ".join(f"{c} = :{c}" for c in columns) or "id = id"
    cur = execute(conn, f"UPDATE tasks SET {assignments} WHERE id = :id", params)
    return cur.rowcount


def delete_task(conn: DbConnection, task_id: str) -> int:
    cur = execute(conn, "DELETE FROM tasks WHERE id = :id", {"id": task_id})
    return cur.rowcount
