"""
frontend/display.py
Formatting helpers shared by the Streamlit pages.

Pure functions over the JSON the backend returns; no Streamlit calls, so they
can be tested directly.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional

import pandas as pd


DEFAULT_COLOR = "#6c757d"

PROJECT_STATUS_COLORS = {
    "completed": "#28a745",
    "in-progress": "#007bff",
    "planning": "#ffc107",
    "on-hold": "#dc3545",
}

TASK_STATUS_COLORS = {
    "completed": "#28a745",
    "review": "#17a2b8",
    "in-progress": "#007bff",
    "todo": "#6c757d",
}

PRIORITY_COLORS = {
    "urgent": "#dc3545",
    "high": "#fd7e14",
    "medium": "#ffc107",
    "low": "#28a745",
}

PROJECT_STATUSES = ["planning", "in-progress", "completed", "on-hold"]
TASK_STATUSES = ["todo", "in-progress", "review", "completed"]
PRIORITIES = ["low", "medium", "high", "urgent"]


def status_color(status: Optional[str]) -> str:
    return PROJECT_STATUS_COLORS.get(status or "", DEFAULT_COLOR)


def task_status_color(status: Optional[str]) -> str:
    return TASK_STATUS_COLORS.get(status or "", DEFAULT_COLOR)


def priority_color(priority: Optional[str]) -> str:
    return PRIORITY_COLORS.get(priority or "", DEFAULT_COLOR)


def badge(label: Optional[str], color: str) -> str:
    """Inline HTML badge for st.markdown(..., unsafe_allow_html=True)."""
    text = (label or "unknown").replace("-", " ").title()
    return (
        f'<span style="background-color:{color};color:white;padding:2px 8px;'
        f'border-radius:10px;font-size:0.8em">{text}</span>'
    )


def parse_date(value: Optional[str]) -> Optional[date]:
    """Date part of an ISO date/datetime string, or None if missing or malformed."""
    if not value:
        return None
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(raw).date()
    except ValueError:
        return None


def format_date(value: Optional[str]) -> str:
    parsed = parse_date(value)
    return parsed.strftime("%b %d, %Y") if parsed else "Not set"


def days_left(due: Optional[str], today: Optional[date] = None) -> str:
    """Countdown label used on the analytics page."""
    due_date = parse_date(due)
    if due_date is None:
        return "No due date"
    remaining = (due_date - (today or date.today())).days
    return f"{remaining} day(s) left" if remaining >= 0 else "Past due"


def user_label(user: Optional[Dict[str, Any]]) -> str:
    if not user:
        return "Unassigned"
    return user.get("name") or user.get("email") or "Unknown"


def project_summary(projects: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Headline numbers for the dashboard.

    Returns:
        {"total", "by_status" (every status present, zero-filled), "average_progress"}
    """
    by_status = {status: 0 for status in PROJECT_STATUSES}
    for project in projects:
        status = project.get("status")
        if status in by_status:
            by_status[status] += 1

    progress = [p.get("progress") or 0 for p in projects]
    average = round(sum(progress) / len(progress), 1) if progress else 0.0
    return {"total": len(projects), "by_status": by_status, "average_progress": average}


def projects_frame(projects: List[Dict[str, Any]], today: Optional[date] = None) -> pd.DataFrame:
    columns = ["Title", "Status", "Priority", "Progress", "Owner", "Members", "End Date", "Deadline"]
    rows = [
        {
            "Title": p.get("title"),
            "Status": p.get("status"),
            "Priority": p.get("priority"),
            "Progress": p.get("progress") or 0,
            "Owner": user_label(p.get("owner")),
            "Members": len(p.get("members") or []),
            "End Date": format_date(p.get("endDate")),
            "Deadline": days_left(p.get("endDate"), today),
        }
        for p in projects
    ]
    return pd.DataFrame(rows, columns=columns)


def tasks_frame(tasks: List[Dict[str, Any]]) -> pd.DataFrame:
    columns = ["Title", "Status", "Priority", "Assigned To", "Created By", "Due Date", "Est. Hours"]
    rows = [
        {
            "Title": t.get("title"),
            "Status": t.get("status"),
            "Priority": t.get("priority"),
            "Assigned To": user_label(t.get("assignedTo")),
            "Created By": user_label(t.get("createdBy")),
            "Due Date": format_date(t.get("dueDate")),
            "Est. Hours": t.get("estimatedHours"),
        }
        for t in tasks
    ]
    return pd.DataFrame(rows, columns=columns)


def task_status_counts(tasks: List[Dict[str, Any]]) -> pd.Series:
    """Count of tasks per status, in workflow order, zero-filled."""
    counts = pd.Series([t.get("status") for t in tasks], dtype="object").value_counts()
    return counts.reindex(TASK_STATUSES, fill_value=0)
