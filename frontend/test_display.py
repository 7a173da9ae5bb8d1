# frontend/test_display.py
# Unit tests for the page formatting helpers

from datetime import date

from frontend.display import (
    DEFAULT_COLOR,
    days_left,
    format_date,
    priority_color,
    project_summary,
    projects_frame,
    status_color,
    task_status_color,
    task_status_counts,
    tasks_frame,
    user_label,
)


TODAY = date(2024, 6, 1)


def test_colors():
    assert status_color("completed") == "#28a745"
    assert status_color("on-hold") == "#dc3545"
    assert task_status_color("review") == "#17a2b8"
    assert priority_color("urgent") == "#dc3545"
    assert status_color(None) == DEFAULT_COLOR
    assert priority_color("bogus") == DEFAULT_COLOR


def test_days_left():
    assert days_left(None, TODAY) == "No due date"
    assert days_left("2024-06-01", TODAY) == "0 day(s) left"
    assert days_left("2024-06-11T09:30:00Z", TODAY) == "10 day(s) left"
    assert days_left("2024-05-31", TODAY) == "Past due"
    assert days_left("garbage", TODAY) == "No due date"


def test_format_date():
    assert format_date("2024-05-01T00:00:00") == "May 01, 2024"
    assert format_date(None) == "Not set"


def test_user_label():
    assert user_label(None) == "Unassigned"
    assert user_label({"name": "Ada", "email": "a@x.io"}) == "Ada"
    assert user_label({"name": "", "email": "a@x.io"}) == "a@x.io"


def test_project_summary():
    projects = [
        {"status": "planning", "progress": 0},
        {"status": "in-progress", "progress": 50},
        {"status": "in-progress", "progress": 25},
        {"status": "completed", "progress": 100},
    ]
    summary = project_summary(projects)
    assert summary["total"] == 4
    assert summary["by_status"] == {"planning": 1, "in-progress": 2, "completed": 1, "on-hold": 0}
    assert summary["average_progress"] == 43.8


def test_project_summary_empty():
    assert project_summary([]) == {
        "total": 0,
        "by_status": {"planning": 0, "in-progress": 0, "completed": 0, "on-hold": 0},
        "average_progress": 0.0,
    }


def test_projects_frame():
    projects = [{
        "id": "p1",
        "title": "Launch",
        "status": "planning",
        "priority": "high",
        "progress": 10,
        "owner": {"id": "u1", "name": "Ada", "email": "a@x.io"},
        "members": [{"id": "u2", "name": "Bo", "email": "b@x.io"}],
        "endDate": "2024-06-03",
    }]
    frame = projects_frame(projects, today=TODAY)
    assert list(frame.columns) == ["Title", "Status", "Priority", "Progress", "Owner", "Members", "End Date", "Deadline"]
    row = frame.iloc[0]
    assert row["Owner"] == "Ada"
    assert row["Members"] == 1
    assert row["Deadline"] == "2 day(s) left"


def test_frames_empty_keep_columns():
    assert projects_frame([]).empty
    assert list(tasks_frame([]).columns)[0] == "Title"


def test_tasks_frame_unassigned():
    frame = tasks_frame([{"title": "T", "status": "todo", "priority": "low", "assignedTo": None,
                          "createdBy": {"name": "Ada"}, "dueDate": None, "estimatedHours": 2.5}])
    assert frame.iloc[0]["Assigned To"] == "Unassigned"
    assert frame.iloc[0]["Due Date"] == "Not set"


def test_task_status_counts_in_workflow_order():
    counts = task_status_counts([{"status": "review"}, {"status": "todo"}, {"status": "review"}])
    assert list(counts.index) == ["todo", "in-progress", "review", "completed"]
    assert counts.tolist() == [1, 0, 2, 0]
    assert task_status_counts([]).tolist() == [0, 0, 0, 0]
