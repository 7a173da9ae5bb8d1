# frontend/app.py
# Project Manager – projects, members and tasks
#
# Run from repo root: streamlit run frontend/app.py
# Or from frontend folder: streamlit run app.py

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

import streamlit as st

# Import environment config (robust fallback for different run contexts)
try:
    from frontend.config import ENV, IS_DEV, ENABLE_DEBUG_UI, get_api_base_url
except ModuleNotFoundError:
    from config import ENV, IS_DEV, ENABLE_DEBUG_UI, get_api_base_url

try:
    from frontend.session import Action, ActionType, Session, display_name, initial_session, reduce
except ModuleNotFoundError:
    from session import Action, ActionType, Session, display_name, initial_session, reduce

try:
    from frontend import api_client as api
    from frontend.api_client import ApiError
except ModuleNotFoundError:
    import api_client as api
    from api_client import ApiError

try:
    from frontend.display import (
        PRIORITIES, PROJECT_STATUSES, TASK_STATUSES,
        badge, days_left, format_date, parse_date, priority_color, project_summary,
        projects_frame, status_color, task_status_color, task_status_counts, tasks_frame,
        user_label,
    )
except ModuleNotFoundError:
    from display import (
        PRIORITIES, PROJECT_STATUSES, TASK_STATUSES,
        badge, days_left, format_date, parse_date, priority_color, project_summary,
        projects_frame, status_color, task_status_color, task_status_counts, tasks_frame,
        user_label,
    )


st.set_page_config(page_title="Project Manager", page_icon="📋", layout="wide")

CUSTOM_CSS = """
<style>
.stButton > button {
    background-color: #1f77b4 !important;
    color: white !important;
    border: none !important;
}

.stButton > button:hover {
    background-color: #2e86c1 !important;
}

.stProgress > div > div > div > div {
    background-color: #1f77b4 !important;
}
</style>
"""

st.markdown(CUSTOM_CSS, unsafe_allow_html=True)

PAGES = ["Dashboard", "Projects", "New Project", "Analytics", "Settings"]

# 401 bodies that mean the token itself was rejected (vs. "Not authorized" on a project)
SESSION_ENDED_MESSAGES = ("No token, authorization denied", "Token is not valid", "User not found")


# --------------------------------------------------------------------
# State helpers
# --------------------------------------------------------------------

def init_state() -> None:
    ss = st.session_state

    # The one and only auth session. Replaced wholesale by dispatch(), never edited.
    ss.setdefault("session", initial_session())

    ss.setdefault("nav_page", None)
    ss.setdefault("nav_radio", PAGES[0])
    ss.setdefault("selected_project_id", None)
    ss.setdefault("editing_project", False)


def apply_pending_navigation() -> None:
    """
    Apply a page change requested by go_to() on the previous run.

    Runs before any widget is created, so the sidebar radio key can still be
    written safely.
    """
    ss = st.session_state
    page = ss.pop("_post_nav", None)
    if page:
        ss["nav_page"] = page
        if page in PAGES:
            ss["nav_radio"] = page


def get_session() -> Session:
    return st.session_state["session"]


def dispatch(action: Action) -> Session:
    """Apply an action to the stored session and return the new one."""
    new_session = reduce(get_session(), action)
    st.session_state["session"] = new_session
    if IS_DEV:
        print(f"[SESSION] {action.type.value} -> authenticated={new_session.is_authenticated}")
    return new_session


def go_to(page: str, project_id: Optional[str] = None) -> None:
    """
    Navigation helper - single place that changes pages.

    Records the target (and optionally the selected project) then reruns;
    apply_pending_navigation() switches the page on the next run.
    """
    st.session_state["_post_nav"] = page
    if project_id is not None:
        st.session_state["selected_project_id"] = project_id
    st.session_state["editing_project"] = False
    st.rerun()


def resolve_session() -> Session:
    """Settle a loading session: load the profile for a stored token, else anonymous."""
    session = get_session()
    if not session.loading:
        return session
    if not session.token:
        return dispatch(Action(ActionType.AUTH_ERROR))
    try:
        profile = api.get_profile(session)
    except ApiError as e:
        print(f"[SESSION] Profile load failed: {e.status_code}")
        return dispatch(Action(ActionType.AUTH_ERROR))
    return dispatch(Action(ActionType.LOAD_USER, profile))


def handle_api_error(err: ApiError, operation: str = "operation") -> None:
    """Show an API failure. A rejected token ends the session instead."""
    if err.is_unauthorized and err.message in SESSION_ENDED_MESSAGES:
        dispatch(Action(ActionType.AUTH_ERROR))
        go_to("Login")
    if err.is_unauthorized:
        st.error(f"Not authorized to {operation}.")
    elif err.is_not_found:
        st.error(f"Not found: {err.message}")
    elif err.status_code == 0:
        st.error(err.message)
    else:
        st.error(f"Failed to {operation}: {err.message}")


def load_projects(session: Session) -> Optional[List[Dict[str, Any]]]:
    try:
        return api.get_projects(session)
    except ApiError as e:
        handle_api_error(e, "load projects")
        return None


def _date_input(label: str, value: Optional[str], key: str) -> Optional[date]:
    return st.date_input(label, value=parse_date(value), key=key, format="YYYY-MM-DD")


def _iso_or_none(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


# --------------------------------------------------------------------
# Layout
# --------------------------------------------------------------------

def _on_nav_change() -> None:
    st.session_state["nav_page"] = st.session_state["nav_radio"]
    st.session_state["editing_project"] = False


def render_sidebar(session: Session) -> None:
    with st.sidebar:
        st.markdown("## 📋 Project Manager")

        if session.is_authenticated:
            st.caption(f"Signed in as **{display_name(session)}**")
            st.radio("Navigate", PAGES, key="nav_radio", on_change=_on_nav_change)
            if st.session_state.get("nav_page") == "Project Details":
                if st.button("← Back to Dashboard", use_container_width=True):
                    go_to("Dashboard")

            st.markdown("---")
            if st.button("Logout", use_container_width=True, key="logout_btn"):
                dispatch(Action(ActionType.LOGOUT))
                go_to("Login")

        if ENABLE_DEBUG_UI:
            st.markdown("---")
            try:
                st.caption(f"**API:** {get_api_base_url()}")
            except (RuntimeError, ValueError) as e:
                st.error(f"API config error: {str(e)[:60]}")
            st.caption(f"**Environment:** {ENV}")
            st.caption(f"**Token present:** {bool(session.token)}")


# --------------------------------------------------------------------
# Login / Register
# --------------------------------------------------------------------

def render_login(session: Session) -> None:
    st.header("Login")

    with st.form("login_form"):
        email = st.text_input("Email", key="login_email")
        password = st.text_input("Password", type="password", key="login_password")
        submitted = st.form_submit_button("Login")

    if submitted:
        if not email or not password:
            st.error("Please enter email and password.")
            return
        try:
            data = api.login(email, password)
        except ApiError as e:
            st.error(f"Login failed: {e.message}")
            return
        dispatch(Action(ActionType.LOGIN_SUCCESS, data))
        go_to("Dashboard")

    st.divider()
    st.subheader("Register New Account")

    with st.form("register_form"):
        reg_name = st.text_input("Name", key="register_name")
        reg_email = st.text_input("Email", key="register_email")
        reg_password = st.text_input("Password", type="password", key="register_password")
        reg_confirm = st.text_input("Confirm Password", type="password", key="register_confirm")
        reg_submitted = st.form_submit_button("Register")

    if reg_submitted:
        if not reg_name or not reg_email or not reg_password:
            st.error("Please fill in all registration fields.")
            return
        if reg_password != reg_confirm:
            st.error("Passwords do not match.")
            return
        if len(reg_password) < 6:
            st.error("Password must be at least 6 characters.")
            return
        try:
            data = api.register(reg_name, reg_email, reg_password)
        except ApiError as e:
            st.error(f"Registration failed: {e.message}")
            return
        dispatch(Action(ActionType.REGISTER_SUCCESS, data))
        go_to("Dashboard")


# --------------------------------------------------------------------
# Dashboard
# --------------------------------------------------------------------

def render_project_card(project: Dict[str, Any]) -> None:
    with st.container(border=True):
        st.markdown(f"#### {project.get('title')}")
        st.markdown(
            badge(project.get("status"), status_color(project.get("status")))
            + " "
            + badge(project.get("priority"), priority_color(project.get("priority"))),
            unsafe_allow_html=True,
        )
        if project.get("description"):
            st.caption(project["description"][:160])
        progress = project.get("progress") or 0
        st.progress(progress / 100, text=f"{progress}% complete")
        st.caption(
            f"Owner: {user_label(project.get('owner'))} · "
            f"{len(project.get('members') or [])} member(s) · "
            f"Due {format_date(project.get('endDate'))}"
        )
        if st.button("Open", key=f"open_{project['id']}"):
            go_to("Project Details", project_id=project["id"])


def render_dashboard(session: Session) -> None:
    st.title(f"Welcome, {display_name(session)}")

    projects = load_projects(session)
    if projects is None:
        return

    summary = project_summary(projects)
    cols = st.columns(5)
    cols[0].metric("Projects", summary["total"])
    cols[1].metric("In progress", summary["by_status"]["in-progress"])
    cols[2].metric("Completed", summary["by_status"]["completed"])
    cols[3].metric("On hold", summary["by_status"]["on-hold"])
    cols[4].metric("Avg. progress", f"{summary['average_progress']}%")

    if st.button("+ Create New Project", key="dashboard_new_project"):
        go_to("New Project")

    if not projects:
        st.info("No projects yet. Create your first project to get started.")
        return

    grid = st.columns(3)
    for i, project in enumerate(projects):
        with grid[i % 3]:
            render_project_card(project)


# --------------------------------------------------------------------
# Projects list + create
# --------------------------------------------------------------------

def render_projects(session: Session) -> None:
    st.header("Projects")

    projects = load_projects(session)
    if projects is None:
        return
    if not projects:
        st.info("No projects found.")
        return

    st.dataframe(projects_frame(projects), use_container_width=True, hide_index=True)

    titles = {p["id"]: p["title"] for p in projects}
    selected = st.selectbox("Open project", list(titles), format_func=lambda pid: titles[pid])
    if st.button("Open selected project"):
        go_to("Project Details", project_id=selected)


def render_create_project(session: Session) -> None:
    st.header("Create New Project")

    with st.form("create_project_form"):
        title = st.text_input("Project Title *")
        description = st.text_area("Description")
        c1, c2 = st.columns(2)
        status = c1.selectbox("Status", PROJECT_STATUSES)
        priority = c2.selectbox("Priority", PRIORITIES, index=1)
        c3, c4 = st.columns(2)
        start_date = c3.date_input("Start Date", value=None, format="YYYY-MM-DD")
        end_date = c4.date_input("End Date", value=None, format="YYYY-MM-DD")
        progress = st.slider("Progress (%)", 0, 100, 0)
        submitted = st.form_submit_button("Create Project")

    if not submitted:
        return
    if not title.strip():
        st.error("Project title is required.")
        return
    if start_date and end_date and end_date < start_date:
        st.error("End date cannot be before start date.")
        return

    payload = {
        "title": title.strip(),
        "description": description,
        "status": status,
        "priority": priority,
        "startDate": _iso_or_none(start_date),
        "endDate": _iso_or_none(end_date),
        "progress": progress,
    }
    try:
        created = api.create_project(session, payload)
    except ApiError as e:
        handle_api_error(e, "create project")
        return
    st.success("Project created.")
    go_to("Project Details", project_id=created["id"])


# --------------------------------------------------------------------
# Project details
# --------------------------------------------------------------------

def render_project_edit_form(session: Session, project: Dict[str, Any]) -> None:
    with st.form("edit_project_form"):
        title = st.text_input("Project Title *", value=project.get("title") or "")
        description = st.text_area("Description", value=project.get("description") or "")
        c1, c2 = st.columns(2)
        status = c1.selectbox(
            "Status", PROJECT_STATUSES,
            index=PROJECT_STATUSES.index(project["status"]) if project.get("status") in PROJECT_STATUSES else 0,
        )
        priority = c2.selectbox(
            "Priority", PRIORITIES,
            index=PRIORITIES.index(project["priority"]) if project.get("priority") in PRIORITIES else 1,
        )
        c3, c4 = st.columns(2)
        with c3:
            start_date = _date_input("Start Date", project.get("startDate"), "edit_start")
        with c4:
            end_date = _date_input("End Date", project.get("endDate"), "edit_end")
        progress = st.slider("Progress (%)", 0, 100, int(project.get("progress") or 0))

        save, cancel = st.columns(2)
        saved = save.form_submit_button("Save Changes")
        cancelled = cancel.form_submit_button("Cancel")

    if cancelled:
        st.session_state["editing_project"] = False
        st.rerun()
    if not saved:
        return

    changes = {
        "title": title.strip(),
        "description": description,
        "status": status,
        "priority": priority,
        "startDate": _iso_or_none(start_date),
        "endDate": _iso_or_none(end_date),
        "progress": progress,
    }
    try:
        api.update_project(session, project["id"], changes)
    except ApiError as e:
        handle_api_error(e, "update project")
        return
    st.session_state["editing_project"] = False
    st.rerun()


def render_members(session: Session, project: Dict[str, Any], is_owner: bool) -> None:
    st.subheader("Team")
    owner = project.get("owner")
    st.markdown(f"**Owner:** {user_label(owner)}" + (f" ({owner['email']})" if owner else ""))

    members = project.get("members") or []
    if members:
        for m in members:
            cols = st.columns([4, 1])
            cols[0].write(f"{m['name']} ({m['email']})")
            if is_owner and cols[1].button("Remove", key=f"remove_member_{m['id']}"):
                remaining = [x["id"] for x in members if x["id"] != m["id"]]
                try:
                    api.update_project(session, project["id"], {"members": remaining})
                except ApiError as e:
                    handle_api_error(e, "remove member")
                    return
                st.rerun()
    else:
        st.caption("No members yet.")

    if not is_owner:
        return

    with st.form("invite_member_form", clear_on_submit=True):
        email = st.text_input("Invite by email")
        invited = st.form_submit_button("Add Member")

    if invited and email.strip():
        try:
            user = api.lookup_user(session, email.strip())
        except ApiError as e:
            if e.is_not_found:
                st.error(f"No user registered with {email.strip()}.")
            else:
                handle_api_error(e, "look up user")
            return
        ids = [m["id"] for m in members]
        if user["id"] == (owner or {}).get("id") or user["id"] in ids:
            st.info(f"{user['name']} is already on this project.")
            return
        try:
            api.update_project(session, project["id"], {"members": ids + [user["id"]]})
        except ApiError as e:
            handle_api_error(e, "add member")
            return
        st.rerun()


def render_task_form(session: Session, project: Dict[str, Any]) -> None:
    people = [project["owner"]] if project.get("owner") else []
    people += project.get("members") or []
    assignees = {"": "Unassigned", **{p["id"]: p["name"] for p in people}}

    with st.expander("+ Add Task"):
        with st.form("create_task_form", clear_on_submit=True):
            title = st.text_input("Task Title *")
            description = st.text_area("Description", key="task_description")
            c1, c2 = st.columns(2)
            status = c1.selectbox("Status", TASK_STATUSES, key="task_status")
            priority = c2.selectbox("Priority", PRIORITIES, index=1, key="task_priority")
            c3, c4, c5 = st.columns(3)
            assigned_to = c3.selectbox("Assign To", list(assignees), format_func=lambda uid: assignees[uid])
            due_date = c4.date_input("Due Date", value=None, format="YYYY-MM-DD", key="task_due")
            hours = c5.number_input("Estimated Hours", min_value=0.0, step=0.5, value=0.0)
            submitted = st.form_submit_button("Create Task")

    if not submitted:
        return
    if not title.strip():
        st.error("Task title is required.")
        return

    payload = {
        "title": title.strip(),
        "description": description,
        "status": status,
        "priority": priority,
        "project": project["id"],
        "assignedTo": assigned_to or None,
        "dueDate": _iso_or_none(due_date),
        "estimatedHours": hours or None,
    }
    try:
        api.create_task(session, payload)
    except ApiError as e:
        handle_api_error(e, "create task")
        return
    st.rerun()


def render_task_row(session: Session, task: Dict[str, Any]) -> None:
    with st.container(border=True):
        cols = st.columns([4, 2, 2, 1])
        with cols[0]:
            st.markdown(f"**{task['title']}**")
            st.markdown(
                badge(task.get("status"), task_status_color(task.get("status")))
                + " "
                + badge(task.get("priority"), priority_color(task.get("priority"))),
                unsafe_allow_html=True,
            )
            if task.get("description"):
                st.caption(task["description"])
            st.caption(
                f"Assigned to {user_label(task.get('assignedTo'))} · "
                f"Due {format_date(task.get('dueDate'))} · "
                f"Created by {user_label(task.get('createdBy'))}"
            )
        current = task.get("status")
        new_status = cols[1].selectbox(
            "Status",
            TASK_STATUSES,
            index=TASK_STATUSES.index(current) if current in TASK_STATUSES else 0,
            key=f"status_{task['id']}",
            label_visibility="collapsed",
        )
        if new_status != current:
            try:
                api.update_task(session, task["id"], {"status": new_status})
            except ApiError as e:
                handle_api_error(e, "update task")
                return
            st.rerun()
        if task.get("estimatedHours") is not None:
            cols[2].caption(f"{task['estimatedHours']} h estimated")
        if cols[3].button("Delete", key=f"delete_task_{task['id']}"):
            try:
                api.delete_task(session, task["id"])
            except ApiError as e:
                handle_api_error(e, "delete task")
                return
            st.rerun()


def render_project_details(session: Session) -> None:
    project_id = st.session_state.get("selected_project_id")
    if not project_id:
        st.warning("No project selected.")
        return

    try:
        project = api.get_project(session, project_id)
        tasks = api.get_tasks_by_project(session, project_id)
    except ApiError as e:
        handle_api_error(e, "load project")
        if st.button("Back to Dashboard"):
            go_to("Dashboard")
        return

    is_owner = (project.get("owner") or {}).get("id") == (session.user or {}).get("id")

    if st.session_state.get("editing_project") and is_owner:
        st.header("Edit Project")
        render_project_edit_form(session, project)
        return

    header, actions = st.columns([4, 2])
    with header:
        st.title(project["title"])
        st.markdown(
            badge(project.get("status"), status_color(project.get("status")))
            + " "
            + badge(project.get("priority"), priority_color(project.get("priority"))),
            unsafe_allow_html=True,
        )
    if is_owner:
        with actions:
            if st.button("Edit Project", key="edit_project_btn"):
                st.session_state["editing_project"] = True
                st.rerun()
            confirm = st.checkbox("Also delete all tasks", key="confirm_delete_project")
            if st.button("Delete Project", key="delete_project_btn", disabled=not confirm):
                try:
                    api.delete_project(session, project["id"])
                except ApiError as e:
                    handle_api_error(e, "delete project")
                    return
                go_to("Dashboard")

    if project.get("description"):
        st.write(project["description"])

    progress = project.get("progress") or 0
    st.progress(progress / 100, text=f"{progress}% complete")
    c1, c2, c3 = st.columns(3)
    c1.metric("Start", format_date(project.get("startDate")))
    c2.metric("End", format_date(project.get("endDate")))
    c3.metric("Deadline", days_left(project.get("endDate")))

    left, right = st.columns([2, 1])
    with right:
        render_members(session, project, is_owner)
    with left:
        st.subheader(f"Tasks ({len(tasks)})")
        render_task_form(session, project)
        if not tasks:
            st.caption("No tasks yet.")
        for task in tasks:
            render_task_row(session, task)


# --------------------------------------------------------------------
# Analytics / Settings
# --------------------------------------------------------------------

def render_analytics(session: Session) -> None:
    st.header("Analytics")

    projects = load_projects(session)
    if projects is None:
        return
    if not projects:
        st.info("No projects found.")
        return

    frame = projects_frame(projects)
    st.subheader("Projects by status")
    st.bar_chart(frame["Status"].value_counts())

    st.subheader("Deadlines")
    st.dataframe(frame[["Title", "Status", "Progress", "End Date", "Deadline"]], use_container_width=True, hide_index=True)

    titles = {p["id"]: p["title"] for p in projects}
    selected = st.selectbox("Task breakdown for", list(titles), format_func=lambda pid: titles[pid])
    try:
        tasks = api.get_tasks_by_project(session, selected)
    except ApiError as e:
        handle_api_error(e, "load tasks")
        return
    if tasks:
        st.bar_chart(task_status_counts(tasks))
        st.dataframe(tasks_frame(tasks), use_container_width=True, hide_index=True)
    else:
        st.caption("No tasks in this project.")


def render_settings(session: Session) -> None:
    st.header("Settings")
    if not session.user:
        st.info("Loading user info...")
        return
    st.markdown(f"**Name:** {session.user.get('name')}")
    st.markdown(f"**Email:** {session.user.get('email')}")


def main() -> None:
    init_state()
    apply_pending_navigation()
    session = resolve_session()

    ss = st.session_state
    if not session.is_authenticated:
        ss["nav_page"] = "Login"
    elif not ss.get("nav_page") or ss["nav_page"] == "Login":
        ss["nav_page"] = "Dashboard"

    nav_page = ss["nav_page"]
    print(f"[ROUTING] page={nav_page} | token_present={bool(session.token)}")

    render_sidebar(session)

    if nav_page == "Login":
        render_login(session)
    elif nav_page == "Dashboard":
        render_dashboard(session)
    elif nav_page == "Projects":
        render_projects(session)
    elif nav_page == "New Project":
        render_create_project(session)
    elif nav_page == "Project Details":
        render_project_details(session)
    elif nav_page == "Analytics":
        render_analytics(session)
    elif nav_page == "Settings":
        render_settings(session)
    else:
        ss["nav_page"] = "Dashboard"
        render_dashboard(session)


if __name__ == "__main__":
    main()
