"""
frontend/api_client.py
Centralized API client for all backend requests.

This module ensures:
1. Protected calls carry the Authorization header of the Session passed in
2. Every non-2xx response becomes an ApiError with the backend's message
3. Centralized API base URL configuration (local/staging/prod)

It never reads or writes Streamlit state; app.py decides how to show errors
and which session transition (e.g. AUTH_ERROR on 401) to apply.
"""

from typing import Any, Dict, List, Literal, Optional

import requests

try:
    from frontend.config import IS_DEV, REQUEST_TIMEOUT_SECONDS, get_api_base_url
    from frontend.session import Session, auth_header
except ModuleNotFoundError:
    from config import IS_DEV, REQUEST_TIMEOUT_SECONDS, get_api_base_url
    from session import Session, auth_header


PUBLIC_PATHS = ("/api/auth/login", "/api/auth/register")


class ApiError(Exception):
    """
    A failed backend call.

    status_code is the HTTP status, or 0 when no response was received
    (timeout, connection refused, missing configuration).
    """

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


def is_public_endpoint(path: str) -> bool:
    return path in PUBLIC_PATHS


def _error_message(resp: requests.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return resp.text[:200] or f"HTTP {resp.status_code}"


def api_request(
    method: Literal["GET", "POST", "PUT", "DELETE"],
    path: str,
    session: Optional[Session] = None,
    json: Optional[Dict[str, Any]] = None,
    params: Optional[Dict[str, Any]] = None,
    timeout: Optional[int] = None,
) -> Any:
    """
    Make an API request and return the decoded JSON body.

    This is the ONLY function that should make backend API calls.

    Args:
        method: HTTP method (GET, POST, PUT, DELETE)
        path: API endpoint path (e.g., "/api/projects")
        session: Current client session; its token is attached for protected paths
        json: JSON body for POST/PUT requests
        params: Query parameters
        timeout: Request timeout in seconds

    Raises:
        ApiError: On any non-2xx response or transport failure
    """
    try:
        base_url = get_api_base_url()
    except (RuntimeError, ValueError) as e:
        raise ApiError(0, f"Configuration error: {e}")

    url = f"{base_url}{path}"
    timeout = timeout or REQUEST_TIMEOUT_SECONDS

    headers = {"Accept": "application/json"}
    if json is not None:
        headers["Content-Type"] = "application/json"
    if not is_public_endpoint(path):
        headers.update(auth_header(session))

    try:
        if method == "GET":
            resp = requests.get(url, headers=headers, params=params, timeout=timeout)
        elif method == "POST":
            resp = requests.post(url, json=json, headers=headers, params=params, timeout=timeout)
        elif method == "PUT":
            resp = requests.put(url, json=json, headers=headers, params=params, timeout=timeout)
        elif method == "DELETE":
            resp = requests.delete(url, headers=headers, params=params, timeout=timeout)
        else:
            raise ValueError(f"Unsupported HTTP method: {method}")
    except requests.exceptions.Timeout:
        if IS_DEV:
            print(f"[API] Timeout on {method} {path}")
        raise ApiError(0, f"Request timed out after {timeout}s. Please try again.")
    except requests.exceptions.ConnectionError:
        if IS_DEV:
            print(f"[API] Connection error on {method} {path}")
        raise ApiError(0, f"Cannot connect to backend at {base_url}.")

    if not resp.ok:
        message = _error_message(resp)
        if IS_DEV:
            print(f"[API] {resp.status_code} on {method} {path}: {message}")
        raise ApiError(resp.status_code, message)

    return resp.json()


# ---------------------------------------------------------
# Auth
# ---------------------------------------------------------
def register(name: str, email: str, password: str) -> Dict[str, Any]:
    return api_request("POST", "/api/auth/register", json={"name": name, "email": email, "password": password})


def login(email: str, password: str) -> Dict[str, Any]:
    return api_request("POST", "/api/auth/login", json={"email": email, "password": password})


def get_profile(session: Session) -> Dict[str, Any]:
    return api_request("GET", "/api/auth/me", session)


def lookup_user(session: Session, email: str) -> Dict[str, Any]:
    return api_request("GET", "/api/users/lookup", session, params={"email": email})


# ---------------------------------------------------------
# Projects
# ---------------------------------------------------------
def get_projects(session: Session) -> List[Dict[str, Any]]:
    return api_request("GET", "/api/projects", session)


def get_project(session: Session, project_id: str) -> Dict[str, Any]:
    return api_request("GET", f"/api/projects/{project_id}", session)


def create_project(session: Session, data: Dict[str, Any]) -> Dict[str, Any]:
    return api_request("POST", "/api/projects", session, json=data)


def update_project(session: Session, project_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    return api_request("PUT", f"/api/projects/{project_id}", session, json=data)


def delete_project(session: Session, project_id: str) -> Dict[str, Any]:
    return api_request("DELETE", f"/api/projects/{project_id}", session)


# ---------------------------------------------------------
# Tasks
# ---------------------------------------------------------
def get_tasks_by_project(session: Session, project_id: str) -> List[Dict[str, Any]]:
    return api_request("GET", f"/api/tasks/project/{project_id}", session)


def get_task(session: Session, task_id: str) -> Dict[str, Any]:
    return api_request("GET", f"/api/tasks/{task_id}", session)


def create_task(session: Session, data: Dict[str, Any]) -> Dict[str, Any]:
    return api_request("POST", "/api/tasks", session, json=data)


def update_task(session: Session, task_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    return api_request("PUT", f"/api/tasks/{task_id}", session, json=data)


def delete_task(session: Session, task_id: str) -> Dict[str, Any]:
    return api_request("DELETE", f"/api/tasks/{task_id}", session)
