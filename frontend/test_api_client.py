# frontend/test_api_client.py
# Unit tests for the requests-based API client (HTTP layer mocked)

from unittest.mock import MagicMock, patch

import pytest
import requests

from frontend import api_client
from frontend.api_client import ApiError, api_request
from frontend.session import initial_session


BASE = "http://api.test"


def _response(status_code, body=None, text=""):
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 400
    resp.text = text
    if body is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = body
    return resp


@pytest.fixture(autouse=True)
def fixed_base_url(monkeypatch):
    monkeypatch.setattr(api_client, "get_api_base_url", lambda: BASE)


class TestHeaders:
    def test_protected_call_sends_bearer(self):
        with patch("frontend.api_client.requests.get", return_value=_response(200, [])) as get:
            api_client.get_projects(initial_session("tok"))

        args, kwargs = get.call_args
        assert args[0] == f"{BASE}/api/projects"
        assert kwargs["headers"]["Authorization"] == "Bearer tok"

    def test_public_call_never_sends_token(self):
        with patch("frontend.api_client.requests.post", return_value=_response(200, {"token": "t"})) as post:
            api_request("POST", "/api/auth/login", initial_session("stale"), json={"email": "a", "password": "b"})

        headers = post.call_args.kwargs["headers"]
        assert "Authorization" not in headers
        assert headers["Content-Type"] == "application/json"

    def test_anonymous_session_sends_no_auth_header(self):
        with patch("frontend.api_client.requests.get", return_value=_response(200, {})) as get:
            api_request("GET", "/api/auth/me", None)
        assert "Authorization" not in get.call_args.kwargs["headers"]


class TestRequests:
    def test_lookup_passes_email_param(self):
        user = {"id": "u2", "name": "B", "email": "b@x.io"}
        with patch("frontend.api_client.requests.get", return_value=_response(200, user)) as get:
            assert api_client.lookup_user(initial_session("t"), "b@x.io") == user
        assert get.call_args.kwargs["params"] == {"email": "b@x.io"}

    def test_update_task_uses_put_with_body(self):
        with patch("frontend.api_client.requests.put", return_value=_response(200, {"id": "t1"})) as put:
            api_client.update_task(initial_session("t"), "t1", {"status": "review"})
        args, kwargs = put.call_args
        assert args[0] == f"{BASE}/api/tasks/t1"
        assert kwargs["json"] == {"status": "review"}

    def test_delete_project(self):
        body = {"message": "Project removed"}
        with patch("frontend.api_client.requests.delete", return_value=_response(200, body)) as delete:
            assert api_client.delete_project(initial_session("t"), "p1") == body
        assert delete.call_args.args[0] == f"{BASE}/api/projects/p1"

    def test_tasks_by_project_path(self):
        with patch("frontend.api_client.requests.get", return_value=_response(200, [])) as get:
            api_client.get_tasks_by_project(initial_session("t"), "p9")
        assert get.call_args.args[0] == f"{BASE}/api/tasks/project/p9"


class TestErrors:
    def test_backend_message_is_surfaced(self):
        with patch("frontend.api_client.requests.get", return_value=_response(401, {"message": "Not authorized"})):
            with pytest.raises(ApiError) as exc:
                api_client.get_project(initial_session("t"), "p1")
        assert exc.value.status_code == 401
        assert exc.value.message == "Not authorized"
        assert exc.value.is_unauthorized

    def test_non_json_error_body(self):
        with patch("frontend.api_client.requests.get", return_value=_response(502, None, text="Bad gateway")):
            with pytest.raises(ApiError) as exc:
                api_client.get_projects(initial_session("t"))
        assert exc.value.status_code == 502
        assert exc.value.message == "Bad gateway"

    def test_timeout(self):
        with patch("frontend.api_client.requests.get", side_effect=requests.exceptions.Timeout()):
            with pytest.raises(ApiError) as exc:
                api_client.get_projects(initial_session("t"))
        assert exc.value.status_code == 0
        assert "timed out" in exc.value.message

    def test_connection_error(self):
        with patch("frontend.api_client.requests.get", side_effect=requests.exceptions.ConnectionError()):
            with pytest.raises(ApiError) as exc:
                api_client.get_projects(initial_session("t"))
        assert exc.value.status_code == 0
        assert BASE in exc.value.message

    def test_missing_configuration(self, monkeypatch):
        def boom():
            raise RuntimeError("Backend URL not configured")

        monkeypatch.setattr(api_client, "get_api_base_url", boom)
        with pytest.raises(ApiError) as exc:
            api_client.get_projects(initial_session("t"))
        assert exc.value.message.startswith("Configuration error")
