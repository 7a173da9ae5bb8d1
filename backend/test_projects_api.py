"""
API tests for /api/projects: ownership/membership rules, partial updates,
reference expansion and cascade delete.

Run: pytest backend/test_projects_api.py -v
"""

from backend import repositories as repo


def _create(client, user, **body):
    body.setdefault("title", "Project")
    resp = client.post("/api/projects", json=body, headers=user["headers"])
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestAuthentication:
    def test_missing_token_rejected(self, client):
        resp = client.get("/api/projects")
        assert resp.status_code == 401
        assert resp.json() == {"message": "No token, authorization denied"}

    def test_garbage_token_rejected(self, client):
        resp = client.get("/api/projects", headers={"Authorization": "Bearer not-a-jwt"})
        assert resp.status_code == 401
        assert resp.json() == {"message": "Token is not valid"}


class TestCreateProject:
    def test_owner_is_requester_and_refs_expanded(self, client, owner, member):
        created = _create(
            client,
            owner,
            title="Website",
            description="Relaunch",
            priority="high",
            startDate="2024-05-01",
            members=[member["id"]],
        )

        assert created["title"] == "Website"
        assert created["status"] == "planning"
        assert created["priority"] == "high"
        assert created["progress"] == 0
        assert created["startDate"].startswith("2024-05-01")
        assert created["owner"] == {"id": owner["id"], "name": owner["name"], "email": owner["email"]}
        assert created["members"] == [{"id": member["id"], "name": member["name"], "email": member["email"]}]
        assert created["createdAt"] and created["updatedAt"]

    def test_owner_in_payload_is_ignored(self, client, owner, outsider):
        created = _create(client, owner, title="Mine", owner=outsider["id"])
        assert created["owner"]["id"] == owner["id"]

    def test_members_default_to_empty(self, client, owner):
        created = _create(client, owner, title="Solo")
        assert created["members"] == []

    def test_missing_title_is_validation_failure(self, client, owner):
        resp = client.post("/api/projects", json={"description": "no title"}, headers=owner["headers"])
        assert resp.status_code == 500
        assert "title" in resp.json()["message"]

    def test_invalid_status_is_validation_failure(self, client, owner):
        resp = client.post(
            "/api/projects",
            json={"title": "X", "status": "finished"},
            headers=owner["headers"],
        )
        assert resp.status_code == 500
        assert resp.json()["message"].startswith("Validation failed")

    def test_progress_out_of_range_rejected(self, client, owner):
        resp = client.post(
            "/api/projects",
            json={"title": "X", "progress": 150},
            headers=owner["headers"],
        )
        assert resp.status_code == 500
        assert "progress" in resp.json()["message"]

    def test_boolean_progress_rejected(self, client, owner):
        resp = client.post(
            "/api/projects",
            json={"title": "Flag", "progress": True},
            headers=owner["headers"],
        )
        assert resp.status_code == 500
        assert "progress" in resp.json()["message"]
        assert client.get("/api/projects", headers=owner["headers"]).json() == []


class TestListProjects:
    def test_lists_owned_and_shared_only(self, client, owner, member, outsider, project):
        other = _create(client, outsider, title="Private")

        owner_ids = [p["id"] for p in client.get("/api/projects", headers=owner["headers"]).json()]
        member_ids = [p["id"] for p in client.get("/api/projects", headers=member["headers"]).json()]
        outsider_ids = [p["id"] for p in client.get("/api/projects", headers=outsider["headers"]).json()]

        assert owner_ids == [project["id"]]
        assert member_ids == [project["id"]]
        assert outsider_ids == [other["id"]]

    def test_newest_first(self, client, owner):
        first = _create(client, owner, title="First")
        second = _create(client, owner, title="Second")

        listed = client.get("/api/projects", headers=owner["headers"]).json()
        assert [p["id"] for p in listed] == [second["id"], first["id"]]

    def test_empty_for_new_user(self, client, outsider):
        resp = client.get("/api/projects", headers=outsider["headers"])
        assert resp.status_code == 200
        assert resp.json() == []


class TestGetProject:
    def test_owner_and_member_can_read(self, client, owner, member, project):
        for user in (owner, member):
            resp = client.get(f"/api/projects/{project['id']}", headers=user["headers"])
            assert resp.status_code == 200
            assert resp.json()["id"] == project["id"]

    def test_outsider_unauthorized(self, client, outsider, project):
        resp = client.get(f"/api/projects/{project['id']}", headers=outsider["headers"])
        assert resp.status_code == 401
        assert resp.json() == {"message": "Not authorized"}

    def test_unknown_id_not_found_even_for_outsider(self, client, outsider):
        resp = client.get("/api/projects/does-not-exist", headers=outsider["headers"])
        assert resp.status_code == 404
        assert resp.json() == {"message": "Project not found"}


class TestUpdateProject:
    def test_partial_update_keeps_other_fields(self, client, owner, member, project):
        resp = client.put(
            f"/api/projects/{project['id']}",
            json={"status": "completed"},
            headers=owner["headers"],
        )
        assert resp.status_code == 200
        updated = resp.json()

        assert updated["status"] == "completed"
        for key in ("title", "description", "priority", "progress", "startDate", "endDate", "members", "owner"):
            assert updated[key] == project[key]
        assert updated["createdAt"] == project["createdAt"]

    def test_member_cannot_update(self, client, member, project):
        resp = client.put(
            f"/api/projects/{project['id']}",
            json={"title": "Hijacked"},
            headers=member["headers"],
        )
        assert resp.status_code == 401

    def test_outsider_cannot_update(self, client, outsider, project):
        resp = client.put(
            f"/api/projects/{project['id']}",
            json={"title": "Hijacked"},
            headers=outsider["headers"],
        )
        assert resp.status_code == 401

    def test_owner_cannot_be_reassigned(self, client, owner, outsider, project):
        resp = client.put(
            f"/api/projects/{project['id']}",
            json={"owner": outsider["id"], "title": "Renamed"},
            headers=owner["headers"],
        )
        assert resp.status_code == 200
        assert resp.json()["owner"]["id"] == owner["id"]
        assert resp.json()["title"] == "Renamed"

    def test_members_replaced_and_access_follows(self, client, owner, member, outsider, project):
        resp = client.put(
            f"/api/projects/{project['id']}",
            json={"members": [outsider["id"]]},
            headers=owner["headers"],
        )
        assert resp.status_code == 200
        assert [m["id"] for m in resp.json()["members"]] == [outsider["id"]]

        assert client.get(f"/api/projects/{project['id']}", headers=outsider["headers"]).status_code == 200
        assert client.get(f"/api/projects/{project['id']}", headers=member["headers"]).status_code == 401

    def test_blank_title_is_validation_failure(self, client, owner, project):
        resp = client.put(
            f"/api/projects/{project['id']}",
            json={"title": "   "},
            headers=owner["headers"],
        )
        assert resp.status_code == 500
        assert "title" in resp.json()["message"]

        unchanged = client.get(f"/api/projects/{project['id']}", headers=owner["headers"]).json()
        assert unchanged["title"] == "Launch"

    def test_boolean_progress_rejected(self, client, owner, project):
        resp = client.put(
            f"/api/projects/{project['id']}",
            json={"progress": True},
            headers=owner["headers"],
        )
        assert resp.status_code == 500
        assert "progress" in resp.json()["message"]

        unchanged = client.get(f"/api/projects/{project['id']}", headers=owner["headers"]).json()
        assert unchanged["progress"] == 0

    def test_unknown_project_not_found(self, client, owner):
        resp = client.put("/api/projects/missing", json={"title": "x"}, headers=owner["headers"])
        assert resp.status_code == 404


class TestDeleteProject:
    def test_owner_deletes_then_not_found(self, client, owner, project):
        resp = client.delete(f"/api/projects/{project['id']}", headers=owner["headers"])
        assert resp.status_code == 200
        assert resp.json() == {"message": "Project removed"}

        assert client.get(f"/api/projects/{project['id']}", headers=owner["headers"]).status_code == 404
        again = client.delete(f"/api/projects/{project['id']}", headers=owner["headers"])
        assert again.status_code == 404

    def test_member_cannot_delete(self, client, owner, member, project):
        resp = client.delete(f"/api/projects/{project['id']}", headers=member["headers"])
        assert resp.status_code == 401
        assert client.get(f"/api/projects/{project['id']}", headers=owner["headers"]).status_code == 200

    def test_tasks_removed_with_project(self, client, conn, owner, member, project):
        task = client.post(
            "/api/tasks",
            json={"title": "Write copy", "project": project["id"]},
            headers=member["headers"],
        ).json()

        client.delete(f"/api/projects/{project['id']}", headers=owner["headers"])

        assert repo.get_task(conn, task["id"]) is None
        assert client.get(f"/api/tasks/{task['id']}", headers=owner["headers"]).status_code == 404


class TestDanglingReferences:
    def test_deleted_member_dropped_from_expansion(self, client, conn, owner, member, project):
        conn.execute("DELETE FROM users WHERE id = ?", (member["id"],))
        conn.commit()

        resp = client.get(f"/api/projects/{project['id']}", headers=owner["headers"])
        assert resp.status_code == 200
        assert resp.json()["members"] == []
