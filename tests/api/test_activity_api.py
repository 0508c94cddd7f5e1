"""Tests for the recent activity feed."""


def _folder(client, name):
    response = client.post("/api/storage-files", data={"isFolder": "true", "name": name})
    assert response.status_code == 201
    return response.json()


def test_newest_first_with_actor(staff_client, manager_client):
    first = _folder(staff_client, "a")
    second = _folder(manager_client, "b")

    logs = staff_client.get("/api/activity-logs").json()

    assert [log["resourceId"] for log in logs[:2]] == [second["id"], first["id"]]
    latest = logs[0]
    assert latest["action"] == "upload"
    assert latest["resourceType"] == "storage"
    assert latest["details"] == {"name": "b", "isFolder": True}
    assert latest["user"] == {
        "id": 2,
        "displayName": "สมชาย มั่นคง",
        "department": "แผนกบุคคล",
        "profileImage": None,
    }


def test_limit(staff_client):
    for i in range(15):
        _folder(staff_client, f"folder-{i}")

    assert len(staff_client.get("/api/activity-logs").json()) == 10
    assert len(staff_client.get("/api/activity-logs", params={"limit": 3}).json()) == 3


def test_limit_bounds(staff_client):
    assert staff_client.get("/api/activity-logs", params={"limit": 0}).status_code == 400
    assert staff_client.get("/api/activity-logs", params={"limit": 101}).status_code == 400


def test_requires_login(client):
    assert client.get("/api/activity-logs").status_code == 401
