"""Tests for register, login, logout and the user directory."""

import pytest


def _register(client, username="nattaya", password="secret99"):
    return client.post("/api/register", json={
        "username": username,
        "password": password,
        "displayName": "ณัฐญา ใจงาม",
        "department": "แผนกเภสัชกรรม",
    })


class TestRegister:

    def test_register_creates_staff_and_logs_in(self, client):
        response = _register(client)

        assert response.status_code == 201
        body = response.json()
        assert body["username"] == "nattaya"
        assert body["role"] == "staff"
        assert body["displayName"] == "ณัฐญา ใจงาม"
        assert "password" not in body
        assert "passwordHash" not in body

        me = client.get("/api/user")
        assert me.status_code == 200
        assert me.json()["id"] == body["id"]

    def test_duplicate_username(self, client):
        response = _register(client, username="admin")
        assert response.status_code == 400
        assert response.json() == {"error": "Username already exists"}

    def test_short_password(self, client):
        response = _register(client, password="123")
        assert response.status_code == 400
        assert "error" in response.json()

    def test_role_in_body_is_ignored(self, client):
        response = client.post("/api/register", json={
            "username": "mallory",
            "password": "secret99",
            "displayName": "Mallory",
            "department": "IT",
            "role": "admin",
        })
        assert response.json()["role"] == "staff"


class TestLogin:

    def test_login_sets_cookie(self, client):
        response = client.post("/api/login", json={"username": "admin", "password": "admin123"})

        assert response.status_code == 200
        assert response.json()["role"] == "admin"
        assert "session" in response.cookies
        assert "httponly" in response.headers["set-cookie"].lower()

    @pytest.mark.parametrize("username,password", [
        ("admin", "wrong-password"),
        ("nobody", "admin123"),
    ])
    def test_bad_credentials(self, client, username, password):
        response = client.post("/api/login", json={"username": username, "password": password})
        assert response.status_code == 401
        assert "error" in response.json()
        assert client.get("/api/user").status_code == 401

    def test_missing_fields(self, client):
        response = client.post("/api/login", json={"username": "admin"})
        assert response.status_code == 400


class TestSession:

    def test_anonymous_user(self, client):
        response = client.get("/api/user")
        assert response.status_code == 401
        assert response.json() == {"error": "Not authenticated"}

    def test_forged_cookie(self, client):
        client.cookies.set("session", "not-a-real-token")
        assert client.get("/api/user").status_code == 401

    def test_logout(self, staff_client):
        assert staff_client.get("/api/user").status_code == 200

        response = staff_client.post("/api/logout")

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert staff_client.get("/api/user").status_code == 401

    def test_logout_without_session(self, client):
        assert client.post("/api/logout").json() == {"success": True}

    def test_token_unusable_after_logout(self, make_client):
        first = make_client(("suda", "suda123"))
        token = first.cookies.get("session")
        first.post("/api/logout")

        replay = make_client()
        replay.cookies.set("session", token)
        assert replay.get("/api/user").status_code == 401


class TestUsers:

    def test_list_users(self, staff_client):
        response = staff_client.get("/api/users")
        assert response.status_code == 200
        assert [u["username"] for u in response.json()] == ["admin", "somchai", "suda", "chaiyos"]

    def test_get_user(self, staff_client):
        assert staff_client.get("/api/users/2").json()["role"] == "manager"

    def test_unknown_user(self, staff_client):
        response = staff_client.get("/api/users/99")
        assert response.status_code == 404
        assert response.json() == {"error": "User 99 not found"}

    def test_requires_login(self, client):
        assert client.get("/api/users").status_code == 401
