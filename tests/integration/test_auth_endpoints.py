"""Integration tests for auth endpoints."""
import pytest


@pytest.mark.asyncio
class TestAuthRegister:
    """Tests for POST /auth/register endpoint."""

    async def test_register_success(self, app_client):
        response = await app_client.post(
            "/auth/register",
            json={
                "email": "newuser@example.com",
                "password": "securepassword123",
                "name": "New User",
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "newuser@example.com"
        assert data["name"] == "New User"
        assert "id" in data
        assert "password" not in data
        assert "hashed_password" not in data

    async def test_register_duplicate_email(self, app_client):
        """Second registration with the same email returns 400."""
        body = {"email": "duplicate@example.com", "password": "password123", "name": "First"}
        await app_client.post("/auth/register", json=body)

        response = await app_client.post("/auth/register", json={**body, "name": "Second"})

        assert response.status_code == 400
        assert "already registered" in response.json()["detail"].lower()

    @pytest.mark.parametrize("body", [
        {"email": "not-an-email", "password": "password123", "name": "Test User"},
        {"email": "test@example.com"},
    ])
    async def test_register_invalid_body(self, app_client, body):
        response = await app_client.post("/auth/register", json=body)

        assert response.status_code == 422


@pytest.mark.asyncio
class TestAuthLogin:
    """Tests for POST /auth/login endpoint."""

    async def test_login_success(self, login_as):
        headers = await login_as("loginuser@example.com")

        assert headers["Authorization"].startswith("Bearer ")
        assert len(headers["Authorization"]) > len("Bearer ")

    async def test_login_wrong_password(self, app_client, login_as):
        await login_as("wrongpw@example.com")

        response = await app_client.post(
            "/auth/login",
            json={"email": "wrongpw@example.com", "password": "wrongpassword"},
        )

        assert response.status_code == 401
        assert "invalid" in response.json()["detail"].lower()

    async def test_login_nonexistent_user(self, app_client):
        response = await app_client.post(
            "/auth/login",
            json={"email": "notfound@example.com", "password": "somepassword"},
        )

        assert response.status_code == 401


@pytest.mark.asyncio
class TestAuthMe:
    """Tests for the /auth/me endpoints."""

    async def test_get_current_user(self, app_client, auth_headers):
        response = await app_client.get("/auth/me", headers=auth_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["email"] == "test@example.com"
        assert data["name"] == "Test User"
        assert "id" in data

    async def test_get_current_user_no_token(self, app_client):
        response = await app_client.get("/auth/me")

        assert response.status_code == 401

    async def test_get_current_user_invalid_token(self, app_client):
        response = await app_client.get(
            "/auth/me",
            headers={"Authorization": "Bearer invalid.token.here"},
        )

        assert response.status_code == 401

    async def test_update_profile(self, app_client, auth_headers):
        response = await app_client.patch(
            "/auth/me",
            json={"name": "Renamed", "email": "renamed@example.com"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Renamed"

        login = await app_client.post(
            "/auth/login",
            json={"email": "renamed@example.com", "password": "password123"},
        )
        assert login.status_code == 200

    async def test_update_profile_email_taken(self, app_client, auth_headers, other_headers):
        response = await app_client.patch(
            "/auth/me",
            json={"email": "other@example.com"},
            headers=auth_headers,
        )

        assert response.status_code == 400


@pytest.mark.asyncio
class TestAuthSettings:
    """Tests for the /auth/me/settings endpoints."""

    async def test_new_user_has_default_settings(self, app_client, auth_headers):
        response = await app_client.get("/auth/me/settings", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {
            "theme": "light",
            "hour_format": "24h",
            "week_start": 1,
            "notification_enabled": True,
        }

    async def test_update_settings_partial(self, app_client, auth_headers):
        response = await app_client.put(
            "/auth/me/settings",
            json={"theme": "dark", "week_start": 0},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["theme"] == "dark"
        assert data["week_start"] == 0
        assert data["hour_format"] == "24h"

    async def test_update_settings_invalid_week_start(self, app_client, auth_headers):
        response = await app_client.put(
            "/auth/me/settings",
            json={"week_start": 9},
            headers=auth_headers,
        )

        assert response.status_code == 422
