"""Integration tests for auth endpoints."""
import pytest


@pytest.mark.asyncio
class TestGetMe:
    """Tests for the current caller endpoint."""

    async def test_get_me_user(self, app_client, fellow_headers):
        """Test a regular user's identity."""
        response = await app_client.get("/auth/me", headers=fellow_headers)

        assert response.status_code == 200
        assert response.json() == {"user_id": "cm5fellow0a1b", "role": "user"}

    async def test_get_me_admin(self, app_client, admin_headers):
        """Test an admin's identity."""
        response = await app_client.get("/auth/me", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["role"] == "admin"

    async def test_get_me_without_token(self, app_client):
        """Test missing credentials return 401."""
        response = await app_client.get("/auth/me")

        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"

    async def test_get_me_invalid_token(self, app_client):
        """Test invalid tokens return 401."""
        response = await app_client.get(
            "/auth/me", headers={"Authorization": "Bearer invalid_token_here"}
        )

        assert response.status_code == 401


@pytest.mark.asyncio
class TestHealth:
    """Tests for health endpoints."""

    async def test_health(self, app_client):
        """Test the health endpoint."""
        response = await app_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    async def test_root(self, app_client):
        """Test the root endpoint."""
        response = await app_client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
