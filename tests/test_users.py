"""
Tests for user settings and finding other users.

These tests verify:
  - Settings start at their defaults and change field by field
  - Settings belong to one user only
  - Search matches names case-insensitively and leaves the caller out
  - Another user is exposed only as a name and a MAIN account number
"""

import uuid

from helpers import main_account


class TestSettings:
    """Tests for GET/PATCH /users/me/settings."""

    async def test_defaults(self, authenticated_client):
        response = await authenticated_client.get("/users/me/settings")
        assert response.status_code == 200
        assert response.json()["data"] == {
            "notifications_enabled": True,
            "dark_mode_enabled": False,
            "biometrics_enabled": False,
            "language": "en",
        }

    async def test_partial_update(self, authenticated_client):
        response = await authenticated_client.patch(
            "/users/me/settings", json={"dark_mode_enabled": True, "language": "FIL"},
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["dark_mode_enabled"] is True
        assert data["language"] == "fil"
        assert data["notifications_enabled"] is True

        stored = (await authenticated_client.get("/users/me/settings")).json()["data"]
        assert stored == data

    async def test_blank_language_rejected(self, authenticated_client):
        response = await authenticated_client.patch(
            "/users/me/settings", json={"language": "   "},
        )
        assert response.status_code == 400

    async def test_settings_are_per_user(
        self, authenticated_client, second_authenticated_client
    ):
        await authenticated_client.patch("/users/me/settings", json={"biometrics_enabled": True})
        theirs = (await second_authenticated_client.get("/users/me/settings")).json()["data"]
        assert theirs["biometrics_enabled"] is False

    async def test_requires_token(self, client):
        response = await client.get("/users/me/settings")
        assert response.status_code == 401


class TestSearch:
    """Tests for GET /users/search."""

    async def test_finds_by_last_name(self, authenticated_client, second_authenticated_client):
        theirs = await main_account(second_authenticated_client)

        response = await authenticated_client.get("/users/search", params={"query": "SANTOS"})
        assert response.status_code == 200
        assert response.json()["data"] == [
            {
                "id": str(second_authenticated_client.user_id),
                "full_name": "Maria Santos",
                "account_number": theirs["account_number"],
            }
        ]

    async def test_matches_across_first_and_last_name(
        self, authenticated_client, second_authenticated_client
    ):
        response = await authenticated_client.get("/users/search", params={"query": "maria san"})
        names = [u["full_name"] for u in response.json()["data"]]
        assert names == ["Maria Santos"]

    async def test_caller_left_out(self, authenticated_client, second_authenticated_client):
        response = await authenticated_client.get("/users/search", params={"query": "juan"})
        assert response.status_code == 200
        assert response.json()["data"] == []

    async def test_wildcards_match_literally(
        self, authenticated_client, second_authenticated_client
    ):
        response = await authenticated_client.get("/users/search", params={"query": "%"})
        assert response.json()["data"] == []

    async def test_blank_query_rejected(self, authenticated_client):
        response = await authenticated_client.get("/users/search", params={"query": "  "})
        assert response.status_code == 400
        assert response.json()["error_type"] == "invalid_request"

    async def test_missing_query(self, authenticated_client):
        response = await authenticated_client.get("/users/search")
        assert response.status_code == 422


class TestPublicProfile:
    """Tests for GET /users/{id}."""

    async def test_name_and_account_number_only(
        self, authenticated_client, second_authenticated_client
    ):
        theirs = await main_account(second_authenticated_client)

        response = await authenticated_client.get(f"/users/{second_authenticated_client.user_id}")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data == {
            "id": str(second_authenticated_client.user_id),
            "full_name": "Maria Santos",
            "account_number": theirs["account_number"],
        }

    async def test_unknown_user(self, authenticated_client):
        response = await authenticated_client.get(f"/users/{uuid.uuid4()}")
        assert response.status_code == 404
