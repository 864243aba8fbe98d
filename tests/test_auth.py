"""
Tests for authentication and profile endpoints.

These tests verify:
  - Signup creates a user with a zero-balance MAIN account and returns a JWT
  - Duplicate email signup is rejected (409 Conflict)
  - Login returns a JWT; wrong password and unknown email get the same 401
  - Invalid request bodies are rejected (422)
  - Protected endpoints require a valid token
  - Profile read and update via /users/me
"""

from helpers import FIRST_USER


class TestSignup:
    """Tests for POST /auth/signup."""

    async def test_signup_success(self, client):
        """A valid signup returns 201 with user_id, email and token."""
        response = await client.post(
            "/auth/signup",
            json={
                "email": "newuser@example.com",
                "password": "StrongPass99!",
                "first_name": "Jose",
                "last_name": "Rizal",
            },
        )
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["email"] == "newuser@example.com"
        assert body["data"]["token_type"] == "bearer"
        assert body["data"]["token"]
        assert body["data"]["user_id"]

    async def test_signup_opens_main_account(self, authenticated_client):
        """Every new user gets exactly one MAIN account with a zero balance."""
        response = await authenticated_client.get("/accounts")
        accounts = response.json()["data"]
        assert len(accounts) == 1
        assert accounts[0]["kind"] == "MAIN"
        assert accounts[0]["balance_cents"] == 0
        assert len(accounts[0]["account_number"]) == 10
        assert accounts[0]["account_number"].isdigit()
        assert accounts[0]["currency_label"] == "₱"

    async def test_signup_duplicate_email(self, client):
        """Signing up twice with the same email returns 409."""
        first = await client.post("/auth/signup", json=FIRST_USER)
        assert first.status_code == 201

        second = await client.post("/auth/signup", json=FIRST_USER)
        assert second.status_code == 409
        assert second.json()["success"] is False
        assert second.json()["error_type"] == "duplicate_email"

    async def test_signup_short_password(self, client):
        response = await client.post(
            "/auth/signup",
            json={**FIRST_USER, "password": "short"},
        )
        assert response.status_code == 422

    async def test_signup_invalid_email(self, client):
        response = await client.post(
            "/auth/signup",
            json={**FIRST_USER, "email": "not-an-email"},
        )
        assert response.status_code == 422


class TestLogin:
    """Tests for POST /auth/login."""

    async def test_login_success(self, client):
        await client.post("/auth/signup", json=FIRST_USER)

        response = await client.post(
            "/auth/login",
            json={"email": FIRST_USER["email"], "password": FIRST_USER["password"]},
        )
        assert response.status_code == 200
        assert response.json()["data"]["token"]

    async def test_login_wrong_password(self, client):
        await client.post("/auth/signup", json=FIRST_USER)

        response = await client.post(
            "/auth/login",
            json={"email": FIRST_USER["email"], "password": "WrongPass999!"},
        )
        assert response.status_code == 401
        assert response.json()["error_type"] == "invalid_credentials"

    async def test_login_unknown_email_same_error(self, client):
        """Unknown email and wrong password are indistinguishable."""
        response = await client.post(
            "/auth/login",
            json={"email": "nobody@example.com", "password": "Whatever123!"},
        )
        assert response.status_code == 401
        assert response.json()["error_type"] == "invalid_credentials"


class TestProtectedEndpoints:
    """Endpoints behind get_current_principal reject missing or bad tokens."""

    async def test_no_token(self, client):
        response = await client.get("/accounts")
        assert response.status_code == 401

    async def test_garbage_token(self, client):
        response = await client.get(
            "/accounts", headers={"Authorization": "Bearer not-a-real-token"}
        )
        assert response.status_code == 401

    async def test_reference_catalogues_are_public(self, client):
        """Banks, billers, loan products and companies don't need a token."""
        for path in ("/banks", "/payments/billers", "/loans/products", "/investments/companies"):
            response = await client.get(path)
            assert response.status_code == 200, path
            assert len(response.json()["data"]) > 0, path


class TestProfile:
    """Tests for GET/PATCH /users/me."""

    async def test_get_me(self, authenticated_client):
        response = await authenticated_client.get("/users/me")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["email"] == FIRST_USER["email"]
        assert data["full_name"] == "Juan Dela Cruz"
        assert "hashed_password" not in data

    async def test_update_me(self, authenticated_client):
        response = await authenticated_client.patch(
            "/users/me",
            json={"first_name": "Juanito", "phone": "+63 917 555 0101"},
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["first_name"] == "Juanito"
        assert data["last_name"] == "Dela Cruz"
        assert data["phone"] == "+63 917 555 0101"

    async def test_update_me_blank_name(self, authenticated_client):
        response = await authenticated_client.patch("/users/me", json={"last_name": "   "})
        assert response.status_code == 400
