"""
Tests for account endpoints.

These tests verify:
  - Opening additional accounts with unique 10-digit numbers
  - Listing and fetching the caller's accounts
  - Balance verification (stored vs. ledger replay)
  - Account-number lookup returns only number, kind and owner name
  - Another user's account looks exactly like a missing one (404)
"""

import uuid

from helpers import fund, main_account, open_account


class TestCreateAccount:
    """Tests for POST /accounts."""

    async def test_open_savings_account(self, authenticated_client):
        account = await open_account(authenticated_client, "SAVINGS")
        assert account["kind"] == "SAVINGS"
        assert account["display_name"] == "Savings Account"
        assert account["balance_cents"] == 0
        assert len(account["account_number"]) == 10

    async def test_custom_display_name(self, authenticated_client):
        response = await authenticated_client.post(
            "/accounts", json={"kind": "INVESTMENT", "display_name": "Stocks"},
        )
        assert response.status_code == 201
        assert response.json()["data"]["display_name"] == "Stocks"

    async def test_account_numbers_are_unique(self, authenticated_client):
        numbers = {(await open_account(authenticated_client))["account_number"] for _ in range(5)}
        numbers.add((await main_account(authenticated_client))["account_number"])
        assert len(numbers) == 6

    async def test_unknown_kind_rejected(self, authenticated_client):
        response = await authenticated_client.post("/accounts", json={"kind": "CHECKING"})
        assert response.status_code == 422


class TestGetAccounts:
    """Tests for GET /accounts and GET /accounts/{id}."""

    async def test_list_only_my_accounts(self, authenticated_client, second_authenticated_client):
        await open_account(authenticated_client)

        mine = (await authenticated_client.get("/accounts")).json()["data"]
        theirs = (await second_authenticated_client.get("/accounts")).json()["data"]
        assert len(mine) == 2
        assert len(theirs) == 1
        assert not {a["id"] for a in mine} & {a["id"] for a in theirs}

    async def test_get_account(self, authenticated_client):
        account = await main_account(authenticated_client)
        response = await authenticated_client.get(f"/accounts/{account['id']}")
        assert response.status_code == 200
        assert response.json()["data"]["account_number"] == account["account_number"]

    async def test_get_missing_account(self, authenticated_client):
        response = await authenticated_client.get(f"/accounts/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["error_type"] == "account_not_found"

    async def test_get_other_users_account_is_404(
        self, authenticated_client, second_authenticated_client
    ):
        """Someone else's account is indistinguishable from a missing one."""
        theirs = await main_account(second_authenticated_client)
        response = await authenticated_client.get(f"/accounts/{theirs['id']}")
        assert response.status_code == 404
        assert response.json()["error_type"] == "account_not_found"


class TestBalance:
    """Tests for GET /accounts/{id}/balance."""

    async def test_new_account_balance_matches(self, authenticated_client):
        account = await main_account(authenticated_client)
        response = await authenticated_client.get(f"/accounts/{account['id']}/balance")
        data = response.json()["data"]
        assert data["balance_cents"] == 0
        assert data["computed_balance_cents"] == 0
        assert data["match"] is True

    async def test_balance_matches_after_activity(self, authenticated_client):
        """Deposits, withdrawals and fee-bearing debits all reconcile."""
        account = await main_account(authenticated_client)
        await fund(authenticated_client, account["id"], 100000)
        await authenticated_client.post(
            "/transactions/withdraw",
            json={"account_id": account["id"], "amount_cents": 12345},
        )
        await authenticated_client.post(
            "/transfers/interbank",
            json={
                "from_account_id": account["id"],
                "bank_code": "BPI",
                "recipient_account_number": "009876543210",
                "recipient_name": "Pedro Penduko",
                "amount_cents": 10000,
            },
        )

        data = (await authenticated_client.get(f"/accounts/{account['id']}/balance")).json()["data"]
        assert data["balance_cents"] == 100000 - 12345 - 10000 - 2500
        assert data["computed_balance_cents"] == data["balance_cents"]
        assert data["match"] is True


class TestLookup:
    """Tests for GET /accounts/lookup/{account_number}."""

    async def test_lookup_other_users_number(
        self, authenticated_client, second_authenticated_client
    ):
        theirs = await main_account(second_authenticated_client)
        response = await authenticated_client.get(f"/accounts/lookup/{theirs['account_number']}")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data == {
            "account_number": theirs["account_number"],
            "kind": "MAIN",
            "owner_name": "Maria Santos",
        }

    async def test_lookup_unknown_number(self, authenticated_client):
        response = await authenticated_client.get("/accounts/lookup/0000000000")
        assert response.status_code == 404
