"""
Tests for cross-user isolation.

A logged-in user cannot access, modify, or even detect the existence of
another user's accounts, ledger entries or money. Direct access returns
404, the same answer as for an id that doesn't exist; listings leave the
other user's rows out. Balances are never touched.
"""

from helpers import balance, fund, main_account


class TestCrossUserAccountAccess:
    """A logged-in user cannot see another user's accounts."""

    async def test_cannot_view_other_users_balance(
        self, authenticated_client, second_authenticated_client
    ):
        theirs = await main_account(second_authenticated_client)
        response = await authenticated_client.get(f"/accounts/{theirs['id']}/balance")
        assert response.status_code == 404
        assert response.json()["error_type"] == "account_not_found"

    async def test_cannot_list_other_users_account_transactions(
        self, authenticated_client, second_authenticated_client
    ):
        theirs = await main_account(second_authenticated_client)
        await fund(second_authenticated_client, theirs["id"], 5000)

        response = await authenticated_client.get(f"/accounts/{theirs['id']}/transactions")
        assert response.status_code == 404


class TestCrossUserTransactionAccess:
    """Ledger entries are visible to their owner only."""

    async def test_listing_shows_only_my_entries(
        self, authenticated_client, second_authenticated_client
    ):
        theirs = await main_account(second_authenticated_client)
        await fund(second_authenticated_client, theirs["id"], 5000)

        response = await authenticated_client.get("/transactions")
        assert response.status_code == 200
        assert response.json()["data"] == []

    async def test_cannot_filter_by_other_users_account(
        self, authenticated_client, second_authenticated_client
    ):
        theirs = await main_account(second_authenticated_client)
        await fund(second_authenticated_client, theirs["id"], 5000)

        response = await authenticated_client.get(
            "/transactions", params={"account_id": theirs["id"]}
        )
        assert response.status_code == 200
        assert response.json()["data"] == []

    async def test_cannot_view_other_users_single_transaction(
        self, authenticated_client, second_authenticated_client
    ):
        theirs = await main_account(second_authenticated_client)
        deposit = await second_authenticated_client.post(
            "/transactions/deposit",
            json={"account_id": theirs["id"], "amount_cents": 5000},
        )
        txn_id = deposit.json()["data"]["transaction"]["id"]

        response = await authenticated_client.get(f"/transactions/{txn_id}")
        assert response.status_code == 404
        assert (await second_authenticated_client.get(f"/transactions/{txn_id}")).status_code == 200


class TestCrossUserMoneyProtection:
    """Nobody can move money out of an account they don't own."""

    async def test_cannot_transfer_from_other_users_account(
        self, authenticated_client, second_authenticated_client
    ):
        mine = await main_account(authenticated_client)
        theirs = await main_account(second_authenticated_client)
        await fund(second_authenticated_client, theirs["id"], 10000)

        response = await authenticated_client.post(
            "/transactions/transfer",
            json={
                "from_account_id": theirs["id"],
                "to_account_id": mine["id"],
                "amount_cents": 10000,
            },
        )
        assert response.status_code == 404
        assert await balance(second_authenticated_client, theirs["id"]) == 10000
        assert await balance(authenticated_client, mine["id"]) == 0

    async def test_cannot_withdraw_from_other_users_account(
        self, authenticated_client, second_authenticated_client
    ):
        theirs = await main_account(second_authenticated_client)
        await fund(second_authenticated_client, theirs["id"], 10000)

        response = await authenticated_client.post(
            "/transactions/withdraw",
            json={"account_id": theirs["id"], "amount_cents": 10000},
        )
        assert response.status_code == 404
        assert await balance(second_authenticated_client, theirs["id"]) == 10000

    async def test_cannot_pay_bills_from_other_users_account(
        self, authenticated_client, second_authenticated_client
    ):
        theirs = await main_account(second_authenticated_client)
        await fund(second_authenticated_client, theirs["id"], 100000)
        billers = (await authenticated_client.get("/payments/billers")).json()["data"]
        meralco = next(b for b in billers if b["name"] == "Meralco")

        response = await authenticated_client.post(
            "/payments",
            json={
                "account_id": theirs["id"],
                "biller_id": meralco["id"],
                "payee_account_number": "123456789012",
                "amount_cents": 10000,
            },
        )
        assert response.status_code == 404
        assert await balance(second_authenticated_client, theirs["id"]) == 100000
