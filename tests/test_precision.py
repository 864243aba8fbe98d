"""
Tests for integer-cent precision — no floating point anywhere.

Every amount is stored and returned as integer cents, so sums are exact.

Tests verify:
  - All amounts are integers in responses
  - Large cent values work correctly
  - Repeated small transactions don't accumulate rounding errors
  - Balance = exact replay of the account's ledger, fees included
  - Moving money between accounts never creates or destroys any
"""

import uuid

from sqlalchemy import select

from pitaka.models.transaction import Transaction

from helpers import fund, main_account, open_account


async def _balance(client, account_id: str) -> dict:
    response = await client.get(f"/accounts/{account_id}/balance")
    assert response.status_code == 200
    return response.json()["data"]


class TestIntegerCentPrecision:
    """Tests that all monetary operations use integer cents exactly."""

    async def test_all_amounts_are_integers(self, authenticated_client):
        account = await main_account(authenticated_client)
        response = await authenticated_client.post(
            "/transactions/deposit",
            json={"account_id": account["id"], "amount_cents": 1050},
        )
        txn = response.json()["data"]["transaction"]
        assert isinstance(txn["amount_cents"], int)
        assert isinstance(txn["fee_cents"], int)

        data = await _balance(authenticated_client, account["id"])
        assert isinstance(data["balance_cents"], int)
        assert isinstance(data["computed_balance_cents"], int)

    async def test_large_values(self, authenticated_client):
        account = await main_account(authenticated_client)

        # ₱1,000,000.00
        await fund(authenticated_client, account["id"], 100_000_000)
        assert (await _balance(authenticated_client, account["id"]))["balance_cents"] == 100_000_000

        # ₱999,999.99
        await authenticated_client.post(
            "/transactions/withdraw",
            json={"account_id": account["id"], "amount_cents": 99_999_999},
        )
        assert (await _balance(authenticated_client, account["id"]))["balance_cents"] == 1

    async def test_no_rounding_errors_with_repeated_small_transactions(self, authenticated_client):
        """One cent, a hundred times, is exactly ₱1.00."""
        account = await main_account(authenticated_client)
        for _ in range(100):
            await fund(authenticated_client, account["id"], 1)

        data = await _balance(authenticated_client, account["id"])
        assert data["balance_cents"] == 100
        assert data["match"] is True

    async def test_replay_includes_fees(self, authenticated_client):
        account = await main_account(authenticated_client)
        await fund(authenticated_client, account["id"], 3333)
        await fund(authenticated_client, account["id"], 6667)
        await authenticated_client.post(
            "/transactions/withdraw",
            json={"account_id": account["id"], "amount_cents": 1666},
        )
        await authenticated_client.post(
            "/transfers/interbank",
            json={
                "from_account_id": account["id"],
                "bank_code": "BDO",
                "recipient_account_number": "001122334455",
                "recipient_name": "Pedro Reyes",
                "amount_cents": 834,
            },
        )

        # 3333 + 6667 - 1666 - (834 + 2500 fee) = 5000
        data = await _balance(authenticated_client, account["id"])
        assert data["balance_cents"] == 5000
        assert data["computed_balance_cents"] == 5000
        assert data["match"] is True

    async def test_transfers_preserve_total_money(self, authenticated_client):
        """Internal moves shuffle cents around; the total never changes."""
        a = await main_account(authenticated_client)
        b = await open_account(authenticated_client)
        c = await open_account(authenticated_client, kind="INVESTMENT")
        await fund(authenticated_client, a["id"], 10000)

        for source, dest, amount in ((a, b, 3000), (a, c, 2000), (b, c, 1000)):
            response = await authenticated_client.post(
                "/transfers/internal",
                json={
                    "from_account_id": source["id"],
                    "to_account_id": dest["id"],
                    "amount_cents": amount,
                },
            )
            assert response.status_code == 201

        balances = [
            (await _balance(authenticated_client, acct["id"]))["balance_cents"]
            for acct in (a, b, c)
        ]
        assert balances == [5000, 2000, 3000]
        assert sum(balances) == 10000

    async def test_entry_effects_sum_to_balance(self, authenticated_client, session_factory):
        account = await main_account(authenticated_client)
        await fund(authenticated_client, account["id"], 50000)
        await authenticated_client.post(
            "/transfers/interbank",
            json={
                "from_account_id": account["id"],
                "bank_code": "UBP",
                "recipient_account_number": "001122334455",
                "recipient_name": "Pedro Reyes",
                "amount_cents": 10000,
            },
        )

        async with session_factory() as session:
            result = await session.execute(
                select(Transaction).where(Transaction.account_id == uuid.UUID(account["id"]))
            )
            effects = sorted(t.balance_effect_cents for t in result.scalars())

        assert effects == [-12500, 50000]
        assert sum(effects) == (await _balance(authenticated_client, account["id"]))["balance_cents"]
