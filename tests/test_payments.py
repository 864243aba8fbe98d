"""
Tests for bill payment endpoints.

These tests verify:
  - The biller catalogue is ordered by popularity and filterable
  - A payment debits amount + convenience fee and writes one PAYMENT row
    whose transaction_id is the payment's reference number
  - Amount limits and payee account number length are enforced
  - Only PENDING payments can be cancelled
"""

import uuid

import pytest

from pitaka.models.payment import Payment
from pitaka.models.transaction import OperationStatus

from helpers import balance, fund, main_account


async def _biller(client, name: str) -> dict:
    billers = (await client.get("/payments/billers")).json()["data"]
    return next(b for b in billers if b["name"] == name)


class TestBillers:
    """Tests for GET /payments/billers."""

    async def test_ordered_by_popularity(self, client):
        response = await client.get("/payments/billers")
        assert response.status_code == 200
        names = [b["name"] for b in response.json()["data"]]
        assert names[:3] == ["Meralco", "Maynilad", "Manila Water"]

    async def test_filter_by_category(self, client):
        response = await client.get("/payments/billers", params={"category": "WATER"})
        names = {b["name"] for b in response.json()["data"]}
        assert names == {"Maynilad", "Manila Water"}


class TestPayBill:
    """Tests for POST /payments."""

    async def test_pay_meralco(self, authenticated_client):
        account = await main_account(authenticated_client)
        await fund(authenticated_client, account["id"], 200000)
        meralco = await _biller(authenticated_client, "Meralco")

        response = await authenticated_client.post(
            "/payments",
            json={
                "account_id": account["id"],
                "biller_id": meralco["id"],
                "payee_account_number": "123456789012",
                "amount_cents": 150000,
            },
        )
        assert response.status_code == 201
        payment = response.json()["data"]
        assert payment["status"] == "COMPLETED"
        assert payment["fee_cents"] == 750
        assert payment["biller_name"] == "Meralco"
        assert payment["reference_number"].startswith("PAY")
        assert payment["transaction_id"] == payment["reference_number"]

        assert await balance(authenticated_client, account["id"]) == 200000 - 150750

        rows = (await authenticated_client.get(
            "/transactions", params={"kind": "PAYMENT"}
        )).json()["data"]
        assert len(rows) == 1
        assert rows[0]["transaction_id"] == payment["reference_number"]
        assert rows[0]["payment_id"] == payment["id"]
        assert rows[0]["amount_cents"] == 150000
        assert rows[0]["fee_cents"] == 750

    async def test_fee_must_be_covered(self, authenticated_client):
        account = await main_account(authenticated_client)
        await fund(authenticated_client, account["id"], 150000)
        meralco = await _biller(authenticated_client, "Meralco")

        response = await authenticated_client.post(
            "/payments",
            json={
                "account_id": account["id"],
                "biller_id": meralco["id"],
                "payee_account_number": "123456789012",
                "amount_cents": 150000,
            },
        )
        assert response.status_code == 422
        assert response.json()["requested_cents"] == 150750
        assert await balance(authenticated_client, account["id"]) == 150000

    @pytest.mark.parametrize("amount", [4999, 5000001])
    async def test_amount_outside_biller_limits(self, authenticated_client, amount):
        account = await main_account(authenticated_client)
        await fund(authenticated_client, account["id"], 10000000)
        meralco = await _biller(authenticated_client, "Meralco")

        response = await authenticated_client.post(
            "/payments",
            json={
                "account_id": account["id"],
                "biller_id": meralco["id"],
                "payee_account_number": "123456789012",
                "amount_cents": amount,
            },
        )
        assert response.status_code == 400
        assert response.json()["error_type"] == "invalid_amount"

    async def test_wrong_payee_number_length(self, authenticated_client):
        account = await main_account(authenticated_client)
        await fund(authenticated_client, account["id"], 100000)
        meralco = await _biller(authenticated_client, "Meralco")

        response = await authenticated_client.post(
            "/payments",
            json={
                "account_id": account["id"],
                "biller_id": meralco["id"],
                "payee_account_number": "12345",
                "amount_cents": 10000,
            },
        )
        assert response.status_code == 400
        assert "Customer Account Number" in response.json()["detail"]

    async def test_biller_without_fixed_length(self, authenticated_client):
        account = await main_account(authenticated_client)
        await fund(authenticated_client, account["id"], 100000)
        netflix = await _biller(authenticated_client, "Netflix")

        response = await authenticated_client.post(
            "/payments",
            json={
                "account_id": account["id"],
                "biller_id": netflix["id"],
                "payee_account_number": "juan@example.com",
                "amount_cents": 54900,
            },
        )
        assert response.status_code == 201
        assert response.json()["data"]["fee_cents"] == 0

    async def test_unknown_biller(self, authenticated_client):
        account = await main_account(authenticated_client)
        response = await authenticated_client.post(
            "/payments",
            json={
                "account_id": account["id"],
                "biller_id": str(uuid.uuid4()),
                "payee_account_number": "123",
                "amount_cents": 10000,
            },
        )
        assert response.status_code == 404


class TestPaymentHistory:
    """Tests for listing, fetching and cancelling payments."""

    async def _pay(self, client) -> dict:
        account = await main_account(client)
        await fund(client, account["id"], 100000)
        spotify = await _biller(client, "Spotify")
        response = await client.post(
            "/payments",
            json={
                "account_id": account["id"],
                "biller_id": spotify["id"],
                "payee_account_number": "juan@example.com",
                "amount_cents": 14900,
            },
        )
        return response.json()["data"]

    async def test_list_and_get(self, authenticated_client):
        payment = await self._pay(authenticated_client)

        listed = (await authenticated_client.get("/payments")).json()["data"]
        assert [p["id"] for p in listed] == [payment["id"]]

        response = await authenticated_client.get(f"/payments/{payment['id']}")
        assert response.status_code == 200
        assert response.json()["data"]["reference_number"] == payment["reference_number"]

    async def test_other_user_cannot_see_payment(
        self, authenticated_client, second_authenticated_client
    ):
        payment = await self._pay(authenticated_client)
        response = await second_authenticated_client.get(f"/payments/{payment['id']}")
        assert response.status_code == 404

    async def test_completed_payment_cannot_be_cancelled(self, authenticated_client):
        payment = await self._pay(authenticated_client)
        response = await authenticated_client.patch(f"/payments/{payment['id']}/cancel")
        assert response.status_code == 409
        assert response.json()["error_type"] == "invalid_state"

    async def test_cancel_pending_payment(self, authenticated_client, db_session):
        account = await main_account(authenticated_client)
        meralco = await _biller(authenticated_client, "Meralco")
        pending = Payment(
            reference_number="PAY20260101000000ABCD",
            owner_id=authenticated_client.user_id,
            account_id=uuid.UUID(account["id"]),
            biller_id=uuid.UUID(meralco["id"]),
            biller_name="Meralco",
            payee_account_number="123456789012",
            amount_cents=10000,
            status=OperationStatus.PENDING,
        )
        db_session.add(pending)
        await db_session.commit()

        response = await authenticated_client.patch(f"/payments/{pending.id}/cancel")
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "CANCELLED"

        filtered = (await authenticated_client.get(
            "/payments", params={"status": "CANCELLED"}
        )).json()["data"]
        assert [p["id"] for p in filtered] == [str(pending.id)]
