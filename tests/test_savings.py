"""
Tests for savings goals.

These tests verify:
  - A goal moves money out of and back into its linked account, writing a
    ledger row on the account and an entry on the goal each time
  - Withdrawing more than the goal holds is rejected with 422
  - Progress tracks current / target, capped at 1
  - Only empty goals can be closed, and closed goals take no deposits
"""

from helpers import balance, fund, main_account


async def _goal(client, account_id: str, **fields) -> dict:
    payload = {
        "linked_account_id": account_id,
        "name": "Japan trip",
        "target_amount_cents": 100000,
        **fields,
    }
    response = await client.post("/savings", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]


class TestCreateGoal:
    """Tests for POST /savings."""

    async def test_create_empty_goal(self, authenticated_client):
        account = await main_account(authenticated_client)
        goal = await _goal(authenticated_client, account["id"])

        assert goal["current_amount_cents"] == 0
        assert goal["progress"] == 0.0
        assert goal["icon"] == "piggy-bank"
        assert goal["is_active"] is True
        assert goal["entries"] == []

    async def test_initial_deposit(self, authenticated_client):
        account = await main_account(authenticated_client)
        await fund(authenticated_client, account["id"], 50000)

        goal = await _goal(authenticated_client, account["id"], initial_deposit_cents=20000)
        assert goal["current_amount_cents"] == 20000
        assert [e["kind"] for e in goal["entries"]] == ["DEPOSIT"]
        assert await balance(authenticated_client, account["id"]) == 30000

    async def test_initial_deposit_needs_funds(self, authenticated_client):
        account = await main_account(authenticated_client)
        response = await authenticated_client.post(
            "/savings",
            json={
                "linked_account_id": account["id"],
                "name": "Japan trip",
                "target_amount_cents": 100000,
                "initial_deposit_cents": 1,
            },
        )
        assert response.status_code == 422
        goals = (await authenticated_client.get("/savings")).json()["data"]
        assert goals == []

    async def test_other_users_account_rejected(
        self, authenticated_client, second_authenticated_client
    ):
        theirs = await main_account(second_authenticated_client)
        response = await authenticated_client.post(
            "/savings",
            json={
                "linked_account_id": theirs["id"],
                "name": "Not mine",
                "target_amount_cents": 100000,
            },
        )
        assert response.status_code == 404


class TestGoalMoney:
    """Tests for deposit and withdraw."""

    async def test_deposit_moves_money_from_account(self, authenticated_client):
        account = await main_account(authenticated_client)
        await fund(authenticated_client, account["id"], 50000)
        goal = await _goal(authenticated_client, account["id"])

        response = await authenticated_client.post(
            f"/savings/{goal['id']}/deposit", json={"amount_cents": 25000},
        )
        assert response.status_code == 200
        updated = response.json()["data"]
        assert updated["current_amount_cents"] == 25000
        assert updated["progress"] == 0.25
        assert await balance(authenticated_client, account["id"]) == 25000

        rows = (await authenticated_client.get(
            "/transactions", params={"kind": "SAVINGS_DEPOSIT"}
        )).json()["data"]
        assert len(rows) == 1
        assert rows[0]["direction"] == "debit"
        assert rows[0]["savings_goal_id"] == goal["id"]

    async def test_deposit_needs_funds(self, authenticated_client):
        account = await main_account(authenticated_client)
        await fund(authenticated_client, account["id"], 1000)
        goal = await _goal(authenticated_client, account["id"])

        response = await authenticated_client.post(
            f"/savings/{goal['id']}/deposit", json={"amount_cents": 1001},
        )
        assert response.status_code == 422
        assert response.json()["error_type"] == "insufficient_funds"

        refreshed = (await authenticated_client.get(f"/savings/{goal['id']}")).json()["data"]
        assert refreshed["current_amount_cents"] == 0
        assert refreshed["entries"] == []

    async def test_withdraw_returns_money_to_account(self, authenticated_client):
        account = await main_account(authenticated_client)
        await fund(authenticated_client, account["id"], 50000)
        goal = await _goal(authenticated_client, account["id"], initial_deposit_cents=40000)

        response = await authenticated_client.post(
            f"/savings/{goal['id']}/withdraw", json={"amount_cents": 15000},
        )
        assert response.status_code == 200
        updated = response.json()["data"]
        assert updated["current_amount_cents"] == 25000
        assert [e["kind"] for e in updated["entries"]] == ["DEPOSIT", "WITHDRAWAL"]
        assert await balance(authenticated_client, account["id"]) == 25000

    async def test_withdraw_more_than_goal_holds(self, authenticated_client):
        account = await main_account(authenticated_client)
        await fund(authenticated_client, account["id"], 50000)
        goal = await _goal(authenticated_client, account["id"], initial_deposit_cents=10000)

        response = await authenticated_client.post(
            f"/savings/{goal['id']}/withdraw", json={"amount_cents": 10001},
        )
        assert response.status_code == 422
        assert response.json()["error_type"] == "insufficient_goal_funds"
        assert await balance(authenticated_client, account["id"]) == 40000

    async def test_progress_capped_at_one(self, authenticated_client):
        account = await main_account(authenticated_client)
        await fund(authenticated_client, account["id"], 300000)
        goal = await _goal(authenticated_client, account["id"], initial_deposit_cents=150000)
        assert goal["progress"] == 1.0

    async def test_other_user_cannot_deposit(
        self, authenticated_client, second_authenticated_client
    ):
        account = await main_account(authenticated_client)
        goal = await _goal(authenticated_client, account["id"])
        response = await second_authenticated_client.post(
            f"/savings/{goal['id']}/deposit", json={"amount_cents": 100},
        )
        assert response.status_code == 404


class TestCloseGoal:
    """Tests for POST /savings/{id}/close."""

    async def test_close_empty_goal(self, authenticated_client):
        account = await main_account(authenticated_client)
        goal = await _goal(authenticated_client, account["id"])

        response = await authenticated_client.post(f"/savings/{goal['id']}/close")
        assert response.status_code == 200
        assert response.json()["data"]["is_active"] is False

        assert (await authenticated_client.get("/savings")).json()["data"] == []
        closed = (await authenticated_client.get(
            "/savings", params={"include_closed": True}
        )).json()["data"]
        assert [g["id"] for g in closed] == [goal["id"]]

    async def test_goal_with_money_cannot_close(self, authenticated_client):
        account = await main_account(authenticated_client)
        await fund(authenticated_client, account["id"], 5000)
        goal = await _goal(authenticated_client, account["id"], initial_deposit_cents=5000)

        response = await authenticated_client.post(f"/savings/{goal['id']}/close")
        assert response.status_code == 409

    async def test_closed_goal_takes_no_deposits(self, authenticated_client):
        account = await main_account(authenticated_client)
        await fund(authenticated_client, account["id"], 5000)
        goal = await _goal(authenticated_client, account["id"])
        await authenticated_client.post(f"/savings/{goal['id']}/close")

        response = await authenticated_client.post(
            f"/savings/{goal['id']}/deposit", json={"amount_cents": 100},
        )
        assert response.status_code == 409
        assert await balance(authenticated_client, account["id"]) == 5000
