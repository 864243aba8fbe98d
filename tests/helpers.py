"""Request helpers shared by the API tests."""

import uuid

from httpx import AsyncClient
from sqlalchemy import select

from pitaka.models.account import Account


FIRST_USER = {
    "email": "juan@example.com",
    "password": "SecurePass123!",
    "first_name": "Juan",
    "last_name": "Dela Cruz",
}
SECOND_USER = {
    "email": "maria@example.com",
    "password": "SecurePass456!",
    "first_name": "Maria",
    "last_name": "Santos",
}


async def main_account(client: AsyncClient) -> dict:
    """The MAIN account created at signup."""
    response = await client.get("/accounts")
    assert response.status_code == 200
    return next(a for a in response.json()["data"] if a["kind"] == "MAIN")


async def open_account(client: AsyncClient, kind: str = "SAVINGS") -> dict:
    response = await client.post("/accounts", json={"kind": kind})
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def fund(client: AsyncClient, account_id: str, amount_cents: int) -> None:
    response = await client.post(
        "/transactions/deposit",
        json={"account_id": account_id, "amount_cents": amount_cents},
    )
    assert response.status_code == 201, response.text


async def balance(client: AsyncClient, account_id: str) -> int:
    response = await client.get(f"/accounts/{account_id}")
    assert response.status_code == 200
    return response.json()["data"]["balance_cents"]


async def balance_of(session_factory, account_id) -> int:
    """Read a balance straight from the database, outside any request."""
    async with session_factory() as session:
        result = await session.execute(
            select(Account.balance_cents).where(Account.id == uuid.UUID(str(account_id)))
        )
        return result.scalar_one()
