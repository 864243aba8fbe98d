"""
Tests for reference and account number generation.
"""

import re

import pytest
from sqlalchemy import select

from pitaka.config import settings
from pitaka.exceptions import GenerationExhaustedError
from pitaka.identifiers import (
    generate_account_number,
    generate_reference,
    generate_unique,
    generate_unique_reference,
)
from pitaka.models.account import Account
from pitaka.models.transaction import Transaction


class TestGenerators:
    @pytest.mark.parametrize("prefix", ["TXN", "TRF", "EXT", "INT", "PAY", "LNP"])
    def test_reference_shape(self, prefix):
        reference = generate_reference(prefix)
        assert re.fullmatch(rf"{prefix}\d{{13}}\d{{4}}", reference)

    def test_account_number_is_ten_digits(self):
        for _ in range(50):
            assert re.fullmatch(r"\d{10}", generate_account_number())


class TestGenerateUnique:
    async def test_returns_unused_candidate(self, db_session):
        reference = await generate_unique_reference(db_session, Transaction.transaction_id, "TXN")
        assert reference.startswith("TXN")

    async def test_skips_taken_candidates(self, authenticated_client, db_session):
        result = await db_session.execute(select(Account.account_number))
        taken = result.scalar_one()

        candidates = iter([taken, taken, "0123456789"])
        number = await generate_unique(
            db_session, Account.account_number, lambda: next(candidates), "account number",
        )
        assert number == "0123456789"

    async def test_gives_up_after_max_attempts(self, authenticated_client, db_session):
        result = await db_session.execute(select(Account.account_number))
        taken = result.scalar_one()

        calls = []

        def factory():
            calls.append(1)
            return taken

        with pytest.raises(GenerationExhaustedError):
            await generate_unique(db_session, Account.account_number, factory, "account number")
        assert len(calls) == settings.MAX_ID_GENERATION_ATTEMPTS

    async def test_exhaustion_maps_to_503(self, authenticated_client, monkeypatch):
        monkeypatch.setattr(settings, "MAX_ID_GENERATION_ATTEMPTS", 0)
        response = await authenticated_client.post("/accounts", json={"kind": "SAVINGS"})
        assert response.status_code == 503
        assert response.json()["error_type"] == "generation_exhausted"
