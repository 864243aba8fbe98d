"""
Pydantic schemas for Account endpoints.

All monetary amounts are in integer cents (e.g., ₱10.50 = 1050).
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from pitaka.models.account import AccountKind


class AccountCreateRequest(BaseModel):
    """Request body for POST /accounts."""
    kind: AccountKind = AccountKind.SAVINGS
    display_name: str | None = Field(None, max_length=100)


class AccountResponse(BaseModel):
    id: uuid.UUID
    account_number: str
    kind: AccountKind
    display_name: str
    balance_cents: int
    currency_label: str
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class BalanceResponse(BaseModel):
    """Stored balance next to the balance replayed from the ledger."""
    account_id: uuid.UUID
    balance_cents: int
    computed_balance_cents: int
    match: bool
    currency_label: str

    model_config = {"from_attributes": True}


class AccountLookupResponse(BaseModel):
    """What a sender may see about an account number before paying it."""
    account_number: str
    kind: AccountKind
    owner_name: str

    model_config = {"from_attributes": True}
