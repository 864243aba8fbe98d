"""
Pydantic schemas for Transaction endpoints.

All monetary amounts are in integer cents. amount_cents is always
positive; direction says which way the money moved.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from pitaka.models.transaction import Direction, OperationStatus, TransactionKind
from pitaka.schemas.account import AccountResponse


class CashRequest(BaseModel):
    """Request body for POST /transactions/deposit and /transactions/withdraw."""
    account_id: uuid.UUID
    amount_cents: int = Field(gt=0, description="Amount in cents (must be positive)")
    description: str | None = Field(None, max_length=255)


class TransferByIdRequest(BaseModel):
    """Request body for POST /transactions/transfer."""
    from_account_id: uuid.UUID
    to_account_id: uuid.UUID
    amount_cents: int = Field(gt=0, description="Amount in cents (must be positive)")
    description: str | None = Field(None, max_length=255)

    @model_validator(mode="after")
    def accounts_must_differ(self):
        """Cannot transfer money to the same account."""
        if self.from_account_id == self.to_account_id:
            raise ValueError("Cannot transfer to the same account")
        return self


class TransactionResponse(BaseModel):
    """Public representation of a ledger entry."""
    id: uuid.UUID
    transaction_id: str
    account_id: uuid.UUID
    kind: TransactionKind
    direction: Direction
    amount_cents: int
    fee_cents: int
    description: str | None
    status: OperationStatus
    transfer_id: uuid.UUID | None
    payment_id: uuid.UUID | None
    loan_id: uuid.UUID | None
    savings_goal_id: uuid.UUID | None
    investment_id: uuid.UUID | None
    occurred_at: datetime

    model_config = {"from_attributes": True}


class CashResponse(BaseModel):
    """Result of a deposit or withdrawal: the new account state and its entry."""
    account: AccountResponse
    transaction: TransactionResponse
