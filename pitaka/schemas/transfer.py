"""
Pydantic schemas for Transfer, recipient and bank endpoints.

All monetary amounts are in integer cents.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from pitaka.models.transaction import OperationStatus
from pitaka.models.transfer import TransferKind


class InternalTransferRequest(BaseModel):
    """Request body for POST /transfers/internal (between the caller's own accounts)."""
    from_account_id: uuid.UUID
    to_account_id: uuid.UUID
    amount_cents: int = Field(gt=0, description="Amount in cents (must be positive)")
    description: str | None = Field(None, max_length=255)

    @model_validator(mode="after")
    def accounts_must_differ(self):
        if self.from_account_id == self.to_account_id:
            raise ValueError("Cannot transfer to the same account")
        return self


class ExternalTransferRequest(BaseModel):
    """Request body for POST /transfers/external (to another Pitaka user's account number)."""
    from_account_id: uuid.UUID
    recipient_account_number: str = Field(min_length=10, max_length=10, pattern=r"^\d{10}$")
    amount_cents: int = Field(gt=0, description="Amount in cents (must be positive)")
    description: str | None = Field(None, max_length=255)


class InterbankTransferRequest(BaseModel):
    """Request body for POST /transfers/interbank."""
    from_account_id: uuid.UUID
    bank_code: str = Field(min_length=1, max_length=20)
    recipient_account_number: str = Field(min_length=1, max_length=34)
    recipient_name: str = Field(min_length=1, max_length=200)
    amount_cents: int = Field(gt=0, description="Amount in cents (must be positive)")
    description: str | None = Field(None, max_length=255)


class TransferResponse(BaseModel):
    id: uuid.UUID
    reference: str
    kind: TransferKind
    status: OperationStatus
    sender_account_id: uuid.UUID
    recipient_account_id: uuid.UUID | None
    recipient_account_number: str
    recipient_name: str
    amount_cents: int
    fee_cents: int
    total_debit_cents: int
    bank_name: str | None
    bank_code: str | None
    description: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class RecipientCreateRequest(BaseModel):
    """Request body for POST /transfers/recipients."""
    name: str = Field(min_length=1, max_length=200)
    account_number: str = Field(min_length=1, max_length=34)
    bank_code: str | None = Field(None, max_length=20)


class RecipientResponse(BaseModel):
    id: uuid.UUID
    name: str
    account_number: str
    bank_name: str | None
    bank_code: str | None
    is_favorite: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class BankResponse(BaseModel):
    id: uuid.UUID
    name: str
    code: str
    country: str
    swift_code: str | None
    transfer_fee_cents: int

    model_config = {"from_attributes": True}
