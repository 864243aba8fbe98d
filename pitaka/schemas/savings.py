import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from pitaka.models.savings import AutoTransferFrequency, SavingsEntryKind


class SavingsGoalCreateRequest(BaseModel):
    """Request body for POST /savings."""
    linked_account_id: uuid.UUID
    name: str = Field(min_length=1, max_length=100)
    target_amount_cents: int = Field(gt=0)
    end_date: datetime | None = None
    icon: str | None = Field(None, max_length=50)
    notes: str | None = None
    interest_rate: float | None = Field(None, ge=0)
    auto_transfer_enabled: bool = False
    auto_transfer_amount_cents: int = Field(0, ge=0)
    auto_transfer_frequency: AutoTransferFrequency = AutoTransferFrequency.NONE
    initial_deposit_cents: int = Field(0, ge=0)


class SavingsAmountRequest(BaseModel):
    """Request body for POST /savings/{id}/deposit and /savings/{id}/withdraw."""
    amount_cents: int = Field(gt=0)


class SavingsEntryResponse(BaseModel):
    id: uuid.UUID
    kind: SavingsEntryKind
    amount_cents: int
    occurred_at: datetime

    model_config = {"from_attributes": True}


class SavingsGoalResponse(BaseModel):
    id: uuid.UUID
    linked_account_id: uuid.UUID
    name: str
    icon: str
    target_amount_cents: int
    current_amount_cents: int
    progress: float
    end_date: datetime | None
    interest_rate: float
    auto_transfer_enabled: bool
    auto_transfer_amount_cents: int
    auto_transfer_frequency: AutoTransferFrequency
    notes: str | None
    is_active: bool
    entries: list[SavingsEntryResponse]
    created_at: datetime

    model_config = {"from_attributes": True}
