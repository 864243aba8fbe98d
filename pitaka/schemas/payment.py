import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from pitaka.models.payment import BillerCategory
from pitaka.models.transaction import OperationStatus


class BillerResponse(BaseModel):
    id: uuid.UUID
    name: str
    category: BillerCategory
    account_number_label: str
    account_number_length: int | None
    minimum_amount_cents: int
    maximum_amount_cents: int
    convenience_fee_cents: int
    popular_index: int | None

    model_config = {"from_attributes": True}


class PaymentCreateRequest(BaseModel):
    """Request body for POST /payments."""
    account_id: uuid.UUID
    biller_id: uuid.UUID
    payee_account_number: str = Field(min_length=1, max_length=100)
    amount_cents: int = Field(gt=0, description="Amount in cents, before the convenience fee")
    description: str | None = Field(None, max_length=255)


class PaymentResponse(BaseModel):
    id: uuid.UUID
    reference_number: str
    account_id: uuid.UUID
    biller_id: uuid.UUID
    biller_name: str
    payee_account_number: str
    amount_cents: int
    fee_cents: int
    status: OperationStatus
    transaction_id: str | None
    description: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
