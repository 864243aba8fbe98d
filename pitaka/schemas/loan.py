"""
Pydantic schemas for Loan endpoints.

Rates are carried in basis points (1050 = 10.5% p.a.); amounts in cents.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from pitaka.models.loan import LoanStatus, PaymentFrequency
from pitaka.models.transaction import OperationStatus


class LoanProductResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: str | None
    annual_rate_bps: int
    annual_rate_percent: float
    min_amount_cents: int
    max_amount_cents: int
    min_term_months: int
    max_term_months: int

    model_config = {"from_attributes": True}


class LoanApplicationRequest(BaseModel):
    """Request body for POST /loans."""
    product_id: uuid.UUID
    amount_cents: int = Field(gt=0)
    term_months: int = Field(gt=0)
    account_id: uuid.UUID | None = Field(
        None, description="Account to disburse into and repay from; defaults to the main account"
    )
    purpose: str | None = Field(None, max_length=255)
    payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY


class LoanResponse(BaseModel):
    id: uuid.UUID
    loan_product_id: uuid.UUID
    account_id: uuid.UUID
    title: str
    purpose: str | None
    principal_cents: int
    paid_cents: int
    remaining_cents: int
    next_payment_cents: int
    term_months: int
    annual_rate_bps: int
    due_date: datetime
    progress_percent: float
    status: LoanStatus
    payment_frequency: PaymentFrequency
    approval_date: datetime | None
    disbursement_date: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


class LoanPaymentRequest(BaseModel):
    """Request body for POST /loans/{id}/payments."""
    amount_cents: int = Field(gt=0)
    account_id: uuid.UUID | None = Field(
        None, description="Account to pay from; defaults to the loan's linked account"
    )


class LoanPaymentResponse(BaseModel):
    id: uuid.UUID
    loan_id: uuid.UUID
    account_id: uuid.UUID
    reference: str
    amount_cents: int
    status: OperationStatus
    transaction_id: str
    paid_at: datetime

    model_config = {"from_attributes": True}


class LoanPaymentResult(BaseModel):
    loan: LoanResponse
    payment: LoanPaymentResponse
