"""
Payments router — bill payments.

Endpoints:
  GET   /payments/billers        — Biller catalogue (optionally by category)
  POST  /payments                — Pay a bill
  GET   /payments                — List my payments
  GET   /payments/{id}           — Get one payment
  PATCH /payments/{id}/cancel    — Cancel a pending payment
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.database import get_db
from pitaka.dependencies import AuthenticatedPrincipal, get_current_principal
from pitaka.models.payment import BillerCategory
from pitaka.models.transaction import OperationStatus
from pitaka.schemas.common import Envelope, ok
from pitaka.schemas.payment import BillerResponse, PaymentCreateRequest, PaymentResponse
from pitaka.services import payment_service

router = APIRouter()


@router.get("/billers", response_model=Envelope[list[BillerResponse]], summary="List billers")
async def list_billers(
    category: BillerCategory | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    return ok(await payment_service.get_billers(db, category))


@router.post(
    "",
    response_model=Envelope[PaymentResponse],
    status_code=201,
    summary="Pay a bill",
)
async def pay_bill(
    request: PaymentCreateRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Pay a biller from one of my accounts.

    The amount must be within the biller's limits. The biller's
    convenience fee is charged on top, and the account must cover both.
    """
    payment = await payment_service.pay_bill(
        db,
        principal,
        account_id=request.account_id,
        biller_id=request.biller_id,
        payee_account_number=request.payee_account_number,
        amount_cents=request.amount_cents,
        description=request.description,
    )
    return ok(payment, "Payment successful")


@router.get("", response_model=Envelope[list[PaymentResponse]], summary="List my payments")
async def list_payments(
    status: OperationStatus | None = Query(None, description="Filter by status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    payments = await payment_service.get_payments(
        db, principal, status_filter=status, limit=limit, offset=offset,
    )
    return ok(payments)


@router.get("/{payment_id}", response_model=Envelope[PaymentResponse], summary="Get a payment")
async def get_payment(
    payment_id: uuid.UUID,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return ok(await payment_service.get_payment(db, principal, payment_id))


@router.patch(
    "/{payment_id}/cancel",
    response_model=Envelope[PaymentResponse],
    summary="Cancel a pending payment",
)
async def cancel_payment(
    payment_id: uuid.UUID,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Only PENDING payments can be cancelled; anything else returns 409."""
    payment = await payment_service.cancel_payment(db, principal, payment_id)
    return ok(payment, "Payment cancelled")
