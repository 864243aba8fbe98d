"""
Loans router — product catalogue, applications and repayment.

Endpoints:
  GET  /loans/products           — Loan products
  POST /loans                    — Apply for a loan (PENDING)
  GET  /loans                    — List my loans
  GET  /loans/{id}               — Get one loan
  POST /loans/{id}/disburse      — PENDING -> ACTIVE, pays out the principal
  POST /loans/{id}/cancel        — PENDING -> CANCELLED
  POST /loans/{id}/payments      — Repay
  GET  /loans/{id}/payments      — Repayment history
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.database import get_db
from pitaka.dependencies import AuthenticatedPrincipal, get_current_principal
from pitaka.models.loan import LoanStatus
from pitaka.schemas.common import Envelope, ok
from pitaka.schemas.loan import (
    LoanApplicationRequest,
    LoanPaymentRequest,
    LoanPaymentResponse,
    LoanPaymentResult,
    LoanProductResponse,
    LoanResponse,
)
from pitaka.services import loan_service

router = APIRouter()


@router.get(
    "/products",
    response_model=Envelope[list[LoanProductResponse]],
    summary="List loan products",
)
async def list_products(db: AsyncSession = Depends(get_db)):
    return ok(await loan_service.get_products(db))


@router.post(
    "",
    response_model=Envelope[LoanResponse],
    status_code=201,
    summary="Apply for a loan",
)
async def apply_for_loan(
    request: LoanApplicationRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Apply against a product. The amount and term must be within the
    product's ranges. The loan starts PENDING with its installment
    already computed.
    """
    loan = await loan_service.apply_for_loan(
        db,
        principal,
        product_id=request.product_id,
        amount_cents=request.amount_cents,
        term_months=request.term_months,
        account_id=request.account_id,
        purpose=request.purpose,
        payment_frequency=request.payment_frequency,
    )
    return ok(loan, "Loan application submitted")


@router.get("", response_model=Envelope[list[LoanResponse]], summary="List my loans")
async def list_loans(
    status: LoanStatus | None = Query(None, description="Filter by loan status"),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return ok(await loan_service.get_loans(db, principal, status_filter=status))


@router.get("/{loan_id}", response_model=Envelope[LoanResponse], summary="Get a loan")
async def get_loan(
    loan_id: uuid.UUID,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return ok(await loan_service.get_loan(db, principal, loan_id))


@router.post("/{loan_id}/disburse", response_model=Envelope[LoanResponse], summary="Disburse a loan")
async def disburse_loan(
    loan_id: uuid.UUID,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    loan = await loan_service.disburse_loan(db, principal, loan_id)
    return ok(loan, "Loan disbursed")


@router.post("/{loan_id}/cancel", response_model=Envelope[LoanResponse], summary="Cancel a loan")
async def cancel_loan(
    loan_id: uuid.UUID,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    loan = await loan_service.cancel_loan(db, principal, loan_id)
    return ok(loan, "Loan cancelled")


@router.post(
    "/{loan_id}/payments",
    response_model=Envelope[LoanPaymentResult],
    status_code=201,
    summary="Make a loan payment",
)
async def make_payment(
    loan_id: uuid.UUID,
    request: LoanPaymentRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Repay part or all of an APPROVED or ACTIVE loan. A payment larger than
    the remaining balance is rejected; paying the balance to zero marks
    the loan COMPLETED.
    """
    loan, payment = await loan_service.make_payment(
        db, principal, loan_id, request.amount_cents, account_id=request.account_id,
    )
    return ok({"loan": loan, "payment": payment}, "Payment successful")


@router.get(
    "/{loan_id}/payments",
    response_model=Envelope[list[LoanPaymentResponse]],
    summary="List a loan's payments",
)
async def list_payments(
    loan_id: uuid.UUID,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return ok(await loan_service.get_payments(db, principal, loan_id))
