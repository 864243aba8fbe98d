"""
Transactions router — cash moves and the caller's ledger.

Endpoints:
  POST /transactions/deposit    — Credit an owned account
  POST /transactions/withdraw   — Debit an owned account
  POST /transactions/transfer   — Move money to any account by id
  GET  /transactions            — List my ledger entries (with filters)
  GET  /transactions/{id}       — Get one ledger entry

All amounts are in integer cents (e.g., ₱10.50 = 1050).
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.database import get_db
from pitaka.dependencies import AuthenticatedPrincipal, get_current_principal
from pitaka.models.transaction import TransactionKind
from pitaka.schemas.common import Envelope, ok
from pitaka.schemas.transaction import (
    CashRequest,
    CashResponse,
    TransactionResponse,
    TransferByIdRequest,
)
from pitaka.schemas.transfer import TransferResponse
from pitaka.services import transaction_service, transfer_service

router = APIRouter()


@router.post(
    "/deposit",
    response_model=Envelope[CashResponse],
    status_code=201,
    summary="Deposit into an account",
)
async def deposit(
    request: CashRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    account, txn = await transaction_service.deposit(
        db, principal, request.account_id, request.amount_cents, request.description,
    )
    return ok({"account": account, "transaction": txn}, "Deposit successful")


@router.post(
    "/withdraw",
    response_model=Envelope[CashResponse],
    status_code=201,
    summary="Withdraw from an account",
)
async def withdraw(
    request: CashRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Withdraw cash. Rejected with 422 if the balance is lower than the
    amount; a rejected withdrawal writes nothing.
    """
    account, txn = await transaction_service.withdraw(
        db, principal, request.account_id, request.amount_cents, request.description,
    )
    return ok({"account": account, "transaction": txn}, "Withdrawal successful")


@router.post(
    "/transfer",
    response_model=Envelope[TransferResponse],
    status_code=201,
    summary="Transfer to an account by id",
)
async def transfer(
    request: TransferByIdRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Move money from one of my accounts to any active account by id.

    Both sides are written atomically: a debit row on the sender and a
    credit row on the receiver, sharing the transfer reference.
    """
    result = await transfer_service.transfer_by_account_id(
        db,
        principal,
        from_account_id=request.from_account_id,
        to_account_id=request.to_account_id,
        amount_cents=request.amount_cents,
        description=request.description,
    )
    return ok(result, "Transfer successful")


@router.get("", response_model=Envelope[list[TransactionResponse]], summary="List my transactions")
async def list_transactions(
    kind: TransactionKind | None = Query(None, description="Filter by transaction kind"),
    account_id: uuid.UUID | None = Query(None, description="Only entries for this account"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """List ledger entries across all my accounts, newest first."""
    txns = await transaction_service.get_transactions(
        db, principal, kind_filter=kind, account_id=account_id, limit=limit, offset=offset,
    )
    return ok(txns)


@router.get(
    "/{transaction_id}",
    response_model=Envelope[TransactionResponse],
    summary="Get a single transaction",
)
async def get_transaction(
    transaction_id: uuid.UUID,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return ok(await transaction_service.get_transaction(db, principal, transaction_id))
