"""
Accounts router — open, list and inspect the caller's accounts.

Endpoints:
  POST /accounts                          — Open a SAVINGS or INVESTMENT account
  GET  /accounts                          — List my accounts
  GET  /accounts/lookup/{account_number}  — Who does this number belong to?
  GET  /accounts/{id}                     — Get one account
  GET  /accounts/{id}/balance             — Stored vs. ledger-computed balance
  GET  /accounts/{id}/transactions        — Ledger entries for one account

/lookup is declared before /{account_id} so the literal segment wins.
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.database import get_db
from pitaka.dependencies import AuthenticatedPrincipal, get_current_principal
from pitaka.models.transaction import TransactionKind
from pitaka.schemas.account import (
    AccountCreateRequest,
    AccountLookupResponse,
    AccountResponse,
    BalanceResponse,
)
from pitaka.schemas.common import Envelope, ok
from pitaka.schemas.transaction import TransactionResponse
from pitaka.services import account_service

router = APIRouter()


@router.post(
    "",
    response_model=Envelope[AccountResponse],
    status_code=201,
    summary="Open an account",
)
async def create_account(
    request: AccountCreateRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Open an additional account with a zero balance and a fresh 10-digit number."""
    account = await account_service.create_account(
        db,
        principal.owner_id,
        kind=request.kind,
        display_name=request.display_name,
    )
    return ok(account, "Account opened")


@router.get("", response_model=Envelope[list[AccountResponse]], summary="List my accounts")
async def list_accounts(
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return ok(await account_service.get_accounts(db, principal))


@router.get(
    "/lookup/{account_number}",
    response_model=Envelope[AccountLookupResponse],
    summary="Look up an account number",
)
async def lookup_account(
    account_number: str,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Confirm who an account number belongs to before sending money to it.
    Only the number, account kind and owner name are returned.
    """
    return ok(await account_service.lookup_by_number(db, account_number))


@router.get("/{account_id}", response_model=Envelope[AccountResponse], summary="Get an account")
async def get_account(
    account_id: uuid.UUID,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return ok(await account_service.get_account(db, account_id, principal))


@router.get(
    "/{account_id}/balance",
    response_model=Envelope[BalanceResponse],
    summary="Get and verify an account balance",
)
async def get_balance(
    account_id: uuid.UUID,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Return the stored balance alongside the balance replayed from the
    account's ledger entries. `match` is false only if they disagree.
    """
    return ok(await account_service.get_balance(db, account_id, principal))


@router.get(
    "/{account_id}/transactions",
    response_model=Envelope[list[TransactionResponse]],
    summary="List an account's ledger entries",
)
async def list_account_transactions(
    account_id: uuid.UUID,
    kind: TransactionKind | None = Query(None, description="Filter by transaction kind"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    txns = await account_service.get_account_transactions(
        db, account_id, principal, kind_filter=kind, limit=limit, offset=offset,
    )
    return ok(txns)
