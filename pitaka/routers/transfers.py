"""
Transfers router — sending money and managing saved recipients.

Endpoints:
  GET    /transfers/recipients                 — List saved recipients
  POST   /transfers/recipients                 — Save a recipient
  PATCH  /transfers/recipients/{id}/favorite   — Toggle favorite
  DELETE /transfers/recipients/{id}            — Remove a recipient
  POST   /transfers/internal                   — Between my own accounts
  POST   /transfers/external                   — To another Pitaka account number
  POST   /transfers/interbank                  — To another bank (flat fee)
  GET    /transfers                            — Transfers I sent or received
  GET    /transfers/{id}                       — Get one transfer

Literal paths are declared before /{transfer_id}.
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.database import get_db
from pitaka.dependencies import AuthenticatedPrincipal, get_current_principal
from pitaka.models.transfer import TransferKind
from pitaka.schemas.common import Envelope, ok
from pitaka.schemas.transfer import (
    ExternalTransferRequest,
    InterbankTransferRequest,
    InternalTransferRequest,
    RecipientCreateRequest,
    RecipientResponse,
    TransferResponse,
)
from pitaka.services import transfer_service

router = APIRouter()


# ---------------------------------------------------------------------------
# Recipients
# ---------------------------------------------------------------------------

@router.get(
    "/recipients",
    response_model=Envelope[list[RecipientResponse]],
    summary="List saved recipients",
)
async def list_recipients(
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Favorites first, then alphabetical."""
    return ok(await transfer_service.get_recipients(db, principal))


@router.post(
    "/recipients",
    response_model=Envelope[RecipientResponse],
    status_code=201,
    summary="Save a recipient",
)
async def add_recipient(
    request: RecipientCreateRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    recipient = await transfer_service.add_recipient(
        db,
        principal,
        name=request.name,
        account_number=request.account_number,
        bank_code=request.bank_code,
    )
    return ok(recipient, "Recipient saved")


@router.patch(
    "/recipients/{recipient_id}/favorite",
    response_model=Envelope[RecipientResponse],
    summary="Toggle a recipient's favorite flag",
)
async def toggle_favorite(
    recipient_id: uuid.UUID,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return ok(await transfer_service.toggle_favorite(db, principal, recipient_id))


@router.delete(
    "/recipients/{recipient_id}",
    response_model=Envelope[None],
    summary="Remove a saved recipient",
)
async def remove_recipient(
    recipient_id: uuid.UUID,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    await transfer_service.remove_recipient(db, principal, recipient_id)
    return ok(None, "Recipient removed")


# ---------------------------------------------------------------------------
# Money movement
# ---------------------------------------------------------------------------

@router.post(
    "/internal",
    response_model=Envelope[TransferResponse],
    status_code=201,
    summary="Transfer between my own accounts",
)
async def internal_transfer(
    request: InternalTransferRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    transfer = await transfer_service.internal_transfer(
        db,
        principal,
        from_account_id=request.from_account_id,
        to_account_id=request.to_account_id,
        amount_cents=request.amount_cents,
        description=request.description,
    )
    return ok(transfer, "Transfer successful")


@router.post(
    "/external",
    response_model=Envelope[TransferResponse],
    status_code=201,
    summary="Transfer to another Pitaka account",
)
async def external_transfer(
    request: ExternalTransferRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Send money to another user's account number. The recipient is saved
    to my recipient list if it isn't there already.
    """
    transfer = await transfer_service.external_transfer(
        db,
        principal,
        from_account_id=request.from_account_id,
        recipient_account_number=request.recipient_account_number,
        amount_cents=request.amount_cents,
        description=request.description,
    )
    return ok(transfer, "Transfer successful")


@router.post(
    "/interbank",
    response_model=Envelope[TransferResponse],
    status_code=201,
    summary="Transfer to another bank",
)
async def interbank_transfer(
    request: InterbankTransferRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Send money out of Pitaka. The receiving bank's flat fee is charged on
    top of the amount; the balance must cover both.
    """
    transfer = await transfer_service.interbank_transfer(
        db,
        principal,
        from_account_id=request.from_account_id,
        bank_code=request.bank_code,
        recipient_account_number=request.recipient_account_number,
        recipient_name=request.recipient_name,
        amount_cents=request.amount_cents,
        description=request.description,
    )
    return ok(transfer, "Transfer successful")


@router.get("", response_model=Envelope[list[TransferResponse]], summary="List my transfers")
async def list_transfers(
    kind: TransferKind | None = Query(None, description="Filter by transfer kind"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    transfers = await transfer_service.get_transfers(
        db, principal, kind_filter=kind, limit=limit, offset=offset,
    )
    return ok(transfers)


@router.get("/{transfer_id}", response_model=Envelope[TransferResponse], summary="Get a transfer")
async def get_transfer(
    transfer_id: uuid.UUID,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return ok(await transfer_service.get_transfer(db, principal, transfer_id))
