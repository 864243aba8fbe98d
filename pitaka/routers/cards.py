"""
Cards router — saved payment cards.

Endpoints:
  GET    /cards        — List my cards (default first)
  GET    /cards/{id}   — Get one card
  POST   /cards        — Save a card
  PATCH  /cards/{id}   — Update name, expiry or default flag
  DELETE /cards/{id}   — Remove a card

Responses carry the masked number and last four digits only.
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.cards import CardCandidate
from pitaka.database import get_db
from pitaka.dependencies import AuthenticatedPrincipal, get_current_principal
from pitaka.schemas.card import CardCreateRequest, CardResponse, CardUpdateRequest
from pitaka.schemas.common import Envelope, ok
from pitaka.services import card_service

router = APIRouter()


@router.get("", response_model=Envelope[list[CardResponse]], summary="List my cards")
async def list_cards(
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return ok(await card_service.list_cards(db, principal))


@router.get("/{card_id}", response_model=Envelope[CardResponse], summary="Get a card")
async def get_card(
    card_id: uuid.UUID,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return ok(await card_service.get_card(db, principal, card_id))


@router.post(
    "",
    response_model=Envelope[CardResponse],
    status_code=201,
    summary="Save a card",
)
async def add_card(
    request: CardCreateRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Validate and save a card. The number is checked against its network's
    prefix and the Luhn checksum; AMEX cards need a 4-digit CVV, all
    others 3. The number and CVV are encrypted at rest.
    """
    candidate = CardCandidate(
        card_number=request.card_number,
        cardholder_name=request.cardholder_name,
        expiry_month=request.expiry_month,
        expiry_year=request.expiry_year,
        cvv=request.cvv,
    )
    card = await card_service.add_card(db, principal, candidate, is_default=request.is_default)
    return ok(card, "Card added")


@router.patch("/{card_id}", response_model=Envelope[CardResponse], summary="Update a card")
async def update_card(
    card_id: uuid.UUID,
    request: CardUpdateRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    card = await card_service.update_card(
        db,
        principal,
        card_id,
        cardholder_name=request.cardholder_name,
        expiry_month=request.expiry_month,
        expiry_year=request.expiry_year,
        is_default=request.is_default,
    )
    return ok(card, "Card updated")


@router.delete("/{card_id}", response_model=Envelope[None], summary="Remove a card")
async def delete_card(
    card_id: uuid.UUID,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Removing the default card promotes the most recently added remaining card."""
    await card_service.delete_card(db, principal, card_id)
    return ok(None, "Card removed")
