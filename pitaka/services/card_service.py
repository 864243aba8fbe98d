"""
Card service — saving, updating and removing payment cards.

When a card is added:
  1. The candidate is validated (pitaka.cards): length, Luhn, network,
     CVV length, expiry, cardholder name
  2. Its keyed fingerprint is checked against saved cards
  3. The card number and CVV are encrypted with Fernet before storage
  4. Only the masked number and last four digits are stored in plaintext

Default card:
  An owner's first card becomes the default. Setting is_default on one
  card clears it on the others; deleting the default promotes the most
  recently added remaining card.

Card numbers and CVVs are never logged.
"""

import logging
import uuid

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.cards import CardCandidate, validate_card_candidate, validate_expiry
from pitaka.dependencies import AuthenticatedPrincipal
from pitaka.exceptions import DuplicateCardError, InvalidRequestError, ResourceNotFoundError
from pitaka.models.card import Card
from pitaka.security import card_fingerprint, encrypt_value

logger = logging.getLogger(__name__)


async def _clear_default(db: AsyncSession, owner_id: uuid.UUID) -> None:
    await db.execute(
        update(Card)
        .where(Card.owner_id == owner_id, Card.is_default.is_(True))
        .values(is_default=False)
        .execution_options(synchronize_session="fetch")
    )


async def add_card(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    candidate: CardCandidate,
    is_default: bool = False,
) -> Card:
    """
    Validate, encrypt and save a card.

    The owner's first card becomes the default whatever is_default says.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        candidate: The card as typed in (number, name, expiry, CVV).
        is_default: Make this the default card.

    Returns:
        The saved Card. Only its masked number and last four are readable.

    Raises:
        InvalidRequestError: If the card fails validation.
        DuplicateCardError: If this card number is already saved.
    """
    card = validate_card_candidate(candidate)
    fingerprint = card_fingerprint(card.digits)

    existing = await db.execute(select(Card.id).where(Card.card_fingerprint == fingerprint))
    if existing.scalar_one_or_none() is not None:
        raise DuplicateCardError(card.last_four)

    owned = await list_cards(db, principal)
    make_default = is_default or not owned
    if make_default:
        await _clear_default(db, principal.owner_id)

    saved = Card(
        owner_id=principal.owner_id,
        network=card.network,
        card_number_encrypted=encrypt_value(card.digits),
        card_fingerprint=fingerprint,
        masked_number=card.masked_number,
        last_four=card.last_four,
        cardholder_name=card.cardholder_name,
        expiry_month=card.expiry_month,
        expiry_year=card.expiry_year,
        cvv_encrypted=encrypt_value(card.cvv),
        is_default=make_default,
    )
    db.add(saved)
    await db.flush()

    logger.info(
        "Card saved",
        extra={
            "card_id": str(saved.id),
            "owner_id": str(principal.owner_id),
            "network": saved.network,
            "last_four": saved.last_four,
        },
    )
    return saved


async def list_cards(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
) -> list[Card]:
    """Active cards, default first, then newest."""
    result = await db.execute(
        select(Card)
        .where(Card.owner_id == principal.owner_id, Card.is_active.is_(True))
        .order_by(Card.is_default.desc(), Card.created_at.desc())
    )
    return list(result.scalars().all())


async def get_card(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    card_id: uuid.UUID,
) -> Card:
    """
    Get one of the principal's saved cards.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        card_id: UUID of the card.

    Returns:
        The Card.

    Raises:
        ResourceNotFoundError: If it doesn't exist or belongs to someone else.
    """
    result = await db.execute(
        select(Card).where(
            Card.id == card_id,
            Card.owner_id == principal.owner_id,
            Card.is_active.is_(True),
        )
    )
    card = result.scalar_one_or_none()
    if card is None:
        raise ResourceNotFoundError("Card", card_id)
    return card


async def update_card(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    card_id: uuid.UUID,
    cardholder_name: str | None = None,
    expiry_month: str | None = None,
    expiry_year: str | None = None,
    is_default: bool | None = None,
) -> Card:
    """
    Change the editable fields of a saved card. The number and CVV can't
    be changed; add a new card instead.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        card_id: UUID of the card.
        cardholder_name: New name on the card.
        expiry_month: New two-digit month; needs expiry_year too.
        expiry_year: New two-digit year; needs expiry_month too.
        is_default: True to make this the default card.

    Returns:
        The updated Card.

    Raises:
        ResourceNotFoundError: If the card isn't theirs.
        InvalidRequestError: If the new name or expiry is invalid, or
            only one of expiry_month / expiry_year is given.
    """
    card = await get_card(db, principal, card_id)

    if cardholder_name is not None:
        name = cardholder_name.strip()
        if not name:
            raise InvalidRequestError("Cardholder name is required")
        card.cardholder_name = name

    if (expiry_month is None) != (expiry_year is None):
        raise InvalidRequestError("Expiry month and year must be updated together")
    if expiry_month is not None:
        card.expiry_month, card.expiry_year = validate_expiry(expiry_month, expiry_year)

    if is_default and not card.is_default:
        await _clear_default(db, principal.owner_id)
        card.is_default = True
    elif is_default is False and card.is_default:
        # The owner keeps a default while any card remains
        raise InvalidRequestError("Set another card as default instead")

    await db.flush()
    return card


async def delete_card(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    card_id: uuid.UUID,
) -> None:
    """
    Remove a saved card. If it was the default, the newest remaining card
    takes over.

    Raises:
        ResourceNotFoundError: If the card isn't theirs.
    """
    card = await get_card(db, principal, card_id)
    was_default = card.is_default

    await db.delete(card)
    await db.flush()

    if was_default:
        remaining = await list_cards(db, principal)
        if remaining:
            remaining[0].is_default = True
            await db.flush()

    logger.info(
        "Card deleted",
        extra={"card_id": str(card_id), "owner_id": str(principal.owner_id)},
    )
