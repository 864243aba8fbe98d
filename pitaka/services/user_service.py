"""
User service — profile, app settings and finding other users.

The caller's own record is read and written through the principal. Other
users are only ever exposed as a PublicProfile: a name and the MAIN
account number a transfer would go to.
"""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import String, select, func
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.dependencies import AuthenticatedPrincipal
from pitaka.exceptions import InvalidRequestError, ResourceNotFoundError
from pitaka.models.account import Account, AccountKind
from pitaka.models.user import User

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10


@dataclass
class PublicProfile:
    id: uuid.UUID
    full_name: str
    account_number: str | None


async def get_me(db: AsyncSession, principal: AuthenticatedPrincipal) -> User:
    user = await db.get(User, principal.owner_id)
    if user is None:
        raise ResourceNotFoundError("User", principal.owner_id)
    return user


async def update_me(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    first_name: str | None = None,
    last_name: str | None = None,
    phone: str | None = None,
) -> User:
    """
    Update the caller's profile. Email and password aren't editable here.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        first_name: New first name, or None to keep the current one.
        last_name: New last name, or None to keep the current one.
        phone: New phone number; an empty string clears it.

    Returns:
        The updated User.

    Raises:
        InvalidRequestError: If a name is given but blank.
    """
    user = await get_me(db, principal)

    for field, value in (("first_name", first_name), ("last_name", last_name)):
        if value is None:
            continue
        if not value.strip():
            raise InvalidRequestError(f"{field.replace('_', ' ').capitalize()} cannot be blank")
        setattr(user, field, value.strip())

    if phone is not None:
        user.phone = phone.strip() or None

    await db.flush()
    return user


async def update_settings(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    notifications_enabled: bool | None = None,
    dark_mode_enabled: bool | None = None,
    biometrics_enabled: bool | None = None,
    language: str | None = None,
) -> User:
    """
    Change the caller's app preferences. None leaves a setting unchanged.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        notifications_enabled: Push notifications on or off.
        dark_mode_enabled: Dark theme on or off.
        biometrics_enabled: Biometric login on or off.
        language: Language code, stored lower-case (e.g. "en", "fil").

    Returns:
        The User, whose settings fields reflect the change.

    Raises:
        InvalidRequestError: If the language code is blank.
    """
    user = await get_me(db, principal)

    if notifications_enabled is not None:
        user.notifications_enabled = notifications_enabled
    if dark_mode_enabled is not None:
        user.dark_mode_enabled = dark_mode_enabled
    if biometrics_enabled is not None:
        user.biometrics_enabled = biometrics_enabled
    if language is not None:
        if not language.strip():
            raise InvalidRequestError("Language cannot be blank")
        user.language = language.strip().lower()

    await db.flush()
    return user


def _main_account_number():
    # Oldest active MAIN account of the outer User row
    return (
        select(Account.account_number)
        .where(
            Account.owner_id == User.id,
            Account.kind == AccountKind.MAIN,
            Account.is_active.is_(True),
        )
        .order_by(Account.created_at)
        .limit(1)
        .correlate(User)
        .scalar_subquery()
    )


async def search_users(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    query: str,
) -> list[PublicProfile]:
    """
    Find other active users whose name contains the query, for picking a
    transfer recipient.

    Matching is case-insensitive against "first last", so a first name, a
    last name or a run across both all match. The caller never appears in
    their own results.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        query: Part of a name.

    Returns:
        Up to SEARCH_LIMIT profiles ordered by name.

    Raises:
        InvalidRequestError: If the query is blank.
    """
    term = query.strip().lower()
    if not term:
        raise InvalidRequestError("Search query is required")

    full_name = func.lower(User.first_name + " " + User.last_name, type_=String)
    result = await db.execute(
        select(User, _main_account_number())
        .where(
            User.id != principal.owner_id,
            User.is_active.is_(True),
            full_name.contains(term, autoescape=True),
        )
        .order_by(User.first_name, User.last_name)
        .limit(SEARCH_LIMIT)
    )
    return [
        PublicProfile(id=user.id, full_name=user.full_name, account_number=number)
        for user, number in result.all()
    ]


async def get_public_profile(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    user_id: uuid.UUID,
) -> PublicProfile:
    """
    Confirm who a user id belongs to before sending them money.

    Raises:
        ResourceNotFoundError: If no active user has this id.
    """
    result = await db.execute(
        select(User, _main_account_number())
        .where(User.id == user_id, User.is_active.is_(True))
    )
    row = result.one_or_none()
    if row is None:
        logger.warning(
            "User lookup missed",
            extra={"owner_id": str(principal.owner_id), "user_id": str(user_id)},
        )
        raise ResourceNotFoundError("User", user_id)

    user, number = row
    return PublicProfile(id=user.id, full_name=user.full_name, account_number=number)
