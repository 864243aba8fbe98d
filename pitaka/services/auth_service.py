"""
Authentication service — signup and login business logic.

Signup flow:
  1. Check if email is already registered
  2. Hash the password with Argon2id
  3. Create the User and their MAIN account in the request's transaction
  4. Return a JWT token so the user is immediately logged in

Login flow:
  1. Look up user by email
  2. Verify password against stored hash
  3. Return a JWT token

Login returns the same error for "wrong password" and "email not found"
so valid emails can't be enumerated.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.exceptions import DuplicateEmailError, InvalidCredentialsError
from pitaka.models.account import AccountKind
from pitaka.models.user import User
from pitaka.security import create_access_token, hash_password, verify_password
from pitaka.services import account_service

logger = logging.getLogger(__name__)


async def signup(
    db: AsyncSession,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    phone: str | None = None,
) -> tuple[User, str]:
    """
    Register a new user with a zero-balance MAIN account.

    Returns:
        Tuple of (User instance, JWT token string).

    Raises:
        DuplicateEmailError: If the email is already registered.
    """
    email = email.lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise DuplicateEmailError(email)

    user = User(
        email=email,
        hashed_password=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        phone=phone,
    )
    db.add(user)
    # Flush to get user.id for the account's owner_id
    await db.flush()

    await account_service.create_account(db, user.id, AccountKind.MAIN)

    token = create_access_token(data={"sub": str(user.id)})
    logger.info("User signed up", extra={"owner_id": str(user.id)})
    return user, token


async def login(
    db: AsyncSession,
    email: str,
    password: str,
) -> tuple[User, str]:
    """
    Authenticate a user and return a JWT token.

    Raises:
        InvalidCredentialsError: If email doesn't exist, the password is
            wrong or the user is deactivated.
    """
    result = await db.execute(select(User).where(User.email == email.lower()))
    user = result.scalar_one_or_none()

    if not user or not verify_password(password, user.hashed_password) or not user.is_active:
        logger.warning("Login rejected")
        raise InvalidCredentialsError()

    token = create_access_token(data={"sub": str(user.id)})
    return user, token
