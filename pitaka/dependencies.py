"""
FastAPI dependencies for authentication.

Dependency chain:

  get_current_user (JWT -> User)
      └── get_current_principal (User -> AuthenticatedPrincipal)

Services never see a request or a token. Every operation that acts on
someone's money takes an AuthenticatedPrincipal, so a call without a
resolved owner can't be written by accident; ownership scoping happens
inside the services against principal.owner_id.
"""

import uuid
from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.database import get_db
from pitaka.models.user import User
from pitaka.security import decode_access_token


# Where to look for the token: the "Authorization: Bearer <token>" header.
# tokenUrl points Swagger UI's "Authorize" button at the login endpoint.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


@dataclass(frozen=True)
class AuthenticatedPrincipal:
    """The caller every money-moving operation acts on behalf of."""
    owner_id: uuid.UUID


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Extract and validate the JWT token, then return the corresponding User.

    Raises:
        HTTPException 401: If the token is invalid or the user doesn't exist.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token)
        user_id_str: str | None = payload.get("sub")
        if user_id_str is None:
            raise credentials_exception
        user_id = uuid.UUID(user_id_str)
    except (JWTError, ValueError):
        raise credentials_exception

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None or not user.is_active:
        raise credentials_exception

    return user


async def get_current_principal(
    user: User = Depends(get_current_user),
) -> AuthenticatedPrincipal:
    return AuthenticatedPrincipal(owner_id=user.id)
