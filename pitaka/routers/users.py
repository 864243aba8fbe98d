"""
User router — the caller's profile and settings, and finding other users.

Endpoints:
  GET   /users/me            — My profile
  PATCH /users/me            — Update my profile
  GET   /users/me/settings   — My app settings
  PATCH /users/me/settings   — Update my app settings
  GET   /users/search        — Find other users by name
  GET   /users/{id}          — Name and account number for a user id

/me and /search are declared before /{user_id} so the literal segments win.
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.database import get_db
from pitaka.dependencies import AuthenticatedPrincipal, get_current_principal
from pitaka.schemas.common import Envelope, ok
from pitaka.schemas.user import (
    UserResponse,
    UserSettingsResponse,
    UserSettingsUpdateRequest,
    UserSummary,
    UserUpdateRequest,
)
from pitaka.services import user_service

router = APIRouter()


@router.get("/me", response_model=Envelope[UserResponse], summary="Get my profile")
async def get_me(
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return ok(await user_service.get_me(db, principal))


@router.patch("/me", response_model=Envelope[UserResponse], summary="Update my profile")
async def update_me(
    request: UserUpdateRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.update_me(
        db,
        principal,
        first_name=request.first_name,
        last_name=request.last_name,
        phone=request.phone,
    )
    return ok(user, "Profile updated")


@router.get("/me/settings", response_model=Envelope[UserSettingsResponse], summary="Get my settings")
async def get_settings(
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return ok(await user_service.get_me(db, principal))


@router.patch(
    "/me/settings",
    response_model=Envelope[UserSettingsResponse],
    summary="Update my settings",
)
async def update_settings(
    request: UserSettingsUpdateRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.update_settings(
        db,
        principal,
        notifications_enabled=request.notifications_enabled,
        dark_mode_enabled=request.dark_mode_enabled,
        biometrics_enabled=request.biometrics_enabled,
        language=request.language,
    )
    return ok(user, "Settings updated")


@router.get("/search", response_model=Envelope[list[UserSummary]], summary="Find users by name")
async def search_users(
    query: str = Query(..., max_length=100, description="Part of a first or last name"),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Find other users to send money to. Only names and MAIN account numbers
    are returned, never emails, phones or balances.
    """
    return ok(await user_service.search_users(db, principal, query))


@router.get("/{user_id}", response_model=Envelope[UserSummary], summary="Get a user's public profile")
async def get_user(
    user_id: uuid.UUID,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return ok(await user_service.get_public_profile(db, principal, user_id))
