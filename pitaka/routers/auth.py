"""
Authentication router — signup and login endpoints.

These are the only public (unauthenticated) endpoints in the API besides
the reference catalogues and /health. Everything else requires a valid
JWT token.

Endpoints:
  POST /auth/signup  — Register a new user and get a token
  POST /auth/login   — Authenticate and get a token

Plaintext passwords exist only in memory during request processing; they
are hashed before any database operation and never logged.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.database import get_db
from pitaka.schemas.auth import TokenResponse, UserLoginRequest, UserSignupRequest
from pitaka.schemas.common import Envelope, ok
from pitaka.services import auth_service

router = APIRouter()


@router.post(
    "/signup",
    response_model=Envelope[TokenResponse],
    status_code=201,
    summary="Register a new user",
)
async def signup(
    request: UserSignupRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Register a new user.

    Creates the User and their MAIN account in a single atomic transaction.
    Returns a JWT token so the user is immediately logged in after signup.
    """
    user, token = await auth_service.signup(
        db=db,
        email=request.email,
        password=request.password,
        first_name=request.first_name,
        last_name=request.last_name,
        phone=request.phone,
    )
    return ok(
        TokenResponse(user_id=user.id, email=user.email, token=token),
        "Account created",
    )


@router.post(
    "/login",
    response_model=Envelope[TokenResponse],
    summary="Authenticate and get a token",
)
async def login(
    request: UserLoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Authenticate with email and password.

    Returns a JWT bearer token that must be included in the Authorization
    header for all subsequent requests:

        Authorization: Bearer <token>
    """
    user, token = await auth_service.login(db=db, email=request.email, password=request.password)
    return ok(TokenResponse(user_id=user.id, email=user.email, token=token))
