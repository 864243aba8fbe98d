"""
Custom exception classes and FastAPI exception handlers.

The service layer raises domain errors (like InsufficientFundsError)
without importing HTTP concepts. The handler layer translates them into
HTTP responses with a consistent JSON body:

    {"success": false, "detail": "...", "error_type": "..."}

Every domain error carries its HTTP status and error_type as class
attributes, so one generic handler covers the whole hierarchy. Only
InsufficientFundsError has a dedicated handler, because its body also
reports the requested and available amounts.

Exception hierarchy:
    PitakaError (base)
    ├── InvalidRequestError          400  malformed or contradictory request
    │   └── InvalidAmountError       400  amount <= 0 or outside allowed range
    ├── InvalidCredentialsError      401  bad email/password
    ├── ResourceNotFoundError        404  absent, or owned by someone else
    │   └── AccountNotFoundError     404
    ├── InvalidStateError            409  e.g. paying a loan that is not active
    ├── ConflictError                409
    │   ├── DuplicateCardError
    │   ├── DuplicateRecipientError
    │   └── DuplicateEmailError
    ├── InsufficientFundsError       422  account balance too low
    ├── InsufficientGoalFundsError   422  savings goal balance too low
    ├── InsufficientSharesError      422  selling more shares than held
    └── GenerationExhaustedError     503  no unique identifier after N attempts
"""

import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class PitakaError(Exception):
    """Base exception for all Pitaka domain errors."""

    status_code: int = 400
    error_type: str = "pitaka_error"

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

class InvalidRequestError(PitakaError):
    """Raised when a request is well-formed JSON but makes no sense (same source and destination, etc.)."""

    error_type = "invalid_request"


class InvalidAmountError(InvalidRequestError):
    """Raised when an amount is non-positive or outside the allowed range."""

    error_type = "invalid_amount"

    def __init__(self, detail: str = "Amount must be greater than zero"):
        super().__init__(detail)


class InvalidCredentialsError(PitakaError):
    """Raised when login credentials are incorrect."""

    status_code = 401
    error_type = "invalid_credentials"

    def __init__(self):
        super().__init__("Invalid email or password")


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

class ResourceNotFoundError(PitakaError):
    """
    Raised when a record does not exist or is not owned by the caller.

    Both cases produce the same error so that a caller can't test for the
    existence of another user's records.
    """

    status_code = 404
    error_type = "not_found"

    def __init__(self, resource: str, resource_id: object):
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} {resource_id} not found")


class AccountNotFoundError(ResourceNotFoundError):
    """Raised when a requested account does not exist for this owner."""

    error_type = "account_not_found"

    def __init__(self, account_id: uuid.UUID | str):
        self.account_id = account_id
        super().__init__("Account", account_id)


# ---------------------------------------------------------------------------
# Business rules
# ---------------------------------------------------------------------------

class InvalidStateError(PitakaError):
    """Raised when a record is not in a status that allows the operation."""

    status_code = 409
    error_type = "invalid_state"


class ConflictError(PitakaError):
    status_code = 409
    error_type = "conflict"


class DuplicateCardError(ConflictError):
    """Raised when the same card number is added twice."""

    error_type = "duplicate_card"

    def __init__(self, last_four: str):
        self.last_four = last_four
        super().__init__(f"Card ending in {last_four} is already registered")


class DuplicateRecipientError(ConflictError):
    error_type = "duplicate_recipient"

    def __init__(self, account_number: str):
        self.account_number = account_number
        super().__init__(f"Recipient with account number {account_number} already exists")


class DuplicateEmailError(ConflictError):
    """Raised when attempting to register with an email that's already in use."""

    error_type = "duplicate_email"

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email {email} is already registered")


class InsufficientFundsError(PitakaError):
    """
    Raised when a debit would cause a negative balance.

    Attributes:
        account_id: The account that lacks sufficient funds.
        requested_cents: The amount the caller tried to debit, fees included.
        available_cents: The current balance of the account.
    """

    status_code = 422
    error_type = "insufficient_funds"

    def __init__(
        self,
        account_id: uuid.UUID,
        requested_cents: int,
        available_cents: int,
    ):
        self.account_id = account_id
        self.requested_cents = requested_cents
        self.available_cents = available_cents
        super().__init__(
            f"Insufficient funds: requested {requested_cents} cents, "
            f"available {available_cents} cents"
        )


class InsufficientGoalFundsError(PitakaError):
    """Raised when withdrawing more from a savings goal than it holds."""

    status_code = 422
    error_type = "insufficient_goal_funds"

    def __init__(self, goal_id: uuid.UUID, requested_cents: int, available_cents: int):
        self.goal_id = goal_id
        self.requested_cents = requested_cents
        self.available_cents = available_cents
        super().__init__(
            f"Insufficient savings: requested {requested_cents} cents, "
            f"goal holds {available_cents} cents"
        )


class InsufficientSharesError(PitakaError):
    """Raised when selling more shares than the position holds."""

    status_code = 422
    error_type = "insufficient_shares"

    def __init__(self, symbol: str, requested: int, available: int):
        self.symbol = symbol
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient shares of {symbol}: requested {requested}, held {available}"
        )


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------

class GenerationExhaustedError(PitakaError):
    """Raised when no unique identifier could be generated within the attempt limit."""

    status_code = 503
    error_type = "generation_exhausted"

    def __init__(self, what: str, attempts: int):
        self.what = what
        self.attempts = attempts
        super().__init__(f"Could not generate a unique {what} after {attempts} attempts")


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def _error_body(exc: PitakaError) -> dict:
    return {"success": False, "detail": exc.detail, "error_type": exc.error_type}


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    Starlette resolves handlers by walking the exception's MRO, so the
    InsufficientFundsError handler wins over the generic PitakaError one.

    This is called once during app startup in main.py.
    """

    @app.exception_handler(InsufficientFundsError)
    async def insufficient_funds_handler(
        request: Request, exc: InsufficientFundsError
    ) -> JSONResponse:
        body = _error_body(exc)
        body["requested_cents"] = exc.requested_cents
        body["available_cents"] = exc.available_cents
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(PitakaError)
    async def pitaka_error_handler(request: Request, exc: PitakaError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc))
