"""
Identifier generation for references, transaction IDs, and account numbers.

References have the shape {prefix}{unix millis}{4-digit random}, e.g.
"TRF17293456789120042". Prefixes in use:

    TXN  single-leg ledger transaction
    TRF  internal transfer       EXT  external transfer    INT  interbank transfer
    PAY  bill payment            LNP  loan payment         REF  generic reference

The two ledger transactions of a paired move reuse the operation's
reference with an "S" (sender) or "R" (receiver) suffix.

The generator alone doesn't guarantee uniqueness, so callers that persist
an identifier go through generate_unique(), which checks the store and
gives up with GenerationExhaustedError after MAX_ID_GENERATION_ATTEMPTS.
"""

import random
import string
import time
from typing import Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from pitaka.config import settings
from pitaka.exceptions import GenerationExhaustedError


SENDER_SUFFIX = "S"
RECEIVER_SUFFIX = "R"


def generate_reference(prefix: str) -> str:
    """Return {prefix}{unix millis}{4-digit zero-padded random}."""
    millis = int(time.time() * 1000)
    return f"{prefix}{millis}{random.randint(0, 9999):04d}"


def generate_account_number() -> str:
    """Return a random 10-digit account number."""
    return "".join(random.choices(string.digits, k=10))


async def generate_unique(
    db: AsyncSession,
    column: InstrumentedAttribute,
    factory: Callable[[], str],
    what: str,
) -> str:
    """
    Draw candidates from `factory` until one is absent from `column`.

    Raises:
        GenerationExhaustedError: If every attempt collided.
    """
    attempts = settings.MAX_ID_GENERATION_ATTEMPTS
    for _ in range(attempts):
        candidate = factory()
        existing = await db.execute(select(column).where(column == candidate).limit(1))
        if existing.scalar_one_or_none() is None:
            return candidate
    raise GenerationExhaustedError(what, attempts)


async def generate_unique_reference(
    db: AsyncSession,
    column: InstrumentedAttribute,
    prefix: str,
) -> str:
    return await generate_unique(db, column, lambda: generate_reference(prefix), "reference")
