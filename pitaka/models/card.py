"""
Card model — a payment card saved by a user.

Card numbers and CVVs are encrypted at rest using Fernet (AES-128-CBC +
HMAC-SHA256). Only the masked number and last four digits are stored in
plaintext, for display.

Fernet ciphertexts differ on every encryption, so duplicate detection uses
card_fingerprint, an HMAC of the number keyed with SECRET_KEY, under a
UNIQUE constraint.

At most one of an owner's cards has is_default set; card_service clears
the flag on the others whenever it sets it on one.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, Boolean, DateTime, ForeignKey, LargeBinary
from sqlalchemy.orm import Mapped, mapped_column

from pitaka.database import Base


class Card(Base):
    __tablename__ = "cards"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    # VISA, MASTERCARD, AMEX, DISCOVER, JCB, UNION_PAY
    network: Mapped[str] = mapped_column(String(20), nullable=False)

    # Full card number, Fernet-encrypted
    card_number_encrypted: Mapped[bytes] = mapped_column(
        LargeBinary,
        nullable=False,
    )

    card_fingerprint: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
    )

    masked_number: Mapped[str] = mapped_column(String(32), nullable=False)
    last_four: Mapped[str] = mapped_column(String(4), nullable=False)

    cardholder_name: Mapped[str] = mapped_column(String(200), nullable=False)

    expiry_month: Mapped[int] = mapped_column(Integer, nullable=False)
    # Two-digit year, as printed on the card
    expiry_year: Mapped[int] = mapped_column(Integer, nullable=False)

    # CVV, Fernet-encrypted
    cvv_encrypted: Mapped[bytes] = mapped_column(
        LargeBinary,
        nullable=False,
    )

    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
