"""
Bank model — the interbank directory.

Interbank transfers must name a bank_code present here. The bank's
transfer_fee_cents is the flat fee charged on top of the amount sent.
"""

import uuid

from sqlalchemy import String, Boolean, BigInteger
from sqlalchemy.orm import Mapped, mapped_column

from pitaka.config import settings
from pitaka.database import Base


class Bank(Base):
    __tablename__ = "banks"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)
    country: Mapped[str] = mapped_column(String(100), nullable=False, default="Philippines")
    swift_code: Mapped[str | None] = mapped_column(String(11), nullable=True)

    transfer_fee_cents: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=lambda: settings.DEFAULT_INTERBANK_FEE_CENTS,
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
