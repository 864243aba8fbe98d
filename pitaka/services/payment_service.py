"""
Payment service — bill payments to billers from the seeded catalogue.

A bill payment debits amount + the biller's convenience fee from one owned
account and writes a Payment plus one PAYMENT ledger row. The payment's
reference number doubles as the ledger row's transaction_id.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.config import settings
from pitaka.dependencies import AuthenticatedPrincipal
from pitaka.exceptions import (
    InvalidAmountError,
    InvalidRequestError,
    InvalidStateError,
    ResourceNotFoundError,
)
from pitaka.identifiers import generate_unique_reference
from pitaka.models.payment import Biller, BillerCategory, Payment
from pitaka.models.transaction import Direction, OperationStatus, TransactionKind
from pitaka.services import ledger

logger = logging.getLogger(__name__)


def _format_cents(amount_cents: int) -> str:
    return f"{settings.CURRENCY_LABEL}{amount_cents / 100:,.2f}"


async def get_billers(
    db: AsyncSession,
    category: BillerCategory | None = None,
) -> list[Biller]:
    """Active billers, most popular first."""
    query = (
        select(Biller)
        .where(Biller.is_active.is_(True))
        .order_by(Biller.popular_index.is_(None), Biller.popular_index, Biller.name)
    )
    if category:
        query = query.where(Biller.category == category)

    result = await db.execute(query)
    return list(result.scalars().all())


async def get_biller(db: AsyncSession, biller_id: uuid.UUID) -> Biller:
    biller = await db.get(Biller, biller_id)
    if biller is None or not biller.is_active:
        raise ResourceNotFoundError("Biller", biller_id)
    return biller


def validate_against_biller(biller: Biller, payee_account_number: str, amount_cents: int) -> None:
    """
    Check an amount and payee account number against the biller's limits.

    Raises:
        InvalidAmountError: If the amount is outside [minimum, maximum].
        InvalidRequestError: If the payee account number has the wrong length.
    """
    if not biller.minimum_amount_cents <= amount_cents <= biller.maximum_amount_cents:
        raise InvalidAmountError(
            f"Amount for {biller.name} must be between "
            f"{_format_cents(biller.minimum_amount_cents)} and "
            f"{_format_cents(biller.maximum_amount_cents)}"
        )

    if biller.account_number_length is not None:
        digits = "".join(ch for ch in payee_account_number if ch.isalnum())
        if len(digits) != biller.account_number_length:
            raise InvalidRequestError(
                f"{biller.account_number_label} must be "
                f"{biller.account_number_length} characters"
            )


async def pay_bill(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    account_id: uuid.UUID,
    biller_id: uuid.UUID,
    payee_account_number: str,
    amount_cents: int,
    description: str | None = None,
) -> Payment:
    """
    Pay a biller from an owned account.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        account_id: UUID of the account to pay from.
        biller_id: UUID of the biller.
        payee_account_number: The caller's customer number with the biller.
        amount_cents: Amount in integer cents, fee excluded.
        description: Optional note for the ledger row.

    Returns:
        The COMPLETED Payment; its reference_number is also its transaction_id.

    Raises:
        InvalidRequestError: If the payee account number has the wrong length.
        InvalidAmountError: If amount_cents is non-positive or outside the
            biller's limits.
        ResourceNotFoundError: If the biller doesn't exist.
        AccountNotFoundError: If the account isn't theirs.
        InsufficientFundsError: If balance < amount + convenience fee.
    """
    ledger.require_positive(amount_cents)
    biller = await get_biller(db, biller_id)
    validate_against_biller(biller, payee_account_number, amount_cents)
    fee_cents = biller.convenience_fee_cents

    account = await ledger.find_owned(db, account_id, principal, lock=True)
    ledger.debit(account, amount_cents + fee_cents)

    reference = await generate_unique_reference(db, Payment.reference_number, "PAY")
    payment = Payment(
        reference_number=reference,
        owner_id=principal.owner_id,
        account_id=account.id,
        biller_id=biller.id,
        biller_name=biller.name,
        payee_account_number=payee_account_number,
        amount_cents=amount_cents,
        fee_cents=fee_cents,
        status=OperationStatus.COMPLETED,
        description=description,
    )
    db.add(payment)
    await db.flush()

    txn = await ledger.record_transaction(
        db,
        account=account,
        kind=TransactionKind.PAYMENT,
        direction=Direction.DEBIT,
        amount_cents=amount_cents,
        fee_cents=fee_cents,
        description=description or f"Bill payment to {biller.name}",
        transaction_id=reference,
        payment_id=payment.id,
    )
    payment.transaction_id = txn.transaction_id
    await db.flush()

    logger.info(
        "Bill payment completed",
        extra={
            "reference": reference,
            "owner_id": str(principal.owner_id),
            "amount_cents": amount_cents,
            "fee_cents": fee_cents,
            "kind": TransactionKind.PAYMENT.value,
        },
    )
    return payment


async def get_payments(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    status_filter: OperationStatus | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[Payment]:
    """
    The principal's bill payments, newest first.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        status_filter: Only return payments in this status.
        limit: Maximum number of results.
        offset: Number of results to skip (for pagination).

    Returns:
        List of Payments.
    """
    query = (
        select(Payment)
        .where(Payment.owner_id == principal.owner_id)
        .order_by(Payment.created_at.desc())
        .limit(limit)
        .offset(offset)
    )
    if status_filter:
        query = query.where(Payment.status == status_filter)

    result = await db.execute(query)
    return list(result.scalars().all())


async def get_payment(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    payment_id: uuid.UUID,
) -> Payment:
    """
    Raises:
        ResourceNotFoundError: If the payment doesn't exist or isn't theirs.
    """
    result = await db.execute(
        select(Payment).where(
            Payment.id == payment_id,
            Payment.owner_id == principal.owner_id,
        )
    )
    payment = result.scalar_one_or_none()
    if payment is None:
        raise ResourceNotFoundError("Payment", payment_id)
    return payment


async def cancel_payment(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    payment_id: uuid.UUID,
) -> Payment:
    """
    Cancel a payment that hasn't gone through yet.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        payment_id: UUID of the payment.

    Returns:
        The CANCELLED Payment.

    Raises:
        ResourceNotFoundError: If the payment isn't theirs.
        InvalidStateError: If the payment isn't PENDING.
    """
    payment = await get_payment(db, principal, payment_id)
    if payment.status != OperationStatus.PENDING:
        raise InvalidStateError(
            f"Only pending payments can be cancelled; this one is {payment.status.value}"
        )

    payment.status = OperationStatus.CANCELLED
    await db.flush()
    logger.info(
        "Bill payment cancelled",
        extra={"reference": payment.reference_number, "owner_id": str(principal.owner_id)},
    )
    return payment
