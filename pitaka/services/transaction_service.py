"""
Transaction service — single-account cash moves and ledger queries.

  deposit()   credit one owned account, one DEPOSIT row
  withdraw()  debit one owned account, one WITHDRAWAL row

Both run inside the request's database transaction (see
pitaka.services.ledger). A rejected withdrawal raises before anything is
written, and the session is rolled back, so no declined rows exist.

Account-to-account moves live in transfer_service.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.dependencies import AuthenticatedPrincipal
from pitaka.exceptions import ResourceNotFoundError
from pitaka.models.account import Account
from pitaka.models.transaction import Direction, Transaction, TransactionKind
from pitaka.services import ledger

logger = logging.getLogger(__name__)


async def deposit(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    account_id: uuid.UUID,
    amount_cents: int,
    description: str | None = None,
) -> tuple[Account, Transaction]:
    """
    Add money to an owned account.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        account_id: UUID of the account to credit.
        amount_cents: Amount in integer cents (must be > 0).
        description: Optional note; "Cash deposit" when omitted.

    Returns:
        The updated account and its DEPOSIT ledger entry.

    Raises:
        InvalidAmountError: If amount_cents <= 0.
        AccountNotFoundError: If the account isn't theirs.
    """
    ledger.require_positive(amount_cents)
    account = await ledger.find_owned(db, account_id, principal, lock=True)

    ledger.credit(account, amount_cents)
    txn = await ledger.record_transaction(
        db,
        account=account,
        kind=TransactionKind.DEPOSIT,
        direction=Direction.CREDIT,
        amount_cents=amount_cents,
        description=description or "Cash deposit",
    )

    logger.info(
        "Deposit completed",
        extra={
            "reference": txn.transaction_id,
            "owner_id": str(principal.owner_id),
            "amount_cents": amount_cents,
            "kind": TransactionKind.DEPOSIT.value,
        },
    )
    return account, txn


async def withdraw(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    account_id: uuid.UUID,
    amount_cents: int,
    description: str | None = None,
) -> tuple[Account, Transaction]:
    """
    Take money out of an owned account.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        account_id: UUID of the account to debit.
        amount_cents: Amount in integer cents (must be > 0).
        description: Optional note; "Cash withdrawal" when omitted.

    Returns:
        The updated account and its WITHDRAWAL ledger entry.

    Raises:
        InvalidAmountError: If amount_cents <= 0.
        AccountNotFoundError: If the account isn't theirs.
        InsufficientFundsError: If the balance is lower than the amount.
    """
    ledger.require_positive(amount_cents)
    account = await ledger.find_owned(db, account_id, principal, lock=True)

    ledger.debit(account, amount_cents)
    txn = await ledger.record_transaction(
        db,
        account=account,
        kind=TransactionKind.WITHDRAWAL,
        direction=Direction.DEBIT,
        amount_cents=amount_cents,
        description=description or "Cash withdrawal",
    )

    logger.info(
        "Withdrawal completed",
        extra={
            "reference": txn.transaction_id,
            "owner_id": str(principal.owner_id),
            "amount_cents": amount_cents,
            "kind": TransactionKind.WITHDRAWAL.value,
        },
    )
    return account, txn


async def get_transactions(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    kind_filter: TransactionKind | None = None,
    account_id: uuid.UUID | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[Transaction]:
    """
    List the principal's ledger entries across all accounts, newest first.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        kind_filter: Only return entries of this kind.
        account_id: Only return entries for this account. Another user's
            account id simply matches nothing.
        limit: Maximum number of results.
        offset: Number of results to skip (for pagination).

    Returns:
        List of Transactions.
    """
    query = (
        select(Transaction)
        .where(Transaction.owner_id == principal.owner_id)
        .order_by(Transaction.occurred_at.desc())
        .limit(limit)
        .offset(offset)
    )
    if kind_filter:
        query = query.where(Transaction.kind == kind_filter)
    if account_id:
        query = query.where(Transaction.account_id == account_id)

    result = await db.execute(query)
    return list(result.scalars().all())


async def get_transaction(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    transaction_id: uuid.UUID,
) -> Transaction:
    """
    Raises:
        ResourceNotFoundError: If the entry doesn't exist or isn't theirs.
    """
    result = await db.execute(
        select(Transaction).where(
            Transaction.id == transaction_id,
            Transaction.owner_id == principal.owner_id,
        )
    )
    txn = result.scalar_one_or_none()
    if txn is None:
        raise ResourceNotFoundError("Transaction", transaction_id)
    return txn
