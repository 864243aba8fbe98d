"""
Account ledger — the primitives every money movement is built from.

THIS IS THE ONLY CODE THAT CHANGES Account.balance_cents. Every service
that moves money follows the same sequence with these helpers:

  1. Validate   require_positive(), same-account checks
  2. Resolve    find_owned() / find_by_number() / lock_pair()
  3. Authorize  debit() refuses to take a balance below zero
  4. Apply      debit() / credit()
  5. Record     record_transaction(), one row per affected account
  6. Commit     done once by get_db() when the request succeeds

Nothing here commits. All writes share the request's session, so an
exception anywhere in steps 2-5 (a business rule or a crash) rolls back
every balance change and every record together.

Ownership:
  find_owned() treats "doesn't exist" and "belongs to someone else" the
  same and raises AccountNotFoundError for both, so account ids can't be
  enumerated.

Locking:
  Rows fetched for mutation use SELECT ... FOR UPDATE. When two accounts
  are involved they are locked in sorted id order, so opposite-direction
  transfers between the same pair can't deadlock. SQLite ignores FOR
  UPDATE; its single-writer transactions give the same isolation for a
  single process.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.dependencies import AuthenticatedPrincipal
from pitaka.exceptions import (
    AccountNotFoundError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidStateError,
)
from pitaka.identifiers import generate_unique_reference
from pitaka.models.account import Account
from pitaka.models.transaction import Direction, OperationStatus, Transaction, TransactionKind

logger = logging.getLogger(__name__)


def require_positive(amount_cents: int, what: str = "Amount") -> None:
    if amount_cents <= 0:
        raise InvalidAmountError(f"{what} must be greater than zero")


async def find_owned(
    db: AsyncSession,
    account_id: uuid.UUID,
    principal: AuthenticatedPrincipal,
    *,
    lock: bool = False,
) -> Account:
    """
    Fetch an account owned by the principal.

    Args:
        db: The async database session.
        account_id: UUID of the account.
        principal: The authenticated caller.
        lock: Take a row lock (SELECT ... FOR UPDATE) before mutating.

    Returns:
        The Account.

    Raises:
        AccountNotFoundError: If the account doesn't exist or isn't theirs.
    """
    query = select(Account).where(
        Account.id == account_id,
        Account.owner_id == principal.owner_id,
    )
    if lock:
        query = query.with_for_update()

    result = await db.execute(query)
    account = result.scalar_one_or_none()
    if account is None:
        raise AccountNotFoundError(account_id)
    return account


async def find_by_number(
    db: AsyncSession,
    account_number: str,
    *,
    lock: bool = False,
) -> Account:
    """
    Fetch any active account by its 10-digit number, whoever owns it.

    Args:
        db: The async database session.
        account_number: The 10-digit account number.
        lock: Take a row lock before mutating.

    Returns:
        The Account.

    Raises:
        AccountNotFoundError: If no active account has this number.
    """
    query = select(Account).where(
        Account.account_number == account_number,
        Account.is_active.is_(True),
    )
    if lock:
        query = query.with_for_update()

    result = await db.execute(query)
    account = result.scalar_one_or_none()
    if account is None:
        raise AccountNotFoundError(account_number)
    return account


async def lock_pair(
    db: AsyncSession,
    first_id: uuid.UUID,
    second_id: uuid.UUID,
) -> dict[uuid.UUID, Account]:
    """
    Lock two accounts in sorted id order and return them keyed by id.

    Args:
        db: The async database session.
        first_id: UUID of one account (usually the source).
        second_id: UUID of the other account.

    Returns:
        Both Accounts, keyed by their ids.

    Raises:
        AccountNotFoundError: For whichever account is missing.
    """
    accounts: dict[uuid.UUID, Account] = {}
    for account_id in sorted([first_id, second_id]):
        result = await db.execute(
            select(Account).where(Account.id == account_id).with_for_update()
        )
        account = result.scalar_one_or_none()
        if account is None:
            raise AccountNotFoundError(account_id)
        accounts[account_id] = account
    return accounts


def _require_active(account: Account) -> None:
    if not account.is_active:
        raise InvalidStateError(f"Account {account.account_number} is inactive")


def debit(account: Account, amount_cents: int) -> None:
    """
    Take `amount_cents` (fees included) out of the account.

    Args:
        account: A locked Account.
        amount_cents: Total to remove, in integer cents.

    Raises:
        InvalidStateError: If the account is inactive.
        InsufficientFundsError: If the balance is lower than the amount.
    """
    _require_active(account)
    if account.balance_cents < amount_cents:
        logger.warning(
            "Debit rejected: insufficient funds",
            extra={
                "account_id": str(account.id),
                "requested_cents": amount_cents,
                "available_cents": account.balance_cents,
            },
        )
        raise InsufficientFundsError(
            account_id=account.id,
            requested_cents=amount_cents,
            available_cents=account.balance_cents,
        )
    account.balance_cents -= amount_cents


def credit(account: Account, amount_cents: int) -> None:
    """
    Add `amount_cents` to the account.

    Args:
        account: A locked Account.
        amount_cents: Amount to add, in integer cents.

    Raises:
        InvalidStateError: If the account is inactive.
    """
    _require_active(account)
    account.balance_cents += amount_cents


async def record_transaction(
    db: AsyncSession,
    *,
    account: Account,
    kind: TransactionKind,
    direction: Direction,
    amount_cents: int,
    fee_cents: int = 0,
    description: str | None = None,
    transaction_id: str | None = None,
    transfer_id: uuid.UUID | None = None,
    payment_id: uuid.UUID | None = None,
    loan_id: uuid.UUID | None = None,
    savings_goal_id: uuid.UUID | None = None,
    investment_id: uuid.UUID | None = None,
) -> Transaction:
    """
    Write one COMPLETED ledger entry for `account`.

    Paired moves pass the operation reference plus "S"/"R" as
    transaction_id; otherwise a fresh TXN id is drawn and checked for
    uniqueness.

    Args:
        db: The async database session.
        account: The account whose balance the entry explains.
        kind: What kind of operation wrote the entry.
        direction: CREDIT or DEBIT.
        amount_cents: Unsigned amount, in integer cents.
        fee_cents: Fee taken on top of a debit.
        description: Optional free text shown in history.
        transaction_id: Reference to store, or None to generate one.
        transfer_id, payment_id, loan_id, savings_goal_id, investment_id:
            The operation record the entry belongs to, if any.

    Returns:
        The flushed Transaction.
    """
    if transaction_id is None:
        transaction_id = await generate_unique_reference(db, Transaction.transaction_id, "TXN")

    txn = Transaction(
        transaction_id=transaction_id,
        owner_id=account.owner_id,
        account_id=account.id,
        kind=kind,
        direction=direction,
        amount_cents=amount_cents,
        fee_cents=fee_cents,
        description=description,
        status=OperationStatus.COMPLETED,
        transfer_id=transfer_id,
        payment_id=payment_id,
        loan_id=loan_id,
        savings_goal_id=savings_goal_id,
        investment_id=investment_id,
    )
    db.add(txn)
    await db.flush()
    return txn
