"""
Savings service — goals funded from a linked account.

Each goal deposit or withdrawal changes two ledgers together:
  - the linked Account (debit on deposit, credit on withdrawal), recorded
    as a SAVINGS_DEPOSIT / SAVINGS_WITHDRAWAL Transaction, and
  - the goal's current amount, recorded as a SavingsTransaction entry.
"""

import logging
import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.dependencies import AuthenticatedPrincipal
from pitaka.exceptions import (
    InsufficientGoalFundsError,
    InvalidAmountError,
    InvalidStateError,
    ResourceNotFoundError,
)
from pitaka.models.savings import AutoTransferFrequency, SavingsEntryKind, SavingsGoal
from pitaka.models.transaction import Direction, TransactionKind
from pitaka.services import ledger

logger = logging.getLogger(__name__)


async def create_goal(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    linked_account_id: uuid.UUID,
    name: str,
    target_amount_cents: int,
    end_date: datetime | None = None,
    icon: str | None = None,
    notes: str | None = None,
    interest_rate: float | None = None,
    auto_transfer_enabled: bool = False,
    auto_transfer_amount_cents: int = 0,
    auto_transfer_frequency: AutoTransferFrequency = AutoTransferFrequency.NONE,
    initial_deposit_cents: int = 0,
) -> SavingsGoal:
    """
    Create a goal, optionally moving an initial deposit into it.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        linked_account_id: Owned account the goal is funded from.
        name: Goal name shown in the app.
        target_amount_cents: Amount to save, in integer cents.
        end_date: Optional target date.
        icon: Icon name; "piggy-bank" when omitted.
        notes: Optional free text.
        interest_rate: Display-only annual rate, in percent.
        auto_transfer_enabled, auto_transfer_amount_cents, auto_transfer_frequency:
            Stored standing-order preferences; nothing runs them.
        initial_deposit_cents: Amount to move in straight away (0 for none).

    Returns:
        The new SavingsGoal, with its first entry if a deposit was made.

    Raises:
        InvalidAmountError: If the target is non-positive or the initial
            deposit is negative.
        AccountNotFoundError: If the linked account isn't theirs.
        InsufficientFundsError: If the initial deposit can't be covered.
    """
    ledger.require_positive(target_amount_cents, "Target amount")
    if initial_deposit_cents < 0:
        raise InvalidAmountError("Initial deposit cannot be negative")

    account = await ledger.find_owned(db, linked_account_id, principal)

    goal = SavingsGoal(
        owner_id=principal.owner_id,
        linked_account_id=account.id,
        name=name,
        icon=icon or "piggy-bank",
        target_amount_cents=target_amount_cents,
        current_amount_cents=0,
        progress=0.0,
        end_date=end_date,
        notes=notes,
        auto_transfer_enabled=auto_transfer_enabled,
        auto_transfer_amount_cents=auto_transfer_amount_cents,
        auto_transfer_frequency=auto_transfer_frequency,
        entries=[],
    )
    if interest_rate is not None:
        goal.interest_rate = interest_rate
    db.add(goal)
    await db.flush()

    if initial_deposit_cents:
        await _deposit_into(db, principal, goal, initial_deposit_cents)

    return goal


async def _get_owned_goal(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    goal_id: uuid.UUID,
    *,
    lock: bool = False,
) -> SavingsGoal:
    query = select(SavingsGoal).where(
        SavingsGoal.id == goal_id,
        SavingsGoal.owner_id == principal.owner_id,
    )
    if lock:
        query = query.with_for_update()

    result = await db.execute(query)
    goal = result.scalar_one_or_none()
    if goal is None:
        raise ResourceNotFoundError("Savings goal", goal_id)
    return goal


async def get_goals(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    include_closed: bool = False,
) -> list[SavingsGoal]:
    """Open goals, oldest first; closed ones too when include_closed is set."""
    query = (
        select(SavingsGoal)
        .where(SavingsGoal.owner_id == principal.owner_id)
        .order_by(SavingsGoal.created_at)
    )
    if not include_closed:
        query = query.where(SavingsGoal.is_active.is_(True))

    result = await db.execute(query)
    return list(result.scalars().all())


async def get_goal(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    goal_id: uuid.UUID,
) -> SavingsGoal:
    return await _get_owned_goal(db, principal, goal_id)


async def _deposit_into(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    goal: SavingsGoal,
    amount_cents: int,
) -> SavingsGoal:
    account = await ledger.find_owned(db, goal.linked_account_id, principal, lock=True)
    ledger.debit(account, amount_cents)

    goal.add_entry(SavingsEntryKind.DEPOSIT, amount_cents)
    txn = await ledger.record_transaction(
        db,
        account=account,
        kind=TransactionKind.SAVINGS_DEPOSIT,
        direction=Direction.DEBIT,
        amount_cents=amount_cents,
        description=f"Deposit to savings goal {goal.name}",
        savings_goal_id=goal.id,
    )

    logger.info(
        "Savings deposit completed",
        extra={
            "reference": txn.transaction_id,
            "owner_id": str(principal.owner_id),
            "amount_cents": amount_cents,
            "kind": TransactionKind.SAVINGS_DEPOSIT.value,
        },
    )
    return goal


def _require_open(goal: SavingsGoal) -> None:
    if not goal.is_active:
        raise InvalidStateError(f"Savings goal {goal.name} is closed")


async def deposit(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    goal_id: uuid.UUID,
    amount_cents: int,
) -> SavingsGoal:
    """
    Move money from the linked account into the goal.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        goal_id: UUID of the goal.
        amount_cents: Amount in integer cents (must be > 0).

    Returns:
        The SavingsGoal with its new amount, progress and entry.

    Raises:
        ResourceNotFoundError: If the goal isn't theirs.
        InvalidStateError: If the goal is closed.
        InsufficientFundsError: If the linked account can't cover it.
    """
    ledger.require_positive(amount_cents)
    goal = await _get_owned_goal(db, principal, goal_id, lock=True)
    _require_open(goal)
    return await _deposit_into(db, principal, goal, amount_cents)


async def withdraw(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    goal_id: uuid.UUID,
    amount_cents: int,
) -> SavingsGoal:
    """
    Move money out of the goal back into the linked account.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        goal_id: UUID of the goal.
        amount_cents: Amount in integer cents (must be > 0).

    Returns:
        The SavingsGoal with its new amount, progress and entry.

    Raises:
        ResourceNotFoundError: If the goal isn't theirs.
        InvalidStateError: If the goal is closed.
        InsufficientGoalFundsError: If the goal holds less than the amount.
    """
    ledger.require_positive(amount_cents)
    goal = await _get_owned_goal(db, principal, goal_id, lock=True)
    _require_open(goal)

    if goal.current_amount_cents < amount_cents:
        logger.warning(
            "Savings withdrawal rejected: insufficient goal funds",
            extra={
                "goal_id": str(goal.id),
                "requested_cents": amount_cents,
                "available_cents": goal.current_amount_cents,
            },
        )
        raise InsufficientGoalFundsError(goal.id, amount_cents, goal.current_amount_cents)

    account = await ledger.find_owned(db, goal.linked_account_id, principal, lock=True)
    ledger.credit(account, amount_cents)

    goal.add_entry(SavingsEntryKind.WITHDRAWAL, amount_cents)
    txn = await ledger.record_transaction(
        db,
        account=account,
        kind=TransactionKind.SAVINGS_WITHDRAWAL,
        direction=Direction.CREDIT,
        amount_cents=amount_cents,
        description=f"Withdrawal from savings goal {goal.name}",
        savings_goal_id=goal.id,
    )

    logger.info(
        "Savings withdrawal completed",
        extra={
            "reference": txn.transaction_id,
            "owner_id": str(principal.owner_id),
            "amount_cents": amount_cents,
            "kind": TransactionKind.SAVINGS_WITHDRAWAL.value,
        },
    )
    return goal


async def close_goal(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    goal_id: uuid.UUID,
) -> SavingsGoal:
    """
    Close an empty goal. Closed goals stay listable with include_closed.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        goal_id: UUID of the goal.

    Returns:
        The inactive SavingsGoal.

    Raises:
        InvalidStateError: If the goal still holds money or is already closed.
    """
    goal = await _get_owned_goal(db, principal, goal_id, lock=True)
    _require_open(goal)
    if goal.current_amount_cents > 0:
        raise InvalidStateError("Withdraw the remaining balance before closing the goal")

    goal.is_active = False
    await db.flush()
    return goal
