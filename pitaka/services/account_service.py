"""
Account service — business logic for wallet accounts.

This module handles:
  - Account creation (with a store-checked unique account number)
  - Account retrieval (single or list, scoped to the principal)
  - Balance verification (stored balance vs. ledger replay)
  - Account-number lookup, used before an external transfer

Ownership enforcement:
  Every query takes the AuthenticatedPrincipal resolved by the dependency
  layer and scopes by its owner_id. lookup_by_number() is the one
  exception; it returns only enough to confirm who a number belongs to.
"""

import uuid
from dataclasses import dataclass

from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.dependencies import AuthenticatedPrincipal
from pitaka.exceptions import AccountNotFoundError
from pitaka.identifiers import generate_account_number, generate_unique
from pitaka.models.account import Account, AccountKind
from pitaka.models.transaction import Direction, Transaction, TransactionKind
from pitaka.models.user import User
from pitaka.services import ledger


DEFAULT_DISPLAY_NAMES = {
    AccountKind.MAIN: "Main Account",
    AccountKind.SAVINGS: "Savings Account",
    AccountKind.INVESTMENT: "Investment Account",
}


@dataclass
class BalanceCheck:
    account_id: uuid.UUID
    balance_cents: int
    computed_balance_cents: int
    match: bool
    currency_label: str


@dataclass
class AccountLookup:
    account_number: str
    kind: AccountKind
    owner_name: str


async def create_account(
    db: AsyncSession,
    owner_id: uuid.UUID,
    kind: AccountKind = AccountKind.MAIN,
    display_name: str | None = None,
) -> Account:
    """
    Open a new account with a zero balance.

    Args:
        db: The async database session.
        owner_id: UUID of the owning user.
        kind: MAIN, SAVINGS or INVESTMENT.
        display_name: Name shown in the app; a per-kind default when omitted.

    Returns:
        The new Account.

    Raises:
        GenerationExhaustedError: If no unused account number was drawn
            within MAX_ID_GENERATION_ATTEMPTS.
    """
    account_number = await generate_unique(
        db, Account.account_number, generate_account_number, "account number",
    )

    account = Account(
        owner_id=owner_id,
        account_number=account_number,
        kind=kind,
        display_name=display_name or DEFAULT_DISPLAY_NAMES[kind],
    )
    db.add(account)
    await db.flush()
    return account


async def get_accounts(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
) -> list[Account]:
    result = await db.execute(
        select(Account)
        .where(Account.owner_id == principal.owner_id)
        .order_by(Account.created_at)
    )
    return list(result.scalars().all())


async def get_account(
    db: AsyncSession,
    account_id: uuid.UUID,
    principal: AuthenticatedPrincipal,
) -> Account:
    return await ledger.find_owned(db, account_id, principal)


async def get_primary_account(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    *,
    lock: bool = False,
) -> Account:
    """
    The owner's oldest active MAIN account, used when a caller doesn't name one.

    Raises:
        AccountNotFoundError: If the owner has no active MAIN account.
    """
    query = (
        select(Account)
        .where(
            Account.owner_id == principal.owner_id,
            Account.kind == AccountKind.MAIN,
            Account.is_active.is_(True),
        )
        .order_by(Account.created_at)
        .limit(1)
    )
    if lock:
        query = query.with_for_update()

    result = await db.execute(query)
    account = result.scalar_one_or_none()
    if account is None:
        raise AccountNotFoundError("main")
    return account


async def resolve_funding_account(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    account_id: uuid.UUID | None,
) -> Account:
    """Lock the named owned account, or the primary one when none is named."""
    if account_id is None:
        return await get_primary_account(db, principal, lock=True)
    return await ledger.find_owned(db, account_id, principal, lock=True)


async def get_balance(
    db: AsyncSession,
    account_id: uuid.UUID,
    principal: AuthenticatedPrincipal,
) -> BalanceCheck:
    """
    Get the stored balance alongside the balance replayed from the ledger.

    A mismatch signals a data integrity problem; it should never happen.

    Args:
        db: The async database session.
        account_id: UUID of the account.
        principal: The authenticated caller.

    Returns:
        BalanceCheck with both balances and whether they match.

    Raises:
        AccountNotFoundError: If the account isn't theirs.
    """
    account = await ledger.find_owned(db, account_id, principal)
    computed_balance_cents = await compute_balance_from_transactions(db, account.id)

    return BalanceCheck(
        account_id=account.id,
        balance_cents=account.balance_cents,
        computed_balance_cents=computed_balance_cents,
        match=account.balance_cents == computed_balance_cents,
        currency_label=account.currency_label,
    )


async def compute_balance_from_transactions(
    db: AsyncSession,
    account_id: uuid.UUID,
) -> int:
    """
    Replay the ledger: credits add their amount, debits subtract amount + fee.
    """
    signed_amount = case(
        (Transaction.direction == Direction.CREDIT, Transaction.amount_cents),
        else_=-(Transaction.amount_cents + Transaction.fee_cents),
    )
    result = await db.execute(
        select(func.coalesce(func.sum(signed_amount), 0))
        .where(Transaction.account_id == account_id)
    )
    return int(result.scalar())


async def lookup_by_number(db: AsyncSession, account_number: str) -> AccountLookup:
    """
    Confirm who an account number belongs to before sending money to it.

    Deliberately returns no id or balance.

    Args:
        db: The async database session.
        account_number: The 10-digit account number.

    Returns:
        AccountLookup with the number, account kind and owner's name.

    Raises:
        AccountNotFoundError: If no active account has this number.
    """
    account = await ledger.find_by_number(db, account_number)
    owner = await db.get(User, account.owner_id)
    return AccountLookup(
        account_number=account.account_number,
        kind=account.kind,
        owner_name=owner.full_name,
    )


async def get_account_transactions(
    db: AsyncSession,
    account_id: uuid.UUID,
    principal: AuthenticatedPrincipal,
    kind_filter: TransactionKind | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[Transaction]:
    """
    List an owned account's ledger entries, newest first.

    Args:
        db: The async database session.
        account_id: UUID of the account.
        principal: The authenticated caller.
        kind_filter: Only return entries of this kind.
        limit: Maximum number of results.
        offset: Number of results to skip (for pagination).

    Returns:
        List of Transactions.

    Raises:
        AccountNotFoundError: If the account isn't theirs.
    """
    await ledger.find_owned(db, account_id, principal)

    query = (
        select(Transaction)
        .where(Transaction.account_id == account_id)
        .order_by(Transaction.occurred_at.desc())
        .limit(limit)
        .offset(offset)
    )
    if kind_filter:
        query = query.where(Transaction.kind == kind_filter)

    result = await db.execute(query)
    return list(result.scalars().all())
