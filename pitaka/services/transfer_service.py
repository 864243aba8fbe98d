"""
Transfer service — account-to-account money movement.

Three kinds of transfer, one shape:

  INTERNAL   own account -> own account              fee 0
  EXTERNAL   own account -> another user's account   fee 0
  INTERBANK  own account -> account at another bank  flat fee from the bank directory

Each call validates the request, locks the account(s), debits the sender
(amount + fee), credits the receiver when the receiver is inside Pitaka,
then writes one Transfer and one ledger Transaction per affected account:

  sender    TRANSFER           debit    transaction_id = reference + "S"
  receiver  TRANSFER_RECEIVED  credit   transaction_id = reference + "R"

Both rows point at the Transfer through transfer_id. Everything happens
in the request's database transaction, so a failure at any step (even
after the debit) leaves no trace.

Sending money to a new account number through an EXTERNAL or INTERBANK
transfer also saves it to the sender's recipient list.
"""

import logging
import uuid

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.dependencies import AuthenticatedPrincipal
from pitaka.exceptions import (
    DuplicateRecipientError,
    InvalidRequestError,
    AccountNotFoundError,
    ResourceNotFoundError,
)
from pitaka.identifiers import RECEIVER_SUFFIX, SENDER_SUFFIX, generate_unique_reference
from pitaka.models.account import Account
from pitaka.models.bank import Bank
from pitaka.models.transaction import Direction, OperationStatus, TransactionKind
from pitaka.models.transfer import Transfer, TransferKind, TransferRecipient
from pitaka.models.user import User
from pitaka.services import ledger

logger = logging.getLogger(__name__)


REFERENCE_PREFIXES = {
    TransferKind.INTERNAL: "TRF",
    TransferKind.EXTERNAL: "EXT",
    TransferKind.INTERBANK: "INT",
}


def _ending(account_number: str) -> str:
    return account_number[-4:]


def _log_completed(transfer: Transfer) -> None:
    logger.info(
        "Transfer completed",
        extra={
            "reference": transfer.reference,
            "owner_id": str(transfer.owner_id),
            "amount_cents": transfer.amount_cents,
            "fee_cents": transfer.fee_cents,
            "kind": transfer.kind.value,
        },
    )


# ---------------------------------------------------------------------------
# Transfers inside Pitaka (two ledger rows)
# ---------------------------------------------------------------------------

async def _execute_paired_transfer(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    *,
    kind: TransferKind,
    source: Account,
    dest: Account,
    amount_cents: int,
    recipient_name: str,
    description: str | None,
) -> Transfer:
    """Apply and record a zero-fee move between two locked accounts."""
    ledger.debit(source, amount_cents)
    ledger.credit(dest, amount_cents)

    reference = await generate_unique_reference(db, Transfer.reference, REFERENCE_PREFIXES[kind])
    transfer = Transfer(
        reference=reference,
        owner_id=principal.owner_id,
        sender_account_id=source.id,
        recipient_id=dest.owner_id,
        recipient_account_id=dest.id,
        recipient_account_number=dest.account_number,
        recipient_name=recipient_name,
        amount_cents=amount_cents,
        fee_cents=0,
        kind=kind,
        status=OperationStatus.COMPLETED,
        description=description,
    )
    db.add(transfer)
    await db.flush()

    await ledger.record_transaction(
        db,
        account=source,
        kind=TransactionKind.TRANSFER,
        direction=Direction.DEBIT,
        amount_cents=amount_cents,
        description=description or f"Transfer to account ending in {_ending(dest.account_number)}",
        transaction_id=reference + SENDER_SUFFIX,
        transfer_id=transfer.id,
    )
    await ledger.record_transaction(
        db,
        account=dest,
        kind=TransactionKind.TRANSFER_RECEIVED,
        direction=Direction.CREDIT,
        amount_cents=amount_cents,
        description=description or f"Transfer from account ending in {_ending(source.account_number)}",
        transaction_id=reference + RECEIVER_SUFFIX,
        transfer_id=transfer.id,
    )

    _log_completed(transfer)
    return transfer


async def internal_transfer(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    from_account_id: uuid.UUID,
    to_account_id: uuid.UUID,
    amount_cents: int,
    description: str | None = None,
) -> Transfer:
    """
    Move money between two of the principal's own accounts.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        from_account_id: UUID of the account to debit.
        to_account_id: UUID of the account to credit.
        amount_cents: Amount in integer cents (must be > 0).
        description: Optional note for both ledger rows.

    Returns:
        The INTERNAL Transfer; its two ledger rows share its reference.

    Raises:
        InvalidAmountError: If amount_cents <= 0.
        InvalidRequestError: If source and destination are the same account.
        AccountNotFoundError: If either account is missing or not theirs.
        InsufficientFundsError: If the source balance is too low.
    """
    ledger.require_positive(amount_cents)
    if from_account_id == to_account_id:
        raise InvalidRequestError("Cannot transfer to the same account")

    accounts = await ledger.lock_pair(db, from_account_id, to_account_id)
    source, dest = accounts[from_account_id], accounts[to_account_id]
    for account in (source, dest):
        if account.owner_id != principal.owner_id:
            raise AccountNotFoundError(account.id)

    return await _execute_paired_transfer(
        db,
        principal,
        kind=TransferKind.INTERNAL,
        source=source,
        dest=dest,
        amount_cents=amount_cents,
        recipient_name=dest.display_name,
        description=description,
    )


async def external_transfer(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    from_account_id: uuid.UUID,
    recipient_account_number: str,
    amount_cents: int,
    description: str | None = None,
) -> Transfer:
    """
    Send money to another Pitaka user's account, identified by account number.

    The recipient is saved to the sender's address book the first time.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        from_account_id: UUID of the account to debit.
        recipient_account_number: 10-digit number of the account to credit.
        amount_cents: Amount in integer cents (must be > 0).
        description: Optional note for both ledger rows.

    Returns:
        The EXTERNAL Transfer, with the recipient's full name.

    Raises:
        InvalidAmountError: If amount_cents <= 0.
        InvalidRequestError: If the number belongs to one of the principal's
            own accounts (that's an internal transfer).
        AccountNotFoundError: If the source isn't theirs or the number is unknown.
        InsufficientFundsError: If the source balance is too low.
    """
    ledger.require_positive(amount_cents)

    recipient = await ledger.find_by_number(db, recipient_account_number)
    if recipient.owner_id == principal.owner_id:
        raise InvalidRequestError(
            "Recipient account belongs to you; use an internal transfer instead"
        )

    accounts = await ledger.lock_pair(db, from_account_id, recipient.id)
    source, dest = accounts[from_account_id], accounts[recipient.id]
    if source.owner_id != principal.owner_id:
        raise AccountNotFoundError(from_account_id)

    recipient_user = await db.get(User, dest.owner_id)
    transfer = await _execute_paired_transfer(
        db,
        principal,
        kind=TransferKind.EXTERNAL,
        source=source,
        dest=dest,
        amount_cents=amount_cents,
        recipient_name=recipient_user.full_name,
        description=description,
    )
    await _remember_recipient(
        db, principal, name=recipient_user.full_name, account_number=dest.account_number,
    )
    return transfer


async def transfer_by_account_id(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    from_account_id: uuid.UUID,
    to_account_id: uuid.UUID,
    amount_cents: int,
    description: str | None = None,
) -> Transfer:
    """
    Move money from an owned account to any account in Pitaka, by id.

    Recorded as INTERNAL when both accounts belong to the principal and as
    EXTERNAL otherwise.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        from_account_id: UUID of an owned account to debit.
        to_account_id: UUID of any account to credit.
        amount_cents: Amount in integer cents (must be > 0).
        description: Optional note for both ledger rows.

    Returns:
        The Transfer.

    Raises:
        InvalidAmountError: If amount_cents <= 0.
        InvalidRequestError: If source and destination are the same account.
        AccountNotFoundError: If either account is missing or the source isn't theirs.
        InsufficientFundsError: If the source balance is too low.
    """
    ledger.require_positive(amount_cents)
    if from_account_id == to_account_id:
        raise InvalidRequestError("Cannot transfer to the same account")

    accounts = await ledger.lock_pair(db, from_account_id, to_account_id)
    source, dest = accounts[from_account_id], accounts[to_account_id]
    if source.owner_id != principal.owner_id:
        raise AccountNotFoundError(from_account_id)

    if dest.owner_id == principal.owner_id:
        kind = TransferKind.INTERNAL
        recipient_name = dest.display_name
    else:
        kind = TransferKind.EXTERNAL
        recipient_name = (await db.get(User, dest.owner_id)).full_name

    return await _execute_paired_transfer(
        db,
        principal,
        kind=kind,
        source=source,
        dest=dest,
        amount_cents=amount_cents,
        recipient_name=recipient_name,
        description=description,
    )


# ---------------------------------------------------------------------------
# Interbank (one ledger row, flat fee)
# ---------------------------------------------------------------------------

async def get_bank(db: AsyncSession, bank_code: str) -> Bank:
    """
    Find an interbank destination by its code.

    Args:
        db: The async database session.
        bank_code: Directory code such as "BDO"; matched case-insensitively.

    Returns:
        The active Bank, which carries the flat transfer fee.

    Raises:
        InvalidRequestError: If the code isn't an active bank in the directory.
    """
    result = await db.execute(
        select(Bank).where(Bank.code == bank_code.upper(), Bank.is_active.is_(True))
    )
    bank = result.scalar_one_or_none()
    if bank is None:
        raise InvalidRequestError(f"Unknown bank code {bank_code}")
    return bank


async def list_banks(db: AsyncSession) -> list[Bank]:
    result = await db.execute(
        select(Bank).where(Bank.is_active.is_(True)).order_by(Bank.name)
    )
    return list(result.scalars().all())


async def interbank_transfer(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    from_account_id: uuid.UUID,
    bank_code: str,
    recipient_account_number: str,
    recipient_name: str,
    amount_cents: int,
    description: str | None = None,
) -> Transfer:
    """
    Send money to an account at another bank.

    The destination is outside Pitaka, so only the sender's account moves:
    it is debited amount + the bank's flat transfer fee, and one TRANSFER
    row records both.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        from_account_id: UUID of the account to debit.
        bank_code: Destination bank's directory code.
        recipient_account_number: Account number at the other bank.
        recipient_name: Name of the account holder there.
        amount_cents: Amount in integer cents, fee excluded (must be > 0).
        description: Optional note for the ledger row.

    Returns:
        The INTERBANK Transfer, with fee_cents set.

    Raises:
        InvalidAmountError: If amount_cents <= 0.
        InvalidRequestError: If bank_code isn't in the bank directory.
        AccountNotFoundError: If the source account isn't theirs.
        InsufficientFundsError: If balance < amount + fee.
    """
    ledger.require_positive(amount_cents)
    bank = await get_bank(db, bank_code)
    fee_cents = bank.transfer_fee_cents

    source = await ledger.find_owned(db, from_account_id, principal, lock=True)
    ledger.debit(source, amount_cents + fee_cents)

    reference = await generate_unique_reference(
        db, Transfer.reference, REFERENCE_PREFIXES[TransferKind.INTERBANK],
    )
    transfer = Transfer(
        reference=reference,
        owner_id=principal.owner_id,
        sender_account_id=source.id,
        recipient_account_number=recipient_account_number,
        recipient_name=recipient_name,
        amount_cents=amount_cents,
        fee_cents=fee_cents,
        kind=TransferKind.INTERBANK,
        status=OperationStatus.COMPLETED,
        bank_name=bank.name,
        bank_code=bank.code,
        description=description,
    )
    db.add(transfer)
    await db.flush()

    await ledger.record_transaction(
        db,
        account=source,
        kind=TransactionKind.TRANSFER,
        direction=Direction.DEBIT,
        amount_cents=amount_cents,
        fee_cents=fee_cents,
        description=description or f"Transfer to {bank.code} account ending in {_ending(recipient_account_number)}",
        transaction_id=reference + SENDER_SUFFIX,
        transfer_id=transfer.id,
    )
    await _remember_recipient(
        db,
        principal,
        name=recipient_name,
        account_number=recipient_account_number,
        bank_name=bank.name,
        bank_code=bank.code,
    )

    _log_completed(transfer)
    return transfer


# ---------------------------------------------------------------------------
# Transfer history
# ---------------------------------------------------------------------------

async def get_transfers(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    kind_filter: TransferKind | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[Transfer]:
    """
    Transfers the principal sent or received, newest first.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        kind_filter: Only return transfers of this kind.
        limit: Maximum number of results.
        offset: Number of results to skip (for pagination).

    Returns:
        List of Transfers.
    """
    query = (
        select(Transfer)
        .where(
            or_(
                Transfer.owner_id == principal.owner_id,
                Transfer.recipient_id == principal.owner_id,
            )
        )
        .order_by(Transfer.created_at.desc())
        .limit(limit)
        .offset(offset)
    )
    if kind_filter:
        query = query.where(Transfer.kind == kind_filter)

    result = await db.execute(query)
    return list(result.scalars().all())


async def get_transfer(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    transfer_id: uuid.UUID,
) -> Transfer:
    """
    Get one transfer the principal sent or received.

    Raises:
        ResourceNotFoundError: If it doesn't exist or the principal is neither party.
    """
    result = await db.execute(
        select(Transfer).where(
            Transfer.id == transfer_id,
            or_(
                Transfer.owner_id == principal.owner_id,
                Transfer.recipient_id == principal.owner_id,
            ),
        )
    )
    transfer = result.scalar_one_or_none()
    if transfer is None:
        raise ResourceNotFoundError("Transfer", transfer_id)
    return transfer


# ---------------------------------------------------------------------------
# Recipients (address book)
# ---------------------------------------------------------------------------

async def _find_recipient(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    account_number: str,
    bank_code: str | None,
) -> TransferRecipient | None:
    query = select(TransferRecipient).where(
        TransferRecipient.owner_id == principal.owner_id,
        TransferRecipient.account_number == account_number,
    )
    if bank_code is None:
        query = query.where(TransferRecipient.bank_code.is_(None))
    else:
        query = query.where(TransferRecipient.bank_code == bank_code)

    result = await db.execute(query)
    return result.scalar_one_or_none()


async def _remember_recipient(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    *,
    name: str,
    account_number: str,
    bank_name: str | None = None,
    bank_code: str | None = None,
) -> TransferRecipient:
    existing = await _find_recipient(db, principal, account_number, bank_code)
    if existing is not None:
        return existing

    recipient = TransferRecipient(
        owner_id=principal.owner_id,
        name=name,
        account_number=account_number,
        bank_name=bank_name,
        bank_code=bank_code,
    )
    db.add(recipient)
    await db.flush()
    return recipient


async def add_recipient(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    name: str,
    account_number: str,
    bank_code: str | None = None,
) -> TransferRecipient:
    """
    Save a recipient explicitly.

    With a bank_code the recipient is interbank and the code must exist in
    the bank directory; without one it is a Pitaka account number.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        name: Display name for the recipient.
        account_number: The recipient's account number.
        bank_code: Directory code for an interbank recipient, or None.

    Returns:
        The new TransferRecipient.

    Raises:
        InvalidRequestError: If bank_code isn't in the bank directory.
        DuplicateRecipientError: If the (account_number, bank_code) pair is
            already saved.
    """
    bank_name = None
    if bank_code is not None:
        bank = await get_bank(db, bank_code)
        bank_code, bank_name = bank.code, bank.name

    if await _find_recipient(db, principal, account_number, bank_code) is not None:
        raise DuplicateRecipientError(account_number)

    recipient = TransferRecipient(
        owner_id=principal.owner_id,
        name=name,
        account_number=account_number,
        bank_name=bank_name,
        bank_code=bank_code,
    )
    db.add(recipient)
    await db.flush()
    return recipient


async def get_recipients(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
) -> list[TransferRecipient]:
    """Saved recipients, favourites first."""
    result = await db.execute(
        select(TransferRecipient)
        .where(
            TransferRecipient.owner_id == principal.owner_id,
            TransferRecipient.is_active.is_(True),
        )
        .order_by(TransferRecipient.is_favorite.desc(), TransferRecipient.name)
    )
    return list(result.scalars().all())


async def _get_recipient(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    recipient_id: uuid.UUID,
) -> TransferRecipient:
    result = await db.execute(
        select(TransferRecipient).where(
            TransferRecipient.id == recipient_id,
            TransferRecipient.owner_id == principal.owner_id,
        )
    )
    recipient = result.scalar_one_or_none()
    if recipient is None:
        raise ResourceNotFoundError("Recipient", recipient_id)
    return recipient


async def toggle_favorite(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    recipient_id: uuid.UUID,
) -> TransferRecipient:
    """
    Flip a saved recipient's favourite flag.

    Raises:
        ResourceNotFoundError: If the recipient isn't the principal's.
    """
    recipient = await _get_recipient(db, principal, recipient_id)
    recipient.is_favorite = not recipient.is_favorite
    await db.flush()
    return recipient


async def remove_recipient(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    recipient_id: uuid.UUID,
) -> None:
    """
    Delete a saved recipient. Past transfers to them are unaffected.

    Raises:
        ResourceNotFoundError: If the recipient isn't the principal's.
    """
    recipient = await _get_recipient(db, principal, recipient_id)
    await db.delete(recipient)
    await db.flush()
