"""
Loan service — applications, disbursement, repayment.

  apply_for_loan()   validates against the product, creates a PENDING loan
  disburse_loan()    PENDING -> ACTIVE, credits the linked account
  cancel_loan()      PENDING -> CANCELLED
  make_payment()     debits an owned account, applies the payment to the loan

Repayment follows the same ledger sequence as every other money move:
the LoanPayment, the LOAN_PAYMENT ledger row and the Loan's new balances
are written together or not at all. Loan.apply_payment() owns the balance
arithmetic and the switch to COMPLETED.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.dependencies import AuthenticatedPrincipal
from pitaka.exceptions import (
    InvalidAmountError,
    InvalidRequestError,
    InvalidStateError,
    ResourceNotFoundError,
)
from pitaka.identifiers import generate_unique_reference
from pitaka.models.loan import (
    Loan,
    LoanPayment,
    LoanProduct,
    LoanStatus,
    PaymentFrequency,
    amortized_payment_cents,
)
from pitaka.models.transaction import Direction, OperationStatus, TransactionKind
from pitaka.services import account_service, ledger

logger = logging.getLogger(__name__)


BILLING_CYCLE = timedelta(days=30)


async def get_products(db: AsyncSession) -> list[LoanProduct]:
    result = await db.execute(
        select(LoanProduct)
        .where(LoanProduct.is_active.is_(True))
        .order_by(LoanProduct.title)
    )
    return list(result.scalars().all())


async def get_product(db: AsyncSession, product_id: uuid.UUID) -> LoanProduct:
    product = await db.get(LoanProduct, product_id)
    if product is None or not product.is_active:
        raise ResourceNotFoundError("Loan product", product_id)
    return product


async def apply_for_loan(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    product_id: uuid.UUID,
    amount_cents: int,
    term_months: int,
    account_id: uuid.UUID | None = None,
    purpose: str | None = None,
    payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY,
) -> Loan:
    """
    Create a PENDING loan against a product.

    The first installment is the amortized monthly payment at the
    product's rate. No money moves until the loan is disbursed.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        product_id: UUID of the loan product.
        amount_cents: Principal in integer cents.
        term_months: Length of the loan in months.
        account_id: Owned account to disburse into and repay from;
            defaults to the MAIN account.
        purpose: Optional free text.
        payment_frequency: How often installments fall due.

    Returns:
        The new Loan.

    Raises:
        ResourceNotFoundError: If the product doesn't exist or is inactive.
        InvalidAmountError: If the amount is outside the product's range.
        InvalidRequestError: If the term is outside the product's range.
        AccountNotFoundError: If account_id isn't one of theirs.
    """
    ledger.require_positive(amount_cents)
    product = await get_product(db, product_id)

    if not product.min_amount_cents <= amount_cents <= product.max_amount_cents:
        raise InvalidAmountError(
            f"{product.title} amount must be between {product.min_amount_cents} "
            f"and {product.max_amount_cents} cents"
        )
    if not product.min_term_months <= term_months <= product.max_term_months:
        raise InvalidRequestError(
            f"{product.title} term must be between {product.min_term_months} "
            f"and {product.max_term_months} months"
        )

    if account_id is None:
        account = await account_service.get_primary_account(db, principal)
    else:
        account = await ledger.find_owned(db, account_id, principal)

    loan = Loan(
        owner_id=principal.owner_id,
        loan_product_id=product.id,
        account_id=account.id,
        title=product.title,
        purpose=purpose,
        principal_cents=amount_cents,
        paid_cents=0,
        remaining_cents=amount_cents,
        next_payment_cents=amortized_payment_cents(amount_cents, product.annual_rate_bps, term_months),
        term_months=term_months,
        annual_rate_bps=product.annual_rate_bps,
        due_date=datetime.now(timezone.utc) + BILLING_CYCLE,
        progress_percent=0.0,
        status=LoanStatus.PENDING,
        payment_frequency=payment_frequency,
    )
    db.add(loan)
    await db.flush()

    logger.info(
        "Loan application created",
        extra={
            "loan_id": str(loan.id),
            "owner_id": str(principal.owner_id),
            "amount_cents": amount_cents,
            "term_months": term_months,
        },
    )
    return loan


async def _get_owned_loan(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    loan_id: uuid.UUID,
    *,
    lock: bool = False,
) -> Loan:
    query = select(Loan).where(Loan.id == loan_id, Loan.owner_id == principal.owner_id)
    if lock:
        query = query.with_for_update()

    result = await db.execute(query)
    loan = result.scalar_one_or_none()
    if loan is None:
        raise ResourceNotFoundError("Loan", loan_id)
    return loan


async def get_loans(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    status_filter: LoanStatus | None = None,
) -> list[Loan]:
    """
    The principal's loans, newest first.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        status_filter: Only return loans in this status.

    Returns:
        List of Loans.
    """
    query = (
        select(Loan)
        .where(Loan.owner_id == principal.owner_id)
        .order_by(Loan.created_at.desc())
    )
    if status_filter:
        query = query.where(Loan.status == status_filter)

    result = await db.execute(query)
    return list(result.scalars().all())


async def get_loan(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    loan_id: uuid.UUID,
) -> Loan:
    return await _get_owned_loan(db, principal, loan_id)


async def disburse_loan(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    loan_id: uuid.UUID,
) -> Loan:
    """
    Pay the principal out to the loan's linked account and activate the loan.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        loan_id: UUID of the loan.

    Returns:
        The ACTIVE Loan, with approval and disbursement dates set.

    Raises:
        ResourceNotFoundError: If the loan isn't theirs.
        InvalidStateError: If the loan isn't PENDING.
    """
    loan = await _get_owned_loan(db, principal, loan_id, lock=True)
    if loan.status != LoanStatus.PENDING:
        raise InvalidStateError(f"Loan is {loan.status.value}; only pending loans can be disbursed")

    account = await ledger.find_owned(db, loan.account_id, principal, lock=True)
    ledger.credit(account, loan.principal_cents)
    await ledger.record_transaction(
        db,
        account=account,
        kind=TransactionKind.LOAN_DISBURSEMENT,
        direction=Direction.CREDIT,
        amount_cents=loan.principal_cents,
        description=f"{loan.title} disbursement",
        loan_id=loan.id,
    )

    now = datetime.now(timezone.utc)
    loan.status = LoanStatus.ACTIVE
    loan.approval_date = now
    loan.disbursement_date = now
    loan.due_date = now + BILLING_CYCLE
    await db.flush()

    logger.info(
        "Loan disbursed",
        extra={
            "loan_id": str(loan.id),
            "owner_id": str(principal.owner_id),
            "amount_cents": loan.principal_cents,
            "kind": TransactionKind.LOAN_DISBURSEMENT.value,
        },
    )
    return loan


async def cancel_loan(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    loan_id: uuid.UUID,
) -> Loan:
    """
    Withdraw a loan application before any money has moved.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        loan_id: UUID of the loan.

    Returns:
        The CANCELLED Loan.

    Raises:
        ResourceNotFoundError: If the loan isn't theirs.
        InvalidStateError: If the loan isn't PENDING.
    """
    loan = await _get_owned_loan(db, principal, loan_id, lock=True)
    if loan.status != LoanStatus.PENDING:
        raise InvalidStateError(f"Loan is {loan.status.value}; only pending loans can be cancelled")

    loan.status = LoanStatus.CANCELLED
    await db.flush()
    return loan


async def make_payment(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    loan_id: uuid.UUID,
    amount_cents: int,
    account_id: uuid.UUID | None = None,
) -> tuple[Loan, LoanPayment]:
    """
    Repay part or all of a loan.

    The LNP reference is both the LoanPayment's reference and the ledger
    row's transaction_id. Paying off what remains completes the loan.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        loan_id: UUID of the loan.
        amount_cents: Amount in integer cents (must be > 0).
        account_id: Owned account to pay from; defaults to the loan's account.

    Returns:
        Tuple of (updated Loan, LoanPayment).

    Raises:
        ResourceNotFoundError: If the loan isn't theirs.
        AccountNotFoundError: If account_id isn't theirs.
        InvalidStateError: If the loan isn't APPROVED or ACTIVE (this
            includes a loan that is already COMPLETED).
        InvalidAmountError: If amount_cents <= 0 or exceeds what remains.
        InsufficientFundsError: If the paying account can't cover it.
    """
    ledger.require_positive(amount_cents)
    loan = await _get_owned_loan(db, principal, loan_id, lock=True)

    if not loan.is_payable:
        raise InvalidStateError(f"Loan is {loan.status.value} and cannot accept payments")
    if amount_cents > loan.remaining_cents:
        raise InvalidAmountError(
            f"Payment of {amount_cents} cents exceeds the remaining "
            f"{loan.remaining_cents} cents"
        )

    account = await ledger.find_owned(db, account_id or loan.account_id, principal, lock=True)
    ledger.debit(account, amount_cents)

    reference = await generate_unique_reference(db, LoanPayment.reference, "LNP")
    txn = await ledger.record_transaction(
        db,
        account=account,
        kind=TransactionKind.LOAN_PAYMENT,
        direction=Direction.DEBIT,
        amount_cents=amount_cents,
        description=f"{loan.title} payment",
        transaction_id=reference,
        loan_id=loan.id,
    )

    loan.apply_payment(amount_cents)
    if loan.status != LoanStatus.COMPLETED:
        loan.due_date = loan.due_date + BILLING_CYCLE

    payment = LoanPayment(
        loan_id=loan.id,
        account_id=account.id,
        reference=reference,
        amount_cents=amount_cents,
        status=OperationStatus.COMPLETED,
        transaction_id=txn.transaction_id,
    )
    db.add(payment)
    await db.flush()

    logger.info(
        "Loan payment completed",
        extra={
            "reference": reference,
            "owner_id": str(principal.owner_id),
            "amount_cents": amount_cents,
            "kind": TransactionKind.LOAN_PAYMENT.value,
            "loan_status": loan.status.value,
        },
    )
    return loan, payment


async def get_payments(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    loan_id: uuid.UUID,
) -> list[LoanPayment]:
    """
    Payments made against one of the principal's loans, newest first.

    Raises:
        ResourceNotFoundError: If the loan isn't theirs.
    """
    await _get_owned_loan(db, principal, loan_id)
    result = await db.execute(
        select(LoanPayment)
        .where(LoanPayment.loan_id == loan_id)
        .order_by(LoanPayment.paid_at.desc())
    )
    return list(result.scalars().all())
