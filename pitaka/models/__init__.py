"""
SQLAlchemy ORM models package.

All models are imported here so that Base.metadata knows every table
before create_all() runs, and so other modules can import from
pitaka.models directly.
"""

from pitaka.models.user import User  # noqa: F401
from pitaka.models.account import Account, AccountKind  # noqa: F401
from pitaka.models.transaction import (  # noqa: F401
    Direction,
    OperationStatus,
    Transaction,
    TransactionKind,
)
from pitaka.models.transfer import Transfer, TransferKind, TransferRecipient  # noqa: F401
from pitaka.models.bank import Bank  # noqa: F401
from pitaka.models.payment import Biller, BillerCategory, Payment  # noqa: F401
from pitaka.models.loan import Loan, LoanPayment, LoanProduct, LoanStatus  # noqa: F401
from pitaka.models.savings import SavingsGoal, SavingsTransaction, SavingsEntryKind  # noqa: F401
from pitaka.models.investment import Company, Investment  # noqa: F401
from pitaka.models.card import Card  # noqa: F401
