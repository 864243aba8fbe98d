"""
Reference data seeding: the bank directory, the biller catalogue, loan
products and listed companies.

seed_reference_data() is idempotent. Each record is keyed on its unique
natural key (bank code, biller name, product title, ticker symbol) and
only missing records are inserted, so it is safe to call on every
startup. Amounts are in cents.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.config import settings
from pitaka.models.bank import Bank
from pitaka.models.investment import Company
from pitaka.models.loan import LoanProduct
from pitaka.models.payment import Biller, BillerCategory

logger = logging.getLogger(__name__)


BANKS = [
    {"name": "Banco De Oro (BDO)", "code": "BDO", "swift_code": "BNORPHMM"},
    {"name": "Bank of the Philippine Islands (BPI)", "code": "BPI", "swift_code": "BOPIPHMM"},
    {"name": "Metrobank", "code": "MBTC", "swift_code": "MBTCPHMM"},
    {"name": "UnionBank", "code": "UBP", "swift_code": "UBPHPHMM"},
    {"name": "Security Bank", "code": "SECB", "swift_code": "SETCPHMM"},
    {"name": "Philippine National Bank (PNB)", "code": "PNB", "swift_code": "PNBMPHMM"},
    {"name": "Landbank of the Philippines", "code": "LBP", "swift_code": "TLBPPHMM"},
    {"name": "Rizal Commercial Banking Corporation (RCBC)", "code": "RCBC", "swift_code": "RCBCPHMM"},
    {"name": "Eastwest Bank", "code": "EWB", "swift_code": "EWBCPHMM"},
    {"name": "China Banking Corporation (Chinabank)", "code": "CBC", "swift_code": "CHBKPHMM"},
]

BILLERS = [
    {
        "name": "Meralco",
        "category": BillerCategory.ELECTRICITY,
        "account_number_label": "Customer Account Number",
        "account_number_length": 12,
        "minimum_amount_cents": 5_000,
        "maximum_amount_cents": 5_000_000,
        "convenience_fee_cents": 750,
        "popular_index": 1,
    },
    {
        "name": "Maynilad",
        "category": BillerCategory.WATER,
        "account_number_label": "Contract Account Number",
        "account_number_length": 10,
        "minimum_amount_cents": 5_000,
        "maximum_amount_cents": 3_000_000,
        "popular_index": 2,
    },
    {
        "name": "Manila Water",
        "category": BillerCategory.WATER,
        "account_number_label": "Contract Account Number",
        "account_number_length": 10,
        "minimum_amount_cents": 5_000,
        "maximum_amount_cents": 3_000_000,
        "popular_index": 3,
    },
    {
        "name": "Netflix",
        "category": BillerCategory.ENTERTAINMENT,
        "account_number_label": "Email Address",
        "minimum_amount_cents": 14_900,
        "maximum_amount_cents": 54_900,
        "popular_index": 4,
    },
    {
        "name": "Spotify",
        "category": BillerCategory.ENTERTAINMENT,
        "account_number_label": "Email Address",
        "minimum_amount_cents": 12_900,
        "maximum_amount_cents": 19_400,
        "popular_index": 5,
    },
    {
        "name": "Apple",
        "category": BillerCategory.ENTERTAINMENT,
        "account_number_label": "Apple ID",
        "minimum_amount_cents": 5_000,
        "maximum_amount_cents": 1_000_000,
        "popular_index": 6,
    },
    {
        "name": "Goodhands Insurance",
        "category": BillerCategory.INSURANCE,
        "account_number_label": "Policy Number",
        "account_number_length": 10,
        "minimum_amount_cents": 50_000,
        "maximum_amount_cents": 5_000_000,
        "popular_index": 7,
    },
]

LOAN_PRODUCTS = [
    {
        "title": "Personal Loan",
        "description": "Unsecured financing for personal needs with flexible terms.",
        "annual_rate_bps": 1050,
        "min_amount_cents": 1_000_000,
        "max_amount_cents": 50_000_000,
        "min_term_months": 6,
        "max_term_months": 36,
    },
    {
        "title": "Home Loan",
        "description": "Long-term financing for buying, building or refinancing a home.",
        "annual_rate_bps": 575,
        "min_amount_cents": 50_000_000,
        "max_amount_cents": 1_000_000_000,
        "min_term_months": 60,
        "max_term_months": 360,
    },
    {
        "title": "Auto Loan",
        "description": "Vehicle financing with quick approval.",
        "annual_rate_bps": 725,
        "min_amount_cents": 10_000_000,
        "max_amount_cents": 100_000_000,
        "min_term_months": 12,
        "max_term_months": 60,
    },
]

COMPANIES = [
    {"name": "PLDT Inc.", "symbol": "TEL", "sector": "Telecommunications",
     "current_price_cents": 125_050, "previous_close_cents": 123_000},
    {"name": "Ayala Corporation", "symbol": "AC", "sector": "Holding Firms",
     "current_price_cents": 75_200, "previous_close_cents": 75_500},
    {"name": "SM Investments", "symbol": "SM", "sector": "Holding Firms",
     "current_price_cents": 92_500, "previous_close_cents": 91_500},
    {"name": "BDO Unibank", "symbol": "BDO", "sector": "Financials",
     "current_price_cents": 13_520, "previous_close_cents": 13_380},
    {"name": "Jollibee Foods", "symbol": "JFC", "sector": "Consumer Services",
     "current_price_cents": 18_650, "previous_close_cents": 18_480},
]


async def _insert_missing(db: AsyncSession, model, key: str, rows: list[dict]) -> int:
    column = getattr(model, key)
    result = await db.execute(select(column))
    existing = set(result.scalars().all())

    added = 0
    for row in rows:
        if row[key] in existing:
            continue
        record = model(**row)
        if isinstance(record, Company):
            record.set_price(row["current_price_cents"])
        db.add(record)
        added += 1
    await db.flush()
    return added


async def seed_reference_data(db: AsyncSession) -> None:
    """Insert any missing banks, billers, loan products and companies."""
    banks = [
        {**bank, "transfer_fee_cents": settings.DEFAULT_INTERBANK_FEE_CENTS}
        for bank in BANKS
    ]
    counts = {
        "banks": await _insert_missing(db, Bank, "code", banks),
        "billers": await _insert_missing(db, Biller, "name", BILLERS),
        "loan_products": await _insert_missing(db, LoanProduct, "title", LOAN_PRODUCTS),
        "companies": await _insert_missing(db, Company, "symbol", COMPANIES),
    }
    logger.info("Reference data seeded", extra=counts)
