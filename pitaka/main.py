"""
FastAPI application factory and entry point.

This module creates and configures the FastAPI application:
  1. Lifespan manager — logging, table creation, reference data seeding
  2. CORS middleware — allows frontend origins to make cross-origin requests
  3. Exception handlers — maps domain errors to HTTP responses
  4. Router registration — mounts all API endpoint groups

Running locally:
    uvicorn pitaka.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pitaka import models  # noqa: F401  registers every table on Base.metadata
from pitaka.config import settings
from pitaka.database import AsyncSessionLocal, Base, engine, ensure_sqlite_directory
from pitaka.exceptions import register_exception_handlers
from pitaka.logging_config import setup_logging
from pitaka.routers import (
    accounts,
    auth,
    banks,
    cards,
    investments,
    loans,
    payments,
    savings,
    transactions,
    transfers,
    users,
)
from pitaka.services.seed_service import seed_reference_data

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
      Configures JSON logging, creates the SQLite data directory and any
      missing database tables and, unless SEED_REFERENCE_DATA is off,
      inserts any missing banks, billers, loan products and companies.

    Shutdown:
      Disposes of the database engine, closing all connections cleanly.
    """
    setup_logging(settings.LOG_LEVEL)
    ensure_sqlite_directory(settings.DATABASE_URL)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if settings.SEED_REFERENCE_DATA:
        async with AsyncSessionLocal() as session:
            await seed_reference_data(session)
            await session.commit()

    logger.info("Startup complete", extra={"version": settings.APP_VERSION})
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Digital wallet API: accounts, transfers, bill pay, loans, savings and investments",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

register_exception_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(users.router, prefix="/users", tags=["Users"])
app.include_router(accounts.router, prefix="/accounts", tags=["Accounts"])
app.include_router(transactions.router, prefix="/transactions", tags=["Transactions"])
app.include_router(transfers.router, prefix="/transfers", tags=["Transfers"])
app.include_router(banks.router, prefix="/banks", tags=["Banks"])
app.include_router(payments.router, prefix="/payments", tags=["Payments"])
app.include_router(loans.router, prefix="/loans", tags=["Loans"])
app.include_router(savings.router, prefix="/savings", tags=["Savings"])
app.include_router(investments.router, prefix="/investments", tags=["Investments"])
app.include_router(cards.router, prefix="/cards", tags=["Cards"])


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for load balancers and uptime monitors."""
    return {"status": "ok", "version": settings.APP_VERSION}
