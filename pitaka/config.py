"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables, with an optional .env file
as a fallback. Secrets (JWT signing key, card encryption key) have no defaults,
so the service refuses to start until they are provided.

Pydantic Settings resolves each field in this order:
  1. Environment variables (highest priority)
  2. .env file values
  3. Defaults defined here (lowest priority)

Usage:
    from pitaka.config import settings
    print(settings.CURRENCY_LABEL)
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the Pitaka API.

    Required fields (no defaults) MUST be set in .env or environment:
      - SECRET_KEY: Used to sign JWT tokens
      - CARD_ENCRYPTION_KEY: Fernet key for encrypting stored card data
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Application ---
    APP_NAME: str = "Pitaka API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # --- Database ---
    # SQLite for local use; point at PostgreSQL (asyncpg) for anything shared
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/pitaka.db"

    # Create billers, banks, loan products and companies on startup if missing
    SEED_REFERENCE_DATA: bool = True

    # --- Authentication ---
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # --- Card Encryption ---
    # Generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())"
    CARD_ENCRYPTION_KEY: str

    # --- Ledger ---
    # Display symbol only; amounts are never converted
    CURRENCY_LABEL: str = "₱"

    # Upper bound on store-checked retries for account numbers and references
    MAX_ID_GENERATION_ATTEMPTS: int = 10

    # Interbank fee used when a bank directory entry does not set its own
    DEFAULT_INTERBANK_FEE_CENTS: int = 25_00

    # --- CORS ---
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000"]


# Singleton: import this instance everywhere instead of creating new Settings()
settings = Settings()
