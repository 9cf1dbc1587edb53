from __future__ import annotations
import os
from pydantic import BaseModel


def _csv(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "dev")
    app_name: str = os.getenv("APP_NAME", "bounty-ledger-api")
    app_display_name: str = os.getenv("APP_DISPLAY_NAME", "Bounty Ledger")
    app_version: str = os.getenv("APP_VERSION", "0.1.0")
    git_sha: str = os.getenv("GIT_SHA", "dev")
    cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    database_url: str = os.getenv("DATABASE_URL", "postgresql+asyncpg://postgres:postgres@db:5432/bounty_dev")
    auto_create_schema: bool = os.getenv("AUTO_CREATE_SCHEMA", "0") == "1"

    # Privileged identity for payouts and withdrawals; fixed on first startup
    guard_identity: str = os.getenv("GUARD_IDENTITY", "")

    # Payee wallets that refuse incoming transfers
    frozen_wallets: list[str] = _csv(os.getenv("FROZEN_WALLETS", ""))

settings = Settings()
