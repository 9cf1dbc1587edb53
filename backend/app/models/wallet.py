from __future__ import annotations
import uuid
from datetime import datetime, timezone
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, BigInteger, DateTime, Uuid, UniqueConstraint, CheckConstraint, func
from app.db import Base, IDENTITY_LENGTH

class WalletEntry(Base):
    """
    Payee wallet (per identity) receiving value sent out of the pool.
    Types:
      - PAYOUT      => +amount (winner reward)
      - WITHDRAWAL  => +amount (guard withdrawal from the pool)
    Idempotency: external_id is unique (e.g. winner:<submission id>).
    """
    __tablename__ = "wallet_entries"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    identity: Mapped[str] = mapped_column(String(IDENTITY_LENGTH), index=True, nullable=False)

    type: Mapped[str] = mapped_column(String(16), nullable=False)    # PAYOUT | WITHDRAWAL
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)  # tokens

    external_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    note: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("external_id", name="uq_wallet_external_id"),
        CheckConstraint("amount > 0", name="ck_wallet_amount_pos"),
    )
