from __future__ import annotations
from datetime import datetime, timezone
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, BigInteger, DateTime, CheckConstraint, func
from app.db import Base, IDENTITY_LENGTH

CUSTODY_ROW_ID = 1


class Custody(Base):
    """
    Single-row table: the guard identity and the pool balance the ledger holds.
    Every mutating operation locks this row first (SELECT ... FOR UPDATE),
    which serializes ledger writers across processes.
    """
    __tablename__ = "custody"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=CUSTODY_ROW_ID)
    guard_identity: Mapped[str] = mapped_column(String(IDENTITY_LENGTH), nullable=False)
    balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)  # tokens
    initialized_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), server_default=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_custody_balance_nonneg"),
        CheckConstraint(f"id = {CUSTODY_ROW_ID}", name="ck_custody_single_row"),
    )
