from __future__ import annotations
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, Integer, Boolean, DateTime, CheckConstraint
from app.db import Base, IDENTITY_LENGTH


class Submission(Base):
    """
    Append-only submission record.
    Everything but is_winner is immutable once written; is_winner only goes false -> true.
    Ids are assigned by the ledger (0, 1, 2, ...), never by the database.
    """
    __tablename__ = "submissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)

    # Owner index: ordered by id within a participant
    participant: Mapped[str] = mapped_column(String(IDENTITY_LENGTH), index=True, nullable=False)

    repo_link: Mapped[str] = mapped_column(Text(), nullable=False)
    description: Mapped[str] = mapped_column(Text(), nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    is_winner: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        CheckConstraint("id >= 0", name="ck_submission_id_nonneg"),
        CheckConstraint("length(repo_link) > 0", name="ck_submission_repo_link_nonempty"),
    )
