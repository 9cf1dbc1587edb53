from __future__ import annotations
from datetime import datetime
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import InvalidInput, NotFound
from app.models.submission import Submission
from app.schemas.submission import SubmissionPublic
from app.services.custody import check_identity
from app.services.clock import utcnow, as_utc
from app.services.notifications import emit, SUBMITTED


async def count_submissions(session: AsyncSession) -> int:
    total = await session.scalar(select(func.count()).select_from(Submission))
    return int(total or 0)


async def create_submission(
    session: AsyncSession,
    *,
    participant: str,
    repo_link: str,
    description: str = "",
    now: datetime | None = None,
) -> Submission:
    """
    Append a record. The id is the record count before the append, so ids run 0, 1, 2, ...
    Callers must hold the ledger's write lock, otherwise two writers could pick the same id.
    """
    check_identity(participant, "participant")
    if not repo_link:
        raise InvalidInput("repo_link must be non-empty")

    rec = Submission(
        id=await count_submissions(session),
        participant=participant,
        repo_link=repo_link,
        description=description or "",
        created_at=now or utcnow(),
        is_winner=False,
    )
    session.add(rec)
    await session.flush()
    emit(session, SUBMITTED, id=rec.id, participant=participant, repo_link=repo_link)
    return rec


async def get_submission(session: AsyncSession, submission_id: int) -> Submission:
    if submission_id < 0:
        raise NotFound(f"submission {submission_id} not found")
    rec = await session.get(Submission, submission_id)
    if rec is None:
        raise NotFound(f"submission {submission_id} not found")
    return rec


async def participant_submission_ids(session: AsyncSession, participant: str) -> list[int]:
    rows = await session.scalars(
        select(Submission.id).where(Submission.participant == participant).order_by(Submission.id.asc())
    )
    return [int(i) for i in rows.all()]


def to_public(rec: Submission) -> SubmissionPublic:
    return SubmissionPublic(
        id=rec.id,
        participant=rec.participant,
        repo_link=rec.repo_link,
        description=rec.description,
        created_at=as_utc(rec.created_at),
        is_winner=bool(rec.is_winner),
    )
