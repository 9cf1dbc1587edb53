from __future__ import annotations
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import Unauthorized, AlreadyFinalized, InsufficientFunds
from app.models.custody import Custody
from app.models.submission import Submission
from app.services.custody import load_custody, check_amount
from app.services.notifications import emit, WINNER_SELECTED
from app.services.registry import get_submission
from app.services.wallet import TransferGateway


async def select_winner(
    session: AsyncSession,
    gateway: TransferGateway,
    *,
    caller: str,
    submission_id: int,
    reward: int,
) -> tuple[Submission, Custody]:
    """
    Finalize a record as the winner and pay `reward` from the pool to its participant.

    Order matters:
      1. guard check, record lookup, winner flag check
      2. flip is_winner and flush, so a reentrant call for the same record sees it finalized
      3. balance check and debit
      4. outbound transfer
    Any failure raises and the enclosing transaction discards steps 2-4 together.
    """
    custody = await load_custody(session, for_update=True)
    if caller != custody.guard_identity:
        raise Unauthorized("only the guard identity may select a winner")
    check_amount(reward, "reward")

    rec = await get_submission(session, submission_id)
    if rec.is_winner:
        raise AlreadyFinalized(f"submission {submission_id} is already a winner")

    rec.is_winner = True
    await session.flush()

    if reward > custody.balance:
        raise InsufficientFunds(f"need {reward}, have {custody.balance}")
    custody.balance -= reward
    await session.flush()

    await gateway.transfer(
        session,
        rec.participant,
        reward,
        type="PAYOUT",
        note="winner_reward",
        external_id=f"winner:{rec.id}",
    )
    # a nested call that rolled back its savepoint during the transfer leaves these expired
    await session.refresh(custody)
    await session.refresh(rec)
    emit(session, WINNER_SELECTED, id=rec.id, participant=rec.participant, reward=reward)
    return rec, custody
