from __future__ import annotations
from fastapi import APIRouter, Depends, Path

from app.deps import get_caller, get_ledger, reject_attached_value
from app.schemas.submission import (
    SubmissionPublic, SubmitRequest, SubmitResponse, SubmissionCount,
    ParticipantSubmissions, SelectWinnerRequest, WinnerResult,
)
from app.services.ledger import BountyLedger

router = APIRouter(tags=["submissions"])

@router.post("/submissions", response_model=SubmitResponse, status_code=201, dependencies=[Depends(reject_attached_value)])
async def submit(payload: SubmitRequest, caller: str = Depends(get_caller), ledger: BountyLedger = Depends(get_ledger)):
    new_id = await ledger.submit(caller, payload.repo_link, payload.description)
    return SubmitResponse(id=new_id)

@router.get("/submissions/count", response_model=SubmissionCount)
async def total_submissions(ledger: BountyLedger = Depends(get_ledger)):
    return SubmissionCount(total=await ledger.total_submissions())

@router.get("/submissions/{submission_id}", response_model=SubmissionPublic)
async def get_submission(submission_id: int = Path(...), ledger: BountyLedger = Depends(get_ledger)):
    return await ledger.get_submission(submission_id)

@router.get("/participants/{participant}/submissions", response_model=ParticipantSubmissions)
async def participant_submissions(participant: str = Path(...), ledger: BountyLedger = Depends(get_ledger)):
    ids = await ledger.participant_submissions(participant)
    return ParticipantSubmissions(participant=participant, ids=ids)

@router.post("/submissions/{submission_id}/winner", response_model=WinnerResult, dependencies=[Depends(reject_attached_value)])
async def select_winner(
    payload: SelectWinnerRequest,
    submission_id: int = Path(...),
    caller: str = Depends(get_caller),
    ledger: BountyLedger = Depends(get_ledger),
):
    """Guard only. Marks the submission as winner and pays the reward from the pool."""
    return await ledger.select_winner(caller, submission_id, payload.reward)
