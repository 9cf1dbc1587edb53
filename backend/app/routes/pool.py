from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.security import HTTPAuthorizationCredentials

from app.deps import get_attached_value, get_caller, get_ledger, reject_attached_value, security
from app.schemas.notification import NotificationPublic
from app.schemas.pool import PoolSnapshot, FundResult, WithdrawRequest, WithdrawResult
from app.services.ledger import BountyLedger, MAX_NOTIFICATION_PAGE

router = APIRouter(tags=["pool"])

@router.get("/pool", response_model=PoolSnapshot)
async def get_pool(ledger: BountyLedger = Depends(get_ledger)):
    return await ledger.pool()

@router.post("/pool/fund", response_model=FundResult)
async def fund_pool(
    caller: str = Depends(get_caller),
    value: int = Depends(get_attached_value),
    ledger: BountyLedger = Depends(get_ledger),
):
    """Open to any caller; the attached X-Value is added to the pool."""
    balance = await ledger.deposit(caller, value)
    return FundResult(depositor=caller, amount=value, balance=balance)

@router.post("/pool/withdraw", response_model=WithdrawResult, dependencies=[Depends(reject_attached_value)])
async def withdraw(payload: WithdrawRequest, caller: str = Depends(get_caller), ledger: BountyLedger = Depends(get_ledger)):
    """Guard only. Moves tokens from the pool to the guard's wallet."""
    balance = await ledger.withdraw(caller, payload.amount)
    return WithdrawResult(guard=caller, amount=payload.amount, balance=balance)

@router.get("/notifications", response_model=list[NotificationPublic])
async def list_notifications(
    after: int = Query(default=0, ge=0, description="Return notifications with id greater than this"),
    limit: int = Query(default=100, ge=1, le=MAX_NOTIFICATION_PAGE),
    ledger: BountyLedger = Depends(get_ledger),
):
    return await ledger.notifications(after=after, limit=limit)


# Registered last: catches value-bearing calls that match no named operation.
fallback_router = APIRouter()

@fallback_router.api_route("/{path:path}", methods=["POST", "PUT", "PATCH"], include_in_schema=False, response_model=FundResult)
async def ambient_receive(
    request: Request,
    value: int = Depends(get_attached_value),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    ledger: BountyLedger = Depends(get_ledger),
):
    if value <= 0:
        raise HTTPException(status_code=404, detail="Not Found")
    caller = await get_caller(credentials)
    balance = await ledger.receive(caller, value, path=request.url.path)
    return FundResult(depositor=caller, amount=value, balance=balance)
