from __future__ import annotations
from fastapi import APIRouter, Depends

from app.deps import get_caller, get_ledger
from app.schemas.wallet import WalletSnapshot
from app.services.ledger import BountyLedger

router = APIRouter(prefix="/wallet", tags=["wallet"])

@router.get("", response_model=WalletSnapshot)
async def get_wallet(caller: str = Depends(get_caller), ledger: BountyLedger = Depends(get_ledger)):
    """Tokens the caller has received from the pool (winner rewards, guard withdrawals)."""
    return await ledger.wallet(caller)
