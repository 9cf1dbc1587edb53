from __future__ import annotations
import jwt
from fastapi import Depends, Header, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.config import settings
from app.db import SessionLocal, IDENTITY_LENGTH
from app.errors import InvalidInput
from app.security import decode_token
from app.services.ledger import BountyLedger
from app.services.wallet import WalletTransferGateway

security = HTTPBearer(auto_error=False)

_ledger: BountyLedger | None = None

def get_ledger() -> BountyLedger:
    global _ledger
    if _ledger is None:
        _ledger = BountyLedger(SessionLocal, gateway=WalletTransferGateway(settings.frozen_wallets))
    return _ledger

async def get_caller(credentials: HTTPAuthorizationCredentials | None = Depends(security)) -> str:
    """Verified caller identity, taken from the bearer token subject."""
    if credentials is None:
        raise HTTPException(status_code=401, detail="Missing bearer token")
    try:
        data = decode_token(credentials.credentials)
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    if data.get("type") != "access":
        raise HTTPException(status_code=401, detail="Wrong token type")
    identity = data.get("sub")
    if not identity:
        raise HTTPException(status_code=401, detail="Token has no subject")
    if len(str(identity)) > IDENTITY_LENGTH:
        raise InvalidInput(f"caller identity must be at most {IDENTITY_LENGTH} characters")
    return str(identity)

async def get_attached_value(x_value: int = Header(default=0, alias="X-Value")) -> int:
    """Tokens attached to the call (0 when the header is absent)."""
    return x_value

async def reject_attached_value(value: int = Depends(get_attached_value)) -> None:
    """For operations that do not take tokens: refuse the call instead of dropping the value."""
    if value != 0:
        raise InvalidInput("this operation does not accept attached value")

