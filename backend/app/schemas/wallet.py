from __future__ import annotations
from pydantic import BaseModel
from uuid import UUID
from datetime import datetime

class WalletEntryPublic(BaseModel):
    id: UUID
    type: str
    amount: int
    external_id: str | None = None
    note: str | None = None
    created_at: datetime

class WalletSnapshot(BaseModel):
    identity: str
    balance: int
    entries: list[WalletEntryPublic]
