from __future__ import annotations
from pydantic import BaseModel


class PoolSnapshot(BaseModel):
    guard: str
    balance: int


class FundResult(BaseModel):
    depositor: str
    amount: int
    balance: int


class WithdrawRequest(BaseModel):
    amount: int


class WithdrawResult(BaseModel):
    guard: str
    amount: int
    balance: int
