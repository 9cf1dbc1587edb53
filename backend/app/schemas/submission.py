from __future__ import annotations
from pydantic import BaseModel, Field
from datetime import datetime


class SubmissionPublic(BaseModel):
    id: int
    participant: str
    repo_link: str
    description: str
    created_at: datetime
    is_winner: bool


class SubmitRequest(BaseModel):
    repo_link: str
    description: str = ""


class SubmitResponse(BaseModel):
    id: int


class SubmissionCount(BaseModel):
    total: int


class ParticipantSubmissions(BaseModel):
    participant: str
    ids: list[int] = Field(default_factory=list)


class SelectWinnerRequest(BaseModel):
    reward: int = Field(description="Tokens paid from the pool to the record's participant")


class WinnerResult(BaseModel):
    id: int
    participant: str
    reward: int
    balance: int
