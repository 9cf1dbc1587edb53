from __future__ import annotations
from pydantic import BaseModel, Field
from datetime import datetime


class NotificationPublic(BaseModel):
    id: int
    kind: str
    payload: dict = Field(default_factory=dict)
    created_at: datetime
