from __future__ import annotations
import inspect
from typing import Any, Callable, Iterable
import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import Notification
from app.schemas.notification import NotificationPublic
from app.services.clock import as_utc

log = structlog.get_logger()

SUBMITTED = "Submitted"
FUNDED = "Funded"
WINNER_SELECTED = "WinnerSelected"
WITHDRAWN = "Withdrawn"

# session.info key holding notifications written in the current transaction
PENDING_KEY = "ledger_pending_notifications"

Subscriber = Callable[[NotificationPublic], Any]


def emit(session: AsyncSession, kind: str, **payload) -> Notification:
    """Append a notification to the log; it becomes visible only if the transaction commits."""
    n = Notification(kind=kind, payload=payload)
    session.add(n)
    session.info.setdefault(PENDING_KEY, []).append(n)
    return n


def take_pending(session: AsyncSession) -> list[Notification]:
    return session.info.pop(PENDING_KEY, [])


def to_public(n: Notification) -> NotificationPublic:
    return NotificationPublic(id=n.id, kind=n.kind, payload=dict(n.payload or {}), created_at=as_utc(n.created_at))


async def list_notifications(session: AsyncSession, *, after: int = 0, limit: int = 100) -> list[NotificationPublic]:
    rows = (await session.execute(
        select(Notification).where(Notification.id > after).order_by(Notification.id.asc()).limit(limit)
    )).scalars().all()
    return [to_public(n) for n in rows]


class NotificationBus:
    """Publish/subscribe point for committed notifications."""

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    def subscribe(self, fn: Subscriber) -> Callable[[], None]:
        self._subscribers.append(fn)

        def unsubscribe() -> None:
            if fn in self._subscribers:
                self._subscribers.remove(fn)

        return unsubscribe

    async def dispatch(self, items: Iterable[NotificationPublic]) -> None:
        for item in items:
            for fn in list(self._subscribers):
                try:
                    res = fn(item)
                    if inspect.isawaitable(res):
                        await res
                except Exception:
                    # the operation already committed; a broken listener must not undo it
                    log.exception("notification_subscriber_failed", kind=item.kind, notification_id=item.id)
