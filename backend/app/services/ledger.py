from __future__ import annotations
import asyncio
from contextlib import asynccontextmanager
from contextvars import ContextVar
from datetime import datetime
from typing import AsyncIterator
import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.errors import LedgerError, InvalidInput
from app.schemas.notification import NotificationPublic
from app.schemas.pool import PoolSnapshot
from app.schemas.submission import SubmissionPublic, WinnerResult
from app.schemas.wallet import WalletSnapshot, WalletEntryPublic
from app.services import custody as custody_svc
from app.services import notifications as notify, registry
from app.services.clock import as_utc
from app.services.notifications import NotificationBus, Subscriber
from app.services.payout import select_winner as _select_winner
from app.services.wallet import TransferGateway, WalletTransferGateway, wallet_balance, wallet_entries

log = structlog.get_logger()

MAX_NOTIFICATION_PAGE = 500


class BountyLedger:
    """
    The ledger aggregate: record store, owner index, custody balance and guard identity.

    Every operation runs under one asyncio.Lock and inside one database transaction,
    so operations never interleave and either commit fully or leave no trace.
    Mutating operations also lock the custody row, which extends the serialization
    to other processes sharing the database.

    A call made from inside an in-flight operation (a transfer gateway calling back
    into the ledger) joins that operation's transaction under a savepoint instead
    of waiting on the lock it already holds.
    """

    def __init__(
        self,
        sessionmaker: async_sessionmaker,
        *,
        gateway: TransferGateway | None = None,
        bus: NotificationBus | None = None,
    ):
        self._sessionmaker = sessionmaker
        self._lock = asyncio.Lock()
        self._active: ContextVar[AsyncSession | None] = ContextVar(f"bounty_ledger_{id(self)}", default=None)
        self.gateway = gateway or WalletTransferGateway()
        self.bus = bus or NotificationBus()

    def subscribe(self, fn: Subscriber):
        return self.bus.subscribe(fn)

    @asynccontextmanager
    async def _operation(self, op: str) -> AsyncIterator[AsyncSession]:
        session = self._active.get()
        if session is not None:
            async with session.begin_nested():
                yield session
            return

        committed: list[NotificationPublic] = []
        async with self._lock:
            async with self._sessionmaker() as session:
                token = self._active.set(session)
                try:
                    async with session.begin():
                        yield session
                    committed = [notify.to_public(n) for n in notify.take_pending(session)]
                except LedgerError as e:
                    log.info("ledger_rejected", op=op, error=e.code, detail=str(e))
                    raise
                finally:
                    self._active.reset(token)
        await self.bus.dispatch(committed)

    # ---------- guard ----------

    async def initialize(self, guard: str) -> str:
        async with self._operation("initialize") as session:
            custody = await custody_svc.initialize_custody(session, guard)
            guard_identity = custody.guard_identity
        log.info("ledger_initialized", guard=guard_identity)
        return guard_identity

    async def guard(self) -> str:
        async with self._operation("guard") as session:
            custody = await custody_svc.load_custody(session)
            return custody.guard_identity

    # ---------- record store & owner index ----------

    async def submit(self, participant: str, repo_link: str, description: str = "", now: datetime | None = None) -> int:
        async with self._operation("submit") as session:
            await custody_svc.load_custody(session, for_update=True)
            rec = await registry.create_submission(
                session, participant=participant, repo_link=repo_link, description=description, now=now,
            )
            new_id = rec.id
        log.info("submission_created", id=new_id, participant=participant, repo_link=repo_link)
        return new_id

    async def get_submission(self, submission_id: int) -> SubmissionPublic:
        async with self._operation("get_submission") as session:
            return registry.to_public(await registry.get_submission(session, submission_id))

    async def total_submissions(self) -> int:
        async with self._operation("total_submissions") as session:
            return await registry.count_submissions(session)

    async def participant_submissions(self, participant: str) -> list[int]:
        async with self._operation("participant_submissions") as session:
            return await registry.participant_submission_ids(session, participant)

    # ---------- custody ----------

    async def balance(self) -> int:
        async with self._operation("balance") as session:
            custody = await custody_svc.load_custody(session)
            return int(custody.balance)

    async def pool(self) -> PoolSnapshot:
        async with self._operation("pool") as session:
            custody = await custody_svc.load_custody(session)
            return PoolSnapshot(guard=custody.guard_identity, balance=int(custody.balance))

    async def deposit(self, depositor: str, amount: int) -> int:
        async with self._operation("deposit") as session:
            custody = await custody_svc.deposit(session, depositor=depositor, amount=amount)
            balance, guard = int(custody.balance), custody.guard_identity
        # deposits are open to everyone; flag the ones that do not come from the guard
        log.info("pool_funded", depositor=depositor, amount=amount, balance=balance, from_guard=depositor == guard)
        return balance

    async def receive(self, depositor: str, amount: int, *, path: str = "") -> int:
        """Ambient deposit: value sent along with a call that matches no named operation."""
        log.info("ambient_receive", depositor=depositor, amount=amount, path=path)
        return await self.deposit(depositor, amount)

    async def withdraw(self, caller: str, amount: int) -> int:
        async with self._operation("withdraw") as session:
            custody = await custody_svc.withdraw(session, self.gateway, caller=caller, amount=amount)
            balance = int(custody.balance)
        log.info("pool_withdrawn", guard=caller, amount=amount, balance=balance)
        return balance

    # ---------- payout ----------

    async def select_winner(self, caller: str, submission_id: int, reward: int) -> WinnerResult:
        async with self._operation("select_winner") as session:
            rec, custody = await _select_winner(
                session, self.gateway, caller=caller, submission_id=submission_id, reward=reward,
            )
            result = WinnerResult(id=rec.id, participant=rec.participant, reward=reward, balance=int(custody.balance))
        log.info("winner_selected", id=result.id, participant=result.participant, reward=reward, balance=result.balance)
        return result

    # ---------- notifications & wallets ----------

    async def notifications(self, *, after: int = 0, limit: int = 100) -> list[NotificationPublic]:
        if not 1 <= limit <= MAX_NOTIFICATION_PAGE:
            raise InvalidInput(f"limit must be between 1 and {MAX_NOTIFICATION_PAGE}")
        async with self._operation("notifications") as session:
            return await notify.list_notifications(session, after=after, limit=limit)

    async def wallet(self, identity: str) -> WalletSnapshot:
        async with self._operation("wallet") as session:
            bal = await wallet_balance(session, identity)
            rows = await wallet_entries(session, identity)
            return WalletSnapshot(
                identity=identity,
                balance=bal,
                entries=[
                    WalletEntryPublic(
                        id=r.id, type=r.type, amount=int(r.amount),
                        external_id=r.external_id, note=r.note, created_at=as_utc(r.created_at),
                    ) for r in rows
                ],
            )
