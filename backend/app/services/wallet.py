from __future__ import annotations
from typing import Iterable, Protocol
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from app.errors import TransferFailure
from app.models.wallet import WalletEntry


async def wallet_balance(session: AsyncSession, identity: str) -> int:
    total = await session.scalar(
        select(func.coalesce(func.sum(WalletEntry.amount), 0)).where(WalletEntry.identity == identity)
    )
    return int(total or 0)

async def wallet_entries(session: AsyncSession, identity: str) -> list[WalletEntry]:
    return (await session.execute(
        select(WalletEntry).where(WalletEntry.identity == identity).order_by(WalletEntry.created_at.desc())
    )).scalars().all()


async def credit_tokens(
    session: AsyncSession,
    *,
    identity: str,
    tokens: int,
    type: str,
    note: str,
    external_id: str | None = None,
) -> WalletEntry:
    """
    Credit tokens to a payee wallet.
    Idempotent by external_id when one is given.
    """
    if tokens <= 0:
        raise ValueError("tokens must be > 0")

    if external_id is not None:
        exists = await session.scalar(select(WalletEntry).where(WalletEntry.external_id == external_id))
        if exists:
            return exists

    e = WalletEntry(
        identity=identity,
        type=type,
        amount=int(tokens),
        external_id=external_id,
        note=note,
    )
    session.add(e)
    await session.flush()
    return e


class TransferGateway(Protocol):
    async def transfer(
        self,
        session: AsyncSession,
        destination: str,
        amount: int,
        *,
        type: str,
        note: str,
        external_id: str | None = None,
    ) -> None:
        """Move `amount` out of the pool to `destination`; raise TransferFailure if it cannot accept value."""
        ...


class WalletTransferGateway:
    """Pays into the payee wallets kept in the same database, inside the caller's transaction."""

    def __init__(self, frozen: Iterable[str] = ()):
        self.frozen = frozenset(frozen)

    async def transfer(
        self,
        session: AsyncSession,
        destination: str,
        amount: int,
        *,
        type: str,
        note: str,
        external_id: str | None = None,
    ) -> None:
        if destination in self.frozen:
            raise TransferFailure(f"wallet {destination} does not accept transfers")
        if amount == 0:
            return
        await credit_tokens(session, identity=destination, tokens=amount, type=type, note=note, external_id=external_id)
