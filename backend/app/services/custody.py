from __future__ import annotations
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import InvalidInput, Unauthorized, InsufficientFunds, NotInitialized, AlreadyInitialized
from app.db import IDENTITY_LENGTH
from app.models.custody import Custody, CUSTODY_ROW_ID
from app.services.notifications import emit, FUNDED, WITHDRAWN
from app.services.wallet import TransferGateway

# amounts and balances live in BIGINT columns
MAX_AMOUNT = 2**63 - 1


def check_amount(amount: int, what: str, *, allow_zero: bool = True) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidInput(f"{what} must be an integer")
    if amount < 0 or (amount == 0 and not allow_zero):
        raise InvalidInput(f"{what} must be {'>= 0' if allow_zero else '> 0'}")
    if amount > MAX_AMOUNT:
        raise InvalidInput(f"{what} must be <= {MAX_AMOUNT}")


def check_identity(identity: str, what: str) -> None:
    if not identity:
        raise InvalidInput(f"{what} identity is required")
    if len(identity) > IDENTITY_LENGTH:
        raise InvalidInput(f"{what} identity must be at most {IDENTITY_LENGTH} characters")


async def load_custody(session: AsyncSession, *, for_update: bool = False) -> Custody:
    """Fetch the single custody row. for_update takes the ledger-wide row lock."""
    stmt = select(Custody).where(Custody.id == CUSTODY_ROW_ID)
    if for_update:
        stmt = stmt.with_for_update()
    custody = await session.scalar(stmt)
    if custody is None:
        raise NotInitialized("ledger has not been initialized with a guard identity")
    return custody


async def initialize_custody(session: AsyncSession, guard: str) -> Custody:
    """
    Fix the guard identity. Running it again with the same guard is a no-op;
    a different guard is refused since the guard never changes after initialization.
    """
    check_identity(guard, "guard")
    existing = await session.get(Custody, CUSTODY_ROW_ID, with_for_update=True)
    if existing is not None:
        if existing.guard_identity != guard:
            raise AlreadyInitialized("ledger is already initialized with a different guard identity")
        return existing
    custody = Custody(id=CUSTODY_ROW_ID, guard_identity=guard, balance=0)
    session.add(custody)
    await session.flush()
    return custody


async def deposit(session: AsyncSession, *, depositor: str, amount: int) -> Custody:
    check_amount(amount, "deposit amount", allow_zero=False)
    custody = await load_custody(session, for_update=True)
    if custody.balance + amount > MAX_AMOUNT:
        raise InvalidInput(f"deposit would push the pool past {MAX_AMOUNT}")
    custody.balance += amount
    await session.flush()
    emit(session, FUNDED, depositor=depositor, amount=amount)
    return custody


async def withdraw(session: AsyncSession, gateway: TransferGateway, *, caller: str, amount: int) -> Custody:
    custody = await load_custody(session, for_update=True)
    if caller != custody.guard_identity:
        raise Unauthorized("only the guard identity may withdraw")
    check_amount(amount, "withdraw amount")
    if amount > custody.balance:
        raise InsufficientFunds(f"need {amount}, have {custody.balance}")

    custody.balance -= amount
    await session.flush()

    # TransferFailure propagates and the caller's transaction undoes the debit
    await gateway.transfer(session, custody.guard_identity, amount, type="WITHDRAWAL", note="pool_withdrawal")
    await session.refresh(custody)
    emit(session, WITHDRAWN, guard=custody.guard_identity, amount=amount)
    return custody
