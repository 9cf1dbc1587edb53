from __future__ import annotations
from sqlalchemy.pool import StaticPool
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from app.config import settings

# identities (JWT subjects) are stored in VARCHAR columns of this width
IDENTITY_LENGTH = 128

class Base(DeclarativeBase):
    pass

def make_engine(url: str, **kw) -> AsyncEngine:
    """
    Build an async engine for the ledger.
    In-memory SQLite needs a single shared connection, otherwise every
    checkout would see an empty database.
    """
    if url.startswith("sqlite") and ":memory:" in url:
        kw.setdefault("poolclass", StaticPool)
        kw.setdefault("connect_args", {"check_same_thread": False})
    return create_async_engine(url, future=True, echo=False, **kw)

def make_sessionmaker(eng: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(eng, expire_on_commit=False)

async def init_models(eng: AsyncEngine) -> None:
    # ensure every table is registered on Base.metadata
    import app.models.submission  # noqa: F401
    import app.models.custody  # noqa: F401
    import app.models.notification  # noqa: F401
    import app.models.wallet  # noqa: F401
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

engine = make_engine(settings.database_url)
SessionLocal = make_sessionmaker(engine)
