import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient

from app.db import make_engine, make_sessionmaker, init_models
from app.deps import get_ledger
from app.main import app
from app.security import make_access_token
from app.services.ledger import BountyLedger
from app.services.wallet import WalletTransferGateway

GUARD = "guard"
ALICE = "alice"
BOB = "bob"
FROZEN = "frozen"


@pytest_asyncio.fixture
async def engine():
    eng = make_engine("sqlite+aiosqlite:///:memory:")
    await init_models(eng)
    yield eng
    await eng.dispose()


@pytest_asyncio.fixture
async def uninitialized_ledger(engine):
    return BountyLedger(make_sessionmaker(engine), gateway=WalletTransferGateway(frozen=[FROZEN]))


@pytest_asyncio.fixture
async def ledger(uninitialized_ledger):
    await uninitialized_ledger.initialize(GUARD)
    return uninitialized_ledger


@pytest_asyncio.fixture
async def client(ledger):
    app.dependency_overrides[get_ledger] = lambda: ledger
    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_ledger, None)


def auth(identity: str, value: int | None = None) -> dict:
    hdrs = {"Authorization": f"Bearer {make_access_token(identity)}"}
    if value is not None:
        hdrs["X-Value"] = str(value)
    return hdrs
