import pytest
from conftest import GUARD, ALICE, BOB, auth
from app.db import IDENTITY_LENGTH


@pytest.mark.asyncio
async def test_submit_and_read_back(client):
    r = await client.post("/submissions", headers=auth(ALICE), json={"repo_link": "github.com/a/b", "description": "x"})
    assert r.status_code == 201, r.text
    assert r.json() == {"id": 0}

    r = await client.get("/submissions/0")
    assert r.status_code == 200
    body = r.json()
    assert body["participant"] == ALICE
    assert body["repo_link"] == "github.com/a/b"
    assert body["description"] == "x"
    assert body["is_winner"] is False

    assert (await client.get("/submissions/count")).json() == {"total": 1}
    r = await client.get(f"/participants/{ALICE}/submissions")
    assert r.json() == {"participant": ALICE, "ids": [0]}


@pytest.mark.asyncio
async def test_submit_requires_identity(client):
    r = await client.post("/submissions", json={"repo_link": "github.com/a/b"})
    assert r.status_code == 401
    r = await client.post("/submissions", headers={"Authorization": "Bearer not-a-jwt"}, json={"repo_link": "x"})
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_empty_link_maps_to_400(client):
    r = await client.post("/submissions", headers=auth(ALICE), json={"repo_link": ""})
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_input"


@pytest.mark.asyncio
async def test_missing_submission_maps_to_404(client):
    r = await client.get("/submissions/9")
    assert r.status_code == 404
    assert r.json()["error"] == "not_found"


@pytest.mark.asyncio
async def test_fund_pool_with_attached_value(client):
    r = await client.post("/pool/fund", headers=auth(BOB, value=100))
    assert r.status_code == 200, r.text
    assert r.json() == {"depositor": BOB, "amount": 100, "balance": 100}
    assert (await client.get("/pool")).json() == {"guard": GUARD, "balance": 100}

    r = await client.post("/pool/fund", headers=auth(BOB))
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_value_sent_to_unknown_operation_is_deposited(client):
    r = await client.post("/tip-jar", headers=auth(ALICE, value=5))
    assert r.status_code == 200, r.text
    assert r.json()["balance"] == 5

    r = await client.put("/", headers=auth(ALICE, value=3))
    assert r.status_code == 200
    assert (await client.get("/pool")).json()["balance"] == 8

    r = await client.post("/tip-jar", headers=auth(ALICE))
    assert r.status_code == 404

    kinds = [n["kind"] for n in (await client.get("/notifications")).json()]
    assert kinds == ["Funded", "Funded"]


@pytest.mark.asyncio
async def test_winner_flow_over_http(client):
    await client.post("/submissions", headers=auth(ALICE), json={"repo_link": "github.com/a/b"})
    await client.post("/pool/fund", headers=auth(BOB, value=100))

    r = await client.post("/submissions/0/winner", headers=auth(BOB), json={"reward": 40})
    assert r.status_code == 403
    assert r.json()["error"] == "unauthorized"

    r = await client.post("/submissions/0/winner", headers=auth(GUARD), json={"reward": 400})
    assert r.status_code == 402

    r = await client.post("/submissions/0/winner", headers=auth(GUARD), json={"reward": 40})
    assert r.status_code == 200, r.text
    assert r.json() == {"id": 0, "participant": ALICE, "reward": 40, "balance": 60}

    r = await client.post("/submissions/0/winner", headers=auth(GUARD), json={"reward": 40})
    assert r.status_code == 409
    assert r.json()["error"] == "already_finalized"

    wallet = (await client.get("/wallet", headers=auth(ALICE))).json()
    assert wallet["balance"] == 40
    assert (await client.get("/submissions/0")).json()["is_winner"] is True


@pytest.mark.asyncio
async def test_withdraw_over_http(client):
    await client.post("/pool/fund", headers=auth(BOB, value=10))

    r = await client.post("/pool/withdraw", headers=auth(BOB), json={"amount": 1})
    assert r.status_code == 403

    r = await client.post("/pool/withdraw", headers=auth(GUARD), json={"amount": 4})
    assert r.status_code == 200
    assert r.json() == {"guard": GUARD, "amount": 4, "balance": 6}
    assert (await client.get("/wallet", headers=auth(GUARD))).json()["balance"] == 4


@pytest.mark.asyncio
async def test_notifications_paging(client):
    for k in range(3):
        await client.post("/submissions", headers=auth(ALICE), json={"repo_link": f"github.com/a/{k}"})
    first = (await client.get("/notifications", params={"limit": 2})).json()
    assert [n["payload"]["id"] for n in first] == [0, 1]
    rest = (await client.get("/notifications", params={"after": first[-1]["id"]})).json()
    assert [n["payload"]["id"] for n in rest] == [2]


@pytest.mark.asyncio
async def test_value_attached_to_submit_is_refused(client):
    r = await client.post("/submissions", headers=auth(ALICE, value=50), json={"repo_link": "github.com/a/b"})
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_input"
    assert (await client.get("/pool")).json()["balance"] == 0
    assert (await client.get("/submissions/count")).json() == {"total": 0}


@pytest.mark.asyncio
async def test_value_attached_to_guard_operations_is_refused(client):
    await client.post("/submissions", headers=auth(ALICE), json={"repo_link": "github.com/a/b"})
    await client.post("/pool/fund", headers=auth(BOB, value=100))

    r = await client.post("/submissions/0/winner", headers=auth(GUARD, value=5), json={"reward": 40})
    assert r.status_code == 400
    r = await client.post("/pool/withdraw", headers=auth(GUARD, value=5), json={"amount": 10})
    assert r.status_code == 400

    assert (await client.get("/pool")).json()["balance"] == 100
    assert (await client.get("/submissions/0")).json()["is_winner"] is False


@pytest.mark.asyncio
async def test_value_beyond_integer_range_maps_to_400(client):
    r = await client.post("/pool/fund", headers=auth(BOB, value=2**63))
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_input"
    assert (await client.get("/pool")).json()["balance"] == 0


@pytest.mark.asyncio
async def test_overlong_caller_identity_maps_to_400(client):
    r = await client.post("/submissions", headers=auth("x" * (IDENTITY_LENGTH + 1)), json={"repo_link": "github.com/a/b"})
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_input"
    assert (await client.get("/submissions/count")).json() == {"total": 0}
