"""HTTP surface tests: routers wired to SQLite, fakeredis and mocked providers."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio

from config.settings import Settings
from src.api.app import create_app
from src.parsers.bitquery.exceptions import BitqueryApiError
from src.parsers.bitquery.models import GraduatedToken
from src.parsers.rugcheck.models import RugcheckReport
from src.pipeline.persistence import get_active_monitors, insert_candidate_if_absent


@pytest_asyncio.fixture
async def app(db_engine, session_factory, redis):
    cfg = Settings(production_url="app.test", refresh_dispatch_rps=15)
    application = create_app(cfg)
    # ASGITransport skips the lifespan, so wire test handles directly
    application.state.engine = db_engine
    application.state.session_factory = session_factory
    application.state.redis = redis
    application.state.qstash = AsyncMock()
    application.state.qstash.publish = AsyncMock(return_value="msg")
    application.state.bitquery = AsyncMock()
    application.state.rugcheck = AsyncMock()
    application.state.moralis = AsyncMock()
    return application


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


# ── Schedule ───────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_fetch_empty_queue_is_204(client):
    resp = await client.get("/api/v1/schedule/fetch")
    assert resp.status_code == 204
    assert resp.content == b""


@pytest.mark.asyncio
async def test_fetch_rotates_one_and_dispatches(client, app, redis):
    await redis.rpush("tweet:queue", "user1", "user2")

    resp = await client.get("/api/v1/schedule/fetch")

    assert resp.status_code == 200
    assert resp.json() == {"enqueued": "user2"}
    assert await redis.lrange("tweet:queue", 0, -1) == ["user2", "user1"]
    job = app.state.qstash.publish.await_args.args[0]
    assert job.url == "https://app.test/api/fetchTweets"
    assert job.body == {"userId": "user2"}
    assert job.not_before is None


@pytest.mark.asyncio
async def test_refresh_dispatches_staggered_batch(client, app, redis):
    addresses = [f"Mint{i:03d}" for i in range(20)]
    await redis.rpush("refresh-token:queue", *addresses)

    resp = await client.get("/api/v1/schedule/refresh-token")

    assert resp.status_code == 200
    enqueued = resp.json()["enqueued"]
    assert sorted(enqueued) == sorted(addresses)
    jobs = [c.args[0] for c in app.state.qstash.publish.await_args_list]
    assert len(jobs) == 20
    assert jobs[0].url == "https://app.test/api/refresh-token"
    assert jobs[14].not_before == jobs[0].not_before
    assert jobs[15].not_before == jobs[0].not_before + timedelta(seconds=1)
    assert await redis.llen("refresh-token:queue") == 20


@pytest.mark.asyncio
async def test_refresh_survives_rejected_publish(client, app, redis):
    await redis.rpush("refresh-token:queue", "A", "B")
    app.state.qstash.publish = AsyncMock(side_effect=[RuntimeError("rejected"), "msg"])

    resp = await client.get("/api/v1/schedule/refresh-token")

    assert resp.status_code == 200
    assert resp.json() == {"enqueued": ["B", "A"]}


@pytest.mark.asyncio
async def test_schedule_redis_down_is_500(client, app):
    broken = AsyncMock()
    broken.llen = AsyncMock(side_effect=ConnectionError("redis unreachable"))
    app.state.redis = broken

    resp = await client.get("/api/v1/schedule/fetch")

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Failed to rotate queue"}


# ── Pipeline ───────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_pump_tokens(client, app):
    app.state.bitquery.get_recently_graduated_tokens = AsyncMock(return_value=[
        GraduatedToken(success=True, pump_token="T1pump", creation_time="2026-01-01T00:00:00Z"),
        GraduatedToken(success=False, pump_token="T2pump", creation_time="2026-01-01T00:00:00Z"),
    ])

    resp = await client.get("/api/v1/pipeline/pump-tokens")

    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "processed": 1,
        "results": [{"tokenAddress": "T1pump", "success": True}],
    }
    app.state.bitquery.get_recently_graduated_tokens.assert_awaited_once_with(20)


@pytest.mark.asyncio
async def test_pump_tokens_provider_failure_is_500(client, app):
    app.state.bitquery.get_recently_graduated_tokens = AsyncMock(
        side_effect=BitqueryApiError("HTTP 503")
    )
    resp = await client.get("/api/v1/pipeline/pump-tokens")
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Failed to fetch pump tokens"}


@pytest.mark.asyncio
async def test_check_tokens_and_latest_score(client, app, db_session):
    now = datetime.now(UTC)
    await insert_candidate_if_absent(db_session, address="Old", creation_time=now - timedelta(hours=2))
    await insert_candidate_if_absent(db_session, address="New", creation_time=now)
    await db_session.commit()
    app.state.rugcheck.get_token_report = AsyncMock(
        return_value=RugcheckReport(score_normalised=33.3)
    )

    missing = await client.get("/api/v1/pipeline/scores/Old")
    resp = await client.get("/api/v1/pipeline/check-tokens")
    latest = await client.get("/api/v1/pipeline/scores/Old")

    assert missing.status_code == 404
    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "processed": 1,
        "results": [{"tokenAddress": "Old", "score": 33, "success": True}],
    }
    assert latest.status_code == 200
    assert latest.json()["score"] == 33


@pytest.mark.asyncio
async def test_toggle(client):
    resp = await client.post(
        "/api/v1/pipeline/toggle", json={"tokenAddress": "Mint111", "isMonitoring": True}
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["monitor"]["tokenAddress"] == "Mint111"
    assert body["monitor"]["isMonitoring"] is True


@pytest.mark.asyncio
async def test_toggle_without_address_is_400(client):
    resp = await client.post("/api/v1/pipeline/toggle", json={"isMonitoring": True})
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Token address is required"}


@pytest.mark.asyncio
async def test_monitor_check(client, app):
    await client.post(
        "/api/v1/pipeline/toggle", json={"tokenAddress": "Mint111", "isMonitoring": True}
    )
    app.state.moralis.get_swaps_by_token_address = AsyncMock(return_value=[])

    resp = await client.get("/api/v1/pipeline/check")

    assert resp.status_code == 200
    assert resp.json()["results"] == [
        {"tokenAddress": "Mint111", "swapsProcessed": 0, "success": True}
    ]


def _break_store(app) -> None:
    """Sessions open fine but every statement fails."""
    session = AsyncMock()
    session.execute = AsyncMock(side_effect=ConnectionError("db unreachable"))
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = session
    app.state.session_factory = factory


@pytest.mark.asyncio
async def test_toggle_without_flag_is_400_and_keeps_monitor(client, session_factory):
    await client.post(
        "/api/v1/pipeline/toggle", json={"tokenAddress": "M1", "isMonitoring": True}
    )

    resp = await client.post("/api/v1/pipeline/toggle", json={"tokenAddress": "M1"})

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Invalid request body"}
    async with session_factory() as session:
        monitors = await get_active_monitors(session)
    assert [m.token_address for m in monitors] == ["M1"]


@pytest.mark.asyncio
async def test_toggle_non_string_address_is_400(client):
    resp = await client.post(
        "/api/v1/pipeline/toggle", json={"tokenAddress": 123, "isMonitoring": True}
    )
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Invalid request body"}


@pytest.mark.asyncio
async def test_toggle_non_json_body_is_400(client):
    resp = await client.post(
        "/api/v1/pipeline/toggle",
        content=b"tokenAddress=M1",
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Invalid request body"}


@pytest.mark.asyncio
async def test_check_tokens_store_down_is_500(client, app):
    _break_store(app)
    resp = await client.get("/api/v1/pipeline/check-tokens")
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Failed to check tokens"}


@pytest.mark.asyncio
async def test_toggle_store_error_is_500(client, app):
    _break_store(app)
    resp = await client.post(
        "/api/v1/pipeline/toggle", json={"tokenAddress": "M1", "isMonitoring": True}
    )
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Failed to toggle monitoring"}


@pytest.mark.asyncio
async def test_monitor_check_store_down_is_500(client, app):
    _break_store(app)
    resp = await client.get("/api/v1/pipeline/check")
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Failed to check monitors"}


@pytest.mark.asyncio
async def test_refresh_bad_rps_config_is_structured_500(client, app, redis):
    app.state.settings = Settings(production_url="app.test", refresh_dispatch_rps=0)
    await redis.rpush("refresh-token:queue", "A")

    resp = await client.get("/api/v1/schedule/refresh-token")

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Failed to dispatch jobs"}
    app.state.qstash.publish.assert_not_awaited()


# ── Health ─────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "version": "0.1.0", "db_ok": True, "redis_ok": True}
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
