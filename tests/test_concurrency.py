import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from app.core.concurrency import (
    ConcurrencyMonitor,
    LLM_SEMAPHORE,
    widget_guard,
    with_concurrency_limit,
)
from app.exceptions import WidgetBusyError
from app.services.notification_service import notify_visit, send_visit_notification
from app.services.session_store import SessionStore


@pytest.mark.asyncio
async def test_widget_guard_marks_and_releases():
    busy = set()

    async with widget_guard(busy, "hero"):
        assert "hero" in busy

    assert busy == set()


@pytest.mark.asyncio
async def test_widget_guard_rejects_overlap():
    busy = set()
    started = asyncio.Event()
    release = asyncio.Event()

    async def first():
        async with widget_guard(busy, "companion"):
            started.set()
            await release.wait()

    task = asyncio.create_task(first())
    await started.wait()

    with pytest.raises(WidgetBusyError):
        async with widget_guard(busy, "companion"):
            pass

    # Other widgets are independent
    async with widget_guard(busy, "speech"):
        pass

    release.set()
    await task
    assert busy == set()


@pytest.mark.asyncio
async def test_widget_guard_releases_on_error():
    busy = set()

    with pytest.raises(RuntimeError):
        async with widget_guard(busy, "hero"):
            raise RuntimeError("provider failed")

    assert busy == set()


@pytest.mark.asyncio
async def test_concurrency_limit_records_operations():
    async with with_concurrency_limit(LLM_SEMAPHORE, "unit_test_op"):
        pass

    from app.core.concurrency import concurrency_monitor
    stats = concurrency_monitor.get_stats()
    assert stats["total"]["unit_test_op"] >= 1
    assert stats["active"]["unit_test_op"] == 0


@pytest.mark.asyncio
async def test_monitor_counts():
    monitor = ConcurrencyMonitor()
    await monitor.start_operation("speech")
    await monitor.start_operation("speech")
    await monitor.end_operation("speech")

    assert monitor.get_stats()["active"] == {"speech": 1}
    assert monitor.get_stats()["total"] == {"speech": 2}


def test_session_store_reuses_sessions(story):
    store = SessionStore()

    created = store.get_or_create(None, story)
    again = store.get_or_create(created.session_id, story)

    assert again is created
    assert len(store) == 1
    assert created.messages[0].role == "model"
    store.discard(created.session_id)
    assert store.get(created.session_id) is None


def test_session_store_evicts_idle_sessions(story):
    store = SessionStore(ttl_seconds=60)

    idle = store.get_or_create(None, story)
    idle.last_seen -= 120
    busy = store.get_or_create(None, story)
    busy.last_seen -= 120
    busy.busy.add("hero")

    fresh = store.get_or_create(None, story)

    assert store.get(idle.session_id) is None
    assert store.get(busy.session_id) is busy
    assert store.get(fresh.session_id) is fresh
    assert len(store) == 2


def test_expired_session_id_starts_over(story):
    store = SessionStore(ttl_seconds=60)
    session = store.get_or_create("visitor01", story)
    session.notes.append(object())
    session.last_seen -= 120

    again = store.get_or_create("visitor01", story)

    assert again is not session
    assert again.notes == []
    assert len(store) == 1



@pytest.mark.asyncio
async def test_visit_notification_disabled_without_webhook():
    assert await send_visit_notification({"path": "/"}, webhook_url="") is False
    assert notify_visit({"path": "/"}) is None


@pytest.mark.asyncio
@patch('app.services.notification_service.aiohttp.ClientSession')
async def test_visit_notification_posts_payload(mock_session_cls):
    mock_response = AsyncMock()
    mock_response.status = 204
    mock_response.__aenter__.return_value = mock_response
    mock_response.__aexit__ = AsyncMock(return_value=None)
    mock_session = mock_session_cls.return_value.__aenter__.return_value
    mock_session.post = MagicMock(return_value=mock_response)

    sent = await send_visit_notification({"path": "/"}, webhook_url="https://hooks.example.com/visit")

    assert sent is True
    payload = mock_session.post.call_args.kwargs["json"]
    assert payload["event"] == "visit"
    assert payload["path"] == "/"
