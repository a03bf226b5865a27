"""
Visit notification: tells the site owner someone opened the page.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set

import aiohttp

from app.core.config import settings
from app.core.logger_config import setup_logger

logger = setup_logger(__name__)

# Keep references so pending notifications are not garbage collected
_pending: Set[asyncio.Task] = set()


async def send_visit_notification(meta: Dict[str, Any], webhook_url: Optional[str] = None) -> bool:
    url = webhook_url if webhook_url is not None else settings.NOTIFY_WEBHOOK_URL
    if not url:
        return False

    payload = {
        "event": "visit",
        "time": datetime.now(timezone.utc).isoformat(),
        **meta,
    }
    try:
        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=10)) as session:
            async with session.post(url, json=payload) as response:
                if response.status >= 400:
                    error_text = await response.text()
                    logger.warning(f"Visit notification rejected: {response.status} - {error_text[:200]}")
                    return False
        logger.debug("Visit notification sent")
        return True
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.warning(f"Visit notification failed: {e}")
        return False


def notify_visit(meta: Dict[str, Any]) -> Optional[asyncio.Task]:
    """Fire-and-forget notification; returns the task, or None when disabled."""
    if not settings.NOTIFY_WEBHOOK_URL:
        return None
    task = asyncio.create_task(send_visit_notification(meta))
    _pending.add(task)
    task.add_done_callback(_pending.discard)
    return task
