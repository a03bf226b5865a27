"""
Concurrency control for the Moses story companion.

Process-wide semaphores bound the number of outstanding provider calls, and
per-session widget guards make sure a visitor never has two requests in
flight for the same widget (chat, read-aloud, scene visualization).
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Dict, Any, AsyncIterator
from app.core.config import settings
from app.core.logger_config import setup_logger
from app.exceptions import WidgetBusyError

logger = setup_logger(__name__)

LLM_SEMAPHORE = asyncio.Semaphore(settings.MAX_CONCURRENT_LLM_CALLS)
# Video jobs hold a slot for minutes; speech gets its own pool
SPEECH_SEMAPHORE = asyncio.Semaphore(settings.MAX_CONCURRENT_SPEECH_CALLS)
VIDEO_SEMAPHORE = asyncio.Semaphore(settings.MAX_CONCURRENT_VIDEO_CALLS)

COMPANION_WIDGET = "companion"
SPEECH_WIDGET = "speech"
HERO_WIDGET = "hero"


@asynccontextmanager
async def with_concurrency_limit(semaphore: asyncio.Semaphore, operation_name: str = "operation") -> AsyncIterator[None]:
    """
    Context manager for applying concurrency limits.

    Usage:
        async with with_concurrency_limit(LLM_SEMAPHORE, "companion_reply"):
            result = await generate_reply()
    """
    logger.debug(f"Acquiring semaphore for {operation_name}")
    await concurrency_monitor.start_operation(operation_name)
    try:
        async with semaphore:
            logger.debug(f"Semaphore acquired for {operation_name}")
            yield
    finally:
        await concurrency_monitor.end_operation(operation_name)
        logger.debug(f"Released semaphore for {operation_name}")


@asynccontextmanager
async def widget_guard(busy: set, widget: str) -> AsyncIterator[None]:
    """
    Mark ``widget`` busy in the session's ``busy`` set for the duration of the block.

    Raises WidgetBusyError when the widget is already busy. The check and the
    mark happen without an intervening await, so the event loop cannot
    interleave two requests between them.
    """
    if widget in busy:
        logger.info(f"Rejected overlapping {widget} request")
        raise WidgetBusyError(widget)
    busy.add(widget)
    try:
        yield
    finally:
        busy.discard(widget)


class ConcurrencyMonitor:
    """Monitor concurrent operations for metrics and debugging."""

    def __init__(self):
        self.active_operations: Dict[str, int] = {}
        self.total_operations: Dict[str, int] = {}
        self._lock = asyncio.Lock()

    async def start_operation(self, operation_type: str):
        """Record the start of an operation."""
        async with self._lock:
            self.active_operations[operation_type] = self.active_operations.get(operation_type, 0) + 1
            self.total_operations[operation_type] = self.total_operations.get(operation_type, 0) + 1
            logger.debug(f"Started {operation_type}. Active: {self.active_operations[operation_type]}")

    async def end_operation(self, operation_type: str):
        """Record the end of an operation."""
        async with self._lock:
            if operation_type in self.active_operations:
                self.active_operations[operation_type] -= 1
                logger.debug(f"Ended {operation_type}. Active: {self.active_operations[operation_type]}")

    def get_stats(self) -> Dict[str, Any]:
        """Get current concurrency statistics."""
        return {
            "active": dict(self.active_operations),
            "total": dict(self.total_operations),
            "limits": {
                "llm_calls": settings.MAX_CONCURRENT_LLM_CALLS,
                "speech_calls": settings.MAX_CONCURRENT_SPEECH_CALLS,
                "video_calls": settings.MAX_CONCURRENT_VIDEO_CALLS,
            }
        }


# Global monitor instance
concurrency_monitor = ConcurrencyMonitor()
