"""
Palette Service Reliability & Cancellation
Runs extractions off the event loop, applies optional timeouts and lets a
newer request for the same session supersede a stale in-flight one.

Extraction failures are deterministic for a given input, so nothing here
retries or substitutes a fallback palette.
"""
import asyncio
from contextlib import asynccontextmanager
from typing import Any, Callable, Dict, Optional

from app.config import config
from app.utils.logging import get_logger


class OperationTimeoutError(Exception):
    """An operation exceeded its configured timeout."""

    error_type = "timeout"


class RequestSupersededError(Exception):
    """A newer request for the same session replaced this one."""

    error_type = "superseded"


class TimeoutManager:
    """Manages timeouts for different operations."""

    def __init__(self, timeouts: Optional[Dict[str, float]] = None):
        # Seconds; None or 0 disables the timeout
        self.timeouts: Dict[str, Optional[float]] = {
            "extraction": config.TIMEOUT_EXTRACTION / 1000 or None,
        }
        if timeouts:
            self.timeouts.update(timeouts)

    @asynccontextmanager
    async def timeout(self, operation: str, custom_timeout: Optional[float] = None):
        """Context manager for timeout handling."""
        timeout_value = custom_timeout or self.timeouts.get(operation) or None

        try:
            async with asyncio.timeout(timeout_value):
                yield
        except TimeoutError:
            get_logger().error(f"Timeout in {operation} after {timeout_value}s")
            raise OperationTimeoutError(f"Operation {operation} timed out after {timeout_value}s")


class SupersedingRunner:
    """
    Runs blocking work in a thread, one in-flight run per key.

    Submitting a new run for a key cancels the wait of the previous run for
    that key, which then raises ``RequestSupersededError``. The superseded
    worker thread finishes in the background and its result is discarded;
    runs never share intermediate data, so this cannot corrupt the newer one.
    """

    def __init__(self):
        self._inflight: Dict[str, asyncio.Task] = {}

    def in_flight(self, key: str) -> bool:
        """Whether a run for ``key`` is still pending."""
        task = self._inflight.get(key)
        return task is not None and not task.done()

    async def run(self, key: Optional[str], func: Callable[..., Any], *args, **kwargs) -> Any:
        """
        Execute ``func(*args, **kwargs)`` in a worker thread.

        Args:
            key: Session key; None runs without superseding
            func: Blocking callable

        Raises:
            RequestSupersededError: If a newer run for the same key started first
        """
        if key is None:
            return await asyncio.to_thread(func, *args, **kwargs)

        previous = self._inflight.get(key)
        if previous is not None and not previous.done():
            get_logger(superseded_session=key).info("Superseding in-flight request")
            previous.cancel()

        task = asyncio.ensure_future(asyncio.to_thread(func, *args, **kwargs))
        self._inflight[key] = task

        try:
            return await task
        except asyncio.CancelledError:
            if self._inflight.get(key) is not task:
                raise RequestSupersededError("Superseded by a newer request for this session")
            raise
        finally:
            if self._inflight.get(key) is task:
                del self._inflight[key]


# Global instances
timeout_manager = TimeoutManager()
superseding_runner = SupersedingRunner()
