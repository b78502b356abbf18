"""
Palette Service Structured Logging
Loguru sink setup and per-request log context.

Every record carries ``request_id`` in its extra dict. Inside
``request_context`` it is the current request's id, also for records emitted
from worker threads started with ``asyncio.to_thread``; outside it is ``-``.
"""
import sys
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from loguru import logger

from app.config import config

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {extra[request_id]} | {message} | {extra}"

_configured = False


def configure_logging(level: Optional[str] = None, serialize: Optional[bool] = None) -> None:
    """Replace loguru's default handler with the service's stdout sink."""
    global _configured
    logger.remove()
    logger.configure(extra={"request_id": "-"})
    logger.add(
        sys.stdout,
        format=LOG_FORMAT,
        level=level or config.LOG_LEVEL,
        serialize=config.LOG_JSON if serialize is None else serialize
    )
    _configured = True


def get_logger(**fields: Any):
    """
    Get the service logger, configuring the sink on first use.

    Keyword arguments are bound into the extra dict of every record logged
    through the returned logger.
    """
    if not _configured:
        configure_logging()
    return logger.bind(**fields) if fields else logger


@contextmanager
def request_context(request_id: str, **fields: Any) -> Iterator[None]:
    """Attach ``request_id`` and ``fields`` to all records logged inside the block."""
    with logger.contextualize(request_id=request_id, **fields):
        yield
