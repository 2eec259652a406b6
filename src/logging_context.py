"""Session ID logging context for tracing a conversation across modules.

Provides a session-aware logger that attaches the current session key to
every log record, making it easy to follow one customer's turns through
the dialogue engine and the backend gateway.

Usage:
    from src.logging_context import get_session_logger, session_scope

    logger = get_session_logger(__name__)
    with session_scope("web-42"):
        logger.info("Processing turn")  # record.session_id == "web-42"
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

_session_id: ContextVar[str] = ContextVar("session_id", default="NO_SESSION")


def get_session_id() -> str:
    """Retrieve the current session key."""
    return _session_id.get()


@contextmanager
def session_scope(session_id: str) -> Iterator[None]:
    """Bind ``session_id`` for the duration of a block, restoring the previous value."""
    token = _session_id.set(session_id)
    try:
        yield
    finally:
        _session_id.reset(token)


class SessionIdFilter(logging.Filter):
    """Injects session_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = _session_id.get()  # type: ignore[attr-defined]
        return True


def get_session_logger(name: str) -> logging.Logger:
    """Return a logger with the SessionIdFilter attached.

    The filter adds ``session_id`` to each record so formatters can
    include ``%(session_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, SessionIdFilter) for f in logger.filters):
        logger.addFilter(SessionIdFilter())
    return logger
