"""
Order support assistant entry point.

Serves the chat API over HTTP, or runs the offline console demo for
development.

Usage:
    HTTP server:  python main.py serve
    Console mode: python main.py console
"""

import logging
import sys

from src.config import settings

logger = logging.getLogger(__name__)


def _run_server() -> None:
    """Start the FastAPI chat endpoint under uvicorn."""
    import uvicorn

    logger.info(
        "Chat server starting on %s:%d (backend: %s)",
        settings.server.host, settings.server.port, settings.backend.base_url,
    )
    uvicorn.run(
        "src.api:app",
        host=settings.server.host,
        port=settings.server.port,
        log_level=settings.log_level.lower(),
    )


def _run_console_mode() -> None:
    """Start the offline console demo (no backend required)."""
    from console_demo import ConsoleSession

    session = ConsoleSession()
    session.run()


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == "console":
        _run_console_mode()
    else:
        _run_server()
