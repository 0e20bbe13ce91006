"""
Centralized logging configuration for the Delegate orchestrator.

Call setup_logging() once at application startup (from the FastAPI
lifespan handler).  Every source module then gets its own logger via:

    import logging
    logger = logging.getLogger(__name__)

Level mapping:
  DEBUG   – cooldown skips, timeline refreshes, prompt text
  INFO    – campaign start/stop, phase transitions, conclusions, actions
  WARNING – generator fallbacks, voice failures, rejected saves
  ERROR   – crashed cycles, persistence exceptions
"""

import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """Configure root logger and quiet noisy third-party loggers."""
    fmt = "%(asctime)s [%(name)s] %(levelname)s %(message)s"
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=fmt,
        stream=sys.stdout,
        force=True,
    )

    # Quiet noisy third-party loggers
    for name in (
        "httpx",
        "httpcore",
        "uvicorn.access",
        "sqlalchemy.engine",
    ):
        logging.getLogger(name).setLevel(logging.WARNING)
