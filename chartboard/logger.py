"""
Logging: one place to configure the dashboard's log output.

Usage:
    from chartboard.logger import get_logger

    logger = get_logger(__name__)
    logger.info("Parsed %d rows", len(df))
    logger.warning("Chart %s skipped: %s", chart_id, err)
"""
import logging
import sys

_configured = False


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging. Call once from app.py; later calls are no-ops."""
    global _configured
    if _configured:
        return

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    _configured = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
