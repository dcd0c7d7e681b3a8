"""
Logging configuration for the Leave Entitlement Engine
"""
import logging
import sys
from typing import Optional

from leave_engine.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure stdout logging for the API and the maintenance scripts.

    Args:
        level: overrides settings.LOG_LEVEL (scripts pass DEBUG for --verbose)

    At DEBUG the per-balance and per-store lines from the services are shown.
    SQLAlchemy engine and pool loggers stay at WARNING.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    # Pool churn from tenant engines being opened and evicted
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
    logging.getLogger("leave_engine").setLevel(log_level)

    logging.getLogger(__name__).info(
        "Logging configured: level=%s, env=%s", level_name, settings.APP_ENV
    )
