"""Logging configuration."""
import logging
import sys

from app.core.config import settings


def setup_logging(level: str = None) -> None:
    """Configura el logging de la aplicación (API y workers)."""
    logging.basicConfig(
        level=level or settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
