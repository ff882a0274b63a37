import logging

from fortivus.core.config import settings


def setup_logging() -> logging.Logger:
    """
    Configure the root logger from LOG_LEVEL.
    Unknown level names fall back to INFO.
    """
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    return logging.getLogger("fortivus")
