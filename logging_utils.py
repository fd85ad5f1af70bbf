"""Logging setup shared by the API and the store."""
import logging
from typing import Optional, Union


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """Configure basic logging if not already configured."""

    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
    else:
        logging.getLogger().setLevel(level)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a named logger; handlers come from setup_logging."""

    return logging.getLogger(name)
