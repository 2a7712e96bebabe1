"""Logging setup for the task board client."""
from __future__ import annotations

import logging
from typing import Union

LOGGER_NAME = "taskboard"


def setup_logging(log_level: Union[str, int] = logging.INFO) -> logging.Logger:
    """Attach a single console handler to the ``taskboard`` logger.

    Safe to call on every Streamlit rerun; existing handlers are replaced.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(log_level)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)
    logger.propagate = False
    return logger
