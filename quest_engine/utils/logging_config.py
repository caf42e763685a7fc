"""
Logging configuration for quest_engine.

Every module logs through ``logging.getLogger(__name__)``, so all records
land under the ``quest_engine`` logger configured here.  The runners call
``ensure_logging`` with their ``EngineConfig``; an application that has
already installed handlers keeps them.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from quest_engine.config import DEFAULT_CONFIG, EngineConfig

ROOT_LOGGER = "quest_engine"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    (Re)configure the ``quest_engine`` logger, replacing existing handlers.

    Args:
        level: Logging level for the logger and every handler.
        log_file: Optional file that receives a copy of every record.
        format_string: Optional format, ``DEFAULT_FORMAT`` otherwise.

    Returns:
        The ``quest_engine`` logger.
    """
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def ensure_logging(config: EngineConfig = DEFAULT_CONFIG) -> logging.Logger:
    """Apply ``config.log_level`` / ``config.log_file`` unless handlers are already installed."""
    logger = logging.getLogger(ROOT_LOGGER)
    if not logger.handlers:
        setup_logging(config.log_level, log_file=config.log_file)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a sub-component, e.g. ``get_logger("runner")``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
