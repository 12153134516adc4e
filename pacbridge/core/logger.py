# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
Logging setup for pacbridge.

Components log through ``logging.getLogger("pacbridge.<component>")``.
configure_logging() wires the shared ``pacbridge`` logger to the console and
to a rotating log file.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

ROOT_LOGGER = "pacbridge"

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _parse_level(level: str) -> int:
    """Convert string level to logging constant"""
    return LEVELS.get(level.upper(), logging.WARNING)


def configure_logging(
    level: str = "WARNING",
    log_dir: Optional[Path] = None,
    file_output: bool = True,
) -> logging.Logger:
    """
    Attach console and file handlers to the pacbridge logger.

    Args:
        level: Console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for pacbridge.log (default ~/.pacbridge/logs)
        file_output: Write the rotating log file

    Returns:
        The configured ``pacbridge`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()
    logger.setLevel(logging.DEBUG)

    console_formatter = logging.Formatter(
        fmt="[%(asctime)s] [%(name)s:%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_formatter = logging.Formatter(
        fmt="%(asctime)s | %(name)s | %(levelname)s | %(filename)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(console_formatter)
    console_handler.setLevel(_parse_level(level))
    logger.addHandler(console_handler)

    if file_output:
        if log_dir is None:
            log_dir = Path.home() / ".pacbridge" / "logs"

        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            # Rotate after 10MB, keep 5 backup files
            file_handler = RotatingFileHandler(
                log_dir / "pacbridge.log",
                maxBytes=10 * 1024 * 1024,
                backupCount=5,
                encoding="utf-8",
            )
        except OSError as e:
            logger.warning(f"File logging disabled: {e}")
        else:
            file_handler.setFormatter(file_formatter)
            file_handler.setLevel(logging.DEBUG)
            logger.addHandler(file_handler)

    return logger
