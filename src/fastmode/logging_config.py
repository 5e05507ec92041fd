"""Centralized logging configuration for fastmode."""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

ROOT_LOGGER = "fastmode"


def setup_logging(
    level: Optional[str] = None,
    log_dir: Optional[Path] = None,
    console: bool = True,
) -> logging.Logger:
    """
    Set up logging for the fastmode package with console and file handlers.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to env var or WARNING.
        log_dir: Directory for the rotating log file. No file handler when None.
        console: Whether to attach a stderr console handler.

    Returns:
        The configured package logger
    """
    level = level or os.getenv("FASTMODE_LOG_LEVEL") or os.getenv("LOG_LEVEL", "WARNING")
    log_level = getattr(logging, level.upper(), logging.WARNING)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    detailed_formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    simple_formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )

    if console:
        # stdout is reserved for orchestration output
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(simple_formatter)
        logger.addHandler(console_handler)

    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_path / f"{ROOT_LOGGER}.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)  # File gets all logs
        file_handler.setFormatter(detailed_formatter)
        logger.addHandler(file_handler)
        # File handler wants DEBUG records; console handler keeps its own level
        logger.setLevel(logging.DEBUG)

    logger.propagate = False
    return logger
