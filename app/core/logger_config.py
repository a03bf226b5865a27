"""
Logging configuration for the Moses story companion.

This module sets up logging for the application with console output and a
best-effort daily log file.
"""

import logging
import sys
import os
from datetime import datetime
from typing import Optional
from app.core.config import settings


def setup_logger(
    name: str = "companion",
    level: Optional[str] = None,
    format_string: Optional[str] = None
) -> logging.Logger:
    """
    Set up and configure a logger instance with both console and (best-effort) file output.
    Falls back to console-only when file handlers cannot be created (e.g., read-only FS).
    """
    if level is None:
        level = "DEBUG" if settings.DEBUG else "INFO"

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Avoid adding multiple handlers to the same logger
    if logger.handlers:
        return logger

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, level.upper()))

    if format_string is None:
        format_string = (
            "%(asctime)s - %(name)s - %(levelname)s - "
            "%(funcName)s:%(lineno)d - %(message)s"
        )
    formatter = logging.Formatter(format_string)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    try:
        logs_dir = "logs"
        os.makedirs(logs_dir, exist_ok=True)

        today = datetime.now().strftime("%Y-%m-%d")
        log_file = os.path.join(logs_dir, f"companion_{today}.log")
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(getattr(logging, level.upper()))
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    except OSError:
        # Read-only filesystem: console logging only
        pass

    return logger

