"""Logging configuration for the finance tracker data layer."""

import logging
import logging.handlers
import os
import platform
import sys
from pathlib import Path

from fintracker.core.config import settings

APP_NAME = "fintracker"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_default_log_dir(app_name: str = APP_NAME) -> Path:
    """Per-user log directory for ``app_name``, or the system one when running as root."""
    system = platform.system().lower()
    home = Path.home()

    if system == "linux" and os.geteuid() == 0:
        return Path("/var/log") / app_name

    platform_dirs = {
        "darwin": home / "Library" / "Logs" / app_name,
        "linux": home / ".local" / "state" / app_name / "logs",
        "windows": home / "AppData" / "Local" / app_name / "logs",
    }
    return platform_dirs.get(system, home / f".{app_name}" / "logs")


def setup_logging(log_dir: Path | None = None, log_to_file: bool = True) -> None:
    """Configure logging for the application."""
    log_level = settings.LOG_LEVEL.upper()

    valid_levels = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    effective_level = valid_levels.get(log_level, logging.INFO)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(effective_level)

    formatter = logging.Formatter(LOG_FORMAT)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(effective_level)
    stderr_handler.setFormatter(formatter)
    root_logger.addHandler(stderr_handler)

    log_file = None
    if log_to_file:
        log_path = log_dir or get_default_log_dir()
        log_path.mkdir(parents=True, exist_ok=True)
        log_file = log_path / f"{APP_NAME}.log"

        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=10_000_000, backupCount=5, encoding="utf-8"
        )
        file_handler.setLevel(effective_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    logger.setLevel(effective_level)
    logger.propagate = True

    if log_file is not None:
        logger.info(f"Log File: {log_file}")
    logger.info(f"Log Level: {log_level}")


# Export the logger for use in other modules
logger = logging.getLogger(APP_NAME)
