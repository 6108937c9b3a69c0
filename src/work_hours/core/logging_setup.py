"""Logging setup shared by the CLI and the API server."""

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_handler: Optional[logging.Handler] = None


def default_log_file(data_dir: Path) -> Path:
    """Log file location next to the data directory."""
    return data_dir.parent / "logs" / "work-hours.log"


def configure_logging(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """Route ``work_hours`` loggers to a log file.

    Calling this again replaces the handler installed by the previous call,
    so repeated CLI invocations in one process don't duplicate records.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR)
        log_file: File to write to. Logging stays unconfigured if None
    """
    global _handler

    package_logger = logging.getLogger("work_hours")
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if _handler is not None:
        package_logger.removeHandler(_handler)
        _handler.close()
        _handler = None

    if log_file is None:
        return

    log_file.parent.mkdir(parents=True, exist_ok=True)
    _handler = logging.FileHandler(log_file, encoding="utf-8")
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(_handler)
