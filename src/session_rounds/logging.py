"""Logging configuration for session-rounds.

Provides centralized logging setup with optional file output to
~/.session-rounds/logs/.
"""

import logging
import sys
from pathlib import Path

# Default log directory
DEFAULT_LOG_DIR = Path.home() / ".session-rounds" / "logs"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    name: str,
    log_dir: Path | None = None,
    level: int | str = logging.INFO,
    console: bool = True,
    log_to_file: bool = True,
) -> logging.Logger:
    """Configure logging for a session-rounds component.

    Handlers are attached to the package root logger so that engine
    modules (which log through get_logger()) share them. Log files are
    written to <log_dir>/<name>.log.

    Args:
        name: Component name (used for log filename)
        log_dir: Directory for log files (defaults to ~/.session-rounds/logs/)
        level: Logging level, as a number or a name such as "DEBUG"
        console: Whether to also log to stderr (defaults to True)
        log_to_file: Whether to write a log file (defaults to True)

    Returns:
        Configured logger for the component
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level}")

    root = logging.getLogger("session_rounds")
    root.setLevel(level)

    logger = logging.getLogger(f"session_rounds.{name}")

    # Avoid adding duplicate handlers if already configured
    if root.handlers:
        return logger

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    if log_to_file:
        if log_dir is None:
            log_dir = DEFAULT_LOG_DIR
        log_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_dir / f"{name}.log", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a session-rounds component.

    For file output, call setup_logging() once at program start.

    Args:
        name: Logger name (will be prefixed with 'session_rounds.')

    Returns:
        Logger instance
    """
    return logging.getLogger(f"session_rounds.{name}")
