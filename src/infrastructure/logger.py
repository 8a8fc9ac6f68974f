"""
Logger Module

Provides a centralized logging system that outputs to both console and file.
"""

import logging
import sys
from pathlib import Path
from typing import Dict, Optional

# Application log file path (relative to project root)
_LOG_FILE_NAME = "app.log"

_FORMATTER = logging.Formatter(
    fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)

# Loggers using the default log file, by name
_default_file_loggers: Dict[str, logging.Logger] = {}
_log_file_override: Optional[Path] = None


def _get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent.parent


def _attach_file_handler(logger: logging.Logger, log_path: Path) -> None:
    """Add a DEBUG-level file handler, falling back to console only."""
    try:
        file_handler = logging.FileHandler(
            log_path, 
            mode="a", 
            encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(_FORMATTER)
        logger.addHandler(file_handler)
    except (OSError, PermissionError) as e:
        # If file logging fails, just log to console
        logger.warning(f"Cannot open log file {log_path}: {e}")


def configure_log_file(log_file: Optional[str]) -> None:
    """
    Point every logger that uses the default log file at a new file.

    Args:
        log_file: Path to the log file. Empty or None restores app.log
    """
    global _log_file_override
    _log_file_override = Path(log_file) if log_file else None
    log_path = _log_file_override or _get_project_root() / _LOG_FILE_NAME

    for logger in _default_file_loggers.values():
        for handler in list(logger.handlers):
            if isinstance(handler, logging.FileHandler):
                logger.removeHandler(handler)
                handler.close()
        _attach_file_handler(logger, log_path)


def get_logger(name: str, log_file: Optional[str] = None) -> logging.Logger:
    """
    Get or create a logger with console and file handlers.
    
    Args:
        name: Logger name (typically a component name like "AttendanceStore")
        log_file: Optional custom log file path. If None, uses default app.log
        
    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    
    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger
    
    logger.setLevel(logging.DEBUG)
    
    # Console handler - INFO level and above
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(_FORMATTER)
    logger.addHandler(console_handler)
    
    # File handler - DEBUG level and above
    if log_file:
        _attach_file_handler(logger, Path(log_file))
    else:
        _default_file_loggers[name] = logger
        _attach_file_handler(logger, _log_file_override or _get_project_root() / _LOG_FILE_NAME)
    
    return logger
