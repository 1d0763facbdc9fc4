"""
Logging configuration for the list query engine.

The engine runs inside a host Dash application, so setup only replaces the
handlers it installed itself and leaves the host's handlers in place.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_installed_handlers: List[logging.Handler] = []


def _remove_installed_handlers(root_logger: logging.Logger) -> None:
    while _installed_handlers:
        handler = _installed_handlers.pop()
        root_logger.removeHandler(handler)
        handler.close()


def setup_logging(
    level: str = 'INFO',
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    format_string: Optional[str] = None
) -> None:
    """
    Set up logging for the list engine.

    Calling it again swaps the console/file handlers from the previous call;
    handlers added by anyone else are kept.

    Args:
        level: Logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
        log_file: Name of log file (optional)
        log_dir: Directory for log files (defaults to 'logs')
        format_string: Custom format string (optional)
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    _remove_installed_handlers(root_logger)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)
    _installed_handlers.append(console_handler)

    if log_file:
        log_dir = log_dir or 'logs'
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        log_path = os.path.join(log_dir, log_file)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        _installed_handlers.append(file_handler)

        logging.info(f"Logging to file: {log_path}")

    logging.info(f"Logging configured with level: {level}")


def setup_logging_from_config(config) -> None:
    """Apply the [logging] section of a Config instance."""
    setup_logging(
        level=config.logging.level,
        log_file=config.logging.log_file,
        log_dir=config.logging.log_dir,
        format_string=config.logging.format_string
    )


def installed_handlers() -> List[logging.Handler]:
    """Handlers currently owned by setup_logging."""
    return list(_installed_handlers)


def reset_logging() -> None:
    """Remove the handlers installed by setup_logging."""
    _remove_installed_handlers(logging.getLogger())


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def set_log_level(level: str) -> None:
    """Set the root level and the level of the engine's own handlers."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.getLogger().setLevel(numeric_level)

    for handler in _installed_handlers:
        handler.setLevel(numeric_level)

    logging.info(f"Log level set to: {level}")
