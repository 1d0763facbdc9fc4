"""
Core infrastructure for the list query engine.

This module provides the foundational components: configuration management,
logging setup, and custom exceptions.
"""

from .config import StorageConfig, PaginationConfig, UrlConfig, LoggingConfig, Config
from .exceptions import ListQueryError, ConfigurationError, StorageError, ValidationError
from .logging_config import setup_logging, setup_logging_from_config, get_logger

__all__ = [
    # Configuration
    'StorageConfig',
    'PaginationConfig',
    'UrlConfig',
    'LoggingConfig',
    'Config',

    # Exceptions
    'ListQueryError',
    'ConfigurationError',
    'StorageError',
    'ValidationError',

    # Logging
    'setup_logging',
    'setup_logging_from_config',
    'get_logger',
]

__version__ = "1.0.0"
