"""
Configuration management for the list query engine.

This module provides a split configuration system that separates concerns
into focused configuration classes, loaded from and saved to a TOML file.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import toml

from .exceptions import ConfigurationError

VALID_BACKENDS = ['memory', 'null', 'redis', 'database']
VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


@dataclass
class StorageConfig:
    """Configuration for criteria persistence."""

    backend: str = 'memory'  # 'memory', 'null', 'redis', 'database'
    key_prefix: str = 'lq'
    enable_user_isolation: bool = False
    ttl_default: int = 0  # 0 disables expiry; filter state outlives the view
    max_value_size: int = 5 * 1024 * 1024  # roughly a browser localStorage quota

    # Backend-specific settings
    redis_url: str = 'redis://localhost:6379/0'
    database_url: str = 'sqlite:///list_state.db'

    def validate(self) -> List[str]:
        """Validate the storage configuration and return any errors."""
        errors = []

        if self.backend not in VALID_BACKENDS:
            errors.append(f"backend must be one of {VALID_BACKENDS}")

        if not self.key_prefix:
            errors.append("key_prefix cannot be empty")

        if self.ttl_default < 0:
            errors.append("ttl_default cannot be negative")

        if self.max_value_size <= 0:
            errors.append("max_value_size must be positive")

        return errors


@dataclass
class PaginationConfig:
    """Configuration for paginated list display."""

    default_page_size: int = 10
    sibling_count: int = 1
    page_size_options: List[int] = field(default_factory=lambda: [10, 25, 50, 100])

    def validate(self) -> List[str]:
        """Validate the pagination configuration and return any errors."""
        errors = []

        if self.default_page_size <= 0:
            errors.append("default_page_size must be positive")

        if self.sibling_count < 0:
            errors.append("sibling_count cannot be negative")

        if any(size <= 0 for size in self.page_size_options):
            errors.append("page_size_options must all be positive")

        return errors


@dataclass
class UrlConfig:
    """Configuration for query-string synchronization."""

    sync_enabled: bool = True
    omit_keys: List[str] = field(default_factory=list)

    def validate(self) -> List[str]:
        errors = []
        if not all(isinstance(key, str) and key for key in self.omit_keys):
            errors.append("omit_keys must be non-empty strings")
        return errors


@dataclass
class LoggingConfig:
    """Configuration for application logging."""

    level: str = 'INFO'
    log_file: Optional[str] = None
    log_dir: Optional[str] = None
    format_string: Optional[str] = None

    def validate(self) -> List[str]:
        errors = []
        if self.level.upper() not in VALID_LOG_LEVELS:
            errors.append(f"level must be one of {VALID_LOG_LEVELS}")
        return errors


@dataclass
class Config:
    """Main configuration class that combines all configuration sections."""

    config_file_path: str = "config.toml"

    storage: StorageConfig = field(default_factory=StorageConfig)
    pagination: PaginationConfig = field(default_factory=PaginationConfig)
    url: UrlConfig = field(default_factory=UrlConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        """Load configuration when an instance is created."""
        self.load_config()

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Render the configuration as the TOML document structure."""
        logging_section = {'level': self.logging.level}
        if self.logging.log_file:
            logging_section['log_file'] = self.logging.log_file
        if self.logging.log_dir:
            logging_section['log_dir'] = self.logging.log_dir
        if self.logging.format_string:
            logging_section['format_string'] = self.logging.format_string

        return {
            'storage': {
                'backend': self.storage.backend,
                'key_prefix': self.storage.key_prefix,
                'enable_user_isolation': self.storage.enable_user_isolation,
                'ttl_default': self.storage.ttl_default,
                'max_value_size': self.storage.max_value_size,
                'redis_url': self.storage.redis_url,
                'database_url': self.storage.database_url,
            },
            'pagination': {
                'default_page_size': self.pagination.default_page_size,
                'sibling_count': self.pagination.sibling_count,
                'page_size_options': list(self.pagination.page_size_options),
            },
            'url': {
                'sync_enabled': self.url.sync_enabled,
                'omit_keys': list(self.url.omit_keys),
            },
            'logging': logging_section,
        }

    def save_config(self) -> None:
        """Save current configuration to TOML file."""
        try:
            with open(self.config_file_path, 'w') as f:
                toml.dump(self.to_dict(), f)
            logging.info(f"Configuration saved to {self.config_file_path}")
        except Exception as e:
            error_msg = f"Error saving configuration: {e}"
            logging.error(error_msg)
            raise ConfigurationError(error_msg, config_file=self.config_file_path)

    def load_config(self) -> None:
        """Load configuration from TOML file, keeping defaults for absent keys."""
        try:
            with open(self.config_file_path) as f:
                config_data = toml.load(f)
        except FileNotFoundError:
            logging.info(f"{self.config_file_path} not found. Using default configuration.")
            return
        except toml.TomlDecodeError as e:
            error_msg = f"Error decoding {self.config_file_path}: {e}"
            logging.error(error_msg)
            raise ConfigurationError(error_msg, config_file=self.config_file_path)

        try:
            if 'storage' in config_data:
                storage_config = config_data['storage']
                self.storage.backend = storage_config.get('backend', self.storage.backend)
                self.storage.key_prefix = storage_config.get('key_prefix', self.storage.key_prefix)
                self.storage.enable_user_isolation = storage_config.get(
                    'enable_user_isolation', self.storage.enable_user_isolation)
                self.storage.ttl_default = int(storage_config.get('ttl_default', self.storage.ttl_default))
                self.storage.max_value_size = int(storage_config.get('max_value_size', self.storage.max_value_size))
                self.storage.redis_url = storage_config.get('redis_url', self.storage.redis_url)
                self.storage.database_url = storage_config.get('database_url', self.storage.database_url)

            if 'pagination' in config_data:
                pagination_config = config_data['pagination']
                self.pagination.default_page_size = int(pagination_config.get(
                    'default_page_size', self.pagination.default_page_size))
                self.pagination.sibling_count = int(pagination_config.get(
                    'sibling_count', self.pagination.sibling_count))
                self.pagination.page_size_options = [
                    int(size) for size in pagination_config.get(
                        'page_size_options', self.pagination.page_size_options)
                ]

            if 'url' in config_data:
                url_config = config_data['url']
                self.url.sync_enabled = url_config.get('sync_enabled', self.url.sync_enabled)
                self.url.omit_keys = list(url_config.get('omit_keys', self.url.omit_keys))

            if 'logging' in config_data:
                logging_config = config_data['logging']
                self.logging.level = logging_config.get('level', self.logging.level)
                self.logging.log_file = logging_config.get('log_file', self.logging.log_file)
                self.logging.log_dir = logging_config.get('log_dir', self.logging.log_dir)
                self.logging.format_string = logging_config.get('format_string', self.logging.format_string)
        except (TypeError, ValueError) as e:
            error_msg = f"Invalid value in {self.config_file_path}: {e}"
            logging.error(error_msg)
            raise ConfigurationError(error_msg, config_file=self.config_file_path)

        logging.info(f"Configuration loaded from {self.config_file_path}")

    def validate(self) -> List[str]:
        """Validate all configuration sections and return any errors."""
        errors = []
        errors.extend(self.storage.validate())
        errors.extend(self.pagination.validate())
        errors.extend(self.url.validate())
        errors.extend(self.logging.validate())
        return errors
