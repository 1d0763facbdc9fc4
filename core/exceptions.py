"""
Custom exceptions for the list query engine.

These exceptions are raised at internal seams (storage backends, schema
validation, configuration loading) and resolved at the engine boundary,
so callers working with list views never see them.
"""

from typing import Optional, Any


class ListQueryError(Exception):
    """Base exception for all list query engine errors."""

    def __init__(self, message: str, context: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (Context: {context_str})"
        return self.message


class ConfigurationError(ListQueryError):
    """Raised when there are issues with configuration loading or validation."""

    def __init__(self, message: str, config_file: Optional[str] = None, field: Optional[str] = None):
        context = {}
        if config_file:
            context['config_file'] = config_file
        if field:
            context['field'] = field
        super().__init__(message, context)


class StorageError(ListQueryError):
    """Raised when a key-value backend cannot read or write a payload."""

    def __init__(self, message: str, key: Optional[str] = None, operation: Optional[str] = None):
        context = {}
        if key:
            context['key'] = key
        if operation:
            context['operation'] = operation
        super().__init__(message, context)


class ValidationError(ListQueryError):
    """Raised when a criteria value does not fit its filter field."""

    def __init__(self, message: str, field: Optional[str] = None, value: Optional[Any] = None):
        context = {}
        if field:
            context['field'] = field
        if value is not None:
            context['value'] = str(value)
        super().__init__(message, context)
