"""
StateManager - persistence adapter for list view criteria.

Serializes criteria snapshots to a key-value backend under a caller-supplied
StorageKey and restores them. Reads and writes never raise: every storage
failure is logged and resolved to the supplied defaults, so the in-memory
criteria of a view are never affected by the backend.
"""

import json
import logging
from typing import Any, Mapping, Optional, Dict
from dataclasses import dataclass

from state_backends import (
    StateBackend,
    NullStateBackend,
    MemoryStateBackend,
    RedisStateBackend,
    DatabaseStateBackend,
    StateBackendConfig
)

logger = logging.getLogger(__name__)


@dataclass
class StateManagerConfig:
    """Configuration for StateManager"""
    backend_type: str = 'memory'  # 'memory', 'null', 'redis', 'database'
    enable_user_isolation: bool = False
    default_ttl: int = 0
    key_prefix: str = 'lq'
    redis_url: str = 'redis://localhost:6379/0'
    database_url: str = 'sqlite:///list_state.db'
    max_value_size: int = 5 * 1024 * 1024


class StateManager:
    """
    Persistence adapter that maps StorageKeys onto a backend.

    Keys are namespaced as ``prefix[:user]:storage_key``. When the configured
    backend cannot be created the manager degrades to in-memory storage.
    """

    def __init__(self, config: Optional[StateManagerConfig] = None,
                 backend: Optional[StateBackend] = None):
        self.config = config or StateManagerConfig()
        self.backend = backend or self._create_backend()
        self.user_context: Optional[str] = None

        logger.info(f"StateManager initialized with {type(self.backend).__name__}")

    def _create_backend(self) -> StateBackend:
        """Create appropriate backend based on configuration"""
        backend_config = StateBackendConfig(
            ttl_default=self.config.default_ttl,
            max_value_size=self.config.max_value_size
        )

        try:
            if self.config.backend_type == 'memory':
                return MemoryStateBackend(backend_config)
            elif self.config.backend_type == 'null':
                return NullStateBackend(backend_config)
            elif self.config.backend_type == 'redis':
                return RedisStateBackend(backend_config, self.config.redis_url)
            elif self.config.backend_type == 'database':
                return DatabaseStateBackend(backend_config, self.config.database_url)
        except Exception as e:
            logger.error(f"Could not create {self.config.backend_type} backend, using memory: {e}")
            return MemoryStateBackend(backend_config)

        logger.warning(f"Unknown backend type: {self.config.backend_type}, falling back to memory")
        return MemoryStateBackend(backend_config)

    def set_user_context(self, user_id: Optional[str]):
        """Set current user context for state isolation"""
        self.user_context = user_id
        if user_id:
            logger.debug(f"Set user context: {user_id}")

    def _build_key(self, storage_key: str) -> str:
        """Build full key with prefix and user isolation"""
        key_parts = [self.config.key_prefix]

        if self.config.enable_user_isolation:
            key_parts.append(self.user_context or 'anonymous')

        key_parts.append(storage_key)
        return ':'.join(key_parts)

    # Raw payload access

    def load_value(self, storage_key: str, default: Any = None) -> Any:
        """
        Read and decode the JSON payload stored under a StorageKey.

        Args:
            storage_key: Caller-supplied key identifying one view's state
            default: Returned when nothing is stored or the payload is unusable

        Returns:
            The decoded payload, or ``default``
        """
        key = self._build_key(storage_key)

        try:
            payload = self.backend.get(key)
        except Exception as e:
            logger.error(f"Error reading stored state for {storage_key}: {e}")
            return default

        if payload is None:
            return default

        try:
            return json.loads(payload)
        except (TypeError, ValueError) as e:
            logger.warning(f"Discarding malformed stored state for {storage_key}: {e}")
            return default

    def save_value(self, storage_key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Encode ``value`` as JSON and write it; returns False on any failure."""
        key = self._build_key(storage_key)

        try:
            payload = json.dumps(value, default=str)
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to serialize state for {storage_key}: {e}")
            return False

        try:
            success = self.backend.set(key, payload, ttl)
        except Exception as e:
            logger.error(f"Error saving state for {storage_key}: {e}")
            return False

        if success:
            logger.debug(f"Stored state for {storage_key}")
        else:
            logger.error(f"Failed to store state for {storage_key}")
        return bool(success)

    # Criteria access

    def load(self, storage_key: str, defaults: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Load criteria persisted under ``storage_key``.

        Stored values override ``defaults`` key by key; keys absent from
        ``defaults`` are dropped so the result is never partial and never
        carries stale fields. Anything other than a stored JSON object
        resolves to ``defaults``.
        """
        stored = self.load_value(storage_key)
        result = dict(defaults)

        if stored is None:
            return result

        if not isinstance(stored, dict):
            logger.warning(f"Stored state for {storage_key} is not an object, using defaults")
            return result

        for name in result:
            if name in stored:
                result[name] = stored[name]
        return result

    def save(self, storage_key: str, criteria: Mapping[str, Any]) -> bool:
        """Persist a criteria snapshot; failures are logged, never raised."""
        return self.save_value(storage_key, dict(criteria))

    def delete(self, storage_key: str) -> bool:
        """Delete the payload for a StorageKey"""
        try:
            result = self.backend.delete(self._build_key(storage_key))
        except Exception as e:
            logger.error(f"Error deleting stored state for {storage_key}: {e}")
            return False

        if result:
            logger.debug(f"Deleted stored state for {storage_key}")
        return result

    def exists(self, storage_key: str) -> bool:
        """Check if a payload is stored for a StorageKey"""
        try:
            return self.backend.exists(self._build_key(storage_key))
        except Exception as e:
            logger.error(f"Error checking stored state for {storage_key}: {e}")
            return False

    def get_backend_stats(self) -> Dict[str, Any]:
        """Get backend statistics if available"""
        stats = {
            'backend_type': self.config.backend_type,
            'user_isolation_enabled': self.config.enable_user_isolation,
        }
        if hasattr(self.backend, 'get_stats'):
            stats.update(self.backend.get_stats())
            stats['backend_type'] = self.config.backend_type
        else:
            stats['stats_available'] = False
        return stats


# Global StateManager instance
_state_manager_instance: Optional[StateManager] = None


def get_state_manager(config: Optional[StateManagerConfig] = None) -> StateManager:
    """
    Get the process-wide StateManager instance.

    The manager only wraps the storage backend; criteria themselves are
    owned per view, so sharing it does not share filter state.
    """
    global _state_manager_instance

    if _state_manager_instance is None:
        if config is None:
            from config_manager import get_state_manager_config
            config = get_state_manager_config()
        _state_manager_instance = StateManager(config)
        logger.info("Created global StateManager instance")
    elif config is not None:
        logger.warning("StateManager already initialized, ignoring new config")

    return _state_manager_instance


def refresh_state_manager(config: Optional[StateManagerConfig] = None) -> StateManager:
    """
    Force refresh of the global StateManager instance.
    Useful for testing or configuration changes.
    """
    global _state_manager_instance
    _state_manager_instance = None
    return get_state_manager(config)
