"""
Key-value backend implementations for criteria persistence.
Backends store opaque string payloads; serialization lives in StateManager.
"""

import datetime
import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Optional, Dict
from dataclasses import dataclass

from core.exceptions import StorageError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


@dataclass
class StateBackendConfig:
    """Configuration for state backends"""
    ttl_default: int = 0  # 0 disables expiry
    max_key_size: int = 1000
    max_value_size: int = 5 * 1024 * 1024


class StateBackend(ABC):
    """Abstract base class for key-value storage backends"""

    def __init__(self, config: Optional[StateBackendConfig] = None):
        self.config = config or StateBackendConfig()

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Retrieve payload by key"""

    @abstractmethod
    def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        """Store payload with optional TTL"""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete key"""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Check if key exists"""

    @abstractmethod
    def clear(self) -> bool:
        """Clear all data (for testing)"""

    def _validate_key(self, key: str) -> bool:
        """Validate key format and size"""
        if not key or len(key) > self.config.max_key_size:
            return False
        return True

    def _check_value_size(self, key: str, value: str) -> None:
        if len(value) > self.config.max_value_size:
            raise StorageError(
                f"Payload of {len(value)} bytes exceeds quota of {self.config.max_value_size}",
                key=key, operation='set'
            )

    def _effective_ttl(self, ttl: Optional[int]) -> Optional[int]:
        return ttl or self.config.ttl_default or None


class NullStateBackend(StateBackend):
    """
    Backend for environments where persistent storage is disabled.
    Reads find nothing and writes fail, so callers stay in-memory only.
    """

    def get(self, key: str) -> Optional[str]:
        return None

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        raise StorageError("Persistent storage is disabled", key=key, operation='set')

    def delete(self, key: str) -> bool:
        return False

    def exists(self, key: str) -> bool:
        return False

    def clear(self) -> bool:
        return True


class MemoryStateBackend(StateBackend):
    """
    In-memory backend for development, tests and single-process shells.
    Thread-safe; expired entries are dropped lazily on access.
    """

    def __init__(self, config: Optional[StateBackendConfig] = None):
        super().__init__(config)
        self._store: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.RLock()

    def _live_entry(self, key: str) -> Optional[Dict[str, Any]]:
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.get('expires_at') and time.time() > entry['expires_at']:
            del self._store[key]
            return None
        return entry

    def get(self, key: str) -> Optional[str]:
        if not self._validate_key(key):
            logger.warning(f"Invalid key: {key}")
            return None

        with self._lock:
            entry = self._live_entry(key)
            return entry['value'] if entry else None

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        if not self._validate_key(key):
            logger.warning(f"Invalid key: {key}")
            return False

        self._check_value_size(key, value)

        with self._lock:
            effective_ttl = self._effective_ttl(ttl)
            self._store[key] = {
                'value': value,
                'expires_at': time.time() + effective_ttl if effective_ttl else None,
                'created_at': time.time()
            }

        return True

    def delete(self, key: str) -> bool:
        with self._lock:
            if key in self._store:
                del self._store[key]
                return True
            return False

    def exists(self, key: str) -> bool:
        with self._lock:
            return self._live_entry(key) is not None

    def clear(self) -> bool:
        with self._lock:
            self._store.clear()
        return True

    def get_stats(self) -> Dict[str, Any]:
        """Get backend statistics"""
        with self._lock:
            current_time = time.time()
            expired_keys = sum(
                1 for entry in self._store.values()
                if entry.get('expires_at') and current_time > entry['expires_at']
            )
            return {
                'total_keys': len(self._store),
                'expired_keys': expired_keys,
                'total_size_bytes': sum(len(entry['value']) for entry in self._store.values()),
                'backend_type': 'memory'
            }


class RedisStateBackend(StateBackend):
    """
    Redis-based backend for multi-process deployments.
    Requires redis-py package.
    """

    def __init__(self, config: Optional[StateBackendConfig] = None,
                 redis_url: str = "redis://localhost:6379/0"):
        super().__init__(config)
        self.redis_url = redis_url
        self._client = None
        self._connect()

    def _connect(self):
        """Initialize Redis connection"""
        import redis

        try:
            self._client = redis.from_url(self.redis_url, decode_responses=True)
            self._client.ping()
            logger.info(f"Connected to Redis at {self.redis_url}")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise StorageError(f"Failed to connect to Redis: {e}", operation='connect')

    def get(self, key: str) -> Optional[str]:
        if not self._validate_key(key):
            return None

        try:
            return self._client.get(key)
        except Exception as e:
            raise StorageError(f"Redis get error: {e}", key=key, operation='get')

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        if not self._validate_key(key):
            return False

        self._check_value_size(key, value)

        try:
            ttl_seconds = self._effective_ttl(ttl)
            if ttl_seconds:
                return bool(self._client.setex(key, ttl_seconds, value))
            return bool(self._client.set(key, value))
        except Exception as e:
            raise StorageError(f"Redis set error: {e}", key=key, operation='set')

    def delete(self, key: str) -> bool:
        try:
            return bool(self._client.delete(key))
        except Exception as e:
            raise StorageError(f"Redis delete error: {e}", key=key, operation='delete')

    def exists(self, key: str) -> bool:
        try:
            return bool(self._client.exists(key))
        except Exception as e:
            raise StorageError(f"Redis exists error: {e}", key=key, operation='exists')

    def clear(self) -> bool:
        """Clear all keys (use with caution)"""
        try:
            return bool(self._client.flushdb())
        except Exception as e:
            raise StorageError(f"Redis clear error: {e}", operation='clear')


class DatabaseStateBackend(StateBackend):
    """
    Database-based backend using SQLite/PostgreSQL through SQLAlchemy.
    For persistent, queryable filter state storage.
    """

    def __init__(self, config: Optional[StateBackendConfig] = None,
                 db_url: str = "sqlite:///list_state.db"):
        super().__init__(config)
        self.db_url = db_url
        self._engine = None
        self._connect()

    def _connect(self):
        """Initialize database connection and state table"""
        from sqlalchemy import create_engine, MetaData, Table, Column, String, Text, DateTime

        try:
            self._engine = create_engine(self.db_url)
            self._metadata = MetaData()

            self._state_table = Table('list_state_store', self._metadata,
                Column('key', String(1000), primary_key=True),
                Column('value', Text),
                Column('created_at', DateTime),
                Column('expires_at', DateTime, nullable=True)
            )

            self._metadata.create_all(self._engine)
            logger.info(f"Connected to database at {self.db_url}")
        except Exception as e:
            logger.error(f"Failed to connect to database: {e}")
            raise StorageError(f"Failed to connect to database: {e}", operation='connect')

    def _not_expired(self):

        table = self._state_table
        return (table.c.expires_at.is_(None)) | (table.c.expires_at > _utcnow())

    def get(self, key: str) -> Optional[str]:
        if not self._validate_key(key):
            return None

        from sqlalchemy import select

        try:
            with self._engine.connect() as conn:
                stmt = select(self._state_table.c.value).where(
                    self._state_table.c.key == key
                ).where(self._not_expired())
                result = conn.execute(stmt).fetchone()
                return result[0] if result else None
        except Exception as e:
            raise StorageError(f"Database get error: {e}", key=key, operation='get')

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> bool:
        if not self._validate_key(key):
            return False

        self._check_value_size(key, value)

        from sqlalchemy.dialects.sqlite import insert as sqlite_insert
        from sqlalchemy.dialects.postgresql import insert as pg_insert

        now = _utcnow()
        ttl_seconds = self._effective_ttl(ttl)
        expires_at = now + datetime.timedelta(seconds=ttl_seconds) if ttl_seconds else None

        try:
            insert = sqlite_insert if self._engine.dialect.name == 'sqlite' else pg_insert
            stmt = insert(self._state_table).values(
                key=key, value=value, created_at=now, expires_at=expires_at
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=['key'],
                set_=dict(value=stmt.excluded.value, expires_at=stmt.excluded.expires_at)
            )

            with self._engine.connect() as conn:
                conn.execute(stmt)
                conn.commit()
            return True
        except Exception as e:
            raise StorageError(f"Database set error: {e}", key=key, operation='set')

    def delete(self, key: str) -> bool:
        from sqlalchemy import delete

        try:
            with self._engine.connect() as conn:
                stmt = delete(self._state_table).where(self._state_table.c.key == key)
                result = conn.execute(stmt)
                conn.commit()
                return result.rowcount > 0
        except Exception as e:
            raise StorageError(f"Database delete error: {e}", key=key, operation='delete')

    def exists(self, key: str) -> bool:
        from sqlalchemy import select

        try:
            with self._engine.connect() as conn:
                stmt = select(self._state_table.c.key).where(
                    self._state_table.c.key == key
                ).where(self._not_expired())
                return conn.execute(stmt).fetchone() is not None
        except Exception as e:
            raise StorageError(f"Database exists error: {e}", key=key, operation='exists')

    def clear(self) -> bool:
        """Clear all state data (use with caution)"""
        from sqlalchemy import delete

        try:
            with self._engine.connect() as conn:
                conn.execute(delete(self._state_table))
                conn.commit()
                return True
        except Exception as e:
            raise StorageError(f"Database clear error: {e}", operation='clear')
