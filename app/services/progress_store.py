"""
Progress store for bulk operations.

Short-lived key/value store holding the JSON snapshot of each operation.
Every write refreshes the key's TTL. Production uses Redis; tests use the
in-memory implementation.
"""
import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple

import redis

from app.core.config import settings
from app.core.exceptions import ProgressStoreUnavailable
from app.schemas.bulk_schemas import OperationSnapshot

logger = logging.getLogger(__name__)


class ProgressStore(ABC):
    """Interface for the expiring snapshot store."""

    @abstractmethod
    def set(self, key: str, value: str, ttl: int) -> None:
        ...

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if missing or expired."""

    def ping(self) -> bool:
        return True


class RedisProgressStore(ProgressStore):
    """Redis-backed store (SETEX/GET)."""

    def __init__(self, client: redis.Redis):
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisProgressStore":
        client = redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=settings.redis_socket_timeout,
            socket_connect_timeout=settings.redis_socket_timeout,
        )
        return cls(client)

    def set(self, key: str, value: str, ttl: int) -> None:
        # A Redis outage must not stop catalog mutations: log and carry on.
        try:
            self.client.setex(key, ttl, value)
        except redis.RedisError as e:
            logger.warning(f"Progress store write failed for {key}: {e}")

    def get(self, key: str) -> Optional[str]:
        try:
            return self.client.get(key)
        except redis.RedisError as e:
            logger.error(f"Progress store read failed for {key}: {e}")
            raise ProgressStoreUnavailable(str(e)) from e

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except redis.RedisError as e:
            logger.warning(f"Progress store ping failed: {e}")
            return False


class InMemoryProgressStore(ProgressStore):
    """Process-local store with TTL, for tests and single-process setups."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def set(self, key: str, value: str, ttl: int) -> None:
        with self._lock:
            self._data[key] = (value, self._clock() + ttl)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() >= expires_at:
                del self._data[key]
                return None
            return value


# ==================== Snapshot helpers ====================

def progress_key(operation_id: str) -> str:
    return f"{settings.bulk_progress_key_prefix}{operation_id}"


def write_snapshot(
    store: ProgressStore,
    operation_id: str,
    snapshot: OperationSnapshot
) -> None:
    store.set(
        progress_key(operation_id),
        snapshot.to_json(),
        settings.bulk_progress_ttl_seconds
    )


def read_snapshot(store: ProgressStore, operation_id: str) -> Optional[str]:
    """Raw JSON snapshot, or None when unknown or expired."""
    return store.get(progress_key(operation_id))


# ==================== Wiring ====================

_progress_store: Optional[ProgressStore] = None


def get_progress_store() -> ProgressStore:
    """Shared store instance (FastAPI dependency and Celery tasks)."""
    global _progress_store

    if _progress_store is None:
        _progress_store = RedisProgressStore.from_url(settings.redis_url)
        logger.info("Redis progress store initialized")

    return _progress_store


def set_progress_store(store: Optional[ProgressStore]) -> None:
    global _progress_store
    _progress_store = store
