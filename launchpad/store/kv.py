"""
Key/value backends for persisted launch state.

Values are stored as strings; typed encoding lives in launch_state.LaunchStore.
"""
import threading
from typing import Dict, Optional

from launchpad.settings import settings
from launchpad.store.redis_conn import get_redis


class KeyValueStore:
    """Minimal capability interface: get/set/delete by key."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryKeyValueStore(KeyValueStore):
    """Process-local store. Used when STORE_BACKEND=memory and in tests."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = str(value)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def snapshot(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._data)


class RedisKeyValueStore(KeyValueStore):
    def __init__(self, redis=None, prefix: Optional[str] = None):
        self._r = redis if redis is not None else get_redis()
        self._prefix = settings.STORE_PREFIX if prefix is None else prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def get(self, key: str) -> Optional[str]:
        return self._r.get(self._key(key))

    def set(self, key: str, value: str) -> None:
        self._r.set(self._key(key), str(value))

    def delete(self, key: str) -> None:
        self._r.delete(self._key(key))


def build_store() -> KeyValueStore:
    if settings.STORE_BACKEND == "memory":
        return MemoryKeyValueStore()
    if settings.STORE_BACKEND == "redis":
        return RedisKeyValueStore()
    raise RuntimeError(f"Unknown STORE_BACKEND: {settings.STORE_BACKEND}")
