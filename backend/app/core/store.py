"""
Credential store

Purchases and user credentials live in two key-value stores keyed by
lower-cased email. The AuthService and the webhook only talk to the
KeyValueStore interface, so the backend can be swapped without touching
them:

- MemoryStore: process-local dict, lost on restart (default)
- RedisStore: JSON documents in Redis, shared between worker processes

put_if_absent() is the per-key atomic insert used when creating a user
credential; it closes the gap between "no record yet" and "insert".
"""
from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from typing import Generic, TypeVar

import redis

from app.core.config import settings
from app.core.redis import get_redis
from app.models import Purchase, Record, UserCredential, normalize_email

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Record)


class KeyValueStore(ABC, Generic[T]):
    """Keyed record storage. Keys are normalised with normalize_email()."""

    @abstractmethod
    def get(self, key: str) -> T | None: ...

    @abstractmethod
    def put(self, key: str, value: T) -> None: ...

    @abstractmethod
    def has(self, key: str) -> bool: ...

    @abstractmethod
    def put_if_absent(self, key: str, value: T) -> bool:
        """Insert `value` only when `key` is free. Returns True on insert."""


class MemoryStore(KeyValueStore[T]):
    def __init__(self) -> None:
        self._items: dict[str, T] = {}
        # Sync routes run in a thread pool.
        self._lock = threading.Lock()

    def get(self, key: str) -> T | None:
        return self._items.get(normalize_email(key))

    def put(self, key: str, value: T) -> None:
        with self._lock:
            self._items[normalize_email(key)] = value

    def has(self, key: str) -> bool:
        return normalize_email(key) in self._items

    def put_if_absent(self, key: str, value: T) -> bool:
        key = normalize_email(key)
        with self._lock:
            if key in self._items:
                return False
            self._items[key] = value
            return True

    def __len__(self) -> int:
        return len(self._items)


class RedisStore(KeyValueStore[T]):
    """
    Records stored as JSON strings under "<prefix>:<namespace>:<email>".

    Args:
        client: Redis client created with decode_responses=True
        namespace: key namespace, e.g. "purchases"
        model: record class used to decode stored documents
        prefix: application wide key prefix
    """

    def __init__(
        self,
        client: redis.Redis,
        *,
        namespace: str,
        model: type[T],
        prefix: str = "members",
    ) -> None:
        self.client = client
        self.namespace = namespace
        self.model = model
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{self.namespace}:{normalize_email(key)}"

    def get(self, key: str) -> T | None:
        raw = self.client.get(self._key(key))
        if raw is None:
            return None
        return self.model.model_validate_json(raw)

    def put(self, key: str, value: T) -> None:
        self.client.set(self._key(key), value.model_dump_json())

    def has(self, key: str) -> bool:
        return bool(self.client.exists(self._key(key)))

    def put_if_absent(self, key: str, value: T) -> bool:
        # SET NX is atomic on the server.
        return bool(self.client.set(self._key(key), value.model_dump_json(), nx=True))


@dataclass
class Stores:
    purchases: KeyValueStore[Purchase]
    users: KeyValueStore[UserCredential]


def memory_stores() -> Stores:
    return Stores(purchases=MemoryStore(), users=MemoryStore())


def redis_stores(client: redis.Redis, prefix: str = "members") -> Stores:
    return Stores(
        purchases=RedisStore(client, namespace="purchases", model=Purchase, prefix=prefix),
        users=RedisStore(client, namespace="users", model=UserCredential, prefix=prefix),
    )


@lru_cache(maxsize=1)
def get_stores() -> Stores:
    """
    Process-wide stores for the configured STORE_BACKEND.

    Routes receive this through the app.api.deps.get_stores dependency, which
    tests override with fresh memory stores.
    """
    if settings.STORE_BACKEND == "redis":
        logger.info(
            f"Using Redis credential store at {settings.REDIS_HOST}:{settings.REDIS_PORT}/{settings.REDIS_DB}"
        )
        return redis_stores(get_redis(), prefix=settings.REDIS_KEY_PREFIX)
    logger.info("Using in-memory credential store; records are lost on restart")
    return memory_stores()
