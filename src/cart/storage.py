"""Where a cart ledger keeps its serialized copy.

A cart is stored as one JSON document (a flat list of line objects) under a
single well-known key. A missing key means an empty cart.
"""

import logging
from abc import ABC, abstractmethod

import redis

from src.utils.cache import redis_client
from src.utils.config import settings

logger = logging.getLogger(__name__)

CART_STORAGE_KEY = "cart"


class CartStorage(ABC):
    """Interface for durable client storage."""

    @abstractmethod
    def load(self, key: str) -> str | None:
        ...

    @abstractmethod
    def save(self, key: str, payload: str) -> None:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        ...


class MemoryCartStorage(CartStorage):
    def __init__(self):
        self._items: dict[str, str] = {}

    def load(self, key: str) -> str | None:
        return self._items.get(key)

    def save(self, key: str, payload: str) -> None:
        self._items[key] = payload

    def remove(self, key: str) -> None:
        self._items.pop(key, None)


class RedisCartStorage(CartStorage):
    """Redis-backed storage, one namespace per client cart id."""

    def __init__(self, cart_id: str, client: redis.Redis = None, expire_time: int = None):
        self.cart_id = cart_id
        self.client = client or redis_client
        self.expire_time = expire_time or settings.CART_TTL

    def _key(self, key: str) -> str:
        return f"carts:{self.cart_id}:{key}"

    def load(self, key: str) -> str | None:
        return self.client.get(self._key(key))

    def save(self, key: str, payload: str) -> None:
        self.client.setex(self._key(key), self.expire_time, payload)

    def remove(self, key: str) -> None:
        self.client.delete(self._key(key))
