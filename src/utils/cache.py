# src/utils/cache.py
import inspect
import logging
from functools import wraps
from typing import Callable, TypeVar

import redis
from pydantic import BaseModel
from sqlalchemy.orm import Session

from src.utils.config import settings

logger = logging.getLogger(__name__)

# Create Redis connection
redis_client = redis.Redis(
    host=settings.REDIS_HOST,
    port=settings.REDIS_PORT,
    db=0,
    decode_responses=True,
    socket_connect_timeout=1,
)

T = TypeVar('T')


def build_cache_key(key_prefix: str, *args, **kwargs) -> str:
    """Join the prefix with every non-session argument"""
    key_parts = [key_prefix]
    for arg in args:
        if not isinstance(arg, Session):
            key_parts.append(str(arg))
    for k, v in sorted(kwargs.items()):
        if not isinstance(v, Session):
            key_parts.append(f"{k}={v}")
    return ":".join(key_parts)


def cache_data(key_prefix: str, model: type[BaseModel], expire_time: int = 3600):
    """
    Decorator for caching pydantic results in Redis

    Args:
        key_prefix: First segment of the cache key, the remaining segments are the call arguments
        model: Pydantic model used to rebuild a cached payload
        expire_time: Time in seconds before cache expires
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            # args[0] is the repository instance
            cache_key = build_cache_key(key_prefix, *args[1:], **kwargs)

            try:
                cached_data = redis_client.get(cache_key)
            except redis.RedisError as e:
                logger.warning(f"Cache unavailable for key {cache_key}: {e}")
                cached_data = None

            if cached_data:
                logger.debug(f"Cache hit for key: {cache_key}")
                try:
                    return model.model_validate_json(cached_data)
                except ValueError as e:
                    logger.error(f"Failed to decode cached data for {cache_key}: {e}")
                    _safe_delete(cache_key)  # Clear corrupted cache

            logger.debug(f"Cache miss for key: {cache_key}")

            if inspect.iscoroutinefunction(func):
                result = await func(*args, **kwargs)
            else:
                result = func(*args, **kwargs)

            if result is not None:
                try:
                    redis_client.setex(cache_key, expire_time, result.model_dump_json())
                    logger.debug(f"Cached data for key: {cache_key}")
                except redis.RedisError as e:
                    logger.warning(f"Failed to cache data for {cache_key}: {e}")

            return result

        return async_wrapper
    return decorator


def _safe_delete(*keys: str):
    try:
        redis_client.delete(*keys)
    except redis.RedisError as e:
        logger.warning(f"Failed to delete cache keys {keys}: {e}")


def invalidate_cache(key_pattern: str) -> int:
    """Clear cache entries matching the given pattern"""
    # Use SCAN instead of KEYS for better performance
    cursor = 0
    keys_to_delete = []
    try:
        while True:
            cursor, keys = redis_client.scan(cursor, match=key_pattern, count=100)
            keys_to_delete.extend(keys)
            if cursor == 0:
                break
    except redis.RedisError as e:
        logger.warning(f"Failed to scan cache for {key_pattern}: {e}")
        return 0

    if keys_to_delete:
        _safe_delete(*keys_to_delete)
        logger.info(f"Invalidated {len(keys_to_delete)} cache entries")
    return len(keys_to_delete)
