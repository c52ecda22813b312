"""
Redis caching layer for the Users Service.
"""

from typing import Optional

import redis.asyncio as redis
from pydantic import ValidationError
from redis.exceptions import RedisError

from shared.errors import CacheError
from shared.logging import get_logger
from ..models import User


class UserCache:
    """Redis cache of users keyed by username.

    Every method raises :class:`CacheError` on failure; deciding what a
    failure means for the request is left to the caller.
    """

    def __init__(self, redis_url: str, ttl_seconds: int = 3600, key_prefix: str = "user:",
                 client: Optional[redis.Redis] = None):
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.key_prefix = key_prefix
        self.logger = get_logger("users.cache.redis")
        self.redis: Optional[redis.Redis] = client

    async def start(self):
        """Start the Redis cache.

        An unreachable Redis does not stop the service from starting; the
        client reconnects on the next command.
        """
        if self.redis is None:
            self.redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                health_check_interval=30
            )

        try:
            await self.redis.ping()
            self.logger.info("Redis cache started")
        except RedisError as e:
            self.logger.warning("Redis unavailable at startup, continuing without cache", error=str(e))

    async def stop(self):
        """Stop the Redis cache."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            self.logger.info("Redis cache stopped")

    async def get(self, username: str) -> Optional[User]:
        """Return the cached user, or None when there is no entry."""
        cache_key = self._key(username)
        try:
            cached_data = await self._client("get").get(cache_key)
        except RedisError as e:
            raise CacheError("get", str(e), {"cache_key": cache_key}) from e
        except UnicodeDecodeError as e:
            # Responses are decoded as UTF-8 by the client before we see them.
            raise CacheError("decode", "Cache entry is not valid UTF-8", {"cache_key": cache_key}) from e

        if cached_data is None:
            return None

        try:
            return User.model_validate_json(cached_data)
        except ValidationError as e:
            raise CacheError("decode", "Undecodable cache entry", {"cache_key": cache_key}) from e

    async def set(self, user: User):
        """Store a user with the configured TTL."""
        cache_key = self._key(user.username)
        try:
            await self._client("set").setex(cache_key, self.ttl_seconds, user.model_dump_json())
        except RedisError as e:
            raise CacheError("set", str(e), {"cache_key": cache_key}) from e

        self.logger.debug("Cached user", cache_key=cache_key, ttl=self.ttl_seconds)

    async def invalidate(self, username: str) -> bool:
        """Remove a user's entry. Returns True when an entry existed."""
        cache_key = self._key(username)
        try:
            removed = await self._client("invalidate").delete(cache_key)
        except RedisError as e:
            raise CacheError("invalidate", str(e), {"cache_key": cache_key}) from e

        self.logger.debug("Invalidated cached user", cache_key=cache_key, removed=removed)
        return bool(removed)

    async def health_check(self) -> bool:
        """Check Redis health."""
        try:
            await self._client("ping").ping()
            return True
        except (CacheError, RedisError):
            return False

    def _key(self, username: str) -> str:
        return f"{self.key_prefix}{username}"

    def _client(self, operation: str) -> redis.Redis:
        if self.redis is None:
            raise CacheError(operation, "Redis cache is not started")
        return self.redis
