"""
Cache-aside access to users.

Reads try Redis first and fall back to PostgreSQL, populating the cache on
the way out. Writes go to PostgreSQL and then drop the cached copy. The
cache is best effort: a Redis failure is logged and counted, never raised.
"""

from typing import List

from shared.errors import CacheError, NotFoundError
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from shared.tracing import trace_operation
from .cache.redis_cache import UserCache
from .models import User
from .persistence.postgres import UserRepository

CACHE_TYPE = "user"


class UserStore:
    """Users backed by a repository with a Redis copy of single lookups.

    Not-found is raised outside the traced block so a 404 does not mark
    the span as failed.
    """

    def __init__(self, repository: UserRepository, cache: UserCache, metrics: MetricsCollector):
        self.repository = repository
        self.cache = cache
        self.metrics = metrics
        self.logger = get_logger("users.store")

    async def list_users(self) -> List[User]:
        return await self.repository.list_users()

    async def create_user(self, username: str, email: str) -> User:
        return await self.repository.create_user(username, email)

    async def get_user(self, username: str) -> User:
        """Look a user up, serving from cache when possible."""
        with trace_operation("users.get_user", username=username) as span:
            user = await self._cache_get(username)
            if user is not None:
                span.set_attribute("cache.hit", True)
                self.metrics.record_cache_hit(CACHE_TYPE)
                self.logger.debug("Cache hit", username=username)
                return user

            span.set_attribute("cache.hit", False)
            self.metrics.record_cache_miss(CACHE_TYPE)

            user = await self.repository.get_user(username)
            span.set_attribute("user.found", user is not None)
            if user is not None:
                await self._cache_set(user)

        if user is None:
            raise NotFoundError("User not found", {"username": username})
        return user

    async def update_email(self, username: str, email: str) -> User:
        """Change a user's email and drop the cached copy."""
        with trace_operation("users.update_email", username=username) as span:
            user = await self.repository.update_email(username, email)
            span.set_attribute("user.found", user is not None)
            if user is not None:
                await self._invalidate(username)

        if user is None:
            raise NotFoundError("User not found", {"username": username})
        return user

    async def delete_user(self, username: str):
        """Delete a user and drop the cached copy."""
        with trace_operation("users.delete_user", username=username) as span:
            deleted = await self.repository.delete_user(username)
            span.set_attribute("user.found", deleted)
            if deleted:
                await self._invalidate(username)

        if not deleted:
            raise NotFoundError("User not found", {"username": username})

    async def _cache_get(self, username: str):
        try:
            return await self.cache.get(username)
        except CacheError as e:
            self._cache_failed(e, username)
            return None

    async def _cache_set(self, user: User):
        try:
            await self.cache.set(user)
        except CacheError as e:
            self._cache_failed(e, user.username)

    async def _invalidate(self, username: str):
        try:
            await self.cache.invalidate(username)
            self.metrics.record_cache_invalidation(CACHE_TYPE)
        except CacheError as e:
            # Entry may now be stale until its TTL runs out.
            self._cache_failed(e, username)

    def _cache_failed(self, error: CacheError, username: str):
        self.metrics.record_cache_error(CACHE_TYPE, error.operation)
        self.logger.warning(
            "Cache operation failed",
            operation=error.operation,
            username=username,
            error=error.message
        )
