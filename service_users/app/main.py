"""
Users service: CRUD over users with a Redis cache in front of lookups.
"""

from typing import List, Optional

from fastapi import Response, status

from shared.base_service import BaseService
from .cache.redis_cache import UserCache
from .models import User, UserCreateRequest, UserUpdateRequest
from .persistence.postgres import UserRepository
from .store import UserStore


class UsersService(BaseService):
    """Users service implementation."""

    def __init__(self, repository: Optional[UserRepository] = None, cache: Optional[UserCache] = None):
        super().__init__("users", 5000)

        self.repository = repository if repository is not None else UserRepository(
            self.config.postgres_dsn,
            min_size=self.config.postgres_min_pool_size,
            max_size=self.config.postgres_max_pool_size
        )
        self.cache = cache if cache is not None else UserCache(
            self.config.redis_url,
            ttl_seconds=self.config.cache_ttl_seconds,
            key_prefix=self.config.cache_key_prefix
        )
        self.store = UserStore(self.repository, self.cache, self.metrics)

        self._setup_user_routes()

    def _setup_user_routes(self):
        """Set up user routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "users",
                "message": "Hello World!",
                "version": "1.0.0"
            }

        @self.app.get("/user", response_model=List[User])
        async def list_users():
            """List all users."""
            return await self.store.list_users()

        @self.app.get("/user/{username}", response_model=User)
        async def get_user(username: str):
            """Get a user, served from cache when present."""
            return await self.store.get_user(username)

        @self.app.post("/user", response_model=User, status_code=status.HTTP_201_CREATED)
        async def create_user(request: UserCreateRequest):
            """Create a user."""
            return await self.store.create_user(request.username, request.email)

        @self.app.put("/user/{username}", response_model=User)
        async def update_user(username: str, request: UserUpdateRequest):
            """Update a user's email."""
            return await self.store.update_email(username, request.email)

        @self.app.delete("/user/{username}", status_code=status.HTTP_204_NO_CONTENT)
        async def delete_user(username: str):
            """Delete a user."""
            await self.store.delete_user(username)
            return Response(status_code=status.HTTP_204_NO_CONTENT)

    async def _check_dependencies(self):
        """Check users service dependencies."""
        return {
            "redis": "ok" if await self.cache.health_check() else "error",
            "postgres": "ok" if await self.repository.health_check() else "error",
        }

    async def start(self):
        """Start users service components."""
        await self.repository.start(reset_schema=self.config.reset_schema_on_start)
        await self.cache.start()
        self.logger.info("Users service started", port=self.port)

    async def stop(self):
        """Stop users service components."""
        await self.repository.stop()
        await self.cache.stop()
        self.logger.info("Users service stopped")


def create_app():
    """Create users service application."""
    service = UsersService()
    return service.app


def main():
    UsersService().run()


if __name__ == "__main__":
    main()
