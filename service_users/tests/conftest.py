"""
Fixtures for Users service tests.
"""

import pytest
from datetime import datetime, timezone
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from shared.errors import PersistenceError
from service_users.app.cache.redis_cache import UserCache
from service_users.app.main import UsersService
from service_users.app.models import User


class FakeRedis:
    """In-memory stand-in for redis.asyncio.Redis covering the commands the cache uses."""

    def __init__(self):
        self.data = {}
        self.ttls = {}
        self.calls = []
        self.fail = False

    def _record(self, command, *args):
        self.calls.append((command,) + args)
        if self.fail:
            raise RedisConnectionError("Error 111 connecting to localhost:6379. Connection refused.")

    def commands(self, command):
        return [call for call in self.calls if call[0] == command]

    async def ping(self):
        self._record("ping")
        return True

    async def get(self, name):
        self._record("get", name)
        value = self.data.get(name)
        # Mirrors decode_responses=True for values written as raw bytes.
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def setex(self, name, time, value):
        self._record("setex", name, time, value)
        self.data[name] = value
        self.ttls[name] = time
        return True

    async def delete(self, *names):
        self._record("delete", *names)
        removed = 0
        for name in names:
            if self.data.pop(name, None) is not None:
                self.ttls.pop(name, None)
                removed += 1
        return removed

    async def aclose(self):
        return None


class FakeUserRepository:
    """In-memory users table with the same contract as UserRepository."""

    def __init__(self):
        self.users = {}
        self.next_id = 1
        self.get_calls = 0
        self.healthy = True

    def add(self, username, email):
        now = datetime(2024, 1, 1, tzinfo=timezone.utc)
        user = User(id=self.next_id, username=username, email=email, created_at=now, updated_at=now)
        self.users[username] = user
        self.next_id += 1
        return user

    async def list_users(self):
        return sorted(self.users.values(), key=lambda user: user.id)

    async def get_user(self, username):
        self.get_calls += 1
        return self.users.get(username)

    async def create_user(self, username, email):
        if username in self.users:
            raise PersistenceError('duplicate key value violates unique constraint "users_username_key"')
        return self.add(username, email)

    async def update_email(self, username, email):
        user = self.users.get(username)
        if user is None:
            return None
        updated = user.model_copy(update={"email": email})
        self.users[username] = updated
        return updated

    async def delete_user(self, username):
        return self.users.pop(username, None) is not None

    async def health_check(self):
        return self.healthy

    async def start(self, reset_schema=False):
        return None

    async def stop(self):
        return None


@pytest.fixture
def fake_redis():
    """Fake Redis client."""
    return FakeRedis()


@pytest.fixture
def repository():
    """In-memory user repository seeded with one user."""
    repo = FakeUserRepository()
    repo.add("alice", "alice@example.com")
    return repo


@pytest.fixture
def cache(fake_redis):
    """UserCache wired to the fake Redis client."""
    return UserCache("redis://localhost:6379/0", ttl_seconds=3600, key_prefix="user:", client=fake_redis)


@pytest.fixture
def users_service(repository, cache):
    """UsersService with in-memory backing stores."""
    return UsersService(repository=repository, cache=cache)


@pytest.fixture
def store(users_service):
    """The service's cache-aside store."""
    return users_service.store


@pytest.fixture
def client(users_service):
    """Create test client."""
    return TestClient(users_service.app)
