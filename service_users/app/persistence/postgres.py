"""
PostgreSQL persistence layer for the Users Service.
"""

from typing import List, Optional

from shared.database import PostgresDatabase
from ..models import User


class UserRepository(PostgresDatabase):
    """System of record for users."""

    def __init__(self, dsn: str, min_size: int = 2, max_size: int = 10):
        super().__init__(dsn, "users.persistence.postgres", min_size=min_size, max_size=max_size)

    async def create_tables(self):
        """Create the users table."""
        async with self.connection("create_tables") as conn:
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id SERIAL PRIMARY KEY,
                    username VARCHAR(255) NOT NULL UNIQUE,
                    email VARCHAR(255) NOT NULL,
                    created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
                    updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW()
                );
            """)

    async def drop_tables(self):
        """Drop the users table."""
        async with self.connection("drop_tables") as conn:
            await conn.execute("DROP TABLE IF EXISTS users")

    async def list_users(self) -> List[User]:
        """Load all users."""
        async with self.connection("list_users") as conn:
            rows = await conn.fetch("""
                SELECT * FROM users ORDER BY id ASC
            """)
            return [self._row_to_user(row) for row in rows]

    async def get_user(self, username: str) -> Optional[User]:
        """Load a user by username."""
        async with self.connection("get_user") as conn:
            row = await conn.fetchrow("""
                SELECT * FROM users WHERE username = $1
            """, username)
            return self._row_to_user(row) if row else None

    async def create_user(self, username: str, email: str) -> User:
        """Insert a user. A duplicate username raises PersistenceError."""
        async with self.connection("create_user") as conn:
            row = await conn.fetchrow("""
                INSERT INTO users (username, email)
                VALUES ($1, $2)
                RETURNING *
            """, username, email)

        self.logger.info("User created", username=username)
        return self._row_to_user(row)

    async def update_email(self, username: str, email: str) -> Optional[User]:
        """Update a user's email. Returns None when no such user exists."""
        async with self.connection("update_email") as conn:
            row = await conn.fetchrow("""
                UPDATE users SET email = $2, updated_at = NOW()
                WHERE username = $1
                RETURNING *
            """, username, email)

        if not row:
            self.logger.warning("User not found for update", username=username)
            return None

        self.logger.info("User updated", username=username)
        return self._row_to_user(row)

    async def delete_user(self, username: str) -> bool:
        """Delete a user. Returns False when no such user exists."""
        async with self.connection("delete_user") as conn:
            result = await conn.execute("""
                DELETE FROM users WHERE username = $1
            """, username)

        if result == "DELETE 1":
            self.logger.info("User deleted", username=username)
            return True

        self.logger.warning("User not found for deletion", username=username)
        return False

    def _row_to_user(self, row) -> User:
        """Convert database row to User object."""
        return User(
            id=row['id'],
            username=row['username'],
            email=row['email'],
            created_at=row['created_at'],
            updated_at=row['updated_at']
        )
