"""
Unit tests for the PostgreSQL SchoolRepository.
"""

import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from service_school.app.persistence.postgres import SchoolRepository


@pytest.fixture
def conn():
    """Mock asyncpg connection."""
    connection = AsyncMock()
    connection.transaction = MagicMock()
    connection.transaction.return_value.__aenter__.return_value = None
    connection.transaction.return_value.__aexit__.return_value = False
    return connection


@pytest.fixture
def repository(conn):
    """SchoolRepository with a mock pool."""
    repo = SchoolRepository("postgresql://localhost:5432/test")
    pool = MagicMock()
    pool.acquire.return_value.__aenter__.return_value = conn
    pool.acquire.return_value.__aexit__.return_value = False
    repo.pool = pool
    return repo


class TestSchoolRepository:
    """Test cases for SchoolRepository."""

    @pytest.mark.asyncio
    async def test_create_tables_installs_trigger(self, repository, conn):
        await repository.create_tables()

        statements = " ".join(call.args[0] for call in conn.execute.await_args_list)
        assert "CREATE TABLE IF NOT EXISTS students" in statements
        assert "CREATE TABLE IF NOT EXISTS grades" in statements
        assert "CREATE TRIGGER grades_refresh_gpa" in statements
        assert "AVG(grade)" in statements

    @pytest.mark.asyncio
    async def test_get_student_converts_decimal_gpa(self, repository, conn):
        conn.fetchrow.return_value = {"student_id": 1, "student_name": "Ada", "gpa": Decimal("3.25")}

        student = await repository.get_student(1)

        assert student.gpa == 3.25

    @pytest.mark.asyncio
    async def test_get_missing_grade(self, repository, conn):
        conn.fetchrow.return_value = None

        assert await repository.get_grade(42) is None

    @pytest.mark.asyncio
    async def test_update_grade_builds_partial_update(self, repository, conn):
        conn.fetchrow.return_value = {
            "grade_id": 5, "student_id": 1, "course_name": "Physics", "grade": Decimal("3.5")
        }

        grade = await repository.update_grade(5, {"grade": Decimal("3.5"), "course_name": "Physics"})

        query, *args = conn.fetchrow.await_args.args
        assert query == "UPDATE grades SET course_name = $2, grade = $3 WHERE grade_id = $1 RETURNING *"
        assert args == [5, "Physics", Decimal("3.5")]
        assert grade.course_name == "Physics"

    @pytest.mark.asyncio
    async def test_update_grade_without_fields_reads_current(self, repository, conn):
        conn.fetchrow.return_value = {
            "grade_id": 5, "student_id": 1, "course_name": "Math", "grade": Decimal("2.0")
        }

        grade = await repository.update_grade(5, {"unknown": "x"})

        assert "SELECT" in conn.fetchrow.await_args.args[0]
        assert grade.grade == 2.0

    @pytest.mark.asyncio
    async def test_update_missing_grade(self, repository, conn):
        conn.fetchrow.return_value = None

        assert await repository.update_grade(99, {"grade": Decimal("1.0")}) is None
