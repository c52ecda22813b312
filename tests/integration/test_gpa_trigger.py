"""
Integration tests for the students.gpa trigger.

Runs against the PostgreSQL database named by CRUD_POSTGRES_DSN. The
school tables are dropped and recreated, so point it at a scratch database.
"""

import os
from contextlib import asynccontextmanager
from decimal import Decimal

import pytest

from service_school.app.persistence.postgres import SchoolRepository

POSTGRES_DSN = os.getenv("CRUD_POSTGRES_DSN")

pytestmark = pytest.mark.skipif(not POSTGRES_DSN, reason="CRUD_POSTGRES_DSN is not set")


@asynccontextmanager
async def school_repository():
    """Repository over a freshly created schema."""
    repository = SchoolRepository(POSTGRES_DSN, min_size=1, max_size=2)
    await repository.start(reset_schema=True)
    try:
        yield repository
    finally:
        await repository.drop_tables()
        await repository.stop()


async def _gpa(repository, student_id):
    student = await repository.get_student(student_id)
    return student.gpa


async def _delete_grade(repository, grade_id):
    async with repository.connection("delete_grade") as conn:
        await conn.execute("DELETE FROM grades WHERE grade_id = $1", grade_id)


class TestGpaTrigger:
    """students.gpa follows the average of the student's grades."""

    @pytest.mark.asyncio
    async def test_insert_recomputes_rounded_average(self):
        async with school_repository() as repository:
            ann = await repository.create_student("Ann")
            assert ann.gpa is None

            await repository.create_grade(ann.student_id, "Math", Decimal("3.7"))
            assert await _gpa(repository, ann.student_id) == 3.7

            await repository.create_grade(ann.student_id, "Physics", Decimal("3.3"))
            await repository.create_grade(ann.student_id, "Art", Decimal("4.0"))
            # 11.0 / 3 rounded to two places
            assert await _gpa(repository, ann.student_id) == 3.67

    @pytest.mark.asyncio
    async def test_update_of_grade_value(self):
        async with school_repository() as repository:
            ann = await repository.create_student("Ann")
            math = await repository.create_grade(ann.student_id, "Math", Decimal("3.7"))
            await repository.create_grade(ann.student_id, "Physics", Decimal("3.3"))

            await repository.update_grade(math.grade_id, {"grade": Decimal("2.9")})

            assert await _gpa(repository, ann.student_id) == 3.1

    @pytest.mark.asyncio
    async def test_moving_grade_recomputes_both_students(self):
        async with school_repository() as repository:
            ann = await repository.create_student("Ann")
            bob = await repository.create_student("Bob")
            await repository.create_grade(ann.student_id, "Math", Decimal("3.7"))
            await repository.create_grade(ann.student_id, "Physics", Decimal("3.3"))
            art = await repository.create_grade(ann.student_id, "Art", Decimal("4.0"))

            moved = await repository.update_grade(art.grade_id, {"student_id": bob.student_id})

            assert moved.student_id == bob.student_id
            assert await _gpa(repository, ann.student_id) == 3.5
            assert await _gpa(repository, bob.student_id) == 4.0

    @pytest.mark.asyncio
    async def test_deleting_last_grade_clears_gpa(self):
        async with school_repository() as repository:
            ann = await repository.create_student("Ann")
            math = await repository.create_grade(ann.student_id, "Math", Decimal("3.7"))
            physics = await repository.create_grade(ann.student_id, "Physics", Decimal("3.3"))

            await _delete_grade(repository, math.grade_id)
            assert await _gpa(repository, ann.student_id) == 3.3

            await _delete_grade(repository, physics.grade_id)
            assert await _gpa(repository, ann.student_id) is None

    @pytest.mark.asyncio
    async def test_grades_of_other_students_are_untouched(self):
        async with school_repository() as repository:
            ann = await repository.create_student("Ann", Decimal("2.50"))
            bob = await repository.create_student("Bob")

            await repository.create_grade(bob.student_id, "Math", Decimal("3.0"))

            assert await _gpa(repository, ann.student_id) == 2.5
            assert await _gpa(repository, bob.student_id) == 3.0
