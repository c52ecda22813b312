"""
PostgreSQL persistence layer for the School Service.
"""

from typing import Any, Dict, Optional

from shared.database import PostgresDatabase
from ..models import Grade, Student

# Columns a grade update may touch.
GRADE_UPDATE_COLUMNS = ("student_id", "course_name", "grade")


class SchoolRepository(PostgresDatabase):
    """Students and grades, with the GPA maintained by a trigger."""

    def __init__(self, dsn: str, min_size: int = 2, max_size: int = 10):
        super().__init__(dsn, "school.persistence.postgres", min_size=min_size, max_size=max_size)

    async def create_tables(self):
        """Create tables and the GPA trigger."""
        async with self.connection("create_tables") as conn:
            async with conn.transaction():
                await conn.execute("""
                    CREATE TABLE IF NOT EXISTS students (
                        student_id SERIAL PRIMARY KEY,
                        student_name VARCHAR(255) NOT NULL,
                        gpa DECIMAL(3, 2)
                    );
                """)
                await conn.execute("""
                    CREATE TABLE IF NOT EXISTS grades (
                        grade_id SERIAL PRIMARY KEY,
                        student_id INTEGER NOT NULL,
                        course_name VARCHAR(255) NOT NULL,
                        grade DECIMAL(2, 1) NOT NULL CHECK (grade >= 0 AND grade <= 4)
                    );
                """)
                await conn.execute("""
                    CREATE INDEX IF NOT EXISTS idx_grades_student ON grades(student_id);
                """)
                await conn.execute("""
                    CREATE OR REPLACE FUNCTION refresh_student_gpa() RETURNS TRIGGER AS $$
                    BEGIN
                        IF TG_OP IN ('UPDATE', 'DELETE') THEN
                            UPDATE students
                            SET gpa = (SELECT ROUND(AVG(grade), 2) FROM grades WHERE student_id = OLD.student_id)
                            WHERE student_id = OLD.student_id;
                        END IF;
                        IF TG_OP IN ('INSERT', 'UPDATE') THEN
                            UPDATE students
                            SET gpa = (SELECT ROUND(AVG(grade), 2) FROM grades WHERE student_id = NEW.student_id)
                            WHERE student_id = NEW.student_id;
                        END IF;
                        RETURN NULL;
                    END;
                    $$ LANGUAGE plpgsql;
                """)
                await conn.execute("""
                    DROP TRIGGER IF EXISTS grades_refresh_gpa ON grades;
                """)
                await conn.execute("""
                    CREATE TRIGGER grades_refresh_gpa
                    AFTER INSERT OR UPDATE OR DELETE ON grades
                    FOR EACH ROW EXECUTE FUNCTION refresh_student_gpa();
                """)

    async def drop_tables(self):
        """Drop tables and the GPA trigger function."""
        async with self.connection("drop_tables") as conn:
            await conn.execute("DROP TABLE IF EXISTS grades")
            await conn.execute("DROP TABLE IF EXISTS students")
            await conn.execute("DROP FUNCTION IF EXISTS refresh_student_gpa()")

    async def create_student(self, student_name: str, gpa=None) -> Student:
        """Insert a student."""
        async with self.connection("create_student") as conn:
            row = await conn.fetchrow("""
                INSERT INTO students (student_name, gpa)
                VALUES ($1, $2)
                RETURNING *
            """, student_name, gpa)

        self.logger.info("Student created", student_id=row['student_id'])
        return self._row_to_student(row)

    async def get_student(self, student_id: int) -> Optional[Student]:
        """Load a student by ID."""
        async with self.connection("get_student") as conn:
            row = await conn.fetchrow("""
                SELECT * FROM students WHERE student_id = $1
            """, student_id)
            return self._row_to_student(row) if row else None

    async def create_grade(self, student_id: int, course_name: str, grade) -> Grade:
        """Insert a grade. The trigger refreshes the student's GPA."""
        async with self.connection("create_grade") as conn:
            row = await conn.fetchrow("""
                INSERT INTO grades (student_id, course_name, grade)
                VALUES ($1, $2, $3)
                RETURNING *
            """, student_id, course_name, grade)

        self.logger.info("Grade created", grade_id=row['grade_id'], student_id=student_id)
        return self._row_to_grade(row)

    async def get_grade(self, grade_id: int) -> Optional[Grade]:
        """Load a grade by ID."""
        async with self.connection("get_grade") as conn:
            row = await conn.fetchrow("""
                SELECT * FROM grades WHERE grade_id = $1
            """, grade_id)
            return self._row_to_grade(row) if row else None

    async def update_grade(self, grade_id: int, fields: Dict[str, Any]) -> Optional[Grade]:
        """Apply a partial update. Returns None when no such grade exists."""
        columns = [column for column in GRADE_UPDATE_COLUMNS if column in fields]
        if not columns:
            return await self.get_grade(grade_id)

        assignments = ", ".join(f"{column} = ${index}" for index, column in enumerate(columns, start=2))
        values = [fields[column] for column in columns]

        async with self.connection("update_grade") as conn:
            row = await conn.fetchrow(
                f"UPDATE grades SET {assignments} WHERE grade_id = $1 RETURNING *",
                grade_id, *values
            )

        if not row:
            self.logger.warning("Grade not found for update", grade_id=grade_id)
            return None

        self.logger.info("Grade updated", grade_id=grade_id, fields=columns)
        return self._row_to_grade(row)

    def _row_to_student(self, row) -> Student:
        """Convert database row to Student object."""
        return Student(
            student_id=row['student_id'],
            student_name=row['student_name'],
            gpa=row['gpa']
        )

    def _row_to_grade(self, row) -> Grade:
        """Convert database row to Grade object."""
        return Grade(
            grade_id=row['grade_id'],
            student_id=row['student_id'],
            course_name=row['course_name'],
            grade=row['grade']
        )
