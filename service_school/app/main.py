"""
School service: students and grades over PostgreSQL.
"""

from typing import Optional

from shared.base_service import BaseService
from shared.errors import NotFoundError
from .models import (
    Student, StudentCreateRequest,
    Grade, GradeCreateRequest, GradeUpdateRequest
)
from .persistence.postgres import SchoolRepository


class SchoolService(BaseService):
    """School service implementation."""

    def __init__(self, repository: Optional[SchoolRepository] = None):
        super().__init__("school", 3000)

        self.repository = repository if repository is not None else SchoolRepository(
            self.config.postgres_dsn,
            min_size=self.config.postgres_min_pool_size,
            max_size=self.config.postgres_max_pool_size
        )

        self._setup_school_routes()

    def _setup_school_routes(self):
        """Set up student and grade routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "school",
                "message": "Students and grades",
                "version": "1.0.0"
            }

        @self.app.post("/students", response_model=Student)
        async def create_student(request: StudentCreateRequest):
            """Create a student."""
            return await self.repository.create_student(request.student_name, request.gpa)

        @self.app.get("/students/{student_id}", response_model=Student)
        async def get_student(student_id: int):
            """Get a student with the current GPA."""
            student = await self.repository.get_student(student_id)
            if student is None:
                raise NotFoundError("Student not found", {"student_id": student_id})
            return student

        @self.app.post("/grades", response_model=Grade)
        async def create_grade(request: GradeCreateRequest):
            """Record a grade for a student."""
            return await self.repository.create_grade(
                request.student_id, request.course_name, request.grade
            )

        @self.app.put("/grades/{grade_id}", response_model=Grade)
        async def update_grade(grade_id: int, request: GradeUpdateRequest):
            """Update a grade."""
            fields = request.model_dump(exclude_unset=True, exclude_none=True)
            grade = await self.repository.update_grade(grade_id, fields)
            if grade is None:
                raise NotFoundError("Grade not found", {"grade_id": grade_id})
            return grade

    async def _check_dependencies(self):
        """Check school service dependencies."""
        return {
            "postgres": "ok" if await self.repository.health_check() else "error",
        }

    async def start(self):
        """Start school service components."""
        await self.repository.start(reset_schema=self.config.reset_schema_on_start)
        self.logger.info("School service started", port=self.port)

    async def stop(self):
        """Stop school service components."""
        await self.repository.stop()
        self.logger.info("School service stopped")


def create_app():
    """Create school service application."""
    service = SchoolService()
    return service.app


def main():
    SchoolService().run()


if __name__ == "__main__":
    main()
