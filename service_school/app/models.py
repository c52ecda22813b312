"""
Student and grade data models for the School Service.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class Student(BaseModel):
    """A row of the students table."""
    student_id: int = Field(..., description="Student ID")
    student_name: str = Field(..., description="Student name")
    gpa: Optional[float] = Field(None, description="Average of the student's grades")


class StudentCreateRequest(BaseModel):
    """Request model for student creation."""
    student_name: str = Field(..., min_length=1, max_length=255, description="Student name")
    gpa: Optional[Decimal] = Field(None, ge=0, max_digits=3, decimal_places=2, description="Initial GPA")


class Grade(BaseModel):
    """A row of the grades table."""
    grade_id: int = Field(..., description="Grade ID")
    student_id: int = Field(..., description="Student the grade belongs to")
    course_name: str = Field(..., description="Course name")
    grade: float = Field(..., description="Grade on a 0-4 scale")


class GradeCreateRequest(BaseModel):
    """Request model for grade creation."""
    student_id: int = Field(..., description="Student the grade belongs to")
    course_name: str = Field(..., min_length=1, max_length=255, description="Course name")
    grade: Decimal = Field(..., ge=0, le=4, max_digits=2, decimal_places=1, description="Grade on a 0-4 scale")


class GradeUpdateRequest(BaseModel):
    """Request model for grade update. Omitted fields are left unchanged."""
    student_id: Optional[int] = Field(None, description="Student the grade belongs to")
    course_name: Optional[str] = Field(None, min_length=1, max_length=255, description="Course name")
    grade: Optional[Decimal] = Field(None, ge=0, le=4, max_digits=2, decimal_places=1, description="Grade on a 0-4 scale")
