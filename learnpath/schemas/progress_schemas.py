"""
Learner progress schemas: lesson completion, course progress, enrollments and access checks.
"""

from pydantic import BaseModel, StrictBool
from typing import Optional


class LessonProgressRequest(BaseModel):
    is_completed: StrictBool


class LessonProgressResponse(BaseModel):
    lesson_id: str
    is_completed: bool
    completed_at: Optional[str] = None
    updated_at: str


class CourseProgressResponse(BaseModel):
    course_id: str
    progress: int  # 0-100
    completed: bool
    completed_lessons: int
    total_lessons: int


class RecordProgressResponse(BaseModel):
    """Confirmed lesson write plus the course figure recomputed after it."""
    lesson: LessonProgressResponse
    course: CourseProgressResponse


class EnrollmentResponse(BaseModel):
    id: str
    course_id: str
    progress: int
    completed: bool
    enrolled_at: str
    completed_at: Optional[str] = None


class EnrollmentListResponse(BaseModel):
    enrollments: list[EnrollmentResponse]


class AccessResponse(BaseModel):
    unit_id: str
    accessible: bool


class CourseAccessResponse(BaseModel):
    course_id: str
    has_access: bool
