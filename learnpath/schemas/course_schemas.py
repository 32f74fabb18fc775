"""
Course structure schemas: catalog, viewer outline and authoring requests.
"""

from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional


class ContentType(str, Enum):
    TEXT = "text"
    VIDEO = "video"
    QUIZ = "quiz"


class CourseResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    category: str
    level: str
    is_free: bool
    is_premium: bool
    is_published: bool
    student_count: int
    created_at: str


class CourseListResponse(BaseModel):
    courses: list[CourseResponse]


class CreateCourseRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: str = "General"
    level: str = "Beginner"
    is_free: bool = False
    is_premium: bool = False
    is_published: bool = False


class UpdateCourseRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = None
    level: Optional[str] = None
    is_free: Optional[bool] = None
    is_premium: Optional[bool] = None
    is_published: Optional[bool] = None


class ModuleResponse(BaseModel):
    id: str
    course_id: str
    title: str
    description: Optional[str] = None
    order_index: int
    is_published: bool
    has_test: bool


class CreateModuleRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    order_index: Optional[int] = Field(default=None, ge=0)
    is_published: bool = False


class UpdateModuleRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    order_index: Optional[int] = Field(default=None, ge=0)
    is_published: Optional[bool] = None


class LessonResponse(BaseModel):
    id: str
    module_id: str
    title: str
    description: Optional[str] = None
    content_type: ContentType
    order_index: int
    is_published: bool
    duration_minutes: Optional[int] = None
    has_quiz: bool


class LessonContentResponse(LessonResponse):
    content: Optional[str] = None
    video_url: Optional[str] = None
    quiz_id: Optional[str] = None


class CreateLessonRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    content: Optional[str] = None
    content_type: ContentType = ContentType.TEXT
    video_url: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    order_index: Optional[int] = Field(default=None, ge=0)
    is_published: bool = False


class UpdateLessonRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    content: Optional[str] = None
    content_type: Optional[ContentType] = None
    video_url: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    order_index: Optional[int] = Field(default=None, ge=0)
    is_published: Optional[bool] = None


class ViewerLesson(BaseModel):
    id: str
    title: str
    content_type: ContentType
    order_index: int
    is_published: bool
    accessible: bool
    completed: bool
    quiz_id: Optional[str] = None


class ViewerModule(BaseModel):
    id: str
    title: str
    order_index: int
    is_published: bool
    accessible: bool
    test_id: Optional[str] = None
    lessons: list[ViewerLesson]


class CourseViewerResponse(BaseModel):
    """Course outline as the current user sees it, with lock and completion state."""
    course: CourseResponse
    preview: bool
    progress: int
    completed: bool
    modules: list[ViewerModule]
