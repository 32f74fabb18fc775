"""
Course catalog, viewer, enrollment and course progress endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from learnpath.config import get_db
from learnpath.models.models import Course
from learnpath.routes.responses import course_progress_response, course_response, enrollment_response
from learnpath.schemas.course_schemas import (
    CourseListResponse,
    CourseResponse,
    CourseViewerResponse,
    ViewerLesson,
    ViewerModule,
)
from learnpath.schemas.progress_schemas import (
    CourseAccessResponse,
    CourseProgressResponse,
    EnrollmentListResponse,
    EnrollmentResponse,
)
from learnpath.schemas.user_schemas import User
from learnpath.services.access_gate import AccessGate
from learnpath.services.content_view import ContentView
from learnpath.services.enrollment_service import EnrollmentService
from learnpath.services.progress_service import ProgressService
from learnpath.utils.auth import get_current_user, get_permissions
from learnpath.utils.errors import NotFoundError
from learnpath.utils.permissions import PermissionSet

course_routes = APIRouter()


@course_routes.get("/courses", response_model=CourseListResponse)
async def list_courses(
    category: Optional[str] = Query(None, description="Filter by category"),
    free: Optional[bool] = Query(None, description="Only free (true) or only paid (false) courses"),
    premium: Optional[bool] = Query(None, description="Filter on the premium flag"),
    db: Session = Depends(get_db),
) -> CourseListResponse:
    """Published course catalog, newest first."""
    q = db.query(Course).filter(Course.is_published.is_(True))
    if category:
        q = q.filter(Course.category == category)
    if free is not None:
        q = q.filter(Course.is_free.is_(free))
    if premium is not None:
        q = q.filter(Course.is_premium.is_(premium))
    courses = q.order_by(Course.created_at.desc()).all()
    return CourseListResponse(courses=[course_response(c) for c in courses])


@course_routes.get("/courses/{course_id}", response_model=CourseResponse)
async def get_course(course_id: str, db: Session = Depends(get_db)) -> CourseResponse:
    course = ContentView(db).get_course(course_id)
    if course is None:
        raise NotFoundError("Course", course_id)
    return course_response(course)


@course_routes.get("/courses/{course_id}/viewer", response_model=CourseViewerResponse)
async def get_course_viewer(
    course_id: str,
    preview: bool = Query(False, description="Include unpublished content (authors only)"),
    current_user: User = Depends(get_current_user),
    permissions: PermissionSet = Depends(get_permissions),
    db: Session = Depends(get_db),
) -> CourseViewerResponse:
    """
    Course outline for the current user: modules and lessons in order, each with
    its lock state, completion flag and gate quiz id.
    """
    view = ContentView.for_user(db, permissions, preview)
    course = view.get_course(course_id)
    if course is None:
        raise NotFoundError("Course", course_id)

    progress_service = ProgressService(db)
    done = progress_service.completed_lesson_ids(current_user.id)
    summary = progress_service.get_course_progress(current_user.id, course_id, view)
    modules: list[ViewerModule] = []
    for entry in AccessGate(db, view).course_map(current_user.id, course_id):
        m = entry.module
        modules.append(
            ViewerModule(
                id=m.id,
                title=m.title,
                order_index=m.order_index,
                is_published=bool(m.is_published),
                accessible=entry.accessible,
                test_id=m.test.id if m.test is not None else None,
                lessons=[
                    ViewerLesson(
                        id=lesson.id,
                        title=lesson.title,
                        content_type=lesson.content_type,
                        order_index=lesson.order_index,
                        is_published=bool(lesson.is_published),
                        accessible=accessible,
                        completed=lesson.id in done,
                        quiz_id=lesson.quiz.id if lesson.quiz is not None else None,
                    )
                    for lesson, accessible in entry.lessons
                ],
            )
        )
    return CourseViewerResponse(
        course=course_response(course),
        preview=preview,
        progress=summary.progress,
        completed=summary.completed,
        modules=modules,
    )


@course_routes.get("/courses/{course_id}/access", response_model=CourseAccessResponse)
async def get_course_access(
    course_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CourseAccessResponse:
    """Whether the user may study the course (free, or enrolled)."""
    has_access = EnrollmentService(db).has_course_access(current_user.id, course_id)
    return CourseAccessResponse(course_id=course_id, has_access=has_access)


@course_routes.post("/courses/{course_id}/enroll", response_model=EnrollmentResponse)
async def enroll(
    course_id: str,
    current_user: User = Depends(get_current_user),
    permissions: PermissionSet = Depends(get_permissions),
    db: Session = Depends(get_db),
) -> EnrollmentResponse:
    enrollment = EnrollmentService(db).enroll(current_user.id, course_id, permissions)
    enrollment = ProgressService(db).refresh_enrollment(current_user.id, course_id) or enrollment
    return enrollment_response(enrollment)


@course_routes.get("/courses/{course_id}/progress", response_model=CourseProgressResponse)
async def get_course_progress(
    course_id: str,
    preview: bool = Query(False, description="Count unpublished lessons too (authors only)"),
    current_user: User = Depends(get_current_user),
    permissions: PermissionSet = Depends(get_permissions),
    db: Session = Depends(get_db),
) -> CourseProgressResponse:
    """
    Progress as the learner sees it: only published lessons in published modules
    count. With preview, the canonical figure over all lessons.
    """
    view = ContentView.for_user(db, permissions, preview)
    result = ProgressService(db).get_course_progress(current_user.id, course_id, view)
    return course_progress_response(course_id, result)


@course_routes.get("/user/enrollments", response_model=EnrollmentListResponse)
async def list_enrollments(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> EnrollmentListResponse:
    """Enrollments, each with its cached progress refreshed first."""
    progress_service = ProgressService(db)
    enrollments = [
        progress_service.refresh_enrollment(current_user.id, e.course_id) or e
        for e in EnrollmentService(db).list_enrollments(current_user.id)
    ]
    return EnrollmentListResponse(enrollments=[enrollment_response(e) for e in enrollments])


@course_routes.get("/user/enrollments/{course_id}", response_model=EnrollmentResponse)
async def get_enrollment(
    course_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> EnrollmentResponse:
    """One enrollment, with its cached progress refreshed first."""
    enrollment = ProgressService(db).refresh_enrollment(current_user.id, course_id)
    if enrollment is None:
        raise NotFoundError("Enrollment", course_id)
    return enrollment_response(enrollment)
