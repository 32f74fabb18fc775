"""
Learner endpoints: lesson content, lock checks, lesson completion and quiz attempts.

Every content route runs through the access gate; previewing authors read the
canonical view and bypass the course purchase check.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from learnpath.config import get_db
from learnpath.models.models import Quiz
from learnpath.routes.responses import (
    attempt_response,
    course_progress_response,
    lesson_content_response,
    lesson_progress_response,
    quiz_response,
)
from learnpath.schemas.course_schemas import LessonContentResponse
from learnpath.schemas.progress_schemas import AccessResponse, LessonProgressRequest, RecordProgressResponse
from learnpath.schemas.quiz_schemas import AttemptListResponse, AttemptResponse, QuizResponse, SubmitAttemptRequest
from learnpath.schemas.user_schemas import User
from learnpath.services.access_gate import AccessGate
from learnpath.services.content_view import ContentView
from learnpath.services.enrollment_service import EnrollmentService
from learnpath.services.progress_service import ProgressService
from learnpath.services.quiz_service import QuizAttemptTracker
from learnpath.utils.auth import get_current_user, get_permissions
from learnpath.utils.errors import AccessDeniedError, NotFoundError
from learnpath.utils.logger import configure_logging
from learnpath.utils.permissions import Action, PermissionSet, is_allowed

logger = configure_logging()

learning_routes = APIRouter()


def _require_course_access(db: Session, user_id: int, course_id: str, permissions: PermissionSet) -> None:
    if is_allowed(permissions, Action.PREVIEW_CONTENT):
        return
    if not EnrollmentService(db).has_course_access(user_id, course_id):
        logger.info("course access denied user_id=%s course_id=%s", user_id, course_id)
        raise AccessDeniedError("Enroll in this course to access its content")


def _quiz_course_id(quiz: Quiz) -> str:
    if quiz.lesson_id is not None:
        return quiz.lesson.module.course_id
    return quiz.module.course_id


@learning_routes.get("/lessons/{lesson_id}", response_model=LessonContentResponse)
async def get_lesson(
    lesson_id: str,
    preview: bool = Query(False),
    current_user: User = Depends(get_current_user),
    permissions: PermissionSet = Depends(get_permissions),
    db: Session = Depends(get_db),
) -> LessonContentResponse:
    """Lesson content, served only when the lesson and its module are unlocked."""
    view = ContentView.for_user(db, permissions, preview)
    lesson = AccessGate(db, view).ensure_lesson_open(current_user.id, lesson_id)
    _require_course_access(db, current_user.id, lesson.module.course_id, permissions)
    return lesson_content_response(lesson)


@learning_routes.get("/lessons/{lesson_id}/access", response_model=AccessResponse)
async def get_lesson_access(
    lesson_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AccessResponse:
    """Lock state of a lesson; unknown or hidden lessons report as locked."""
    accessible = AccessGate(db).can_access_lesson(current_user.id, lesson_id)
    return AccessResponse(unit_id=lesson_id, accessible=accessible)


@learning_routes.get("/modules/{module_id}/access", response_model=AccessResponse)
async def get_module_access(
    module_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AccessResponse:
    accessible = AccessGate(db).can_access_module(current_user.id, module_id)
    return AccessResponse(unit_id=module_id, accessible=accessible)


@learning_routes.post("/lessons/{lesson_id}/progress", response_model=RecordProgressResponse)
async def record_lesson_progress(
    lesson_id: str,
    request: LessonProgressRequest,
    preview: bool = Query(False),
    current_user: User = Depends(get_current_user),
    permissions: PermissionSet = Depends(get_permissions),
    db: Session = Depends(get_db),
) -> RecordProgressResponse:
    """
    Mark a lesson complete or incomplete, then return the recomputed course figure
    and refresh the cached enrollment progress.
    """
    view = ContentView.for_user(db, permissions, preview)
    lesson = AccessGate(db, view).ensure_lesson_open(current_user.id, lesson_id)
    course_id = lesson.module.course_id
    _require_course_access(db, current_user.id, course_id, permissions)

    progress_service = ProgressService(db)
    row = progress_service.record_lesson_progress(current_user.id, lesson_id, request.is_completed)
    progress_service.refresh_enrollment(current_user.id, course_id)
    summary = progress_service.get_course_progress(current_user.id, course_id, view)
    return RecordProgressResponse(
        lesson=lesson_progress_response(row),
        course=course_progress_response(course_id, summary),
    )


@learning_routes.get("/quizzes/{quiz_id}", response_model=QuizResponse)
async def get_quiz(
    quiz_id: str,
    preview: bool = Query(False),
    current_user: User = Depends(get_current_user),
    permissions: PermissionSet = Depends(get_permissions),
    db: Session = Depends(get_db),
) -> QuizResponse:
    """Quiz questions without their answers."""
    view = ContentView.for_user(db, permissions, preview)
    quiz = AccessGate(db, view).ensure_quiz_open(current_user.id, quiz_id)
    _require_course_access(db, current_user.id, _quiz_course_id(quiz), permissions)
    return quiz_response(quiz)


@learning_routes.post("/quizzes/{quiz_id}/attempts", response_model=AttemptResponse)
async def submit_attempt(
    quiz_id: str,
    request: SubmitAttemptRequest,
    preview: bool = Query(False),
    current_user: User = Depends(get_current_user),
    permissions: PermissionSet = Depends(get_permissions),
    db: Session = Depends(get_db),
) -> AttemptResponse:
    """Score a submission. Each call records a new attempt; the latest one decides the gate."""
    view = ContentView.for_user(db, permissions, preview)
    quiz = AccessGate(db, view).ensure_quiz_open(current_user.id, quiz_id)
    _require_course_access(db, current_user.id, _quiz_course_id(quiz), permissions)
    attempt = QuizAttemptTracker(db).record_attempt(current_user.id, quiz_id, request.answers)
    return attempt_response(attempt)


@learning_routes.get("/quizzes/{quiz_id}/attempts/latest", response_model=Optional[AttemptResponse])
async def get_latest_attempt(
    quiz_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Optional[AttemptResponse]:
    if ContentView.canonical(db).get_quiz(quiz_id) is None:
        raise NotFoundError("Quiz", quiz_id)
    attempt = QuizAttemptTracker(db).get_latest_attempt(current_user.id, quiz_id)
    return attempt_response(attempt) if attempt is not None else None


@learning_routes.get("/quizzes/{quiz_id}/attempts", response_model=AttemptListResponse)
async def list_attempts(
    quiz_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AttemptListResponse:
    """Attempt history, newest first."""
    if ContentView.canonical(db).get_quiz(quiz_id) is None:
        raise NotFoundError("Quiz", quiz_id)
    attempts = QuizAttemptTracker(db).list_attempts(current_user.id, quiz_id)
    return AttemptListResponse(attempts=[attempt_response(a) for a in attempts])
