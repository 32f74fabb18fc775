"""
Authoring endpoints for courses, modules, lessons, quizzes and questions.

All routes require the author_content action; reads here use the canonical
view, so unpublished drafts are visible.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from learnpath.config import get_db
from learnpath.routes.responses import (
    course_progress_response,
    course_response,
    lesson_content_response,
    lesson_response,
    module_response,
    question_response,
    quiz_response,
)
from learnpath.schemas.course_schemas import (
    CourseListResponse,
    CourseResponse,
    CreateCourseRequest,
    CreateLessonRequest,
    CreateModuleRequest,
    LessonContentResponse,
    LessonResponse,
    ModuleResponse,
    UpdateCourseRequest,
    UpdateLessonRequest,
    UpdateModuleRequest,
)
from learnpath.schemas.progress_schemas import CourseProgressResponse
from learnpath.schemas.quiz_schemas import (
    AuthoringQuestionResponse,
    AuthoringQuizResponse,
    CreateQuestionRequest,
    CreateQuizRequest,
    UpdateQuizRequest,
)
from learnpath.services.authoring_service import LESSON_QUIZ, MODULE_TEST, AuthoringService
from learnpath.services.content_view import ContentView
from learnpath.services.progress_service import ProgressService
from learnpath.utils.auth import get_permissions
from learnpath.utils.permissions import Action, PermissionSet, require

authoring_routes = APIRouter(prefix="/admin")


def require_author(permissions: PermissionSet = Depends(get_permissions)) -> PermissionSet:
    require(permissions, Action.AUTHOR_CONTENT)
    return permissions


# ----- courses -----

@authoring_routes.get("/courses", response_model=CourseListResponse)
async def list_courses(_: PermissionSet = Depends(require_author), db: Session = Depends(get_db)) -> CourseListResponse:
    """Every course, drafts included."""
    return CourseListResponse(courses=[course_response(c) for c in AuthoringService(db).list_courses()])


@authoring_routes.post("/courses", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
async def create_course(
    request: CreateCourseRequest,
    _: PermissionSet = Depends(require_author),
    db: Session = Depends(get_db),
) -> CourseResponse:
    fields = request.model_dump(mode="json", exclude={"title"})
    return course_response(AuthoringService(db).create_course(request.title, **fields))


@authoring_routes.patch("/courses/{course_id}", response_model=CourseResponse)
async def update_course(
    course_id: str,
    request: UpdateCourseRequest,
    _: PermissionSet = Depends(require_author),
    db: Session = Depends(get_db),
) -> CourseResponse:
    updates = request.model_dump(mode="json", exclude_unset=True)
    return course_response(AuthoringService(db).update_course(course_id, updates))


@authoring_routes.delete("/courses/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_course(course_id: str, _: PermissionSet = Depends(require_author), db: Session = Depends(get_db)) -> None:
    """Deletes the course with its modules, lessons, quizzes, progress and enrollments."""
    AuthoringService(db).delete_course(course_id)


@authoring_routes.get("/courses/{course_id}/modules", response_model=list[ModuleResponse])
async def list_modules(course_id: str, _: PermissionSet = Depends(require_author), db: Session = Depends(get_db)) -> list[ModuleResponse]:
    AuthoringService(db).get_course(course_id)
    return [module_response(m) for m in ContentView.canonical(db).modules(course_id)]


@authoring_routes.get(
    "/courses/{course_id}/learners/{user_id}/progress",
    response_model=CourseProgressResponse,
)
async def get_learner_progress(
    course_id: str,
    user_id: int,
    _: PermissionSet = Depends(require_author),
    db: Session = Depends(get_db),
) -> CourseProgressResponse:
    """Canonical progress of one learner: unpublished lessons count."""
    result = ProgressService(db).get_course_progress(user_id, course_id)
    return course_progress_response(course_id, result)


# ----- modules -----

@authoring_routes.post("/courses/{course_id}/modules", response_model=ModuleResponse, status_code=status.HTTP_201_CREATED)
async def create_module(
    course_id: str,
    request: CreateModuleRequest,
    _: PermissionSet = Depends(require_author),
    db: Session = Depends(get_db),
) -> ModuleResponse:
    fields = request.model_dump(mode="json", exclude={"title", "order_index"})
    module = AuthoringService(db).create_module(course_id, request.title, request.order_index, **fields)
    return module_response(module)


@authoring_routes.patch("/modules/{module_id}", response_model=ModuleResponse)
async def update_module(
    module_id: str,
    request: UpdateModuleRequest,
    _: PermissionSet = Depends(require_author),
    db: Session = Depends(get_db),
) -> ModuleResponse:
    updates = request.model_dump(mode="json", exclude_unset=True)
    return module_response(AuthoringService(db).update_module(module_id, updates))


@authoring_routes.delete("/modules/{module_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_module(module_id: str, _: PermissionSet = Depends(require_author), db: Session = Depends(get_db)) -> None:
    AuthoringService(db).delete_module(module_id)


@authoring_routes.get("/modules/{module_id}/lessons", response_model=list[LessonResponse])
async def list_lessons(module_id: str, _: PermissionSet = Depends(require_author), db: Session = Depends(get_db)) -> list[LessonResponse]:
    AuthoringService(db).get_module(module_id)
    return [lesson_response(lesson) for lesson in ContentView.canonical(db).lessons(module_id)]


# ----- lessons -----

@authoring_routes.post("/modules/{module_id}/lessons", response_model=LessonContentResponse, status_code=status.HTTP_201_CREATED)
async def create_lesson(
    module_id: str,
    request: CreateLessonRequest,
    _: PermissionSet = Depends(require_author),
    db: Session = Depends(get_db),
) -> LessonContentResponse:
    fields = request.model_dump(mode="json", exclude={"title", "order_index"})
    lesson = AuthoringService(db).create_lesson(module_id, request.title, request.order_index, **fields)
    return lesson_content_response(lesson)


@authoring_routes.patch("/lessons/{lesson_id}", response_model=LessonContentResponse)
async def update_lesson(
    lesson_id: str,
    request: UpdateLessonRequest,
    _: PermissionSet = Depends(require_author),
    db: Session = Depends(get_db),
) -> LessonContentResponse:
    updates = request.model_dump(mode="json", exclude_unset=True)
    return lesson_content_response(AuthoringService(db).update_lesson(lesson_id, updates))


@authoring_routes.delete("/lessons/{lesson_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_lesson(lesson_id: str, _: PermissionSet = Depends(require_author), db: Session = Depends(get_db)) -> None:
    """Progress rows and the lesson quiz go with it; past attempts are kept."""
    AuthoringService(db).delete_lesson(lesson_id)


# ----- quizzes -----

@authoring_routes.post("/lessons/{lesson_id}/quiz", response_model=AuthoringQuizResponse, status_code=status.HTTP_201_CREATED)
async def attach_lesson_quiz(
    lesson_id: str,
    request: CreateQuizRequest,
    _: PermissionSet = Depends(require_author),
    db: Session = Depends(get_db),
) -> AuthoringQuizResponse:
    quiz = AuthoringService(db).attach_quiz(
        LESSON_QUIZ, lesson_id, request.title, passing_score=request.passing_score, description=request.description
    )
    return quiz_response(quiz, with_answers=True)


@authoring_routes.post("/modules/{module_id}/test", response_model=AuthoringQuizResponse, status_code=status.HTTP_201_CREATED)
async def attach_module_test(
    module_id: str,
    request: CreateQuizRequest,
    _: PermissionSet = Depends(require_author),
    db: Session = Depends(get_db),
) -> AuthoringQuizResponse:
    quiz = AuthoringService(db).attach_quiz(
        MODULE_TEST, module_id, request.title, passing_score=request.passing_score, description=request.description
    )
    return quiz_response(quiz, with_answers=True)


@authoring_routes.get("/quizzes/{quiz_id}", response_model=AuthoringQuizResponse)
async def get_quiz(quiz_id: str, _: PermissionSet = Depends(require_author), db: Session = Depends(get_db)) -> AuthoringQuizResponse:
    """Quiz with correct answers."""
    return quiz_response(AuthoringService(db).get_quiz(quiz_id), with_answers=True)


@authoring_routes.patch("/quizzes/{quiz_id}", response_model=AuthoringQuizResponse)
async def update_quiz(
    quiz_id: str,
    request: UpdateQuizRequest,
    _: PermissionSet = Depends(require_author),
    db: Session = Depends(get_db),
) -> AuthoringQuizResponse:
    updates = request.model_dump(mode="json", exclude_unset=True)
    return quiz_response(AuthoringService(db).update_quiz(quiz_id, updates), with_answers=True)


@authoring_routes.delete("/quizzes/{quiz_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_quiz(quiz_id: str, _: PermissionSet = Depends(require_author), db: Session = Depends(get_db)) -> None:
    AuthoringService(db).delete_quiz(quiz_id)


@authoring_routes.post(
    "/quizzes/{quiz_id}/questions",
    response_model=AuthoringQuestionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_question(
    quiz_id: str,
    request: CreateQuestionRequest,
    _: PermissionSet = Depends(require_author),
    db: Session = Depends(get_db),
) -> AuthoringQuestionResponse:
    q = AuthoringService(db).add_question(
        quiz_id,
        request.question,
        request.correct_answers,
        options=request.options,
        points=request.points,
        question_type=request.question_type.value,
        order_index=request.order_index,
    )
    return question_response(q, with_answers=True)


@authoring_routes.delete("/questions/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_question(question_id: str, _: PermissionSet = Depends(require_author), db: Session = Depends(get_db)) -> None:
    AuthoringService(db).delete_question(question_id)
