"""
ORM entity -> response schema builders shared by the routers.
"""

from learnpath.models.models import Course, Enrollment, Lesson, LessonProgress, Module, Quiz, QuizAttempt, QuizQuestion
from learnpath.schemas.course_schemas import CourseResponse, LessonContentResponse, LessonResponse, ModuleResponse
from learnpath.schemas.progress_schemas import CourseProgressResponse, EnrollmentResponse, LessonProgressResponse
from learnpath.schemas.quiz_schemas import (
    AttemptResponse,
    AuthoringQuestionResponse,
    AuthoringQuizResponse,
    QuestionResponse,
    QuizResponse,
)
from learnpath.services.progress_service import CourseProgress
from learnpath.utils.common import iso_format


def course_response(c: Course) -> CourseResponse:
    return CourseResponse(
        id=c.id,
        title=c.title,
        description=c.description,
        category=c.category,
        level=c.level,
        is_free=bool(c.is_free),
        is_premium=bool(c.is_premium),
        is_published=bool(c.is_published),
        student_count=int(c.student_count or 0),
        created_at=iso_format(c.created_at),
    )


def module_response(m: Module) -> ModuleResponse:
    return ModuleResponse(
        id=m.id,
        course_id=m.course_id,
        title=m.title,
        description=m.description,
        order_index=m.order_index,
        is_published=bool(m.is_published),
        has_test=m.test is not None,
    )


def lesson_response(lesson: Lesson) -> LessonResponse:
    return LessonResponse(
        id=lesson.id,
        module_id=lesson.module_id,
        title=lesson.title,
        description=lesson.description,
        content_type=lesson.content_type,
        order_index=lesson.order_index,
        is_published=bool(lesson.is_published),
        duration_minutes=lesson.duration_minutes,
        has_quiz=lesson.quiz is not None,
    )


def lesson_content_response(lesson: Lesson) -> LessonContentResponse:
    return LessonContentResponse(
        **lesson_response(lesson).model_dump(),
        content=lesson.content,
        video_url=lesson.video_url,
        quiz_id=lesson.quiz.id if lesson.quiz is not None else None,
    )


def question_response(q: QuizQuestion, with_answers: bool = False) -> QuestionResponse:
    data = dict(
        id=q.id,
        question=q.question,
        question_type=q.question_type,
        options=q.options,
        points=int(q.points),
        order_index=q.order_index,
    )
    if with_answers:
        return AuthoringQuestionResponse(**data, correct_answers=list(q.correct_answers or []))
    return QuestionResponse(**data)


def quiz_response(quiz: Quiz, with_answers: bool = False) -> QuizResponse:
    model = AuthoringQuizResponse if with_answers else QuizResponse
    return model(
        id=quiz.id,
        kind=quiz.kind,
        lesson_id=quiz.lesson_id,
        module_id=quiz.module_id,
        title=quiz.title,
        description=quiz.description,
        passing_score=int(quiz.passing_score),
        questions=[question_response(q, with_answers) for q in quiz.questions],
    )


def attempt_response(a: QuizAttempt) -> AttemptResponse:
    return AttemptResponse(
        id=a.id,
        quiz_id=a.quiz_id,
        score=int(a.score),
        earned_points=int(a.earned_points),
        total_points=int(a.total_points),
        passed=bool(a.passed),
        attempt_number=int(a.attempt_number),
        started_at=iso_format(a.started_at),
        completed_at=iso_format(a.completed_at),
    )


def lesson_progress_response(p: LessonProgress) -> LessonProgressResponse:
    return LessonProgressResponse(
        lesson_id=p.lesson_id,
        is_completed=bool(p.is_completed),
        completed_at=iso_format(p.completed_at),
        updated_at=iso_format(p.updated_at),
    )


def course_progress_response(course_id: str, p: CourseProgress) -> CourseProgressResponse:
    return CourseProgressResponse(
        course_id=course_id,
        progress=p.progress,
        completed=p.completed,
        completed_lessons=p.completed_lessons,
        total_lessons=p.total_lessons,
    )


def enrollment_response(e: Enrollment) -> EnrollmentResponse:
    return EnrollmentResponse(
        id=e.id,
        course_id=e.course_id,
        progress=int(e.progress or 0),
        completed=bool(e.completed),
        enrolled_at=iso_format(e.enrolled_at),
        completed_at=iso_format(e.completed_at),
    )
