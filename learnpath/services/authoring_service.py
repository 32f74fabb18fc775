"""
Authoring service: course structure CRUD for administrators and course creators.

Ordering positions are unique within their parent; a colliding explicit
order_index is rejected here rather than left to the database constraint.
"""

from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session as DBSession

from learnpath.models.models import Course, Module, Lesson, Quiz, QuizQuestion
from learnpath.utils.common import apply_updates, commit_or_raise, new_id
from learnpath.utils.errors import ConflictError, InvalidInputError, NotFoundError, OrderConflictError
from learnpath.utils.logger import configure_logging

logger = configure_logging()

LESSON_QUIZ = "lesson_quiz"
MODULE_TEST = "module_test"
DEFAULT_PASSING_SCORE = {LESSON_QUIZ: 80, MODULE_TEST: 70}

COURSE_FIELDS = {"title", "description", "category", "level", "is_free", "is_premium", "is_published"}
MODULE_FIELDS = {"title", "description", "order_index", "is_published"}
LESSON_FIELDS = {
    "title", "description", "content", "content_type", "video_url",
    "duration_minutes", "order_index", "is_published",
}
QUIZ_FIELDS = {"title", "description", "passing_score"}
NULLABLE_FIELDS = {"description", "content", "video_url", "duration_minutes"}


def _clean(updates: dict) -> dict:
    """Drop explicit nulls for columns that cannot be cleared."""
    return {k: v for k, v in updates.items() if v is not None or k in NULLABLE_FIELDS}


def _validate_passing_score(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 100:
        raise InvalidInputError("passing_score must be an integer between 0 and 100")
    return value


class AuthoringService:
    def __init__(self, db: DBSession):
        self.db = db

    # ----- ordering helpers -----

    def _next_order(self, column, parent_column, parent_id: str) -> int:
        current = self.db.query(func.max(column)).filter(parent_column == parent_id).scalar()
        return 0 if current is None else int(current) + 1

    def _ensure_order_free(self, model, parent_column, parent_id: str, order_index: int, scope: str, exclude_id: Optional[str] = None) -> None:
        if order_index < 0:
            raise InvalidInputError("order_index must be >= 0")
        q = self.db.query(model).filter(parent_column == parent_id, model.order_index == order_index)
        if exclude_id is not None:
            q = q.filter(model.id != exclude_id)
        if q.first() is not None:
            raise OrderConflictError(scope, order_index)

    # ----- courses -----

    def list_courses(self) -> list[Course]:
        return self.db.query(Course).order_by(Course.created_at.desc()).all()

    def get_course(self, course_id: str) -> Course:
        course = self.db.query(Course).filter(Course.id == course_id).first()
        if course is None:
            raise NotFoundError("Course", course_id)
        return course

    def create_course(self, title: str, **fields) -> Course:
        course = Course(id=new_id(), title=title)
        apply_updates(course, fields, COURSE_FIELDS - {"title"})
        self.db.add(course)
        commit_or_raise(self.db, "create course")
        self.db.refresh(course)
        logger.info("course created course_id=%s", course.id)
        return course

    def update_course(self, course_id: str, updates: dict) -> Course:
        course = self.get_course(course_id)
        changed = apply_updates(course, _clean(updates), COURSE_FIELDS)
        commit_or_raise(self.db, "update course")
        self.db.refresh(course)
        logger.info("course updated course_id=%s fields=%s", course_id, changed)
        return course

    def delete_course(self, course_id: str) -> None:
        course = self.get_course(course_id)
        self.db.delete(course)
        commit_or_raise(self.db, "delete course")
        logger.info("course deleted course_id=%s", course_id)

    # ----- modules -----

    def get_module(self, module_id: str) -> Module:
        module = self.db.query(Module).filter(Module.id == module_id).first()
        if module is None:
            raise NotFoundError("Module", module_id)
        return module

    def create_module(self, course_id: str, title: str, order_index: Optional[int] = None, **fields) -> Module:
        self.get_course(course_id)
        if order_index is None:
            order_index = self._next_order(Module.order_index, Module.course_id, course_id)
        else:
            self._ensure_order_free(Module, Module.course_id, course_id, order_index, "course")
        module = Module(id=new_id(), course_id=course_id, title=title, order_index=order_index)
        apply_updates(module, fields, MODULE_FIELDS - {"title", "order_index"})
        self.db.add(module)
        commit_or_raise(self.db, "create module")
        self.db.refresh(module)
        logger.info("module created module_id=%s course_id=%s order_index=%s", module.id, course_id, order_index)
        return module

    def update_module(self, module_id: str, updates: dict) -> Module:
        module = self.get_module(module_id)
        if updates.get("order_index") is not None:
            self._ensure_order_free(Module, Module.course_id, module.course_id, updates["order_index"], "course", exclude_id=module.id)
        apply_updates(module, _clean(updates), MODULE_FIELDS)
        commit_or_raise(self.db, "update module")
        self.db.refresh(module)
        return module

    def delete_module(self, module_id: str) -> None:
        module = self.get_module(module_id)
        self.db.delete(module)
        commit_or_raise(self.db, "delete module")
        logger.info("module deleted module_id=%s", module_id)

    # ----- lessons -----

    def get_lesson(self, lesson_id: str) -> Lesson:
        lesson = self.db.query(Lesson).filter(Lesson.id == lesson_id).first()
        if lesson is None:
            raise NotFoundError("Lesson", lesson_id)
        return lesson

    def create_lesson(self, module_id: str, title: str, order_index: Optional[int] = None, **fields) -> Lesson:
        self.get_module(module_id)
        if order_index is None:
            order_index = self._next_order(Lesson.order_index, Lesson.module_id, module_id)
        else:
            self._ensure_order_free(Lesson, Lesson.module_id, module_id, order_index, "module")
        lesson = Lesson(id=new_id(), module_id=module_id, title=title, order_index=order_index)
        apply_updates(lesson, fields, LESSON_FIELDS - {"title", "order_index"})
        self.db.add(lesson)
        commit_or_raise(self.db, "create lesson")
        self.db.refresh(lesson)
        logger.info("lesson created lesson_id=%s module_id=%s order_index=%s", lesson.id, module_id, order_index)
        return lesson

    def update_lesson(self, lesson_id: str, updates: dict) -> Lesson:
        lesson = self.get_lesson(lesson_id)
        if updates.get("order_index") is not None:
            self._ensure_order_free(Lesson, Lesson.module_id, lesson.module_id, updates["order_index"], "module", exclude_id=lesson.id)
        apply_updates(lesson, _clean(updates), LESSON_FIELDS)
        commit_or_raise(self.db, "update lesson")
        self.db.refresh(lesson)
        return lesson

    def delete_lesson(self, lesson_id: str) -> None:
        """Removes the lesson, its quiz and progress rows; quiz attempts are kept."""
        lesson = self.get_lesson(lesson_id)
        self.db.delete(lesson)
        commit_or_raise(self.db, "delete lesson")
        logger.info("lesson deleted lesson_id=%s", lesson_id)

    # ----- quizzes -----

    def get_quiz(self, quiz_id: str) -> Quiz:
        quiz = self.db.query(Quiz).filter(Quiz.id == quiz_id).first()
        if quiz is None:
            raise NotFoundError("Quiz", quiz_id)
        return quiz

    def attach_quiz(
        self,
        kind: str,
        unit_id: str,
        title: str,
        passing_score: Optional[int] = None,
        description: Optional[str] = None,
    ) -> Quiz:
        """Attach a lesson quiz to a lesson or a module test to a module (one per unit)."""
        if kind == LESSON_QUIZ:
            self.get_lesson(unit_id)
            existing = self.db.query(Quiz).filter(Quiz.lesson_id == unit_id).first()
            owner = {"lesson_id": unit_id}
        elif kind == MODULE_TEST:
            self.get_module(unit_id)
            existing = self.db.query(Quiz).filter(Quiz.module_id == unit_id).first()
            owner = {"module_id": unit_id}
        else:
            raise InvalidInputError(f"Unknown quiz kind: {kind}")
        if existing is not None:
            raise ConflictError(f"This {'lesson' if kind == LESSON_QUIZ else 'module'} already has a quiz")

        score = DEFAULT_PASSING_SCORE[kind] if passing_score is None else _validate_passing_score(passing_score)
        quiz = Quiz(id=new_id(), kind=kind, title=title, description=description, passing_score=score, **owner)
        self.db.add(quiz)
        commit_or_raise(self.db, "attach quiz")
        self.db.refresh(quiz)
        logger.info("quiz attached quiz_id=%s kind=%s unit_id=%s passing_score=%s", quiz.id, kind, unit_id, score)
        return quiz

    def update_quiz(self, quiz_id: str, updates: dict) -> Quiz:
        quiz = self.get_quiz(quiz_id)
        updates = _clean(updates)
        if "passing_score" in updates:
            _validate_passing_score(updates["passing_score"])
        apply_updates(quiz, updates, QUIZ_FIELDS)
        commit_or_raise(self.db, "update quiz")
        self.db.refresh(quiz)
        return quiz

    def delete_quiz(self, quiz_id: str) -> None:
        quiz = self.get_quiz(quiz_id)
        self.db.delete(quiz)
        commit_or_raise(self.db, "delete quiz")
        logger.info("quiz deleted quiz_id=%s", quiz_id)

    # ----- questions -----

    def add_question(
        self,
        quiz_id: str,
        question: str,
        correct_answers: list[str],
        options: Optional[list[str]] = None,
        points: int = 1,
        question_type: str = "multiple_choice",
        order_index: Optional[int] = None,
    ) -> QuizQuestion:
        self.get_quiz(quiz_id)
        if not correct_answers:
            raise InvalidInputError("A question needs at least one correct answer")
        if isinstance(points, bool) or not isinstance(points, int) or points < 1:
            raise InvalidInputError("points must be a positive integer")
        if order_index is None:
            order_index = self._next_order(QuizQuestion.order_index, QuizQuestion.quiz_id, quiz_id)
        else:
            self._ensure_order_free(QuizQuestion, QuizQuestion.quiz_id, quiz_id, order_index, "quiz")
        q = QuizQuestion(
            id=new_id(),
            quiz_id=quiz_id,
            question=question,
            question_type=question_type,
            options=options,
            correct_answers=[str(a) for a in correct_answers],
            points=points,
            order_index=order_index,
        )
        self.db.add(q)
        commit_or_raise(self.db, "add question")
        self.db.refresh(q)
        return q

    def delete_question(self, question_id: str) -> None:
        q = self.db.query(QuizQuestion).filter(QuizQuestion.id == question_id).first()
        if q is None:
            raise NotFoundError("Question", question_id)
        self.db.delete(q)
        commit_or_raise(self.db, "delete question")
