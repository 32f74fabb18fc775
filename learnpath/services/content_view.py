"""
Read access to course structure under one of two visibility tiers.

The canonical view (include_unpublished=True) sees every course, module and
lesson; the learner-facing view only sees published content whose parents are
published too. The aggregator, the access gate and the viewer all read through
this class so the two tiers cannot drift apart.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session as DBSession

from learnpath.models.models import Course, Module, Lesson, Quiz
from learnpath.utils.errors import AccessDeniedError
from learnpath.utils.permissions import Action, PermissionSet, is_allowed


class ContentView:
    def __init__(self, db: DBSession, include_unpublished: bool = False):
        self.db = db
        self.include_unpublished = include_unpublished

    @classmethod
    def canonical(cls, db: DBSession) -> ContentView:
        return cls(db, include_unpublished=True)

    @classmethod
    def for_user(cls, db: DBSession, permissions: PermissionSet, preview: bool = False) -> ContentView:
        """Learner view, or the canonical view when preview is requested and allowed."""
        if preview and not is_allowed(permissions, Action.PREVIEW_CONTENT):
            raise AccessDeniedError("Preview requires course authoring permissions")
        return cls(db, include_unpublished=preview)

    # ----- visibility -----

    def course_visible(self, course: Course) -> bool:
        return self.include_unpublished or bool(course.is_published)

    def module_visible(self, module: Module) -> bool:
        if self.include_unpublished:
            return True
        return bool(module.is_published) and self.course_visible(module.course)

    def lesson_visible(self, lesson: Lesson) -> bool:
        if self.include_unpublished:
            return True
        return bool(lesson.is_published) and self.module_visible(lesson.module)

    # ----- single entities -----

    def get_course(self, course_id: str) -> Optional[Course]:
        course = self.db.query(Course).filter(Course.id == course_id).first()
        if course is None or not self.course_visible(course):
            return None
        return course

    def get_module(self, module_id: str) -> Optional[Module]:
        module = self.db.query(Module).filter(Module.id == module_id).first()
        if module is None or not self.module_visible(module):
            return None
        return module

    def get_lesson(self, lesson_id: str) -> Optional[Lesson]:
        lesson = self.db.query(Lesson).filter(Lesson.id == lesson_id).first()
        if lesson is None or not self.lesson_visible(lesson):
            return None
        return lesson

    def get_quiz(self, quiz_id: str) -> Optional[Quiz]:
        """A quiz is visible when the unit it is attached to is visible."""
        quiz = self.db.query(Quiz).filter(Quiz.id == quiz_id).first()
        if quiz is None:
            return None
        owner_visible = (
            self.lesson_visible(quiz.lesson) if quiz.lesson_id is not None else self.module_visible(quiz.module)
        )
        return quiz if owner_visible else None

    # ----- ordered listings -----

    def modules(self, course_id: str) -> list[Module]:
        q = self.db.query(Module).filter(Module.course_id == course_id)
        if not self.include_unpublished:
            q = q.filter(Module.is_published.is_(True))
        return q.order_by(Module.order_index.asc()).all()

    def lessons(self, module_id: str) -> list[Lesson]:
        q = self.db.query(Lesson).filter(Lesson.module_id == module_id)
        if not self.include_unpublished:
            q = q.filter(Lesson.is_published.is_(True))
        return q.order_by(Lesson.order_index.asc()).all()

    def course_lessons(self, course_id: str) -> list[Lesson]:
        """Every lesson of every module of the course that this view can see."""
        q = self.db.query(Lesson).join(Module, Lesson.module_id == Module.id).filter(Module.course_id == course_id)
        if not self.include_unpublished:
            q = q.filter(Module.is_published.is_(True), Lesson.is_published.is_(True))
        return q.order_by(Module.order_index.asc(), Lesson.order_index.asc()).all()

    def previous_module(self, module: Module) -> Optional[Module]:
        q = self.db.query(Module).filter(
            Module.course_id == module.course_id,
            Module.order_index < module.order_index,
        )
        if not self.include_unpublished:
            q = q.filter(Module.is_published.is_(True))
        return q.order_by(Module.order_index.desc()).first()

    def previous_lesson(self, lesson: Lesson) -> Optional[Lesson]:
        q = self.db.query(Lesson).filter(
            Lesson.module_id == lesson.module_id,
            Lesson.order_index < lesson.order_index,
        )
        if not self.include_unpublished:
            q = q.filter(Lesson.is_published.is_(True))
        return q.order_by(Lesson.order_index.desc()).first()

    # ----- gate quizzes -----

    def lesson_quiz(self, lesson_id: str) -> Optional[Quiz]:
        return self.db.query(Quiz).filter(Quiz.lesson_id == lesson_id, Quiz.kind == "lesson_quiz").first()

    def module_test(self, module_id: str) -> Optional[Quiz]:
        return self.db.query(Quiz).filter(Quiz.module_id == module_id, Quiz.kind == "module_test").first()
