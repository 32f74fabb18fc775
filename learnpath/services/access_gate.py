"""
Sequential gating of lessons and modules.

A unit is open when it is first in its parent, when the unit before it has no
gate quiz, or when the learner's latest attempt on that gate quiz passed.
Nothing is persisted: every check walks the current ordering and attempts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.orm import Session as DBSession

from learnpath.models.models import Lesson, Module, Quiz
from learnpath.services.content_view import ContentView
from learnpath.services.quiz_service import QuizAttemptTracker
from learnpath.utils.errors import AccessDeniedError, NotFoundError
from learnpath.utils.logger import configure_logging

logger = configure_logging()


@dataclass
class ModuleAccess:
    module: Module
    accessible: bool
    lessons: list[tuple[Lesson, bool]] = field(default_factory=list)


class AccessGate:
    def __init__(self, db: DBSession, view: Optional[ContentView] = None):
        self.db = db
        self.view = view or ContentView(db)
        self.attempts = QuizAttemptTracker(db)

    # ----- predicates (fail closed, never raise for missing units) -----

    def can_access_lesson(self, learner_id: int, lesson_id: str) -> bool:
        lesson = self.view.get_lesson(lesson_id)
        if lesson is None:
            return False
        return self._lesson_open(learner_id, lesson)

    def can_access_module(self, learner_id: int, module_id: str) -> bool:
        module = self.view.get_module(module_id)
        if module is None:
            return False
        return self._module_open(learner_id, module)

    def _lesson_open(self, learner_id: int, lesson: Lesson) -> bool:
        prev = self.view.previous_lesson(lesson)
        if prev is None:
            return True
        return self._gate_passed(learner_id, self.view.lesson_quiz(prev.id))

    def _module_open(self, learner_id: int, module: Module) -> bool:
        prev = self.view.previous_module(module)
        if prev is None:
            return True
        return self._gate_passed(learner_id, self.view.module_test(prev.id))

    def _gate_passed(self, learner_id: int, gate_quiz: Optional[Quiz]) -> bool:
        if gate_quiz is None:
            return True
        attempt = self.attempts.get_latest_attempt(learner_id, gate_quiz.id)
        return attempt is not None and bool(attempt.passed)

    # ----- enforcement (raise for the request layer) -----

    def ensure_module_open(self, learner_id: int, module_id: str) -> Module:
        module = self.view.get_module(module_id)
        if module is None:
            raise NotFoundError("Module", module_id)
        if not self._module_open(learner_id, module):
            logger.info("module locked user_id=%s module_id=%s", learner_id, module_id)
            raise AccessDeniedError("Module is locked until the previous module test is passed")
        return module

    def ensure_lesson_open(self, learner_id: int, lesson_id: str) -> Lesson:
        """A lesson is served only when both its module and the lesson itself are open."""
        lesson = self.view.get_lesson(lesson_id)
        if lesson is None:
            raise NotFoundError("Lesson", lesson_id)
        self.ensure_module_open(learner_id, lesson.module_id)
        if not self._lesson_open(learner_id, lesson):
            logger.info("lesson locked user_id=%s lesson_id=%s", learner_id, lesson_id)
            raise AccessDeniedError("Lesson is locked until the previous lesson quiz is passed")
        return lesson

    def ensure_quiz_open(self, learner_id: int, quiz_id: str) -> Quiz:
        """A quiz may be taken once the unit it is attached to is open."""
        quiz = self.view.get_quiz(quiz_id)
        if quiz is None:
            raise NotFoundError("Quiz", quiz_id)
        if quiz.lesson_id is not None:
            self.ensure_lesson_open(learner_id, quiz.lesson_id)
        else:
            self.ensure_module_open(learner_id, quiz.module_id)
        return quiz

    # ----- viewer -----

    def course_map(self, learner_id: int, course_id: str) -> list[ModuleAccess]:
        """Per-module and per-lesson accessibility for the whole course, in order."""
        if self.view.get_course(course_id) is None:
            raise NotFoundError("Course", course_id)
        out: list[ModuleAccess] = []
        for module in self.view.modules(course_id):
            module_open = self._module_open(learner_id, module)
            entry = ModuleAccess(module=module, accessible=module_open)
            for lesson in self.view.lessons(module.id):
                entry.lessons.append((lesson, module_open and self._lesson_open(learner_id, lesson)))
            out.append(entry)
        return out
