"""
Progress ledger (per-lesson completion) and course progress aggregation.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session as DBSession

from learnpath.models.models import Enrollment, LessonProgress
from learnpath.services.content_view import ContentView
from learnpath.utils.common import commit_or_raise, new_id, round_percent
from learnpath.utils.errors import InvalidInputError, NotFoundError, PersistenceError
from learnpath.utils.logger import configure_logging, log_request

logger = configure_logging()


@dataclass(frozen=True)
class CourseProgress:
    progress: int
    completed: bool
    completed_lessons: int
    total_lessons: int


class ProgressService:
    def __init__(self, db: DBSession):
        self.db = db

    # ----- ledger -----

    def get_lesson_progress(self, learner_id: int, lesson_id: str) -> Optional[LessonProgress]:
        return (
            self.db.query(LessonProgress)
            .filter(LessonProgress.user_id == learner_id, LessonProgress.lesson_id == lesson_id)
            .first()
        )

    def record_lesson_progress(self, learner_id: int, lesson_id: str, is_completed: bool) -> LessonProgress:
        """
        Upsert the (learner, lesson) row. Completing always stamps completed_at with
        the current time; un-completing clears it. Course aggregates are not touched:
        call refresh_enrollment afterwards if the cached figure must follow.
        """
        if not isinstance(is_completed, bool):
            raise InvalidInputError("is_completed must be a boolean")

        row = self.get_lesson_progress(learner_id, lesson_id)
        if row is None:
            row = LessonProgress(id=new_id(), user_id=learner_id, lesson_id=lesson_id)
            self.db.add(row)
            self._apply(row, is_completed)
            try:
                self.db.commit()
            except IntegrityError as e:
                # A concurrent request inserted the row first; overwrite it.
                self.db.rollback()
                row = self.get_lesson_progress(learner_id, lesson_id)
                if row is None:
                    logger.exception("commit failed action=record lesson progress")
                    raise PersistenceError("Failed to record lesson progress") from e
                self._apply(row, is_completed)
                commit_or_raise(self.db, "record lesson progress")
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.exception("commit failed action=record lesson progress")
                raise PersistenceError("Failed to record lesson progress") from e
        else:
            self._apply(row, is_completed)
            commit_or_raise(self.db, "record lesson progress")

        self.db.refresh(row)
        logger.info(
            "lesson progress recorded user_id=%s lesson_id=%s completed=%s", learner_id, lesson_id, is_completed
        )
        return row

    @staticmethod
    def _apply(row: LessonProgress, is_completed: bool) -> None:
        now = datetime.utcnow()
        row.is_completed = is_completed
        row.completed_at = now if is_completed else None
        row.updated_at = now

    def completed_lesson_ids(self, learner_id: int) -> set[str]:
        rows = (
            self.db.query(LessonProgress.lesson_id)
            .filter(LessonProgress.user_id == learner_id, LessonProgress.is_completed.is_(True))
            .all()
        )
        return {r[0] for r in rows}

    # ----- aggregation -----

    def get_course_progress(
        self,
        learner_id: int,
        course_id: str,
        view: Optional[ContentView] = None,
    ) -> CourseProgress:
        """
        Percentage of the course's lessons the learner has completed, recomputed
        from scratch. Defaults to the canonical view (unpublished lessons count).
        """
        view = view or ContentView.canonical(self.db)
        with log_request(logger, f"course_progress course_id={course_id} user_id={learner_id}"):
            if view.get_course(course_id) is None:
                raise NotFoundError("Course", course_id)

            lesson_ids = {lesson.id for lesson in view.course_lessons(course_id)}
            if not lesson_ids:
                return CourseProgress(progress=0, completed=False, completed_lessons=0, total_lessons=0)

            done = len(lesson_ids & self.completed_lesson_ids(learner_id))
            progress = round_percent(done, len(lesson_ids))
            return CourseProgress(
                progress=progress,
                completed=progress == 100,
                completed_lessons=done,
                total_lessons=len(lesson_ids),
            )

    def refresh_enrollment(self, learner_id: int, course_id: str) -> Optional[Enrollment]:
        """Write the canonical progress into the learner's enrollment row, if enrolled."""
        enrollment = (
            self.db.query(Enrollment)
            .filter(Enrollment.user_id == learner_id, Enrollment.course_id == course_id)
            .first()
        )
        if enrollment is None:
            return None

        result = self.get_course_progress(learner_id, course_id)
        enrollment.progress = result.progress
        if result.completed:
            if not enrollment.completed or enrollment.completed_at is None:
                enrollment.completed_at = datetime.utcnow()
        else:
            enrollment.completed_at = None
        enrollment.completed = result.completed
        commit_or_raise(self.db, "refresh enrollment progress")
        self.db.refresh(enrollment)
        return enrollment
