"""
Enrollment service: enrolling in courses, admin grants and course-level access.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session as DBSession

from learnpath.models.models import Course, Enrollment
from learnpath.services.content_view import ContentView
from learnpath.utils.common import commit_or_raise, new_id
from learnpath.utils.errors import AccessDeniedError, ConflictError, NotFoundError
from learnpath.utils.logger import configure_logging
from learnpath.utils.permissions import Action, PermissionSet, is_allowed

logger = configure_logging()


class EnrollmentService:
    def __init__(self, db: DBSession):
        self.db = db

    def get_enrollment(self, learner_id: int, course_id: str) -> Optional[Enrollment]:
        return (
            self.db.query(Enrollment)
            .filter(Enrollment.user_id == learner_id, Enrollment.course_id == course_id)
            .first()
        )

    def list_enrollments(self, learner_id: int) -> list[Enrollment]:
        return (
            self.db.query(Enrollment)
            .filter(Enrollment.user_id == learner_id)
            .order_by(Enrollment.enrolled_at.desc())
            .all()
        )

    def enroll(self, learner_id: int, course_id: str, permissions: PermissionSet) -> Enrollment:
        """
        Enroll in a published course. Free courses are open to everyone; paid ones
        need the premium capability (purchases are not handled here).
        """
        course = ContentView(self.db).get_course(course_id)
        if course is None:
            raise NotFoundError("Course", course_id)
        if self.get_enrollment(learner_id, course_id) is not None:
            raise ConflictError("Already enrolled in this course")
        if not course.is_free and not is_allowed(permissions, Action.ENROLL_PREMIUM):
            raise AccessDeniedError("Purchase required to enroll in this course")
        return self._create(learner_id, course)

    def grant(self, learner_id: int, course_id: str) -> Enrollment:
        """Admin grant: enroll regardless of price or publication. Idempotent."""
        course = self.db.query(Course).filter(Course.id == course_id).first()
        if course is None:
            raise NotFoundError("Course", course_id)
        existing = self.get_enrollment(learner_id, course_id)
        if existing is not None:
            return existing
        return self._create(learner_id, course)

    def _create(self, learner_id: int, course: Course) -> Enrollment:
        enrollment = Enrollment(
            id=new_id(),
            user_id=learner_id,
            course_id=course.id,
            progress=0,
            completed=False,
            enrolled_at=datetime.utcnow(),
        )
        self.db.add(enrollment)
        course.student_count = int(course.student_count or 0) + 1
        commit_or_raise(self.db, "enroll in course")
        self.db.refresh(enrollment)
        logger.info("enrolled user_id=%s course_id=%s", learner_id, course.id)
        return enrollment

    def has_course_access(self, learner_id: int, course_id: str) -> bool:
        course = self.db.query(Course).filter(Course.id == course_id).first()
        if course is None:
            raise NotFoundError("Course", course_id)
        return bool(course.is_free) or self.get_enrollment(learner_id, course_id) is not None
