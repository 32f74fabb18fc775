"""
Quiz attempt tracker: scores submissions and answers "what is the latest attempt".
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Optional

from sqlalchemy.orm import Session as DBSession

from learnpath.models.models import Quiz, QuizAttempt, QuizQuestion
from learnpath.utils.common import commit_or_raise, new_id, round_percent
from learnpath.utils.errors import InvalidInputError, NotFoundError
from learnpath.utils.logger import configure_logging

logger = configure_logging()

_SCALARS = (str, int, bool)


def normalize_answer(value: Any) -> frozenset[str]:
    """
    Submitted or stored answer -> comparable set of strings.
    "B " / ["b"] / "b" compare equal; True compares equal to "true"; indices may be int or str.
    """
    if value is None:
        return frozenset()
    if isinstance(value, _SCALARS):
        values: Iterable[Any] = [value]
    elif isinstance(value, (list, tuple, set, frozenset)):
        values = value
    else:
        raise InvalidInputError(f"Unsupported answer type: {type(value).__name__}")
    out: set[str] = set()
    for v in values:
        if not isinstance(v, _SCALARS):
            raise InvalidInputError(f"Unsupported answer type: {type(v).__name__}")
        text = str(v).strip().lower()
        if text:
            out.add(text)
    return frozenset(out)


def score_answers(questions: list[QuizQuestion], answers: dict) -> tuple[int, int]:
    """
    Returns (earned_points, total_points). A question earns its points when the
    submitted answer set equals its correct-answer set; unanswered questions earn nothing.
    Raises InvalidInputError for answers to questions outside `questions`.
    """
    if not isinstance(answers, dict):
        raise InvalidInputError("answers must be an object keyed by question id")
    by_id = {q.id: q for q in questions}
    unknown = sorted(str(k) for k in answers if k not in by_id)
    if unknown:
        raise InvalidInputError(f"answers reference unknown questions: {', '.join(unknown)}")

    earned = 0
    total = 0
    for q in questions:
        points = int(q.points or 0)
        total += points
        if q.id not in answers:
            continue
        submitted = normalize_answer(answers[q.id])
        if submitted and submitted == normalize_answer(q.correct_answers or []):
            earned += points
    return earned, total


class QuizAttemptTracker:
    """Records quiz submissions and exposes the latest attempt per learner/quiz."""

    def __init__(self, db: DBSession):
        self.db = db

    def record_attempt(self, learner_id: int, quiz_id: str, answers: dict) -> QuizAttempt:
        quiz = self.db.query(Quiz).filter(Quiz.id == quiz_id).first()
        if quiz is None:
            raise NotFoundError("Quiz", quiz_id)

        questions = list(quiz.questions)
        earned, total = score_answers(questions, answers)
        if total <= 0:
            raise InvalidInputError("Quiz has no questions to score")

        previous = (
            self.db.query(QuizAttempt)
            .filter(QuizAttempt.user_id == learner_id, QuizAttempt.quiz_id == quiz_id)
            .count()
        )
        now = datetime.utcnow()
        attempt = QuizAttempt(
            id=new_id(),
            user_id=learner_id,
            quiz_id=quiz_id,
            answers=answers,
            earned_points=earned,
            total_points=total,
            attempt_number=previous + 1,
            started_at=now,
            created_at=now,
        )
        self.db.add(attempt)
        self._finalize(attempt, quiz)
        commit_or_raise(self.db, "record quiz attempt")
        self.db.refresh(attempt)
        logger.info(
            "quiz attempt recorded user_id=%s quiz_id=%s attempt=%s score=%s passed=%s",
            learner_id, quiz_id, attempt.attempt_number, attempt.score, attempt.passed,
        )
        return attempt

    def _finalize(self, attempt: QuizAttempt, quiz: Quiz) -> None:
        attempt.score = round_percent(attempt.earned_points, attempt.total_points)
        attempt.passed = attempt.score >= int(quiz.passing_score)
        attempt.completed_at = datetime.utcnow()

    def get_latest_attempt(self, learner_id: int, quiz_id: str) -> Optional[QuizAttempt]:
        return (
            self.db.query(QuizAttempt)
            .filter(QuizAttempt.user_id == learner_id, QuizAttempt.quiz_id == quiz_id)
            .order_by(QuizAttempt.created_at.desc(), QuizAttempt.attempt_number.desc())
            .first()
        )

    def list_attempts(self, learner_id: int, quiz_id: str) -> list[QuizAttempt]:
        return (
            self.db.query(QuizAttempt)
            .filter(QuizAttempt.user_id == learner_id, QuizAttempt.quiz_id == quiz_id)
            .order_by(QuizAttempt.created_at.desc(), QuizAttempt.attempt_number.desc())
            .all()
        )
