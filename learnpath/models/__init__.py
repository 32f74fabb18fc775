"""
Data models. Single import surface for DB entities.

DB entities (learnpath.models.models):
- User
- Course, Module, Lesson (course structure)
- Quiz, QuizQuestion (gate quizzes and module tests)
- QuizAttempt, LessonProgress, Enrollment (learner records)
"""

from learnpath.models.models import (
    User,
    Course,
    Module,
    Lesson,
    Quiz,
    QuizQuestion,
    QuizAttempt,
    LessonProgress,
    Enrollment,
)

__all__ = [
    "User",
    "Course",
    "Module",
    "Lesson",
    "Quiz",
    "QuizQuestion",
    "QuizAttempt",
    "LessonProgress",
    "Enrollment",
]
