from learnpath.config import Base
from sqlalchemy import (
    Column,
    Integer,
    String,
    JSON,
    DateTime,
    ForeignKey,
    Text,
    Boolean,
    UniqueConstraint,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from datetime import datetime


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    permissions = Column(JSON, nullable=False, default=list)  # list[str] capability names
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class Course(Base):
    __tablename__ = "courses"
    id = Column(String, primary_key=True, index=True)  # uuid
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=False, default="General")
    level = Column(String, nullable=False, default="Beginner")
    is_free = Column(Boolean, default=False, nullable=False)
    is_premium = Column(Boolean, default=False, nullable=False)
    is_published = Column(Boolean, default=False, nullable=False)
    student_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    modules = relationship(
        "Module",
        backref="course",
        cascade="all, delete-orphan",
        order_by="Module.order_index",
    )
    enrollments = relationship("Enrollment", backref="course", cascade="all, delete-orphan")


class Module(Base):
    __tablename__ = "modules"
    __table_args__ = (UniqueConstraint("course_id", "order_index", name="uq_modules_course_order"),)

    id = Column(String, primary_key=True, index=True)  # uuid
    course_id = Column(String, ForeignKey("courses.id", ondelete="CASCADE"), index=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    order_index = Column(Integer, nullable=False)
    is_published = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    lessons = relationship(
        "Lesson",
        backref="module",
        cascade="all, delete-orphan",
        order_by="Lesson.order_index",
    )
    # module_test gating the next module
    test = relationship(
        "Quiz",
        backref="module",
        uselist=False,
        cascade="all, delete-orphan",
        foreign_keys="Quiz.module_id",
    )


class Lesson(Base):
    __tablename__ = "lessons"
    __table_args__ = (UniqueConstraint("module_id", "order_index", name="uq_lessons_module_order"),)

    id = Column(String, primary_key=True, index=True)  # uuid
    module_id = Column(String, ForeignKey("modules.id", ondelete="CASCADE"), index=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    content = Column(Text, nullable=True)
    content_type = Column(String, nullable=False, default="text")  # text|video|quiz
    video_url = Column(String, nullable=True)
    duration_minutes = Column(Integer, nullable=True)
    order_index = Column(Integer, nullable=False)
    is_published = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # lesson_quiz gating the next lesson
    quiz = relationship(
        "Quiz",
        backref="lesson",
        uselist=False,
        cascade="all, delete-orphan",
        foreign_keys="Quiz.lesson_id",
    )
    progress_records = relationship("LessonProgress", backref="lesson", cascade="all, delete-orphan")


class Quiz(Base):
    __tablename__ = "quizzes"
    __table_args__ = (
        CheckConstraint(
            "(kind = 'lesson_quiz' AND lesson_id IS NOT NULL AND module_id IS NULL)"
            " OR (kind = 'module_test' AND module_id IS NOT NULL AND lesson_id IS NULL)",
            name="ck_quizzes_single_owner",
        ),
        CheckConstraint("passing_score >= 0 AND passing_score <= 100", name="ck_quizzes_passing_score"),
    )

    id = Column(String, primary_key=True, index=True)  # uuid
    kind = Column(String, nullable=False)  # lesson_quiz|module_test
    lesson_id = Column(String, ForeignKey("lessons.id", ondelete="CASCADE"), unique=True, nullable=True)
    module_id = Column(String, ForeignKey("modules.id", ondelete="CASCADE"), unique=True, nullable=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    passing_score = Column(Integer, nullable=False, default=80)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    questions = relationship(
        "QuizQuestion",
        backref="quiz",
        cascade="all, delete-orphan",
        order_by="QuizQuestion.order_index",
    )
    # No delete cascade: attempts outlive their quiz (quiz_id is nulled).
    attempts = relationship("QuizAttempt", backref="quiz")


class QuizQuestion(Base):
    __tablename__ = "quiz_questions"
    __table_args__ = (UniqueConstraint("quiz_id", "order_index", name="uq_quiz_questions_quiz_order"),)

    id = Column(String, primary_key=True, index=True)  # uuid
    quiz_id = Column(String, ForeignKey("quizzes.id", ondelete="CASCADE"), index=True, nullable=False)
    question = Column(Text, nullable=False)
    question_type = Column(String, nullable=False, default="multiple_choice")  # multiple_choice|true_false|short_answer
    options = Column(JSON, nullable=True)  # list[str]
    correct_answers = Column(JSON, nullable=False, default=list)  # list[str]
    points = Column(Integer, nullable=False, default=1)
    order_index = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class QuizAttempt(Base):
    __tablename__ = "quiz_attempts"
    id = Column(String, primary_key=True, index=True)  # uuid
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    quiz_id = Column(String, ForeignKey("quizzes.id", ondelete="SET NULL"), index=True, nullable=True)
    score = Column(Integer, nullable=False, default=0)  # percentage
    earned_points = Column(Integer, nullable=False, default=0)
    total_points = Column(Integer, nullable=False, default=0)
    passed = Column(Boolean, default=False, nullable=False)
    answers = Column(JSON, nullable=False)
    attempt_number = Column(Integer, nullable=False, default=1)
    started_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", backref="quiz_attempts", foreign_keys=[user_id])


class LessonProgress(Base):
    __tablename__ = "user_lesson_progress"
    __table_args__ = (UniqueConstraint("user_id", "lesson_id", name="uq_user_lesson_progress"),)

    id = Column(String, primary_key=True, index=True)  # uuid
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    lesson_id = Column(String, ForeignKey("lessons.id", ondelete="CASCADE"), index=True, nullable=False)
    is_completed = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User", backref="lesson_progress", foreign_keys=[user_id])


class Enrollment(Base):
    __tablename__ = "enrollments"
    __table_args__ = (UniqueConstraint("user_id", "course_id", name="uq_enrollments_user_course"),)

    id = Column(String, primary_key=True, index=True)  # uuid
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    course_id = Column(String, ForeignKey("courses.id", ondelete="CASCADE"), index=True, nullable=False)
    progress = Column(Integer, default=0, nullable=False)  # cached, refreshed explicitly
    completed = Column(Boolean, default=False, nullable=False)
    enrolled_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    completed_at = Column(DateTime, nullable=True)

    user = relationship("User", backref="enrollments", foreign_keys=[user_id])
