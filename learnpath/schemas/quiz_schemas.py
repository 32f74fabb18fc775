"""
Quiz, question and attempt schemas.
"""

from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, Union


class QuizKind(str, Enum):
    LESSON_QUIZ = "lesson_quiz"
    MODULE_TEST = "module_test"


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    SHORT_ANSWER = "short_answer"


AnswerValue = Union[bool, int, str, list[Union[bool, int, str]]]


class CreateQuizRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    passing_score: Optional[int] = Field(default=None, ge=0, le=100)


class UpdateQuizRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    passing_score: Optional[int] = Field(default=None, ge=0, le=100)


class CreateQuestionRequest(BaseModel):
    question: str = Field(..., min_length=1)
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    options: Optional[list[str]] = None
    correct_answers: list[str] = Field(..., min_length=1)
    points: int = Field(default=1, ge=1)
    order_index: Optional[int] = Field(default=None, ge=0)


class QuestionResponse(BaseModel):
    """Question as shown to a learner: no correct answers."""
    id: str
    question: str
    question_type: QuestionType
    options: Optional[list[str]] = None
    points: int
    order_index: int


class AuthoringQuestionResponse(QuestionResponse):
    correct_answers: list[str]


class QuizResponse(BaseModel):
    id: str
    kind: QuizKind
    lesson_id: Optional[str] = None
    module_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    passing_score: int
    questions: list[QuestionResponse] = []


class AuthoringQuizResponse(QuizResponse):
    questions: list[AuthoringQuestionResponse] = []


class SubmitAttemptRequest(BaseModel):
    # question id -> submitted answer (list for multi-answer questions)
    answers: dict[str, AnswerValue]


class AttemptResponse(BaseModel):
    id: str
    quiz_id: Optional[str] = None
    score: int
    earned_points: int
    total_points: int
    passed: bool
    attempt_number: int
    started_at: str
    completed_at: Optional[str] = None


class AttemptListResponse(BaseModel):
    attempts: list[AttemptResponse]
