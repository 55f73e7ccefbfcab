# schemas.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    # JSON is camelCase, Python stays snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------
class SummaryIn(CamelModel):
    original_filename: str = Field(min_length=1, max_length=255)
    text: str = Field(min_length=1)


class GenerateIn(CamelModel):
    summary_id: int
    difficulty: str
    question_count: int


class AnswerIn(CamelModel):
    question_id: str
    answer: Optional[str] = None


class SubmissionIn(CamelModel):
    answers: List[AnswerIn]


# -----------------------------------------------------------------------------
# Responses
# -----------------------------------------------------------------------------
class SummaryOut(CamelModel):
    id: int
    original_filename: str
    summary_text: str
    ai_provider: str
    ai_model: str
    created_at: datetime


class QuestionOut(CamelModel):
    """Pre-submission question: no correct answer, no explanation."""
    id: str
    text: str
    options: List[str]


class ResultItem(CamelModel):
    question_id: str
    text: str
    user_answer: Optional[str] = None
    correct_answer: str
    is_correct: bool
    explanation: str


class QuizOut(CamelModel):
    id: int
    summary_id: int
    difficulty: str
    question_count: int
    is_submitted: bool = False
    created_at: datetime
    questions: List[QuestionOut]


class GradedQuizOut(CamelModel):
    id: int
    summary_id: int
    difficulty: str
    question_count: int
    is_submitted: bool = True
    correct_answers: int
    created_at: datetime
    submitted_at: datetime
    results: List[ResultItem]


class SubmissionOut(CamelModel):
    """
    total_questions counts the questions actually stored for the quiz, which
    can differ from the requested question_count when the model returned a
    short or long batch.
    """
    id: int
    total_questions: int
    correct_answers: int
    submitted_at: datetime
    results: List[ResultItem]


class QuizListItem(CamelModel):
    id: int
    summary_id: int
    filename: Optional[str] = None
    difficulty: str
    question_count: int
    is_submitted: bool
    created_at: datetime
    correct_answers: Optional[int] = None
    submitted_at: Optional[datetime] = None


class QuizPage(CamelModel):
    items: List[QuizListItem]
    page: int
    size: int
    total: int
