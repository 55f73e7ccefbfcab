# models.py
import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Column, Integer, String, Text, DateTime, Boolean, Enum, ForeignKey,
    CheckConstraint, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from db import Base


class Difficulty(str, enum.Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


@dataclass(frozen=True)
class Graded:
    """Terminal state of a submitted quiz."""
    correct_answers: int
    submitted_at: datetime


class Summary(Base):
    __tablename__ = "summaries"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, index=True, nullable=False)
    original_filename = Column(String(255), nullable=False)
    summary_text = Column(Text, nullable=False)
    ai_provider = Column(String(50), nullable=False)
    ai_model = Column(String(100), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    quizzes = relationship("Quiz", back_populates="summary")


class Quiz(Base):
    __tablename__ = "quizzes"
    # pending: both result columns null; submitted: both set
    __table_args__ = (
        CheckConstraint(
            "(NOT is_submitted AND correct_answers IS NULL AND submitted_at IS NULL) OR "
            "(is_submitted AND correct_answers IS NOT NULL AND submitted_at IS NOT NULL)",
            name="ck_quizzes_submission_state",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, index=True, nullable=False)
    summary_id = Column(Integer, ForeignKey("summaries.id"), index=True, nullable=False)
    difficulty = Column(Enum(Difficulty, name="quiz_difficulty"), nullable=False)
    question_count = Column(Integer, nullable=False)      # 5|10|15, as requested
    is_submitted = Column(Boolean, default=False, nullable=False)
    correct_answers = Column(Integer)
    created_at = Column(DateTime, default=datetime.utcnow, index=True, nullable=False)
    submitted_at = Column(DateTime)

    summary = relationship("Summary", back_populates="quizzes")
    questions = relationship("Question", back_populates="quiz", order_by="Question.id")

    @property
    def grade(self) -> Optional[Graded]:
        if not self.is_submitted:
            return None
        return Graded(correct_answers=self.correct_answers, submitted_at=self.submitted_at)


class Question(Base):
    __tablename__ = "questions"
    __table_args__ = (
        UniqueConstraint("quiz_id", "question_key", name="uq_questions_quiz_key"),
    )

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), index=True, nullable=False)
    question_key = Column(String(64), nullable=False)     # "q1", as supplied by the model
    question_text = Column(Text, nullable=False)
    options = Column(Text, nullable=False)                # JSON array string, 4 entries
    correct_answer = Column(String(512), nullable=False)
    explanation = Column(Text, nullable=False)
    user_answer = Column(String(512))

    quiz = relationship("Quiz", back_populates="questions")
