# repository.py
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, select, update, delete
from sqlalchemy.orm import Session, selectinload, joinedload

from models import Summary, Quiz, Question


# -----------------------------------------------------------------------------
# Summaries
# -----------------------------------------------------------------------------
def find_summary(db: Session, summary_id: int, user_id: int) -> Optional[Summary]:
    return db.scalars(
        select(Summary).where(Summary.id == summary_id, Summary.user_id == user_id)
    ).first()


def summary_exists(db: Session, summary_id: int, user_id: int) -> bool:
    return find_summary(db, summary_id, user_id) is not None


# -----------------------------------------------------------------------------
# Quizzes
# -----------------------------------------------------------------------------
def find_quiz(db: Session, quiz_id: int, user_id: int, with_questions: bool = False) -> Optional[Quiz]:
    stmt = select(Quiz).where(Quiz.id == quiz_id, Quiz.user_id == user_id)
    if with_questions:
        stmt = stmt.options(selectinload(Quiz.questions))
    return db.scalars(stmt).first()


def list_quizzes(db: Session, user_id: int, summary_id: Optional[int] = None,
                 page: int = 0, size: int = 10) -> Tuple[List[Quiz], int]:
    """Newest first. Returns (rows for the page, total matching rows)."""
    filters = [Quiz.user_id == user_id]
    if summary_id is not None:
        filters.append(Quiz.summary_id == summary_id)

    total = db.scalar(select(func.count()).select_from(Quiz).where(*filters))
    rows = db.scalars(
        select(Quiz)
        .where(*filters)
        .options(joinedload(Quiz.summary))
        .order_by(Quiz.created_at.desc(), Quiz.id.desc())
        .offset(page * size)
        .limit(size)
    ).all()
    return list(rows), total


def mark_submitted(db: Session, quiz_id: int, user_id: int,
                   correct_answers: int, submitted_at: datetime) -> bool:
    """
    Compare-and-swap on the pending -> submitted transition.
    False means another submission already won.
    """
    result = db.execute(
        update(Quiz)
        .where(Quiz.id == quiz_id, Quiz.user_id == user_id, Quiz.is_submitted.is_(False))
        .values(is_submitted=True, correct_answers=correct_answers, submitted_at=submitted_at)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


def delete_quiz(db: Session, quiz_id: int, user_id: int) -> bool:
    """Questions go first; nothing else deletes them."""
    if find_quiz(db, quiz_id, user_id) is None:
        return False
    db.execute(delete(Question).where(Question.quiz_id == quiz_id))
    db.execute(delete(Quiz).where(Quiz.id == quiz_id))
    return True


def delete_quizzes_for_summary(db: Session, summary_id: int) -> int:
    quiz_ids = select(Quiz.id).where(Quiz.summary_id == summary_id)
    db.execute(delete(Question).where(Question.quiz_id.in_(quiz_ids)))
    result = db.execute(delete(Quiz).where(Quiz.summary_id == summary_id))
    return result.rowcount
