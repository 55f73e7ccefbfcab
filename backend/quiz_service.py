# quiz_service.py
"""
Quiz lifecycle: generate from a summary, submit once, list, view.

Every call takes the caller's user id explicitly; quizzes and summaries
are only ever looked up scoped to that owner.
"""
from datetime import datetime
from typing import List, Optional, Union

from loguru import logger
from sqlalchemy.orm import Session

import repository
import schemas
from grading import count_correct, is_correct
from llm import LLMError
from models import Difficulty, Quiz, Question
from prompts import build_quiz_prompt
from utils import GenerationError, extract_json_array, parse_questions, load_options

ALLOWED_QUESTION_COUNTS = (5, 10, 15)


class QuizServiceError(Exception):
    pass


class InvalidQuestionCount(QuizServiceError):
    pass


class InvalidDifficulty(QuizServiceError):
    pass


class AccessDenied(QuizServiceError):
    pass


class QuizNotFound(QuizServiceError):
    pass


class AlreadySubmitted(QuizServiceError):
    pass


class GenerationFailed(QuizServiceError):
    pass


def parse_difficulty(value: str) -> Difficulty:
    try:
        return Difficulty((value or "").strip().upper())
    except ValueError:
        raise InvalidDifficulty("Invalid difficulty. Must be easy, medium, or hard") from None


def generate_questions(gateway, summary_text: str, difficulty: Difficulty,
                       count: int, quiz_id: int) -> List[Question]:
    """Model call -> sanitize -> validate/map. Returns unsaved questions."""
    prompt = build_quiz_prompt(summary_text, difficulty.value, count)
    raw = gateway.complete(prompt)
    return parse_questions(extract_json_array(raw), count, quiz_id)


# -----------------------------------------------------------------------------
# View builders
# -----------------------------------------------------------------------------
def _question_views(questions) -> List[schemas.QuestionOut]:
    return [
        schemas.QuestionOut(id=q.question_key, text=q.question_text, options=load_options(q))
        for q in questions
    ]


def _result_items(questions) -> List[schemas.ResultItem]:
    return [
        schemas.ResultItem(
            question_id=q.question_key,
            text=q.question_text,
            user_answer=q.user_answer,
            correct_answer=q.correct_answer,
            is_correct=is_correct(q.user_answer, q.correct_answer),
            explanation=q.explanation,
        )
        for q in questions
    ]


def _pending_view(quiz: Quiz, questions) -> schemas.QuizOut:
    return schemas.QuizOut(
        id=quiz.id,
        summary_id=quiz.summary_id,
        difficulty=quiz.difficulty.value.lower(),
        question_count=quiz.question_count,
        is_submitted=False,
        created_at=quiz.created_at,
        questions=_question_views(questions),
    )


def _graded_view(quiz: Quiz) -> schemas.GradedQuizOut:
    grade = quiz.grade
    return schemas.GradedQuizOut(
        id=quiz.id,
        summary_id=quiz.summary_id,
        difficulty=quiz.difficulty.value.lower(),
        question_count=quiz.question_count,
        is_submitted=True,
        correct_answers=grade.correct_answers,
        created_at=quiz.created_at,
        submitted_at=grade.submitted_at,
        results=_result_items(quiz.questions),
    )


# -----------------------------------------------------------------------------
# Operations
# -----------------------------------------------------------------------------
def generate_quiz(db: Session, gateway, user_id: int, summary_id: int,
                  difficulty: str, question_count: int) -> schemas.QuizOut:
    if question_count not in ALLOWED_QUESTION_COUNTS:
        raise InvalidQuestionCount("Number of questions must be exactly 5, 10, or 15")

    # not-found and not-yours look the same to the caller
    summary = repository.find_summary(db, summary_id, user_id)
    if summary is None:
        raise AccessDenied("You do not have access to this summary")

    level = parse_difficulty(difficulty)

    quiz = Quiz(
        user_id=user_id,
        summary_id=summary.id,
        difficulty=level,
        question_count=question_count,
        is_submitted=False,
    )
    db.add(quiz)
    db.flush()

    try:
        questions = generate_questions(gateway, summary.summary_text, level, question_count, quiz.id)
    except (LLMError, GenerationError) as e:
        db.rollback()
        logger.exception(f"Quiz generation failed for user {user_id}, summary {summary_id}: {type(e).__name__}")
        raise GenerationFailed("Failed to generate quiz questions. Please try again later.") from e

    db.add_all(questions)
    db.commit()
    db.refresh(quiz)

    logger.info(f"Generated quiz {quiz.id} with {len(questions)} questions for user {user_id}")
    return _pending_view(quiz, questions)


def submit_quiz(db: Session, user_id: int, quiz_id: int,
                submission: schemas.SubmissionIn) -> schemas.SubmissionOut:
    quiz = repository.find_quiz(db, quiz_id, user_id, with_questions=True)
    if quiz is None:
        raise QuizNotFound("Quiz not found")
    if quiz.is_submitted:
        raise AlreadySubmitted("Quiz has already been submitted")

    # duplicate ids: last one wins
    answers = {a.question_id: a.answer for a in submission.answers}

    for q in quiz.questions:
        q.user_answer = answers.get(q.question_key)
    correct = count_correct((q.user_answer, q.correct_answer) for q in quiz.questions)

    submitted_at = datetime.utcnow()
    if not repository.mark_submitted(db, quiz.id, user_id, correct, submitted_at):
        db.rollback()
        logger.warning(f"Quiz {quiz_id} was submitted concurrently; rejecting second submission")
        raise AlreadySubmitted("Quiz has already been submitted")
    db.commit()
    db.refresh(quiz)

    logger.info(f"Quiz {quiz_id} submitted by user {user_id} with score {correct}/{len(quiz.questions)}")
    grade = quiz.grade
    return schemas.SubmissionOut(
        id=quiz.id,
        total_questions=len(quiz.questions),
        correct_answers=grade.correct_answers,
        submitted_at=grade.submitted_at,
        results=_result_items(quiz.questions),
    )


def list_quizzes(db: Session, user_id: int, summary_id: Optional[int] = None,
                 page: int = 0, size: int = 10) -> schemas.QuizPage:
    if summary_id is not None and not repository.summary_exists(db, summary_id, user_id):
        raise AccessDenied("You do not have access to this summary")

    rows, total = repository.list_quizzes(db, user_id, summary_id, page, size)
    items = []
    for quiz in rows:
        item = schemas.QuizListItem(
            id=quiz.id,
            summary_id=quiz.summary_id,
            filename=quiz.summary.original_filename if quiz.summary else None,
            difficulty=quiz.difficulty.value.lower(),
            question_count=quiz.question_count,
            is_submitted=quiz.is_submitted,
            created_at=quiz.created_at,
        )
        grade = quiz.grade
        if grade is not None:
            item.correct_answers = grade.correct_answers
            item.submitted_at = grade.submitted_at
        items.append(item)
    return schemas.QuizPage(items=items, page=page, size=size, total=total)


def get_quiz_detail(db: Session, user_id: int,
                    quiz_id: int) -> Union[schemas.GradedQuizOut, schemas.QuizOut]:
    quiz = repository.find_quiz(db, quiz_id, user_id, with_questions=True)
    if quiz is None:
        raise QuizNotFound("Quiz not found")
    if quiz.is_submitted:
        return _graded_view(quiz)
    return _pending_view(quiz, quiz.questions)
