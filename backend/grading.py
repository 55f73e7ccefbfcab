# grading.py
from typing import Iterable, Optional, Tuple


def normalize_answer(answer: str) -> str:
    return answer.strip().casefold()


def is_correct(user_answer: Optional[str], correct_answer: str) -> bool:
    """Trim + case-insensitive match. A missing answer is never correct."""
    if user_answer is None:
        return False
    return normalize_answer(user_answer) == normalize_answer(correct_answer)


def count_correct(pairs: Iterable[Tuple[Optional[str], str]]) -> int:
    """pairs: (user_answer, correct_answer)"""
    return sum(1 for user_answer, correct_answer in pairs if is_correct(user_answer, correct_answer))
