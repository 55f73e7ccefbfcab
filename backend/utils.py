# utils.py
import json
import re
from typing import List

from loguru import logger

from models import Question

REQUIRED_KEYS = ("id", "question", "options", "correctAnswer", "explanation")
OPTION_COUNT = 4

FENCE_OPEN = "```"
# opening fence with an optional language tag: ``` / ```json / ```JSON
FENCE_OPEN_RE = re.compile(r"^```[\w+-]*")
FENCE_CLOSE = "```"


class GenerationError(Exception):
    """The model reply could not be turned into questions."""


class MalformedModelOutput(GenerationError):
    pass


class EmptyGenerationResult(GenerationError):
    pass


class IncompleteQuestion(GenerationError):
    pass


class InvalidOptionsShape(GenerationError):
    pass


class AnswerNotInOptions(GenerationError):
    pass


class DuplicateQuestionId(GenerationError):
    pass


def extract_json_array(raw: str) -> str:
    """
    Best-effort: returns the outermost [...] of a model reply, after
    dropping surrounding whitespace and markdown code fences.
    Not JSON-aware; brackets inside prose before the payload will confuse it.
    """
    text = (raw or "").strip()

    if text.startswith(FENCE_OPEN):
        text = FENCE_OPEN_RE.sub("", text, count=1)
    if text.endswith(FENCE_CLOSE):
        text = text[: -len(FENCE_CLOSE)]
    text = text.strip()

    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end == -1 or start > end:
        logger.error(f"No JSON array found in model response: {text[:400]}")
        raise MalformedModelOutput("Model returned no JSON array")

    cleaned = text[start:end + 1]
    logger.debug(f"Cleaned model response: {cleaned}")
    return cleaned


def _resolve_correct_answer(answer: str, options: List[str]) -> str:
    if answer in options:
        return answer
    # tolerate case/whitespace drift, but only if it points at a single option
    wanted = answer.strip().casefold()
    matches = [o for o in options if o.strip().casefold() == wanted]
    if len(matches) == 1:
        return matches[0]
    raise AnswerNotInOptions(f"correctAnswer {answer!r} is not one of the options")


def _to_question(item: dict, quiz_id: int) -> Question:
    if not isinstance(item, dict):
        raise MalformedModelOutput("Question entry is not a JSON object")

    missing = [k for k in REQUIRED_KEYS if k not in item]
    if missing:
        logger.error(f"Invalid question structure (missing {missing}): {item}")
        raise IncompleteQuestion(f"Question is missing required fields: {', '.join(missing)}")

    for key in ("id", "question", "correctAnswer", "explanation"):
        if not isinstance(item[key], str):
            raise IncompleteQuestion(f"Question field {key!r} must be a string")

    options = item["options"]
    if (not isinstance(options, list) or len(options) != OPTION_COUNT
            or not all(isinstance(o, str) for o in options)):
        raise InvalidOptionsShape(f"Question {item['id']!r} must have exactly {OPTION_COUNT} string options")

    return Question(
        quiz_id=quiz_id,
        question_key=item["id"],
        question_text=item["question"],
        options=json.dumps(options, ensure_ascii=False, separators=(",", ":")),
        correct_answer=_resolve_correct_answer(item["correctAnswer"], options),
        explanation=item["explanation"],
    )


def parse_questions(json_text: str, expected_count: int, quiz_id: int) -> List[Question]:
    """
    Validates the sanitized array and maps every entry to an unsaved Question.
    Any bad entry fails the whole batch.
    """
    try:
        items = json.loads(json_text)
    except (TypeError, ValueError) as e:
        raise MalformedModelOutput(f"Model response is not valid JSON: {e}") from e
    if not isinstance(items, list):
        raise MalformedModelOutput("Model response is not a JSON array")
    if not items:
        raise EmptyGenerationResult("Model returned an empty question list")

    if len(items) != expected_count:
        logger.warning(f"Model generated {len(items)} questions, expected {expected_count}. Using what was generated.")

    questions = [_to_question(item, quiz_id) for item in items]

    seen = set()
    for q in questions:
        if q.question_key in seen:
            raise DuplicateQuestionId(f"Question id {q.question_key!r} appears more than once")
        seen.add(q.question_key)

    return questions


def load_options(question: Question) -> List[str]:
    return json.loads(question.options)
