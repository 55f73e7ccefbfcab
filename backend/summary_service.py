# summary_service.py
from loguru import logger
from sqlalchemy.orm import Session

from llm import LLMError
from models import Summary
from prompts import build_summary_prompt


class SummaryGenerationFailed(Exception):
    pass


def create_summary(db: Session, gateway, user_id: int, original_filename: str, text: str) -> Summary:
    """Summarizes already-extracted document text and stores it for the user."""
    if not text or not text.strip():
        raise ValueError("Document text is empty")

    try:
        summary_text = gateway.complete(build_summary_prompt(text))
    except LLMError as e:
        logger.exception(f"Summary generation failed for user {user_id} ({original_filename})")
        raise SummaryGenerationFailed("Failed to generate summary. Please try again later.") from e

    row = Summary(
        user_id=user_id,
        original_filename=original_filename,
        summary_text=summary_text.strip(),
        ai_provider=getattr(gateway, "provider", "unknown"),
        ai_model=getattr(gateway, "model_name", "unknown"),
    )
    db.add(row)
    db.commit()
    db.refresh(row)

    logger.info(f"Stored summary {row.id} for user {user_id} using model {row.ai_model}")
    return row
