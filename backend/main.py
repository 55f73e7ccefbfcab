# main.py
import os
import sys
from functools import lru_cache
from typing import Optional, Union

from fastapi import Depends, FastAPI, Header, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from sqlalchemy.orm import Session

from db import Base, engine, get_db
import models, schemas
import quiz_service
from llm import GeminiGateway, LLMError
from summary_service import create_summary, SummaryGenerationFailed

logger.remove()
logger.add(sys.stderr, level=os.getenv("LOG_LEVEL", "INFO"))

# -----------------------------------------------------------------------------
# App & CORS
# -----------------------------------------------------------------------------
app = FastAPI(title="Summary Quiz Generator")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create tables at startup
Base.metadata.create_all(bind=engine)

# -----------------------------------------------------------------------------
# Dependencies
# -----------------------------------------------------------------------------
@lru_cache
def _gateway() -> GeminiGateway:
    return GeminiGateway()

def get_gateway():
    try:
        return _gateway()
    except LLMError as e:
        logger.error(f"Model gateway unavailable: {e}")
        raise HTTPException(status_code=503, detail="AI service is not configured")

def current_user_id(x_user_id: int = Header(...)) -> int:
    # authentication happens upstream; we only need the resolved id
    return x_user_id

STATUS_BY_ERROR = {
    quiz_service.InvalidQuestionCount: 400,
    quiz_service.InvalidDifficulty: 400,
    quiz_service.AccessDenied: 403,
    quiz_service.QuizNotFound: 404,
    quiz_service.AlreadySubmitted: 409,
    quiz_service.GenerationFailed: 502,
}

def _http_error(e: quiz_service.QuizServiceError) -> HTTPException:
    return HTTPException(status_code=STATUS_BY_ERROR.get(type(e), 400), detail=str(e))

# -----------------------------------------------------------------------------
# Health
# -----------------------------------------------------------------------------
@app.get("/api/health")
def health():
    return {"status": "ok"}

# -----------------------------------------------------------------------------
# LLM smoke test (quick check that Gemini works)
# -----------------------------------------------------------------------------
@app.get("/api/llm-test")
def llm_test(gateway=Depends(get_gateway)):
    return gateway.ping()

# -----------------------------------------------------------------------------
# Summaries (text already extracted upstream)
# -----------------------------------------------------------------------------
@app.post("/api/summaries", response_model=schemas.SummaryOut, status_code=201)
def post_summary(payload: schemas.SummaryIn,
                 user_id: int = Depends(current_user_id),
                 db: Session = Depends(get_db),
                 gateway=Depends(get_gateway)):
    try:
        return create_summary(db, gateway, user_id, payload.original_filename, payload.text)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SummaryGenerationFailed as e:
        raise HTTPException(status_code=502, detail=str(e))

# -----------------------------------------------------------------------------
# Generate quiz (summary + LLM + store + return, answers hidden)
# -----------------------------------------------------------------------------
@app.post("/api/quizzes", response_model=schemas.QuizOut, status_code=201)
def generate_quiz(payload: schemas.GenerateIn,
                  user_id: int = Depends(current_user_id),
                  db: Session = Depends(get_db),
                  gateway=Depends(get_gateway)):
    try:
        return quiz_service.generate_quiz(
            db, gateway, user_id,
            summary_id=payload.summary_id,
            difficulty=payload.difficulty,
            question_count=payload.question_count,
        )
    except quiz_service.QuizServiceError as e:
        raise _http_error(e)

# -----------------------------------------------------------------------------
# Submit answers (one time only)
# -----------------------------------------------------------------------------
@app.post("/api/quizzes/{quiz_id}/submit", response_model=schemas.SubmissionOut)
def submit_quiz(quiz_id: int, payload: schemas.SubmissionIn,
                user_id: int = Depends(current_user_id),
                db: Session = Depends(get_db)):
    try:
        return quiz_service.submit_quiz(db, user_id, quiz_id, payload)
    except quiz_service.QuizServiceError as e:
        raise _http_error(e)

# -----------------------------------------------------------------------------
# History list
# -----------------------------------------------------------------------------
@app.get("/api/quizzes", response_model=schemas.QuizPage, response_model_exclude_none=True)
def list_quizzes(summary_id: Optional[int] = Query(None, alias="summaryId"),
                 page: int = Query(0, ge=0),
                 size: int = Query(10, ge=1, le=100),
                 user_id: int = Depends(current_user_id),
                 db: Session = Depends(get_db)):
    try:
        return quiz_service.list_quizzes(db, user_id, summary_id, page, size)
    except quiz_service.QuizServiceError as e:
        raise _http_error(e)

# -----------------------------------------------------------------------------
# Get quiz by id
# -----------------------------------------------------------------------------
@app.get("/api/quizzes/{quiz_id}", response_model=Union[schemas.GradedQuizOut, schemas.QuizOut])
def get_quiz(quiz_id: int,
             user_id: int = Depends(current_user_id),
             db: Session = Depends(get_db)):
    try:
        return quiz_service.get_quiz_detail(db, user_id, quiz_id)
    except quiz_service.QuizServiceError as e:
        raise _http_error(e)
