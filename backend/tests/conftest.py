"""
Pytest configuration and shared fixtures.

Every test gets its own in-memory SQLite database; the model is replaced
by a scripted fake so nothing touches the network.
"""
import json
import os

# db.py refuses to import without a URL
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from db import Base
from models import Summary


class FakeGateway:
    """Returns queued replies (or raises queued exceptions) and records prompts."""

    provider = "fake"
    model_name = "fake-model"

    def __init__(self, *replies):
        self.replies = list(replies)
        self.prompts = []

    def complete(self, prompt):
        self.prompts.append(prompt)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def make_items(correct_answers=("A", "B", "C", "D", "A")):
    return [
        {
            "id": f"q{i}",
            "question": f"Question {i}?",
            "options": ["A", "B", "C", "D"],
            "correctAnswer": answer,
            "explanation": f"Because {answer}.",
        }
        for i, answer in enumerate(correct_answers, start=1)
    ]


def fenced(items):
    return "Here is your quiz:\n```json\n" + json.dumps(items, indent=2) + "\n```"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_summary(db):
    def _make(user_id=1, filename="lecture.pdf", text="Photosynthesis turns light into chemical energy."):
        row = Summary(
            user_id=user_id,
            original_filename=filename,
            summary_text=text,
            ai_provider="fake",
            ai_model="fake-model",
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        return row
    return _make
