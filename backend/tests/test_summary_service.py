import pytest

from conftest import FakeGateway
from llm import ModelUnavailable
from models import Summary
from summary_service import create_summary, SummaryGenerationFailed


def test_create_summary_persists_model_output(db):
    gateway = FakeGateway("  # Cells\n\nCells are the unit of life.\n")

    row = create_summary(db, gateway, 3, "bio.pdf", "Long document text about cells.")

    assert row.id is not None
    assert row.user_id == 3
    assert row.original_filename == "bio.pdf"
    assert row.summary_text == "# Cells\n\nCells are the unit of life."
    assert row.ai_provider == "fake"
    assert row.ai_model == "fake-model"
    assert "Long document text about cells." in gateway.prompts[0]
    assert "markdown" in gateway.prompts[0]


def test_empty_text_rejected(db):
    gateway = FakeGateway()
    with pytest.raises(ValueError):
        create_summary(db, gateway, 3, "empty.pdf", "   ")
    assert gateway.prompts == []


def test_model_failure(db):
    gateway = FakeGateway(ModelUnavailable("down"))
    with pytest.raises(SummaryGenerationFailed):
        create_summary(db, gateway, 3, "bio.pdf", "text")
    assert db.query(Summary).count() == 0
