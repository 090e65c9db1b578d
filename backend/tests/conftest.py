"""Shared fixtures for the Score Analyser test suite."""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from main import app
from score_analyser import models
from score_analyser.services import build_test_record
from score_analyser.storage import LocalTestStore, get_store


def _test_input(day=None, correct=0, incorrect=0, skipped=0, subjects=()):
    """Build a consistent payload.

    ``subjects`` holds (name, correct, incorrect, skipped) tuples; when given,
    the test-level counts are their sums.
    """
    subject_inputs = [
        models.SubjectScoreInput(
            subject_name=name,
            total_questions=c + i + s,
            correct_questions=c,
            incorrect_questions=i,
            skipped_questions=s,
        )
        for name, c, i, s in subjects
    ]
    if subject_inputs:
        correct = sum(s.correct_questions for s in subject_inputs)
        incorrect = sum(s.incorrect_questions for s in subject_inputs)
        skipped = sum(s.skipped_questions for s in subject_inputs)

    return models.TestInput(
        test_date=datetime(2024, 1, day, 9, 0, tzinfo=timezone.utc) if day else None,
        total_questions=correct + incorrect + skipped,
        correct_questions=correct,
        incorrect_questions=incorrect,
        skipped_questions=skipped,
        subjects=subject_inputs,
    )


@pytest.fixture
def make_input():
    return _test_input


@pytest.fixture
def make_record():
    """Scored record for the given day of January 2024."""
    def _make(day=None, **counts):
        return build_test_record(_test_input(day, **counts))
    return _make


@pytest.fixture
def store(tmp_path):
    return LocalTestStore(str(tmp_path / "data.json"))


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
