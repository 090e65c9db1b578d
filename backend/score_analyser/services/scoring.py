"""
Scoring service - turns raw question counts into marks, percentage and weightage.

Marking scheme: +4 per correct answer, -1 per incorrect answer, 0 per skipped.
Values are not rounded here; rounding happens in the aggregators.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from ..exceptions import ScoreValidationError
from ..models import SubjectScore, SubjectScoreInput, TestInput, TestRecord
from ..utils import new_id, utcnow

logger = logging.getLogger(__name__)

MARKS_PER_CORRECT = 4
PENALTY_PER_INCORRECT = 1
MARKS_PER_QUESTION = 4


def compute_marks(correct: int, incorrect: int) -> int:
    """Marks for the given answers. May be negative."""
    return correct * MARKS_PER_CORRECT - incorrect * PENALTY_PER_INCORRECT


def compute_percentage(marks_obtained: float, total_marks: float) -> float:
    """Marks as a percentage of the maximum. May be negative."""
    if total_marks == 0:
        raise ScoreValidationError("Cannot compute a percentage out of 0 total marks")
    return marks_obtained / total_marks * 100


def compute_weightage(subject_total_questions: int, test_total_questions: int) -> float:
    """Share of the test's questions that belong to one subject, in percent."""
    if test_total_questions == 0:
        raise ScoreValidationError("Cannot compute weightage against a test with 0 questions")
    return subject_total_questions / test_total_questions * 100


def score_test(
    total_questions: int,
    correct_questions: int,
    incorrect_questions: int,
) -> Dict[str, Any]:
    """
    Score a whole test.

    Returns:
        {"total_marks": 800, "marks_obtained": 570, "percentage": 71.25}
    """
    total_marks = total_questions * MARKS_PER_QUESTION
    marks_obtained = compute_marks(correct_questions, incorrect_questions)
    return {
        "total_marks": total_marks,
        "marks_obtained": marks_obtained,
        "percentage": compute_percentage(marks_obtained, total_marks),
    }


def score_subject(subject: SubjectScoreInput, test_total_questions: int) -> SubjectScore:
    """Score one subject; weightage is fixed against this test's total."""
    scored = score_test(
        subject.total_questions,
        subject.correct_questions,
        subject.incorrect_questions,
    )
    return SubjectScore(
        subject_name=subject.subject_name,
        total_questions=subject.total_questions,
        correct_questions=subject.correct_questions,
        incorrect_questions=subject.incorrect_questions,
        skipped_questions=subject.skipped_questions,
        weightage=compute_weightage(subject.total_questions, test_total_questions),
        **scored,
    )


def _check_counts(label: str, total: int, correct: int, incorrect: int, skipped: int) -> None:
    if total <= 0:
        raise ScoreValidationError(f"{label}: total questions must be greater than 0")
    answered = correct + incorrect + skipped
    if answered != total:
        raise ScoreValidationError(
            f"{label}: correct + incorrect + skipped ({answered}) must equal total questions ({total})"
        )


def validate_test_input(data: Union[TestInput, TestRecord], label: str = "Test") -> None:
    """Reject counts that would store inconsistent or unscorable records."""
    _check_counts(
        label,
        data.total_questions,
        data.correct_questions,
        data.incorrect_questions,
        data.skipped_questions,
    )
    for subject in data.subjects:
        _check_counts(
            f"{label} subject '{subject.subject_name}'",
            subject.total_questions,
            subject.correct_questions,
            subject.incorrect_questions,
            subject.skipped_questions,
        )
    if data.subjects:
        subject_total = sum(s.total_questions for s in data.subjects)
        if subject_total != data.total_questions:
            raise ScoreValidationError(
                f"{label}: Sum of all subject questions ({subject_total}) must equal total questions ({data.total_questions})"
            )


def _check_marks(label: str, stored: Union[TestRecord, SubjectScore], scored: Dict[str, Any]) -> None:
    if stored.total_marks != scored["total_marks"] or stored.marks_obtained != scored["marks_obtained"]:
        raise ScoreValidationError(
            f"{label}: stored marks {stored.marks_obtained}/{stored.total_marks} do not match "
            f"its question counts ({scored['marks_obtained']}/{scored['total_marks']})"
        )


def verify_test_record(record: TestRecord) -> TestRecord:
    """
    Check a record that arrives already scored, as in a backup.

    Counts must be consistent and stored marks must follow the marking scheme.
    Percentage and weightage are recomputed, so the returned copy carries the
    same derived values a fresh create would.
    """
    label = f"Test '{record.id}'"
    validate_test_input(record, label)

    scored = score_test(record.total_questions, record.correct_questions, record.incorrect_questions)
    _check_marks(label, record, scored)

    subjects = []
    for subject in record.subjects:
        rescored = score_subject(subject, record.total_questions)
        _check_marks(f"{label} subject '{subject.subject_name}'", subject, rescored.model_dump())
        subjects.append(rescored)

    return record.model_copy(update={"percentage": scored["percentage"], "subjects": subjects})


def verify_backup_tests(tests: List[TestRecord]) -> List[TestRecord]:
    """Verify every record of a backup; ids must be unique."""
    seen = set()
    verified = []
    for record in tests:
        if record.id in seen:
            raise ScoreValidationError(f"Duplicate test id '{record.id}' in backup")
        seen.add(record.id)
        verified.append(verify_test_record(record))
    return verified


def build_test_record(
    data: TestInput,
    test_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
) -> TestRecord:
    """
    Validate and score a test payload into a storable record.

    Used for both create and update; an update passes the existing id and
    creation time. A missing test date becomes the current time.
    """
    validate_test_input(data)

    now = utcnow()
    scored = score_test(data.total_questions, data.correct_questions, data.incorrect_questions)
    subjects: List[SubjectScore] = [
        score_subject(subject, data.total_questions) for subject in data.subjects
    ]

    record = TestRecord(
        id=test_id or new_id(),
        test_date=data.test_date or now,
        total_questions=data.total_questions,
        correct_questions=data.correct_questions,
        incorrect_questions=data.incorrect_questions,
        skipped_questions=data.skipped_questions,
        subjects=subjects,
        created_at=created_at or now,
        updated_at=now,
        **scored,
    )
    logger.debug(
        f"Scored test {record.id}: {record.marks_obtained}/{record.total_marks} across {len(subjects)} subjects"
    )
    return record
