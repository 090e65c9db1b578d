"""Scoring and analytics services shared by every storage backend."""

from .scoring import (
    build_test_record,
    compute_marks,
    compute_percentage,
    compute_weightage,
    score_subject,
    score_test,
    validate_test_input,
    verify_backup_tests,
    verify_test_record,
)
from .analytics import (
    aggregate_subjects,
    aggregate_tests,
    build_insights,
    compute_goal_progress,
    list_subject_names,
    sort_chronologically,
)

__all__ = [
    "build_test_record",
    "compute_marks",
    "compute_percentage",
    "compute_weightage",
    "score_subject",
    "score_test",
    "validate_test_input",
    "verify_backup_tests",
    "verify_test_record",
    "aggregate_subjects",
    "aggregate_tests",
    "build_insights",
    "compute_goal_progress",
    "list_subject_names",
    "sort_chronologically",
]
