"""Pydantic models for test records, goals and analytics summaries.

Attributes are snake_case in Python and camelCase on the wire, matching the
documents the dashboard already reads and writes.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, alias_generator=to_camel)


def _as_utc(value: datetime) -> datetime:
    """Naive datetimes are treated as UTC so mixed sources sort together."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ============ TEST INPUT ============
class SubjectScoreInput(CamelModel):
    """Raw question counts for one subject of a test."""
    subject_name: str = Field(min_length=1)
    total_questions: int = Field(ge=0)
    correct_questions: int = Field(ge=0)
    incorrect_questions: int = Field(ge=0)
    skipped_questions: int = Field(default=0, ge=0)


class TestInput(CamelModel):
    """Payload for creating or updating a test."""
    test_date: Optional[datetime] = None  # defaults to now when scored
    total_questions: int = Field(ge=0)
    correct_questions: int = Field(ge=0)
    incorrect_questions: int = Field(ge=0)
    skipped_questions: int = Field(default=0, ge=0)
    subjects: List[SubjectScoreInput] = []

    @field_validator("test_date")
    @classmethod
    def _normalise_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value) if value is not None else None


# ============ STORED RECORDS ============
class SubjectScore(SubjectScoreInput):
    marks_obtained: int
    total_marks: int
    percentage: float
    weightage: float = 0


class TestRecord(CamelModel):
    # backups written by the browser app key records by "_id"
    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    test_date: datetime
    total_questions: int
    correct_questions: int
    incorrect_questions: int
    skipped_questions: int = 0
    total_marks: int
    marks_obtained: int
    percentage: float
    subjects: List[SubjectScore] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("test_date", "created_at", "updated_at")
    @classmethod
    def _normalise_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value) if value is not None else None


# ============ ANALYTICS ============
class TestSummary(CamelModel):
    total_tests: int = 0
    average_score: float = 0
    average_percentage: float = 0
    best_score: int = 0
    worst_score: int = 0
    score_variance: float = 0  # population standard deviation
    improvement: Optional[float] = 0  # None when the first score is 0
    percentile: float = 0
    latest_score: int = 0
    latest_percentage: float = 0


class SubjectSummary(CamelModel):
    subject_name: str
    average_score: float
    average_percentage: float
    best_score: int
    worst_score: int
    latest_score: int
    improvement: Optional[float]  # None when the previous score is 0
    weightage: float
    total_contribution: int
    average_total_marks: float
    average_total_questions: float
    average_correct_questions: float
    average_incorrect_questions: float
    average_skipped_questions: float
    scores: List[int] = []
    percentages: List[float] = []


class Insights(CamelModel):
    improving_subjects: List[str] = []
    declining_subjects: List[str] = []
    weak_subjects: List[str] = []


# ============ GOALS ============
class SubjectGoal(CamelModel):
    subject_name: str = Field(min_length=1)
    target_score: float = Field(gt=0)


class GoalInput(CamelModel):
    overall_target_score: float = Field(gt=0)
    subject_goals: List[SubjectGoal] = []

    @field_validator("subject_goals")
    @classmethod
    def _unique_subjects(cls, goals: List[SubjectGoal]) -> List[SubjectGoal]:
        seen = set()
        for goal in goals:
            if goal.subject_name in seen:
                raise ValueError(f"Duplicate goal for subject '{goal.subject_name}'")
            seen.add(goal.subject_name)
        return goals


class Goal(GoalInput):
    """The single current goal record."""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SubjectProgress(CamelModel):
    subject_name: str
    target_score: float
    current_score: Optional[int] = None  # None = subject absent from latest test
    progress: Optional[float] = None


class GoalProgress(CamelModel):
    overall_target_score: float
    latest_score: Optional[int] = None
    overall_progress: Optional[float] = None
    subjects: List[SubjectProgress] = []


# ============ BACKUP ============
class BackupData(CamelModel):
    """Export/import snapshot. Either part may be omitted on import."""
    tests: Optional[List[TestRecord]] = None
    goals: Optional[Goal] = None

    @field_validator("goals", mode="before")
    @classmethod
    def _empty_goal_is_absent(cls, value):
        # exports write {} when no goal was ever saved
        return value or None


__all__ = [
    "CamelModel",
    "SubjectScoreInput",
    "TestInput",
    "SubjectScore",
    "TestRecord",
    "TestSummary",
    "SubjectSummary",
    "Insights",
    "SubjectGoal",
    "GoalInput",
    "Goal",
    "SubjectProgress",
    "GoalProgress",
    "BackupData",
]
