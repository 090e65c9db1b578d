"""
Analytics engine - derives performance statistics from the stored test history.

All functions are pure: they read a snapshot of TestRecords and return fresh
summaries. Both storage backends and the HTTP routes share this module.

FLOW:
1. Sort tests by test date (stable, so equal dates keep their input order)
2. Test level: averages, best/worst, spread, improvement, percentile
3. Subject level: group subject records by exact name, then the same
   statistics per subject plus weightage and total contribution
"""

import math
from typing import Dict, Iterable, List, Optional, Sequence

from ..models import (
    Goal,
    GoalProgress,
    Insights,
    SubjectProgress,
    SubjectScore,
    SubjectSummary,
    TestRecord,
    TestSummary,
)
from ..utils import mean, percent_change, round2


def sort_chronologically(tests: Iterable[TestRecord]) -> List[TestRecord]:
    return sorted(tests, key=lambda t: t.test_date)


# ============ TEST LEVEL ============

def aggregate_tests(tests: Sequence[TestRecord]) -> TestSummary:
    """
    Overall statistics across every recorded test.

    - score_variance is the population standard deviation of marks
    - improvement compares the latest test with the first one
    - percentile places the latest score in the descending list of all
      scores; tied scores all take the position of the first of them
    """
    ordered = sort_chronologically(tests)
    if not ordered:
        return TestSummary()

    scores = [t.marks_obtained for t in ordered]
    percentages = [t.percentage for t in ordered]
    count = len(scores)

    average_score = mean(scores)
    variance = sum((score - average_score) ** 2 for score in scores) / count
    improvement = percent_change(scores[-1], scores[0]) if count > 1 else 0

    latest = ordered[-1]
    ranked = sorted(scores, reverse=True)
    percentile = (count - ranked.index(latest.marks_obtained)) / count * 100

    return TestSummary(
        total_tests=count,
        average_score=round2(average_score),
        average_percentage=round2(mean(percentages)),
        best_score=max(scores),
        worst_score=min(scores),
        score_variance=round2(math.sqrt(variance)),
        improvement=round2(improvement),
        percentile=round2(percentile),
        latest_score=latest.marks_obtained,
        latest_percentage=latest.percentage,
    )


# ============ SUBJECT LEVEL ============

def group_subjects(tests: Sequence[TestRecord]) -> Dict[str, List[SubjectScore]]:
    """Subject records by name, in chronological order, first-seen names first."""
    groups: Dict[str, List[SubjectScore]] = {}
    for test in sort_chronologically(tests):
        for subject in test.subjects:
            groups.setdefault(subject.subject_name, []).append(subject)
    return groups


def summarize_subject(subject_name: str, occurrences: Sequence[SubjectScore]) -> SubjectSummary:
    """Statistics for one subject's chronological series of records."""
    scores = [s.marks_obtained for s in occurrences]
    percentages = [s.percentage for s in occurrences]

    latest_score = scores[-1]
    # Subjects track the most recent change, not the change since the first test
    previous_score = scores[-2] if len(scores) > 1 else latest_score
    improvement = percent_change(latest_score, previous_score) if len(scores) > 1 else 0

    return SubjectSummary(
        subject_name=subject_name,
        average_score=round2(mean(scores)),
        average_percentage=round2(mean(percentages)),
        best_score=max(scores),
        worst_score=min(scores),
        latest_score=latest_score,
        improvement=round2(improvement),
        weightage=round2(mean([s.weightage for s in occurrences])),
        total_contribution=sum(scores),
        average_total_marks=round2(mean([s.total_marks for s in occurrences])),
        average_total_questions=round2(mean([s.total_questions for s in occurrences])),
        average_correct_questions=round2(mean([s.correct_questions for s in occurrences])),
        average_incorrect_questions=round2(mean([s.incorrect_questions for s in occurrences])),
        average_skipped_questions=round2(mean([s.skipped_questions for s in occurrences])),
        scores=scores,
        percentages=percentages,
    )


def aggregate_subjects(tests: Sequence[TestRecord]) -> List[SubjectSummary]:
    return [
        summarize_subject(name, occurrences)
        for name, occurrences in group_subjects(tests).items()
    ]


def list_subject_names(tests: Sequence[TestRecord]) -> List[str]:
    """Distinct subject names across all tests."""
    return list(group_subjects(tests).keys())


# ============ DASHBOARD HELPERS ============

def build_insights(subjects: Sequence[SubjectSummary], weak_threshold: float) -> Insights:
    """Split subjects into improving, declining and weak groups."""
    return Insights(
        improving_subjects=[
            s.subject_name for s in subjects if s.improvement is not None and s.improvement > 0
        ],
        declining_subjects=[
            s.subject_name for s in subjects if s.improvement is not None and s.improvement < 0
        ],
        weak_subjects=[s.subject_name for s in subjects if s.average_percentage < weak_threshold],
    )


def _progress(current: float, target: float) -> Optional[float]:
    return round2(current / target * 100)


def compute_goal_progress(tests: Sequence[TestRecord], goal: Goal) -> GoalProgress:
    """
    Progress of the latest test towards the current goal.

    A subject goal whose subject is missing from the latest test has no
    current score and no progress. With no tests at all, nothing is reported.
    """
    ordered = sort_chronologically(tests)
    if not ordered:
        return GoalProgress(
            overall_target_score=goal.overall_target_score,
            subjects=[
                SubjectProgress(subject_name=g.subject_name, target_score=g.target_score)
                for g in goal.subject_goals
            ],
        )

    latest = ordered[-1]
    latest_subjects = {}
    for subject in latest.subjects:
        latest_subjects.setdefault(subject.subject_name, subject)

    subjects = []
    for subject_goal in goal.subject_goals:
        match = latest_subjects.get(subject_goal.subject_name)
        subjects.append(
            SubjectProgress(
                subject_name=subject_goal.subject_name,
                target_score=subject_goal.target_score,
                current_score=match.marks_obtained if match else None,
                progress=_progress(match.marks_obtained, subject_goal.target_score) if match else None,
            )
        )

    return GoalProgress(
        overall_target_score=goal.overall_target_score,
        latest_score=latest.marks_obtained,
        overall_progress=_progress(latest.marks_obtained, goal.overall_target_score),
        subjects=subjects,
    )
