"""Storage interface shared by the MongoDB and local-file backends."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from ..models import Goal, GoalInput, TestInput, TestRecord
from ..services import build_test_record, list_subject_names, verify_backup_tests
from ..utils import utcnow


class TestStore(ABC):
    """Persists test records and the single current goal.

    Scoring happens here, once per create/update, so every backend stores
    the same derived fields.
    """

    __test__ = False

    def __init__(self, default_overall_target: float = 800):
        self.default_overall_target = default_overall_target

    # ============ BACKEND HOOKS ============

    @abstractmethod
    async def list_tests(self, newest_first: bool = False) -> List[TestRecord]:
        """All tests ordered by test date."""

    @abstractmethod
    async def get_test(self, test_id: str) -> TestRecord:
        """Raises TestNotFoundError when absent."""

    @abstractmethod
    async def _insert_test(self, record: TestRecord) -> None: ...

    @abstractmethod
    async def _replace_test(self, record: TestRecord) -> None: ...

    @abstractmethod
    async def delete_test(self, test_id: str) -> None:
        """Raises TestNotFoundError when absent."""

    @abstractmethod
    async def _load_goal(self) -> Optional[Goal]: ...

    @abstractmethod
    async def _store_goal(self, goal: Goal) -> None: ...

    @abstractmethod
    async def _import_data(self, tests: Optional[List[TestRecord]], goal: Optional[Goal]) -> None:
        """Replace stored tests and/or goal with already verified data."""

    @abstractmethod
    async def clear_all(self) -> None: ...

    async def close(self) -> None:
        return None

    # ============ SHARED OPERATIONS ============

    async def create_test(self, data: TestInput) -> TestRecord:
        record = build_test_record(data)
        await self._insert_test(record)
        return record

    async def update_test(self, test_id: str, data: TestInput) -> TestRecord:
        existing = await self.get_test(test_id)
        record = build_test_record(data, test_id=existing.id, created_at=existing.created_at)
        await self._replace_test(record)
        return record

    async def list_subjects(self) -> List[str]:
        return list_subject_names(await self.list_tests())

    async def get_goal(self) -> Goal:
        """The current goal, or the default target when none was saved."""
        goal = await self._load_goal()
        if goal is None:
            return Goal(overall_target_score=self.default_overall_target, subject_goals=[])
        return goal

    async def save_goal(self, data: GoalInput) -> Goal:
        """Create or replace the single current goal."""
        existing = await self._load_goal()
        now = utcnow()
        goal = Goal(
            overall_target_score=data.overall_target_score,
            subject_goals=data.subject_goals,
            created_at=existing.created_at if existing and existing.created_at else now,
            updated_at=now,
        )
        await self._store_goal(goal)
        return goal

    async def import_data(self, tests: Optional[List[TestRecord]], goal: Optional[Goal]) -> None:
        """
        Restore a backup. A None part is left untouched.

        Every test is verified before anything stored is replaced; a
        duplicate id or marks that disagree with the counts raise
        ScoreValidationError.
        """
        if tests is not None:
            tests = verify_backup_tests(tests)
        await self._import_data(tests, goal)

    async def export_data(self) -> Dict[str, Any]:
        tests = await self.list_tests()
        goal = await self._load_goal()
        return {
            "tests": [t.model_dump(by_alias=True, mode="json") for t in tests],
            "goals": goal.model_dump(by_alias=True, mode="json") if goal else {},
        }
