"""MongoDB-backed store (motor)."""

import logging
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from ..exceptions import TestNotFoundError
from ..models import Goal, TestRecord
from .base import TestStore

logger = logging.getLogger(__name__)


def record_to_document(record: TestRecord) -> Dict[str, Any]:
    """camelCase document; datetimes stay native for BSON."""
    return record.model_dump(by_alias=True)


def document_to_record(doc: Dict[str, Any]) -> TestRecord:
    doc = {k: v for k, v in doc.items() if k != "_id"}
    return TestRecord.model_validate(doc)


class MongoTestStore(TestStore):
    """Stores tests in one collection and the goal as a keyed singleton."""

    TESTS_COLLECTION = "tests"
    GOALS_COLLECTION = "goals"
    GOAL_KEY = "current"
    IMPORT_STAGING_COLLECTION = "tests_import"

    def __init__(self, db: AsyncIOMotorDatabase, default_overall_target: float = 800):
        super().__init__(default_overall_target)
        self.db = db
        self.tests_col = db[self.TESTS_COLLECTION]
        self.goals_col = db[self.GOALS_COLLECTION]

    async def create_indexes(self) -> None:
        """Create database indexes for lookups and date ordering."""
        try:
            await self.tests_col.create_index("id", unique=True)
            await self.tests_col.create_index("testDate")
            await self.goals_col.create_index("key", unique=True)
        except Exception as e:
            logger.warning(f"Index creation warning: {e}")

    # ============ TESTS ============

    async def list_tests(self, newest_first: bool = False) -> List[TestRecord]:
        cursor = self.tests_col.find({}, {"_id": 0}).sort("testDate", -1 if newest_first else 1)
        docs = await cursor.to_list(length=None)
        return [document_to_record(doc) for doc in docs]

    async def get_test(self, test_id: str) -> TestRecord:
        doc = await self.tests_col.find_one({"id": test_id}, {"_id": 0})
        if not doc:
            raise TestNotFoundError(test_id)
        return document_to_record(doc)

    async def _insert_test(self, record: TestRecord) -> None:
        await self.tests_col.insert_one(record_to_document(record))

    async def _replace_test(self, record: TestRecord) -> None:
        result = await self.tests_col.replace_one({"id": record.id}, record_to_document(record))
        if result.matched_count == 0:
            raise TestNotFoundError(record.id)

    async def delete_test(self, test_id: str) -> None:
        result = await self.tests_col.delete_one({"id": test_id})
        if result.deleted_count == 0:
            raise TestNotFoundError(test_id)

    # ============ GOAL ============

    async def _load_goal(self) -> Optional[Goal]:
        doc = await self.goals_col.find_one({"key": self.GOAL_KEY}, {"_id": 0, "key": 0})
        return Goal.model_validate(doc) if doc else None

    async def _store_goal(self, goal: Goal) -> None:
        doc = goal.model_dump(by_alias=True)
        doc["key"] = self.GOAL_KEY
        await self.goals_col.replace_one({"key": self.GOAL_KEY}, doc, upsert=True)

    # ============ BACKUP ============

    async def _import_data(self, tests: Optional[List[TestRecord]], goal: Optional[Goal]) -> None:
        if tests is not None:
            if tests:
                # Load into a staging collection first; the live one is only
                # swapped out once every document is in.
                staging = self.db[self.IMPORT_STAGING_COLLECTION]
                await staging.drop()
                await staging.insert_many([record_to_document(t) for t in tests])
                await staging.create_index("id", unique=True)
                await staging.create_index("testDate")
                await staging.rename(self.TESTS_COLLECTION, dropTarget=True)
            else:
                await self.tests_col.delete_many({})
            logger.info(f"Imported {len(tests)} tests")
        if goal is not None:
            await self._store_goal(goal)
            logger.info("Imported goal")

    async def clear_all(self) -> None:
        tests = await self.tests_col.delete_many({})
        await self.goals_col.delete_many({})
        logger.info(f"Cleared {tests.deleted_count} tests and the current goal")

    async def close(self) -> None:
        self.db.client.close()
        logger.info("✅ Database connection closed")
