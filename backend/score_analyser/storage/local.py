"""Single-file JSON store for one user on one machine.

The file holds ``{"tests": [...], "goals": {...}}``, the same shape as an
exported backup.
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..exceptions import TestNotFoundError
from ..models import Goal, TestRecord
from ..services import sort_chronologically
from .base import TestStore

logger = logging.getLogger(__name__)


class LocalTestStore(TestStore):
    """
    File I/O runs in a worker thread so the event loop is never blocked.

    Writes are serialized by a lock and land through an atomic replace, so
    unlocked readers always see either the previous or the next complete file.
    """

    def __init__(self, path: str, default_overall_target: float = 800):
        super().__init__(default_overall_target)
        self.path = Path(path)
        self._lock = asyncio.Lock()

    # ============ FILE ACCESS ============

    def _read_file(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {"tests": [], "goals": None}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Error reading {self.path}: {e}")
            raise
        return {"tests": data.get("tests") or [], "goals": data.get("goals") or None}

    def _write_file(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, self.path)

    async def _read(self) -> Dict[str, Any]:
        return await asyncio.to_thread(self._read_file)

    async def _write(self, data: Dict[str, Any]) -> None:
        await asyncio.to_thread(self._write_file, data)

    @staticmethod
    def _dump(record: TestRecord) -> Dict[str, Any]:
        return record.model_dump(by_alias=True, mode="json")

    async def _load_tests(self) -> List[TestRecord]:
        data = await self._read()
        return [TestRecord.model_validate(doc) for doc in data["tests"]]

    # ============ TESTS ============

    async def list_tests(self, newest_first: bool = False) -> List[TestRecord]:
        tests = sort_chronologically(await self._load_tests())
        if newest_first:
            tests.reverse()
        return tests

    async def get_test(self, test_id: str) -> TestRecord:
        for test in await self._load_tests():
            if test.id == test_id:
                return test
        raise TestNotFoundError(test_id)

    async def _insert_test(self, record: TestRecord) -> None:
        async with self._lock:
            data = await self._read()
            data["tests"].append(self._dump(record))
            await self._write(data)

    async def _replace_test(self, record: TestRecord) -> None:
        async with self._lock:
            data = await self._read()
            for index, doc in enumerate(data["tests"]):
                if doc.get("id") == record.id:
                    data["tests"][index] = self._dump(record)
                    await self._write(data)
                    return
        raise TestNotFoundError(record.id)

    async def delete_test(self, test_id: str) -> None:
        async with self._lock:
            data = await self._read()
            remaining = [doc for doc in data["tests"] if doc.get("id") != test_id]
            if len(remaining) == len(data["tests"]):
                raise TestNotFoundError(test_id)
            data["tests"] = remaining
            await self._write(data)

    # ============ GOAL ============

    async def _load_goal(self) -> Optional[Goal]:
        data = await self._read()
        doc = data["goals"]
        return Goal.model_validate(doc) if doc else None

    async def _store_goal(self, goal: Goal) -> None:
        async with self._lock:
            data = await self._read()
            data["goals"] = goal.model_dump(by_alias=True, mode="json")
            await self._write(data)

    # ============ BACKUP ============

    async def _import_data(self, tests: Optional[List[TestRecord]], goal: Optional[Goal]) -> None:
        async with self._lock:
            data = await self._read()
            if tests is not None:
                data["tests"] = [self._dump(t) for t in tests]
                logger.info(f"Imported {len(tests)} tests")
            if goal is not None:
                data["goals"] = goal.model_dump(by_alias=True, mode="json")
                logger.info("Imported goal")
            await self._write(data)

    async def clear_all(self) -> None:
        async with self._lock:
            if self.path.exists():
                self.path.unlink()
        logger.info(f"Cleared local data at {self.path}")
