"""
Goal and subject routes.

Endpoints:
- GET  /api/goals
- POST /api/goals
- GET  /api/goals/progress
- GET  /api/subjects
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ..models import Goal, GoalInput, GoalProgress
from ..services import compute_goal_progress
from ..storage import TestStore, get_store

logger = logging.getLogger(__name__)


def create_goal_routes() -> APIRouter:
    """Create goal routes."""

    router = APIRouter(prefix="/api/goals", tags=["goals"])

    @router.get("", response_model=Goal)
    async def get_goal(store: TestStore = Depends(get_store)):
        """Current goal, or the default target if none was saved."""
        try:
            return await store.get_goal()
        except Exception as e:
            logger.error(f"Error fetching goal: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    @router.post("", response_model=Goal)
    async def save_goal(data: GoalInput, store: TestStore = Depends(get_store)):
        """Create or replace the current goal."""
        try:
            goal = await store.save_goal(data)
            logger.info(
                f"Saved goal: overall {goal.overall_target_score}, {len(goal.subject_goals)} subject goals"
            )
            return goal
        except Exception as e:
            logger.error(f"Error saving goal: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    @router.get("/progress", response_model=GoalProgress)
    async def get_goal_progress(store: TestStore = Depends(get_store)):
        """Latest test measured against the current goal."""
        try:
            goal = await store.get_goal()
            return compute_goal_progress(await store.list_tests(), goal)
        except Exception as e:
            logger.error(f"Error computing goal progress: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    return router


def create_subject_routes() -> APIRouter:
    """Create subject routes."""

    router = APIRouter(prefix="/api/subjects", tags=["subjects"])

    @router.get("", response_model=List[str])
    async def list_subjects(store: TestStore = Depends(get_store)):
        """Distinct subject names across all tests."""
        try:
            return await store.list_subjects()
        except Exception as e:
            logger.error(f"Error listing subjects: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    return router
