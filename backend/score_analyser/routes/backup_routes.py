"""
Backup routes.

Endpoints:
- GET    /api/backup/export
- POST   /api/backup/import
- DELETE /api/backup
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from ..exceptions import ScoreValidationError
from ..models import BackupData
from ..storage import TestStore, get_store

logger = logging.getLogger(__name__)


def create_backup_routes() -> APIRouter:
    """Create backup routes."""

    router = APIRouter(prefix="/api/backup", tags=["backup"])

    @router.get("/export")
    async def export_data(store: TestStore = Depends(get_store)):
        """Snapshot of all tests and the current goal."""
        try:
            return await store.export_data()
        except Exception as e:
            logger.error(f"Error exporting data: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    @router.post("/import")
    async def import_data(data: BackupData, store: TestStore = Depends(get_store)):
        """Restore a snapshot. Omitted parts are kept as they are."""
        try:
            await store.import_data(data.tests, data.goals)
            return {
                "message": "Data imported successfully",
                "tests": len(data.tests) if data.tests is not None else None,
                "goals": data.goals is not None,
            }
        except ScoreValidationError as e:
            logger.warning(f"Rejected backup import: {e}")
            raise HTTPException(status_code=400, detail=str(e))
        except Exception as e:
            logger.error(f"Error importing data: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    @router.delete("")
    async def clear_data(store: TestStore = Depends(get_store)):
        """Remove every test and the current goal."""
        try:
            await store.clear_all()
            return {"message": "All data cleared"}
        except Exception as e:
            logger.error(f"Error clearing data: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    return router
