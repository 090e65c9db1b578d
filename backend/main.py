"""
Score Analyser Backend - Main FastAPI Application

Tracks exam attempts and serves score analytics for the dashboard.
Version: 1.0
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from motor.motor_asyncio import AsyncIOMotorClient

from score_analyser import __version__
from score_analyser.config.settings import settings
from score_analyser.routes import (
    create_backup_routes,
    create_goal_routes,
    create_subject_routes,
    create_test_routes,
)
from score_analyser.storage import (
    LocalTestStore,
    MongoTestStore,
    TestStore,
    get_store,
    init_store,
    reset_store,
)

# Setup logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def _connect_store() -> TestStore:
    """Build the store for the configured backend."""
    if settings.STORAGE_BACKEND == "mongo":
        client = AsyncIOMotorClient(
            settings.MONGODB_URL,
            maxPoolSize=50,
            serverSelectionTimeoutMS=5000,
            tz_aware=True,
        )

        # Test connection
        await client.server_info()
        store = MongoTestStore(client[settings.DATABASE_NAME], settings.DEFAULT_OVERALL_TARGET)
        logger.info(f"✅ Connected to MongoDB: {settings.DATABASE_NAME}")

        await store.create_indexes()
        logger.info("✅ Database indexes created")
        return store

    logger.info(f"✅ Using local storage: {settings.LOCAL_STORAGE_PATH}")
    return LocalTestStore(settings.LOCAL_STORAGE_PATH, settings.DEFAULT_OVERALL_TARGET)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan context manager for startup/shutdown."""

    # STARTUP
    logger.info("🚀 Score Analyser Backend Starting Up...")

    try:
        settings.validate()
        logger.info("✅ Settings validated")

        init_store(await _connect_store())
        logger.info("✅ Application startup complete")

    except Exception as e:
        logger.error(f"❌ Startup failed: {e}")
        raise

    yield

    # SHUTDOWN
    logger.info("🛑 Shutting down...")
    await get_store().close()
    reset_store()


# Create FastAPI application
app = FastAPI(
    title="Score Analyser API",
    description="Exam score tracking and performance analytics",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(create_test_routes())
app.include_router(create_goal_routes())
app.include_router(create_subject_routes())
app.include_router(create_backup_routes())


# Health check endpoint
@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": __version__,
        "storage": settings.STORAGE_BACKEND,
    }


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": "Score Analyser",
        "version": __version__,
        "docs": "/docs",
        "health": "/api/health"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
