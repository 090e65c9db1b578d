"""Storage backends for test records and goals."""

from typing import Optional

from .base import TestStore
from .local import LocalTestStore
from .mongo import MongoTestStore

__all__ = [
    "TestStore",
    "LocalTestStore",
    "MongoTestStore",
    "init_store",
    "get_store",
    "reset_store",
]


# Global store instance (initialized in main app)
_store_instance: Optional[TestStore] = None


def init_store(store: TestStore) -> TestStore:
    """Install the active store."""
    global _store_instance
    _store_instance = store
    return _store_instance


def get_store() -> TestStore:
    """Get the active store. Also used as the route dependency."""
    if _store_instance is None:
        raise RuntimeError("Store not initialized. Call init_store() first.")
    return _store_instance


def reset_store() -> None:
    global _store_instance
    _store_instance = None
