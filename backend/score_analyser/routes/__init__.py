"""API routers."""

from .test_routes import create_test_routes
from .goal_routes import create_goal_routes, create_subject_routes
from .backup_routes import create_backup_routes

__all__ = [
    "create_test_routes",
    "create_goal_routes",
    "create_subject_routes",
    "create_backup_routes",
]
