"""
Configuration settings for Score Analyser.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

BACKEND_DIR = Path(__file__).resolve().parents[2]
load_dotenv(BACKEND_DIR / ".env")


class Settings:
    """Application settings loaded from environment."""

    # Storage
    STORAGE_BACKEND: str = os.environ.get("STORAGE_BACKEND", "local").lower()  # mongo, local
    MONGODB_URL: str = os.environ.get("MONGODB_URI", "mongodb://localhost:27017")
    DATABASE_NAME: str = os.environ.get("DATABASE_NAME", "score_analyser")
    LOCAL_STORAGE_PATH: str = os.environ.get(
        "LOCAL_STORAGE_PATH", str(BACKEND_DIR / "score_analyser_data.json")
    )

    # Server
    PORT: int = int(os.environ.get("PORT", 5000))
    HOST: str = os.environ.get("HOST", "0.0.0.0")
    DEBUG: bool = os.environ.get("DEBUG", "False").lower() == "true"
    CORS_ORIGINS: list = os.environ.get("CORS_ORIGINS", "*").split(",")

    # Analytics
    DEFAULT_OVERALL_TARGET: int = int(os.environ.get("DEFAULT_OVERALL_TARGET", 800))
    WEAK_SUBJECT_THRESHOLD: float = float(os.environ.get("WEAK_SUBJECT_THRESHOLD", 70))

    # Logging
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    SUPPORTED_BACKENDS = ("mongo", "local")

    def validate(self):
        """Validate critical settings."""
        if self.STORAGE_BACKEND not in self.SUPPORTED_BACKENDS:
            raise ValueError(
                f"STORAGE_BACKEND must be one of {self.SUPPORTED_BACKENDS}, got '{self.STORAGE_BACKEND}'"
            )
        if self.STORAGE_BACKEND == "mongo" and not self.MONGODB_URL:
            raise ValueError("MONGODB_URI environment variable not set")
        if self.STORAGE_BACKEND == "local" and not self.LOCAL_STORAGE_PATH:
            raise ValueError("LOCAL_STORAGE_PATH environment variable not set")
        return True


# Global settings instance
settings = Settings()
