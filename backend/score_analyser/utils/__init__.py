"""Utility functions for the Score Analyser backend."""

import math
import uuid
from datetime import datetime, timezone
from typing import Optional, Sequence


def round2(value: Optional[float]) -> Optional[float]:
    """Round to 2 decimals with halves going up, like ``Math.round(x * 100) / 100``.

    Non-finite values (from a zero baseline) come back as ``None``.
    """
    if value is None or not math.isfinite(value):
        return None
    return math.floor(value * 100 + 0.5) / 100


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean of a non-empty sequence."""
    return sum(values) / len(values)


def percent_change(current: float, baseline: float) -> Optional[float]:
    """(current - baseline) / baseline * 100, or None when baseline is 0."""
    if baseline == 0:
        return None
    return (current - baseline) / baseline * 100


def new_id() -> str:
    """Generate a unique record id."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
