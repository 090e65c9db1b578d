"""Score Analyser - exam attempt tracking and performance analytics."""

__version__ = "1.0.0"
