"""Errors raised by the scoring engine and the stores."""


class ScoreValidationError(ValueError):
    """Raw counts cannot be scored (zero totals, inconsistent counts)."""


class TestNotFoundError(LookupError):
    """No test with the requested id exists."""

    __test__ = False

    def __init__(self, test_id: str):
        super().__init__(f"Test not found: {test_id}")
        self.test_id = test_id
