"""Domain exceptions raised outside of the HTTP layer."""

from typing import Any


class InvalidTierScheduleError(ValueError):
    """An interest tier schedule does not partition the debt domain."""


class BatchOperationError(Exception):
    """A store mutation failed; carries the store's error unmodified."""

    def __init__(self, code: str, error: Any = None):
        super().__init__(code)
        self.code = code
        self.error = error
