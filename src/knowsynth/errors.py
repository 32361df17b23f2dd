"""Exception types shared across the knowsynth layer."""

from __future__ import annotations


class KnowsynthError(RuntimeError):
    """Base class for errors raised by knowsynth."""


class BackendError(KnowsynthError):
    """Raised when the generation or embedding backend fails or answers malformed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DimensionMismatchError(KnowsynthError, ValueError):
    """Raised when two vectors of different length are compared."""

    def __init__(self, left: int, right: int) -> None:
        super().__init__(f"Vectors must have the same length (got {left} and {right})")
        self.left = left
        self.right = right


__all__ = ["BackendError", "DimensionMismatchError", "KnowsynthError"]
