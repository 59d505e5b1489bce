"""Exceptions raised by the reputation rules package."""

from __future__ import annotations


class ReputationError(RuntimeError):
    """Base exception for reputation rule failures."""


class StorageError(ReputationError):
    """Raised when a key-value store operation fails.

    Vote log writes and undos stop at the first failing store call, so the
    primary record and its indexes may be left partially updated.
    """

    def __init__(self, operation: str, key: str, message: str | None = None) -> None:
        self.operation = operation
        self.key = key
        super().__init__(message or f"{operation} failed for key {key!r}")


class EvaluationError(ReputationError):
    """Raised when a voting permission could not be determined.

    This is distinct from a denial: the predicate named by ``predicate`` did
    not complete, so the caller does not know whether the vote is allowed.
    """

    def __init__(self, predicate: str, message: str | None = None) -> None:
        self.predicate = predicate
        super().__init__(message or f"Permission check {predicate!r} could not be evaluated")
