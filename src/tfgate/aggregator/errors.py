"""Aggregator usage errors.

These signal that a caller broke the aggregator's reporting contract.
Tool and infrastructure failures are never raised; they are outcomes.
"""

from __future__ import annotations


class AggregatorError(Exception):
    """Base class for aggregator usage errors."""

    def __init__(self, message: str) -> None:
        """Initialize AggregatorError with a message."""
        self.message = message
        super().__init__(message)


class UnknownStage(AggregatorError):
    """Raised when an outcome is reported for a stage the run does not declare."""


class InvalidOutcome(AggregatorError):
    """Raised when a collaborator reports an outcome it is not allowed to set."""


class DuplicateStageReport(AggregatorError):
    """Raised when a stage reports more than once in a single run."""


class StageDisabledViolation(AggregatorError):
    """Raised when a disabled stage reports an outcome."""
