"""tfgate aggregator — stage outcome aggregation and failure propagation.

Public API for aggregator module.
"""

from tfgate.aggregator.aggregator import ValidationAggregator, aggregate
from tfgate.aggregator.errors import (
    AggregatorError,
    DuplicateStageReport,
    InvalidOutcome,
    StageDisabledViolation,
    UnknownStage,
)
from tfgate.aggregator.models import CheckStage, RunConfiguration, RunResult, StageOutcome
from tfgate.aggregator.render import render
from tfgate.aggregator.store import RunState, RunStore

__all__ = [
    "AggregatorError",
    "CheckStage",
    "DuplicateStageReport",
    "InvalidOutcome",
    "RunConfiguration",
    "RunResult",
    "RunState",
    "RunStore",
    "StageDisabledViolation",
    "StageOutcome",
    "UnknownStage",
    "ValidationAggregator",
    "aggregate",
    "render",
]
