"""tfgate stages — running the wrapped tools and deriving stage outcomes.

Public API for stages module.
"""

from tfgate.stages.commands import PIPELINE_ORDER, StageCommands, StageName
from tfgate.stages.comment import PullRequestCommenter, drift_comment, pull_request_number
from tfgate.stages.drift import DocsDriftCheck, DriftMode, DriftReport, compare_docs, normalize_docs
from tfgate.stages.runner import ToolResult, ToolRunner, run_tool

__all__ = [
    "PIPELINE_ORDER",
    "DocsDriftCheck",
    "DriftMode",
    "DriftReport",
    "PullRequestCommenter",
    "StageCommands",
    "StageName",
    "ToolResult",
    "ToolRunner",
    "compare_docs",
    "drift_comment",
    "normalize_docs",
    "pull_request_number",
    "run_tool",
]
