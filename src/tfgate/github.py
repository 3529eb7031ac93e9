"""GitHub Actions integration — step summary and step outputs."""

from __future__ import annotations

import os
from collections.abc import Mapping

from tfgate.aggregator.models import RunResult


def write_step_summary(markdown: str, env: Mapping[str, str] | None = None) -> bool:
    """Append markdown to $GITHUB_STEP_SUMMARY. Returns False when unset."""
    env = os.environ if env is None else env
    summary_file = env.get("GITHUB_STEP_SUMMARY")
    if not summary_file:
        return False
    with open(summary_file, "a", encoding="utf-8") as f:
        f.write(markdown)
        f.write("\n")
    return True


def format_outputs(outputs: Mapping[str, str]) -> str:
    """Format key=value lines for $GITHUB_OUTPUT."""
    return "".join(f"{key}={value}\n" for key, value in outputs.items())


def write_outputs(outputs: Mapping[str, str], env: Mapping[str, str] | None = None) -> bool:
    """Append step outputs to $GITHUB_OUTPUT. Returns False when unset."""
    env = os.environ if env is None else env
    output_file = env.get("GITHUB_OUTPUT")
    if not output_file:
        return False
    with open(output_file, "a", encoding="utf-8") as f:
        f.write(format_outputs(outputs))
    return True


def result_outputs(result: RunResult, sarif_files: list[str] | None = None) -> dict[str, str]:
    """Step outputs describing a run result."""
    return {
        "overall-failed": str(result.overall_failed).lower(),
        "exit-code": str(result.exit_code),
        "sarif-files": ",".join(sarif_files or []),
    }
