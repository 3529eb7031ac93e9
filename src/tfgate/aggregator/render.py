"""Markdown rendering of run results.

The rendered text is what lands in the GitHub Actions step summary, so it is
deterministic for a given RunResult and never raises.
"""

from __future__ import annotations

from tfgate.aggregator.models import CheckStage, RunResult, StageOutcome

STATUS_LABELS: dict[StageOutcome, str] = {
    StageOutcome.PASSED: "✅ Passed",
    StageOutcome.FAILED: "❌ Failed",
    StageOutcome.SKIPPED: "⏭️ Skipped",
    StageOutcome.NOT_RUN: "⚠️ Not run",
}

PENDING_LABEL = "… Pending"


def status_label(stage: CheckStage) -> str:
    """Human-readable status for a stage."""
    if stage.outcome is None:
        return PENDING_LABEL
    return STATUS_LABELS[stage.outcome]


def verdict_label(result: RunResult) -> str:
    """One-line verdict for the whole run."""
    if not result.overall_failed:
        return "✅ All checks passed"
    if result.soft_failed:
        return "⚠️ Checks failed (soft fail: not blocking)"
    return "❌ Checks failed"


def footer(result: RunResult) -> str:
    """Describe the inputs that produced the run."""
    soft_fail = "true" if result.soft_fail else "false"
    return (
        f"Directory: `{result.working_dir}` · "
        f"Terraform: `{result.terraform_version}` · "
        f"Soft fail: `{soft_fail}`"
    )


def _cell(text: str | None) -> str:
    if not text:
        return ""
    return " ".join(text.split()).replace("|", "\\|")


def render(result: RunResult, title: str = "Terraform validation") -> str:
    """Render a run result as a markdown table.

    One row per stage in declaration order, then the verdict and a footer.

    Args:
        result: Run result to render
        title: Heading for the table

    Returns:
        Markdown text ending with a newline
    """
    lines = [
        f"## {title}",
        "",
        "| Stage | Status | Detail |",
        "| --- | --- | --- |",
    ]
    for stage in result.stages:
        lines.append(f"| {_cell(stage.name)} | {status_label(stage)} | {_cell(stage.detail)} |")

    if not result.stages:
        lines.append("")
        lines.append("_No stages configured._")

    lines.append("")
    lines.append(f"**{verdict_label(result)}**")
    lines.append("")
    lines.append(footer(result))
    return "\n".join(lines) + "\n"
