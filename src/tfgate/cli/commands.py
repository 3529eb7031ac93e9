"""CLI command functions. Each returns the process exit code."""

from __future__ import annotations

import json
from pathlib import Path

import rich
from rich.table import Table
from rich.text import Text

from tfgate.aggregator.errors import AggregatorError
from tfgate.aggregator.models import RunResult, StageOutcome
from tfgate.aggregator.render import footer, render, status_label, verdict_label
from tfgate.aggregator.store import RunStore
from tfgate.config import PipelineSettings
from tfgate.github import result_outputs, write_outputs, write_step_summary
from tfgate.pipeline import ValidationPipeline, build_configuration

_STATUS_STYLES = {
    StageOutcome.PASSED: "green",
    StageOutcome.FAILED: "red",
    StageOutcome.SKIPPED: "dim",
    StageOutcome.NOT_RUN: "yellow",
}


def _error(message: str, format: str) -> int:
    if format == "human":
        rich.print(f"[red]Error:[/red] {message}")
    else:
        print(json.dumps({"error": message}))
    return 1


def run_command(settings: PipelineSettings, format: str = "human", verbose: bool = False) -> int:
    """Run the full validation pipeline.

    Args:
        settings: Pipeline inputs (environment merged with CLI options)
        format: Output format: "human", "json", or "markdown"
        verbose: Echo tool output for stages that did not pass

    Returns:
        Exit code (0 = passed or soft-failed, 1 = failed)
    """
    pipeline = ValidationPipeline(settings, verbose=verbose)
    try:
        run = pipeline.run()
    except AggregatorError as e:
        return _error(e.message, format)

    _publish(run.result, run.sarif_files)
    output_result(run.result, format)
    return run.result.exit_code


def init_command(settings: PipelineSettings, state_file: Path, format: str = "human") -> int:
    """Start a persisted run so separate steps can record outcomes."""
    config = build_configuration(settings)
    RunStore(state_file).init(config)

    if format == "human":
        enabled = ", ".join(s.name for s in config.enabled_stages) or "none"
        rich.print(f"[green]✓[/green] Run started in {state_file} (enabled: {enabled})")
    else:
        print(json.dumps({"state_file": str(state_file), **config.model_dump(mode="json")}))
    return 0


def record_command(
    stage: str,
    outcome: str,
    state_file: Path,
    detail: str | None = None,
    format: str = "human",
) -> int:
    """Record one stage outcome in a persisted run."""
    try:
        recorded = RunStore(state_file).record(stage, outcome, detail)
    except AggregatorError as e:
        return _error(e.message, format)

    if format == "human":
        rich.print(f"Recorded {recorded.name}: {status_label(recorded)}")
    else:
        print(json.dumps(recorded.model_dump(mode="json")))
    return 0


def finalize_command(state_file: Path, format: str = "human") -> int:
    """Aggregate a persisted run and exit with its verdict."""
    try:
        result = RunStore(state_file).finalize()
    except AggregatorError as e:
        return _error(e.message, format)

    _publish(result)
    output_result(result, format)
    return result.exit_code


def _publish(result: RunResult, sarif_files: list[str] | None = None) -> None:
    """Hand the result to GitHub Actions when running there."""
    write_step_summary(render(result))
    write_outputs(result_outputs(result, sarif_files))


def output_result(result: RunResult, format: str) -> None:
    """Output a run result in the specified format.

    Args:
        result: RunResult to output
        format: Output format ("human", "json", or "markdown")
    """
    if format == "json":
        print(json.dumps(result.model_dump(mode="json"), indent=2))

    elif format == "markdown":
        print(render(result), end="")

    else:  # human
        table = Table(title="Terraform validation", show_lines=False)
        table.add_column("Stage")
        table.add_column("Status")
        table.add_column("Detail")
        for stage in result.stages:
            style = _STATUS_STYLES.get(stage.outcome, "") if stage.outcome else ""
            table.add_row(Text(stage.name), status_label(stage), Text(stage.detail or ""), style=style)

        rich.print("")
        rich.print(table)

        if result.passed:
            rich.print(f"\n[green]{verdict_label(result)}[/green]")
        elif result.soft_failed:
            rich.print(f"\n[yellow]{verdict_label(result)}[/yellow]")
        else:
            rich.print(f"\n[red]{verdict_label(result)}[/red]")

        rich.print(f"[dim]{footer(result)}[/dim]\n")
