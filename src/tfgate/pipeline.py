"""Validation pipeline — runs every enabled stage and aggregates the verdict."""

from __future__ import annotations

import concurrent.futures
import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from tfgate.aggregator.aggregator import ValidationAggregator
from tfgate.aggregator.models import CheckStage, RunConfiguration, RunResult, StageOutcome
from tfgate.config import PipelineSettings
from tfgate.console import console
from tfgate.stages.commands import PIPELINE_ORDER, StageCommands, StageName
from tfgate.stages.comment import PullRequestCommenter, drift_comment, pull_request_number
from tfgate.stages.drift import DocsDriftCheck
from tfgate.stages.runner import ToolResult, ToolRunner

_STATUS_MARKS = {
    StageOutcome.PASSED: "[green]✓[/green]",
    StageOutcome.FAILED: "[red]✗[/red]",
    StageOutcome.NOT_RUN: "[yellow]![/yellow]",
}


def build_configuration(settings: PipelineSettings) -> RunConfiguration:
    """Declare the pipeline's stages from the settings' feature flags."""
    return RunConfiguration(
        stages=[
            CheckStage(name=stage, enabled=settings.stage_enabled(stage))
            for stage in PIPELINE_ORDER
        ],
        soft_fail=settings.soft_fail,
        working_dir=settings.working_dir,
        terraform_version=settings.terraform_version,
    )


class PipelineRun(BaseModel):
    """Everything one pipeline invocation produced."""

    result: RunResult
    tool_results: list[ToolResult] = Field(default_factory=list)
    comment_posted: bool = False

    model_config = ConfigDict(frozen=True)

    @property
    def sarif_files(self) -> list[str]:
        """SARIF reports to forward, relative to the working directory."""
        return [r.sarif_file for r in self.tool_results if r.sarif_file]


class ValidationPipeline:
    """Runs the Terraform validation stages.

    Every enabled stage runs regardless of its siblings' outcomes, so one run
    shows every problem at once.
    """

    def __init__(
        self,
        settings: PipelineSettings,
        commands: StageCommands | None = None,
        commenter: PullRequestCommenter | None = None,
        env: Mapping[str, str] | None = None,
        verbose: bool = False,
    ) -> None:
        """Initialize validation pipeline.

        Args:
            settings: Pipeline inputs
            commands: Tool commands (defaults derived from settings)
            commenter: PR commenter for docs drift (gh CLI by default)
            env: Environment used to detect a pull request context
            verbose: Echo tool output for stages that did not pass
        """
        self.settings = settings
        self.working_dir = Path(settings.working_dir)
        self.commands = commands or StageCommands(
            sarif_dir=settings.sarif_dir,
            docs_file=settings.docs_file,
        )
        self.commenter = commenter or PullRequestCommenter(cwd=self.working_dir)
        self.env = os.environ if env is None else env
        self.verbose = verbose

    def build_configuration(self) -> RunConfiguration:
        """Run configuration for this pipeline's settings."""
        return build_configuration(self.settings)

    def run(self) -> PipelineRun:
        """Run all enabled stages and compute the verdict."""
        config = self.build_configuration()
        aggregator = ValidationAggregator(config)
        stages = [StageName(s.name) for s in config.enabled_stages]

        if self.working_dir.is_dir():
            (self.working_dir / self.commands.sarif_dir).mkdir(parents=True, exist_ok=True)

        if self.settings.parallel:
            tool_results = self._run_parallel(stages, aggregator)
        else:
            tool_results = self._run_sequential(stages, aggregator)

        comment_posted = self._comment_on_drift(tool_results)

        return PipelineRun(
            result=aggregator.finalize(),
            tool_results=tool_results,
            comment_posted=comment_posted,
        )

    def run_stage(self, stage: StageName) -> ToolResult:
        """Run a single stage's tool."""
        command = self.commands.command_for(stage)
        console.print(f"[dim]→ {stage}: {command}[/dim]")

        if stage == StageName.DOCS_DRIFT:
            check = DocsDriftCheck(
                stage=stage,
                docs_file=self.settings.docs_file,
                command=command,
                cwd=self.working_dir,
                mode=self.settings.drift_mode,
                timeout_seconds=self.settings.timeout_seconds,
            )
            return check.run()

        runner = ToolRunner(
            stage=stage,
            command=command,
            cwd=self.working_dir,
            timeout_seconds=self.settings.timeout_seconds,
            sarif_path=self.commands.sarif_path(stage),
            sarif_from_stdout=self.commands.sarif_from_stdout(stage),
        )
        return runner.run()

    def _record(self, aggregator: ValidationAggregator, result: ToolResult) -> None:
        aggregator.record_outcome(result.stage, result.outcome, result.detail)

        detail = f" — {result.detail}" if result.detail else ""
        duration_s = result.duration_ms / 1000
        console.print(f"{_STATUS_MARKS[result.outcome]} {result.stage}{detail} ({duration_s:.2f}s)")
        if self.verbose and result.outcome != StageOutcome.PASSED:
            output = (result.stderr or "") + (result.stdout or "")
            if output.strip():
                console.print(output.rstrip(), markup=False, highlight=False)

    def _crashed(self, stage: StageName, error: Exception) -> ToolResult:
        return ToolResult(
            stage=stage,
            outcome=StageOutcome.NOT_RUN,
            detail=f"{stage} crashed: {error}",
            command=self.commands.command_for(stage),
            duration_ms=0,
        )

    def _run_sequential(
        self, stages: list[StageName], aggregator: ValidationAggregator
    ) -> list[ToolResult]:
        """Run stages one after another, recording each as it completes."""
        results: list[ToolResult] = []
        for stage in stages:
            try:
                result = self.run_stage(stage)
            except Exception as e:
                result = self._crashed(stage, e)
            self._record(aggregator, result)
            results.append(result)
        return results

    def _run_parallel(
        self, stages: list[StageName], aggregator: ValidationAggregator
    ) -> list[ToolResult]:
        """Run stages concurrently and wait for all of them before returning."""
        by_stage: dict[StageName, ToolResult] = {}

        with concurrent.futures.ThreadPoolExecutor() as executor:
            futures = {executor.submit(self.run_stage, stage): stage for stage in stages}

            for future in concurrent.futures.as_completed(futures):
                stage = futures[future]
                try:
                    result = future.result()
                except Exception as e:
                    result = self._crashed(stage, e)
                self._record(aggregator, result)
                by_stage[stage] = result

        return [by_stage[stage] for stage in stages]

    def _comment_on_drift(self, tool_results: list[ToolResult]) -> bool:
        """Ask the PR author to regenerate docs when drift was detected."""
        if not self.settings.comment_on_drift:
            return False

        drift = next(
            (
                r
                for r in tool_results
                if r.stage == StageName.DOCS_DRIFT
                and r.outcome == StageOutcome.FAILED
                and r.details
                and r.details.get("drifted")
            ),
            None,
        )
        if drift is None:
            return False

        pr_number = pull_request_number(self.env)
        if pr_number is None:
            return False

        diff = str(drift.details.get("diff", "")) if drift.details else ""
        command = self.commands.command_for(StageName.DOCS_DRIFT)
        return self.commenter.post(
            pr_number, drift_comment(self.settings.docs_file, command, diff)
        )
