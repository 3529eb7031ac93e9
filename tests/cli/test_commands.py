"""Tests for CLI command functions."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from tfgate.aggregator.models import CheckStage, RunConfiguration, StageOutcome
from tfgate.aggregator.render import render
from tfgate.aggregator.store import RunStore
from tfgate.cli.commands import finalize_command, init_command, record_command, run_command
from tfgate.config import PipelineSettings
from tfgate.pipeline import PipelineRun
from tfgate.stages.runner import ToolResult


def _pipeline_run(failed: bool, soft_fail: bool = False) -> PipelineRun:
    from tfgate.aggregator.aggregator import ValidationAggregator

    config = RunConfiguration(
        stages=[CheckStage(name="format"), CheckStage(name="lint")], soft_fail=soft_fail
    )
    aggregator = ValidationAggregator(config)
    aggregator.record_outcome("format", StageOutcome.PASSED)
    aggregator.record_outcome("lint", StageOutcome.FAILED if failed else StageOutcome.PASSED)
    return PipelineRun(
        result=aggregator.finalize(),
        tool_results=[
            ToolResult(
                stage="lint",
                outcome=StageOutcome.PASSED,
                command="tflint",
                duration_ms=1,
                sarif_file=".tfgate/sarif/lint.sarif",
            )
        ],
    )


class TestRunCommand:
    """Test run_command."""

    @patch("tfgate.pipeline.ValidationPipeline.run")
    def test_passing(self, mock_run, tmp_path: Path) -> None:
        """A passing run returns 0."""
        mock_run.return_value = _pipeline_run(failed=False)

        assert run_command(PipelineSettings(working_dir=str(tmp_path))) == 0

    @patch("tfgate.pipeline.ValidationPipeline.run")
    def test_failing(self, mock_run, tmp_path: Path) -> None:
        """A failing run returns 1."""
        mock_run.return_value = _pipeline_run(failed=True)

        assert run_command(PipelineSettings(working_dir=str(tmp_path))) == 1

    @patch("tfgate.pipeline.ValidationPipeline.run")
    def test_json_output(
        self, mock_run, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """JSON output is the serialized RunResult."""
        mock_run.return_value = _pipeline_run(failed=True, soft_fail=True)

        exit_code = run_command(PipelineSettings(working_dir=str(tmp_path)), format="json")

        data = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert data["overall_failed"] is True
        assert data["exit_code"] == 0
        assert [s["outcome"] for s in data["stages"]] == ["passed", "failed"]

    @patch("tfgate.pipeline.ValidationPipeline.run")
    def test_markdown_output(
        self, mock_run, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Markdown output is the rendered table."""
        run = _pipeline_run(failed=True)
        mock_run.return_value = run

        run_command(PipelineSettings(working_dir=str(tmp_path)), format="markdown")

        assert capsys.readouterr().out == render(run.result)

    @patch("tfgate.pipeline.ValidationPipeline.run")
    def test_publishes_to_github_actions(
        self, mock_run, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """In Actions the summary and outputs are written."""
        summary = tmp_path / "summary.md"
        output = tmp_path / "output"
        monkeypatch.setenv("GITHUB_STEP_SUMMARY", str(summary))
        monkeypatch.setenv("GITHUB_OUTPUT", str(output))
        mock_run.return_value = _pipeline_run(failed=True)

        run_command(PipelineSettings(working_dir=str(tmp_path)))

        assert "| lint | ❌ Failed |" in summary.read_text(encoding="utf-8")
        outputs = output.read_text(encoding="utf-8").splitlines()
        assert "overall-failed=true" in outputs
        assert "exit-code=1" in outputs
        assert "sarif-files=.tfgate/sarif/lint.sarif" in outputs


class TestRecordingCommands:
    """Test init/record/finalize command functions."""

    def test_flow(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """A persisted run aggregates recorded outcomes."""
        state = tmp_path / "run.json"
        settings = PipelineSettings(enable_lint=False, enable_docs=False)

        assert init_command(settings, state, format="json") == 0
        assert record_command("format", "passed", state) == 0
        assert record_command("security-scan", "not_run", state, detail="trivy missing") == 0
        capsys.readouterr()

        exit_code = finalize_command(state, format="json")

        data = json.loads(capsys.readouterr().out)
        assert exit_code == 1
        outcomes = {s["name"]: s["outcome"] for s in data["stages"]}
        assert outcomes == {
            "format": "passed",
            "lint": "skipped",
            "security-scan": "not_run",
            "policy-scan": "not_run",
            "docs-drift": "skipped",
        }

    def test_record_error_json(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Usage errors are reported as JSON in machine formats."""
        state = tmp_path / "run.json"
        init_command(PipelineSettings(), state)
        capsys.readouterr()

        exit_code = record_command("lint", "skipped", state, format="json")

        assert exit_code == 1
        assert "error" in json.loads(capsys.readouterr().out)
        assert RunStore(state).load().reports == []
