"""Smoke tests for the tfgate CLI."""

from pathlib import Path
from unittest.mock import patch

from typer.testing import CliRunner

from tfgate.aggregator.models import StageOutcome
from tfgate.cli.main import app
from tfgate.stages.commands import StageName
from tfgate.stages.runner import ToolResult

runner = CliRunner()


def _stage_result(stage: StageName, failing: tuple[StageName, ...] = ()) -> ToolResult:
    outcome = StageOutcome.FAILED if stage in failing else StageOutcome.PASSED
    return ToolResult(stage=stage, outcome=outcome, command=str(stage), duration_ms=1)


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "tfgate 0.1.0" in result.output


def test_help() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for cmd in ("run", "init", "record", "finalize"):
        assert cmd in result.output


def test_run_all_passing(tmp_path: Path) -> None:
    with patch(
        "tfgate.pipeline.ValidationPipeline.run_stage",
        autospec=True,
        side_effect=lambda self, stage: _stage_result(stage),
    ):
        result = runner.invoke(app, ["run", "--working-dir", str(tmp_path)])

    assert result.exit_code == 0
    assert "All checks passed" in result.output


def test_run_failure_blocks(tmp_path: Path) -> None:
    with patch(
        "tfgate.pipeline.ValidationPipeline.run_stage",
        autospec=True,
        side_effect=lambda self, stage: _stage_result(stage, (StageName.LINT,)),
    ):
        result = runner.invoke(app, ["run", "--working-dir", str(tmp_path)])

    assert result.exit_code == 1
    assert "Checks failed" in result.output


def test_run_soft_fail(tmp_path: Path) -> None:
    with patch(
        "tfgate.pipeline.ValidationPipeline.run_stage",
        autospec=True,
        side_effect=lambda self, stage: _stage_result(stage, (StageName.LINT,)),
    ):
        result = runner.invoke(app, ["run", "--working-dir", str(tmp_path), "--soft-fail"])

    assert result.exit_code == 0
    assert "soft fail" in result.output


def test_run_soft_fail_from_environment(tmp_path: Path) -> None:
    with patch(
        "tfgate.pipeline.ValidationPipeline.run_stage",
        autospec=True,
        side_effect=lambda self, stage: _stage_result(stage, (StageName.FORMAT,)),
    ):
        result = runner.invoke(
            app,
            ["run", "--working-dir", str(tmp_path)],
            env={"TFGATE_SOFT_FAIL": "true"},
        )

    assert result.exit_code == 0


def test_run_flag_disables_stage(tmp_path: Path) -> None:
    with patch(
        "tfgate.pipeline.ValidationPipeline.run_stage",
        autospec=True,
        side_effect=lambda self, stage: _stage_result(stage, (StageName.LINT,)),
    ) as mock_stage:
        result = runner.invoke(app, ["run", "--working-dir", str(tmp_path), "--no-lint"])

    assert result.exit_code == 0
    assert StageName.LINT not in [c.args[1] for c in mock_stage.call_args_list]


def test_run_invalid_environment() -> None:
    result = runner.invoke(app, ["run"], env={"TFGATE_ENABLE_LINT": "sometimes"})
    assert result.exit_code == 1
    assert "TFGATE_ENABLE_LINT" in result.output


def test_step_by_step_recording(tmp_path: Path) -> None:
    state = str(tmp_path / "run.json")

    init = runner.invoke(app, ["init", "--state", state, "--no-docs", "--no-policy-scan"])
    assert init.exit_code == 0

    for stage, outcome in (
        ("format", "passed"),
        ("lint", "failed"),
        ("security-scan", "passed"),
    ):
        recorded = runner.invoke(app, ["record", stage, outcome, "--state", state])
        assert recorded.exit_code == 0

    result = runner.invoke(app, ["finalize", "--state", state])

    assert result.exit_code == 1
    assert "lint" in result.output


def test_record_duplicate_fails(tmp_path: Path) -> None:
    state = str(tmp_path / "run.json")
    runner.invoke(app, ["init", "--state", state])
    runner.invoke(app, ["record", "lint", "passed", "--state", state])

    result = runner.invoke(app, ["record", "lint", "passed", "--state", state])

    assert result.exit_code == 1
    assert "already reported" in result.output


def test_record_disabled_stage_fails(tmp_path: Path) -> None:
    state = str(tmp_path / "run.json")
    runner.invoke(app, ["init", "--state", state, "--no-lint"])

    result = runner.invoke(app, ["record", "lint", "passed", "--state", state])

    assert result.exit_code == 1
    assert "disabled" in result.output


def test_finalize_without_init(tmp_path: Path) -> None:
    result = runner.invoke(app, ["finalize", "--state", str(tmp_path / "none.json")])
    assert result.exit_code == 1
    assert "No run state" in result.output


def test_finalize_malformed_state(tmp_path: Path) -> None:
    state = tmp_path / "run.json"
    state.write_text('{"config": {"stages": "oops"}}', encoding="utf-8")

    result = runner.invoke(app, ["finalize", "--state", str(state)])

    assert result.exit_code == 1
    assert "Corrupt run state" in result.output
