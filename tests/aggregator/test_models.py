"""Tests for aggregator models."""

import pytest
from pydantic import ValidationError

from tfgate.aggregator.models import CheckStage, RunConfiguration, RunResult, StageOutcome


class TestStageOutcome:
    """Test StageOutcome enum."""

    def test_all_outcomes_defined(self) -> None:
        """All outcome values are available."""
        assert StageOutcome.PASSED == "passed"
        assert StageOutcome.FAILED == "failed"
        assert StageOutcome.SKIPPED == "skipped"
        assert StageOutcome.NOT_RUN == "not_run"


class TestCheckStage:
    """Test CheckStage model."""

    def test_enabled_stage_starts_unreported(self) -> None:
        """An enabled stage has no outcome until it reports."""
        stage = CheckStage(name="lint")
        assert stage.enabled is True
        assert stage.outcome is None
        assert stage.reported is False
        assert stage.failing is False

    def test_disabled_stage_is_skipped(self) -> None:
        """Disabling a stage derives SKIPPED."""
        stage = CheckStage(name="lint", enabled=False)
        assert stage.outcome == StageOutcome.SKIPPED
        assert stage.reported is True
        assert stage.failing is False

    def test_disabled_stage_cannot_have_other_outcome(self) -> None:
        """A disabled stage with a real outcome is invalid."""
        with pytest.raises(ValidationError):
            CheckStage(name="lint", enabled=False, outcome=StageOutcome.PASSED)

    def test_enabled_stage_cannot_be_skipped(self) -> None:
        """An enabled stage with SKIPPED is invalid."""
        with pytest.raises(ValidationError):
            CheckStage(name="lint", outcome=StageOutcome.SKIPPED)

    @pytest.mark.parametrize("outcome", [StageOutcome.FAILED, StageOutcome.NOT_RUN])
    def test_failing_outcomes(self, outcome: StageOutcome) -> None:
        """FAILED and NOT_RUN make a stage failing."""
        assert CheckStage(name="format", outcome=outcome).failing is True

    def test_frozen(self) -> None:
        """Stages cannot be mutated."""
        stage = CheckStage(name="lint")
        with pytest.raises(ValidationError):
            stage.outcome = StageOutcome.PASSED  # type: ignore[misc]


class TestRunConfiguration:
    """Test RunConfiguration model."""

    def test_defaults(self) -> None:
        """Defaults describe an empty hard-fail run."""
        config = RunConfiguration()
        assert config.stages == []
        assert config.soft_fail is False
        assert config.working_dir == "."
        assert config.terraform_version == "latest"

    def test_duplicate_stage_names_rejected(self) -> None:
        """Stage names must be unique."""
        with pytest.raises(ValidationError, match="more than once"):
            RunConfiguration(stages=[CheckStage(name="lint"), CheckStage(name="lint")])

    def test_stage_lookup(self) -> None:
        """stage() finds declared stages by name."""
        config = RunConfiguration(
            stages=[CheckStage(name="format"), CheckStage(name="lint", enabled=False)]
        )
        assert config.stage("lint") is not None
        assert config.stage("missing") is None
        assert config.stage_names == ["format", "lint"]
        assert [s.name for s in config.enabled_stages] == ["format"]

    def test_json_roundtrip_keeps_skipped(self) -> None:
        """Serialized configuration validates back unchanged."""
        config = RunConfiguration(
            stages=[CheckStage(name="format"), CheckStage(name="lint", enabled=False)],
            soft_fail=True,
        )
        assert RunConfiguration.model_validate_json(config.model_dump_json()) == config


class TestRunResult:
    """Test RunResult helper properties."""

    def test_stage_filters(self) -> None:
        """Filters split stages by outcome."""
        result = RunResult(
            stages=[
                CheckStage(name="format", outcome=StageOutcome.PASSED),
                CheckStage(name="lint", outcome=StageOutcome.FAILED),
                CheckStage(name="security-scan", enabled=False),
                CheckStage(name="policy-scan", outcome=StageOutcome.NOT_RUN),
            ],
            overall_failed=True,
            exit_code=1,
        )
        assert [s.name for s in result.passed_stages] == ["format"]
        assert [s.name for s in result.failed_stages] == ["lint"]
        assert [s.name for s in result.skipped_stages] == ["security-scan"]
        assert [s.name for s in result.not_run_stages] == ["policy-scan"]
        assert result.passed is False
        assert result.soft_failed is False
