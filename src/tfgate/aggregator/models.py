"""Aggregator data models — stages, run configuration, and run results."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class StageOutcome(StrEnum):
    """Outcome of a single check stage."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    NOT_RUN = "not_run"


# Outcomes a collaborator may report; SKIPPED is derived from the enabled flag.
REPORTABLE_OUTCOMES = frozenset({StageOutcome.PASSED, StageOutcome.FAILED, StageOutcome.NOT_RUN})

# Outcomes that make the run fail.
FAILING_OUTCOMES = frozenset({StageOutcome.FAILED, StageOutcome.NOT_RUN})


class CheckStage(BaseModel):
    """One validation activity in the pipeline.

    A disabled stage is always SKIPPED. An enabled stage has no outcome until
    it reports, then exactly one of PASSED, FAILED, NOT_RUN.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    enabled: bool = True
    outcome: StageOutcome | None = None
    detail: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _derive_skipped(cls, values: Any) -> Any:
        """Disabled stages are SKIPPED without anyone reporting it."""
        if isinstance(values, dict) and values.get("enabled") is False:
            if values.get("outcome") is None:
                values = {**values, "outcome": StageOutcome.SKIPPED}
        return values

    @model_validator(mode="after")
    def _check_skipped_invariant(self) -> CheckStage:
        if not self.enabled and self.outcome != StageOutcome.SKIPPED:
            raise ValueError(f"disabled stage '{self.name}' must be skipped")
        if self.enabled and self.outcome == StageOutcome.SKIPPED:
            raise ValueError(f"enabled stage '{self.name}' cannot be skipped")
        return self

    @property
    def reported(self) -> bool:
        """True once the stage has a final outcome."""
        return self.outcome is not None

    @property
    def failing(self) -> bool:
        """True if this stage makes the run fail."""
        return self.enabled and self.outcome in FAILING_OUTCOMES


class RunConfiguration(BaseModel):
    """Immutable input to one aggregation.

    Stage order is declaration (pipeline) order and only affects rendering.
    working_dir and terraform_version are descriptive and feed the report footer.
    """

    model_config = ConfigDict(frozen=True)

    stages: list[CheckStage] = Field(default_factory=list)
    soft_fail: bool = False
    working_dir: str = "."
    terraform_version: str = "latest"

    @model_validator(mode="after")
    def _check_unique_names(self) -> RunConfiguration:
        seen: set[str] = set()
        for stage in self.stages:
            if stage.name in seen:
                raise ValueError(f"stage '{stage.name}' declared more than once")
            seen.add(stage.name)
        return self

    def stage(self, name: str) -> CheckStage | None:
        """Get a declared stage by name."""
        for stage in self.stages:
            if stage.name == name:
                return stage
        return None

    @property
    def stage_names(self) -> list[str]:
        """Declared stage names in pipeline order."""
        return [s.name for s in self.stages]

    @property
    def enabled_stages(self) -> list[CheckStage]:
        """Stages whose feature flag is on."""
        return [s for s in self.stages if s.enabled]


class RunResult(BaseModel):
    """Final, immutable verdict of one run."""

    model_config = ConfigDict(frozen=True)

    stages: list[CheckStage]
    overall_failed: bool
    exit_code: int
    soft_fail: bool = False
    working_dir: str = "."
    terraform_version: str = "latest"

    @property
    def passed(self) -> bool:
        """True if nothing failed."""
        return not self.overall_failed

    @property
    def soft_failed(self) -> bool:
        """True if the run failed but soft-fail kept the exit code at 0."""
        return self.overall_failed and self.exit_code == 0

    @property
    def failed_stages(self) -> list[CheckStage]:
        """Stages whose tool reported a failure."""
        return [s for s in self.stages if s.outcome == StageOutcome.FAILED]

    @property
    def not_run_stages(self) -> list[CheckStage]:
        """Enabled stages that never ran to completion."""
        return [s for s in self.stages if s.outcome == StageOutcome.NOT_RUN]

    @property
    def passed_stages(self) -> list[CheckStage]:
        """Stages that passed."""
        return [s for s in self.stages if s.outcome == StageOutcome.PASSED]

    @property
    def skipped_stages(self) -> list[CheckStage]:
        """Stages disabled by their feature flag."""
        return [s for s in self.stages if s.outcome == StageOutcome.SKIPPED]
