"""ValidationAggregator — collects stage outcomes and computes the run verdict."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from tfgate.aggregator.errors import (
    DuplicateStageReport,
    InvalidOutcome,
    StageDisabledViolation,
    UnknownStage,
)
from tfgate.aggregator.models import (
    REPORTABLE_OUTCOMES,
    CheckStage,
    RunConfiguration,
    RunResult,
    StageOutcome,
)

UNREPORTED_DETAIL = "no outcome reported"


def aggregate(config: RunConfiguration, reports: Mapping[str, CheckStage]) -> RunResult:
    """Fold reported stage outcomes into a RunResult.

    Pure and order independent: every enabled stage is assessed, none
    short-circuits another. An enabled stage missing from reports never got
    the chance to run and counts as NOT_RUN.

    Args:
        config: Run configuration declaring the stages
        reports: Reported stages keyed by name

    Returns:
        RunResult with one stage per declared stage, in declaration order
    """
    stages: list[CheckStage] = []
    for declared in config.stages:
        if not declared.enabled:
            stages.append(declared)
        elif declared.name in reports:
            stages.append(reports[declared.name])
        else:
            stages.append(
                CheckStage(
                    name=declared.name,
                    outcome=StageOutcome.NOT_RUN,
                    detail=UNREPORTED_DETAIL,
                )
            )

    overall_failed = any(stage.failing for stage in stages)
    exit_code = 1 if overall_failed and not config.soft_fail else 0

    return RunResult(
        stages=stages,
        overall_failed=overall_failed,
        exit_code=exit_code,
        soft_fail=config.soft_fail,
        working_dir=config.working_dir,
        terraform_version=config.terraform_version,
    )


class ValidationAggregator:
    """Collects one outcome per enabled stage for a single run.

    The aggregator never mutates the configuration. Reports are accepted
    in any order; finalize() renders them in declaration order.
    """

    def __init__(
        self,
        config: RunConfiguration,
        reports: Iterable[CheckStage] | None = None,
    ) -> None:
        """Initialize aggregator.

        Args:
            config: Immutable run configuration
            reports: Previously recorded outcomes to replay (e.g. from a RunStore)
        """
        self.config = config
        self._reports: dict[str, CheckStage] = {}
        for stage in reports or []:
            self.record_outcome(stage.name, stage.outcome or "", stage.detail)

    @property
    def reports(self) -> list[CheckStage]:
        """Recorded stages in the order they were reported."""
        return list(self._reports.values())

    @property
    def pending(self) -> list[str]:
        """Enabled stages that have not reported yet, in declaration order."""
        return [s.name for s in self.config.enabled_stages if s.name not in self._reports]

    def record_outcome(
        self,
        name: str,
        outcome: StageOutcome | str,
        detail: str | None = None,
    ) -> CheckStage:
        """Record the outcome of one stage.

        Args:
            name: Declared stage name
            outcome: PASSED, FAILED or NOT_RUN
            detail: Optional free-text explanation

        Returns:
            The recorded CheckStage

        Raises:
            UnknownStage: If the stage is not declared in the configuration
            StageDisabledViolation: If the stage's feature flag is off
            InvalidOutcome: If the outcome is SKIPPED or not an outcome at all
            DuplicateStageReport: If the stage already reported in this run
        """
        declared = self.config.stage(name)
        if declared is None:
            known = ", ".join(self.config.stage_names) or "none"
            raise UnknownStage(f"Unknown stage '{name}' (declared: {known})")

        if not declared.enabled:
            raise StageDisabledViolation(
                f"Stage '{name}' is disabled and must not report an outcome"
            )

        try:
            value = StageOutcome(outcome)
        except ValueError:
            raise InvalidOutcome(f"Invalid outcome '{outcome}' for stage '{name}'") from None
        if value not in REPORTABLE_OUTCOMES:
            raise InvalidOutcome(
                f"Stage '{name}' cannot report '{value}'; skipped is derived from the stage flag"
            )

        if name in self._reports:
            raise DuplicateStageReport(f"Stage '{name}' already reported an outcome in this run")

        stage = CheckStage(name=name, outcome=value, detail=detail)
        self._reports[name] = stage
        return stage

    def mark_not_run(self, name: str, detail: str | None = None) -> CheckStage:
        """Record that an enabled stage could not run (infrastructure failure)."""
        return self.record_outcome(name, StageOutcome.NOT_RUN, detail)

    def finalize(self) -> RunResult:
        """Compute the run verdict from the recorded outcomes."""
        return aggregate(self.config, self._reports)
