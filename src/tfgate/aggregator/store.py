"""RunStore — JSON-backed run state for recording outcomes across CI steps."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from tfgate.aggregator.aggregator import ValidationAggregator
from tfgate.aggregator.errors import AggregatorError
from tfgate.aggregator.models import CheckStage, RunConfiguration, RunResult, StageOutcome


class RunState(BaseModel):
    """Configuration of a run plus the outcomes reported so far."""

    config: RunConfiguration
    reports: list[CheckStage] = Field(default_factory=list)


class RunStore:
    """Stores the state of one run as a JSON file.

    Each CI step loads the state, records its outcome through a
    ValidationAggregator (so the usage-error contract holds across
    processes) and saves it back.
    """

    def __init__(self, state_file: Path) -> None:
        self.state_file = state_file

    def exists(self) -> bool:
        """Return True if a run has been started."""
        return self.state_file.exists()

    def init(self, config: RunConfiguration) -> RunState:
        """Start a new run, replacing any previous state."""
        state = RunState(config=config)
        self.save(state)
        return state

    def save(self, state: RunState) -> None:
        """Persist state to disk, creating the directory if needed."""
        self.state_file.parent.mkdir(parents=True, exist_ok=True)
        self.state_file.write_text(state.model_dump_json(indent=2), encoding="utf-8")

    def load(self) -> RunState:
        """Load the current run state.

        Raises:
            AggregatorError: If no run was started or the file is unreadable.
        """
        if not self.state_file.exists():
            raise AggregatorError(f"No run state at {self.state_file}; run 'tfgate init' first")
        try:
            data = json.loads(self.state_file.read_text(encoding="utf-8"))
            return RunState.model_validate(data)
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
            raise AggregatorError(f"Corrupt run state at {self.state_file}: {e}") from e

    def aggregator(self) -> ValidationAggregator:
        """Rebuild an aggregator holding the persisted outcomes."""
        state = self.load()
        return ValidationAggregator(state.config, state.reports)

    def record(
        self,
        name: str,
        outcome: StageOutcome | str,
        detail: str | None = None,
    ) -> CheckStage:
        """Record one stage outcome and persist it.

        Raises:
            AggregatorError: On any reporting usage error (nothing is saved).
        """
        aggregator = self.aggregator()
        stage = aggregator.record_outcome(name, outcome, detail)
        self.save(RunState(config=aggregator.config, reports=aggregator.reports))
        return stage

    def finalize(self) -> RunResult:
        """Compute the verdict from the persisted outcomes."""
        return self.aggregator().finalize()
