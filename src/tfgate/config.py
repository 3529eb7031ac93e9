"""Pipeline settings.

Settings come from TFGATE_* environment variables (a GitHub Actions workflow
maps its inputs onto them), with CLI options taking precedence.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict

from tfgate.stages.commands import StageName
from tfgate.stages.drift import DriftMode

ENV_PREFIX = "TFGATE_"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def parse_bool(name: str, value: str) -> bool:
    """Parse a boolean environment value.

    Raises:
        ValueError: If the value is not a recognised boolean.
    """
    normalized = value.strip().lower()
    if normalized in _TRUE:
        return True
    if normalized in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean (true/false), got '{value}'")


class PipelineSettings(BaseModel):
    """Inputs of one pipeline invocation, with their documented defaults."""

    model_config = ConfigDict(frozen=True)

    working_dir: str = "."
    terraform_version: str = "latest"
    enable_lint: bool = True
    enable_security_scan: bool = True
    enable_policy_scan: bool = True
    enable_docs: bool = True
    soft_fail: bool = False
    docs_file: str = "README.md"
    drift_mode: DriftMode = DriftMode.EOL
    comment_on_drift: bool = True
    sarif_dir: str = ".tfgate/sarif"
    timeout_seconds: int = 300
    parallel: bool = False

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> PipelineSettings:
        """Load settings from TFGATE_* environment variables.

        Unset or empty variables keep their defaults.

        Raises:
            ValueError: If a variable holds an invalid value.
        """
        env = os.environ if env is None else env
        values: dict[str, object] = {}
        for field_name, field in cls.model_fields.items():
            var = ENV_PREFIX + field_name.upper()
            raw = env.get(var, "").strip()
            if not raw:
                continue
            if field.annotation is bool:
                values[field_name] = parse_bool(var, raw)
            elif field.annotation is int:
                try:
                    values[field_name] = int(raw)
                except ValueError:
                    raise ValueError(f"{var} must be an integer, got '{raw}'") from None
            elif field_name == "drift_mode":
                try:
                    values[field_name] = DriftMode(raw.lower())
                except ValueError:
                    modes = ", ".join(m.value for m in DriftMode)
                    raise ValueError(f"{var} must be one of: {modes}, got '{raw}'") from None
            else:
                values[field_name] = raw
        return cls(**values)

    def with_overrides(self, **overrides: object) -> PipelineSettings:
        """Return a copy with every non-None override applied."""
        update = {k: v for k, v in overrides.items() if v is not None}
        return self.model_copy(update=update) if update else self

    def stage_enabled(self, stage: StageName) -> bool:
        """Whether a stage's feature flag is on. Formatting is mandatory."""
        if stage == StageName.LINT:
            return self.enable_lint
        if stage == StageName.SECURITY_SCAN:
            return self.enable_security_scan
        if stage == StageName.POLICY_SCAN:
            return self.enable_policy_scan
        if stage == StageName.DOCS_DRIFT:
            return self.enable_docs
        return True
