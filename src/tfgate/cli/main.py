"""tfgate CLI application."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Annotated

import typer
from rich import print as rprint

import tfgate as tfgate_pkg
from tfgate.config import PipelineSettings
from tfgate.stages.drift import DriftMode


class OutputFormat(StrEnum):
    """Output format for CLI commands."""

    human = "human"
    json = "json"
    markdown = "markdown"


DEFAULT_STATE_FILE = ".tfgate/run.json"

app = typer.Typer(
    name="tfgate",
    help="Validation gate for Terraform projects.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    if value:
        rprint(f"tfgate {tfgate_pkg.__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """tfgate — run and aggregate Terraform validation checks."""
    from dotenv import load_dotenv

    load_dotenv()


# --- Shared options ---

WorkingDirOption = Annotated[
    str | None,
    typer.Option("--working-dir", "-d", help="Terraform working directory"),
]
TerraformVersionOption = Annotated[
    str | None,
    typer.Option("--terraform-version", help="Terraform version pin (reported in the footer)"),
]
LintOption = Annotated[
    bool | None,
    typer.Option("--lint/--no-lint", help="Run the linter (tflint)"),
]
SecurityScanOption = Annotated[
    bool | None,
    typer.Option("--security-scan/--no-security-scan", help="Run the security scanner (trivy)"),
]
PolicyScanOption = Annotated[
    bool | None,
    typer.Option("--policy-scan/--no-policy-scan", help="Run the policy scanner (checkov)"),
]
DocsOption = Annotated[
    bool | None,
    typer.Option("--docs/--no-docs", help="Check terraform-docs drift"),
]
SoftFailOption = Annotated[
    bool | None,
    typer.Option("--soft-fail/--hard-fail", help="Report failures without failing the run"),
]
FormatOption = Annotated[
    OutputFormat,
    typer.Option("--format", "-f", help="Output format"),
]
StateFileOption = Annotated[
    str,
    typer.Option("--state", "-s", help="Run state file for step-by-step recording"),
]


def _load_settings(**overrides: object) -> PipelineSettings:
    """Environment settings with CLI overrides; exits 1 on invalid environment."""
    try:
        return PipelineSettings.from_env().with_overrides(**overrides)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None


@app.command("run")
def run(
    working_dir: WorkingDirOption = None,
    terraform_version: TerraformVersionOption = None,
    lint: LintOption = None,
    security_scan: SecurityScanOption = None,
    policy_scan: PolicyScanOption = None,
    docs: DocsOption = None,
    soft_fail: SoftFailOption = None,
    docs_file: Annotated[
        str | None,
        typer.Option("--docs-file", help="Documentation file checked for drift"),
    ] = None,
    drift_mode: Annotated[
        DriftMode | None,
        typer.Option("--drift-mode", help="Normalization applied before the drift comparison"),
    ] = None,
    comment: Annotated[
        bool | None,
        typer.Option("--comment/--no-comment", help="Comment on the PR when docs drift"),
    ] = None,
    parallel: Annotated[
        bool | None,
        typer.Option("--parallel/--sequential", help="Run stages concurrently"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Show tool output for stages that did not pass"),
    ] = False,
    format: FormatOption = OutputFormat.human,
) -> None:
    """Run every enabled validation stage and report the verdict."""
    from tfgate.cli.commands import run_command

    settings = _load_settings(
        working_dir=working_dir,
        terraform_version=terraform_version,
        enable_lint=lint,
        enable_security_scan=security_scan,
        enable_policy_scan=policy_scan,
        enable_docs=docs,
        soft_fail=soft_fail,
        docs_file=docs_file,
        drift_mode=drift_mode,
        comment_on_drift=comment,
        parallel=parallel,
    )

    exit_code = run_command(settings, format=format.value, verbose=verbose)
    raise typer.Exit(exit_code)


@app.command("init")
def init(
    state: StateFileOption = DEFAULT_STATE_FILE,
    working_dir: WorkingDirOption = None,
    terraform_version: TerraformVersionOption = None,
    lint: LintOption = None,
    security_scan: SecurityScanOption = None,
    policy_scan: PolicyScanOption = None,
    docs: DocsOption = None,
    soft_fail: SoftFailOption = None,
    format: FormatOption = OutputFormat.human,
) -> None:
    """Start a run whose stages report from separate CI steps."""
    from tfgate.cli.commands import init_command

    settings = _load_settings(
        working_dir=working_dir,
        terraform_version=terraform_version,
        enable_lint=lint,
        enable_security_scan=security_scan,
        enable_policy_scan=policy_scan,
        enable_docs=docs,
        soft_fail=soft_fail,
    )

    exit_code = init_command(settings, state_file=Path(state), format=format.value)
    raise typer.Exit(exit_code)


@app.command("record")
def record(
    stage: Annotated[str, typer.Argument(help="Stage name, e.g. lint")],
    outcome: Annotated[str, typer.Argument(help="passed, failed or not_run")],
    detail: Annotated[
        str | None,
        typer.Option("--detail", help="Free-text detail shown in the report"),
    ] = None,
    state: StateFileOption = DEFAULT_STATE_FILE,
    format: FormatOption = OutputFormat.human,
) -> None:
    """Record the outcome of one stage."""
    from tfgate.cli.commands import record_command

    exit_code = record_command(
        stage=stage,
        outcome=outcome,
        state_file=Path(state),
        detail=detail,
        format=format.value,
    )
    raise typer.Exit(exit_code)


@app.command("finalize")
def finalize(
    state: StateFileOption = DEFAULT_STATE_FILE,
    format: FormatOption = OutputFormat.human,
) -> None:
    """Aggregate recorded outcomes, print the report and exit with the verdict."""
    from tfgate.cli.commands import finalize_command

    exit_code = finalize_command(state_file=Path(state), format=format.value)
    raise typer.Exit(exit_code)
