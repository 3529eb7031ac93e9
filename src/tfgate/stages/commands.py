"""Stage names and the commands that run each stage's tool."""

from enum import StrEnum

from pydantic import BaseModel


class StageName(StrEnum):
    """Pipeline stages, in pipeline order."""

    FORMAT = "format"
    LINT = "lint"
    SECURITY_SCAN = "security-scan"
    POLICY_SCAN = "policy-scan"
    DOCS_DRIFT = "docs-drift"


PIPELINE_ORDER: tuple[StageName, ...] = tuple(StageName)


class StageCommands(BaseModel):
    """Commands for each pipeline stage.

    Commands run through the shell from the Terraform working directory.
    ``{sarif_dir}`` and ``{docs_file}`` placeholders are filled in by
    command_for().
    """

    sarif_dir: str = ".tfgate/sarif"
    docs_file: str = "README.md"
    format_command: str = "terraform fmt -check -recursive -diff"
    lint_command: str = "tflint --recursive --format sarif"
    security_command: str = (
        "trivy config --exit-code 1 --format sarif --output {sarif_dir}/security-scan.sarif ."
    )
    policy_command: str = (
        "checkov --directory . --quiet --output sarif --output-file-path {sarif_dir}"
    )
    docs_command: str = (
        "terraform-docs markdown table --output-file {docs_file} --output-mode inject ."
    )

    def command_for(self, stage: StageName) -> str:
        """Get the shell command for a stage."""
        if stage == StageName.FORMAT:
            template = self.format_command
        elif stage == StageName.LINT:
            template = self.lint_command
        elif stage == StageName.SECURITY_SCAN:
            template = self.security_command
        elif stage == StageName.POLICY_SCAN:
            template = self.policy_command
        else:
            template = self.docs_command
        return template.format(sarif_dir=self.sarif_dir, docs_file=self.docs_file)

    def sarif_path(self, stage: StageName) -> str | None:
        """Where a stage's SARIF report lands, relative to the working directory."""
        if stage == StageName.LINT:
            return f"{self.sarif_dir}/lint.sarif"
        if stage == StageName.SECURITY_SCAN:
            return f"{self.sarif_dir}/security-scan.sarif"
        if stage == StageName.POLICY_SCAN:
            # checkov names the file itself inside --output-file-path
            return f"{self.sarif_dir}/results_sarif.sarif"
        return None

    def sarif_from_stdout(self, stage: StageName) -> bool:
        """True if the stage's tool prints SARIF to stdout instead of writing a file."""
        return stage == StageName.LINT
