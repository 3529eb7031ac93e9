"""Tool runner for executing a stage's external command."""

import os
import subprocess
import time
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from tfgate.aggregator.models import StageOutcome
from tfgate.stages.sarif import count_findings_in_file, findings_detail

# Shell exit statuses for "not executable" and "command not found".
SHELL_NOT_FOUND_CODES = frozenset({126, 127})

MAX_DETAIL_LENGTH = 120


class ToolResult(BaseModel):
    """Result from running one stage's tool.

    Records outcome, duration, and output from a tool command.
    """

    stage: str
    outcome: StageOutcome
    detail: str | None = None
    command: str
    duration_ms: int
    stdout: str | None = None
    stderr: str | None = None
    sarif_file: str | None = None
    details: dict[str, object] | None = None

    model_config = ConfigDict(frozen=True)


def first_line(text: str | None) -> str | None:
    """First non-empty line of tool output, truncated for a report row."""
    if not text:
        return None
    for line in text.splitlines():
        line = line.strip()
        if line:
            if len(line) > MAX_DETAIL_LENGTH:
                return line[: MAX_DETAIL_LENGTH - 1] + "…"
            return line
    return None


class ToolRunner:
    """Runs a stage's tool and maps the result to a stage outcome.

    A non-zero exit is a tool failure (FAILED). A tool that cannot start or
    finish (missing binary, bad working directory, timeout) is an
    infrastructure failure (NOT_RUN).
    """

    def __init__(
        self,
        stage: str,
        command: str,
        cwd: Path,
        timeout_seconds: int = 300,
        env: dict[str, str] | None = None,
        sarif_path: str | None = None,
        sarif_from_stdout: bool = False,
    ) -> None:
        """Initialize tool runner.

        Args:
            stage: Stage name the tool reports for
            command: Shell command to execute
            cwd: Working directory for command execution
            timeout_seconds: Command timeout in seconds (default: 300)
            env: Optional environment variables
            sarif_path: SARIF report location relative to cwd, if the tool emits one
            sarif_from_stdout: Write captured stdout to sarif_path
        """
        self.stage = stage
        self.command = command
        self.cwd = cwd
        self.timeout_seconds = timeout_seconds
        self.env = env
        self.sarif_path = sarif_path
        self.sarif_from_stdout = sarif_from_stdout

    def run(self) -> ToolResult:
        """Execute the tool and return its result."""
        start_time = time.time()

        run_env = os.environ.copy()
        if self.env:
            run_env.update(self.env)

        # A report left by an earlier run must not stand in for this one
        if self.sarif_path:
            (self.cwd / self.sarif_path).unlink(missing_ok=True)

        try:
            result = subprocess.run(
                self.command,
                shell=True,
                cwd=self.cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
                env=run_env,
            )
        except subprocess.TimeoutExpired:
            duration_ms = max(
                int((time.time() - start_time) * 1000), int(self.timeout_seconds * 1000)
            )
            return ToolResult(
                stage=self.stage,
                outcome=StageOutcome.NOT_RUN,
                detail=f"timeout after {self.timeout_seconds}s",
                command=self.command,
                duration_ms=duration_ms,
            )
        except OSError as e:
            duration_ms = int((time.time() - start_time) * 1000)
            return ToolResult(
                stage=self.stage,
                outcome=StageOutcome.NOT_RUN,
                detail=f"could not start: {e}",
                command=self.command,
                duration_ms=duration_ms,
            )

        duration_ms = max(1, int((time.time() - start_time) * 1000))

        if result.returncode in SHELL_NOT_FOUND_CODES:
            return ToolResult(
                stage=self.stage,
                outcome=StageOutcome.NOT_RUN,
                detail=first_line(result.stderr) or f"{self.stage} tool not found",
                command=self.command,
                duration_ms=duration_ms,
                stdout=result.stdout,
                stderr=result.stderr,
            )

        sarif_file = self._collect_sarif(result.stdout)
        findings = count_findings_in_file(self.cwd / sarif_file) if sarif_file else None

        if result.returncode == 0:
            outcome = StageOutcome.PASSED
            detail = findings_detail(findings) if findings else None
        else:
            outcome = StageOutcome.FAILED
            if findings is not None:
                detail = findings_detail(findings)
            else:
                # Prefer stderr; SARIF on stdout is not a useful summary
                stdout = None if self.sarif_from_stdout else result.stdout
                detail = first_line(result.stderr) or first_line(stdout) or f"{self.stage} failed"

        return ToolResult(
            stage=self.stage,
            outcome=outcome,
            detail=detail,
            command=self.command,
            duration_ms=duration_ms,
            stdout=result.stdout,
            stderr=result.stderr,
            sarif_file=sarif_file,
        )

    def _collect_sarif(self, stdout: str | None) -> str | None:
        """Locate the SARIF report, writing it from stdout when needed.

        Returns:
            SARIF path relative to cwd, or None if the tool produced none
        """
        if not self.sarif_path:
            return None
        path = self.cwd / self.sarif_path
        if self.sarif_from_stdout:
            if not stdout or not stdout.strip():
                return None
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(stdout, encoding="utf-8")
        if not path.is_file():
            return None
        return self.sarif_path


def run_tool(
    stage: str,
    command: str,
    cwd: Path,
    timeout_seconds: int = 300,
    env: dict[str, str] | None = None,
) -> ToolResult:
    """Helper function to run a tool without SARIF handling.

    Args:
        stage: Stage name
        command: Command to execute
        cwd: Working directory
        timeout_seconds: Command timeout in seconds
        env: Optional environment variables

    Returns:
        ToolResult from tool execution
    """
    runner = ToolRunner(
        stage=stage,
        command=command,
        cwd=cwd,
        timeout_seconds=timeout_seconds,
        env=env,
    )
    return runner.run()
