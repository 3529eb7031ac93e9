"""Documentation drift detection.

The docs stage regenerates documentation in place and compares it with the
content that was there before. The comparison is textual, so the
normalization applied first decides what counts as drift.
"""

from __future__ import annotations

import difflib
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from tfgate.aggregator.models import StageOutcome
from tfgate.stages.runner import ToolResult, run_tool


class DriftMode(StrEnum):
    """How documentation is normalized before comparison."""

    STRICT = "strict"
    EOL = "eol"
    WHITESPACE = "whitespace"


class DriftReport(BaseModel):
    """Outcome of comparing regenerated docs with the committed version."""

    drifted: bool
    added: int = 0
    removed: int = 0
    diff: str = ""

    model_config = ConfigDict(frozen=True)


def normalize_docs(text: str, mode: DriftMode = DriftMode.EOL) -> str:
    """Normalize documentation text for comparison.

    Args:
        text: Documentation content
        mode: strict keeps text as-is; eol unifies line endings;
            whitespace also drops trailing whitespace and trailing blank lines

    Returns:
        Normalized text
    """
    if mode == DriftMode.STRICT:
        return text

    text = text.replace("\r\n", "\n").replace("\r", "\n")
    if mode == DriftMode.EOL:
        return text

    lines = [line.rstrip() for line in text.split("\n")]
    while lines and not lines[-1]:
        lines.pop()
    return "\n".join(lines) + "\n" if lines else ""


def compare_docs(
    before: str,
    after: str,
    mode: DriftMode = DriftMode.EOL,
    filename: str = "README.md",
) -> DriftReport:
    """Compare committed and regenerated documentation."""
    old = normalize_docs(before, mode)
    new = normalize_docs(after, mode)
    if old == new:
        return DriftReport(drifted=False)

    diff_lines = list(
        difflib.unified_diff(
            old.splitlines(keepends=True),
            new.splitlines(keepends=True),
            fromfile=f"a/{filename}",
            tofile=f"b/{filename}",
        )
    )
    added = sum(1 for line in diff_lines if line.startswith("+") and not line.startswith("+++"))
    removed = sum(1 for line in diff_lines if line.startswith("-") and not line.startswith("---"))

    return DriftReport(
        drifted=True,
        added=added,
        removed=removed,
        diff="".join(line if line.endswith("\n") else line + "\n" for line in diff_lines),
    )


class DocsDriftCheck:
    """Regenerates documentation and derives the docs stage outcome from drift."""

    def __init__(
        self,
        stage: str,
        docs_file: str,
        command: str,
        cwd: Path,
        mode: DriftMode = DriftMode.EOL,
        timeout_seconds: int = 300,
        env: dict[str, str] | None = None,
    ) -> None:
        self.stage = stage
        self.docs_file = docs_file
        self.command = command
        self.cwd = cwd
        self.mode = mode
        self.timeout_seconds = timeout_seconds
        self.env = env

    def _read_docs(self) -> str:
        path = self.cwd / self.docs_file
        if not path.is_file():
            return ""
        return path.read_text(encoding="utf-8")

    def run(self) -> ToolResult:
        """Run the generator and compare its output with the previous docs.

        A generator that fails or cannot run keeps its own outcome; drift is
        only assessed when it succeeded.
        """
        before = self._read_docs()
        generated = run_tool(
            stage=self.stage,
            command=self.command,
            cwd=self.cwd,
            timeout_seconds=self.timeout_seconds,
            env=self.env,
        )
        if generated.outcome != StageOutcome.PASSED:
            return generated

        report = compare_docs(before, self._read_docs(), self.mode, self.docs_file)
        if report.drifted:
            outcome = StageOutcome.FAILED
            detail = f"drift: {self.docs_file} (+{report.added}/-{report.removed} lines)"
        else:
            outcome = StageOutcome.PASSED
            detail = "up to date"

        return generated.model_copy(
            update={
                "outcome": outcome,
                "detail": detail,
                "details": report.model_dump(),
            }
        )
