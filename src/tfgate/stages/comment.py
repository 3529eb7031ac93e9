"""Pull request comments for documentation drift, posted through the gh CLI."""

from __future__ import annotations

import json
import os
import re
import subprocess
from collections.abc import Mapping
from pathlib import Path

from tfgate.console import console

PULL_REQUEST_EVENTS = frozenset({"pull_request", "pull_request_target"})

_PULL_REF = re.compile(r"^refs/pull/(\d+)/(?:merge|head)$")

MAX_DIFF_LINES = 50


def _event_payload_number(event_path: str) -> int | None:
    """PR number from the webhook payload GitHub writes to GITHUB_EVENT_PATH."""
    if not event_path:
        return None
    try:
        payload = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return None
    if not isinstance(payload, dict):
        return None
    pull_request = payload.get("pull_request")
    number = pull_request.get("number") if isinstance(pull_request, dict) else None
    return number if isinstance(number, int) else None


def pull_request_number(env: Mapping[str, str] | None = None) -> int | None:
    """Get the pull request number when running for a review request.

    The event payload is authoritative: on pull_request_target GITHUB_REF
    names the base branch. The ref is the fallback when no payload is readable.

    Args:
        env: Environment to inspect (defaults to os.environ)

    Returns:
        PR number, or None outside a pull request event
    """
    env = os.environ if env is None else env
    if env.get("GITHUB_EVENT_NAME", "") not in PULL_REQUEST_EVENTS:
        return None
    number = _event_payload_number(env.get("GITHUB_EVENT_PATH", ""))
    if number is not None:
        return number
    match = _PULL_REF.match(env.get("GITHUB_REF", ""))
    if match is None:
        return None
    return int(match.group(1))


def drift_comment(docs_file: str, command: str, diff: str = "") -> str:
    """Build the comment asking the author to regenerate documentation.

    Args:
        docs_file: Documentation file that drifted
        command: Generator command the pipeline ran
        diff: Unified diff between committed and regenerated docs
    """
    lines = [
        "### 📝 Terraform documentation is out of date",
        "",
        f"`{docs_file}` does not match the generated documentation.",
        "Regenerate it locally and commit the result:",
        "",
        "```sh",
        command,
        "```",
    ]
    if diff:
        diff_lines = diff.splitlines()
        shown = diff_lines[:MAX_DIFF_LINES]
        lines += ["", "<details><summary>Diff</summary>", "", "```diff", *shown]
        if len(diff_lines) > MAX_DIFF_LINES:
            lines.append(f"... ({len(diff_lines) - MAX_DIFF_LINES} more lines)")
        lines += ["```", "", "</details>"]
    return "\n".join(lines) + "\n"


class PullRequestCommenter:
    """Posts comments on pull requests with `gh pr comment`.

    Posting is best-effort: a failure is reported on the console and never
    changes the run verdict.
    """

    def __init__(self, cwd: Path, timeout_seconds: int = 60) -> None:
        self.cwd = cwd
        self.timeout_seconds = timeout_seconds

    def post(self, pr_number: int, body: str) -> bool:
        """Post a comment. Returns True if gh accepted it."""
        cmd = ["gh", "pr", "comment", str(pr_number), "--body-file", "-"]
        try:
            result = subprocess.run(
                cmd,
                cwd=self.cwd,
                input=body,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            console.print(f"[yellow]Warning:[/yellow] could not comment on PR #{pr_number}: {e}")
            return False

        if result.returncode != 0:
            console.print(
                f"[yellow]Warning:[/yellow] could not comment on PR #{pr_number}: "
                f"{result.stderr.strip()}"
            )
            return False
        return True
