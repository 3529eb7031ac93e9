"""SARIF helpers. Reports are forwarded as-is; we only count findings."""

from __future__ import annotations

import json
from pathlib import Path


def count_findings(sarif_text: str) -> int | None:
    """Count results across all runs of a SARIF document.

    Returns:
        Number of findings, or None if the text is not a SARIF document
    """
    try:
        document = json.loads(sarif_text)
    except json.JSONDecodeError:
        return None
    if not isinstance(document, dict) or not isinstance(document.get("runs"), list):
        return None
    total = 0
    for run in document["runs"]:
        if isinstance(run, dict):
            total += len(run.get("results") or [])
    return total


def count_findings_in_file(path: Path) -> int | None:
    """Count findings in a SARIF file, or None if it is missing or not SARIF."""
    if not path.is_file():
        return None
    return count_findings(path.read_text(encoding="utf-8"))


def findings_detail(count: int) -> str:
    """Format a findings count for a report row."""
    return "1 finding" if count == 1 else f"{count} findings"
