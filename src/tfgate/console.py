"""Shared rich console for progress and diagnostics (stderr)."""

from rich.console import Console

console = Console(stderr=True)
