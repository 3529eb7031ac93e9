"""Shared test fixtures."""

import os

import pytest

_GITHUB_VARS = (
    "GITHUB_ACTIONS",
    "GITHUB_EVENT_NAME",
    "GITHUB_OUTPUT",
    "GITHUB_REF",
    "GITHUB_STEP_SUMMARY",
)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Safety: never write to a real runner's files or pick up local settings."""
    for var in _GITHUB_VARS:
        monkeypatch.delenv(var, raising=False)
    for var in list(os.environ):
        if var.startswith("TFGATE_"):
            monkeypatch.delenv(var, raising=False)
