"""CLI fixtures."""

from __future__ import annotations

import sys

import pytest


@pytest.fixture(autouse=True)
def _restore_sys_path(monkeypatch: pytest.MonkeyPatch) -> None:
    """``load_workflow`` prepends the workflow directory; undo it per test."""
    monkeypatch.setattr(sys, "path", list(sys.path))
