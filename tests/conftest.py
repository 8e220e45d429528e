"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def pytest_sessionstart() -> None:
    """Add src and the project root to sys.path for test imports."""
    for import_root in (_PROJECT_ROOT / "src", _PROJECT_ROOT):
        if str(import_root) not in sys.path:
            sys.path.insert(0, str(import_root))


@pytest.fixture(autouse=True)
def _isolate_store_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host TASKSTORE_* settings out of tests."""
    monkeypatch.delenv("TASKSTORE_DATA_ROOT", raising=False)
    monkeypatch.delenv("TASKSTORE_STORE_NAME", raising=False)
