"""Pytest configuration for test isolation.

The bundle store writes to ``./.amazon_wrapped`` by default. When tests run in
the same working tree, a bundle saved by one test would be visible to the
next (``show`` would find it, ``clear`` would remove it), so each test gets
its own data directory via an autouse fixture.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolate_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ``AMAZON_WRAPPED_DATA_DIR`` at the test's own temporary directory."""

    data_root = tmp_path / "data"
    data_root.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("AMAZON_WRAPPED_DATA_DIR", os.fspath(data_root))
    monkeypatch.delenv("AMAZON_WRAPPED_STORAGE_BUDGET", raising=False)
    return data_root
