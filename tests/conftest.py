# tests/conftest.py
from __future__ import annotations

import pytest

from bigfib import runtime


@pytest.fixture(autouse=True)
def isolated_workspace(tmp_path, monkeypatch):
    """Point BIGFIB_HOME at a fresh directory and start every test from a default runtime."""
    monkeypatch.setenv("BIGFIB_HOME", str(tmp_path / "ws"))
    runtime.reset()
    yield tmp_path / "ws"
    runtime.reset()
