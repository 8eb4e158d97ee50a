"""Shared test fixtures for extracolumn."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from extracolumn.transport import LocalFileTransport

GOLDEN_DIR = Path(__file__).parent / "golden"


@pytest.fixture
def golden_dir() -> Path:
    return GOLDEN_DIR


@pytest.fixture
def local_transport() -> LocalFileTransport:
    """Create a transport that reads from golden files."""
    return LocalFileTransport(GOLDEN_DIR)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep EXTRACOLUMN_* variables and .env files out of the tests."""
    for name in list(os.environ):
        if name.startswith("EXTRACOLUMN_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
