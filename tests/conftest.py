"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Callable

import pytest
import yaml

# Ensure src/ is on the import path (for local imports without installing as package)
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))


class FakeClock:
    """Deterministic millisecond clock that advances by ``step`` on every call."""

    def __init__(self, start: int = 1_700_000_000_000, step: int = 1000) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> int:
        self.now += self.step
        return self.now


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the root directory of the project."""
    return Path(__file__).resolve().parent.parent


@pytest.fixture(scope="function")
def tmp_data_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for the data file and uploads during tests."""
    d = tmp_path / "data"
    d.mkdir(parents=True, exist_ok=True)
    return d


@pytest.fixture(scope="function")
def clean_env(monkeypatch: pytest.MonkeyPatch):
    """Ensure tests run with a clean environment (no leftover config vars)."""
    monkeypatch.delenv("PERSONA_CHAT_CONFIG", raising=False)
    for var in list(os.environ):
        if var.startswith("PERSONA_CHAT__"):
            monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture(scope="function")
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(scope="function")
def config_file(tmp_data_dir: Path, clean_env) -> Path:
    """A config.yaml pointing storage at the temporary data dir."""
    cfg = {
        "storage": {
            "data_file": str(tmp_data_dir / "data.json"),
            "uploads_dir": str(tmp_data_dir / "uploads"),
        },
    }
    path = tmp_data_dir / "config.yaml"
    path.write_text(yaml.safe_dump(cfg), encoding="utf-8")
    return path


@pytest.fixture(scope="function")
def make_client(config_file: Path, clock: FakeClock) -> Callable:
    """Factory for a TestClient over a file-backed app in the temp dir."""
    from fastapi.testclient import TestClient
    from persona_chat.server import create_app

    def _make(**kwargs):
        kwargs.setdefault("clock", clock)
        return TestClient(create_app(str(config_file), **kwargs))

    return _make
