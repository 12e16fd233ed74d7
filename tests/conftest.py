from __future__ import annotations

import sys
from pathlib import Path

import pytest
import structlog

# Import the local src tree, not an installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

_ENV_VARS = (
    "CRONOPS_CONFIG_FILE",
    "CRONOPS_HOST",
    "CRONOPS_TOKEN",
    "CRONOPS_COOKIE",
    "CRONOPS_TIMEOUT",
)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep the developer's own ~/.cronopscfg and CRONOPS_* out of the tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("CRONOPS_CONFIG_FILE", str(tmp_path / "missing.cfg"))


@pytest.fixture(autouse=True)
def _reset_structlog():
    """CLI tests configure structlog against a captured stream; undo that afterwards."""
    yield
    structlog.reset_defaults()
