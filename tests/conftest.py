"""Root test configuration — session-level cleanup of runtime artifacts"""

import shutil
from pathlib import Path

import pytest


_PROJECT_ROOT = Path(__file__).parent.parent

_CLEANUP_DIRS = ["dist"]


@pytest.fixture(scope="session", autouse=True)
def cleanup_artifacts():
    """Remove export output created in the project root during the test session."""
    yield
    for name in _CLEANUP_DIRS:
        p = _PROJECT_ROOT / name
        if p.exists():
            shutil.rmtree(p)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Run every test from an empty directory with no NOTAKIT_* environment."""
    monkeypatch.chdir(tmp_path)
    for name in ("OUTPUT_DIR", "LOG_LEVEL", "PARSER_CONFIG", "DEFAULT_AI_MODEL", "INTERNAL_LINK_PATTERN"):
        monkeypatch.delenv(f"NOTAKIT_{name}", raising=False)
