"""Integration test fixtures.

The in-process ``app_state`` fixture comes from tests/conftest.py. The
subprocess environment below isolates a real server run from any local
repolangs.yaml and from the network.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def subprocess_env(tmp_path: Path) -> dict[str, str]:
    """Baseline env dict for subprocess-based MCP integration tests.

    Points the cache at an isolated tmp directory and the GitHub API at an
    unroutable local port, so any accidental network call fails fast.
    """
    env = os.environ.copy()
    env["REPOLANGS__CACHE__DB_PATH"] = str(tmp_path / "cache.db")
    env["REPOLANGS__GITHUB__API_URL"] = "http://127.0.0.1:1"
    env["REPOLANGS__LOGGING__LEVEL"] = "WARNING"
    return env
