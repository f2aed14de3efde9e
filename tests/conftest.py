# appd - Declarative Process Supervisor
# Copyright (C) 2026 appd Authors
# SPDX-License-Identifier: Apache-2.0
"""Global test fixtures for appd tests.

Provides a structlog test logger, POSIX gating and cleanup of child
processes left behind by tests that spawn real subprocesses.
"""

from __future__ import annotations

import logging
import os
import signal
import sys
from pathlib import Path

import pytest
import structlog

logger = logging.getLogger(__name__)


# ── Markers ───────────────────────────────────────────────


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if os.name == "posix":
        return
    skip_posix = pytest.mark.skip(reason="requires POSIX signals")
    for item in items:
        if item.get_closest_marker("posix"):
            item.add_marker(skip_posix)


# ── Fixtures ──────────────────────────────────────────────


@pytest.fixture
def log():
    """Injectable structlog logger whose output is captured for assertions."""
    with structlog.testing.capture_logs() as captured:
        yield structlog.get_logger("appd.test"), captured


@pytest.fixture
def python() -> str:
    """Interpreter used for child processes."""
    return sys.executable


@pytest.fixture
def run_dir(tmp_path: Path) -> Path:
    """Scratch directory for child process output.

    Any child whose command line still references it after the test is
    killed.
    """
    d = tmp_path / "run"
    d.mkdir()
    yield d
    _kill_orphans(str(d))


def _kill_orphans(marker: str) -> None:
    """SIGKILL processes whose cmdline references *marker* (Linux only)."""
    proc_dir = Path("/proc")
    if not proc_dir.exists():
        return

    for pid_dir in proc_dir.iterdir():
        if not pid_dir.name.isdigit():
            continue
        try:
            cmdline = (pid_dir / "cmdline").read_text().replace("\x00", " ")
            if marker in cmdline and int(pid_dir.name) != os.getpid():
                logger.info("Killing orphan test process PID=%s", pid_dir.name)
                os.kill(int(pid_dir.name), signal.SIGKILL)
        except (OSError, ValueError):
            continue
