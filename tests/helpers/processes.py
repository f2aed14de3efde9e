# appd - Declarative Process Supervisor
# Copyright (C) 2026 appd Authors
# SPDX-License-Identifier: Apache-2.0
"""Child process scripts and polling helpers for tests.

Every script takes a scratch path as its first argument so the
``run_dir`` fixture can find leftovers by command line.
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path

# Writes "ready" to argv[1] and sleeps; dies on SIGINT.
SLEEPER = (
    "import sys, time\n"
    "open(sys.argv[1], 'w').write('ready')\n"
    "time.sleep(60)\n"
)

# Ignores SIGINT, writes "ready" to argv[1], sleeps.
STUBBORN = (
    "import signal, sys, time\n"
    "signal.signal(signal.SIGINT, signal.SIG_IGN)\n"
    "open(sys.argv[1], 'w').write('ready')\n"
    "time.sleep(60)\n"
)

# Writes argv[2] to argv[1] and exits.
MARKER = (
    "import sys\n"
    "open(sys.argv[1], 'w').write(sys.argv[2] if len(sys.argv) > 2 else 'done')\n"
)


def wait_for_file(path: Path, timeout: float = 10.0) -> str:
    """Block until *path* has content; return it."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if path.exists():
            text = path.read_text()
            if text:
                return text
        time.sleep(0.02)
    raise TimeoutError(f"{path} not written within {timeout}s")


async def await_file(path: Path, timeout: float = 10.0) -> str:
    """Async variant of :func:`wait_for_file`."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        if path.exists():
            text = path.read_text()
            if text:
                return text
        await asyncio.sleep(0.02)
    raise TimeoutError(f"{path} not written within {timeout}s")
