"""CLI command running the supervisor in the foreground."""

# appd - Declarative Process Supervisor
# Copyright (C) 2026 appd Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
import uuid

from appd.app import AppdApp
from appd.exceptions import ConfigError, ServiceManagerError
from appd.logging_config import bind_run_id, get_logger
from cli.commands.units import load_finalized, resolve_config_path

logger = logging.getLogger("appd")


def cmd_run(args: argparse.Namespace) -> None:
    """Start all units, wait for a signal, then stop them."""
    cfg = load_finalized(resolve_config_path(args))
    settings = args.settings
    app = AppdApp(
        cfg,
        get_logger("appd"),
        report_exit_as_failure=settings.report_exit_as_failure,
    )
    exit_code = asyncio.run(run_app(app))
    sys.exit(exit_code)


async def run_app(app: AppdApp, stop_event: asyncio.Event | None = None) -> int:
    """Drive *app* until *stop_event* is set.

    Returns:
        Process exit code: 0 on success, 1 when start or stop failed.
    """
    bind_run_id(uuid.uuid4().hex[:8])

    try:
        app.provision()
    except ConfigError:
        return 1

    try:
        await app.start()
    except ServiceManagerError as e:
        logger.error("Start aborted: %s; stopping started services", e)
        try:
            await app.stop()
        except ServiceManagerError:
            logger.debug("Stop after failed start reported failures", exc_info=True)
        return 1

    if stop_event is None:
        stop_event = asyncio.Event()
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, stop_event.set)

    logger.info("Services started; waiting for SIGINT/SIGTERM")
    await stop_event.wait()

    try:
        await app.stop()
    except ServiceManagerError:
        return 1
    return 0
