# appd - Declarative Process Supervisor
# Copyright (C) 2026 appd Authors
# SPDX-License-Identifier: Apache-2.0
#
# This file is part of appd, licensed under Apache-2.0.
# See LICENSE for the full license text.

"""Centralized logging configuration for appd.

Uses structlog in stdlib-compatible mode so that plain
``logging.getLogger()`` calls and the structlog loggers injected into
the service manager share one processor pipeline.

Provides:
- setup_logging(): structlog + stdlib unified setup (console + file)
- get_logger(): structlog logger factory used for injection
- bind_run_id() / get_run_id(): supervisor run ID helpers
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import orjson
import structlog

LOG_FILE_NAME = "appd.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def bind_run_id(run_id: str) -> None:
    """Set the current supervisor run ID via structlog contextvars."""
    structlog.contextvars.bind_contextvars(run_id=run_id)


def get_run_id() -> str:
    """Get the current supervisor run ID from structlog contextvars."""
    ctx = structlog.contextvars.get_contextvars()
    return ctx.get("run_id", "-")


def get_logger(name: str = "appd") -> structlog.stdlib.BoundLogger:
    """Return a structlog logger suitable for injection into services."""
    return structlog.stdlib.get_logger(name)


# ── Shared Processors ──────────────────────────────────────────


def _build_shared_processors() -> list:
    """Processors applied to structlog events and foreign stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _orjson_serializer(obj: object, **_kw) -> str:  # noqa: ANN001
    return orjson.dumps(obj, default=str).decode("utf-8")


def _formatter(renderer: Any, pre_chain: list) -> logging.Formatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=pre_chain,
    )


def _supervisor_file_handler(
    log_dir: Path, json_file: bool, pre_chain: list,
) -> RotatingFileHandler:
    """Rotating ``appd.log`` handler: one JSON object per line, or plain text."""
    log_dir.mkdir(parents=True, exist_ok=True)
    if json_file:
        renderer = structlog.processors.JSONRenderer(serializer=_orjson_serializer)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(_formatter(renderer, pre_chain))
    return handler


# ── Main Setup ─────────────────────────────────────────────────


def setup_logging(
    level: str = "INFO",
    log_dir: Path | None = None,
    json_file: bool = True,
) -> None:
    """Configure logging for the supervisor process.

    Console output always goes to stderr: app and command units that
    have no ``stdout`` path write straight to the supervisor's stdout,
    and keeping the two apart lets ``appd run > app.out`` capture only
    child output. The optional file under *log_dir* is separate from
    any unit's own ``stdout``/``stderr`` files.

    Args:
        level: Root log level name; unknown names fall back to INFO.
        log_dir: Directory for ``appd.log``. If None, no file is written.
        json_file: Write JSON lines (True) or plain text (False) to the file.
    """
    shared = _build_shared_processors()

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG)
    console.setFormatter(_formatter(structlog.dev.ConsoleRenderer(), list(shared)))
    root.addHandler(console)

    if log_dir is not None:
        root.addHandler(_supervisor_file_handler(log_dir, json_file, list(shared)))
