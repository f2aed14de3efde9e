"""Unit tests for appd/logging_config.py — structlog-based logging setup."""
# appd - Declarative Process Supervisor
# Copyright (C) 2026 appd Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest
import structlog

from appd.logging_config import (
    LOG_FILE_BACKUPS,
    LOG_FILE_MAX_BYTES,
    LOG_FILE_NAME,
    bind_run_id,
    get_logger,
    get_run_id,
    setup_logging,
)


# ── Run ID contextvars ────────────────────────────────────


class TestRunId:
    def setup_method(self):
        structlog.contextvars.clear_contextvars()

    def test_default_value(self):
        assert get_run_id() == "-"

    def test_bind_and_get(self):
        bind_run_id("run-abc")
        assert get_run_id() == "run-abc"

    def teardown_method(self):
        structlog.contextvars.clear_contextvars()


# ── setup_logging ─────────────────────────────────────────


class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def _reset_logging(self):
        """Reset root logger and structlog after each test."""
        yield
        root = logging.getLogger()
        for handler in root.handlers:
            handler.close()
        root.handlers.clear()
        root.setLevel(logging.WARNING)
        structlog.reset_defaults()
        structlog.contextvars.clear_contextvars()

    def test_console_only(self):
        setup_logging(level="DEBUG", log_dir=None)
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1

    def test_unknown_level_falls_back_to_info(self):
        setup_logging(level="chatty")
        assert logging.getLogger().level == logging.INFO

    def test_console_writes_to_stderr(self):
        setup_logging(level="INFO")
        (console,) = logging.getLogger().handlers
        assert console.stream is sys.stderr

    def test_file_rotation_limits(self, tmp_path: Path):
        setup_logging(level="INFO", log_dir=tmp_path)
        (handler,) = [
            h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)
        ]
        assert handler.maxBytes == LOG_FILE_MAX_BYTES
        assert handler.backupCount == LOG_FILE_BACKUPS
        assert Path(handler.baseFilename) == tmp_path / LOG_FILE_NAME

    def test_file_handler(self, tmp_path: Path):
        setup_logging(level="INFO", log_dir=tmp_path / "logs")
        root = logging.getLogger()
        assert len(root.handlers) == 2
        assert any(isinstance(h, RotatingFileHandler) for h in root.handlers)
        assert (tmp_path / "logs").is_dir()

    def test_json_file_output(self, tmp_path: Path):
        log_dir = tmp_path / "logs"
        setup_logging(level="INFO", log_dir=log_dir, json_file=True)
        bind_run_id("run-1")

        get_logger("appd.test").info("started service", service_name="web", seq_id=2)
        for handler in logging.getLogger().handlers:
            handler.flush()

        lines = (log_dir / "appd.log").read_text(encoding="utf-8").splitlines()
        record = json.loads(lines[-1])
        assert record["event"] == "started service"
        assert record["service_name"] == "web"
        assert record["seq_id"] == 2
        assert record["run_id"] == "run-1"
        assert record["level"] == "info"

    def test_plain_file_output(self, tmp_path: Path):
        log_dir = tmp_path / "logs"
        setup_logging(level="INFO", log_dir=log_dir, json_file=False)

        logging.getLogger("appd.stdlib").warning("plain %s", "message")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "plain message" in (log_dir / "appd.log").read_text(encoding="utf-8")
