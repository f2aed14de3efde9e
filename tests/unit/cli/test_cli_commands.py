"""Unit tests for cli/commands — validate, adapt and run."""
# appd - Declarative Process Supervisor
# Copyright (C) 2026 appd Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

import pytest

from appd.app import AppdApp
from appd.services.config import Config
from appd.services.unit import Unit
from appd.settings import AppdSettings
from cli.commands.supervise import run_app
from cli.commands.units import cmd_adapt, cmd_validate, resolve_config_path
from tests.helpers.processes import MARKER, SLEEPER, await_file

DIRECTIVES = """\
appd {
    command hostname {
        cmd hostname
    }
    app web {
        cmd python3 -m http.server 4080
        args --bind 127.0.0.1
        after hostname
    }
}
"""


def _args(**kwargs) -> argparse.Namespace:
    kwargs.setdefault("settings", AppdSettings())
    return argparse.Namespace(**kwargs)


# ── Config resolution ────────────────────────────────────────


class TestResolveConfigPath:
    def test_argument_wins(self, tmp_path: Path):
        settings = AppdSettings(config_path=tmp_path / "other")
        args = _args(config=str(tmp_path / "Appdfile"), settings=settings)
        assert resolve_config_path(args) == tmp_path / "Appdfile"

    def test_falls_back_to_settings(self, tmp_path: Path):
        settings = AppdSettings(config_path=tmp_path / "Appdfile")
        assert resolve_config_path(_args(config=None, settings=settings)) == tmp_path / "Appdfile"

    def test_missing_exits(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            resolve_config_path(_args(config=None))
        assert exc_info.value.code == 2
        assert "no config given" in capsys.readouterr().err


# ── validate / adapt ─────────────────────────────────────────


class TestValidate:
    def test_prints_finalized_config(self, tmp_path: Path, capsys):
        cfg = tmp_path / "Appdfile"
        cfg.write_text(DIRECTIVES)

        cmd_validate(_args(config=str(cfg)))

        data = json.loads(capsys.readouterr().out)
        assert [u["name"] for u in data["units"]] == ["hostname", "web"]
        assert [u["seq"] for u in data["units"]] == [1, 2]
        assert data["units"][1]["args"] == ["-m", "http.server", "4080", "--bind", "127.0.0.1"]

    def test_config_error_exits(self, tmp_path: Path, capsys):
        cfg = tmp_path / "Appdfile"
        cfg.write_text("appd {\n  app web {\n    bar baz\n  }\n}\n")

        with pytest.raises(SystemExit) as exc_info:
            cmd_validate(_args(config=str(cfg)))

        assert exc_info.value.code == 1
        assert "line 3: unsupported 'bar' key" in capsys.readouterr().err

    def test_missing_file_exits(self, tmp_path: Path):
        with pytest.raises(SystemExit) as exc_info:
            cmd_validate(_args(config=str(tmp_path / "nope")))
        assert exc_info.value.code == 1


class TestAdapt:
    def test_compact_output(self, tmp_path: Path, capsys):
        cfg = tmp_path / "Appdfile"
        cfg.write_text(DIRECTIVES)

        cmd_adapt(_args(config=str(cfg), pretty=False))

        out = capsys.readouterr().out.strip()
        assert "\n" not in out
        assert json.loads(out)["units"][0]["kind"] == "command"

    def test_pretty_output(self, tmp_path: Path, capsys):
        cfg = tmp_path / "Appdfile"
        cfg.write_text(DIRECTIVES)

        cmd_adapt(_args(config=str(cfg), pretty=True))

        assert "\n  " in capsys.readouterr().out


# ── run ──────────────────────────────────────────────────────


@pytest.mark.posix
class TestRunApp:
    @pytest.mark.asyncio
    async def test_start_wait_stop(self, run_dir: Path, log):
        logger, _ = log
        marker, ready = run_dir / "marker", run_dir / "ready"
        cfg = Config()
        cfg.add_unit(Unit(
            name="prepare", kind="command", command=sys.executable,
            arguments=["-c", MARKER, str(marker)],
        ))
        cfg.add_unit(Unit(
            name="server", kind="app", command=sys.executable,
            arguments=["-c", SLEEPER, str(ready)],
        ))
        app = AppdApp(cfg, logger)
        stop = asyncio.Event()

        task = asyncio.create_task(run_app(app, stop))
        await await_file(ready)
        assert marker.read_text() == "done"
        stop.set()

        assert await task == 0
        assert not app.manager.started

    @pytest.mark.asyncio
    async def test_failed_start_returns_one(self, run_dir: Path, log):
        logger, captured = log
        cfg = Config()
        cfg.add_unit(Unit(
            name="broken", kind="command", command=sys.executable,
            arguments=["-c", "raise SystemExit(4)"],
        ))
        app = AppdApp(cfg, logger)

        assert await run_app(app, asyncio.Event()) == 1
        assert any(e["event"] == "failed to start service" for e in captured)

    @pytest.mark.asyncio
    async def test_invalid_config_returns_one(self, log):
        logger, _ = log
        cfg = Config()
        cfg.add_unit(Unit(name="web", kind="app", command="true", after=["ghost"]))

        assert await run_app(AppdApp(cfg, logger), asyncio.Event()) == 1
