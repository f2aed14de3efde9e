"""CLI commands for inspecting unit configs."""

# appd - Declarative Process Supervisor
# Copyright (C) 2026 appd Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from appd.exceptions import ConfigError
from appd.services.config import Config


def resolve_config_path(args: argparse.Namespace) -> Path:
    """Return the config path from the CLI argument or settings."""
    if args.config:
        return Path(args.config).expanduser()
    settings = getattr(args, "settings", None)
    if settings is not None and settings.config_path is not None:
        return settings.config_path
    print("Error: no config given (pass CONFIG or set APPD_CONFIG)", file=sys.stderr)
    sys.exit(2)


def load_finalized(path: Path) -> Config:
    """Load and finalize a config, exiting with status 1 on errors."""
    from appd.services.config import load_config

    try:
        cfg = load_config(path)
        cfg.finalize()
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    return cfg


def cmd_validate(args: argparse.Namespace) -> None:
    """Validate a config and print its JSON form."""
    cfg = load_finalized(resolve_config_path(args))
    print(cfg.to_json(indent=2))


def cmd_adapt(args: argparse.Namespace) -> None:
    """Convert directive text into the JSON config form."""
    cfg = load_finalized(Path(args.config).expanduser())
    print(cfg.to_json(indent=2 if args.pretty else None))
