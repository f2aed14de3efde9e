# appd - Declarative Process Supervisor
# Copyright (C) 2026 appd Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import argparse
import os
import sys


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="appd",
        description="appd - Declarative Process Supervisor",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override log level (default: INFO or APPD_LOG_LEVEL)",
    )
    sub = parser.add_subparsers(dest="command")

    # ── Validate ──────────────────────────────────────────
    p_validate = sub.add_parser(
        "validate", help="Validate a config and print its JSON form",
    )
    p_validate.add_argument(
        "config", nargs="?", default=None,
        help="Config file (.json or directive text; default: APPD_CONFIG)",
    )
    p_validate.set_defaults(func=_lazy_validate)

    # ── Adapt ─────────────────────────────────────────────
    p_adapt = sub.add_parser(
        "adapt", help="Convert a directive file to JSON",
    )
    p_adapt.add_argument("config", help="Directive file")
    p_adapt.add_argument(
        "--pretty", action="store_true", help="Indent the JSON output",
    )
    p_adapt.set_defaults(func=_lazy_adapt)

    # ── Run ───────────────────────────────────────────────
    p_run = sub.add_parser(
        "run", help="Start all units and stop them on SIGINT/SIGTERM",
    )
    p_run.add_argument(
        "config", nargs="?", default=None,
        help="Config file (.json or directive text; default: APPD_CONFIG)",
    )
    p_run.set_defaults(func=_lazy_run)

    return parser


def cli_main(argv: list[str] | None = None) -> None:
    from dotenv import load_dotenv

    load_dotenv()

    from appd.logging_config import setup_logging
    from appd.settings import load_settings

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.log_level:
        os.environ["APPD_LOG_LEVEL"] = args.log_level

    try:
        settings = load_settings()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    setup_logging(
        level=settings.log_level,
        log_dir=settings.log_dir,
        json_file=settings.json_log,
    )
    args.settings = settings

    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


# ── Lazy import wrappers ──────────────────────────────────


def _lazy_validate(args: argparse.Namespace) -> None:
    from cli.commands.units import cmd_validate

    cmd_validate(args)


def _lazy_adapt(args: argparse.Namespace) -> None:
    from cli.commands.units import cmd_adapt

    cmd_adapt(args)


def _lazy_run(args: argparse.Namespace) -> None:
    from cli.commands.supervise import cmd_run

    cmd_run(args)
