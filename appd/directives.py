# appd - Declarative Process Supervisor
# Copyright (C) 2026 appd Authors
# SPDX-License-Identifier: Apache-2.0

"""Parser for the block-structured unit directive language.

Example::

    appd {
        command hostname {
            cmd hostname
        }
        app web {
            cmd python3 -m http.server 4080
            after hostname
        }
    }

One directive per line; tokens follow shell quoting rules and ``#``
starts a comment.
"""

from __future__ import annotations

import logging
import shlex
from dataclasses import dataclass

from appd.exceptions import ConfigValidationError, DirectiveError
from appd.services.config import Config
from appd.services.unit import UNIT_KINDS, Unit, new_unit

logger = logging.getLogger(__name__)

MAX_DIRECTIVE_ARGS = 255


@dataclass(frozen=True)
class ArgRule:
    min: int = 0
    max: int = 0


ARG_RULES: dict[str, ArgRule] = {
    "cmd": ArgRule(1, MAX_DIRECTIVE_ARGS),
    "args": ArgRule(1, MAX_DIRECTIVE_ARGS),
    "noop": ArgRule(),
    "description": ArgRule(1, MAX_DIRECTIVE_ARGS),
    "workdir": ArgRule(1, 1),
    "priority": ArgRule(1, 1),
    "stdout": ArgRule(1, 1),
    "stderr": ArgRule(1, 1),
    "before": ArgRule(1, MAX_DIRECTIVE_ARGS),
    "after": ArgRule(1, MAX_DIRECTIVE_ARGS),
    "wants": ArgRule(1, MAX_DIRECTIVE_ARGS),
    "requires": ArgRule(1, MAX_DIRECTIVE_ARGS),
}


def validate_arg(key: str, values: list[str]) -> None:
    """Check the argument count of a unit directive."""
    rule = ARG_RULES.get(key)
    if rule is None:
        return
    if rule.min > len(values):
        raise ValueError(f"too few args for {key!r} directive")
    if rule.max < len(values):
        raise ValueError(f"too many args for {key!r} directive")


def apply_directive(unit: Unit, key: str, values: list[str]) -> None:
    """Apply one ``key values...`` line to *unit*."""
    if key not in ARG_RULES:
        raise ValueError(f"unsupported {key!r} key")
    validate_arg(key, values)

    if key == "cmd":
        unit.command = values[0]
        unit.arguments.extend(values[1:])
    elif key == "args":
        unit.arguments.extend(values)
    elif key == "noop":
        unit.noop = True
    elif key == "description":
        unit.description = " ".join(values)
    elif key == "workdir":
        unit.work_directory = values[0]
    elif key == "priority":
        unit.priority = _parse_priority(values[0])
    elif key == "stdout":
        unit.std_out_path = values[0]
    elif key == "stderr":
        unit.std_err_path = values[0]
    else:
        # before, after, wants, requires
        getattr(unit, key).extend(values)


def _parse_priority(raw: str) -> int:
    if not raw.isdigit():
        raise ValueError(f"invalid priority: {raw!r}")
    return int(raw)


def _tokenize(text: str) -> list[tuple[int, list[str]]]:
    lines: list[tuple[int, list[str]]] = []
    for lineno, raw in enumerate(text.splitlines(), start=1):
        try:
            tokens = shlex.split(raw, comments=True)
        except ValueError as e:
            raise DirectiveError(str(e), line=lineno) from e
        if tokens:
            lines.append((lineno, tokens))
    return lines


def parse_directives(text: str) -> Config:
    """Parse directive text into a (not yet finalized) config.

    Raises:
        DirectiveError: On malformed text, unknown keys or bad arg counts.
    """
    cfg = Config()
    depth = 0
    unit: Unit | None = None
    unit_line = 0
    lineno = 0

    for lineno, tokens in _tokenize(text):
        if tokens == ["}"]:
            if depth == 0:
                raise DirectiveError("unexpected '}'", line=lineno)
            if depth == 2 and unit is not None:
                _add(cfg, unit, unit_line)
                unit = None
            depth -= 1
            continue

        opens = tokens[-1] == "{"
        if opens:
            tokens = tokens[:-1]
        if "{" in tokens or "}" in tokens:
            raise DirectiveError("unexpected brace", line=lineno)

        if depth == 0:
            if not opens or len(tokens) != 1:
                raise DirectiveError("expected '<name> {'", line=lineno)
            depth = 1
            continue

        if depth == 1:
            kind, args = tokens[0], tokens[1:]
            if kind not in UNIT_KINDS:
                raise DirectiveError(f"unsupported {kind!r} block", line=lineno)
            if len(args) != 1:
                raise DirectiveError("wrong argument count or unexpected line ending", line=lineno)
            try:
                current = new_unit(kind, args[0])
            except ConfigValidationError as e:
                raise DirectiveError(str(e), line=lineno) from e
            if opens:
                unit, unit_line, depth = current, lineno, 2
            else:
                _add(cfg, current, lineno)
            continue

        if opens:
            raise DirectiveError("unexpected '{'", line=lineno)
        try:
            apply_directive(unit, tokens[0], tokens[1:])
        except ValueError as e:
            raise DirectiveError(str(e), line=lineno) from e

    if depth != 0:
        raise DirectiveError("unexpected end of input, unclosed block", line=lineno)

    logger.debug("Parsed %d units from directives", len(cfg))
    return cfg


def _add(cfg: Config, unit: Unit, lineno: int) -> None:
    try:
        cfg.add_unit(unit)
    except ConfigValidationError as e:
        raise DirectiveError(str(e), line=lineno) from e
