from __future__ import annotations
# appd - Declarative Process Supervisor
# Copyright (C) 2026 appd Authors
# SPDX-License-Identifier: Apache-2.0
#
# This file is part of appd, licensed under Apache-2.0.
# See LICENSE for the full license text.

"""Unified exception hierarchy for appd.

All domain-specific exceptions derive from :class:`AppdError`,
enabling callers to catch the entire family with a single clause::

    try:
        ...
    except AppdError as e:
        logger.error("Domain error: %s", e)
"""


class AppdError(Exception):
    """Base exception for all appd errors."""


# ── Configuration ────────────────────────────────────────────


class ConfigError(AppdError):
    """Configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Configuration file not found."""


class ConfigValidationError(ConfigError):
    """Configuration validation failure."""


class UnitValidationError(ConfigValidationError):
    """Unit alias or kind is empty or malformed."""


class DuplicateUnitError(ConfigValidationError):
    """A unit with the same name is already part of the config."""

    def __init__(self, name: str) -> None:
        super().__init__(f"unit {name!r} already exists")
        self.name = name


class DanglingReferenceError(ConfigValidationError):
    """A ``before``/``after`` entry names a unit that does not exist."""

    def __init__(self, unit: str, list_kind: str, missing: str) -> None:
        super().__init__(
            f"unit {unit!r}: {list_kind!r} references unknown unit {missing!r}"
        )
        self.unit = unit
        self.list_kind = list_kind
        self.missing = missing


class UnsupportedKindError(ConfigValidationError):
    """Unit kind has no execution strategy."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"unsupported service kind: {kind}")
        self.kind = kind


class DirectiveError(ConfigValidationError):
    """Malformed directive text.

    Carries the line number the error was detected on.
    """

    def __init__(self, message: str, *, line: int = 0) -> None:
        super().__init__(f"line {line}: {message}" if line else message)
        self.line = line


# ── Provisioning ─────────────────────────────────────────────


class ProvisioningError(AppdError):
    """Manager used before a valid config was provisioned."""


# ── Process ──────────────────────────────────────────────────


class ProcessError(AppdError):
    """Process spawn and termination errors."""


class IOOpenError(ProcessError):
    """Redirection target could not be opened."""


class SpawnError(ProcessError):
    """Process creation failed (executable missing, not runnable)."""


class ExitError(ProcessError):
    """Ad-hoc command exited with a non-zero return code."""

    def __init__(self, command: str, returncode: int) -> None:
        super().__init__(f"{command}: exit status {returncode}")
        self.command = command
        self.returncode = returncode


class FilePathError(ProcessError):
    """Configured output path failed pre-flight validation."""


class TerminationError(ProcessError):
    """Stop protocol errors."""


class ProcessExitedError(TerminationError):
    """Process exited after being interrupted.

    Only raised when clean exits are reported as failures.
    """

    def __init__(self, returncode: int | None) -> None:
        super().__init__(f"process exited with code {returncode}")
        self.returncode = returncode


class ForceTerminatedError(TerminationError):
    """Process ignored the interrupt and was killed."""


# ── Manager ──────────────────────────────────────────────────


class ServiceManagerError(AppdError):
    """Start or stop pass reported failing services."""
