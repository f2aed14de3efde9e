"""
Lifecycle value types: Status, State and worker kinds.
"""

# appd - Declarative Process Supervisor
# Copyright (C) 2026 appd Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


# ── Kinds ──────────────────────────────────────────────────────────

class StatusKind(Enum):
    """Outcome of the last Start/Stop attempt."""
    UNKNOWN = "unknown"
    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"


class StateKind(Enum):
    """Lifecycle phase of a service."""
    UNKNOWN = "unknown"
    PENDING = "pending"
    RUNNING = "running"
    STOPPED = "stopped"
    PAUSED = "paused"
    COMPLETED = "completed"


class WorkerKind(Enum):
    """Execution strategy selected for a unit."""
    UNKNOWN = "unknown"
    COMMAND = "command"
    APPLICATION = "application"

    @classmethod
    def from_unit_kind(cls, kind: str) -> WorkerKind:
        return _UNIT_KINDS.get(kind, cls.UNKNOWN)


_UNIT_KINDS = {
    "command": WorkerKind.COMMAND,
    "app": WorkerKind.APPLICATION,
}


# ── Records ────────────────────────────────────────────────────────

def _error_text(error: BaseException | None) -> str | None:
    return str(error) if error is not None else None


@dataclass
class Status:
    """How the last lifecycle operation went."""
    current: StatusKind = StatusKind.UNKNOWN
    service_name: str = ""
    error: BaseException | None = None

    @classmethod
    def failure(cls, service_name: str, error: BaseException) -> Status:
        return cls(current=StatusKind.FAILURE, service_name=service_name, error=error)

    @property
    def failed(self) -> bool:
        return self.current is StatusKind.FAILURE

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "current": self.current.value,
            "service_name": self.service_name,
        }
        if self.error is not None:
            data["error"] = _error_text(self.error)
        return data


@dataclass
class State:
    """Lifecycle phase the service is in now."""
    current: StateKind = StateKind.UNKNOWN
    service_name: str = ""
    error: BaseException | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "current": self.current.value,
            "service_name": self.service_name,
        }
        if self.error is not None:
            data["error"] = _error_text(self.error)
        return data
