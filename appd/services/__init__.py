# appd - Declarative Process Supervisor
# Copyright (C) 2026 appd Authors
# SPDX-License-Identifier: Apache-2.0
"""
Process supervision package.

Turns a config of units into services and drives their processes
through ordered start and stop passes.
"""

from __future__ import annotations

from appd.services.config import Config, load_config
from appd.services.manager import ServiceManager
from appd.services.paths import validate_file_path
from appd.services.service import Service
from appd.services.state import State, StateKind, Status, StatusKind, WorkerKind
from appd.services.unit import Unit, new_unit
from appd.services.worker import WORKER_STOP_TIMEOUT, Worker, open_streams, run_adhoc

__all__ = [
    "Config",
    "load_config",
    "ServiceManager",
    "validate_file_path",
    "Service",
    "State",
    "StateKind",
    "Status",
    "StatusKind",
    "WorkerKind",
    "Unit",
    "new_unit",
    "WORKER_STOP_TIMEOUT",
    "Worker",
    "open_streams",
    "run_adhoc",
]
