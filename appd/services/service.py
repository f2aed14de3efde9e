# appd - Declarative Process Supervisor
# Copyright (C) 2026 appd Authors
# SPDX-License-Identifier: Apache-2.0

"""Service: a unit bound to its status, state and worker."""

from __future__ import annotations

import asyncio
import functools
from typing import Any

import structlog

from appd.exceptions import ProcessError, UnsupportedKindError
from appd.services.state import State, StateKind, Status, StatusKind, WorkerKind
from appd.services.unit import Unit
from appd.services.worker import Worker, run_adhoc


class Service:
    """Runtime wrapper dispatching start/stop by unit kind."""

    def __init__(
        self,
        seq: int,
        unit: Unit,
        logger: Any | None = None,
        *,
        report_exit_as_failure: bool = False,
    ):
        kind = WorkerKind.from_unit_kind(unit.kind)
        if kind is WorkerKind.UNKNOWN:
            raise UnsupportedKindError(unit.kind)

        self.seq = seq
        self.unit = unit
        self.kind = kind
        self.status = Status(current=StatusKind.PENDING, service_name=unit.name)
        self.state = State(current=StateKind.PENDING, service_name=unit.name)
        self.report_exit_as_failure = report_exit_as_failure
        self.worker: Worker | None = None
        self._base_logger = logger or structlog.stdlib.get_logger(__name__)
        self._logger = self._base_logger.bind(
            service_name=unit.name, kind=unit.kind, seq_id=seq,
        )

    @property
    def name(self) -> str:
        return self.unit.name

    def mark_failed(self, error: BaseException) -> None:
        """Record a failure detected outside start/stop."""
        self._record(StatusKind.FAILURE, error)

    def _record(self, status: StatusKind, error: BaseException | None = None) -> None:
        self.state.current = StateKind.COMPLETED
        self.state.error = None
        self.status.current = status
        self.status.error = error

    async def start(self) -> None:
        """Run the unit to completion (command) or spawn it (app).

        Raises:
            ProcessError: The underlying spawn or exit error.
        """
        self._logger.debug("starting service")
        unit = self.unit

        try:
            if self.kind is WorkerKind.COMMAND:
                loop = asyncio.get_running_loop()
                await loop.run_in_executor(
                    None,
                    functools.partial(
                        run_adhoc,
                        unit.command,
                        unit.arguments,
                        unit.std_out_path,
                        unit.std_err_path,
                        work_directory=unit.work_directory,
                    ),
                )
            else:
                self.worker = Worker.spawn(
                    unit.command,
                    unit.arguments,
                    unit.std_out_path,
                    unit.std_err_path,
                    work_directory=unit.work_directory,
                    seq=self.seq,
                    logger=self._base_logger,
                    report_exit_as_failure=self.report_exit_as_failure,
                )
        except ProcessError as e:
            self._logger.debug("failed starting service", error=str(e))
            self._record(StatusKind.FAILURE, e)
            raise

        self._logger.debug("started service")
        self._record(StatusKind.SUCCESS)

    async def stop(self) -> None:
        """Stop the service. Commands have already completed.

        Raises:
            ProcessError | OSError: When the worker reports a failed stop.
        """
        if self.kind is WorkerKind.COMMAND:
            self._logger.debug("skipped stopping service", reason="command")
            return

        if self.kind is not WorkerKind.APPLICATION:
            self._logger.debug("stopping service")
            self._record(StatusKind.SUCCESS)
            return

        self._logger.debug("stopping service")
        if self.worker is None:
            self._logger.debug("skipped stopping service", reason="not started")
            return

        worker_state, worker_status = await self.worker.stop()
        self.worker = None
        self.state.current = worker_state.current
        self.state.error = worker_state.error
        self.status.current = worker_status.current
        self.status.error = worker_status.error

        if worker_status.current is StatusKind.FAILURE:
            self._logger.debug("failed stopping service", error=str(worker_status.error))
            raise worker_status.error

        self._logger.debug("stopped service")
        self._record(StatusKind.SUCCESS)

    def to_dict(self) -> dict[str, Any]:
        return {
            "seq": self.seq,
            "unit": self.unit.to_dict(),
            "status": self.status.to_dict(),
            "state": self.state.to_dict(),
            "kind": self.kind.value,
        }
