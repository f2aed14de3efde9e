"""
Worker: handle for a spawned long-running process, plus the ad-hoc path
for one-shot commands.
"""

# appd - Declarative Process Supervisor
# Copyright (C) 2026 appd Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import asyncio
import os
import signal
import subprocess
from dataclasses import dataclass, field
from typing import IO, Any

import structlog

from appd.exceptions import (
    ExitError,
    ForceTerminatedError,
    IOOpenError,
    ProcessExitedError,
    SpawnError,
    TerminationError,
)
from appd.services.state import State, StateKind, Status, StatusKind

# Grace period between SIGINT and SIGKILL.
WORKER_STOP_TIMEOUT = 4.0

_OUTPUT_FILE_MODE = 0o600


# ── Stream redirection ─────────────────────────────────────────────

def _private_opener(path: str, flags: int) -> int:
    return os.open(path, flags, _OUTPUT_FILE_MODE)


@dataclass
class OutputStreams:
    """Stdout/stderr targets handed to ``subprocess``.

    ``None`` inherits the supervisor's own stream.
    """
    stdout: IO[bytes] | None = None
    stderr: IO[bytes] | int | None = None
    _owned: list[IO[bytes]] = field(default_factory=list, repr=False)

    def close(self) -> None:
        """Close the parent's copies of opened files."""
        while self._owned:
            self._owned.pop().close()


def open_streams(std_out_path: str = "", std_err_path: str = "") -> OutputStreams:
    """Resolve output destinations for a child process.

    Files are opened for append and created with mode 0600. Without an
    error path, stderr follows stdout into its file when one is set.

    Raises:
        IOOpenError: If a configured file cannot be opened.
    """
    streams = OutputStreams()

    if std_out_path:
        try:
            streams.stdout = open(std_out_path, "ab", opener=_private_opener)  # noqa: SIM115
        except OSError as e:
            raise IOOpenError(f"failed opening output file: {e}") from e
        streams._owned.append(streams.stdout)

    if std_err_path:
        try:
            err_file = open(std_err_path, "ab", opener=_private_opener)  # noqa: SIM115
        except OSError as e:
            streams.close()
            raise IOOpenError(f"failed opening error file: {e}") from e
        streams._owned.append(err_file)
        streams.stderr = err_file
    elif std_out_path:
        streams.stderr = subprocess.STDOUT

    return streams


# ── Ad-hoc execution ───────────────────────────────────────────────

def run_adhoc(
    command: str,
    arguments: list[str],
    std_out_path: str = "",
    std_err_path: str = "",
    *,
    work_directory: str = "",
) -> None:
    """Run a one-shot command to completion.

    Raises:
        IOOpenError: If an output file cannot be opened.
        SpawnError: If the command cannot be started.
        ExitError: If the command exits with a non-zero status.
    """
    streams = open_streams(std_out_path, std_err_path)
    try:
        result = subprocess.run(
            [command, *arguments],
            stdout=streams.stdout,
            stderr=streams.stderr,
            cwd=work_directory or None,
            check=False,
        )
    except (OSError, ValueError, TypeError) as e:
        raise SpawnError(f"failed starting {command!r}: {e}") from e
    finally:
        streams.close()

    if result.returncode != 0:
        raise ExitError(command, result.returncode)


# ── Worker ─────────────────────────────────────────────────────────

class Worker:
    """
    Handle for a spawned long-running process.

    Stop flow:
    1. Start waiting for the process in the background
    2. Send SIGINT
    3. Whichever comes first: process exit or WORKER_STOP_TIMEOUT
    4. On timeout, send SIGKILL
    """

    def __init__(
        self,
        process: subprocess.Popen | None,
        *,
        seq: int = 0,
        logger: Any | None = None,
        report_exit_as_failure: bool = False,
    ):
        self.process = process
        self.seq = seq
        self.report_exit_as_failure = report_exit_as_failure
        self.returncode: int | None = None
        self._lock = asyncio.Lock()
        self._logger = (logger or structlog.stdlib.get_logger(__name__)).bind(seq_id=seq)

    @classmethod
    def spawn(
        cls,
        command: str,
        arguments: list[str],
        std_out_path: str = "",
        std_err_path: str = "",
        *,
        work_directory: str = "",
        seq: int = 0,
        logger: Any | None = None,
        report_exit_as_failure: bool = False,
    ) -> Worker:
        """Start *command* and return a handle to it.

        Raises:
            IOOpenError: If an output file cannot be opened.
            SpawnError: If process creation fails.
        """
        streams = open_streams(std_out_path, std_err_path)
        try:
            process = subprocess.Popen(
                [command, *arguments],
                stdout=streams.stdout,
                stderr=streams.stderr,
                cwd=work_directory or None,
            )
        except (OSError, ValueError, TypeError) as e:
            raise SpawnError(f"failed starting {command!r}: {e}") from e
        finally:
            # The child holds its own descriptors from here on.
            streams.close()

        worker = cls(
            process,
            seq=seq,
            logger=logger,
            report_exit_as_failure=report_exit_as_failure,
        )
        worker._logger.debug("spawned process", command=command, pid=process.pid)
        return worker

    @property
    def pid(self) -> int | None:
        return self.process.pid if self.process else None

    def exit_status(self, returncode: int | None) -> Status:
        """Classify a process exit observed after the interrupt."""
        if self.report_exit_as_failure:
            return Status(current=StatusKind.FAILURE, error=ProcessExitedError(returncode))
        return Status(current=StatusKind.SUCCESS)

    async def stop(self) -> tuple[State, Status]:
        """Interrupt the process, killing it if it outlives the grace period.

        Returns:
            The resulting state (always completed) and status.
        """
        async with self._lock:
            state = State(current=StateKind.COMPLETED)

            if self.process is None:
                return state, Status(
                    current=StatusKind.FAILURE,
                    error=TerminationError("process is nil"),
                )

            loop = asyncio.get_running_loop()
            waiter = loop.run_in_executor(None, self.process.wait)

            try:
                self.process.send_signal(signal.SIGINT)
            except OSError as e:
                self._logger.warning("failed interrupting process", pid=self.process.pid, error=str(e))
                return state, Status(current=StatusKind.FAILURE, error=e)

            done, _ = await asyncio.wait({waiter}, timeout=WORKER_STOP_TIMEOUT)

            if waiter in done:
                self.returncode = waiter.result()
                self._logger.debug(
                    "process exited", pid=self.process.pid, returncode=self.returncode,
                )
                return state, self.exit_status(self.returncode)

            self._logger.warning(
                "process ignored interrupt, sending SIGKILL",
                pid=self.process.pid,
                timeout=WORKER_STOP_TIMEOUT,
            )
            try:
                self.process.kill()
            except OSError as e:
                return state, Status(
                    current=StatusKind.FAILURE,
                    error=TerminationError(f"force terminated failed: {e}"),
                )
            return state, Status(
                current=StatusKind.FAILURE,
                error=ForceTerminatedError("force terminated process"),
            )
