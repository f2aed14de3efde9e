"""
Service Manager - orchestrates ordered start/stop across all units.
"""

# appd - Declarative Process Supervisor
# Copyright (C) 2026 appd Authors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import asyncio
from typing import Any

import structlog

from appd.exceptions import AppdError, ProvisioningError
from appd.services.config import Config
from appd.services.paths import validate_file_path
from appd.services.service import Service
from appd.services.state import Status


class ServiceManager:
    """
    Manager for the services of one provisioned config.

    Responsibilities:
    - Start services in ascending sequence, aborting on the first failure
    - Stop services in descending sequence, collecting every failure
    - Run one start or stop pass at a time
    """

    def __init__(
        self,
        logger: Any | None = None,
        *,
        report_exit_as_failure: bool = False,
    ):
        self.services: list[Service] = []
        self.report_exit_as_failure = report_exit_as_failure
        self._logger = logger or structlog.stdlib.get_logger(__name__)
        self._lock = asyncio.Lock()
        self._provisioned = False
        self._started = False

    @classmethod
    def from_config(
        cls,
        config: Config,
        logger: Any | None = None,
        *,
        report_exit_as_failure: bool = False,
    ) -> ServiceManager:
        """Create a manager and provision it with *config*.

        Raises:
            ConfigError: If the config fails validation.
        """
        manager = cls(logger, report_exit_as_failure=report_exit_as_failure)
        manager.provision(config)
        return manager

    def provision(self, config: Config) -> None:
        """Materialize one service per unit.

        Raises:
            ConfigError: If the config fails validation.
        """
        self._logger.debug("initializing manager", configuration=config.to_dict())
        self.services = config.services(
            self._logger, report_exit_as_failure=self.report_exit_as_failure,
        )
        self._logger.debug(
            "configured services", services=[svc.name for svc in self.services],
        )
        self._provisioned = True

    @property
    def provisioned(self) -> bool:
        return self._provisioned

    @property
    def started(self) -> bool:
        return self._started

    def _not_provisioned(self) -> list[Status]:
        return [Status.failure("all", ProvisioningError("provisioning has failed"))]

    def _skip_noop(self, svc: Service, action: str) -> bool:
        if not svc.unit.noop:
            return False
        self._logger.debug(
            f"skipped {action} service",
            service_name=svc.name,
            kind=svc.unit.kind,
            reason="noop",
            seq_id=svc.seq,
        )
        return True

    async def start(self) -> list[Status]:
        """Start services in order.

        Returns:
            An empty list on success, otherwise the status of the one
            service that aborted the pass.
        """
        async with self._lock:
            if not self._provisioned:
                return self._not_provisioned()

            for svc in sorted(self.services, key=lambda s: s.seq):
                if self._skip_noop(svc, "starting"):
                    continue

                for fp in (svc.unit.std_out_path, svc.unit.std_err_path):
                    if not fp:
                        continue
                    try:
                        validate_file_path(fp)
                    except (AppdError, OSError) as e:
                        self._logger.debug(
                            "invalid output path", service_name=svc.name, path=fp, error=str(e),
                        )
                        svc.mark_failed(e)
                        return [svc.status]

                try:
                    await svc.start()
                except AppdError:
                    return [svc.status]

            self._started = True
            return []

    async def stop(self) -> list[Status]:
        """Stop every service, last started first.

        Returns:
            The failure status of each service that did not stop cleanly.
        """
        async with self._lock:
            if not self._provisioned:
                return self._not_provisioned()

            ordered = sorted(self.services, key=lambda s: s.seq, reverse=True)
            failures: list[Status] = []

            for svc in ordered:
                if self._skip_noop(svc, "stopping"):
                    continue
                try:
                    await svc.stop()
                except (AppdError, OSError):
                    self._logger.debug(
                        "service stop reported failure",
                        service_name=svc.name,
                        seq_id=svc.seq,
                        exc_info=True,
                    )
                    failures.append(svc.status)

            self._started = False
            return failures

    def status_report(self) -> list[dict[str, Any]]:
        """Return a serializable snapshot of every service."""
        return [svc.to_dict() for svc in self.services]
