# appd - Declarative Process Supervisor
# Copyright (C) 2026 appd Authors
# SPDX-License-Identifier: Apache-2.0

"""Host application driving a ServiceManager through its lifecycle."""

from __future__ import annotations

from typing import Any

from appd.exceptions import ConfigError, ServiceManagerError
from appd.logging_config import get_logger
from appd.services.config import Config
from appd.services.manager import ServiceManager
from appd.services.state import Status

APP_NAME = "appd"


class AppdApp:
    """Provision, start and stop the services of one config."""

    def __init__(
        self,
        config: Config,
        logger: Any | None = None,
        *,
        report_exit_as_failure: bool = False,
    ):
        self.name = APP_NAME
        self.config = config
        self.report_exit_as_failure = report_exit_as_failure
        self.logger = (logger or get_logger(APP_NAME)).bind(app=self.name)
        self.manager: ServiceManager | None = None

    def provision(self) -> None:
        """Build the service manager.

        Raises:
            ConfigError: If the config is invalid.
        """
        self.logger.info("provisioning app instance")
        try:
            self.manager = ServiceManager.from_config(
                self.config,
                self.logger,
                report_exit_as_failure=self.report_exit_as_failure,
            )
        except ConfigError as e:
            self.logger.error("failed configuring app instance", error=str(e))
            raise
        self.logger.info("provisioned app instance", services=len(self.manager.services))

    def _manager(self) -> ServiceManager:
        # An unprovisioned manager reports its own failure status.
        if self.manager is None:
            self.manager = ServiceManager(
                self.logger, report_exit_as_failure=self.report_exit_as_failure,
            )
        return self.manager

    def _report(self, message: str, statuses: list[Status]) -> None:
        for status in statuses:
            self.logger.error(
                message,
                service_name=status.service_name,
                error=str(status.error) if status.error is not None else None,
            )

    async def start(self) -> None:
        """Start all services.

        Raises:
            ServiceManagerError: If any service failed to start.
        """
        self.logger.debug("starting service manager")
        failures = await self._manager().start()
        if failures:
            self._report("failed to start service", failures)
            raise ServiceManagerError("service manager failed to start services")
        self.logger.debug("started service manager")

    async def stop(self) -> None:
        """Stop all services.

        Raises:
            ServiceManagerError: If any service failed to stop cleanly.
        """
        self.logger.debug("stopping service manager")
        failures = await self._manager().stop()
        if failures:
            self._report("failed to stop service", failures)
            raise ServiceManagerError("service manager failed to stop services")
        self.logger.debug("stopped service manager")
