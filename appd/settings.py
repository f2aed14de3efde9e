# appd - Declarative Process Supervisor
# Copyright (C) 2026 appd Authors
# SPDX-License-Identifier: Apache-2.0

"""Runtime settings for the appd supervisor.

Settings come from ``APPD_*`` environment variables (the CLI loads a
``.env`` file first) and are validated by a Pydantic model.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, field_validator

logger = logging.getLogger(__name__)

_ENV_PREFIX = "APPD_"
_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class AppdSettings(BaseModel):
    """Supervisor process settings."""

    log_level: str = "INFO"
    log_dir: Path | None = None
    json_log: bool = True
    config_path: Path | None = None
    # Report a natural exit after SIGINT as a failed stop.
    report_exit_as_failure: bool = False

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"invalid log level: {v!r}")
        return level


def _as_bool(raw: str) -> bool:
    return raw.strip().lower() in _TRUE_VALUES


def load_settings(environ: Mapping[str, str] | None = None) -> AppdSettings:
    """Build :class:`AppdSettings` from ``APPD_*`` environment variables.

    Unset variables fall back to the model defaults.
    """
    env = os.environ if environ is None else environ
    data: dict[str, object] = {}

    converters = {
        "LOG_LEVEL": ("log_level", str),
        "LOG_DIR": ("log_dir", lambda v: Path(v).expanduser()),
        "JSON_LOG": ("json_log", _as_bool),
        "CONFIG": ("config_path", lambda v: Path(v).expanduser()),
        "REPORT_EXIT_AS_FAILURE": ("report_exit_as_failure", _as_bool),
    }
    for suffix, (key, convert) in converters.items():
        raw = env.get(f"{_ENV_PREFIX}{suffix}")
        if raw:
            data[key] = convert(raw)

    settings = AppdSettings.model_validate(data)
    logger.debug("Loaded settings: %s", settings.model_dump(mode="json"))
    return settings
