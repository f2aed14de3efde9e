# appd - Declarative Process Supervisor
# Copyright (C) 2026 appd Authors
# SPDX-License-Identifier: Apache-2.0

"""Config: ordered collection of units with a name index.

Provides load helpers for JSON and directive files.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from appd.exceptions import (
    ConfigNotFoundError,
    ConfigValidationError,
    DanglingReferenceError,
    DuplicateUnitError,
)
from appd.services.unit import Unit

if TYPE_CHECKING:
    from appd.services.service import Service

logger = logging.getLogger(__name__)


class Config:
    """Units in insertion order, indexed by name."""

    def __init__(self) -> None:
        self.units: list[Unit] = []
        self._index: dict[str, Unit] = {}

    def __len__(self) -> int:
        return len(self.units)

    def __iter__(self) -> Iterator[Unit]:
        return iter(self.units)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def get(self, name: str) -> Unit | None:
        return self._index.get(name)

    def add_unit(self, unit: Unit) -> None:
        """Append *unit*.

        Raises:
            DuplicateUnitError: If a unit with the same name exists.
        """
        if unit.name in self._index:
            raise DuplicateUnitError(unit.name)
        self.units.append(unit)
        self._index[unit.name] = unit

    def validate(self) -> None:
        """Check that every before/after entry names a known unit.

        Raises:
            DanglingReferenceError: On the first unknown reference.
        """
        for unit in self.units:
            for list_kind, names in (("before", unit.before), ("after", unit.after)):
                for name in names:
                    if name not in self._index:
                        raise DanglingReferenceError(unit.name, list_kind, name)

    def finalize(self) -> None:
        """Validate and number units 1..N in insertion order.

        Ordering hints are not applied; insertion order is authoritative.
        """
        self.validate()
        for i, unit in enumerate(self.units, start=1):
            unit.seq = i

    def services(
        self,
        logger: Any | None = None,
        *,
        report_exit_as_failure: bool = False,
    ) -> list[Service]:
        """Finalize and build one service per unit, in order."""
        from appd.services.service import Service

        self.finalize()
        return [
            Service(
                unit.seq,
                unit,
                logger,
                report_exit_as_failure=report_exit_as_failure,
            )
            for unit in self.units
        ]

    # ── Serialization ──────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        return {"units": [unit.to_dict() for unit in self.units]}

    def to_json(self, indent: int | None = None) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Build a config from its serialized form.

        Raises:
            ConfigValidationError: If a unit is malformed or duplicated.
        """
        if not isinstance(data, dict):
            raise ConfigValidationError("config must be an object")
        raw_units = data.get("units")
        if raw_units is None:
            raw_units = []
        if not isinstance(raw_units, list):
            raise ConfigValidationError("'units' must be an array")

        cfg = cls()
        for raw in raw_units:
            try:
                unit = Unit.model_validate(raw)
            except ValidationError as exc:
                raise ConfigValidationError(_describe(exc)) from exc
            cfg.add_unit(unit)
        return cfg

    @classmethod
    def from_json(cls, text: str) -> Config:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigValidationError(f"invalid JSON config: {exc}") from exc
        return cls.from_dict(data)


def _describe(exc: ValidationError) -> str:
    """Flatten a pydantic error into one message."""
    parts = []
    for err in exc.errors():
        original = (err.get("ctx") or {}).get("error")
        if original is not None:
            parts.append(str(original))
            continue
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


def load_config(path: Path) -> Config:
    """Load a config file.

    ``.json`` files hold the serialized form; anything else is read as
    directive text.

    Raises:
        ConfigNotFoundError: If *path* does not exist.
        ConfigValidationError: If the content is invalid.
    """
    if not path.is_file():
        raise ConfigNotFoundError(f"config file not found: {path}")

    logger.debug("Loading config from %s", path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return Config.from_json(text)

    from appd.directives import parse_directives

    return parse_directives(text)
