# appd - Declarative Process Supervisor
# Copyright (C) 2026 appd Authors
# SPDX-License-Identifier: Apache-2.0

"""Unit: declarative description of one command or application."""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from appd.exceptions import UnitValidationError

UNIT_ALIAS_RE = re.compile(r"^[a-zA-Z0-9_-]{3,100}$")
UNIT_KINDS = ("app", "command")


def check_alias(name: str) -> str:
    """Return the trimmed unit alias or raise :class:`UnitValidationError`."""
    name = name.strip()
    if not name:
        raise UnitValidationError("empty unit alias")
    if not UNIT_ALIAS_RE.match(name):
        raise UnitValidationError(f"invalid unit alias: {name!r}")
    return name


def check_kind(name: str, kind: str) -> str:
    """Return the trimmed unit kind or raise :class:`UnitValidationError`."""
    kind = kind.strip()
    if not kind:
        raise UnitValidationError(f"unit {name!r}: empty type")
    if kind not in UNIT_KINDS:
        raise UnitValidationError(f"unit {name!r}: invalid {kind!r} type")
    return kind


class Unit(BaseModel):
    """Configuration for a command or app."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    # The order of the unit in Config, assigned at finalization.
    seq: int = Field(default=0, ge=0)
    name: str = ""
    description: str = ""
    # app or command
    kind: str = ""
    command: str = Field(default="", alias="cmd")
    arguments: list[str] = Field(default_factory=list, alias="args")
    work_directory: str = Field(default="", alias="workdir")
    # Higher runs sooner. Advisory: units run in config order.
    priority: int = Field(default=0, ge=0)
    # Never started or stopped when set.
    noop: bool = False
    # Not implemented.
    wants: list[str] = Field(default_factory=list)
    # Not implemented.
    requires: list[str] = Field(default_factory=list)
    # Units that should start after this one.
    before: list[str] = Field(default_factory=list)
    # Units that should start prior to this one.
    after: list[str] = Field(default_factory=list)
    std_out_path: str = Field(default="", alias="std_out_file_path")
    std_err_path: str = Field(default="", alias="std_err_file_path")

    @model_validator(mode="after")
    def _check_identity(self) -> Unit:
        try:
            self.name = check_alias(self.name)
            self.kind = check_kind(self.name, self.kind)
        except UnitValidationError as e:
            raise ValueError(str(e)) from e
        return self

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the wire names, omitting unset fields."""
        return self.model_dump(by_alias=True, exclude_defaults=True)


def new_unit(kind: str, name: str) -> Unit:
    """Create a unit from a kind and alias.

    Raises:
        UnitValidationError: If the alias or kind is empty or invalid.
    """
    name = check_alias(name)
    kind = check_kind(name, kind)
    return Unit(name=name, kind=kind)
