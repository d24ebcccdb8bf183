# SPDX-PackageName: testing-mysql
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the testing-mysql contributors.

"""Timeouts governing startup, shutdown and helper commands."""

from __future__ import annotations
from typing import Any
from typing_extensions import Self

import dataclasses
import math


DEFAULT_STARTUP_WAIT = 10.0
DEFAULT_SHUTDOWN_WAIT = 10.0
DEFAULT_COMMAND_TIMEOUT = 30.0


def _check_duration(name: str, value: float) -> float:
    if value is None:
        raise ValueError(f"{name} is None")
    value = float(value)
    if not math.isfinite(value) or value <= 0:
        raise ValueError(
            f"{name} must be a positive finite number, got {value}"
        )
    return value


@dataclasses.dataclass(kw_only=True, frozen=True)
class MySqlOptions:
    """All durations are in seconds."""

    startup_wait: float = DEFAULT_STARTUP_WAIT
    shutdown_wait: float = DEFAULT_SHUTDOWN_WAIT
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT

    def __post_init__(self) -> None:
        for field in dataclasses.fields(self):
            value = _check_duration(field.name, getattr(self, field.name))
            object.__setattr__(self, field.name, value)

    def with_(self, **changes: Any) -> MySqlOptions:
        return dataclasses.replace(self, **changes)

    @staticmethod
    def builder() -> MySqlOptionsBuilder:
        return MySqlOptionsBuilder()


class MySqlOptionsBuilder:
    def __init__(self) -> None:
        self._startup_wait = DEFAULT_STARTUP_WAIT
        self._shutdown_wait = DEFAULT_SHUTDOWN_WAIT
        self._command_timeout = DEFAULT_COMMAND_TIMEOUT

    def set_startup_wait(self, startup_wait: float) -> Self:
        self._startup_wait = _check_duration("startup_wait", startup_wait)
        return self

    def set_shutdown_wait(self, shutdown_wait: float) -> Self:
        self._shutdown_wait = _check_duration("shutdown_wait", shutdown_wait)
        return self

    def set_command_timeout(self, command_timeout: float) -> Self:
        self._command_timeout = _check_duration(
            "command_timeout", command_timeout
        )
        return self

    def build(self) -> MySqlOptions:
        return MySqlOptions(
            startup_wait=self._startup_wait,
            shutdown_wait=self._shutdown_wait,
            command_timeout=self._command_timeout,
        )
