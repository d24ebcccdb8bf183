# SPDX-PackageName: testing-mysql
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the testing-mysql contributors.

"""Exceptions raised while bringing up an embedded MySQL server."""

from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


__all__ = (
    "CommandFailedError",
    "MySqlServerError",
    "ProcessExitedError",
    "ProvisioningError",
    "ResourceNotFoundError",
    "StartupTimeoutError",
)


class MySqlServerError(Exception):
    pass


class ResourceNotFoundError(MySqlServerError):
    def __init__(self, resource: str, hint: str | None = None) -> None:
        msg = f"archive not found: {resource}"
        if hint:
            msg = f"{msg} ({hint})"
        super().__init__(msg)
        self.resource = resource


class CommandFailedError(MySqlServerError):
    def __init__(
        self,
        cmd: Sequence[str],
        returncode: int | None,
        output: str = "",
        *,
        reason: str | None = None,
    ) -> None:
        cmdline = " ".join(cmd)
        if reason is not None:
            msg = f"command {reason}: {cmdline}"
        elif returncode is None:
            msg = f"command failed: {cmdline}"
        else:
            msg = f"command exited with code {returncode}: {cmdline}"
        if output:
            msg = f"{msg}\n{output.rstrip()}"
        super().__init__(msg)
        self.cmd = tuple(cmd)
        self.returncode = returncode
        self.output = output


class ProcessExitedError(MySqlServerError):
    def __init__(self, exit_code: int) -> None:
        super().__init__(
            f"mysqld exited with value {exit_code}, "
            f"check stdout for more detail"
        )
        self.exit_code = exit_code


class StartupTimeoutError(MySqlServerError):
    def __init__(self, timeout: float) -> None:
        super().__init__(f"mysqld failed to start after {timeout}s")
        self.timeout = timeout


class ProvisioningError(MySqlServerError):
    def __init__(self, reason: str, statement: str | None = None) -> None:
        if statement is not None:
            super().__init__(f"{reason}: {statement}")
        else:
            super().__init__(reason)
        self.statement = statement
