# SPDX-PackageName: testing-mysql
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the testing-mysql contributors.

"""Throwaway MySQL servers for tests."""

from ._internal._embedded import EmbeddedMySql, State
from ._internal._options import MySqlOptions, MySqlOptionsBuilder
from ._internal._platform import get_platform
from ._internal._server import TestingMySqlServer
from ._internal._testbase import MySqlTestCase
from .errors import (
    CommandFailedError,
    MySqlServerError,
    ProcessExitedError,
    ProvisioningError,
    ResourceNotFoundError,
    StartupTimeoutError,
)


__version__ = "0.1.0"

__all__ = (
    "CommandFailedError",
    "EmbeddedMySql",
    "MySqlOptions",
    "MySqlOptionsBuilder",
    "MySqlServerError",
    "MySqlTestCase",
    "ProcessExitedError",
    "ProvisioningError",
    "ResourceNotFoundError",
    "StartupTimeoutError",
    "State",
    "TestingMySqlServer",
    "get_platform",
)
