# SPDX-PackageName: testing-mysql
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the testing-mysql contributors.

"""Polling a freshly spawned mysqld until it answers queries."""

from __future__ import annotations
from typing import TYPE_CHECKING, Any

import contextlib
import logging
import time

import mysql.connector

from testing_mysql import errors

if TYPE_CHECKING:
    import subprocess
    from collections.abc import Mapping


logger = logging.getLogger(__name__)

CANARY_QUERY = "SELECT 42"
CANARY_VALUE = 42

POLL_INTERVAL = 0.01


class NotReadyError(Exception):
    pass


def check_ready(connect_args: Mapping[str, Any]) -> None:
    """Run the canary query once, raising if the answer is not exactly 42."""
    conn = mysql.connector.connect(**connect_args)
    with contextlib.closing(conn):
        cursor = conn.cursor()
        with contextlib.closing(cursor):
            cursor.execute(CANARY_QUERY)
            rows = cursor.fetchall()

    if not rows:
        raise NotReadyError("no rows in result set")
    if len(rows) > 1:
        raise NotReadyError("multiple rows in result set")
    if rows[0][0] != CANARY_VALUE:
        raise NotReadyError(f"wrong result: {rows[0][0]!r}")


def wait_for_server(
    process: subprocess.Popen[Any],
    connect_args: Mapping[str, Any],
    *,
    timeout: float,
    interval: float = POLL_INTERVAL,
) -> None:
    """Block until mysqld answers the canary query.

    Raises ProcessExitedError as soon as the process is seen dead, and
    StartupTimeoutError (chained to the last probe failure) once
    *timeout* seconds have elapsed.
    """
    last_cause: Exception | None = None
    started = time.monotonic()
    while time.monotonic() - started <= timeout:
        try:
            check_ready(connect_args)
        except (mysql.connector.Error, NotReadyError, OSError) as e:
            last_cause = e
        else:
            logger.info("mysqld startup finished")
            return

        exit_code = process.poll()
        if exit_code is not None:
            raise errors.ProcessExitedError(exit_code)

        time.sleep(interval)

    raise errors.StartupTimeoutError(timeout) from last_cause
