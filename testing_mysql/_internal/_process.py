# SPDX-PackageName: testing-mysql
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the testing-mysql contributors.

"""Running the helper commands and the mysqld daemon."""

from __future__ import annotations
from typing import TYPE_CHECKING

import logging
import os
import subprocess

from testing_mysql import errors

if TYPE_CHECKING:
    from collections.abc import Sequence


logger = logging.getLogger(__name__)

StrPath = str | os.PathLike[str]


def _output_text(out: str | bytes | None) -> str:
    if out is None:
        return ""
    if isinstance(out, bytes):
        return out.decode(errors="replace")
    return out


def run_command(cmd: Sequence[StrPath], *, timeout: float) -> str:
    """Run *cmd* to completion and return its combined output.

    The child is killed if it is still running after *timeout* seconds.
    """
    args = [os.fspath(a) for a in cmd]
    logger.debug("running %s", " ".join(args))
    try:
        proc = subprocess.run(
            args,
            check=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise errors.CommandFailedError(
            args,
            None,
            _output_text(e.output),
            reason=f"timed out after {timeout}s",
        ) from None
    except OSError as e:
        raise errors.CommandFailedError(
            args, None, reason=f"could not be run ({e})"
        ) from e

    if proc.returncode != 0:
        raise errors.CommandFailedError(args, proc.returncode, proc.stdout)

    return proc.stdout


def initialize_args(mysqld: StrPath, data_dir: StrPath) -> list[str]:
    return [
        os.fspath(mysqld),
        "--no-defaults",
        "--initialize-insecure",
        "--datadir",
        os.fspath(data_dir),
    ]


def start_args(
    mysqld: StrPath,
    *,
    share_dir: StrPath,
    socket: StrPath,
    port: int,
    data_dir: StrPath,
) -> list[str]:
    return [
        os.fspath(mysqld),
        "--no-defaults",
        "--skip-ssl",
        "--disable-partition-engine-check",
        "--explicit_defaults_for_timestamp",
        "--lc_messages_dir",
        os.fspath(share_dir),
        "--socket",
        os.fspath(socket),
        "--port",
        str(port),
        "--datadir",
        os.fspath(data_dir),
    ]


def initialize(mysqld: StrPath, data_dir: StrPath, *, timeout: float) -> None:
    """Create an empty data directory with a password-less root account."""
    run_command(initialize_args(mysqld, data_dir), timeout=timeout)


def start(
    mysqld: StrPath,
    *,
    share_dir: StrPath,
    socket: StrPath,
    port: int,
    data_dir: StrPath,
) -> subprocess.Popen[bytes]:
    """Spawn mysqld without waiting for it to accept connections.

    The server's stderr is merged into its stdout, which is inherited
    from the current process.
    """
    args = start_args(
        mysqld,
        share_dir=share_dir,
        socket=socket,
        port=port,
        data_dir=data_dir,
    )
    logger.debug("starting %s", " ".join(args))
    return subprocess.Popen(args, stdout=None, stderr=subprocess.STDOUT)
