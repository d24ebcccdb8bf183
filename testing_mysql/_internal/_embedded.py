# SPDX-PackageName: testing-mysql
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the testing-mysql contributors.

"""A throwaway mysqld living in its own temporary directory."""

from __future__ import annotations
from typing import TYPE_CHECKING, Any
from typing_extensions import Self

import contextlib
import enum
import logging
import pathlib
import shutil
import subprocess
import tempfile
import threading
import urllib.parse

import mysql.connector

from testing_mysql._internal import _archive
from testing_mysql._internal import _options
from testing_mysql._internal import _platform
from testing_mysql._internal import _ports
from testing_mysql._internal import _process
from testing_mysql._internal import _readiness

if TYPE_CHECKING:
    import types
    from collections.abc import Iterator
    from mysql.connector.abstracts import MySQLConnectionAbstract
    from mysql.connector.pooling import PooledMySQLConnection


logger = logging.getLogger(__name__)

URL_SCHEME = "mysql"

ADMIN_USER = "root"
ADMIN_DATABASE = "mysql"

# Per-attempt connect timeout while polling; keeps a hung handshake
# from eating the whole startup window.
_PROBE_CONNECT_TIMEOUT = 2


class State(enum.Enum):
    CREATED = "created"
    UNPACKING = "unpacking"
    INITIALIZING = "initializing"
    STARTING = "starting"
    READY = "ready"
    CLOSED = "closed"
    FAILED = "failed"


class EmbeddedMySql:
    """Unpack, initialize and start a private mysqld.

    Construction blocks until the server answers queries.  If any step
    fails, everything acquired so far is torn down before the error is
    re-raised.
    """

    def __init__(
        self,
        options: _options.MySqlOptions | None = None,
        *,
        platform: str | None = None,
    ) -> None:
        if options is None:
            options = _options.MySqlOptions()
        if platform is None:
            platform = _platform.get_platform()
        self._options = options
        self._platform = platform
        self._state = State.CREATED
        self._process: subprocess.Popen[bytes] | None = None
        self._port = _ports.random_port()
        self._server_dir = pathlib.Path(
            tempfile.mkdtemp(prefix="testing-mysql-server")
        )
        self._close_lock = threading.Lock()
        self._closed = False

        logger.info("Starting MySQL server in %s", self._server_dir)

        try:
            self._state = State.UNPACKING
            _archive.unpack(
                self._platform,
                self._server_dir,
                timeout=self._options.command_timeout,
            )

            self._state = State.INITIALIZING
            _process.initialize(
                self.mysqld,
                self.data_dir,
                timeout=self._options.command_timeout,
            )

            self._state = State.STARTING
            self._process = self._start_mysqld()
            self._wait_for_server(self._process)
        except BaseException:
            self.close()
            self._state = State.FAILED
            raise

        self._state = State.READY

    @property
    def state(self) -> State:
        return self._state

    @property
    def options(self) -> _options.MySqlOptions:
        return self._options

    @property
    def port(self) -> int:
        return self._port

    @property
    def server_dir(self) -> pathlib.Path:
        return self._server_dir

    @property
    def mysqld(self) -> pathlib.Path:
        return self._server_dir / "bin" / "mysqld"

    @property
    def data_dir(self) -> pathlib.Path:
        return self._server_dir / "data"

    @property
    def share_dir(self) -> pathlib.Path:
        return self._server_dir / "share"

    @property
    def socket(self) -> pathlib.Path:
        return self._server_dir / "mysql.sock"

    @property
    def closed(self) -> bool:
        return self._closed

    def running(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def get_connect_args(
        self,
        user: str = ADMIN_USER,
        database: str | None = ADMIN_DATABASE,
        password: str | None = None,
    ) -> dict[str, Any]:
        args: dict[str, Any] = {
            "host": "localhost",
            "port": self._port,
            "user": user,
            "ssl_disabled": True,
        }
        if database is not None:
            args["database"] = database
        if password is not None:
            args["password"] = password
        return args

    def get_connection_url(
        self,
        user: str = ADMIN_USER,
        database: str | None = ADMIN_DATABASE,
        password: str | None = None,
    ) -> str:
        path = f"/{urllib.parse.quote(database)}" if database else ""
        query = {"user": user}
        if password is not None:
            query["password"] = password
        query["useSSL"] = "false"
        return (
            f"{URL_SCHEME}://localhost:{self._port}{path}"
            f"?{urllib.parse.urlencode(query)}"
        )

    def get_mysql_database(
        self,
    ) -> PooledMySQLConnection | MySQLConnectionAbstract:
        """Return a new administrative connection; the caller closes it."""
        return mysql.connector.connect(**self.get_connect_args())

    @contextlib.contextmanager
    def connect(
        self, /, **kwargs: Any
    ) -> Iterator[PooledMySQLConnection | MySQLConnectionAbstract]:
        conn = mysql.connector.connect(**(self.get_connect_args() | kwargs))
        try:
            yield conn
        finally:
            conn.close()

    def close(self) -> None:
        with self._close_lock:
            if self._closed:
                return
            self._closed = True

        if self._process is not None:
            self._stop_mysqld(self._process)

        try:
            shutil.rmtree(self._server_dir)
        except OSError:
            logger.warning(
                "Failed to delete %s", self._server_dir, exc_info=True
            )

        if self._state is not State.FAILED:
            self._state = State.CLOSED

    def _start_mysqld(self) -> subprocess.Popen[bytes]:
        process = _process.start(
            self.mysqld,
            share_dir=self.share_dir,
            socket=self.socket,
            port=self._port,
            data_dir=self.data_dir,
        )
        logger.info(
            "mysqld started on port %s. "
            "Waiting up to %ss for startup to finish.",
            self._port,
            self._options.startup_wait,
        )
        return process

    def _wait_for_server(self, process: subprocess.Popen[bytes]) -> None:
        connect_args = self.get_connect_args()
        connect_args["connection_timeout"] = _PROBE_CONNECT_TIMEOUT
        _readiness.wait_for_server(
            process,
            connect_args,
            timeout=self._options.startup_wait,
        )

    def _stop_mysqld(self, process: subprocess.Popen[bytes]) -> None:
        wait = self._options.shutdown_wait
        logger.info(
            "Shutting down mysqld. Waiting up to %ss for shutdown to finish.",
            wait,
        )
        try:
            process.kill()
        except OSError:
            logger.warning("Failed to kill mysqld", exc_info=True)

        try:
            process.wait(wait)
        except subprocess.TimeoutExpired:
            logger.error("mysqld is still running in %s", self._server_dir)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        self.close()

    def __del__(self) -> None:
        if getattr(self, "_closed", True):
            return
        logger.warning("MySQL server in %s was never closed", self._server_dir)
        self.close()

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} server_dir={str(self._server_dir)!r} "
            f"port={self._port} state={self._state.value}>"
        )
