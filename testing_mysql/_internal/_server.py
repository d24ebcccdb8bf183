# SPDX-PackageName: testing-mysql
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the testing-mysql contributors.

"""An embedded MySQL server with a ready-made user and databases."""

from __future__ import annotations
from typing import TYPE_CHECKING, Any
from typing_extensions import Self

import contextlib
import logging

import mysql.connector

from testing_mysql import errors
from testing_mysql._internal import _embedded
from testing_mysql._internal import _options

if TYPE_CHECKING:
    import pathlib
    import types
    from collections.abc import Iterator
    from mysql.connector.abstracts import MySQLConnectionAbstract
    from mysql.connector.abstracts import MySQLCursorAbstract
    from mysql.connector.pooling import PooledMySQLConnection


logger = logging.getLogger(__name__)


def quote_literal(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


class TestingMySqlServer:
    """Start mysqld and provision *user* and *databases* on it.

    The user is created for any host and, by default, is granted all
    privileges with grant option.  With ``global_grant=False`` it is
    only granted privileges on each of the requested databases.
    """

    # Keep test runners from collecting this class.
    __test__ = False

    def __init__(
        self,
        user: str,
        password: str,
        *databases: str,
        options: _options.MySqlOptions | None = None,
        global_grant: bool = True,
        platform: str | None = None,
    ) -> None:
        if user is None:
            raise ValueError("user is None")
        if password is None:
            raise ValueError("password is None")

        self._user = user
        self._password = password
        self._databases = frozenset(databases)
        self._global_grant = global_grant
        self._server = _embedded.EmbeddedMySql(options, platform=platform)

        try:
            self._version = self._provision()
        except BaseException:
            self._server.close()
            raise

        logger.info(
            "MySQL server ready: %s",
            self._server.get_connection_url(
                self._user, None, password="****"
            ),
        )

    def _provision(self) -> str:
        user = f"{quote_literal(self._user)}@'%'"
        try:
            with self._server.connect() as conn:
                version: str = conn.get_server_info() or ""
                cursor = conn.cursor()
                with contextlib.closing(cursor):
                    # mysqld runs with --skip-ssl, and caching_sha2_password
                    # refuses full authentication over plain TCP.
                    self._execute(
                        cursor,
                        f"CREATE USER {user} IDENTIFIED WITH "
                        f"mysql_native_password BY "
                        f"{quote_literal(self._password)}",
                    )
                    if self._global_grant:
                        self._execute(
                            cursor,
                            f"GRANT ALL ON *.* TO {user} WITH GRANT OPTION",
                        )
                    for database in self._databases:
                        self._execute(cursor, f"CREATE DATABASE {database}")
                        if not self._global_grant:
                            self._execute(
                                cursor,
                                f"GRANT ALL ON {database}.* TO {user}",
                            )
        except mysql.connector.Error as e:
            raise errors.ProvisioningError(
                f"could not provision MySQL server: {e}"
            ) from e

        return version

    @staticmethod
    def _execute(cursor: MySQLCursorAbstract, sql: str) -> None:
        logger.debug("Executing: %s", sql)
        try:
            cursor.execute(sql)
        except mysql.connector.Error as e:
            raise errors.ProvisioningError(str(e), sql) from e

    @property
    def user(self) -> str:
        return self._user

    @property
    def password(self) -> str:
        return self._password

    @property
    def databases(self) -> frozenset[str]:
        return self._databases

    @property
    def port(self) -> int:
        return self._server.port

    @property
    def server_dir(self) -> pathlib.Path:
        return self._server.server_dir

    @property
    def embedded(self) -> _embedded.EmbeddedMySql:
        return self._server

    def get_mysql_version(self) -> str:
        return self._version

    def running(self) -> bool:
        return self._server.running()

    def get_connect_args(self, database: str | None = None) -> dict[str, Any]:
        return self._server.get_connect_args(
            self._user, database, password=self._password
        )

    def get_connection_url(self, database: str | None = None) -> str:
        return self._server.get_connection_url(
            self._user, database, password=self._password
        )

    @contextlib.contextmanager
    def connect(
        self, database: str | None = None, /, **kwargs: Any
    ) -> Iterator[PooledMySQLConnection | MySQLConnectionAbstract]:
        args = self.get_connect_args(database) | kwargs
        conn = mysql.connector.connect(**args)
        try:
            yield conn
        finally:
            conn.close()

    def close(self) -> None:
        self._server.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} user={self._user!r} "
            f"databases={sorted(self._databases)!r} server={self._server!r}>"
        )
