# SPDX-PackageName: testing-mysql
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the testing-mysql contributors.

from __future__ import annotations
from typing import TYPE_CHECKING, Any, ClassVar

import contextlib
import unittest

from testing_mysql._internal import _options
from testing_mysql._internal import _server

if TYPE_CHECKING:
    from collections.abc import Iterator
    from mysql.connector.abstracts import MySQLConnectionAbstract
    from mysql.connector.pooling import PooledMySQLConnection


class MySqlTestCase(unittest.TestCase):
    """One provisioned MySQL server shared by all tests of a class."""

    MYSQL_USER: ClassVar[str] = "test"
    MYSQL_PASSWORD: ClassVar[str] = "test"  # noqa: S105
    MYSQL_DATABASES: ClassVar[tuple[str, ...]] = ()
    MYSQL_OPTIONS: ClassVar[_options.MySqlOptions | None] = None

    mysql: ClassVar[_server.TestingMySqlServer]

    @classmethod
    def setUpClass(cls) -> None:
        super().setUpClass()
        cls.mysql = _server.TestingMySqlServer(
            cls.MYSQL_USER,
            cls.MYSQL_PASSWORD,
            *cls.MYSQL_DATABASES,
            options=cls.MYSQL_OPTIONS,
        )
        cls.addClassCleanup(cls.mysql.close)

    @contextlib.contextmanager
    def connect(
        self, database: str | None = None, /, **kwargs: Any
    ) -> Iterator[PooledMySQLConnection | MySQLConnectionAbstract]:
        with self.mysql.connect(database, **kwargs) as conn:
            yield conn

    def query(
        self, sql: str, database: str | None = None
    ) -> list[tuple[Any, ...]]:
        with self.connect(database) as conn:
            cursor = conn.cursor()
            with contextlib.closing(cursor):
                cursor.execute(sql)
                rows = cursor.fetchall() if cursor.with_rows else []
            conn.commit()
        return [tuple(row) for row in rows]
