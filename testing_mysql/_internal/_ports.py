# SPDX-PackageName: testing-mysql
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the testing-mysql contributors.

import socket


def random_port(host: str = "") -> int:
    """Return a TCP port the OS considers free right now.

    The probe socket is closed before returning, so another process may
    claim the port before mysqld binds it.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((host, 0))
        port: int = s.getsockname()[1]
        return port
