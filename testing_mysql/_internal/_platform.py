# SPDX-PackageName: testing-mysql
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the testing-mysql contributors.


import platform
import sys

if sys.platform == "darwin":

    def host_os_name() -> str:
        return "Mac OS X"

else:

    def host_os_name() -> str:
        return platform.system()


def host_arch() -> str:
    return platform.machine()


def get_platform(
    os_name: str | None = None,
    arch: str | None = None,
) -> str:
    """Return the platform identifier used to name server archives.

    Unsupported platforms are not rejected here, they simply have no
    matching archive.
    """
    if os_name is None:
        os_name = host_os_name()
    if arch is None:
        arch = host_arch()
    return f"{os_name}-{arch}".replace(" ", "_")
