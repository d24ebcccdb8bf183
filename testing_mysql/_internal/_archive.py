# SPDX-PackageName: testing-mysql
# SPDX-License-Identifier: Apache-2.0
# SPDX-FileCopyrightText: Copyright the testing-mysql contributors.

"""Locating and extracting the prepackaged server archives."""

from __future__ import annotations
from typing import TYPE_CHECKING

import contextlib
import importlib.resources
import logging
import os
import pathlib
import shutil
import tempfile

from testing_mysql import errors
from testing_mysql._internal import _process

if TYPE_CHECKING:
    from collections.abc import Iterator
    from importlib.resources.abc import Traversable


logger = logging.getLogger(__name__)

_RESOURCE_PACKAGE = "testing_mysql._resources"

ARCHIVE_ENV = "TESTING_MYSQL_ARCHIVE"
ARCHIVE_DIR_ENV = "TESTING_MYSQL_ARCHIVE_DIR"


def archive_name(platform: str) -> str:
    return f"server-{platform}.tar.gz"


def _archive_from_env() -> pathlib.Path | None:
    if path := os.environ.get(ARCHIVE_ENV):
        archive = pathlib.Path(path)
        if not archive.is_file():
            raise errors.ResourceNotFoundError(
                str(archive),
                f"specified in the {ARCHIVE_ENV} environment variable",
            )
        return archive

    return None


def _archive_from_dir(name: str) -> pathlib.Path | None:
    if path := os.environ.get(ARCHIVE_DIR_ENV):
        archive = pathlib.Path(path) / name
        if archive.is_file():
            return archive

    return None


def find_archive(platform: str) -> Traversable:
    """Return the archive for *platform* without extracting it.

    The ``TESTING_MYSQL_ARCHIVE`` and ``TESTING_MYSQL_ARCHIVE_DIR``
    environment variables take precedence over the bundled resources.
    """
    name = archive_name(platform)
    archive = _archive_from_env() or _archive_from_dir(name)
    if archive is not None:
        return archive

    resource = importlib.resources.files(_RESOURCE_PACKAGE) / name
    if not resource.is_file():
        raise errors.ResourceNotFoundError(
            name,
            f"no bundled server for platform {platform}; set "
            f"{ARCHIVE_ENV} to the path of a matching archive",
        )

    return resource


@contextlib.contextmanager
def _staged(
    resource: Traversable,
) -> Iterator[pathlib.Path]:
    # tar needs a real file, resources may live inside a zip.
    if isinstance(resource, pathlib.Path):
        yield resource
        return

    fd, fname = tempfile.mkstemp(prefix="mysql-", suffix=".tar.gz")
    staged = pathlib.Path(fname)
    try:
        with open(fd, "wb") as dst, resource.open("rb") as src:
            shutil.copyfileobj(src, dst)
        yield staged
    finally:
        try:
            staged.unlink()
        except OSError:
            logger.warning("Failed to delete file %s", staged)


def unpack(platform: str, target: pathlib.Path, *, timeout: float) -> None:
    """Extract the server archive for *platform* into *target*."""
    resource = find_archive(platform)
    with _staged(resource) as archive:
        # We shell out to tar with subprocess instead of using
        # tarfile because it is quite a bit faster.
        _process.run_command(
            ("tar", "-xzf", archive, "-C", target),
            timeout=timeout,
        )
