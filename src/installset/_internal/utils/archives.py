"""Read core metadata out of package archives without unpacking them."""

from __future__ import annotations

import tarfile
import zipfile
from typing import IO, TYPE_CHECKING

from installset._internal.utils.filetypes import FileExtensions

if TYPE_CHECKING:
    from collections.abc import Iterable


class NoMetadataFound(Exception):
    def __init__(self, filename: str, reason: str) -> None:
        super().__init__(filename, reason)
        self.filename = filename
        self.reason = reason

    def __str__(self) -> str:
        return f"{self.filename}: {self.reason}"


def _find_member(names: Iterable[str], suffix: str) -> str | None:
    """Find the single top-level ``<dir>/<suffix>`` entry among `names`."""
    for name in names:
        head, sep, tail = name.partition("/")
        if sep and tail == suffix and head:
            return name
    return None


def _read_wheel_metadata(filename: str, fileobj: IO[bytes]) -> bytes:
    with zipfile.ZipFile(fileobj) as archive:
        candidates = (
            n for n in archive.namelist() if n.split("/", 1)[0].endswith(".dist-info")
        )
        member = _find_member(candidates, "METADATA")
        if member is None:
            raise NoMetadataFound(filename, "no .dist-info/METADATA")
        return archive.read(member)


def _read_zip_sdist_metadata(filename: str, fileobj: IO[bytes]) -> bytes:
    with zipfile.ZipFile(fileobj) as archive:
        member = _find_member(archive.namelist(), "PKG-INFO")
        if member is None:
            raise NoMetadataFound(filename, "no PKG-INFO")
        return archive.read(member)


def _read_tar_sdist_metadata(filename: str, fileobj: IO[bytes]) -> bytes:
    with tarfile.open(fileobj=fileobj, mode="r:gz") as archive:
        member = _find_member(archive.getnames(), "PKG-INFO")
        if member is None:
            raise NoMetadataFound(filename, "no PKG-INFO")
        extracted = archive.extractfile(member)
        if extracted is None:
            raise NoMetadataFound(filename, f"{member} is not a regular file")
        with extracted:
            return extracted.read()


def read_archive_metadata(filename: str, fileobj: IO[bytes]) -> bytes:
    """Return the raw core metadata stored in a wheel or sdist.

    :param filename: The archive's file name, used to pick the archive format.
    :param fileobj: A seekable binary file holding the archive.
    :raises NoMetadataFound: if the archive carries no metadata file.
    """
    ext = FileExtensions.package_file_extension(filename)
    if ext == FileExtensions.WHEEL_EXTENSION:
        return _read_wheel_metadata(filename, fileobj)
    if ext == FileExtensions.ZIP_EXTENSION:
        return _read_zip_sdist_metadata(filename, fileobj)
    if ext == FileExtensions.TAR_GZ_EXTENSION:
        return _read_tar_sdist_metadata(filename, fileobj)
    raise NoMetadataFound(filename, "unsupported archive format")
