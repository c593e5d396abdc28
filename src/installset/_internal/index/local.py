from __future__ import annotations

import functools
import os
from typing import TYPE_CHECKING

from packaging.utils import canonicalize_name

from installset._internal.exceptions import InvalidPackageFilename, MetadataUnavailable
from installset._internal.models.package_file import PackageFileInfo
from installset._internal.models.specification import PackageSpecification
from installset._internal.models.target_python import TargetPython
from installset._internal.utils._log import getLogger
from installset._internal.utils.archives import NoMetadataFound, read_archive_metadata
from installset._internal.utils.filetypes import FileExtensions

if TYPE_CHECKING:
    from packaging.specifiers import SpecifierSet

    from installset._internal.models.name_tuple import NameTuple

logger = getLogger(__name__)


class LocalSource:
    """Package files (wheels and sdists) sitting in a single directory.

    The directory is listed once, on first use; files added afterwards are
    only seen by a new instance.
    """

    def __init__(
        self, directory: str, target_python: TargetPython | None = None
    ) -> None:
        if target_python is None:
            target_python = TargetPython.create()
        self.directory = directory
        self._target_python = target_python

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.directory!r})"

    def _list_directory(self) -> list[str]:
        try:
            names = os.listdir(self.directory)
        except FileNotFoundError:
            logger.debug("Local package directory %s does not exist", self.directory)
            return []
        # Sort wheels ahead of sdists, then by name, for a stable scan order.
        return sorted(
            (n for n in names if FileExtensions.package_file_extension(n)),
            key=lambda n: (not FileExtensions.is_wheel(n), n),
        )

    @functools.cached_property
    def _package_files(self) -> dict[NameTuple, PackageFileInfo]:
        found: dict[NameTuple, PackageFileInfo] = {}
        for filename in self._list_directory():
            try:
                info = PackageFileInfo.parse_filename(filename)
            except InvalidPackageFilename as e:
                logger.debug("Skipping local file %s: %s", filename, e)
                continue
            if not info.supported(self._target_python):
                logger.debug(
                    "Skipping local file %s: none of its tags (%s) are supported",
                    filename,
                    ", ".join(info.sorted_tag_strings),
                )
                continue
            found.setdefault(info.name_tuple, info)
        return found

    def find_package(
        self, name: str, specifier: SpecifierSet
    ) -> NameTuple | None:
        """Return the newest local package named `name` allowed by `specifier`."""
        canonical_name = canonicalize_name(name)
        matching = [
            name_tuple
            for name_tuple in self._package_files
            if name_tuple.name == canonical_name
            and specifier.contains(name_tuple.version)
        ]
        if not matching:
            return None
        return max(matching, key=lambda t: t.preference_key)

    def fetch_spec(self, name_tuple: NameTuple) -> PackageSpecification:
        info = self._package_files.get(name_tuple)
        if info is None:
            raise MetadataUnavailable(name_tuple, f"not found in {self.directory}")
        path = os.path.join(self.directory, info.filename)
        logger.debug("Reading metadata for %s from %s", name_tuple, path)
        with open(path, "rb") as f:
            try:
                raw = read_archive_metadata(info.filename, f)
            except NoMetadataFound as e:
                raise MetadataUnavailable(name_tuple, str(e)) from e
        return PackageSpecification.parse_metadata(
            raw, platform=name_tuple.platform, location=path
        )
