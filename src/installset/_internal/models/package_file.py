"""Represents a wheel or sdist file and provides access to the various parts of
the name that have meaning.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import TYPE_CHECKING

from installset._internal.models.name_tuple import PORTABLE_PLATFORM, NameTuple
from installset._internal.utils.filename_parsing import (
    parse_package_filename,
    platform_from_tags,
)

if TYPE_CHECKING:
    from packaging.tags import Tag
    from typing_extensions import Self

    from installset._internal.models.target_python import TargetPython


@dataclass(frozen=True)
class PackageFileInfo:
    filename: str
    name_tuple: NameTuple
    # None for sdists.
    tag_set: frozenset[Tag] | None

    @property
    def is_wheel(self) -> bool:
        return self.tag_set is not None

    @functools.cached_property
    def sorted_tag_strings(self) -> tuple[str, ...]:
        """Return the wheel's tags as a sorted tuple of strings."""
        if self.tag_set is None:
            return ()
        return tuple(sorted(map(str, self.tag_set)))

    def supported(self, target_python: TargetPython) -> bool:
        """Return whether the file can be installed on the target interpreter.

        Sdists are always considered installable.
        """
        if self.tag_set is None:
            return True
        return target_python.supports(self.tag_set)

    @classmethod
    def parse_filename(cls, filename: str) -> Self:
        """
        :raises: InvalidPackageFilename: if not a well-formed wheel or sdist name.
        """
        name, version, tag_set = parse_package_filename(filename)
        if tag_set is None:
            platform = PORTABLE_PLATFORM
        else:
            platform = platform_from_tags(tag_set)
        return cls(
            filename=filename,
            name_tuple=NameTuple(name, version, platform),
            tag_set=tag_set,
        )
