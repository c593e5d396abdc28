from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from packaging.utils import (
    InvalidSdistFilename,
    InvalidWheelFilename,
    parse_sdist_filename,
    parse_wheel_filename,
)
from packaging.version import InvalidVersion

from installset._internal.exceptions import InvalidPackageFilename
from installset._internal.models.name_tuple import PORTABLE_PLATFORM
from installset._internal.utils.filetypes import FileExtensions

if TYPE_CHECKING:
    from packaging.tags import Tag
    from packaging.utils import NormalizedName
    from packaging.version import Version


def platform_from_tags(tag_set: Iterable[Tag]) -> str:
    """Collapse the platform parts of a set of tags into a single string.

    Pure wheels (every tag on the ``any`` platform) are portable. Otherwise the
    specific platforms are joined with dots, the way compressed tag sets are
    written in wheel filenames.
    """
    platforms = {tag.platform for tag in tag_set}
    platforms.discard(PORTABLE_PLATFORM)
    if not platforms:
        return PORTABLE_PLATFORM
    return ".".join(sorted(platforms))


def parse_package_filename(
    filename: str,
) -> tuple[NormalizedName, Version, frozenset[Tag] | None]:
    """Parse a wheel or sdist filename.

    The returned tag set is None for sdists, which install on any platform.

    :raises: InvalidPackageFilename: if `filename` is not a well-formed wheel
        or sdist name.
    """
    ext = FileExtensions.package_file_extension(filename)
    if ext is None:
        raise InvalidPackageFilename(f"Not a package file: {filename!r}")
    try:
        if ext == FileExtensions.WHEEL_EXTENSION:
            name, version, _, tag_set = parse_wheel_filename(filename)
            return name, version, tag_set
        name, version = parse_sdist_filename(filename)
    except (InvalidWheelFilename, InvalidSdistFilename, InvalidVersion) as e:
        raise InvalidPackageFilename(str(e)) from e
    return name, version, None
