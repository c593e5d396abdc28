"""Filetype information."""

from __future__ import annotations

import re
from typing import ClassVar


class FileExtensions:

    WHEEL_EXTENSION: ClassVar[str] = ".whl"
    TAR_GZ_EXTENSION: ClassVar[str] = ".tar.gz"
    ZIP_EXTENSION: ClassVar[str] = ".zip"
    SDIST_EXTENSIONS: ClassVar[tuple[str, ...]] = (TAR_GZ_EXTENSION, ZIP_EXTENSION)
    # Wheels come first: when a wheel and an sdist describe the same release,
    # the wheel is the one we read metadata from.
    PACKAGE_EXTENSIONS: ClassVar[tuple[str, ...]] = (
        WHEEL_EXTENSION,
    ) + SDIST_EXTENSIONS

    _package_exts_joiner: ClassVar[str] = "|".join(
        map(re.escape, PACKAGE_EXTENSIONS)
    )
    _package_exts_regex: ClassVar[re.Pattern[str]] = re.compile(
        f"(?:{_package_exts_joiner})$",
        flags=re.IGNORECASE,
    )

    @staticmethod
    def package_file_extension(name: str) -> str | None:
        """Return the package extension of `name`, or None if it has none."""
        # NB: os.path.splitext() is unreliable for this purposes as it will only ever
        # contain "at most one period": https://docs.python.org/3/library/os.path.html#os.path.splitext
        if m := FileExtensions._package_exts_regex.search(name):
            return m.group(0).lower()
        return None

    @staticmethod
    def is_wheel(name: str) -> bool:
        return FileExtensions.package_file_extension(name) == (
            FileExtensions.WHEEL_EXTENSION
        )
