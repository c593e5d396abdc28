from __future__ import annotations

import functools
import sys
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from packaging import tags
from packaging.version import Version

from installset._internal.utils.misc import normalize_version_info

if TYPE_CHECKING:
    from packaging.specifiers import SpecifierSet
    from packaging.tags import Tag


@dataclass(frozen=True)
class TargetPython:
    """
    Encapsulates the properties of a Python interpreter one is targeting
    for a package install, download, etc.
    """

    __slots__ = [
        "_given_py_version_info",
        "abis",
        "implementation",
        "platforms",
        "__dict__",
    ]

    _given_py_version_info: tuple[int, ...] | None
    abis: tuple[str, ...] | None
    implementation: str | None
    platforms: tuple[str, ...] | None

    def __post_init__(self) -> None:
        if self._given_py_version_info is not None:
            assert self._given_py_version_info
        if self.abis is not None:
            assert self.abis
        if self.implementation is not None:
            assert self.implementation
        if self.platforms is not None:
            assert self.platforms

    @staticmethod
    @functools.cache
    def _cached_create(
        py_version_info: tuple[int, ...] | None,
        abis: tuple[str, ...] | None,
        implementation: str | None,
        platforms: tuple[str, ...] | None,
    ) -> TargetPython:
        return TargetPython(
            _given_py_version_info=py_version_info,
            abis=abis,
            implementation=implementation,
            platforms=platforms,
        )

    @classmethod
    def create(
        cls,
        platforms: Iterable[str] | None = None,
        py_version_info: tuple[int, ...] | None = None,
        abis: Iterable[str] | None = None,
        implementation: str | None = None,
    ) -> TargetPython:
        """
        :param platforms: An iterable of strings or None. If None, matches
            packages that are supported by the current system. Otherwise, will
            match packages that can be built on the platforms passed in.
        :param py_version_info: An optional tuple of ints representing the
            Python version information to use (e.g. `sys.version_info[:3]`).
            This can have length 1, 2, or 3 when provided.
        :param abis: An iterable of strings or None. This is passed to
            packaging.tags after converting a non-None iterable to tuple.
        :param implementation: A string or None, e.g. "cp" or "pp". Defaults
            to the running interpreter's.
        """
        if abis is not None:
            abis = tuple(sorted(frozenset(abis)))
        if platforms is not None:
            platforms = tuple(sorted(frozenset(platforms)))
        return cls._cached_create(
            py_version_info=py_version_info or None,
            abis=abis or None,
            implementation=implementation or None,
            platforms=platforms or None,
        )

    @functools.cached_property
    def py_version_info(self) -> tuple[int, int, int]:
        if self._given_py_version_info is None:
            return normalize_version_info(tuple(sys.version_info[:3]))
        return normalize_version_info(self._given_py_version_info)

    @functools.cached_property
    def full_py_version(self) -> Version:
        return Version(".".join(map(str, self.py_version_info)))

    @functools.cached_property
    def _uses_running_interpreter(self) -> bool:
        return (
            self._given_py_version_info is None
            and self.abis is None
            and self.implementation is None
            and self.platforms is None
        )

    @functools.cached_property
    def sorted_tags(self) -> tuple[Tag, ...]:
        """
        Return the supported PEP 425 tags to check wheel candidates against.

        The tags are returned in order of preference (most preferred first).
        """
        if self._uses_running_interpreter:
            return tuple(tags.sys_tags())

        python_version = self.py_version_info[:2]
        implementation = self.implementation or tags.interpreter_name()
        interpreter = f"{implementation}{python_version[0]}{python_version[1]}"
        platforms = list(self.platforms) if self.platforms is not None else None
        abis = list(self.abis) if self.abis is not None else None

        if implementation == "cp":
            interpreter_tags = tags.cpython_tags(
                python_version, abis=abis, platforms=platforms
            )
        else:
            interpreter_tags = tags.generic_tags(
                interpreter, abis=abis, platforms=platforms
            )
        return tuple(interpreter_tags) + tuple(
            tags.compatible_tags(python_version, interpreter, platforms)
        )

    @functools.cached_property
    def unsorted_tags(self) -> frozenset[Tag]:
        """Exactly the same as sorted_tags, but returns a set.

        This is important for performance.
        """
        return frozenset(self.sorted_tags)

    def supports(self, tag_set: Iterable[Tag]) -> bool:
        """Return whether any of the given tags is installable on this target."""
        return not self.unsorted_tags.isdisjoint(tag_set)

    def accepts_requires_python(self, specifier: SpecifierSet) -> bool:
        return specifier.contains(self.full_py_version, prereleases=True)
