from __future__ import annotations

import functools
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from packaging.metadata import Metadata
from packaging.requirements import Requirement
from packaging.specifiers import SpecifierSet
from packaging.utils import NormalizedName, canonicalize_name
from packaging.version import Version

from installset._internal.models.dependency import Dependency
from installset._internal.models.name_tuple import PORTABLE_PLATFORM, NameTuple

if TYPE_CHECKING:
    from typing_extensions import Self


@dataclass(frozen=True)
class PackageSpecification:
    """The fully materialized metadata of a package that can be installed.

    :param requires: The package's ``Requires-Dist`` entries.
    :param requires_python: The package's ``Requires-Python`` value, if any.
    :param location: Where the package was materialized from (a path or URL),
        for display only.
    """

    name: NormalizedName
    version: Version
    platform: str
    requires: tuple[Requirement, ...]
    requires_python: SpecifierSet | None
    location: str | None

    @classmethod
    def create(
        cls,
        name: str,
        version: str | Version,
        platform: str | None = None,
        requires: Iterable[str | Requirement] = (),
        requires_python: str | SpecifierSet | None = None,
        location: str | None = None,
    ) -> Self:
        if isinstance(version, str):
            version = Version(version)
        if isinstance(requires_python, str):
            requires_python = SpecifierSet(requires_python)
        return cls(
            name=canonicalize_name(name),
            version=version,
            platform=platform or PORTABLE_PLATFORM,
            requires=tuple(
                r if isinstance(r, Requirement) else Requirement(r) for r in requires
            ),
            requires_python=requires_python,
            location=location,
        )

    @classmethod
    def from_metadata(
        cls,
        metadata: Metadata,
        platform: str | None = None,
        location: str | None = None,
    ) -> Self:
        return cls.create(
            name=metadata.name,
            version=metadata.version,
            platform=platform,
            requires=metadata.requires_dist or (),
            requires_python=metadata.requires_python,
            location=location,
        )

    @classmethod
    def parse_metadata(
        cls,
        raw: bytes | str,
        platform: str | None = None,
        location: str | None = None,
    ) -> Self:
        """Build a specification from the text of a METADATA or PKG-INFO file.

        :raises: packaging.metadata.InvalidMetadata: if a field we read is invalid.
        """
        metadata = Metadata.from_email(raw, validate=False)
        return cls.from_metadata(metadata, platform=platform, location=location)

    @functools.cached_property
    def name_tuple(self) -> NameTuple:
        return NameTuple(self.name, self.version, self.platform)

    @property
    def full_name(self) -> str:
        return self.name_tuple.full_name

    @property
    def is_portable(self) -> bool:
        return self.name_tuple.is_portable

    def dependencies(self) -> Iterator[Dependency]:
        """Yield the dependencies that apply when no extra is requested."""
        for requirement in self.requires:
            if requirement.marker is not None and not requirement.marker.evaluate(
                {"extra": ""}
            ):
                continue
            yield Dependency.from_requirement(requirement)

    def __str__(self) -> str:
        return self.full_name
