from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import TYPE_CHECKING

from packaging.requirements import Requirement
from packaging.specifiers import SpecifierSet
from packaging.utils import NormalizedName, canonicalize_name

if TYPE_CHECKING:
    from packaging.version import Version
    from typing_extensions import Self

    from installset._internal.models.specification import PackageSpecification


@dataclass(frozen=True)
class Dependency:
    """A project name together with the versions of it that are acceptable.

    Whether pre-releases are acceptable is carried by the specifier itself
    (see `SpecifierSet.prereleases`).
    """

    name: NormalizedName
    specifier: SpecifierSet

    @classmethod
    def create(
        cls,
        name: str,
        specifier: str | SpecifierSet = "",
        prereleases: bool | None = None,
    ) -> Self:
        if isinstance(specifier, str):
            specifier = SpecifierSet(specifier, prereleases=prereleases)
        elif prereleases is not None:
            specifier = SpecifierSet(str(specifier), prereleases=prereleases)
        return cls(name=canonicalize_name(name), specifier=specifier)

    @classmethod
    def from_requirement(cls, requirement: Requirement) -> Self:
        return cls(
            name=canonicalize_name(requirement.name),
            specifier=requirement.specifier,
        )

    @classmethod
    def parse(cls, requirement_string: str) -> Self:
        """
        Parse a PEP 508 requirement string such as ``"foo>=1.0"``.

        :raises: packaging.requirements.InvalidRequirement: on a badly-formed string.
        """
        return cls.from_requirement(Requirement(requirement_string))

    def matches(self, name: str, version: Version) -> bool:
        return canonicalize_name(name) == self.name and self.specifier.contains(
            version
        )

    def matches_spec(self, spec: PackageSpecification) -> bool:
        return self.matches(spec.name, spec.version)

    @functools.cached_property
    def _str(self) -> str:
        return f"{self.name}{self.specifier}"

    def __str__(self) -> str:
        return self._str


@dataclass(frozen=True)
class DependencyRequest:
    """A dependency, plus the specification that asked for it.

    Requests made directly by the user have no requester.
    """

    dependency: Dependency
    requester: PackageSpecification | None = None

    @property
    def name(self) -> NormalizedName:
        return self.dependency.name

    @property
    def specifier(self) -> SpecifierSet:
        return self.dependency.specifier

    def matches_spec(self, spec: PackageSpecification) -> bool:
        return self.dependency.matches_spec(spec)

    def __str__(self) -> str:
        if self.requester is None:
            return str(self.dependency)
        return f"{self.dependency} (required by {self.requester.full_name})"
