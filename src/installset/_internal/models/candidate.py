"""The kinds of candidate a CandidateSet hands to the resolver.

Each candidate knows enough about its package (name, version, platform and
where it came from) to be compared and filtered without reading its metadata.
Turning a candidate into a full :class:`PackageSpecification` is deferred to
:meth:`SpecificationCandidate.to_specification`, which index candidates only
do on demand.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, ClassVar, Protocol

from installset._internal.models.name_tuple import NameTuple

if TYPE_CHECKING:
    from packaging.utils import NormalizedName
    from packaging.version import Version

    from installset._internal.models.specification import PackageSpecification


class Source(Protocol):
    """Somewhere a package's full specification can be read from."""

    def fetch_spec(self, name_tuple: NameTuple) -> PackageSpecification: ...


class SpecLoader(Protocol):
    """Materializes (and usually memoizes) specifications for index candidates."""

    def load_spec(
        self,
        name: NormalizedName,
        version: Version,
        platform: str,
        source: Source,
    ) -> PackageSpecification: ...


class SpecificationCandidate(metaclass=abc.ABCMeta):
    """A package that could be installed from some source."""

    kind: ClassVar[str]

    @property
    @abc.abstractmethod
    def name_tuple(self) -> NameTuple: ...

    @property
    @abc.abstractmethod
    def source(self) -> Source | None: ...

    @abc.abstractmethod
    def to_specification(self) -> PackageSpecification: ...

    @property
    def name(self) -> NormalizedName:
        return self.name_tuple.name

    @property
    def version(self) -> Version:
        return self.name_tuple.version

    @property
    def platform(self) -> str:
        return self.name_tuple.platform

    @property
    def is_portable(self) -> bool:
        return self.name_tuple.is_portable

    @property
    def preference_key(self) -> tuple[Version, int]:
        return self.name_tuple.preference_key

    def __str__(self) -> str:
        return f"{self.name_tuple} ({self.kind})"

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name_tuple}>"


class InstalledCandidate(SpecificationCandidate):
    """A package already present in the target environment."""

    kind = "installed"

    __slots__ = ("spec",)

    def __init__(self, spec: PackageSpecification) -> None:
        self.spec = spec

    @property
    def name_tuple(self) -> NameTuple:
        return self.spec.name_tuple

    @property
    def source(self) -> None:
        return None

    def to_specification(self) -> PackageSpecification:
        return self.spec


class LocalCandidate(SpecificationCandidate):
    """A package file the caller registered explicitly, e.g. from the command line."""

    kind = "local"

    __slots__ = ("spec", "_source")

    def __init__(self, spec: PackageSpecification, source: Source) -> None:
        self.spec = spec
        self._source = source

    @property
    def name_tuple(self) -> NameTuple:
        return self.spec.name_tuple

    @property
    def source(self) -> Source:
        return self._source

    def to_specification(self) -> PackageSpecification:
        return self.spec


class IndexCandidate(SpecificationCandidate):
    """A package listed by a local directory or a remote index.

    Only its identity is known up front; the specification is fetched through
    `loader` the first time it is asked for.
    """

    kind = "index"

    __slots__ = ("_loader", "_name_tuple", "_source")

    def __init__(
        self,
        loader: SpecLoader,
        name: NormalizedName,
        version: Version,
        source: Source,
        platform: str,
    ) -> None:
        self._loader = loader
        self._name_tuple = NameTuple(name, version, platform)
        self._source = source

    @property
    def name_tuple(self) -> NameTuple:
        return self._name_tuple

    @property
    def source(self) -> Source:
        return self._source

    def to_specification(self) -> PackageSpecification:
        return self._loader.load_spec(
            self.name, self.version, self.platform, self._source
        )
