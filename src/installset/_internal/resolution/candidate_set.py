"""The set of candidates a resolver chooses from when installing packages.

A CandidateSet gathers, for each dependency it is asked about, the packages
that could satisfy it from the installed environment, from package files the
caller registered, from a local directory and from a remote index. It also
applies the caller's overrides: packages that must always be installed, and
whether installed packages or dependencies are considered at all.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Protocol

from installset._internal.exceptions import UnsatisfiableDependency
from installset._internal.index.installed import InstalledDistributions
from installset._internal.index.local import LocalSource
from installset._internal.index.remote import BestSet
from installset._internal.models.candidate import (
    IndexCandidate,
    InstalledCandidate,
    LocalCandidate,
)
from installset._internal.models.dependency import DependencyRequest
from installset._internal.models.domain import Domain
from installset._internal.models.name_tuple import NameTuple
from installset._internal.models.spec_cache import SpecCache
from installset._internal.utils._log import getLogger
from installset._internal.utils.logging import indent_log

if TYPE_CHECKING:
    from packaging.specifiers import SpecifierSet
    from packaging.utils import NormalizedName
    from packaging.version import Version
    from typing_extensions import Self

    from installset._internal.models.candidate import (
        Source,
        SpecificationCandidate,
    )
    from installset._internal.models.dependency import Dependency
    from installset._internal.models.set_options import CandidateSetOptions
    from installset._internal.models.specification import PackageSpecification

logger = getLogger(__name__)


class InstalledPackageSource(Protocol):
    def matching(self, dependency: Dependency) -> Sequence[PackageSpecification]: ...


class LocalFileSource(Protocol):
    def find_package(
        self, name: str, specifier: SpecifierSet
    ) -> NameTuple | None: ...

    def fetch_spec(self, name_tuple: NameTuple) -> PackageSpecification: ...


class RemoteSet(Protocol):
    def find_all(
        self, request: DependencyRequest
    ) -> Sequence[SpecificationCandidate]: ...


def _default_local_source() -> LocalFileSource:
    return LocalSource(os.getcwd())


class CandidateSet:
    """Finds installable candidates for dependency requests.

    :param domain: Which kinds of source (local and/or remote) are consulted.
    :param remote_set: Provides remote candidates. Defaults to the best
        available candidates on PyPI.
    :param installed: Provides the packages already installed. Defaults to the
        distributions visible on `sys.path`.
    :param local_source_factory: Builds the local directory source; it is
        called anew on every `find_all`. Defaults to the current directory.
    """

    def __init__(
        self,
        domain: Domain,
        *,
        remote_set: RemoteSet | None = None,
        installed: InstalledPackageSource | None = None,
        local_source_factory: Callable[[], LocalFileSource] | None = None,
    ) -> None:
        if remote_set is None:
            remote_set = BestSet.create()
        if installed is None:
            installed = InstalledDistributions()
        if local_source_factory is None:
            local_source_factory = _default_local_source

        self._domain = domain
        self._remote_set = remote_set
        self._installed = installed
        self._local_source_factory = local_source_factory

        self._always_install: list[PackageSpecification] = []
        self._local: dict[str, tuple[PackageSpecification, Source]] = {}
        self._specs = SpecCache()

        # Only install the packages in the always_install list.
        self.ignore_dependencies = False
        # Do not look in the installed packages when finding candidates.
        self.ignore_installed = False

    @classmethod
    def create(cls, options: CandidateSetOptions) -> Self:
        local_directory = options.local_directory
        target_python = options.target_python

        def make_local_source() -> LocalFileSource:
            return LocalSource(local_directory, target_python=target_python)

        candidate_set = cls(
            options.domain,
            remote_set=BestSet.create(
                index_url=options.index_url, target_python=target_python
            ),
            local_source_factory=make_local_source,
        )
        candidate_set.ignore_dependencies = options.ignore_dependencies
        candidate_set.ignore_installed = options.ignore_installed
        return candidate_set

    @property
    def domain(self) -> Domain:
        return self._domain

    @property
    def always_install(self) -> tuple[PackageSpecification, ...]:
        """The specifications that must always be installed, in pinning order."""
        return tuple(self._always_install)

    def considers_local(self) -> bool:
        return self._domain.considers_local()

    def considers_remote(self) -> bool:
        return self._domain.considers_remote()

    def set_remote(self, remote: bool) -> None:
        """Enable or disable remote sources, keeping the local half of the domain."""
        new_domain = self._domain.with_remote(remote)
        if new_domain is Domain.NONE and self._domain is Domain.NONE:
            logger.debug("Domain is none; ignoring set_remote(%s)", remote)
        self._domain = new_domain

    def pin(self, dependency: Dependency) -> PackageSpecification:
        """Add the newest package satisfying `dependency` to always_install.

        On a version tie a platform-specific package wins over a portable one.

        :raises: UnsatisfiableDependency: if no enabled source offers a match.
        """
        request = DependencyRequest(dependency, None)
        found = self.find_all(request)
        if not found:
            raise UnsatisfiableDependency(request)

        newest = max(found, key=lambda c: c.preference_key)
        spec = newest.to_specification()
        self._always_install.append(spec)
        logger.verbose("Pinned %s for %s", spec.full_name, dependency)
        return spec

    def add_local_entry(
        self, name: str, specification: PackageSpecification, source: Source
    ) -> None:
        """Register a package file the caller asked for by name.

        A later entry for the same name replaces the earlier one.
        """
        self._local[name] = (specification, source)

    def has_local_entry(self, name: str) -> bool:
        return name in self._local

    def _is_pinned(self, spec: PackageSpecification) -> bool:
        return any(spec is pinned for pinned in self._always_install)

    def find_all(self, request: DependencyRequest) -> list[SpecificationCandidate]:
        """Return every candidate for `request`.

        Installed packages come first, then the caller's local entries, then
        the local directory's best match, then remote candidates.
        """
        found: list[SpecificationCandidate] = []

        if self.ignore_dependencies and not any(
            request.matches_spec(spec) for spec in self._always_install
        ):
            logger.debug("Ignoring dependency %s", request)
            return found

        logger.debug("Finding candidates for %s", request)
        with indent_log():
            if not self.ignore_installed:
                for spec in self._installed.matching(request.dependency):
                    if self._is_pinned(spec):
                        continue
                    found.append(InstalledCandidate(spec))
                logger.debug("%d installed candidate(s)", len(found))

            if self.considers_local():
                for spec, source in self._local.values():
                    if request.matches_spec(spec):
                        found.append(LocalCandidate(spec, source))

                local_source = self._local_source_factory()
                name_tuple = local_source.find_package(
                    request.name, request.specifier
                )
                if name_tuple is not None:
                    logger.debug("Found %s in %r", name_tuple, local_source)
                    found.append(
                        IndexCandidate(
                            self,
                            name_tuple.name,
                            name_tuple.version,
                            local_source,
                            name_tuple.platform,
                        )
                    )

            if self.considers_remote():
                remote = self._remote_set.find_all(request)
                logger.debug("%d remote candidate(s)", len(remote))
                found.extend(remote)

        return found

    def load_spec(
        self,
        name: NormalizedName,
        version: Version,
        platform: str,
        source: Source,
    ) -> PackageSpecification:
        """Materialize a package's specification, fetching it at most once."""
        return self._specs.fetch(NameTuple(name, version, platform), source)

    def __repr__(self) -> str:
        always_install = [spec.full_name for spec in self._always_install]
        return (
            f"<{self.__class__.__name__} domain: {self._domain.value} "
            f"specs: {self._specs.keys()!r} always install: {always_install!r}>"
        )
