"""Gather installable candidates for a dependency from every configured source."""

from __future__ import annotations

__version__ = "0.1.0"

from installset._internal.exceptions import (
    ConfigurationError,
    InstallSetError,
    InvalidIndexResponse,
    InvalidPackageFilename,
    MetadataUnavailable,
    NetworkConnectionError,
    ResolutionImpossible,
    UnsatisfiableDependency,
)
from installset._internal.index.installed import InstalledDistributions
from installset._internal.index.local import LocalSource
from installset._internal.index.remote import BestSet, IndexClient, RemoteSource
from installset._internal.models.candidate import (
    IndexCandidate,
    InstalledCandidate,
    LocalCandidate,
    SpecificationCandidate,
)
from installset._internal.models.dependency import Dependency, DependencyRequest
from installset._internal.models.domain import Domain
from installset._internal.models.name_tuple import PORTABLE_PLATFORM, NameTuple
from installset._internal.models.set_options import CandidateSetOptions
from installset._internal.models.specification import PackageSpecification
from installset._internal.models.target_python import TargetPython
from installset._internal.resolution.candidate_set import CandidateSet
from installset._internal.resolution.resolver import resolve

__all__ = [
    "PORTABLE_PLATFORM",
    "BestSet",
    "CandidateSet",
    "CandidateSetOptions",
    "ConfigurationError",
    "Dependency",
    "DependencyRequest",
    "Domain",
    "IndexCandidate",
    "IndexClient",
    "InstallSetError",
    "InstalledCandidate",
    "InstalledDistributions",
    "InvalidIndexResponse",
    "InvalidPackageFilename",
    "LocalCandidate",
    "LocalSource",
    "MetadataUnavailable",
    "NameTuple",
    "NetworkConnectionError",
    "PackageSpecification",
    "RemoteSource",
    "ResolutionImpossible",
    "SpecificationCandidate",
    "TargetPython",
    "UnsatisfiableDependency",
    "resolve",
]
