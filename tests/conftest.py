from __future__ import annotations

import pytest

from installset._internal.models.domain import Domain
from installset._internal.resolution.candidate_set import CandidateSet
from tests.lib.index import FakeInstalled, FakeLocalSource, FakeRemoteSet


@pytest.fixture
def installed() -> FakeInstalled:
    return FakeInstalled()


@pytest.fixture
def local_source() -> FakeLocalSource:
    return FakeLocalSource()


@pytest.fixture
def remote_set() -> FakeRemoteSet:
    return FakeRemoteSet()


@pytest.fixture
def candidate_set(
    installed: FakeInstalled,
    local_source: FakeLocalSource,
    remote_set: FakeRemoteSet,
) -> CandidateSet:
    """A CandidateSet over empty fakes, considering both local and remote sources."""
    return CandidateSet(
        Domain.BOTH,
        remote_set=remote_set,
        installed=installed,
        local_source_factory=lambda: local_source,
    )
