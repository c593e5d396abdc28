from __future__ import annotations

import pytest

from installset._internal.exceptions import ResolutionImpossible
from installset._internal.models.dependency import Dependency, DependencyRequest
from installset._internal.models.name_tuple import NameTuple
from installset._internal.resolution.candidate_set import CandidateSet
from installset._internal.resolution.provider import CandidateSetProvider
from installset._internal.resolution.resolver import resolve
from tests.lib.index import FakeInstalled, FakeRemoteSet, make_spec


def versions(result: dict) -> dict[str, str]:
    return {name: str(spec.version) for name, spec in result.items()}


class TestFindMatches:
    def test_most_preferred_first(
        self,
        candidate_set: CandidateSet,
        installed: FakeInstalled,
        remote_set: FakeRemoteSet,
    ) -> None:
        installed.specs.append(make_spec("foo", "2.0"))
        for spec in [
            make_spec("foo", "1.0"),
            make_spec("foo", "2.0"),
            make_spec("foo", "2.0", "linux_x86_64"),
            make_spec("foo", "3.0"),
        ]:
            remote_set.source.add(spec)
        provider = CandidateSetProvider(candidate_set)
        requests = [DependencyRequest(Dependency.parse("foo<3"))]

        matches = provider.find_matches(
            "foo", {"foo": iter(requests)}, {"foo": iter([])}
        )

        assert [(c.kind, str(c.version), c.platform) for c in matches] == [
            ("index", "2.0", "linux_x86_64"),
            ("installed", "2.0", "any"),
            ("index", "2.0", "any"),
            ("index", "1.0", "any"),
        ]

    def test_filters_by_every_requirement_and_incompatibility(
        self, candidate_set: CandidateSet, remote_set: FakeRemoteSet
    ) -> None:
        for version in ["1.0", "1.5", "2.0", "2.5"]:
            remote_set.source.add(make_spec("foo", version))
        provider = CandidateSetProvider(candidate_set)
        (bad,) = candidate_set.find_all(DependencyRequest(Dependency.parse("foo==1.5")))
        requests = [
            DependencyRequest(Dependency.parse("foo>=1.0")),
            DependencyRequest(Dependency.parse("foo<2.5")),
        ]

        matches = provider.find_matches(
            "foo", {"foo": iter(requests)}, {"foo": iter([bad])}
        )

        assert [str(c.version) for c in matches] == ["2.0", "1.0"]

    def test_ignore_dependencies(
        self, candidate_set: CandidateSet, remote_set: FakeRemoteSet
    ) -> None:
        remote_set.source.add(make_spec("app", "1.0", requires=["lib"]))
        provider = CandidateSetProvider(candidate_set)
        (candidate,) = candidate_set.find_all(DependencyRequest(Dependency.parse("app")))

        (dependency,) = provider.get_dependencies(candidate)
        assert dependency.name == "lib"
        assert dependency.requester == make_spec("app", "1.0", requires=["lib"])

        candidate_set.ignore_dependencies = True
        assert list(provider.get_dependencies(candidate)) == []


class TestResolve:
    def test_picks_newest_compatible(
        self, candidate_set: CandidateSet, remote_set: FakeRemoteSet
    ) -> None:
        for spec in [
            make_spec("app", "1.0", requires=["lib>=2,<3", 'test-only; extra == "t"']),
            make_spec("lib", "1.0"),
            make_spec("lib", "2.0"),
            make_spec("lib", "2.5"),
            make_spec("lib", "3.0"),
        ]:
            remote_set.source.add(spec)

        result = resolve(candidate_set, ["app"])

        assert versions(result) == {"app": "1.0", "lib": "2.5"}

    def test_prefers_installed_on_tie(
        self,
        candidate_set: CandidateSet,
        installed: FakeInstalled,
        remote_set: FakeRemoteSet,
    ) -> None:
        installed_lib = make_spec("lib", "2.0")
        installed.specs.append(installed_lib)
        remote_set.source.add(make_spec("lib", "2.0"))
        remote_set.source.add(make_spec("lib", "1.0"))

        result = resolve(candidate_set, [Dependency.create("lib")])

        assert result["lib"] is installed_lib
        assert remote_set.source.fetched == []

    def test_only_chosen_candidates_are_materialized(
        self, candidate_set: CandidateSet, remote_set: FakeRemoteSet
    ) -> None:
        for version in ["1.0", "2.0", "3.0"]:
            remote_set.source.add(make_spec("lib", version))

        resolve(candidate_set, ["lib<3"])

        assert remote_set.source.fetched == [NameTuple.create("lib", "2.0")]

    def test_backtracks(
        self, candidate_set: CandidateSet, remote_set: FakeRemoteSet
    ) -> None:
        for spec in [
            make_spec("app", "2.0", requires=["lib<1"]),
            make_spec("app", "1.0", requires=["lib"]),
            make_spec("lib", "1.0"),
        ]:
            remote_set.source.add(spec)

        result = resolve(candidate_set, ["app"])

        assert versions(result) == {"app": "1.0", "lib": "1.0"}

    def test_ignore_dependencies_resolves_pins_only(
        self, candidate_set: CandidateSet, remote_set: FakeRemoteSet
    ) -> None:
        remote_set.source.add(make_spec("app", "1.0", requires=["lib"]))
        remote_set.source.add(make_spec("lib", "1.0"))
        candidate_set.pin(Dependency.create("app"))
        candidate_set.ignore_dependencies = True

        result = resolve(candidate_set, ["app"])

        assert versions(result) == {"app": "1.0"}

    def test_no_candidates(self, candidate_set: CandidateSet) -> None:
        with pytest.raises(ResolutionImpossible) as exc_info:
            resolve(candidate_set, ["missing>=1"])

        assert [str(r) for r in exc_info.value.requests] == ["missing>=1"]

    def test_conflicting_dependency(
        self, candidate_set: CandidateSet, remote_set: FakeRemoteSet
    ) -> None:
        remote_set.source.add(make_spec("app", "1.0", requires=["lib>=5"]))
        remote_set.source.add(make_spec("lib", "1.0"))

        with pytest.raises(ResolutionImpossible) as exc_info:
            resolve(candidate_set, ["app"])

        assert "lib>=5 (required by app-1.0)" in str(exc_info.value)
