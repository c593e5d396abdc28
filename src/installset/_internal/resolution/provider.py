from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from resolvelib import AbstractProvider

from installset._internal.models.dependency import DependencyRequest
from installset._internal.utils._log import getLogger

if TYPE_CHECKING:
    from packaging.utils import NormalizedName

    from installset._internal.models.candidate import SpecificationCandidate
    from installset._internal.resolution.candidate_set import CandidateSet

logger = getLogger(__name__)


class CandidateSetProvider(AbstractProvider):
    """Lets resolvelib draw its candidates from a CandidateSet.

    Candidates are offered in the order resolvelib expects (most preferred
    first): newest version first, platform-specific before portable on a tie,
    then the CandidateSet's source order.
    """

    def __init__(self, candidate_set: CandidateSet) -> None:
        self.candidate_set = candidate_set

    def identify(
        self, requirement_or_candidate: DependencyRequest | SpecificationCandidate
    ) -> NormalizedName:
        return requirement_or_candidate.name

    def get_preference(
        self,
        identifier: NormalizedName,
        resolutions: Mapping[NormalizedName, SpecificationCandidate],
        candidates: Mapping[NormalizedName, Iterator[SpecificationCandidate]],
        information: Mapping[NormalizedName, Iterator[Any]],
        backtrack_causes: Sequence[Any],
    ) -> tuple[int, str]:
        # Resolve the most constrained projects first.
        num_candidates = sum(1 for _ in candidates[identifier])
        return (num_candidates, identifier)

    def find_matches(
        self,
        identifier: NormalizedName,
        requirements: Mapping[NormalizedName, Iterator[DependencyRequest]],
        incompatibilities: Mapping[NormalizedName, Iterator[SpecificationCandidate]],
    ) -> Iterable[SpecificationCandidate]:
        requests = list(requirements[identifier])
        if not requests:
            return []
        bad = {c.name_tuple for c in incompatibilities[identifier]}

        found = self.candidate_set.find_all(requests[0])
        matches = [
            candidate
            for candidate in found
            if candidate.name_tuple not in bad
            and all(self.is_satisfied_by(r, candidate) for r in requests)
        ]
        logger.debug(
            "%d of %d candidate(s) for %s remain", len(matches), len(found), identifier
        )
        # NB: sorted() is stable, so equal keys keep the source order.
        return sorted(matches, key=lambda c: c.preference_key, reverse=True)

    def is_satisfied_by(
        self, requirement: DependencyRequest, candidate: SpecificationCandidate
    ) -> bool:
        return requirement.name == candidate.name and requirement.specifier.contains(
            candidate.version
        )

    def get_dependencies(
        self, candidate: SpecificationCandidate
    ) -> Iterable[DependencyRequest]:
        if self.candidate_set.ignore_dependencies:
            return []
        spec = candidate.to_specification()
        return [DependencyRequest(dep, spec) for dep in spec.dependencies()]
