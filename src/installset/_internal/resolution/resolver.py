from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

import resolvelib

from installset._internal.exceptions import ResolutionImpossible
from installset._internal.models.dependency import Dependency, DependencyRequest
from installset._internal.resolution.provider import CandidateSetProvider
from installset._internal.resolution.reporter import LoggingReporter
from installset._internal.utils._log import getLogger
from installset._internal.utils.logging import indent_log

if TYPE_CHECKING:
    from installset._internal.models.specification import PackageSpecification
    from installset._internal.resolution.candidate_set import CandidateSet

logger = getLogger(__name__)


def resolve(
    candidate_set: CandidateSet,
    dependencies: Iterable[Dependency | str],
    *,
    max_rounds: int = 2000,
) -> dict[str, PackageSpecification]:
    """Pick one package for every dependency, and for theirs in turn.

    :param dependencies: The user's requests, as Dependency objects or PEP 508
        strings.
    :returns: The chosen specifications, keyed by canonical project name.
    :raises: ResolutionImpossible: if no consistent choice exists.
    :raises: resolvelib.ResolutionTooDeep: if `max_rounds` is exceeded.
    """
    requests = [
        DependencyRequest(d if isinstance(d, Dependency) else Dependency.parse(d))
        for d in dependencies
    ]
    logger.info(
        "Resolving %s", ", ".join(str(r) for r in requests) or "no dependencies"
    )

    resolver = resolvelib.Resolver(
        CandidateSetProvider(candidate_set), LoggingReporter()
    )
    with indent_log():
        try:
            result = resolver.resolve(requests, max_rounds=max_rounds)
        except resolvelib.ResolutionImpossible as e:
            raise ResolutionImpossible([c.requirement for c in e.causes]) from e

        chosen = {
            name: candidate.to_specification()
            for name, candidate in result.mapping.items()
        }
    for spec in chosen.values():
        logger.verbose("Selected %s", spec)
    return chosen
