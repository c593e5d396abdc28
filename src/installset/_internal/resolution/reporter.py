from __future__ import annotations

from typing import Any

from resolvelib import BaseReporter

from installset._internal.utils._log import getLogger

logger = getLogger(__name__)


class LoggingReporter(BaseReporter):
    """Logs the resolver's progress at debug level."""

    def starting(self) -> None:
        logger.debug("Reporter.starting()")

    def starting_round(self, index: int) -> None:
        logger.debug("Reporter.starting_round(%r)", index)

    def ending_round(self, index: int, state: Any) -> None:
        logger.debug("Reporter.ending_round(%r, state)", index)

    def ending(self, state: Any) -> None:
        logger.debug("Reporter.ending(%r)", state)

    def adding_requirement(self, requirement: Any, parent: Any) -> None:
        logger.debug("Reporter.adding_requirement(%s, %s)", requirement, parent)

    def resolving_conflicts(self, causes: Any) -> None:
        logger.debug("Reporter.resolving_conflicts(%r)", causes)

    def rejecting_candidate(self, criterion: Any, candidate: Any) -> None:
        logger.debug("Reporter.rejecting_candidate(%r, %s)", criterion, candidate)

    def pinning(self, candidate: Any) -> None:
        logger.debug("Reporter.pinning(%s)", candidate)
