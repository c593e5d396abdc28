from __future__ import annotations

import functools
import importlib.metadata
from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING

from packaging.tags import parse_tag
from packaging.utils import canonicalize_name

from installset._internal.models.specification import PackageSpecification
from installset._internal.utils._log import getLogger
from installset._internal.utils.filename_parsing import platform_from_tags

if TYPE_CHECKING:
    from packaging.tags import Tag

    from installset._internal.models.dependency import Dependency

logger = getLogger(__name__)


def _wheel_tags(dist: importlib.metadata.Distribution) -> Iterator[Tag]:
    wheel_text = dist.read_text("WHEEL")
    if not wheel_text:
        return
    for line in wheel_text.splitlines():
        key, sep, value = line.partition(":")
        if sep and key.strip() == "Tag":
            yield from parse_tag(value.strip())


class InstalledDistributions:
    """The distributions installed in an environment.

    :param paths: The import paths to scan, `sys.path` when None. The scan
        runs once; later installs are not picked up by the same instance.
    """

    def __init__(self, paths: Sequence[str] | None = None) -> None:
        self._paths = list(paths) if paths is not None else None

    def _iter_distributions(self) -> Iterator[importlib.metadata.Distribution]:
        if self._paths is None:
            return iter(importlib.metadata.distributions())
        return iter(importlib.metadata.distributions(path=self._paths))

    @staticmethod
    def _to_specification(
        dist: importlib.metadata.Distribution,
        name: str,
    ) -> PackageSpecification:
        location = dist.locate_file("")
        return PackageSpecification.create(
            name=name,
            version=dist.version,
            platform=platform_from_tags(_wheel_tags(dist)),
            requires=dist.requires or (),
            requires_python=dist.metadata.get("Requires-Python") or None,
            location=str(location) if location is not None else None,
        )

    @functools.cached_property
    def _specifications(self) -> tuple[PackageSpecification, ...]:
        found: dict[str, PackageSpecification] = {}
        for dist in self._iter_distributions():
            raw_name = dist.metadata.get("Name")
            if not raw_name:
                logger.debug("Skipping distribution without a name at %s", dist)
                continue
            # Earlier path entries shadow later ones, as they do for imports.
            if canonicalize_name(raw_name) in found:
                continue
            try:
                spec = self._to_specification(dist, raw_name)
            # InvalidVersion, InvalidRequirement, InvalidSpecifier and malformed
            # WHEEL tags are all ValueErrors.
            except ValueError as e:
                logger.debug("Skipping installed distribution %s: %s", raw_name, e)
                continue
            found[spec.name] = spec
        logger.debug("Found %d installed distributions", len(found))
        return tuple(found.values())

    def matching(self, dependency: Dependency) -> list[PackageSpecification]:
        """Return the installed specifications that satisfy `dependency`.

        The same specification objects are returned on every call.
        """
        return [spec for spec in self._specifications if dependency.matches_spec(spec)]
