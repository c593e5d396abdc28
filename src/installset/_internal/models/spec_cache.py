from __future__ import annotations

from typing import TYPE_CHECKING

from installset._internal.utils._log import getLogger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from installset._internal.models.candidate import Source
    from installset._internal.models.name_tuple import NameTuple
    from installset._internal.models.specification import PackageSpecification

logger = getLogger(__name__)


class SpecCache:
    """Memoizes fully materialized specifications by ``name-version-platform``.

    Entries are never replaced or evicted, so each key is fetched from its
    source at most once over the lifetime of the cache.
    """

    def __init__(self) -> None:
        self._specs: dict[str, PackageSpecification] = {}

    def fetch(self, name_tuple: NameTuple, source: Source) -> PackageSpecification:
        key = name_tuple.cache_key
        if (spec := self._specs.get(key)) is not None:
            return spec
        logger.debug("Fetching specification for %s from %r", name_tuple, source)
        spec = source.fetch_spec(name_tuple)
        self._specs[key] = spec
        return spec

    def keys(self) -> list[str]:
        return list(self._specs)

    def __contains__(self, key: object) -> bool:
        return key in self._specs

    def __len__(self) -> int:
        return len(self._specs)

    def __iter__(self) -> Iterator[str]:
        return iter(self._specs)
