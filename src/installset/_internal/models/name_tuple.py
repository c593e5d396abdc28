from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import TYPE_CHECKING

from packaging.utils import NormalizedName, canonicalize_name
from packaging.version import Version

if TYPE_CHECKING:
    from typing_extensions import Self

# The platform of a package that installs anywhere: pure-Python wheels and sdists.
PORTABLE_PLATFORM = "any"


@dataclass(frozen=True)
class NameTuple:
    """The identity of a package release: project name, version and platform.

    Two candidates describing the same NameTuple materialize to the same
    specification, which is why it also provides the key of the spec cache.
    """

    name: NormalizedName
    version: Version
    platform: str

    @classmethod
    def create(
        cls,
        name: str,
        version: str | Version,
        platform: str | None = None,
    ) -> Self:
        if isinstance(version, str):
            version = Version(version)
        return cls(
            name=canonicalize_name(name),
            version=version,
            platform=platform or PORTABLE_PLATFORM,
        )

    @property
    def is_portable(self) -> bool:
        return self.platform == PORTABLE_PLATFORM

    @functools.cached_property
    def preference_key(self) -> tuple[Version, int]:
        """Sort key under which the greatest value is the most preferred release.

        Newer versions win; among equal versions a platform-specific build wins
        over the portable one.
        """
        return (self.version, -1 if self.is_portable else 1)

    @functools.cached_property
    def cache_key(self) -> str:
        return f"{self.name}-{self.version}-{self.platform}"

    @functools.cached_property
    def full_name(self) -> str:
        if self.is_portable:
            return f"{self.name}-{self.version}"
        return f"{self.name}-{self.version}-{self.platform}"

    def __str__(self) -> str:
        return self.full_name
