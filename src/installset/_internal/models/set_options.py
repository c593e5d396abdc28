from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from installset._internal.exceptions import ConfigurationError
from installset._internal.index.remote import DEFAULT_INDEX_URL
from installset._internal.models.domain import Domain
from installset._internal.utils.misc import strtobool

if TYPE_CHECKING:
    from typing_extensions import Self

    from installset._internal.models.target_python import TargetPython

ENV_PREFIX = "INSTALLSET_"


def _env_flag(environ: Mapping[str, str], key: str) -> bool:
    value = environ.get(key)
    if value is None or not value.strip():
        return False
    try:
        return bool(strtobool(value.strip()))
    except ValueError as e:
        raise ConfigurationError(f"Invalid value for {key}: {e}") from None


@dataclass(frozen=True)
class CandidateSetOptions:
    """
    Encapsulates the user's choices of where candidates may come from and
    which of their overrides apply.
    """

    domain: Domain
    ignore_dependencies: bool = False
    ignore_installed: bool = False
    local_directory: str = os.curdir
    index_url: str = DEFAULT_INDEX_URL
    target_python: TargetPython | None = None

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, str] | None = None,
        domain: Domain = Domain.BOTH,
    ) -> Self:
        """
        Read options from ``INSTALLSET_*`` environment variables.

        :param environ: The mapping to read, `os.environ` when None.
        :param domain: The domain to use when ``INSTALLSET_DOMAIN`` is unset.
        :raises: ConfigurationError: on an unknown domain or a malformed flag.
        """
        if environ is None:
            environ = os.environ

        if raw_domain := environ.get(f"{ENV_PREFIX}DOMAIN"):
            domain = Domain.parse(raw_domain)

        return cls(
            domain=domain,
            ignore_dependencies=_env_flag(environ, f"{ENV_PREFIX}IGNORE_DEPENDENCIES"),
            ignore_installed=_env_flag(environ, f"{ENV_PREFIX}IGNORE_INSTALLED"),
            local_directory=environ.get(f"{ENV_PREFIX}LOCAL_DIR") or os.curdir,
            index_url=environ.get(f"{ENV_PREFIX}INDEX_URL") or DEFAULT_INDEX_URL,
        )
