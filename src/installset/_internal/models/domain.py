from __future__ import annotations

import enum

from installset._internal.exceptions import ConfigurationError


class Domain(enum.Enum):
    """The kinds of source a candidate search may consult."""

    LOCAL = "local"
    REMOTE = "remote"
    BOTH = "both"
    NONE = "none"

    @classmethod
    def parse(cls, value: str) -> Domain:
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(repr(d.value) for d in cls)
            raise ConfigurationError(
                f"Invalid domain {value!r} (choose from {choices})"
            ) from None

    def considers_local(self) -> bool:
        return self in (Domain.LOCAL, Domain.BOTH)

    def considers_remote(self) -> bool:
        return self in (Domain.REMOTE, Domain.BOTH)

    def with_remote(self, remote: bool) -> Domain:
        """Return the domain after remote sources are enabled or disabled.

        The local half of the domain is never changed. NONE has no local half
        to keep, so it stays NONE either way.
        """
        return _REMOTE_TRANSITIONS[self, remote]


_REMOTE_TRANSITIONS: dict[tuple[Domain, bool], Domain] = {
    (Domain.LOCAL, True): Domain.BOTH,
    (Domain.LOCAL, False): Domain.LOCAL,
    (Domain.REMOTE, True): Domain.REMOTE,
    (Domain.REMOTE, False): Domain.NONE,
    (Domain.BOTH, True): Domain.BOTH,
    (Domain.BOTH, False): Domain.LOCAL,
    (Domain.NONE, True): Domain.NONE,
    (Domain.NONE, False): Domain.NONE,
}
