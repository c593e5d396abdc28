"""Exceptions used throughout package"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from requests import Request, Response

    from installset._internal.models.dependency import Dependency, DependencyRequest
    from installset._internal.models.name_tuple import NameTuple


class InstallSetError(Exception):
    """The base installset error."""


class ConfigurationError(InstallSetError):
    """General exception in configuration"""


class UnsatisfiableDependency(InstallSetError):
    """No candidate in any enabled source satisfies a forced dependency."""

    def __init__(self, request: DependencyRequest) -> None:
        self.request = request
        super().__init__(
            "Unable to resolve dependency: could not find a version that "
            f"satisfies {request.dependency}"
        )

    @property
    def dependency(self) -> Dependency:
        return self.request.dependency


class ResolutionImpossible(InstallSetError):
    """The resolver could not find a consistent set of candidates."""

    def __init__(self, requests: Sequence[DependencyRequest]) -> None:
        self.requests = tuple(requests)
        joined = ", ".join(sorted({str(r) for r in self.requests}))
        super().__init__(f"No consistent set of packages satisfies: {joined}")


class MetadataUnavailable(InstallSetError):
    """A source has no metadata for the requested package."""

    def __init__(self, name_tuple: NameTuple, reason: str) -> None:
        self.name_tuple = name_tuple
        self.reason = reason
        super().__init__(f"Metadata for {name_tuple} is unavailable: {reason}")


class InvalidPackageFilename(InstallSetError):
    """Invalid package filename."""


class InvalidIndexResponse(InstallSetError):
    """The index answered with content we cannot interpret."""

    def __init__(self, url: str, content_type: str) -> None:
        self.url = url
        self.content_type = content_type
        super().__init__(
            f"Index page {url} has unsupported Content-Type: {content_type!r}"
        )


class NetworkConnectionError(InstallSetError):
    """HTTP connection error"""

    def __init__(
        self,
        error_msg: str,
        response: Response | None = None,
        request: Request | None = None,
    ) -> None:
        """
        Initialize NetworkConnectionError with  `request` and `response`
        objects.
        """
        self.response = response
        self.request = request
        self.error_msg = error_msg
        if (
            self.response is not None
            and not self.request
            and hasattr(response, "request")
        ):
            self.request = self.response.request
        super().__init__(error_msg, response, request)

    def __str__(self) -> str:
        return str(self.error_msg)
