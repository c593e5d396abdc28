"""The requests session used to talk to package indexes."""

from __future__ import annotations

import platform
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from installset import __version__

DEFAULT_TIMEOUT = 15.0
DEFAULT_RETRIES = 5


def user_agent() -> str:
    return (
        f"installset/{__version__} "
        f"{platform.python_implementation()}/{platform.python_version()}"
    )


class IndexSession(requests.Session):
    """A session with retries, a default timeout and our User-Agent.

    :param retries: How many times to retry a request that fails to connect or
        that the server answers with a transient 5xx status.
    :param timeout: The timeout applied to requests that do not pass one.
    """

    def __init__(
        self,
        retries: int = DEFAULT_RETRIES,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> None:
        super().__init__()

        self.timeout = timeout
        self.headers["User-Agent"] = user_agent()

        retry = Retry(
            total=retries,
            # A 500 may indicate transient error in Amazon S3
            # A 502 may be a transient error from a CDN like CloudFlare or CloudFront
            # A 520 or 527 - may indicate transient error in CloudFlare
            status_forcelist=[500, 502, 503, 520, 527],
            # Add a small amount of back off between failed requests in
            # order to prevent hammering the service.
            backoff_factor=0.25,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.mount("https://", adapter)
        self.mount("http://", adapter)

    def request(  # type: ignore[override]
        self, method: str, url: str, *args: Any, **kwargs: Any
    ) -> requests.Response:
        kwargs.setdefault("timeout", self.timeout)
        return super().request(method, url, *args, **kwargs)
