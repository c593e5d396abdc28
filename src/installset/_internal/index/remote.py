"""Candidates from a remote PEP 691 (JSON simple API) package index."""

from __future__ import annotations

import io
import json
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar
from urllib.parse import urljoin

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.utils import canonicalize_name

from installset._internal.exceptions import (
    InvalidIndexResponse,
    InvalidPackageFilename,
    MetadataUnavailable,
)
from installset._internal.models.candidate import IndexCandidate
from installset._internal.models.name_tuple import NameTuple
from installset._internal.models.package_file import PackageFileInfo
from installset._internal.models.spec_cache import SpecCache
from installset._internal.models.specification import PackageSpecification
from installset._internal.models.target_python import TargetPython
from installset._internal.network.session import IndexSession
from installset._internal.network.utils import HEADERS, raise_for_status
from installset._internal.utils._log import getLogger
from installset._internal.utils.archives import NoMetadataFound, read_archive_metadata
from installset._internal.utils.logging import indent_log

if TYPE_CHECKING:
    import requests
    from packaging.utils import NormalizedName
    from packaging.version import Version
    from typing_extensions import Self

    from installset._internal.models.candidate import Source
    from installset._internal.models.dependency import DependencyRequest

logger = getLogger(__name__)

DEFAULT_INDEX_URL = "https://pypi.org/simple"

SIMPLE_JSON_CONTENT_TYPE = "application/vnd.pypi.simple.v1+json"


@dataclass(frozen=True)
class IndexFile:
    """One entry of the ``files`` list of a project page."""

    filename: str
    url: str
    requires_python: SpecifierSet | None
    yanked: bool
    has_core_metadata: bool

    @classmethod
    def from_json(cls, file: dict[str, Any], page_url: str) -> Self:
        """
        Convert a PEP 691 file dict into an IndexFile.

        :raises: KeyError: if the dict has no ``filename`` or ``url``.
        """
        url = urljoin(page_url, file["url"])

        requires_python: SpecifierSet | None = None
        if pyrequire := file.get("requires-python"):
            try:
                requires_python = SpecifierSet(pyrequire)
            except InvalidSpecifier:
                logger.debug(
                    "Ignoring invalid Requires-Python (%r) for %s",
                    pyrequire,
                    file["filename"],
                )

        # PEP 714 renamed the key; older indexes only send the PEP 658 one.
        metadata_info = file.get("core-metadata")
        if metadata_info is None:
            metadata_info = file.get("data-dist-info-metadata")

        return cls(
            filename=file["filename"],
            url=url,
            requires_python=requires_python,
            # The value is either a bool or a non-empty reason string.
            yanked=bool(file.get("yanked", False)),
            has_core_metadata=bool(metadata_info),
        )

    @property
    def metadata_url(self) -> str:
        """Where PEP 658 serves this file's core metadata."""
        base, _, _ = self.url.partition("#")
        return f"{base}.metadata"


class IndexClient:
    """Fetches project pages and metadata from a simple index.

    :param index_url: The index's base URL, e.g. ``https://pypi.org/simple``.
    """

    _json_content_regex: ClassVar[re.Pattern[str]] = re.compile(
        re.escape(SIMPLE_JSON_CONTENT_TYPE),
        flags=re.IGNORECASE,
    )

    def __init__(self, session: requests.Session, index_url: str) -> None:
        self.session = session
        self.index_url = index_url.rstrip("/")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.index_url!r})"

    def project_url(self, name: str) -> str:
        return f"{self.index_url}/{canonicalize_name(name)}/"

    def project_files(self, name: str) -> tuple[IndexFile, ...]:
        """
        List the files the index holds for project `name`.

        An index that does not know the project yields no files.

        :raises: NetworkConnectionError: on any other HTTP error.
        :raises: InvalidIndexResponse: if the page is not PEP 691 JSON.
        """
        url = self.project_url(name)
        logger.debug("Getting page %s", url)
        resp = self.session.get(
            url, headers={**HEADERS, "Accept": SIMPLE_JSON_CONTENT_TYPE}
        )
        if resp.status_code == 404:
            logger.debug("Project %s not found on %s", name, self.index_url)
            return ()
        raise_for_status(resp)

        content_type = resp.headers.get("Content-Type", "Unknown")
        if not self._json_content_regex.match(content_type):
            raise InvalidIndexResponse(url, content_type)

        data = json.loads(resp.content)
        files = tuple(IndexFile.from_json(f, resp.url or url) for f in data["files"])
        logger.debug("Fetched page %s with %d files", url, len(files))
        return files

    def _get_bytes(self, url: str) -> bytes:
        resp = self.session.get(url, headers=HEADERS)
        raise_for_status(resp)
        return resp.content

    def fetch_metadata(self, index_file: IndexFile) -> bytes:
        """Return the raw core metadata of `index_file`.

        The PEP 658 metadata file is used when the index advertises one;
        otherwise the whole archive is downloaded and its metadata read.

        :raises: NoMetadataFound: if a downloaded archive carries no metadata.
        """
        if index_file.has_core_metadata:
            logger.debug("Fetching metadata from %s", index_file.metadata_url)
            return self._get_bytes(index_file.metadata_url)
        logger.debug(
            "No core metadata for %s, downloading %s",
            index_file.filename,
            index_file.url,
        )
        content = self._get_bytes(index_file.url)
        return read_archive_metadata(index_file.filename, io.BytesIO(content))


class RemoteSource:
    """The Source behind every candidate listed by one index.

    It remembers which file each listed package came from, so that the
    package's metadata can be fetched later.
    """

    def __init__(self, client: IndexClient) -> None:
        self.client = client
        self._files: dict[NameTuple, IndexFile] = {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.client.index_url!r})"

    def project_files(self, name: str) -> tuple[IndexFile, ...]:
        return self.client.project_files(name)

    def register(self, name_tuple: NameTuple, index_file: IndexFile) -> None:
        self._files.setdefault(name_tuple, index_file)

    def fetch_spec(self, name_tuple: NameTuple) -> PackageSpecification:
        index_file = self._files.get(name_tuple)
        if index_file is None:
            raise MetadataUnavailable(
                name_tuple, f"not listed by {self.client.index_url}"
            )
        try:
            raw = self.client.fetch_metadata(index_file)
        except NoMetadataFound as e:
            raise MetadataUnavailable(name_tuple, str(e)) from e
        return PackageSpecification.parse_metadata(
            raw, platform=name_tuple.platform, location=index_file.url
        )


class BestSet:
    """The best available candidates from a remote index.

    Files that cannot be installed on the target interpreter are never
    offered. Candidates are materialized on demand through :meth:`load_spec`.
    """

    def __init__(
        self,
        source: RemoteSource,
        target_python: TargetPython | None = None,
    ) -> None:
        if target_python is None:
            target_python = TargetPython.create()
        self.source = source
        self._target_python = target_python
        self._specs = SpecCache()

    @classmethod
    def create(
        cls,
        index_url: str = DEFAULT_INDEX_URL,
        target_python: TargetPython | None = None,
        session: requests.Session | None = None,
    ) -> Self:
        if session is None:
            session = IndexSession()
        return cls(
            RemoteSource(IndexClient(session, index_url)),
            target_python=target_python,
        )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} source={self.source!r}>"

    def _accepts(
        self, request: DependencyRequest, index_file: IndexFile
    ) -> NameTuple | None:
        """Return the identity of `index_file` if it should be offered."""
        if index_file.yanked:
            logger.debug("Skipping yanked file %s", index_file.filename)
            return None
        try:
            info = PackageFileInfo.parse_filename(index_file.filename)
        except InvalidPackageFilename as e:
            logger.debug("Skipping %s: %s", index_file.filename, e)
            return None
        name_tuple = info.name_tuple
        if name_tuple.name != request.name:
            logger.debug(
                "Skipping %s: it is not a file of %s", index_file.filename, request.name
            )
            return None
        if not request.specifier.contains(name_tuple.version):
            return None
        if not info.supported(self._target_python):
            logger.debug(
                "Skipping %s: none of its tags (%s) are supported",
                index_file.filename,
                ", ".join(info.sorted_tag_strings),
            )
            return None
        if index_file.requires_python is not None and not (
            self._target_python.accepts_requires_python(index_file.requires_python)
        ):
            logger.debug(
                "Skipping %s: Requires-Python %s does not match %s",
                index_file.filename,
                index_file.requires_python,
                self._target_python.full_py_version,
            )
            return None
        return name_tuple

    def find_all(self, request: DependencyRequest) -> list[IndexCandidate]:
        """Return one candidate per installable release matching `request`.

        Candidates are in the order the index lists their files.
        """
        logger.debug("Looking up %s on %r", request, self.source)
        found: dict[NameTuple, IndexCandidate] = {}
        with indent_log():
            for index_file in self.source.project_files(request.name):
                name_tuple = self._accepts(request, index_file)
                if name_tuple is None or name_tuple in found:
                    continue
                self.source.register(name_tuple, index_file)
                found[name_tuple] = IndexCandidate(
                    self,
                    name_tuple.name,
                    name_tuple.version,
                    self.source,
                    name_tuple.platform,
                )
        return list(found.values())

    def load_spec(
        self,
        name: NormalizedName,
        version: Version,
        platform: str,
        source: Source,
    ) -> PackageSpecification:
        return self._specs.fetch(NameTuple(name, version, platform), source)
