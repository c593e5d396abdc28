from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import requests
from packaging.version import Version

from installset._internal.exceptions import (
    InvalidIndexResponse,
    MetadataUnavailable,
    NetworkConnectionError,
)
from installset._internal.index.remote import (
    BestSet,
    IndexClient,
    IndexFile,
    RemoteSource,
)
from installset._internal.models.dependency import Dependency, DependencyRequest
from installset._internal.models.name_tuple import NameTuple
from installset._internal.models.target_python import TargetPython
from installset._internal.network.session import IndexSession
from tests.lib.archives import make_metadata, make_wheel

INDEX_URL = "https://index.test/simple"
JSON_TYPE = "application/vnd.pypi.simple.v1+json"


def make_response(
    url: str,
    status_code: int = 200,
    content: bytes = b"",
    content_type: str = "application/octet-stream",
) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status_code
    resp.reason = "OK" if status_code < 400 else "Oops"
    resp._content = content
    resp.headers["Content-Type"] = content_type
    resp.url = url
    return resp


def project_page(files: list[dict[str, Any]]) -> bytes:
    return json.dumps(
        {"meta": {"api-version": "1.0"}, "name": "foo", "files": files}
    ).encode()


def file_entry(filename: str, **extra: Any) -> dict[str, Any]:
    return {"filename": filename, "url": f"../../files/{filename}", **extra}


class FakeSession(requests.Session):
    """Answers requests from a dict of prebuilt responses; anything else is a 404."""

    def __init__(self, responses: dict[str, requests.Response] | None = None) -> None:
        super().__init__()
        self.responses = responses or {}
        self.requested: list[tuple[str, dict[str, str]]] = []

    def serve(self, url: str, **kwargs: Any) -> None:
        self.responses[url] = make_response(url, **kwargs)

    def request(  # type: ignore[override]
        self, method: str, url: str, *args: Any, **kwargs: Any
    ) -> requests.Response:
        self.requested.append((url, kwargs.get("headers") or {}))
        if url in self.responses:
            return self.responses[url]
        return make_response(url, status_code=404)

    def urls(self) -> list[str]:
        return [url for url, _ in self.requested]


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def target_python() -> TargetPython:
    return TargetPython.create(
        platforms=["linux_x86_64"],
        py_version_info=(3, 11),
        abis=["cp311"],
        implementation="cp",
    )


def make_best_set(session: FakeSession, target_python: TargetPython) -> BestSet:
    return BestSet.create(
        index_url=INDEX_URL, target_python=target_python, session=session
    )


def serve_page(session: FakeSession, files: list[dict[str, Any]]) -> None:
    session.serve(
        f"{INDEX_URL}/foo/", content=project_page(files), content_type=JSON_TYPE
    )


def request(requirement: str) -> DependencyRequest:
    return DependencyRequest(Dependency.parse(requirement))


class TestIndexFile:
    def test_from_json(self) -> None:
        index_file = IndexFile.from_json(
            file_entry(
                "foo-1.0-py3-none-any.whl",
                **{
                    "requires-python": ">=3.8",
                    "yanked": "broken build",
                    "core-metadata": {"sha256": "abc"},
                },
            ),
            f"{INDEX_URL}/foo/",
        )

        assert index_file.url == "https://index.test/files/foo-1.0-py3-none-any.whl"
        assert str(index_file.requires_python) == ">=3.8"
        assert index_file.yanked
        assert index_file.has_core_metadata
        assert index_file.metadata_url == (
            "https://index.test/files/foo-1.0-py3-none-any.whl.metadata"
        )

    def test_from_json_defaults(self) -> None:
        index_file = IndexFile.from_json(
            {
                "filename": "foo-1.0.tar.gz",
                "url": "https://cdn.test/foo-1.0.tar.gz#sha256=abc",
                "requires-python": "not a specifier",
            },
            f"{INDEX_URL}/foo/",
        )

        assert index_file.url == "https://cdn.test/foo-1.0.tar.gz#sha256=abc"
        assert index_file.requires_python is None
        assert not index_file.yanked
        assert not index_file.has_core_metadata
        assert index_file.metadata_url == "https://cdn.test/foo-1.0.tar.gz.metadata"

    @pytest.mark.parametrize(
        "value, expected", [(True, True), (False, False), ({}, False)]
    )
    def test_pep658_key(self, value: Any, expected: bool) -> None:
        index_file = IndexFile.from_json(
            file_entry("foo-1.0.tar.gz", **{"data-dist-info-metadata": value}),
            f"{INDEX_URL}/foo/",
        )
        assert index_file.has_core_metadata is expected


class TestIndexClient:
    def test_project_files(self, session: FakeSession) -> None:
        serve_page(session, [file_entry("foo-1.0.tar.gz")])
        client = IndexClient(session, INDEX_URL + "/")

        files = client.project_files("Foo")

        assert [f.filename for f in files] == ["foo-1.0.tar.gz"]
        url, headers = session.requested[0]
        assert url == f"{INDEX_URL}/foo/"
        assert headers["Accept"] == JSON_TYPE

    def test_unknown_project(self, session: FakeSession) -> None:
        client = IndexClient(session, INDEX_URL)

        assert client.project_files("foo") == ()

    def test_server_error(self, session: FakeSession) -> None:
        session.serve(f"{INDEX_URL}/foo/", status_code=503)
        client = IndexClient(session, INDEX_URL)

        with pytest.raises(NetworkConnectionError, match="503 Server Error: Oops"):
            client.project_files("foo")

    def test_html_page(self, session: FakeSession) -> None:
        session.serve(
            f"{INDEX_URL}/foo/", content=b"<html></html>", content_type="text/html"
        )
        client = IndexClient(session, INDEX_URL)

        with pytest.raises(InvalidIndexResponse, match="'text/html'"):
            client.project_files("foo")


class TestBestSet:
    def test_filters_files(
        self, session: FakeSession, target_python: TargetPython
    ) -> None:
        serve_page(
            session,
            [
                file_entry("foo-0.9.tar.gz"),
                file_entry("foo-1.0.tar.gz"),
                file_entry("foo-1.0-py3-none-any.whl"),
                file_entry("foo-1.1-cp311-cp311-linux_x86_64.whl"),
                file_entry("foo-1.2-py3-none-any.whl", yanked=True),
                file_entry("foo-1.3-cp27-cp27mu-manylinux1_x86_64.whl"),
                file_entry("foo-1.4.tar.gz", **{"requires-python": ">=3.12"}),
                file_entry("bar-1.5.tar.gz"),
                file_entry("foo-latest.exe"),
                file_entry("foo-1.6.tar.gz", **{"requires-python": ">=3.10"}),
            ],
        )
        best_set = make_best_set(session, target_python)

        found = best_set.find_all(request("foo>=1.0"))

        assert [(str(c.version), c.platform) for c in found] == [
            ("1.0", "any"),
            ("1.1", "linux_x86_64"),
            ("1.6", "any"),
        ]
        assert all(c.source is best_set.source for c in found)
        assert session.urls() == [f"{INDEX_URL}/foo/"]

    def test_materializes_from_core_metadata_once(
        self, session: FakeSession, target_python: TargetPython
    ) -> None:
        serve_page(
            session,
            [file_entry("foo-1.0-py3-none-any.whl", **{"core-metadata": True})],
        )
        metadata_url = "https://index.test/files/foo-1.0-py3-none-any.whl.metadata"
        session.serve(
            metadata_url, content=make_metadata("foo", "1.0", ["bar"]).encode()
        )
        best_set = make_best_set(session, target_python)

        (candidate,) = best_set.find_all(request("foo"))
        spec = candidate.to_specification()

        assert spec.name_tuple == NameTuple.create("foo", "1.0")
        assert [str(d) for d in spec.dependencies()] == ["bar"]
        assert spec.location == "https://index.test/files/foo-1.0-py3-none-any.whl"
        assert candidate.to_specification() is spec
        assert session.urls().count(metadata_url) == 1

    def test_materializes_from_archive(
        self, session: FakeSession, target_python: TargetPython, tmp_path: Path
    ) -> None:
        wheel = make_wheel(
            tmp_path, "foo", "1.0", tag="cp311-cp311-linux_x86_64", requires=["bar"]
        )
        serve_page(session, [file_entry(wheel.name)])
        session.serve(
            f"https://index.test/files/{wheel.name}", content=wheel.read_bytes()
        )
        best_set = make_best_set(session, target_python)

        (candidate,) = best_set.find_all(request("foo"))
        spec = candidate.to_specification()

        assert spec.version == Version("1.0")
        assert spec.platform == "linux_x86_64"
        assert [str(d) for d in spec.dependencies()] == ["bar"]

    def test_archive_without_metadata(
        self, session: FakeSession, target_python: TargetPython, tmp_path: Path
    ) -> None:
        wheel = make_wheel(tmp_path, "foo", "1.0", with_metadata=False)
        serve_page(session, [file_entry(wheel.name)])
        session.serve(
            f"https://index.test/files/{wheel.name}", content=wheel.read_bytes()
        )
        best_set = make_best_set(session, target_python)

        (candidate,) = best_set.find_all(request("foo"))
        with pytest.raises(MetadataUnavailable):
            candidate.to_specification()

    def test_unlisted_package(self, session: FakeSession) -> None:
        source = RemoteSource(IndexClient(session, INDEX_URL))

        with pytest.raises(MetadataUnavailable, match="not listed by"):
            source.fetch_spec(NameTuple.create("foo", "1.0"))
        assert session.requested == []


class TestIndexSession:
    def test_defaults(self) -> None:
        session = IndexSession(retries=3, timeout=7)

        assert session.headers["User-Agent"].startswith("installset/")
        adapter = session.get_adapter("https://pypi.org/simple/")
        assert adapter.max_retries.total == 3
        assert 503 in adapter.max_retries.status_forcelist

    def test_timeout_is_applied(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[dict[str, Any]] = []

        def fake_request(
            self: requests.Session, method: str, url: str, **kwargs: Any
        ) -> requests.Response:
            calls.append(kwargs)
            return make_response(url)

        monkeypatch.setattr(requests.Session, "request", fake_request)
        session = IndexSession(timeout=7)

        session.get("https://index.test/")
        session.get("https://index.test/", timeout=1)

        assert [c["timeout"] for c in calls] == [7, 1]
