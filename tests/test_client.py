import httpx
import pytest
from tenacity import wait_none

from nuver.errors import (
    BadResponseError,
    InvalidSourceError,
    PackageNotFoundError,
    RequestFailedError,
    UnsupportedEndpointError,
)
from nuver.fetchers import BaseFetcher, NuGetClient
from nuver.models import SearchQuery
from nuver.package_spec import PackageSpec
from nuver.version import Version

from .conftest import FLAT, REGISTRATION, REMOTE_PAGE, SEARCH, SOURCE


def test_from_source_reads_endpoints(client):
    assert client.endpoints.package_content == FLAT
    assert client.endpoints.registration == REGISTRATION
    assert client.endpoints.search == SEARCH
    assert client.endpoints.publish is None


def test_missing_endpoint(client):
    with pytest.raises(UnsupportedEndpointError) as excinfo:
        client.endpoints.require("publish")
    assert excinfo.value.endpoint == "PackagePublish/2.0.0"


def test_invalid_source_body(registry):
    registry.routes[SOURCE] = lambda request: httpx.Response(200, text="<html>nope</html>")
    with pytest.raises(InvalidSourceError):
        registry.client()


def test_invalid_source_shape(registry):
    registry.routes[SOURCE] = lambda request: httpx.Response(200, json=["not", "an", "index"])
    with pytest.raises(InvalidSourceError):
        registry.client()


def test_non_http_source():
    with pytest.raises(InvalidSourceError):
        NuGetClient.from_source("ftp://example.test/index.json", transport=httpx.MockTransport(lambda r: None))


def test_ping(client):
    assert client.ping() >= 0


def test_versions_lowercases_the_id(client, registry):
    versions = client.versions("Foo")
    assert versions[0] == Version(1)
    assert Version.parse("2.0.0-beta") in versions
    assert str(registry.requests[-1].url) == f"{FLAT}foo/index.json"


def test_versions_not_found(client):
    with pytest.raises(PackageNotFoundError) as excinfo:
        client.versions("Missing")
    assert excinfo.value.package == "Missing"


def test_bad_status(client, registry):
    registry.routes[f"{FLAT}foo/index.json"] = lambda request: httpx.Response(500)
    with pytest.raises(BadResponseError) as excinfo:
        client.versions("foo")
    assert excinfo.value.status_code == 500


def test_malformed_payload(client, registry):
    registry.routes[f"{FLAT}foo/index.json"] = lambda request: httpx.Response(200, json={"versions": ["one"]})
    with pytest.raises(BadResponseError):
        client.versions("foo")


def test_catalog_entries_fetch_remote_pages(client, registry):
    entries = client.catalog_entries("Foo")
    assert [str(entry.version) for entry in entries] == [
        "1.0.0",
        "1.2.0",
        "1.5.0",
        "2.0.0-beta",
        "2.0.0",
        "2.1.0",
    ]
    assert REMOTE_PAGE in [str(request.url) for request in registry.requests]


def test_search_sends_semver_level(client, registry):
    response = client.search(SearchQuery(query="foo", skip=1, prerelease=False, package_type="Dependency"))
    params = registry.requests[-1].url.params
    assert params["semVerLevel"] == "2.0.0"
    assert params["q"] == "foo"
    assert params["skip"] == "1"
    assert params["prerelease"] == "false"
    assert params["packageType"] == "Dependency"
    assert response.total_hits == 2


def test_resolve_range(client):
    assert client.resolve(PackageSpec.parse("Foo@^1.0")) == Version(1, 5)
    assert client.resolve(PackageSpec.parse("Foo@[1.0,2.0)")) == Version(1)
    assert client.resolve(PackageSpec.parse("Foo@1.2.0")) == Version(1, 2)
    assert client.resolve(PackageSpec.parse("Foo@>=2.0.0-beta")) == Version(2, 1)


def test_resolve_latest_skips_unlisted_versions(client):
    assert client.resolve(PackageSpec.parse("Foo@latest")) == Version(2)
    assert client.resolve(PackageSpec.parse("Foo")) == Version(2)


def test_resolve_entry(client):
    entry = client.resolve_entry(PackageSpec.parse("Foo@~1.2"))
    assert entry.version == Version(1, 2)
    assert entry.description == "Foo 1.2.0"


def test_resolve_nothing_matches(client):
    with pytest.raises(PackageNotFoundError):
        client.resolve(PackageSpec.parse("Foo@3.x"))
    with pytest.raises(PackageNotFoundError):
        client.resolve(PackageSpec.parse("Foo@nightly"))


def test_connect_errors_are_retried(registry, monkeypatch):
    monkeypatch.setattr(BaseFetcher._get.retry, "wait", wait_none())
    client = registry.client()
    attempts = []

    def refuse(request):
        attempts.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    registry.routes[f"{FLAT}foo/index.json"] = refuse
    with pytest.raises(RequestFailedError) as excinfo:
        client.versions("foo")
    assert len(attempts) == 3
    assert excinfo.value.url == f"{FLAT}foo/index.json"
    client.close()
