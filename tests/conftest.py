from typing import Callable, Dict, List

import httpx
import pytest

from nuver.fetchers import NuGetClient

SOURCE = "https://nuget.example.test/v3/index.json"
FLAT = "https://nuget.example.test/flat/"
REGISTRATION = "https://nuget.example.test/reg/"
SEARCH = "https://nuget.example.test/query"
REMOTE_PAGE = "https://nuget.example.test/reg/foo/page/2.json"

SERVICE_INDEX = {
    "version": "3.0.0",
    "resources": [
        {"@id": FLAT, "@type": "PackageBaseAddress/3.0.0"},
        {"@id": REGISTRATION, "@type": "RegistrationsBaseUrl/3.6.0", "comment": "SemVer 2.0.0"},
        {"@id": SEARCH, "@type": "SearchQueryService/3.5.0"},
    ],
}


def catalog_entry(version: str, published: str = "2021-03-22T20:13:54.4570000+00:00", **extra) -> Dict:
    entry = {
        "id": "Foo",
        "version": version,
        "authors": "Jane Doe",
        "description": f"Foo {version}",
        "published": published,
        "tags": ["json", "serialization"],
        "licenseExpression": "MIT",
        "projectUrl": "https://foo.example.test",
        "dependencyGroups": [
            {
                "targetFramework": ".NETStandard2.0",
                "dependencies": [{"id": "Bar", "range": "[13.0.1, )"}],
            }
        ],
    }
    entry.update(extra)
    return {
        "catalogEntry": entry,
        "packageContent": f"{FLAT}foo/{version}/foo.{version}.nupkg",
    }


REGISTRATION_INDEX = {
    "count": 2,
    "items": [
        {
            "@id": "https://nuget.example.test/reg/foo/index.json#page/1.0.0/1.5.0",
            "count": 3,
            "lower": "1.0.0",
            "upper": "1.5.0",
            "items": [
                catalog_entry("1.0.0"),
                catalog_entry("1.2.0"),
                catalog_entry("1.5.0"),
            ],
        },
        {"@id": REMOTE_PAGE, "count": 3, "lower": "2.0.0-beta", "upper": "2.1.0"},
    ],
}

REMOTE_PAGE_BODY = {
    "@id": REMOTE_PAGE,
    "count": 3,
    "lower": "2.0.0-beta",
    "upper": "2.1.0",
    "parent": "https://nuget.example.test/reg/foo/index.json",
    "items": [
        catalog_entry("2.0.0-beta"),
        catalog_entry("2.0.0"),
        catalog_entry("2.1.0", published="1900-01-01T00:00:00+00:00", listed=False),
    ],
}

SEARCH_BODY = {
    "totalHits": 2,
    "data": [
        {"id": "Foo", "version": "2.0.0", "description": "The Foo library", "totalDownloads": 1234, "verified": True},
        {"id": "Foo.Extras", "version": "0.3.0"},
    ],
}


class FakeRegistry:
    """Serves canned NuGet v3 responses and records every request."""

    def __init__(self):
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {
            SOURCE: lambda request: httpx.Response(200, json=SERVICE_INDEX),
            f"{FLAT}foo/index.json": lambda request: httpx.Response(
                200, json={"versions": ["1.0.0", "1.2.0", "1.5.0", "2.0.0-beta", "2.0.0", "2.1.0"]}
            ),
            f"{REGISTRATION}foo/index.json": lambda request: httpx.Response(200, json=REGISTRATION_INDEX),
            REMOTE_PAGE: lambda request: httpx.Response(200, json=REMOTE_PAGE_BODY),
            SEARCH: lambda request: httpx.Response(200, json=SEARCH_BODY),
        }
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = f"{request.url.scheme}://{request.url.host}{request.url.path}"
        handler = self.routes.get(url)
        if handler is None:
            return httpx.Response(404, text="Not Found")
        return handler(request)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def client(self) -> NuGetClient:
        return NuGetClient.from_source(SOURCE, transport=self.transport())


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def client(registry):
    with registry.client() as client:
        yield client


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Keep the user's real config files and NUVER_CONFIG_* variables out of a test."""
    monkeypatch.setenv("HOME", str(tmp_path))
    for name in ("SOURCE", "LOGLEVEL", "QUIET", "JSON", "COLOR", "TIMEOUT"):
        monkeypatch.delenv(f"NUVER_CONFIG_{name}", raising=False)
    return tmp_path
