"""Client for NuGet v3 package sources."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, fields
from typing import Callable, Dict, List, Optional, TypeVar
import logging
import time

import httpx

from .base import BaseFetcher
from ..config import DEFAULT_SOURCE, ENDPOINT_TYPES, URL_PATTERNS
from ..errors import (
    BadResponseError,
    InvalidSourceError,
    PackageNotFoundError,
    UnsupportedEndpointError,
)
from ..models import (
    CatalogEntry,
    PackageVersions,
    RegistrationIndex,
    RegistrationPage,
    SearchQuery,
    SearchResponse,
    ServiceIndex,
)
from ..package_spec import PackageSpec
from ..picker import VersionPicker
from ..range import Range
from ..version import Version

logger = logging.getLogger(__name__)

T = TypeVar("T")

LATEST_TAG = "latest"


@dataclass
class NuGetEndpoints:
    """Base URLs advertised by a source's service index; None when not offered."""

    package_content: Optional[str] = None
    registration: Optional[str] = None
    search: Optional[str] = None
    publish: Optional[str] = None
    catalog: Optional[str] = None
    signatures: Optional[str] = None
    autocomplete: Optional[str] = None
    symbol_publish: Optional[str] = None

    @classmethod
    def from_index(cls, index: ServiceIndex) -> "NuGetEndpoints":
        return cls(**{f.name: index.find(ENDPOINT_TYPES[f.name]) for f in fields(cls)})

    def require(self, name: str) -> str:
        url = getattr(self, name)
        if url is None:
            raise UnsupportedEndpointError(ENDPOINT_TYPES[name])
        return url

    def base_address(self, name: str) -> str:
        """Endpoint URL ending in a slash, ready for joining package paths onto."""
        url = self.require(name)
        return url if url.endswith("/") else url + "/"


def _parse(build: Callable[[dict], T], data: dict, url: str) -> T:
    try:
        return build(data)
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Malformed payload from {url}: {e!r}")
        raise BadResponseError(200, url) from e


class NuGetClient(BaseFetcher):
    """Read-only client for a NuGet v3 source.

    Build one with ``from_source``, which reads the service index and
    records which endpoints the source offers.
    """

    def __init__(
        self,
        source: str,
        endpoints: NuGetEndpoints,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
        max_workers: int = 4,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self.source = source
        self.endpoints = endpoints
        self.max_workers = max_workers

    @classmethod
    def from_source(
        cls,
        source: str = DEFAULT_SOURCE,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
        max_workers: int = 4,
    ) -> "NuGetClient":
        client = cls(source, NuGetEndpoints(), timeout=timeout, transport=transport, max_workers=max_workers)
        try:
            client.endpoints = NuGetEndpoints.from_index(client.service_index())
        except Exception:
            client.close()
            raise
        logger.info(f"Connected to {source}")
        return client

    def service_index(self) -> ServiceIndex:
        if not self.source.startswith(("http://", "https://")):
            raise InvalidSourceError(self.source)
        try:
            data = self.fetch_json(self.source)
            return ServiceIndex.from_dict(data)
        except (PackageNotFoundError, BadResponseError, KeyError, TypeError) as e:
            raise InvalidSourceError(self.source) from e

    def ping(self) -> float:
        """Seconds taken to fetch the service index."""
        start = time.perf_counter()
        self.service_index()
        elapsed = time.perf_counter() - start
        logger.debug(f"Pinged {self.source} in {elapsed:.3f}s")
        return elapsed

    def versions(self, package_id: str) -> List[Version]:
        """Every version of ``package_id``, listed or not, in registry order."""
        url = URL_PATTERNS["versions"].format(
            base=self.endpoints.base_address("package_content"), id=package_id.lower()
        )
        data = self.fetch_json(url, package=package_id)
        return _parse(PackageVersions.from_dict, data, url).versions

    def registration(self, package_id: str) -> RegistrationIndex:
        url = URL_PATTERNS["registration"].format(
            base=self.endpoints.base_address("registration"), id=package_id.lower()
        )
        data = self.fetch_json(url, package=package_id)
        return _parse(RegistrationIndex.from_dict, data, url)

    def registration_page(self, url: str) -> RegistrationPage:
        data = self.fetch_json(url)
        return _parse(RegistrationPage.from_dict, data, url)

    def catalog_entries(self, package_id: str) -> List[CatalogEntry]:
        """All catalog entries of a package, sorted by version.

        Pages the registration index doesn't inline are fetched in parallel.
        """
        index = self.registration(package_id)
        entries: List[CatalogEntry] = []
        remote: List[str] = []
        for page in index.items:
            if page.items is None:
                remote.append(page.id)
            else:
                entries.extend(leaf.catalog_entry for leaf in page.items)

        if remote:
            logger.info(f"Fetching {len(remote)} registration pages for {package_id}")
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                future_to_url = {executor.submit(self.registration_page, url): url for url in remote}
                for future in as_completed(future_to_url):
                    page = future.result()
                    entries.extend(leaf.catalog_entry for leaf in page.items or [])

        entries.sort(key=lambda entry: entry.version)
        return entries

    def search(self, query: SearchQuery) -> SearchResponse:
        url = self.endpoints.require("search")
        data = self.fetch_json(url, params=query.to_params())
        return _parse(SearchResponse.from_dict, data, url)

    def resolve(self, spec: PackageSpec) -> Version:
        """The version a spec points at.

        Ranges and versions go through the version picker; no version or
        the ``latest`` tag mean the highest listed stable version.
        """
        range_ = self._spec_range(spec)
        if range_ is not None:
            chosen = VersionPicker().pick(range_, self.versions(spec.name))
            if chosen is None:
                raise PackageNotFoundError(str(spec))
            return chosen
        return self.resolve_entry(spec).version

    def resolve_entry(self, spec: PackageSpec) -> CatalogEntry:
        """The catalog entry a spec points at."""
        entries = self.catalog_entries(spec.name)
        by_version: Dict[Version, CatalogEntry] = {entry.version: entry for entry in entries}

        range_ = self._spec_range(spec)
        if range_ is not None:
            chosen = VersionPicker().pick(range_, by_version)
        else:
            listed = [entry.version for entry in entries if entry.is_listed]
            chosen = VersionPicker(force_floating=True).pick(Range.any(), listed)

        if chosen is None:
            raise PackageNotFoundError(str(spec))
        logger.debug(f"Resolved {spec} to {chosen}")
        return by_version[chosen]

    def _spec_range(self, spec: PackageSpec) -> Optional[Range]:
        if spec.requested is None:
            return None
        if spec.is_tag:
            if spec.requested.value != LATEST_TAG:
                raise PackageNotFoundError(str(spec))
            return None
        return spec.requested.to_range()
