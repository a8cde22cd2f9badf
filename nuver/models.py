"""Data models for NuGet v3 API payloads."""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from .range import Range
from .version import Version

# Registry timestamps may carry up to seven fractional digits.
_FRACTION = re.compile(r"(\.\d{6})\d+")

# nuget.org marks unlisted packages with a publish date of 1900-01-01.
UNLISTED_YEAR = 1900


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(_FRACTION.sub(r"\1", value))


def _string_list(value: Union[str, List[str], None]) -> List[str]:
    """Authors and tags come as either one string or a list of strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


@dataclass
class IndexResource:
    id: str
    type: str
    comment: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IndexResource":
        return cls(id=data["@id"], type=data["@type"], comment=data.get("comment"))

    def to_dict(self) -> Dict[str, Any]:
        result = {"@id": self.id, "@type": self.type}
        if self.comment is not None:
            result["comment"] = self.comment
        return result


@dataclass
class ServiceIndex:
    """The ``index.json`` a v3 source serves at its root."""

    version: str
    resources: List[IndexResource] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceIndex":
        return cls(
            version=data["version"],
            resources=[IndexResource.from_dict(r) for r in data["resources"]],
        )

    def find(self, resource_type: str) -> Optional[str]:
        for resource in self.resources:
            if resource.type == resource_type:
                return resource.id
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"version": self.version, "resources": [r.to_dict() for r in self.resources]}


@dataclass
class PackageVersions:
    """Flat container listing: every version a package has ever had."""

    versions: List[Version] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PackageVersions":
        return cls(versions=[Version.parse(v) for v in data["versions"]])

    def to_dict(self) -> Dict[str, Any]:
        return {"versions": [str(v) for v in self.versions]}


@dataclass
class Dependency:
    id: str
    range: Optional[Range] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Dependency":
        raw = data.get("range")
        return cls(id=data["id"], range=Range.parse(raw) if raw else None)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"id": self.id}
        if self.range is not None:
            result["range"] = str(self.range)
        return result


@dataclass
class DependencyGroup:
    target_framework: Optional[str] = None
    dependencies: List[Dependency] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DependencyGroup":
        return cls(
            target_framework=data.get("targetFramework"),
            dependencies=[Dependency.from_dict(d) for d in data.get("dependencies") or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"dependencies": [d.to_dict() for d in self.dependencies]}
        if self.target_framework is not None:
            result["targetFramework"] = self.target_framework
        return result


@dataclass
class CatalogEntry:
    """Metadata for a single package version."""

    id: str
    version: Version
    authors: List[str] = field(default_factory=list)
    dependency_groups: List[DependencyGroup] = field(default_factory=list)
    description: Optional[str] = None
    icon_url: Optional[str] = None
    license_url: Optional[str] = None
    license_expression: Optional[str] = None
    listed: Optional[bool] = None
    project_url: Optional[str] = None
    published: Optional[datetime] = None
    require_license_acceptance: Optional[bool] = None
    tags: List[str] = field(default_factory=list)
    title: Optional[str] = None
    summary: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CatalogEntry":
        return cls(
            id=data["id"],
            version=Version.parse(data["version"]),
            authors=_string_list(data.get("authors")),
            dependency_groups=[DependencyGroup.from_dict(g) for g in data.get("dependencyGroups") or []],
            description=data.get("description"),
            icon_url=data.get("iconUrl"),
            license_url=data.get("licenseUrl"),
            license_expression=data.get("licenseExpression"),
            listed=data.get("listed"),
            project_url=data.get("projectUrl"),
            published=_parse_datetime(data.get("published")),
            require_license_acceptance=data.get("requireLicenseAcceptance"),
            tags=_string_list(data.get("tags")),
            title=data.get("title"),
            summary=data.get("summary"),
        )

    @property
    def is_listed(self) -> bool:
        if self.listed is False:
            return False
        return self.published is None or self.published.year > UNLISTED_YEAR

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "id": self.id,
            "version": str(self.version),
            "authors": self.authors,
            "dependencyGroups": [g.to_dict() for g in self.dependency_groups],
            "tags": self.tags,
        }
        optional = {
            "description": self.description,
            "iconUrl": self.icon_url,
            "licenseUrl": self.license_url,
            "licenseExpression": self.license_expression,
            "listed": self.listed,
            "projectUrl": self.project_url,
            "published": self.published.isoformat() if self.published else None,
            "requireLicenseAcceptance": self.require_license_acceptance,
            "title": self.title,
            "summary": self.summary,
        }
        result.update({k: v for k, v in optional.items() if v is not None})
        return result


@dataclass
class RegistrationLeaf:
    catalog_entry: CatalogEntry
    package_content: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegistrationLeaf":
        return cls(
            catalog_entry=CatalogEntry.from_dict(data["catalogEntry"]),
            package_content=data.get("packageContent"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"catalogEntry": self.catalog_entry.to_dict(), "packageContent": self.package_content}


@dataclass
class RegistrationPage:
    """A page of registration leaves; ``items`` is None when the page isn't inlined."""

    id: str
    count: int
    lower: Version
    upper: Version
    items: Optional[List[RegistrationLeaf]] = None
    parent: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegistrationPage":
        items = data.get("items")
        return cls(
            id=data["@id"],
            count=data["count"],
            lower=Version.parse(data["lower"]),
            upper=Version.parse(data["upper"]),
            items=[RegistrationLeaf.from_dict(i) for i in items] if items is not None else None,
            parent=data.get("parent"),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "@id": self.id,
            "count": self.count,
            "lower": str(self.lower),
            "upper": str(self.upper),
        }
        if self.items is not None:
            result["items"] = [i.to_dict() for i in self.items]
        if self.parent is not None:
            result["parent"] = self.parent
        return result


@dataclass
class RegistrationIndex:
    count: int
    items: List[RegistrationPage] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegistrationIndex":
        return cls(count=data["count"], items=[RegistrationPage.from_dict(p) for p in data["items"]])

    def to_dict(self) -> Dict[str, Any]:
        return {"count": self.count, "items": [p.to_dict() for p in self.items]}


@dataclass
class SearchQuery:
    query: Optional[str] = None
    skip: Optional[int] = None
    take: Optional[int] = None
    prerelease: Optional[bool] = None
    package_type: Optional[str] = None

    def to_params(self) -> Dict[str, str]:
        params = {"semVerLevel": "2.0.0"}
        if self.query is not None:
            params["q"] = self.query
        if self.skip is not None:
            params["skip"] = str(self.skip)
        if self.take is not None:
            params["take"] = str(self.take)
        if self.prerelease is not None:
            params["prerelease"] = "true" if self.prerelease else "false"
        if self.package_type is not None:
            params["packageType"] = self.package_type
        return params


@dataclass
class SearchResult:
    id: str
    version: str
    description: Optional[str] = None
    total_downloads: Optional[int] = None
    verified: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchResult":
        return cls(
            id=data["id"],
            version=data["version"],
            description=data.get("description"),
            total_downloads=data.get("totalDownloads"),
            verified=data.get("verified"),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"id": self.id, "version": self.version}
        if self.description is not None:
            result["description"] = self.description
        if self.total_downloads is not None:
            result["totalDownloads"] = self.total_downloads
        if self.verified is not None:
            result["verified"] = self.verified
        return result


@dataclass
class SearchResponse:
    total_hits: int
    data: List[SearchResult] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchResponse":
        return cls(total_hits=data["totalHits"], data=[SearchResult.from_dict(r) for r in data["data"]])

    def to_dict(self) -> Dict[str, Any]:
        return {"totalHits": self.total_hits, "data": [r.to_dict() for r in self.data]}
