"""Error types shared by the version engine, the package spec parser and the registry client."""

from enum import Enum
from typing import Any, Optional, Tuple

# Largest integer a double can hold exactly, divided by ten.
MAX_SAFE_INTEGER = 900_719_925_474_099
MAX_LENGTH = 256

# Components larger than this don't fit an unsigned 64-bit integer.
MAX_U64 = 2 ** 64 - 1


def not_a_string(value: Any) -> str:
    return f"Expected a string, got {type(value).__name__}."


def source_location(text: str, offset: int) -> Tuple[int, int]:
    """Return the 0-based (line, column) of ``offset`` inside ``text``."""
    prefix = text[:offset]
    line = prefix.count("\n")
    line_start = prefix.rfind("\n") + 1
    return line, offset - line_start


class SemverErrorKind(Enum):
    MAX_LENGTH = "input_too_long"
    INCOMPLETE_INPUT = "incomplete_input"
    INTEGER_PARSE = "integer_parse_error"
    INTEGER_TOO_LARGE = "integer_too_large"
    INVALID_COMPONENT = "component_parse_error"
    OTHER = "other"

    @property
    def code(self) -> str:
        return f"nuver::semver::{self.value}"

    @property
    def help(self) -> Optional[str]:
        return _SEMVER_HELP.get(self)

    def describe(self, detail: Any = None) -> str:
        if self is SemverErrorKind.MAX_LENGTH:
            return f"Semver string can't be longer than {MAX_LENGTH} characters."
        if self is SemverErrorKind.INCOMPLETE_INPUT:
            return "Incomplete input to semver parser."
        if self is SemverErrorKind.INTEGER_PARSE:
            return f"Failed to parse an integer component of a semver string: {detail}"
        if self is SemverErrorKind.INTEGER_TOO_LARGE:
            return f"Integer component of semver string is larger than MAX_SAFE_INTEGER: {detail}"
        if self is SemverErrorKind.INVALID_COMPONENT:
            return f"Failed to parse {detail} component of semver string."
        if detail is not None:
            return f"{detail}"
        return "An unspecified error occurred."


_SEMVER_HELP = {
    SemverErrorKind.MAX_LENGTH: "Shorten the version string, usually by trimming its build metadata.",
    SemverErrorKind.INTEGER_TOO_LARGE: f"Numeric components must not exceed {MAX_SAFE_INTEGER}.",
    SemverErrorKind.INVALID_COMPONENT: "Versions look like 1.2.3, 1.2.3-beta.1 or 1.2.3.4+build; ranges like ^1.2, [1.0,2.0) or 1 - 2.",
}


class SemverError(ValueError):
    """A version or range string could not be parsed."""

    def __init__(self, input: str, offset: int, kind: SemverErrorKind, detail: Any = None):
        self.input = input
        self.offset = offset
        self.kind = kind
        self.detail = detail
        super().__init__(f"Error parsing semver string. {kind.describe(detail)}")

    @property
    def code(self) -> str:
        return self.kind.code

    @property
    def help(self) -> Optional[str]:
        return self.kind.help

    def location(self) -> Tuple[int, int]:
        return source_location(self.input, self.offset)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemverError):
            return NotImplemented
        return (self.input, self.offset, self.kind, self.detail) == (
            other.input, other.offset, other.kind, other.detail
        )

    __hash__ = ValueError.__hash__


class PackageSpecErrorKind(Enum):
    INVALID_CHARACTERS = "invalid_chars"
    INVALID_SEMVER = "invalid_semver"
    INCOMPLETE_INPUT = "incomplete_input"
    OTHER = "other"

    @property
    def code(self) -> str:
        return f"nuver::spec::{self.value}"


class PackageSpecError(ValueError):
    """A package spec such as ``Newtonsoft.Json@^13`` could not be parsed."""

    def __init__(self, input: str, offset: int, kind: PackageSpecErrorKind, detail: Any = None):
        self.input = input
        self.offset = offset
        self.kind = kind
        self.detail = detail
        if kind is PackageSpecErrorKind.INVALID_CHARACTERS:
            message = f"Found invalid characters: `{detail}`"
        elif kind is PackageSpecErrorKind.INVALID_SEMVER:
            message = str(detail)
        elif kind is PackageSpecErrorKind.INCOMPLETE_INPUT:
            message = "Incomplete input to package spec parser."
        elif detail is not None:
            message = f"{detail}"
        else:
            message = "An unspecified error occurred."
        super().__init__(f"Error parsing package spec. {message}")

    @property
    def code(self) -> str:
        return self.kind.code

    def location(self) -> Tuple[int, int]:
        return source_location(self.input, self.offset)


class ConfigError(ValueError):
    """A configuration file or value is invalid."""


class RegistryError(Exception):
    """Base class for registry client failures."""

    code = "nuver::api::generic"
    help: Optional[str] = None


class InvalidSourceError(RegistryError):
    code = "nuver::api::invalid_source"
    help = "Are you sure this is a valid NuGet source? Example: https://api.nuget.org/v3/index.json"

    def __init__(self, source: str):
        self.source = source
        super().__init__(f"Source does not appear to be a valid NuGet API v3 source: {source}")


class UnsupportedEndpointError(RegistryError):
    code = "nuver::api::unsupported_endpoint"
    help = (
        "Only fully-compliant v3 sources are supported. See "
        "https://docs.microsoft.com/en-us/nuget/api/overview#resources-and-schema"
    )

    def __init__(self, endpoint: str):
        self.endpoint = endpoint
        super().__init__(f"Endpoint not supported: {endpoint}")


class PackageNotFoundError(RegistryError):
    code = "nuver::api::package_not_found"
    help = "Double-check the package id and the requested version."

    def __init__(self, package: str):
        self.package = package
        super().__init__(f"Package does not exist: {package}")


class BadResponseError(RegistryError):
    code = "nuver::api::unexpected_response"
    help = "This is likely a bug in the registry (or its documentation)."

    def __init__(self, status_code: int, url: str):
        self.status_code = status_code
        self.url = url
        super().__init__(f"Unexpected or undocumented response ({status_code}) from {url}")


class RequestFailedError(RegistryError):
    code = "nuver::api::request_failed"

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Request to {url} failed: {reason}")
