"""Version parsing and comparison utilities."""

from dataclasses import dataclass, field
from functools import total_ordering
from typing import Iterable, Tuple, Union


@total_ordering
@dataclass(frozen=True, eq=False)
class Identifier:
    """One dot-separated atom of a pre-release or build tag.

    Numeric identifiers compare numerically, alphanumeric ones compare
    case-insensitively, and every numeric identifier sorts below every
    alphanumeric one.
    """

    value: Union[int, str]

    @classmethod
    def parse(cls, token: str) -> "Identifier":
        """Turn a raw token into a numeric identifier when it is all digits."""
        if token.isdigit() and token.isascii():
            number = int(token)
            if number < 2 ** 64:
                return cls(number)
        return cls(token)

    @classmethod
    def coerce(cls, value: Union["Identifier", int, str]) -> "Identifier":
        if isinstance(value, Identifier):
            return value
        if isinstance(value, int):
            return cls(value)
        return cls.parse(value)

    @property
    def is_numeric(self) -> bool:
        return isinstance(self.value, int)

    def _comparison_tuple(self) -> Tuple:
        if self.is_numeric:
            return (0, self.value, "")
        return (1, 0, self.value.upper())

    def __lt__(self, other: "Identifier") -> bool:
        if not isinstance(other, Identifier):
            return NotImplemented
        return self._comparison_tuple() < other._comparison_tuple()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Identifier):
            return NotImplemented
        return self._comparison_tuple() == other._comparison_tuple()

    def __hash__(self) -> int:
        return hash(self._comparison_tuple())

    def __str__(self) -> str:
        return str(self.value)


def _identifiers(values: Iterable[Union[Identifier, int, str]]) -> Tuple[Identifier, ...]:
    return tuple(Identifier.coerce(v) for v in values)


@total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """Four-component version with optional pre-release and build tags.

    Build metadata is carried for display only; it never takes part in
    equality, hashing or ordering.
    """

    major: int
    minor: int = 0
    patch: int = 0
    revision: int = 0
    pre_release: Tuple[Identifier, ...] = field(default=())
    build: Tuple[Identifier, ...] = field(default=())

    def __post_init__(self):
        for name in ("major", "minor", "patch", "revision"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise ValueError(f"Version {name} must be a non-negative integer, got {value!r}")
        object.__setattr__(self, "pre_release", _identifiers(self.pre_release))
        object.__setattr__(self, "build", _identifiers(self.build))

    @classmethod
    def parse(cls, version_str: str) -> "Version":
        """Parse version string like '1.2.3', '1.2.3.4' or '1.0.0-rc.1+sha.abc'.

        Raises SemverError (a ValueError) pointing at the offending offset.
        """
        # Imported here to avoid a circular import with the parser module.
        from .parsers.version import VersionParser

        return VersionParser().parse(version_str)

    @property
    def is_prerelease(self) -> bool:
        return len(self.pre_release) > 0

    def without_build(self) -> "Version":
        if not self.build:
            return self
        return Version(self.major, self.minor, self.patch, self.revision, self.pre_release)

    def _comparison_tuple(self) -> Tuple:
        """Tuple for ordering: prereleases sort before release."""
        if self.pre_release:
            pre = (0, tuple(i._comparison_tuple() for i in self.pre_release))
        else:
            pre = (1, ())
        return (self.major, self.minor, self.patch, self.revision, pre)

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._comparison_tuple() < other._comparison_tuple()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._comparison_tuple() == other._comparison_tuple()

    def __hash__(self) -> int:
        return hash(self._comparison_tuple())

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        if self.revision > 0:
            base += f".{self.revision}"
        if self.pre_release:
            base += "-" + ".".join(str(i) for i in self.pre_release)
        if self.build:
            base += "+" + ".".join(str(i) for i in self.build)
        return base
