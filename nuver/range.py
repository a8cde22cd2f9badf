"""Version ranges: bounds, intervals and OR-unions of intervals."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .version import Identifier, Version

# Attached to synthesised exclusive upper bounds so that they also shut
# out every pre-release of the boundary version.
MIN_PRE_RELEASE = (Identifier(0),)


class PredicateKind(Enum):
    EXCLUDING = "excluding"
    INCLUDING = "including"
    UNBOUNDED = "unbounded"


@dataclass(frozen=True)
class Predicate:
    """One edge of an interval: inclusive, exclusive or open-ended."""

    kind: PredicateKind
    version: Optional[Version] = None

    def __post_init__(self):
        if (self.kind is PredicateKind.UNBOUNDED) != (self.version is None):
            raise ValueError(f"{self.kind.value} predicate with version {self.version!r}")

    @classmethod
    def including(cls, version: Version) -> "Predicate":
        return cls(PredicateKind.INCLUDING, version)

    @classmethod
    def excluding(cls, version: Version) -> "Predicate":
        return cls(PredicateKind.EXCLUDING, version)

    @classmethod
    def unbounded(cls) -> "Predicate":
        return cls(PredicateKind.UNBOUNDED)

    @property
    def is_unbounded(self) -> bool:
        return self.kind is PredicateKind.UNBOUNDED

    def flip(self) -> "Predicate":
        """Toggle inclusive/exclusive; an open edge stays open."""
        if self.kind is PredicateKind.INCLUDING:
            return Predicate.excluding(self.version)
        if self.kind is PredicateKind.EXCLUDING:
            return Predicate.including(self.version)
        return self


class Side(Enum):
    LOWER = "lower"
    UPPER = "upper"


@dataclass(frozen=True)
class Bound:
    """A predicate placed on the lower or upper side of an interval.

    Bounds are ordered by their position on the version line. Each bound
    maps to ``(version, epsilon)``: open bounds sit at minus or plus
    infinity, inclusive bounds sit exactly on their version, an exclusive
    lower bound sits just above its version and an exclusive upper bound
    just below it. Comparing positions covers every lower/upper pairing.

    Equality stays structural, so ``Lower(Including(v))`` and
    ``Upper(Including(v))`` share a position without being equal.
    """

    side: Side
    predicate: Predicate

    @classmethod
    def lower(cls, predicate: Optional[Predicate] = None) -> "Bound":
        return cls(Side.LOWER, predicate or Predicate.unbounded())

    @classmethod
    def upper(cls, predicate: Optional[Predicate] = None) -> "Bound":
        return cls(Side.UPPER, predicate or Predicate.unbounded())

    @property
    def version(self) -> Optional[Version]:
        return self.predicate.version

    def position(self) -> Tuple:
        kind = self.predicate.kind
        if kind is PredicateKind.UNBOUNDED:
            return (-1 if self.side is Side.LOWER else 1, (), 0)
        if kind is PredicateKind.INCLUDING:
            epsilon = 0
        elif self.side is Side.LOWER:
            epsilon = 1
        else:
            epsilon = -1
        return (0, self.predicate.version._comparison_tuple(), epsilon)

    def __lt__(self, other: "Bound") -> bool:
        if not isinstance(other, Bound):
            return NotImplemented
        return self.position() < other.position()

    def __le__(self, other: "Bound") -> bool:
        if not isinstance(other, Bound):
            return NotImplemented
        return self.position() <= other.position()

    def __gt__(self, other: "Bound") -> bool:
        if not isinstance(other, Bound):
            return NotImplemented
        return self.position() > other.position()

    def __ge__(self, other: "Bound") -> bool:
        if not isinstance(other, Bound):
            return NotImplemented
        return self.position() >= other.position()


def _point(version: Version) -> Tuple:
    return (0, version._comparison_tuple(), 0)


@dataclass(frozen=True)
class ComparatorSet:
    """A single contiguous interval of versions.

    ``floating`` marks intervals written with wildcards or open-ended
    operators; it steers version selection but is not part of equality.
    Pinned intervals print in NuGet bracket notation, floating ones as
    comparison operators, so that either reads back the same way.
    """

    lower: Bound
    upper: Bound
    floating: bool = field(default=False, compare=False)

    def __post_init__(self):
        if self.lower.side is not Side.LOWER or self.upper.side is not Side.UPPER:
            raise ValueError(f"Bounds are on the wrong sides: {self.lower!r}, {self.upper!r}")
        if self.lower > self.upper:
            raise ValueError(f"Empty interval: {self.lower!r} is above {self.upper!r}")

    @classmethod
    def new(cls, lower: Bound, upper: Bound, floating: bool = False) -> Optional["ComparatorSet"]:
        """Build an interval, or return None if it would be empty."""
        if lower > upper:
            return None
        return cls(lower, upper, floating)

    @classmethod
    def any(cls, floating: bool = False) -> "ComparatorSet":
        return cls(Bound.lower(), Bound.upper(), floating)

    def has_pre_release(self) -> bool:
        """True when an edge names a pre-release.

        An exclusive upper edge of ``V-0`` doesn't count, whether it came
        from ``^``, ``~`` or a partial version or was typed out as
        ``<V-0``: it only marks where the pre-releases of ``V`` begin.
        """
        lower = self.lower.version
        if lower is not None and lower.is_prerelease:
            return True
        upper = self.upper.predicate
        if upper.version is None or not upper.version.is_prerelease:
            return False
        return not (upper.kind is PredicateKind.EXCLUDING and upper.version.pre_release == MIN_PRE_RELEASE)

    def satisfies(self, version: Version) -> bool:
        return self.lower.position() <= _point(version) <= self.upper.position()

    def allows_all(self, other: "ComparatorSet") -> bool:
        return self.lower <= other.lower and other.upper <= self.upper

    def allows_any(self, other: "ComparatorSet") -> bool:
        if other.upper < self.lower:
            return False
        if self.upper < other.lower:
            return False
        return True

    def intersect(self, other: "ComparatorSet") -> Optional["ComparatorSet"]:
        lower = max(self.lower, other.lower)
        upper = min(self.upper, other.upper)
        return ComparatorSet.new(lower, upper, self.floating or other.floating)

    def difference(self, other: "ComparatorSet") -> List["ComparatorSet"]:
        """Versions in this interval but not in ``other``, as zero, one or two intervals."""
        floating = self.floating or other.floating
        overlap = self.intersect(other)
        if overlap is None:
            return [self]
        if overlap == self:
            return []

        below = ComparatorSet.new(self.lower, Bound.upper(overlap.lower.predicate.flip()), floating)
        above = ComparatorSet.new(Bound.lower(overlap.upper.predicate.flip()), self.upper, floating)
        if self.lower < overlap.lower and overlap.upper < self.upper:
            return [below, above]
        if self.lower < overlap.lower:
            return [below] if below else []
        return [above] if above else []

    def __str__(self) -> str:
        if self.floating:
            return self._operator_text()

        lower, upper = self.lower.predicate, self.upper.predicate
        if lower.is_unbounded and upper.is_unbounded:
            return "(,)"
        if (
            lower.kind is PredicateKind.INCLUDING
            and upper.kind is PredicateKind.INCLUDING
            and lower.version == upper.version
        ):
            return f"[{lower.version}]"

        opening = "[" if lower.kind is PredicateKind.INCLUDING else "("
        closing = "]" if upper.kind is PredicateKind.INCLUDING else ")"
        left = "" if lower.is_unbounded else str(lower.version)
        right = "" if upper.is_unbounded else str(upper.version)
        return f"{opening}{left},{right}{closing}"

    def _operator_text(self) -> str:
        """Comparison-operator form, which parses back as floating."""
        lower, upper = self.lower.predicate, self.upper.predicate
        if lower.is_unbounded and upper.is_unbounded:
            return "[*]"
        if upper.is_unbounded and lower.kind is PredicateKind.INCLUDING and lower.version == Version(0):
            return "*"

        parts = []
        if not lower.is_unbounded:
            op = ">=" if lower.kind is PredicateKind.INCLUDING else ">"
            parts.append(f"{op}{lower.version}")
        if not upper.is_unbounded:
            op = "<=" if upper.kind is PredicateKind.INCLUDING else "<"
            parts.append(f"{op}{upper.version}")
        return " ".join(parts)


@dataclass(frozen=True)
class Range:
    """A version constraint: one or more intervals joined by OR.

    Intervals are stored sorted by their lower then upper bound.

    ``allows_all`` and ``allows_any`` compare the two ranges interval by
    interval and succeed as soon as a single pair qualifies. That is
    exact for single-interval ranges; for unions it can answer True where
    no whole-union reasoning would.
    """

    comparators: Tuple[ComparatorSet, ...]

    def __post_init__(self):
        ordered = sorted(self.comparators, key=lambda comp: (comp.lower.position(), comp.upper.position()))
        object.__setattr__(self, "comparators", tuple(ordered))
        if not self.comparators:
            raise ValueError("A Range needs at least one comparator set")

    @classmethod
    def parse(cls, range_str: str) -> "Range":
        """Parse a constraint such as '^1.2', '[1.0,2.0)', '1 - 2' or '1.x || >=3'.

        Raises SemverError (a ValueError) pointing at the offending offset.
        """
        # Imported here to avoid a circular import with the parser module.
        from .parsers.range import RangeParser

        return cls(RangeParser().parse(range_str))

    @classmethod
    def any(cls) -> "Range":
        return cls((ComparatorSet.any(),))

    @classmethod
    def any_floating(cls) -> "Range":
        return cls((ComparatorSet.any(floating=True),))

    @classmethod
    def exact(cls, version: Version) -> "Range":
        bare = version.without_build()
        return cls((
            ComparatorSet(Bound.lower(Predicate.including(bare)), Bound.upper(Predicate.including(bare))),
        ))

    @classmethod
    def _from_sets(cls, sets: Iterable[ComparatorSet]) -> Optional["Range"]:
        sets = tuple(sets)
        return cls(sets) if sets else None

    def is_floating(self) -> bool:
        return any(comp.floating for comp in self.comparators)

    def has_pre_release(self) -> bool:
        return any(comp.has_pre_release() for comp in self.comparators)

    def satisfies(self, version: Version) -> bool:
        return any(comp.satisfies(version) for comp in self.comparators)

    def allows_all(self, other: "Range") -> bool:
        return any(this.allows_all(that) for this in self.comparators for that in other.comparators)

    def allows_any(self, other: "Range") -> bool:
        return any(this.allows_any(that) for this in self.comparators for that in other.comparators)

    def intersect(self, other: "Range") -> Optional["Range"]:
        """Versions in both ranges, or None when they don't overlap."""
        sets = []
        for left in self.comparators:
            for right in other.comparators:
                overlap = left.intersect(right)
                if overlap is not None:
                    sets.append(overlap)
        return Range._from_sets(sets)

    def difference(self, other: "Range") -> Optional["Range"]:
        """Versions in this range but in none of ``other``'s intervals, or None."""
        remaining: List[ComparatorSet] = list(self.comparators)
        for removed in other.comparators:
            remaining = [piece for comp in remaining for piece in comp.difference(removed)]
        return Range._from_sets(remaining)

    def __str__(self) -> str:
        return "||".join(str(comp) for comp in self.comparators)
