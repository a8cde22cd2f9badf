"""Parser for version range constraints.

Supported expressions:
- exact and comparison operators: =1.2.3, >1.2.3, >=1.2, <2, <=2.0.0
- caret ranges ^x.y.z: the leftmost non-zero component is fixed
- tilde ranges ~x.y.z (also ~>x.y.z): the minor version is fixed
- plain partial versions with wildcards: 1, 1.2, 1.2.x, 1.*, *
- hyphen ranges: 1.2.3 - 2.3 (whitespace around the hyphen)
- NuGet interval notation: [1.0,2.0), (,1.0], [1.0,), [1.0]
- operator comparators separated by whitespace, all of which must hold:
  >=1.2 <1.5
- unions of any of the above joined with ||
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..errors import MAX_LENGTH, SemverError, SemverErrorKind, not_a_string
from ..range import MIN_PRE_RELEASE, Bound, ComparatorSet, Predicate
from ..version import Identifier, Version
from .cursor import Cursor

WILDCARDS = "xX*"

# Longest operators first so that ">=" isn't read as ">".
OPERATORS = (">=", "<=", "~>", ">", "<", "=", "^", "~")


@dataclass
class PartialVersion:
    """A version as written in a range, where trailing components may be missing.

    ``parts`` holds the numeric components written before the first
    wildcard or omission.
    """

    parts: List[int]
    wildcard: bool = False
    pre_release: Tuple[Identifier, ...] = field(default=())

    @property
    def is_any(self) -> bool:
        return not self.parts

    @property
    def is_exact(self) -> bool:
        return not self.wildcard and len(self.parts) >= 3

    def floor(self) -> Version:
        """Lowest version matched: missing components become 0."""
        padded = self.parts + [0] * (4 - len(self.parts))
        return Version(*padded, pre_release=self.pre_release)

    def bump(self, index: int) -> Version:
        """Increment the component at ``index``, zero the rest, add the minimal pre-release."""
        padded = self.parts[:index] + [self.parts[index] + 1]
        padded += [0] * (4 - len(padded))
        return Version(*padded, pre_release=MIN_PRE_RELEASE)

    def ceiling(self) -> Bound:
        """Exclusive upper bound just past everything this partial version matches."""
        if self.is_any:
            return Bound.upper()
        return Bound.upper(Predicate.excluding(self.bump(len(self.parts) - 1)))


def _including(version: Version) -> Predicate:
    return Predicate.including(version)


class RangeParser:
    """Recursive-descent parser producing one ComparatorSet per ``||`` branch."""

    def parse(self, text: str) -> List[ComparatorSet]:
        if not isinstance(text, str):
            raise SemverError(str(text), 0, SemverErrorKind.OTHER, not_a_string(text))
        if len(text) > MAX_LENGTH:
            raise SemverError(text, 0, SemverErrorKind.MAX_LENGTH)

        cursor = Cursor(text)
        cursor.skip_whitespace()
        sets = [self.comparators(cursor)]
        while True:
            mark = cursor.pos
            cursor.skip_whitespace()
            if not cursor.eat("||"):
                cursor.pos = mark
                break
            cursor.skip_whitespace()
            sets.append(self.comparators(cursor))

        cursor.skip_whitespace()
        if not cursor.at_end():
            raise cursor.error(SemverErrorKind.INVALID_COMPONENT, "range")
        return sets

    def comparators(self, cursor: Cursor) -> ComparatorSet:
        start = cursor.pos
        if cursor.peek() in ("[", "("):
            return self._build(cursor, start, *self.bracket_range(cursor))

        op = self.operator(cursor)
        if op is not None:
            lower, upper, floating = self.operator_range(op, self.operand(cursor))
            while True:
                mark = cursor.pos
                op = self.operator(cursor) if cursor.skip_whitespace() else None
                if op is None:
                    cursor.pos = mark
                    break
                more_lower, more_upper, more_floating = self.operator_range(op, self.operand(cursor))
                lower, upper = max(lower, more_lower), min(upper, more_upper)
                floating = floating or more_floating
            return self._build(cursor, start, lower, upper, floating)

        partial = self.partial_version(cursor)
        mark = cursor.pos
        if cursor.skip_whitespace() and cursor.eat("-"):
            cursor.skip_whitespace()
            upper = self.partial_version(cursor)
            return self._build(cursor, start, *self.hyphen_range(partial, upper))
        cursor.pos = mark
        return self._build(cursor, start, *self.plain_range(partial))

    def operator(self, cursor: Cursor) -> Optional[str]:
        for op in OPERATORS:
            if cursor.eat(op):
                return op
        return None

    def operand(self, cursor: Cursor) -> PartialVersion:
        cursor.skip_whitespace()
        return self.partial_version(cursor)

    def _build(self, cursor: Cursor, start: int, lower: Bound, upper: Bound, floating: bool) -> ComparatorSet:
        comparator = ComparatorSet.new(lower, upper, floating)
        if comparator is None:
            raise cursor.error(SemverErrorKind.INVALID_COMPONENT, "version range", offset=start)
        return comparator

    def partial_version(self, cursor: Cursor) -> PartialVersion:
        partial = PartialVersion(parts=[])
        components = 0
        while True:
            if cursor.peek() and cursor.peek() in WILDCARDS:
                cursor.pos += 1
                partial.wildcard = True
            elif cursor.peek().isdigit():
                value = cursor.number("version number or wildcard")
                if not partial.wildcard:
                    partial.parts.append(value)
            else:
                raise cursor.fail("version number or wildcard")
            components += 1
            if components == 4 or not cursor.eat("."):
                break

        # Build metadata is accepted but irrelevant to matching.
        partial.pre_release, _build = cursor.extras()
        return partial

    def operator_range(self, op: str, partial: PartialVersion) -> Tuple[Bound, Bound, bool]:
        base = partial.floor()
        if op == "=":
            if partial.wildcard:
                return self.plain_range(partial)
            return Bound.lower(_including(base)), Bound.upper(_including(base)), False
        if op == ">":
            return Bound.lower(Predicate.excluding(base)), Bound.upper(), True
        if op == ">=":
            return Bound.lower(_including(base)), Bound.upper(), True
        if op == "<":
            return Bound.lower(), Bound.upper(Predicate.excluding(base)), True
        if op == "<=":
            return Bound.lower(), Bound.upper(_including(base)), True
        if op == "^":
            return self.caret_range(partial)
        return self.tilde_range(partial)

    def caret_range(self, partial: PartialVersion) -> Tuple[Bound, Bound, bool]:
        lower = Bound.lower(_including(partial.floor()))
        if partial.is_any:
            return lower, Bound.upper(), True
        # Fix the leftmost non-zero of major/minor/patch; when every given
        # component is zero, fix the last one given.
        given = min(len(partial.parts), 3)
        fixed = next((i for i in range(given) if partial.parts[i] != 0), given - 1)
        return lower, Bound.upper(Predicate.excluding(partial.bump(fixed))), True

    def tilde_range(self, partial: PartialVersion) -> Tuple[Bound, Bound, bool]:
        lower = Bound.lower(_including(partial.floor()))
        if partial.is_any:
            return lower, Bound.upper(), True
        fixed = 0 if len(partial.parts) == 1 else 1
        return lower, Bound.upper(Predicate.excluding(partial.bump(fixed))), True

    def plain_range(self, partial: PartialVersion) -> Tuple[Bound, Bound, bool]:
        lower = Bound.lower(_including(partial.floor()))
        if partial.is_exact:
            return lower, Bound.upper(_including(partial.floor())), False
        return lower, partial.ceiling(), partial.wildcard

    def hyphen_range(self, low: PartialVersion, high: PartialVersion) -> Tuple[Bound, Bound, bool]:
        lower = Bound.lower(_including(low.floor()))
        if high.is_exact:
            upper = Bound.upper(_including(high.floor()))
        else:
            upper = high.ceiling()
        return lower, upper, low.wildcard or high.wildcard

    def bracket_range(self, cursor: Cursor) -> Tuple[Bound, Bound, bool]:
        opening = cursor.peek()
        cursor.pos += 1
        cursor.skip_whitespace()

        low: Optional[PartialVersion] = None
        high: Optional[PartialVersion] = None
        if cursor.peek() not in (",", "]", ")"):
            low = self.partial_version(cursor)
            cursor.skip_whitespace()
        comma = cursor.eat(",")
        cursor.skip_whitespace()
        if comma and cursor.peek() not in ("]", ")"):
            high = self.partial_version(cursor)
            cursor.skip_whitespace()

        closing = cursor.peek()
        if not closing or closing not in "])":
            raise cursor.fail("closing bracket")
        cursor.pos += 1

        if not comma and low is None:
            raise cursor.error(SemverErrorKind.INVALID_COMPONENT, "bracket range")

        floating = any(p is not None and p.wildcard for p in (low, high))
        if not comma:
            # "[1.2.3]" pins a single version, "[*]" allows everything.
            high = low

        lower = Bound.lower()
        if low is not None and not low.is_any:
            version = low.floor()
            lower = Bound.lower(_including(version) if opening == "[" else Predicate.excluding(version))
        upper = Bound.upper()
        if high is not None and not high.is_any:
            version = high.floor()
            upper = Bound.upper(_including(version) if closing == "]" else Predicate.excluding(version))
        return lower, upper, floating
