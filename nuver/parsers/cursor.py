"""Character cursor shared by the version and range parsers."""

from typing import List, Optional, Tuple

from ..errors import MAX_SAFE_INTEGER, MAX_U64, SemverError, SemverErrorKind
from ..version import Identifier

IDENTIFIER_CHARS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-")
WHITESPACE = frozenset(" \t\r\n")


class Cursor:
    """Forward-only scanner over an input string.

    Every error raised from here records the full input and the offset
    the cursor was at, so callers can point at the offending character.
    """

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self, size: int = 1) -> str:
        return self.text[self.pos:self.pos + size]

    def eat(self, token: str) -> bool:
        """Consume ``token`` if the input continues with it."""
        if self.text.startswith(token, self.pos):
            self.pos += len(token)
            return True
        return False

    def skip_whitespace(self) -> int:
        start = self.pos
        while not self.at_end() and self.text[self.pos] in WHITESPACE:
            self.pos += 1
        return self.pos - start

    def error(
        self,
        kind: SemverErrorKind,
        detail: object = None,
        offset: Optional[int] = None,
    ) -> SemverError:
        return SemverError(self.text, self.pos if offset is None else offset, kind, detail)

    def fail(self, component: str) -> SemverError:
        """Error for a missing ``component``: incomplete at end of input, invalid otherwise."""
        if self.at_end():
            return self.error(SemverErrorKind.INCOMPLETE_INPUT, offset=max(len(self.text) - 1, 0))
        return self.error(SemverErrorKind.INVALID_COMPONENT, component)

    def number(self, component: str) -> int:
        start = self.pos
        while not self.at_end() and self.text[self.pos] in "0123456789":
            self.pos += 1
        raw = self.text[start:self.pos]
        if not raw:
            raise self.fail(component)

        value = int(raw)
        if value > MAX_U64:
            raise self.error(
                SemverErrorKind.INTEGER_PARSE,
                f"{raw} does not fit in an unsigned 64-bit integer",
                offset=start,
            )
        if value > MAX_SAFE_INTEGER:
            raise self.error(SemverErrorKind.INTEGER_TOO_LARGE, value, offset=start)
        return value

    def identifiers(self, component: str) -> Tuple[Identifier, ...]:
        """Parse a dot-separated list of ``[A-Za-z0-9-]+`` tokens."""
        parts: List[Identifier] = []
        while True:
            start = self.pos
            while not self.at_end() and self.text[self.pos] in IDENTIFIER_CHARS:
                self.pos += 1
            if self.pos == start:
                raise self.fail(component)
            parts.append(Identifier.parse(self.text[start:self.pos]))
            if not self.eat("."):
                return tuple(parts)

    def extras(self) -> Tuple[Tuple[Identifier, ...], Tuple[Identifier, ...]]:
        """Parse the optional ``-pre.release`` and ``+build`` suffixes."""
        pre_release: Tuple[Identifier, ...] = ()
        build: Tuple[Identifier, ...] = ()
        if self.eat("-"):
            pre_release = self.identifiers("pre-release")
        if self.eat("+"):
            build = self.identifiers("build")
        return pre_release, build
