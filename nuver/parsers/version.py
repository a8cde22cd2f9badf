"""Parser for plain version strings."""

from typing import Tuple

from ..errors import MAX_LENGTH, SemverError, SemverErrorKind, not_a_string
from ..version import Version
from .cursor import Cursor


class VersionParser:
    """Parser for ``major[.minor[.patch[.revision]]][-pre][+build]``."""

    def parse(self, text: str) -> Version:
        if not isinstance(text, str):
            raise SemverError(str(text), 0, SemverErrorKind.OTHER, not_a_string(text))
        if len(text) > MAX_LENGTH:
            raise SemverError(text, 0, SemverErrorKind.MAX_LENGTH)

        cursor = Cursor(text)
        version = self.version(cursor)
        if not cursor.at_end():
            raise cursor.error(SemverErrorKind.INVALID_COMPONENT, "version")
        return version

    def version(self, cursor: Cursor) -> Version:
        major, minor, patch, revision = self.version_core(cursor)
        pre_release, build = cursor.extras()
        return Version(major, minor, patch, revision, pre_release, build)

    def version_core(self, cursor: Cursor) -> Tuple[int, int, int, int]:
        """Up to four dot-separated numbers; missing ones default to 0."""
        parts = [cursor.number("version core")]
        while len(parts) < 4 and cursor.eat("."):
            parts.append(cursor.number("version core"))
        parts.extend([0] * (4 - len(parts)))
        return parts[0], parts[1], parts[2], parts[3]
