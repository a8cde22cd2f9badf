"""Pick the best version out of a list of candidates for a range."""

import logging
from typing import Iterable, List, Optional

from .range import Range
from .version import Version

logger = logging.getLogger(__name__)


class VersionPicker:
    """Chooses one version out of what a registry offers.

    Floating ranges (wildcards, caret, tilde and open comparisons) take
    the highest match; pinned ones take the lowest. Pre-releases are only
    considered when the range itself mentions one.
    """

    def __init__(self, force_floating: bool = False):
        self.force_floating = force_floating

    def candidates(self, range_: Range, versions: Iterable[Version]) -> List[Version]:
        """Sorted candidates the range is allowed to consider."""
        allow_pre = range_.has_pre_release()
        return sorted(v for v in versions if allow_pre or not v.is_prerelease)

    def pick(self, range_: Range, versions: Iterable[Version]) -> Optional[Version]:
        ordered = self.candidates(range_, versions)
        if self.force_floating or range_.is_floating():
            ordered.reverse()

        for version in ordered:
            if range_.satisfies(version):
                logger.debug(f"Picked {version} for {range_}")
                return version

        logger.debug(f"No version out of {len(ordered)} candidates satisfies {range_}")
        return None


def pick_version(range_: Range, versions: Iterable[Version]) -> Optional[Version]:
    return VersionPicker().pick(range_, versions)
