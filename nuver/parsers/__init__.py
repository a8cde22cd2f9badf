"""Hand-written parsers for versions, ranges and package specs."""

from .package_spec import PackageSpecParser
from .range import RangeParser
from .version import VersionParser

__all__ = ["PackageSpecParser", "RangeParser", "VersionParser"]
