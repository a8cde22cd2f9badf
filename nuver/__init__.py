"""nuver: NuGet version ranges and a small read-only registry client."""

__version__ = "0.3.0"
