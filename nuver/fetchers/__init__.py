from .base import BaseFetcher
from .nuget import NuGetClient, NuGetEndpoints

__all__ = [
    "BaseFetcher",
    "NuGetClient",
    "NuGetEndpoints",
]
