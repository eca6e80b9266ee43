from .base import BaseFetcher
from .probe import ProbeClient

__all__ = [
    "BaseFetcher",
    "ProbeClient",
]
