"""Distribution source backends."""

from rootfetch.sources.base import BaseSource
from rootfetch.sources.registry import SourceRegistry

__all__ = [
    "BaseSource",
    "SourceRegistry",
]
