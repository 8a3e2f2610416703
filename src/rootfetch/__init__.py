"""
rootfetch - bootstrap a rootfs from upstream distribution artifacts.

Resolves the artifact to download from a publisher's index, establishes
trust through signatures, checksums or HTTPS, and unpacks the result
(flattening layered container images) into a directory tree.
"""

__version__ = "1.0.0"

# Re-export key components for easier access
from rootfetch.models.config import FetchSettings
from rootfetch.models.source import ImageConfig, ImageDefinition, SourceConfig
from rootfetch.pipeline import acquire

__all__ = [
    "FetchSettings",
    "ImageConfig",
    "ImageDefinition",
    "SourceConfig",
    "acquire",
]
