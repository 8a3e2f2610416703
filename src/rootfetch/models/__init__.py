"""Pydantic models for definitions, settings and artifacts."""

from rootfetch.models.artifact import LayerDescriptor, ResolvedArtifact
from rootfetch.models.config import FetchSettings, RetryPolicy
from rootfetch.models.source import ImageConfig, ImageDefinition, SourceConfig

__all__ = [
    "FetchSettings",
    "ImageConfig",
    "ImageDefinition",
    "LayerDescriptor",
    "ResolvedArtifact",
    "RetryPolicy",
    "SourceConfig",
]
