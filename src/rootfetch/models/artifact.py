"""Per-run artifact models."""

from typing import List
from pydantic import BaseModel, Field


class ResolvedArtifact(BaseModel):
    """A concrete file on the mirror."""
    filename: str
    url: str

    @classmethod
    def from_base(cls, base_url: str, filename: str) -> "ResolvedArtifact":
        """Build an artifact living directly below base_url."""
        return cls(filename=filename, url=f"{base_url.rstrip('/')}/{filename}")

    class Config:
        """Pydantic config."""
        frozen = True


class LayerDescriptor(BaseModel):
    """One image entry of a docker-save style manifest.json."""
    layers: List[str] = Field(default_factory=list, alias="Layers")
    config: str = Field(..., alias="Config")

    class Config:
        """Pydantic config."""
        extra = "ignore"
        frozen = True
