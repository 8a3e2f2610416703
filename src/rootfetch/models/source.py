"""Image definition models."""

from typing import List, Optional
from pydantic import BaseModel, Field, root_validator, validator


class ImageConfig(BaseModel):
    """What to build: distribution, release and architecture."""
    distribution: str = Field(..., description="Distribution name")
    release: str = Field(..., description="Release identifier")
    architecture: str = Field(..., description="Host architecture name")
    architecture_mapped: Optional[str] = Field(
        None, description="Architecture as the publisher spells it"
    )
    variant: str = Field(default="default")

    @root_validator(pre=True)
    def default_mapped_architecture(cls, values):
        """Fall back to the plain architecture name."""
        if not values.get("architecture_mapped"):
            values = dict(values)
            values["architecture_mapped"] = values.get("architecture")
        return values

    @validator("release", pre=True)
    def stringify_release(cls, v):
        # release: 39 arrives as an int
        return str(v) if isinstance(v, (int, float)) else v

    class Config:
        """Pydantic config."""
        extra = "ignore"
        frozen = True


class SourceConfig(BaseModel):
    """Where to fetch from and how to trust it."""
    downloader: str = Field(..., description="Source backend name")
    url: str = Field(..., description="Publisher base URL")
    keys: List[str] = Field(default_factory=list, description="Trusted GPG key fingerprints")
    keyserver: str = Field(default="hkps://keyserver.ubuntu.com")
    variant: Optional[str] = Field(None, description="Publisher-specific flavour")
    skip_verification: bool = Field(default=False)

    @validator("url")
    def strip_trailing_slash(cls, v):
        """Normalize the base URL."""
        if "://" not in v:
            raise ValueError(f"URL must include a scheme: {v}")
        return v.rstrip("/")

    @validator("keys", pre=True)
    def stringify_keys(cls, v):
        """YAML may hand all-digit fingerprints over as integers."""
        if v is None:
            return []
        return [str(key) for key in v]

    class Config:
        """Pydantic config."""
        extra = "ignore"
        frozen = True


class ImageDefinition(BaseModel):
    """Top-level image definition document."""
    image: ImageConfig
    source: SourceConfig

    class Config:
        """Pydantic config."""
        extra = "ignore"
