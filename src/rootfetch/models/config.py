"""Configuration models."""

from pydantic import BaseModel, Field, validator


class RetryPolicy(BaseModel):
    """Bounded retry for transport operations."""
    attempts: int = Field(default=3, ge=1)
    delay: float = Field(default=0.0, ge=0)

    class Config:
        """Pydantic config."""
        frozen = True


class FetchSettings(BaseModel):
    """Runtime settings for an acquisition run."""
    cache_dir: str = Field(default="./cache")
    log_level: str = Field(default="INFO")
    timeout: float = Field(default=60.0, gt=0)
    retry: RetryPolicy = Field(default_factory=RetryPolicy)
    gpg_binary: str = Field(default="gpg")
    tar_binary: str = Field(default="tar")

    @validator("log_level")
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    class Config:
        """Pydantic config."""
        extra = "ignore"
