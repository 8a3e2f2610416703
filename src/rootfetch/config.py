"""Loading of image definitions and fetch settings."""

import asyncio
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError
from pydantic import ValidationError

from rootfetch.errors import DefinitionError
from rootfetch.models.config import FetchSettings
from rootfetch.models.source import ImageDefinition


logger = logging.getLogger(__name__)

CACHE_DIR_ENV = "ROOTFETCH_CACHE_DIR"


class DefinitionLoader:
    """Reads YAML image definitions and settings files."""

    def __init__(self):
        """Initialize loader."""
        self.yaml = YAML(typ="safe")

    async def load_definition(self, path: Path) -> ImageDefinition:
        """Load and validate an image definition."""
        path = Path(path)
        data = await self._read_yaml(path)

        try:
            definition = ImageDefinition(**data)
        except ValidationError as e:
            raise DefinitionError(f"Invalid image definition {path}: {e}") from e

        logger.debug(
            f"Loaded definition {path}: {definition.image.distribution} "
            f"{definition.image.release} ({definition.source.downloader})"
        )
        return definition

    async def load_settings(
        self,
        path: Optional[Path] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> FetchSettings:
        """Load fetch settings, then apply environment and explicit overrides."""
        data: Dict[str, Any] = {}
        if path is not None:
            document = await self._read_yaml(Path(path))
            data = dict(document.get("fetch") or {})

        cache_dir = os.environ.get(CACHE_DIR_ENV)
        if cache_dir:
            data["cache_dir"] = cache_dir
        data.update(overrides or {})

        try:
            return FetchSettings(**data)
        except ValidationError as e:
            raise DefinitionError(f"Invalid settings {path}: {e}") from e

    async def _read_yaml(self, file_path: Path) -> Dict[str, Any]:
        """Read and parse a YAML mapping."""
        try:
            content = await asyncio.to_thread(file_path.read_text)
        except OSError as e:
            raise DefinitionError(f"Failed to read {file_path}: {e}") from e

        try:
            data = self.yaml.load(content)
        except YAMLError as e:
            raise DefinitionError(f"Failed to parse {file_path}: {e}") from e

        if not isinstance(data, dict):
            raise DefinitionError(f"Expected a mapping in {file_path}")
        return data
