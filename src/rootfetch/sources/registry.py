"""Source registry mapping downloader names to implementations."""

import logging
from pathlib import Path
from typing import Dict, Type

from rootfetch.errors import DefinitionError
from rootfetch.fetch.download import Downloader
from rootfetch.fetch.gpg import GPGVerifier
from rootfetch.fetch.unpack import TarUnpacker
from rootfetch.models.source import ImageDefinition
from rootfetch.sources.altlinux import AltLinuxSource
from rootfetch.sources.base import BaseSource
from rootfetch.sources.fedora import FedoraSource
from rootfetch.sources.gentoo import GentooSource
from rootfetch.sources.openwrt import OpenWrtSource


logger = logging.getLogger(__name__)


class SourceRegistry:
    """Registry for selecting a source backend once per run."""

    def __init__(self):
        """Initialize source registry."""
        self._source_classes: Dict[str, Type[BaseSource]] = {
            "altlinux-http": AltLinuxSource,
            "fedora-http": FedoraSource,
            "gentoo-http": GentooSource,
            "openwrt-http": OpenWrtSource,
        }

    def get_source_class(self, name: str) -> Type[BaseSource]:
        """Look up a backend class by downloader name."""
        try:
            return self._source_classes[name]
        except KeyError:
            raise DefinitionError(
                f"Unsupported source downloader {name!r}, "
                f"expected one of: {', '.join(self.list_sources())}"
            ) from None

    def create(
        self,
        definition: ImageDefinition,
        rootfs_dir: Path,
        downloader: Downloader,
        unpacker: TarUnpacker,
        verifier: GPGVerifier,
    ) -> BaseSource:
        """Instantiate the backend named by the definition."""
        source_class = self.get_source_class(definition.source.downloader)
        logger.debug(f"Using source {source_class.__name__} for {definition.source.downloader}")
        return source_class(definition, rootfs_dir, downloader, unpacker, verifier)

    def list_sources(self) -> list[str]:
        """List available downloader names."""
        return sorted(self._source_classes)
