"""Base source interface."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Tuple

from rootfetch.fetch.download import Downloader
from rootfetch.fetch.gpg import GPGVerifier
from rootfetch.fetch.resolver import VersionResolver
from rootfetch.fetch.trust import TrustChain
from rootfetch.fetch.unpack import TarUnpacker
from rootfetch.models.artifact import ResolvedArtifact
from rootfetch.models.source import ImageDefinition


logger = logging.getLogger(__name__)


class BaseSource(ABC):
    """Base interface that every distribution source implements.

    A run resolves the artifact, establishes trust and downloads it, then
    assembles the rootfs from it.
    """

    # Digest used with the checksum manifest, if the publisher has one
    hash_algorithm: Optional[str] = None

    def __init__(
        self,
        definition: ImageDefinition,
        rootfs_dir: Path,
        downloader: Downloader,
        unpacker: TarUnpacker,
        verifier: GPGVerifier,
    ):
        """Initialize source."""
        self.definition = definition
        self.rootfs_dir = Path(rootfs_dir)
        self.downloader = downloader
        self.unpacker = unpacker
        self.verifier = verifier
        self.resolver = VersionResolver(downloader)

    @property
    def image(self):
        return self.definition.image

    @property
    def source(self):
        return self.definition.source

    def trust_chain(self) -> TrustChain:
        """New trust chain for one independently verified artifact."""
        return TrustChain(self.source, self.downloader, self.verifier)

    @abstractmethod
    async def resolve(self) -> ResolvedArtifact:
        """Work out which file to download."""
        pass

    def checksum_urls(self, artifact: ResolvedArtifact) -> Tuple[Optional[str], Optional[str]]:
        """Checksum manifest and detached signature URLs for artifact."""
        return None, None

    async def verify_and_fetch(self, artifact: ResolvedArtifact) -> Path:
        """Establish trust, download and return the local file."""
        manifest_url, signature_url = self.checksum_urls(artifact)
        checksums = await self.trust_chain().establish(
            artifact.url, manifest_url, signature_url
        )

        fpath = await self.downloader.fetch(
            artifact.url,
            checksums,
            self.hash_algorithm if checksums is not None else None,
        )
        return fpath / artifact.filename

    async def assemble(self, archive: Path) -> None:
        """Unpack the downloaded archive into the rootfs."""
        logger.info(f"Unpacking image {archive}")
        await self.unpacker.unpack(archive, self.rootfs_dir)

    async def run(self) -> None:
        """Acquire the rootfs."""
        artifact = await self.resolve()
        archive = await self.verify_and_fetch(artifact)
        await self.assemble(archive)
