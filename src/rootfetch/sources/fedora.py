"""Fedora container base image source."""

import logging
from pathlib import Path

from rootfetch.fetch.assembler import LayeredAssembler
from rootfetch.models.artifact import ResolvedArtifact
from rootfetch.sources.base import BaseSource


logger = logging.getLogger(__name__)


class FedoraSource(BaseSource):
    """Downloads Fedora-Container-Base and flattens its layers."""

    @property
    def base_url(self) -> str:
        return f"{self.source.url}/packages/Fedora-Container-Base"

    async def resolve(self) -> ResolvedArtifact:
        """Find the latest build of the release on the Koji package index."""
        release = self.image.release
        build = await self.resolver.latest_build(f"{self.base_url}/{release}")

        fname = (
            f"Fedora-Container-Base-{release}-{build}."
            f"{self.image.architecture_mapped}.tar.xz"
        )
        return ResolvedArtifact(
            filename=fname,
            url=f"{self.base_url}/{release}/{build}/images/{fname}",
        )

    async def assemble(self, archive: Path) -> None:
        """Unpack the base image, then the layers its manifest lists."""
        await LayeredAssembler(self.unpacker).assemble(archive, self.rootfs_dir)
