"""Gentoo stage3 source."""

import asyncio
import logging
from pathlib import Path

from rootfetch.errors import RootfetchError
from rootfetch.fetch.assembler import remove_paths
from rootfetch.fetch.trust import VerificationPolicy
from rootfetch.models.artifact import ResolvedArtifact
from rootfetch.sources.base import BaseSource


logger = logging.getLogger(__name__)

PORTAGE_SNAPSHOT = "portage-latest.tar.xz"


def top_level_arch(arch: str) -> str:
    """Architecture family directory used on the Gentoo mirrors."""
    if arch == "i686":
        return "x86"
    if arch.startswith("arm") and arch != "arm64":
        return "arm"
    if arch.startswith("ppc"):
        return "ppc"
    if arch.startswith("s390"):
        return "s390"
    return arch


class GentooSource(BaseSource):
    """Downloads a stage3 tarball plus a portage tree snapshot."""

    hash_algorithm = "sha512"

    @property
    def base_url(self) -> str:
        arch = self.image.architecture_mapped
        current = f"current-stage3-{arch}"
        if self.source.variant:
            current = f"{current}-{self.source.variant}"
        return f"{self.source.url}/releases/{top_level_arch(arch)}/autobuilds/{current}"

    async def resolve(self) -> ResolvedArtifact:
        """Pick the stage3 tarball from the autobuilds index."""
        fname = await self.resolver.stage_archive(
            self.base_url, self.image.architecture_mapped, self.source.variant
        )
        return ResolvedArtifact.from_base(self.base_url, fname)

    async def verify_and_fetch(self, artifact: ResolvedArtifact) -> Path:
        """Check the tarball against its DIGESTS file.

        With keys the clearsigned DIGESTS.asc is verified and used; over
        HTTPS without keys the plain DIGESTS file is used.
        """
        chain = self.trust_chain()
        checksums = await chain.establish(artifact.url, f"{artifact.url}.DIGESTS.asc")
        if chain.policy == VerificationPolicy.TRANSPORT:
            checksums = await self.downloader.get_text(f"{artifact.url}.DIGESTS")

        fpath = await self.downloader.fetch(
            artifact.url,
            checksums,
            self.hash_algorithm if checksums is not None else None,
        )
        return fpath / artifact.filename

    async def assemble(self, archive: Path) -> None:
        """Unpack the stage3, then install the portage tree."""
        await super().assemble(archive)
        await self.install_portage_snapshot()

    async def install_portage_snapshot(self) -> None:
        """Fetch the portage snapshot so the rootfs needs no emerge --sync."""
        url = f"{self.source.url}/snapshots/{PORTAGE_SNAPSHOT}"

        chain = self.trust_chain()
        chain.check_transport(url)
        fpath = await self.downloader.fetch(url)
        archive = fpath / PORTAGE_SNAPSHOT
        await chain.verify_artifact(archive, f"{url}.gpgsig")

        repos_dir = self.rootfs_dir / "var" / "db" / "repos"
        logger.info(f"Unpacking image {archive}")
        await self.unpacker.unpack(archive, repos_dir)
        await asyncio.to_thread(self._replace_repository, repos_dir)

    @staticmethod
    def _replace_repository(repos_dir: Path) -> None:
        gentoo = repos_dir / "gentoo"
        portage = repos_dir / "portage"

        remove_paths([gentoo])
        try:
            portage.rename(gentoo)
        except OSError as e:
            raise RootfetchError(f"Failed to rename {str(portage)!r}: {e}") from e
