"""ALT Linux cloud rootfs source."""

from typing import Optional, Tuple

from rootfetch.models.artifact import ResolvedArtifact
from rootfetch.sources.base import BaseSource


class AltLinuxSource(BaseSource):
    """Downloads the systemd cloud rootfs tarball of an ALT release."""

    hash_algorithm = "sha256"

    @property
    def arch(self) -> str:
        arch = self.image.architecture_mapped
        if arch == "armhf":
            return "armh"
        return arch

    @property
    def base_url(self) -> str:
        return f"{self.source.url}/{self.image.release}/cloud/{self.arch}"

    async def resolve(self) -> ResolvedArtifact:
        """Build the tarball name from release and architecture."""
        fname = f"alt-{self.image.release.lower()}-rootfs-systemd-{self.arch}.tar.xz"
        return ResolvedArtifact.from_base(self.base_url, fname)

    def checksum_urls(self, artifact: ResolvedArtifact) -> Tuple[Optional[str], Optional[str]]:
        """SHA256SUMS with a detached signature next to the tarball."""
        return f"{self.base_url}/SHA256SUMS", f"{self.base_url}/SHA256SUMS.gpg"
