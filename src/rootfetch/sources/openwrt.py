"""OpenWrt rootfs source."""

import re
from typing import Optional, Tuple

from rootfetch.models.artifact import ResolvedArtifact
from rootfetch.sources.base import BaseSource


class OpenWrtSource(BaseSource):
    """Downloads the generic rootfs tarball of an OpenWrt target.

    The mapped architecture is spelled <target>_<subtarget>, e.g. x86_64 or
    armvirt_32. A release given as major.minor is resolved to its newest
    service release; "snapshot" selects the snapshot tree.
    """

    hash_algorithm = "sha256"

    @property
    def target(self) -> Tuple[str, str]:
        target, _, subtarget = self.image.architecture_mapped.partition("_")
        return target, subtarget or "generic"

    async def resolve_release(self) -> Optional[str]:
        """Concrete release, or None for snapshots."""
        release = self.image.release
        if release == "snapshot":
            return None
        if re.fullmatch(r"\d+\.\d+", release):
            return await self.resolver.latest_service_release(
                f"{self.source.url}/releases/", release
            )
        return release

    async def resolve(self) -> ResolvedArtifact:
        """Build the rootfs URL for the target."""
        release = await self.resolve_release()
        target, subtarget = self.target

        if release is None:
            base_url = f"{self.source.url}/snapshots/targets/{target}/{subtarget}"
            fname = f"openwrt-{target}-{subtarget}-rootfs.tar.gz"
        else:
            base_url = f"{self.source.url}/releases/{release}/targets/{target}/{subtarget}"
            fname = f"openwrt-{release}-{target}-{subtarget}-rootfs.tar.gz"

        return ResolvedArtifact.from_base(base_url, fname)

    def checksum_urls(self, artifact: ResolvedArtifact) -> Tuple[Optional[str], Optional[str]]:
        """sha256sums and its detached signature live beside the image."""
        base_url = artifact.url.rsplit("/", 1)[0]
        return f"{base_url}/sha256sums", f"{base_url}/sha256sums.asc"
