"""Resolve concrete builds and filenames from publisher index pages."""

import logging
import re
from typing import Optional

from rootfetch.errors import ResolutionError
from rootfetch.fetch.download import Downloader


logger = logging.getLogger(__name__)

# Fedora builds look like <yyyy><mm><dd>.<n> or <yyyy><mm><dd>.n.<n>
BUILD_PATTERN = re.compile(r"\d{8}\.(?:n\.)?\d")

STAGE_FORMATS = ("tar.xz", "tar.bz2")


def latest_build(body: str) -> str:
    """Return the newest date-stamped build identifier in body.

    Identifiers are zero padded, so the lexicographic maximum is the newest.
    """
    matches = BUILD_PATTERN.findall(body)
    if not matches:
        raise ResolutionError("Unable to find latest build")
    return sorted(matches)[-1]


def latest_service_release(body: str, release: str) -> str:
    """Return the newest <release>.<n> service release named in body."""
    pattern = re.compile(rf"{re.escape(release)}\.\d+")
    matches = pattern.findall(body)
    if not matches:
        raise ResolutionError(f"Unable to find a service release for {release!r}")
    return sorted(matches)[-1]


def stage_archive(body: str, arch: str, variant: Optional[str] = None) -> str:
    """Return the stage3 tarball name linked from an autobuilds index.

    xz archives are preferred over bz2. Within one format the first match in
    document order is returned.
    """
    prefix = f"stage3-{arch}-{variant}-" if variant else f"stage3-{arch}-"

    for fmt in STAGE_FORMATS:
        pattern = re.compile(rf'"{re.escape(prefix)}[^"]*\.{re.escape(fmt)}">')
        match = pattern.search(body)
        if match:
            return match.group(0).strip('<>"')

    raise ResolutionError(f"Failed to find a stage3 archive for {prefix.rstrip('-')}")


class VersionResolver:
    """Fetches index pages and applies a resolution rule to them."""

    def __init__(self, downloader: Downloader):
        """Initialize resolver."""
        self.downloader = downloader

    async def latest_build(self, index_url: str) -> str:
        """Newest build listed at index_url."""
        body = await self.downloader.get_text(index_url)
        try:
            build = latest_build(body)
        except ResolutionError as e:
            raise ResolutionError(f"{e} at {index_url!r}") from e
        logger.info(f"Resolved latest build {build} from {index_url}")
        return build

    async def latest_service_release(self, index_url: str, release: str) -> str:
        """Newest service release of release listed at index_url."""
        body = await self.downloader.get_text(index_url)
        try:
            resolved = latest_service_release(body, release)
        except ResolutionError as e:
            raise ResolutionError(f"{e} at {index_url!r}") from e
        logger.info(f"Resolved release {release} to {resolved}")
        return resolved

    async def stage_archive(self, index_url: str, arch: str, variant: Optional[str] = None) -> str:
        """Stage3 tarball name listed at index_url."""
        body = await self.downloader.get_text(index_url)
        try:
            fname = stage_archive(body, arch, variant)
        except ResolutionError as e:
            raise ResolutionError(f"{e} at {index_url!r}") from e
        logger.info(f"Resolved stage3 archive {fname}")
        return fname
