"""End-to-end acquisition of one rootfs."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import httpx

from rootfetch.fetch.download import Downloader
from rootfetch.fetch.gpg import GPGVerifier
from rootfetch.fetch.unpack import TarUnpacker
from rootfetch.models.config import FetchSettings
from rootfetch.models.source import ImageDefinition
from rootfetch.sources import SourceRegistry


logger = logging.getLogger(__name__)


async def acquire(
    definition: ImageDefinition,
    rootfs_dir: Path,
    settings: Optional[FetchSettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> None:
    """Download, verify and unpack the rootfs described by definition."""
    settings = settings or FetchSettings()
    rootfs_dir = Path(rootfs_dir)

    registry = SourceRegistry()
    # Fail on an unknown backend before touching the network
    registry.get_source_class(definition.source.downloader)

    await asyncio.to_thread(rootfs_dir.mkdir, parents=True, exist_ok=True)

    verifier = GPGVerifier(
        definition.source.keys,
        definition.source.keyserver,
        gpg_binary=settings.gpg_binary,
    )
    unpacker = TarUnpacker(settings.tar_binary)

    async with Downloader(
        Path(settings.cache_dir),
        policy=settings.retry,
        timeout=settings.timeout,
        transport=transport,
    ) as downloader:
        source = registry.create(definition, rootfs_dir, downloader, unpacker, verifier)
        logger.info(
            f"Acquiring {definition.image.distribution} {definition.image.release} "
            f"({definition.image.architecture_mapped}) into {rootfs_dir}"
        )
        await source.run()

    logger.info(f"Rootfs ready at {rootfs_dir}")
