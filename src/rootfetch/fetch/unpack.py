"""Archive extraction."""

import asyncio
import logging
from pathlib import Path

from rootfetch.errors import UnpackError
from rootfetch.utils.command import run_command


logger = logging.getLogger(__name__)


class TarUnpacker:
    """Extracts tarballs with the system tar, which detects compression."""

    def __init__(self, tar_binary: str = "tar"):
        """Initialize unpacker."""
        self.tar_binary = tar_binary

    async def unpack(self, archive: Path, dest: Path) -> None:
        """Extract archive into dest, creating dest if needed."""
        archive = Path(archive)
        dest = Path(dest)

        if not await asyncio.to_thread(archive.is_file):
            raise UnpackError(f"Failed to unpack {str(archive)!r}: no such file")

        await asyncio.to_thread(dest.mkdir, parents=True, exist_ok=True)

        cmd = [
            self.tar_binary,
            "--extract",
            "--file", str(archive),
            "--directory", str(dest),
            "--numeric-owner",
            "--xattrs",
            "--xattrs-include=*",
        ]
        await run_command(
            cmd,
            timeout=3600,
            error=UnpackError,
            failure=f"Failed to unpack {str(archive)!r}",
        )

        logger.debug(f"Unpacked {archive} into {dest}")
