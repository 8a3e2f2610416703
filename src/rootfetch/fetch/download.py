"""HTTP downloads with retry and checksum verification."""

import asyncio
import hashlib
import logging
import re
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

import httpx

from rootfetch.errors import IntegrityError, TransportError
from rootfetch.models.config import RetryPolicy
from rootfetch.utils.retry import retry


logger = logging.getLogger(__name__)

_BSD_LINE = re.compile(r"^(?P<algo>[A-Za-z0-9-]+) \((?P<name>.+)\) = (?P<digest>[0-9a-fA-F]+)$")
_SECTION_HEADER = re.compile(r"^#\s*(?P<algo>[A-Za-z0-9-]+)\s+HASH\s*$", re.IGNORECASE)
_CHUNK_SIZE = 1024 * 1024


def url_filename(url: str) -> str:
    """Last path component of a URL."""
    return urlsplit(url).path.rsplit("/", 1)[-1]


def _algorithm_key(name: str) -> str:
    return name.lower().replace("-", "")


def find_checksum(content: str, filename: str, hash_algorithm: str) -> Optional[str]:
    """Find the digest for filename in a checksum manifest.

    Understands coreutils style ("<hex>  [*]<name>"), BSD style
    ("SHA256 (<name>) = <hex>") and multi-algorithm files such as Gentoo
    DIGESTS, where "# <ALGO> HASH" headers introduce one section per
    algorithm and only the section for hash_algorithm is searched.
    """
    digest_len = hashlib.new(hash_algorithm).digest_size * 2
    wanted = _algorithm_key(hash_algorithm)
    section = None

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        header = _SECTION_HEADER.match(line)
        if header:
            section = _algorithm_key(header.group("algo"))
            continue
        if line.startswith("#"):
            continue
        if section is not None and section != wanted:
            continue

        match = _BSD_LINE.match(line)
        if match:
            if _algorithm_key(match.group("algo")) != wanted:
                continue
            name = match.group("name")
            digest = match.group("digest")
        else:
            parts = line.split()
            if len(parts) < 2:
                continue
            digest = parts[0]
            name = parts[-1].lstrip("*")

        if url_filename(name) != filename:
            continue
        if len(digest) != digest_len or not re.fullmatch(r"[0-9a-fA-F]+", digest):
            continue
        return digest.lower()

    return None


def hash_file(path: Path, hash_algorithm: str) -> str:
    """Compute the hex digest of a file."""
    h = hashlib.new(hash_algorithm)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            h.update(chunk)
    return h.hexdigest()


class Downloader:
    """Fetches mirror files into a local cache directory."""

    def __init__(
        self,
        cache_dir: Path,
        policy: Optional[RetryPolicy] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize downloader."""
        self.cache_dir = Path(cache_dir)
        self.policy = policy or RetryPolicy()
        self._client = httpx.AsyncClient(
            transport=transport,
            timeout=timeout,
            follow_redirects=True,
        )

    async def __aenter__(self) -> "Downloader":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    def target_dir(self, url: str) -> Path:
        """Local directory for files downloaded from url's directory."""
        parent = url.rsplit("/", 1)[0]
        return self.cache_dir / "download" / hashlib.sha256(parent.encode()).hexdigest()[:16]

    async def _retrying(self, url: str, operation):
        try:
            return await retry(
                operation,
                self.policy,
                retry_on=(httpx.HTTPError,),
                description=f"GET {url}",
            )
        except httpx.HTTPStatusError as e:
            raise TransportError(url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise TransportError(url, str(e) or type(e).__name__) from e

    async def get_text(self, url: str) -> str:
        """GET a page body."""
        async def _get():
            response = await self._client.get(url)
            response.raise_for_status()
            return response.text

        return await self._retrying(url, _get)

    async def _download(self, url: str, dest: Path) -> None:
        partial = dest.with_name(dest.name + ".part")

        async def _stream():
            async with self._client.stream("GET", url) as response:
                response.raise_for_status()
                with open(partial, "wb") as f:
                    async for chunk in response.aiter_bytes(_CHUNK_SIZE):
                        f.write(chunk)

        try:
            await self._retrying(url, _stream)
        except TransportError:
            partial.unlink(missing_ok=True)
            raise
        partial.replace(dest)

    async def fetch(
        self,
        url: str,
        checksums: Optional[str] = None,
        hash_algorithm: Optional[str] = None,
    ) -> Path:
        """Download url and return the directory holding it.

        checksums is the text of an already trusted checksum manifest; it is
        never fetched here. With checksums and hash_algorithm the file is
        checked against its entry. A mismatch removes the file and raises
        IntegrityError; it is never retried.
        """
        filename = url_filename(url)
        target_dir = self.target_dir(url)
        await asyncio.to_thread(target_dir.mkdir, parents=True, exist_ok=True)
        dest = target_dir / filename

        expected = None
        if checksums is not None and hash_algorithm:
            expected = find_checksum(checksums, filename, hash_algorithm)
            if expected is None:
                raise IntegrityError(
                    f"No {hash_algorithm} checksum for {filename!r} in the checksum manifest"
                )

            if dest.exists():
                actual = await asyncio.to_thread(hash_file, dest, hash_algorithm)
                if actual == expected:
                    logger.debug(f"Using cached {dest}")
                    return target_dir

        logger.info(f"Downloading {url}")
        await self._download(url, dest)

        if expected is not None:
            actual = await asyncio.to_thread(hash_file, dest, hash_algorithm)
            if actual != expected:
                dest.unlink(missing_ok=True)
                raise IntegrityError(
                    f"Hash mismatch for {url!r}: expected {expected}, got {actual}"
                )
            logger.debug(f"Verified {hash_algorithm} of {filename}")

        return target_dir
