"""Decide whether a download may proceed and verify checksum manifests."""

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

from rootfetch.errors import InsecureTransportError, SignatureError
from rootfetch.fetch.download import Downloader, url_filename
from rootfetch.fetch.gpg import GPGVerifier
from rootfetch.models.source import SourceConfig


logger = logging.getLogger(__name__)


_SIGNED_MESSAGE = "-----BEGIN PGP SIGNED MESSAGE-----"
_SIGNATURE = "-----BEGIN PGP SIGNATURE-----"


def _read_text(path: Path) -> str:
    return path.read_text(errors="replace")


def clearsigned_body(text: str, name: str = "message") -> str:
    """Extract the signed text of a clearsigned message.

    Exactly one signed block is accepted. Armor headers are dropped and
    dash-escaped lines are restored.
    """
    lines = [line.rstrip() for line in text.splitlines()]
    if lines.count(_SIGNED_MESSAGE) != 1:
        raise SignatureError(f"Expected one clearsigned block in {name!r}")

    index = lines.index(_SIGNED_MESSAGE) + 1
    # Armor headers such as "Hash: SHA512" end at the first blank line
    while index < len(lines) and lines[index]:
        index += 1

    body = []
    for line in lines[index + 1:]:
        if line == _SIGNATURE:
            return "\n".join(body) + "\n"
        body.append(line[2:] if line.startswith("- ") else line)

    raise SignatureError(f"Unterminated clearsigned block in {name!r}")


class VerificationPolicy(Enum):
    """How an artifact earns trust."""
    SKIP = "skip"
    TRANSPORT = "transport"
    SIGNATURE = "signature"


def verification_policy(source: SourceConfig) -> VerificationPolicy:
    """Derive the policy from the source configuration."""
    if source.skip_verification:
        return VerificationPolicy.SKIP
    if not source.keys:
        return VerificationPolicy.TRANSPORT
    return VerificationPolicy.SIGNATURE


class TrustChain:
    """Trust establishment for one independently verified artifact.

    Backends that fetch more than one trusted artifact create one chain per
    artifact.
    """

    def __init__(self, source: SourceConfig, downloader: Downloader, verifier: GPGVerifier):
        """Initialize trust chain."""
        self.source = source
        self.downloader = downloader
        self.verifier = verifier

    @property
    def policy(self) -> VerificationPolicy:
        """Policy in effect for this chain."""
        return verification_policy(self.source)

    def check_transport(self, url: str) -> None:
        """Refuse plain HTTP when there are no keys to fall back on."""
        if self.policy != VerificationPolicy.TRANSPORT:
            return
        if urlsplit(url).scheme != "https":
            raise InsecureTransportError(url)
        logger.debug(f"Trusting HTTPS transport for {url}")

    async def establish(
        self,
        url: str,
        manifest_url: Optional[str] = None,
        signature_url: Optional[str] = None,
    ) -> Optional[str]:
        """Run the trust sequence for url before it is downloaded.

        Returns the verified checksum manifest text to check url against, or
        None when the policy does not call for one.
        """
        self.check_transport(url)
        if manifest_url is None:
            return None
        if signature_url is None:
            return await self.verify_clearsigned(manifest_url)
        return await self.verify_manifest(manifest_url, signature_url)

    async def verify_manifest(self, manifest_url: str, signature_url: str) -> Optional[str]:
        """Download a checksum manifest and its detached signature and verify.

        Returns the contents of the copy that was verified.
        """
        if self.policy != VerificationPolicy.SIGNATURE:
            return None

        sig_dir = await self.downloader.fetch(signature_url)
        manifest_dir = await self.downloader.fetch(manifest_url)

        manifest_path = manifest_dir / url_filename(manifest_url)
        signature_path = sig_dir / url_filename(signature_url)
        if not await self.verifier.verify(manifest_path, signature_path):
            raise SignatureError(f"Invalid signature for {url_filename(manifest_url)!r}")

        logger.info(f"Verified signature of {manifest_url}")
        return await asyncio.to_thread(_read_text, manifest_path)

    async def verify_clearsigned(self, signed_url: str) -> Optional[str]:
        """Download a clearsigned checksum manifest and verify it.

        Returns only the signed body, so text outside the signed block is
        never used.
        """
        if self.policy != VerificationPolicy.SIGNATURE:
            return None

        signed_dir = await self.downloader.fetch(signed_url)
        signed_path = signed_dir / url_filename(signed_url)
        text = await asyncio.to_thread(_read_text, signed_path)
        body = clearsigned_body(text, url_filename(signed_url))

        if not await self.verifier.verify(signed_path):
            raise SignatureError(f"Invalid signature for {url_filename(signed_url)!r}")

        logger.info(f"Verified signature of {signed_url}")
        return body

    async def verify_artifact(self, artifact: Path, signature_url: str) -> None:
        """Verify a detached signature made directly over a downloaded file."""
        if self.policy != VerificationPolicy.SIGNATURE:
            return

        sig_dir = await self.downloader.fetch(signature_url)
        signature_path = sig_dir / url_filename(signature_url)
        if not await self.verifier.verify(artifact, signature_path):
            raise SignatureError(f"Invalid signature for {artifact.name!r}")

        logger.info(f"Verified signature of {artifact.name}")
