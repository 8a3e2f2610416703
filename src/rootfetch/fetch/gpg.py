"""Detached and inline GPG signature verification."""

import logging
import tempfile
from pathlib import Path
from typing import List, Optional

from rootfetch.errors import SignatureError
from rootfetch.utils.command import run_command


logger = logging.getLogger(__name__)


class GPGVerifier:
    """Verifies signatures against a keyring built from key fingerprints.

    Each call works in a throwaway GNUPGHOME so the operator's keyring is
    never consulted or modified.
    """

    def __init__(self, keys: List[str], keyserver: str, gpg_binary: str = "gpg"):
        """Initialize verifier."""
        self.keys = list(keys)
        self.keyserver = keyserver
        self.gpg_binary = gpg_binary

    async def _import_keys(self, homedir: str) -> None:
        if not self.keys:
            raise SignatureError("No signing keys configured")

        cmd = [
            self.gpg_binary, "--homedir", homedir, "--batch",
            "--keyserver", self.keyserver, "--recv-keys", *self.keys,
        ]
        await run_command(
            cmd,
            timeout=120,
            error=SignatureError,
            failure=f"Failed to import keys {', '.join(self.keys)} from {self.keyserver}",
        )

    async def verify(self, data_path: Path, signature_path: Optional[Path] = None) -> bool:
        """Return True if the signature over data_path is valid.

        Without signature_path, data_path is treated as a clearsigned file.
        """
        with tempfile.TemporaryDirectory(prefix="rootfetch-gpg-") as homedir:
            await self._import_keys(homedir)

            cmd = [self.gpg_binary, "--homedir", homedir, "--batch", "--verify"]
            if signature_path is not None:
                cmd += [str(signature_path), str(data_path)]
            else:
                cmd.append(str(data_path))

            result = await run_command(cmd, check=False, error=SignatureError)

        if result.returncode != 0:
            logger.debug(f"gpg --verify {data_path} failed: {result.stderr.strip()}")
            return False

        return True
