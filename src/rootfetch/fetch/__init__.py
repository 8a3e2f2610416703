"""Acquisition pipeline building blocks."""

from rootfetch.fetch.assembler import CleanupSet, LayeredAssembler
from rootfetch.fetch.download import Downloader
from rootfetch.fetch.gpg import GPGVerifier
from rootfetch.fetch.resolver import VersionResolver
from rootfetch.fetch.trust import TrustChain, VerificationPolicy
from rootfetch.fetch.unpack import TarUnpacker

__all__ = [
    "CleanupSet",
    "Downloader",
    "GPGVerifier",
    "LayeredAssembler",
    "TarUnpacker",
    "TrustChain",
    "VerificationPolicy",
    "VersionResolver",
]
