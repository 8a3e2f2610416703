"""Exception hierarchy for rootfs acquisition."""


class RootfetchError(Exception):
    """Base error for a failed acquisition run."""
    pass


class DefinitionError(RootfetchError):
    """Invalid image definition or unknown source backend."""
    pass


class TransportError(RootfetchError):
    """Network or HTTP failure that survived all retry attempts."""

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(f"Failed to GET {url!r}: {message}")


class ResolutionError(RootfetchError):
    """No matching build or artifact found on an index page."""
    pass


class TrustError(RootfetchError):
    """Base for verification failures. Never retried."""
    pass


class InsecureTransportError(TrustError):
    """Plain HTTP source without signing keys."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"GPG keys are required if downloading from HTTP ({url})")


class SignatureError(TrustError):
    """Detached or inline signature did not verify."""
    pass


class IntegrityError(TrustError):
    """Downloaded file does not match its checksum manifest entry."""
    pass


class ManifestError(RootfetchError):
    """Layer manifest missing or malformed."""
    pass


class UnpackError(RootfetchError):
    """Archive extraction failed."""
    pass


class CleanupError(RootfetchError):
    """One or more transient paths could not be removed."""

    def __init__(self, failures):
        self.failures = failures
        paths = ", ".join(str(path) for path, _ in failures)
        super().__init__(f"Failed to remove {paths}")


class CommandError(RootfetchError):
    """External tool exited with an error or timed out."""
    pass
