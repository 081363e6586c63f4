"""Domain-specific exceptions — framework-independent."""

from pathlib import Path


class ProviderError(Exception):
    """Raised when the remote embedding provider fails.

    Covers non-2xx responses, transport failures and malformed bodies.
    ``status_code`` is ``None`` when no HTTP response was received.
    """

    def __init__(self, provider: str, status_code: int | None, message: str):
        self.provider = provider
        self.status_code = status_code
        self.message = message
        super().__init__(f"[{provider}] {status_code}: {message}")


class DataSourceError(Exception):
    """Raised when team records cannot be read.

    For the records directory as a whole this is fatal to a build; for a
    single file the loader logs it and skips that file.
    """

    def __init__(self, path: str | Path, message: str):
        self.path = str(path)
        self.message = message
        super().__init__(f"{self.path}: {message}")


class CacheMismatchError(Exception):
    """Internal signal: a cache artifact cannot stand in for a fresh build."""

    def __init__(self, expected: str, found: str | None, reason: str = "fingerprint mismatch"):
        self.expected = expected
        self.found = found
        self.reason = reason
        super().__init__(f"{reason} (expected {expected}, found {found})")
