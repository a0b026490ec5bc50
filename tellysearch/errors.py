"""Exception taxonomy for the detail cache."""

from __future__ import annotations


class CacheError(Exception):
    """Base class for detail cache failures."""


class InvalidKeyError(CacheError, ValueError):
    """Raised when a caller-constructed cache key is malformed."""

    def __init__(self, key: object, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid cache key {key!r}: {reason}")


class DecodeError(CacheError):
    """Raised when cached or fetched bytes do not decode to a detail record."""


class DiskIOError(CacheError):
    """Raised when the disk tier cannot read or write a record."""

    def __init__(self, message: str, *, path: object | None = None) -> None:
        self.path = path
        super().__init__(message)


class NetworkFetchError(CacheError):
    """Raised when a detail could not be fetched from the network."""

    def __init__(
        self, key: str, message: str, *, status_code: int | None = None
    ) -> None:
        self.key = key
        self.status_code = status_code
        super().__init__(f"Failed to fetch {key}: {message}")


__all__ = [
    "CacheError",
    "InvalidKeyError",
    "DecodeError",
    "DiskIOError",
    "NetworkFetchError",
]
