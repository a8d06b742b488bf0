"""
Object storage error classes.

Provides a clear taxonomy of errors that can occur during storage operations.
Provider SDK exceptions are mapped onto these classes at the adapter boundary
so callers get a consistent error interface regardless of the backend.
"""
from __future__ import annotations


class ObjectStorageError(Exception):
    """Base class for all object storage errors."""
    pass


class InvalidArgumentError(ObjectStorageError, ValueError):
    """
    Caller supplied an unusable argument.

    Raised when:
    - a storage object is created without a name
    - an upload declares (or derives) a content length of zero
    - a content type is missing where the operation requires one
    - adapter configuration is incomplete or malformed
    """
    pass


class MetadataParseError(ObjectStorageError, ValueError):
    """
    A stored header value could not be parsed.

    Carries the offending raw value for diagnostics. A corrupted header usually
    means the wrong object was returned, so this is never silently defaulted.
    """

    def __init__(self, message: str, value: object = None):
        super().__init__(message)
        self.value = value


class ContentValidationError(ObjectStorageError):
    """
    Downloaded content does not match the checksum asserted by the server.

    Raised when:
    - the digest of the downloaded bytes differs from the expected checksum
    - the expected checksum is unknown (e.g. multipart ETag)
    - the digest could not be computed at all
    """

    def __init__(self, message: str, expected: str | None = None, actual: str | None = None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class ObjectNotFoundError(ObjectStorageError):
    """
    A command required an object that does not exist.

    Adapters never raise this for read operations; they return None, b"" or
    False instead. It is raised by the operations layer when absence is an error.
    """
    pass


class ProviderError(ObjectStorageError):
    """
    Any backend-reported fault other than not-found.

    The original SDK exception is always chained as ``__cause__``.
    No retry is attempted by this library.
    """
    pass


class ProviderAuthError(ProviderError):
    """
    Authentication or authorization failure.

    Raised when:
    - HTTP 401 Unauthorized / 403 Forbidden
    - SDK credential errors (invalid access key, bad signature)
    """
    pass


__all__ = [
    "ObjectStorageError",
    "InvalidArgumentError",
    "MetadataParseError",
    "ContentValidationError",
    "ObjectNotFoundError",
    "ProviderError",
    "ProviderAuthError",
]
