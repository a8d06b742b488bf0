"""
Client factory.

Selects the provider adapter from settings so call sites depend only on the
ObjectStorageClient protocol.
"""
from __future__ import annotations

from ..errors import InvalidArgumentError
from ..settings import Settings
from .base import ObjectStorageClient
from .s3 import S3ObjectStorageClient
from .swift import SwiftObjectStorageClient


def client_for(settings: Settings) -> ObjectStorageClient:
    """
    Create the storage client for the configured provider.

    Args:
        settings: Validated settings; ``settings.provider`` picks the adapter

    Returns:
        S3ObjectStorageClient for "s3", SwiftObjectStorageClient for "swift"

    Raises:
        InvalidArgumentError: For an unknown provider
    """
    if settings.provider == "s3":
        return S3ObjectStorageClient.from_settings(settings)
    elif settings.provider == "swift":
        return SwiftObjectStorageClient.from_settings(settings)
    else:
        # Settings validation rejects unknown providers already
        raise InvalidArgumentError(f"Unsupported provider: {settings.provider}")


__all__ = ["client_for"]
