"""
Storage interfaces for object storage clients.

These protocols define the boundary between application code and provider
adapters, so callers never branch on the backend and tests can swap in fakes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Union, runtime_checkable

from ..metadata import ObjectMetadata
from ..payload import Payload
from ..storage_object import StorageObject


@dataclass(frozen=True)
class ObjectListing:
    """
    One page of a bucket listing.

    Invariants:
    - objects: summary objects only (name, ETag, size, last-modified), no payload
    - next_token: continuation token for the following page, None on the last page
    """
    objects: List[StorageObject] = field(default_factory=list)
    next_token: Optional[str] = None

    @property
    def truncated(self) -> bool:
        return self.next_token is not None


__all__ = ["ObjectListing", "ObjectStorageClient"]


@runtime_checkable
class ObjectStorageClient(Protocol):
    """Protocol for object storage operations on a single bucket or container."""

    @property
    def name(self) -> str:
        """Human-readable name of the storage service."""
        ...

    @property
    def bucket_name(self) -> str:
        """Bucket (S3) or container (Swift) this client operates on."""
        ...

    def list(self) -> List[StorageObject]:
        """
        List every object in the bucket.

        Follows continuation tokens (or markers) until the listing is exhausted.

        Returns:
            Summary objects without payload

        Raises:
            ProviderError: For backend faults
        """
        ...

    def exists(self, key: str) -> bool:
        """
        Check whether an object exists using a metadata-only request.

        Raises:
            ProviderError: For backend faults other than not-found
        """
        ...

    def put(self, key: str, payload: Union[Payload, bytes]) -> Optional[str]:
        """
        Store a payload under ``key``.

        Args:
            key: Object name
            payload: Content to upload

        Returns:
            ETag assigned by the server

        Raises:
            InvalidArgumentError: If the payload is missing or its length is zero
            ProviderError: For backend faults
        """
        ...

    def put_object(self, storage_object: StorageObject) -> Optional[str]:
        """
        Store a storage object, sending its metadata along.

        Returns:
            ETag assigned by the server

        Raises:
            InvalidArgumentError: If the object has no payload or a zero length
            ProviderError: For backend faults
        """
        ...

    def get(self, key: str, *, verify: bool = False) -> Optional[StorageObject]:
        """
        Retrieve an object with its payload.

        Args:
            key: Object name
            verify: Check the downloaded bytes against the server checksum

        Returns:
            The object, or None if it does not exist. The caller owns the
            payload and must close it.

        Raises:
            ContentValidationError: If verify is set and the checksum does not match
            ProviderError: For backend faults
        """
        ...

    def get_without_body(self, key: str) -> Optional[StorageObject]:
        """Retrieve an object's metadata wrapped in a StorageObject, or None."""
        ...

    def get_content(self, key: str) -> bytes:
        """Retrieve an object's content as bytes, or b"" if it does not exist."""
        ...

    def get_metadata(self, key: str) -> Optional[ObjectMetadata]:
        """Retrieve an object's metadata, or None if it does not exist."""
        ...

    def delete(self, key: str) -> None:
        """
        Delete an object. Deleting a missing object is not an error.

        Raises:
            ProviderError: For backend faults
        """
        ...

    def close(self) -> None:
        """Release pooled connections. Failures are logged, not raised."""
        ...
