"""
Generic storage object.

Pairs an object's name, location and metadata with an optional payload.
Adapters return these from list/get calls; callers build them for uploads.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from .errors import InvalidArgumentError
from .metadata import ObjectMetadata
from .payload import Payload

__all__ = ["StorageObject"]


class StorageObject:
    """
    An object in a bucket or container.

    Identity is (name, uri, etag). An object that has not been stored yet has
    no ETag and is therefore only equal to itself.

    The payload, not the object, is the disposable resource: close it (or
    use the object as a context manager) after reading.
    """

    def __init__(
        self,
        name: str,
        uri: Optional[str] = None,
        metadata: Optional[ObjectMetadata] = None,
        payload: Optional[Payload] = None,
    ) -> None:
        """
        Create a storage object.

        Args:
            name: Object key in the bucket/container (required)
            uri: Location of the stored object, if known
            metadata: Object metadata; a fresh one is created when omitted
            payload: Optional content of the object

        Raises:
            InvalidArgumentError: If name is missing or empty
        """
        if not name:
            raise InvalidArgumentError("Storage object name is required")
        self._name = name
        self._uri = uri
        self._payload = payload
        if metadata is None:
            metadata = ObjectMetadata()
            if payload is not None and payload.content_length is not None:
                metadata.content_length = payload.content_length
        self._metadata = metadata

    @property
    def name(self) -> str:
        return self._name

    @property
    def uri(self) -> Optional[str]:
        return self._uri

    @property
    def metadata(self) -> ObjectMetadata:
        return self._metadata

    @metadata.setter
    def metadata(self, metadata: ObjectMetadata) -> None:
        if metadata is None:
            raise InvalidArgumentError("Storage object metadata cannot be None")
        self._metadata = metadata

    @property
    def payload(self) -> Optional[Payload]:
        """Content of the object; only present on objects fetched with a body."""
        return self._payload

    @property
    def etag(self) -> Optional[str]:
        return self._metadata.etag

    @property
    def last_modified(self) -> Optional[datetime]:
        return self._metadata.last_modified

    def close(self) -> None:
        if self._payload is not None:
            self._payload.close()

    def __enter__(self) -> StorageObject:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, StorageObject):
            return NotImplemented
        # Unsaved objects have no server-assigned identity yet
        if self.etag is None or other.etag is None:
            return False
        return (
            self._name == other._name
            and self._uri == other._uri
            and self.etag == other.etag
        )

    def __hash__(self) -> int:
        return hash((self._name, self._uri, self.etag))

    def compare_to(self, other: Optional[StorageObject]) -> int:
        """
        Three-way comparison on name.

        Returns:
            1 if other is None, 0 if both objects are equal, otherwise the
            sign of comparing the names
        """
        if other is None:
            return 1
        if self == other:
            return 0
        return (self._name > other._name) - (self._name < other._name)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, StorageObject):
            return NotImplemented
        return self.compare_to(other) < 0

    def __le__(self, other: object) -> bool:
        if not isinstance(other, StorageObject):
            return NotImplemented
        return self.compare_to(other) <= 0

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, StorageObject):
            return NotImplemented
        return self.compare_to(other) > 0

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, StorageObject):
            return NotImplemented
        return self.compare_to(other) >= 0

    def __repr__(self) -> str:
        return (
            f"StorageObject(name={self._name!r}, uri={self._uri!r}, "
            f"etag={self.etag!r}, last_modified={self._metadata.get('Last-Modified')!r})"
        )
