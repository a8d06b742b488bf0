"""
Provider-independent steps shared by the storage adapters.

Upload preparation (length and checksum rules) and verified downloads behave
identically on every backend, so they live here instead of in each adapter.
"""
from __future__ import annotations

import logging
from typing import BinaryIO, Optional, Tuple, Union

from ..errors import InvalidArgumentError
from ..metadata import CONTENT_LENGTH, ObjectMetadata
from ..metadata_utils import generate_metadata, generate_metadata_from_stream
from ..payload import Payload
from ..storage_object import StorageObject
from ..verification import expected_checksum, verify_content

__all__ = ["as_storage_object", "prepare_upload", "verified_object"]

logger = logging.getLogger(__name__)

UploadBody = Union[bytes, BinaryIO]


def as_storage_object(key: str, payload: Union[Payload, bytes, None]) -> StorageObject:
    """
    Wrap a raw upload argument in a StorageObject.

    Byte strings get their length and MD5 computed immediately.

    Raises:
        InvalidArgumentError: If payload is None or key is empty
    """
    if payload is None:
        raise InvalidArgumentError(f"Payload is required to store object {key!r}")
    if isinstance(payload, (bytes, bytearray)):
        data = bytes(payload)
        return StorageObject(key, metadata=generate_metadata(data), payload=Payload.from_bytes(data))
    return StorageObject(key, payload=payload)


def prepare_upload(storage_object: StorageObject) -> Tuple[UploadBody, ObjectMetadata]:
    """
    Validate an object for upload and resolve its body and metadata.

    An explicit Content-Length is trusted and the payload is streamed as is.
    Without one, the payload is read into memory once to derive the length
    and MD5.

    Returns:
        Tuple of (body to send, metadata to send); the object's own metadata
        is not modified

    Raises:
        InvalidArgumentError: If there is no payload or the length is not positive
    """
    name = storage_object.name
    payload = storage_object.payload
    if payload is None:
        raise InvalidArgumentError(f"Payload is required to store object {name!r}")

    metadata = storage_object.metadata.copy()
    if CONTENT_LENGTH in metadata:
        if metadata.content_length <= 0:
            raise InvalidArgumentError(
                f"Content length of object {name!r} cannot be {metadata.content_length}, it must be positive"
            )
        return payload.stream, metadata

    logger.debug(f"No content length for {name}, reading payload to generate metadata")
    content, generated = generate_metadata_from_stream(name, payload.stream)
    if generated.content_length == 0:
        raise InvalidArgumentError(f"Content length of object {name!r} cannot be 0")
    metadata.content_length = generated.content_length
    if metadata.content_md5 is None:
        metadata.content_md5 = generated.content_md5
    return content, metadata


def verified_object(
    key: str,
    uri: Optional[str],
    metadata: ObjectMetadata,
    stream: BinaryIO,
) -> StorageObject:
    """
    Drain ``stream``, check it against the checksum in ``metadata`` and
    return an object whose payload holds the verified bytes.

    Raises:
        ContentValidationError: If the checksum is unknown or does not match
    """
    content = verify_content(stream, expected_checksum(metadata), name=key)
    return StorageObject(key, uri=uri, metadata=metadata, payload=Payload.from_bytes(content))
