"""
Metadata generation for uploads.

Precomputes content length and MD5 so the backend is given integrity metadata
up front instead of being trusted to compute its own.
"""
from __future__ import annotations

import base64
import hashlib
import logging
from typing import BinaryIO, Optional, Tuple

from .metadata import ObjectMetadata
from .payload import close_quietly
from .verification import DigestingReader

__all__ = ["generate_metadata", "generate_metadata_from_stream", "md5_base64"]

logger = logging.getLogger(__name__)


def md5_base64(data: bytes) -> str:
    """Base64 encoded MD5 digest of ``data``, as used by the Content-MD5 header."""
    digest = hashlib.md5(data, usedforsecurity=False).digest()
    return base64.b64encode(digest).decode("ascii")


def generate_metadata(data: bytes) -> ObjectMetadata:
    """
    Generate metadata with the content length and MD5 hash of ``data``.

    The length is always set. If MD5 is unavailable on this interpreter the
    error is logged and the metadata is returned without Content-MD5.
    """
    metadata = ObjectMetadata()
    try:
        metadata.content_md5 = md5_base64(data)
    except ValueError as e:
        logger.error(f"Cannot calculate MD5 hash because no MD5 algorithm was found: {e}")
    metadata.content_length = len(data)
    return metadata


def generate_metadata_from_stream(
    object_id: Optional[str], stream: BinaryIO
) -> Tuple[bytes, ObjectMetadata]:
    """
    Read ``stream`` once and generate metadata for its content.

    Generating metadata means reading the whole stream into memory, so after
    this call only the returned bytes remain usable. The stream is closed.

    Args:
        object_id: Name of the object, only used in log messages
        stream: Binary stream to read

    Returns:
        Tuple of (content bytes, metadata with length and MD5)

    Raises:
        OSError: If reading the stream fails
    """
    label = object_id or "<stream>"
    metadata = ObjectMetadata()
    try:
        try:
            reader = DigestingReader(stream, "md5")
        except ValueError as e:
            logger.error(f"Cannot calculate MD5 hash of {label} because no MD5 algorithm was found: {e}")
            content = stream.read()
        else:
            content = reader.read_all()
            metadata.content_md5 = base64.b64encode(reader.digest()).decode("ascii")
    except OSError as e:
        logger.error(f"Error reading stream for object {label}: {e}")
        raise
    finally:
        close_quietly(stream, f"stream of {label}")

    metadata.content_length = len(content)
    return content, metadata
