"""
Content verification for downloaded objects.

Computes a digest of a byte stream while reading it exactly once and compares
it against the checksum the server asserted (ETag or Content-MD5). The source
stream is always drained and closed, whatever the outcome.
"""
from __future__ import annotations

import base64
import binascii
import hashlib
import logging
from typing import BinaryIO, Optional

from .errors import ContentValidationError
from .metadata import MD5_DIGEST_SIZE, ObjectMetadata
from .payload import close_quietly

__all__ = [
    "DigestingReader",
    "verify_content",
    "checksum_from_etag",
    "checksum_from_content_md5",
    "expected_checksum",
    "CHUNK_SIZE",
]

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def _new_digest(algorithm: str):
    # MD5 is an integrity check here, not a security primitive (FIPS builds)
    return hashlib.new(algorithm, usedforsecurity=False)


class DigestingReader:
    """
    Reads through a binary stream while updating a running digest.

    Raises:
        ValueError: On construction if the digest algorithm is unavailable
    """

    def __init__(self, stream: BinaryIO, algorithm: str = "md5") -> None:
        self._stream = stream
        self._hash = _new_digest(algorithm)
        self.algorithm = algorithm
        self.bytes_read = 0

    def read(self, size: int = -1) -> bytes:
        chunk = self._stream.read(size)
        if chunk:
            self._hash.update(chunk)
            self.bytes_read += len(chunk)
        return chunk

    def read_all(self) -> bytes:
        """Drain the stream in fixed-size chunks and return everything read."""
        buffer = bytearray()
        while True:
            chunk = self.read(CHUNK_SIZE)
            if not chunk:
                break
            buffer.extend(chunk)
        return bytes(buffer)

    def digest(self) -> bytes:
        return self._hash.digest()

    def hexdigest(self) -> str:
        return self._hash.hexdigest()

    def close(self) -> None:
        close_quietly(self._stream, "digested stream")


def checksum_from_etag(etag: Optional[str]) -> Optional[bytes]:
    """
    Decode an ETag holding a plain MD5 hex digest.

    Returns None for ETags that are not a content hash, such as multipart
    upload ETags ("<hex>-<parts>") or opaque values.
    """
    if not etag:
        return None
    value = etag.strip()
    if value.startswith("W/"):
        value = value[2:]
    value = value.strip('"')
    if len(value) != MD5_DIGEST_SIZE * 2:
        return None
    try:
        return bytes.fromhex(value)
    except ValueError:
        return None


def checksum_from_content_md5(content_md5: Optional[str]) -> Optional[bytes]:
    """Decode a base64 Content-MD5 value, or return None if it is not one."""
    if not content_md5:
        return None
    try:
        decoded = base64.b64decode(content_md5, validate=True)
    except (binascii.Error, ValueError):
        return None
    if len(decoded) != MD5_DIGEST_SIZE:
        return None
    return decoded


def expected_checksum(metadata: ObjectMetadata) -> Optional[bytes]:
    """Checksum the server asserts for an object: Content-MD5 first, then ETag."""
    return checksum_from_content_md5(metadata.content_md5) or checksum_from_etag(metadata.etag)


def verify_content(
    stream: BinaryIO,
    expected: Optional[bytes],
    *,
    algorithm: str = "md5",
    name: Optional[str] = None,
) -> bytes:
    """
    Read ``stream`` once and check its digest against ``expected``.

    Args:
        stream: Open, unread binary stream; closed by this call
        expected: Raw digest bytes asserted by the server
        algorithm: hashlib algorithm name
        name: Object name, used in error messages only

    Returns:
        All bytes read from the stream

    Raises:
        ContentValidationError: If the digests differ, either digest is
            unknown, or the digest could not be computed
        OSError: If reading the stream fails (the stream is still closed)
    """
    label = name or "<stream>"
    try:
        try:
            reader = DigestingReader(stream, algorithm)
        except ValueError as e:
            raise ContentValidationError(
                f"Cannot verify {label}: digest algorithm {algorithm!r} unavailable: {e}"
            ) from e

        content = reader.read_all()
        actual = reader.digest()
    finally:
        close_quietly(stream, f"stream of {label}")

    expected_hex = expected.hex() if expected else None
    actual_hex = actual.hex() if actual else None
    if not expected_hex or not actual_hex:
        raise ContentValidationError(
            f"Cannot verify {label}: checksum unknown (expected={expected_hex}, actual={actual_hex})",
            expected=expected_hex,
            actual=actual_hex,
        )
    if expected != actual:
        raise ContentValidationError(
            f"Content of {label} does not match checksum: expected={expected_hex} actual={actual_hex}",
            expected=expected_hex,
            actual=actual_hex,
        )

    logger.debug(f"Verified {len(content)} bytes of {label} ({algorithm}={actual_hex})")
    return content
