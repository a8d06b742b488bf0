"""
Provider-neutral object metadata.

Represents the HTTP-style headers stored with an object (Content-Length, ETag,
Content-MD5, ...) as an opaque key/value store behind typed accessors, so that
callers cannot bypass the coercion and default rules.
"""
from __future__ import annotations

import base64
import binascii
import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple, Union

from .errors import InvalidArgumentError, MetadataParseError

__all__ = [
    "ObjectMetadata",
    "CACHE_CONTROL",
    "CONTENT_DISPOSITION",
    "CONTENT_ENCODING",
    "CONTENT_LENGTH",
    "CONTENT_RANGE",
    "CONTENT_MD5",
    "CONTENT_TYPE",
    "CONTENT_LANGUAGE",
    "DATE",
    "ETAG",
    "LAST_MODIFIED",
    "VERSION_ID",
    "MD5_DIGEST_SIZE",
    "STANDARD_HEADERS",
]

# Standard HTTP headers
CACHE_CONTROL = "Cache-Control"
CONTENT_DISPOSITION = "Content-Disposition"
CONTENT_ENCODING = "Content-Encoding"
CONTENT_LENGTH = "Content-Length"
CONTENT_RANGE = "Content-Range"
CONTENT_MD5 = "Content-MD5"
CONTENT_TYPE = "Content-Type"
CONTENT_LANGUAGE = "Content-Language"
DATE = "Date"
ETAG = "ETag"
LAST_MODIFIED = "Last-Modified"
# S3 object version, only present on versioned buckets
VERSION_ID = "VersionId"

STANDARD_HEADERS = frozenset(
    h.lower()
    for h in (
        CACHE_CONTROL, CONTENT_DISPOSITION, CONTENT_ENCODING, CONTENT_LENGTH,
        CONTENT_RANGE, CONTENT_MD5, CONTENT_TYPE, CONTENT_LANGUAGE, DATE, ETAG,
        LAST_MODIFIED, VERSION_ID,
    )
)

# "<unit> <start>-<end>/<total>", e.g. "bytes 0-99/1000"
_CONTENT_RANGE_PATTERN = re.compile(r"^\s*(\S+)\s+(\d+)-(\d+)/(\d+)\s*$")

MetadataValue = Union[int, str, datetime]

MD5_DIGEST_SIZE = 16


def _check_value(key: str, value: Any) -> None:
    """Reject values that break the Content-Length or Content-MD5 invariants."""
    lowered = key.lower()
    if lowered == CONTENT_LENGTH.lower():
        try:
            length = int(str(value).strip())
        except ValueError:
            # Unparseable lengths surface as MetadataParseError on access
            return
        if length < 0:
            raise InvalidArgumentError(f"Content length must be non-negative, got {value!r}")
    elif lowered == CONTENT_MD5.lower():
        try:
            decoded = base64.b64decode(str(value), validate=True)
        except (binascii.Error, ValueError) as e:
            raise InvalidArgumentError(f"Content-MD5 is not valid base64: {value!r}") from e
        if len(decoded) != MD5_DIGEST_SIZE:
            raise InvalidArgumentError(
                f"Content-MD5 must encode a {MD5_DIGEST_SIZE}-byte digest, got {len(decoded)} bytes"
            )


class ObjectMetadata:
    """
    Key/value store of an object's headers.

    Values are ints (lengths), strings, or datetimes (timestamps). Header names
    keep the spelling they were stored with but are looked up case-insensitively.

    Invariants:
    - an absent key means "unknown"; None is never stored
    - Content-Length is never negative
    - Content-MD5 is the base64 encoding of a 16-byte digest
    - every setter overwrites or removes exactly one key
    """

    def __init__(self, headers: Optional[Mapping[str, Any]] = None) -> None:
        self._headers: Dict[str, MetadataValue] = {}
        if headers:
            for key, value in headers.items():
                self.set(key, value)

    # Raw access

    def _find_key(self, key: str) -> Optional[str]:
        if key in self._headers:
            return key
        lowered = key.lower()
        for existing in self._headers:
            if existing.lower() == lowered:
                return existing
        return None

    def get(self, key: str, default: Any = None) -> Any:
        """Return the raw value stored for ``key`` or ``default`` if absent."""
        found = self._find_key(key)
        if found is None:
            return default
        return self._headers[found]

    def set(self, key: str, value: Any) -> None:
        """
        Store ``value`` under ``key``, replacing any previous value.

        Setting None removes the key instead of storing it.

        Raises:
            InvalidArgumentError: If the key is empty, a Content-Length is
                negative or a Content-MD5 is not a base64 encoded MD5 digest
        """
        if not key:
            raise InvalidArgumentError("Metadata key cannot be empty")
        if value is not None:
            _check_value(key, value)
        existing = self._find_key(key)
        if existing is not None:
            del self._headers[existing]
        if value is None:
            return
        self._headers[key] = value

    def remove(self, key: str) -> None:
        """Remove ``key`` if present."""
        self.set(key, None)

    def raw(self) -> Mapping[str, MetadataValue]:
        """Return a read-only view over a copy of all stored headers."""
        return MappingProxyType(dict(self._headers))

    def user_metadata(self) -> Dict[str, str]:
        """
        Return the entries that are not standard HTTP headers.

        These are sent to the provider as custom object metadata
        (``x-amz-meta-*`` on S3, ``X-Object-Meta-*`` on Swift).
        """
        return {
            key: str(value)
            for key, value in self._headers.items()
            if key.lower() not in STANDARD_HEADERS
        }

    def copy(self) -> ObjectMetadata:
        return ObjectMetadata(self._headers)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._find_key(key) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._headers))

    def __len__(self) -> int:
        return len(self._headers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ObjectMetadata):
            return NotImplemented
        return self._headers == other._headers

    def __repr__(self) -> str:
        return f"ObjectMetadata({self._headers!r})"

    # Typed accessors

    @property
    def content_length(self) -> int:
        """Size of the object in bytes, 0 when unknown."""
        value = self.get(CONTENT_LENGTH)
        if value is None:
            return 0
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        try:
            return int(str(value).strip())
        except ValueError as e:
            raise MetadataParseError(f"Header '{CONTENT_LENGTH}' is not an integer: {value!r}", value) from e

    @content_length.setter
    def content_length(self, value: Optional[int]) -> None:
        if value is not None and value < 0:
            raise InvalidArgumentError(f"Content length must be non-negative, got {value}")
        self.set(CONTENT_LENGTH, None if value is None else int(value))

    @property
    def instance_length(self) -> int:
        """
        Total size of the object.

        Taken from the Content-Range total when present (partial responses),
        otherwise the same as ``content_length``.
        """
        parsed = self._parse_content_range()
        if parsed is None:
            return self.content_length
        return parsed[2]

    @property
    def content_range(self) -> Optional[Tuple[int, int]]:
        """
        The (start, end) byte positions of a partial response.

        Returns:
            Tuple of first and last byte position, or None without Content-Range

        Raises:
            MetadataParseError: If the Content-Range value is malformed
        """
        parsed = self._parse_content_range()
        if parsed is None:
            return None
        return parsed[0], parsed[1]

    @content_range.setter
    def content_range(self, value: Optional[str]) -> None:
        self.set(CONTENT_RANGE, value or None)

    def _parse_content_range(self) -> Optional[Tuple[int, int, int]]:
        value = self.get(CONTENT_RANGE)
        if value is None:
            return None
        match = _CONTENT_RANGE_PATTERN.match(str(value))
        if not match:
            raise MetadataParseError(
                f"Unable to parse content range, header '{CONTENT_RANGE}' has corrupted data: {value!r}",
                value,
            )
        _, start, end, total = match.groups()
        return int(start), int(end), int(total)

    @property
    def content_type(self) -> Optional[str]:
        return self._get_str(CONTENT_TYPE)

    @content_type.setter
    def content_type(self, value: Optional[str]) -> None:
        self.set(CONTENT_TYPE, value or None)

    @property
    def content_encoding(self) -> Optional[str]:
        return self._get_str(CONTENT_ENCODING)

    @content_encoding.setter
    def content_encoding(self, value: Optional[str]) -> None:
        self.set(CONTENT_ENCODING, value or None)

    @property
    def content_language(self) -> Optional[str]:
        return self._get_str(CONTENT_LANGUAGE)

    @content_language.setter
    def content_language(self, value: Optional[str]) -> None:
        self.set(CONTENT_LANGUAGE, value or None)

    @property
    def content_disposition(self) -> Optional[str]:
        return self._get_str(CONTENT_DISPOSITION)

    @content_disposition.setter
    def content_disposition(self, value: Optional[str]) -> None:
        self.set(CONTENT_DISPOSITION, value or None)

    @property
    def cache_control(self) -> Optional[str]:
        return self._get_str(CACHE_CONTROL)

    @cache_control.setter
    def cache_control(self, value: Optional[str]) -> None:
        self.set(CACHE_CONTROL, value or None)

    @property
    def content_md5(self) -> Optional[str]:
        """Base64 encoded MD5 digest of the content, if known."""
        return self._get_str(CONTENT_MD5)

    @content_md5.setter
    def content_md5(self, value: Optional[str]) -> None:
        self.set(CONTENT_MD5, value or None)

    @property
    def etag(self) -> Optional[str]:
        return self._get_str(ETAG)

    @etag.setter
    def etag(self, value: Optional[str]) -> None:
        self.set(ETAG, value or None)

    @property
    def version_id(self) -> Optional[str]:
        return self._get_str(VERSION_ID)

    @version_id.setter
    def version_id(self, value: Optional[str]) -> None:
        self.set(VERSION_ID, value or None)

    @property
    def last_modified(self) -> Optional[datetime]:
        """
        Last modification time.

        Providers report this either as a datetime or as an ISO-8601 or
        RFC 1123 string; strings are converted on access.
        """
        value = self.get(LAST_MODIFIED)
        if value is None or isinstance(value, datetime):
            return value
        return _parse_timestamp(str(value))

    @last_modified.setter
    def last_modified(self, value: Optional[datetime]) -> None:
        self.set(LAST_MODIFIED, value)

    def _get_str(self, key: str) -> Optional[str]:
        value = self.get(key)
        return None if value is None else str(value)


def _parse_timestamp(value: str) -> datetime:
    text = value.strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError) as e:
            raise MetadataParseError(f"Header '{LAST_MODIFIED}' is not a valid timestamp: {value!r}", value) from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
