"""
Payload wrapper for object content.

A payload is the body of an object: a binary stream that can be read once,
optionally with a known length. Whoever obtains a payload from a get call
owns it and must close it when done.
"""
from __future__ import annotations

import io
import logging
from typing import Any, BinaryIO, Optional

__all__ = ["Payload", "close_quietly"]

logger = logging.getLogger(__name__)


class Payload:
    """
    Consume-once binary stream with an optional known length.

    Usage:
        with storage_object.payload as payload:
            data = payload.read()
    """

    def __init__(self, stream: BinaryIO, content_length: Optional[int] = None) -> None:
        self._stream = stream
        self._content_length = content_length
        self._consumed = False
        self._closed = False

    @classmethod
    def from_bytes(cls, data: bytes) -> Payload:
        """Create a payload over an in-memory buffer with a known length."""
        return cls(io.BytesIO(data), content_length=len(data))

    @property
    def content_length(self) -> Optional[int]:
        """Length in bytes if known up front, otherwise None."""
        return self._content_length

    @property
    def stream(self) -> BinaryIO:
        """The underlying stream. Reading it directly counts as consuming the payload."""
        self._consumed = True
        return self._stream

    @property
    def consumed(self) -> bool:
        return self._consumed

    @property
    def closed(self) -> bool:
        return self._closed

    def read(self) -> bytes:
        """
        Read the remaining content and close the stream.

        Raises:
            ValueError: If the payload was already consumed or closed
        """
        if self._closed or self._consumed:
            raise ValueError("Payload has already been consumed")
        self._consumed = True
        try:
            return self._stream.read()
        finally:
            self.close()

    def close(self) -> None:
        """Release the underlying stream. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        close_quietly(self._stream, "payload stream")

    def __enter__(self) -> Payload:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Payload(content_length={self._content_length}, consumed={self._consumed}, closed={self._closed})"


def close_quietly(resource: Any, description: str = "resource") -> None:
    """
    Close ``resource``, logging instead of raising on failure.

    A failing close must not mask a read or write that already completed.
    """
    close = getattr(resource, "close", None)
    if close is None:
        return
    try:
        close()
    except Exception as e:
        logger.warning(f"Error closing {description}: {e}")
