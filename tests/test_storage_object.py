"""
Tests for StorageObject identity, ordering and payload handling.
"""
from __future__ import annotations

import io

import pytest

from objectstorage.errors import InvalidArgumentError
from objectstorage.metadata import ObjectMetadata
from objectstorage.payload import Payload
from objectstorage.storage_object import StorageObject


def _stored(name: str, etag: str = '"abc"', uri: str = "https://example.com/b/x") -> StorageObject:
    metadata = ObjectMetadata()
    metadata.etag = etag
    return StorageObject(name, uri=uri, metadata=metadata)


class TestConstruction:
    """Test StorageObject construction rules."""

    @pytest.mark.parametrize("name", ["", None])
    def test_name_required(self, name):
        with pytest.raises(InvalidArgumentError):
            StorageObject(name)

    def test_fresh_metadata_when_omitted(self):
        obj = StorageObject("a.txt")
        assert isinstance(obj.metadata, ObjectMetadata)
        assert len(obj.metadata) == 0
        assert obj.payload is None
        assert obj.etag is None

    def test_content_length_backfilled_from_payload(self):
        """A payload with a known length populates Content-Length."""
        obj = StorageObject("a.txt", payload=Payload.from_bytes(b"hello"))
        assert obj.metadata.content_length == 5

    def test_unknown_payload_length_leaves_metadata_empty(self):
        obj = StorageObject("a.txt", payload=Payload(io.BytesIO(b"hello")))
        assert "Content-Length" not in obj.metadata

    def test_explicit_metadata_not_overridden(self):
        metadata = ObjectMetadata({"Content-Length": 99})
        obj = StorageObject("a.txt", metadata=metadata, payload=Payload.from_bytes(b"hello"))
        assert obj.metadata.content_length == 99

    def test_metadata_cannot_be_replaced_with_none(self):
        obj = StorageObject("a.txt")
        with pytest.raises(InvalidArgumentError):
            obj.metadata = None


class TestEquality:
    """Test equality over (name, uri, etag)."""

    def test_equal_when_all_identity_fields_match(self):
        assert _stored("a") == _stored("a")
        assert hash(_stored("a")) == hash(_stored("a"))

    @pytest.mark.parametrize("other", [
        _stored("b"),
        _stored("a", etag='"other"'),
        _stored("a", uri="https://example.com/b/y"),
    ])
    def test_differs_on_any_identity_field(self, other):
        assert _stored("a") != other

    def test_without_etag_only_equal_to_itself(self):
        """Unsaved objects have no identity beyond the instance."""
        first = StorageObject("a", uri="u")
        second = StorageObject("a", uri="u")
        assert first == first
        assert first != second

    def test_not_equal_to_other_types(self):
        assert _stored("a") != "a"


class TestOrdering:
    """Test compare_to and sort order."""

    def test_compare_to_none_is_positive(self):
        assert _stored("a").compare_to(None) == 1

    def test_compare_to_equal_is_zero(self):
        assert _stored("a").compare_to(_stored("a")) == 0

    def test_compare_by_name(self):
        assert _stored("a").compare_to(_stored("b")) < 0
        assert _stored("b").compare_to(_stored("a")) > 0

    def test_sorting_by_name(self):
        objects = [_stored("c"), _stored("a"), _stored("b")]
        assert [o.name for o in sorted(objects)] == ["a", "b", "c"]


class TestPayloadLifecycle:
    """Test payload consumption and closing."""

    def test_payload_read_once(self):
        payload = Payload.from_bytes(b"data")
        assert payload.read() == b"data"
        assert payload.closed
        with pytest.raises(ValueError):
            payload.read()

    def test_close_is_idempotent(self):
        stream = io.BytesIO(b"data")
        payload = Payload(stream)
        payload.close()
        payload.close()
        assert stream.closed

    def test_close_failure_is_logged_not_raised(self, caplog):
        class BrokenStream(io.BytesIO):
            def close(self):
                if not self.closed:
                    super().close()
                    raise OSError("socket already gone")

        payload = Payload(BrokenStream(b"data"))
        payload.close()
        assert payload.closed
        assert "socket already gone" in caplog.text

    def test_storage_object_context_manager_closes_payload(self):
        payload = Payload.from_bytes(b"data")
        with StorageObject("a", payload=payload):
            pass
        assert payload.closed
