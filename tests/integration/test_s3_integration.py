"""
Integration tests against a live S3 or S3-compatible bucket.

Set OBJECTSTORAGE_IT_PROPERTIES to a properties file with s3.key, s3.secret,
s3.region, s3.bucket and s3.endpoint to run them. Objects are written and
deleted, so the bucket must be a scratch bucket.
"""
from __future__ import annotations

import os
import uuid

import pytest

from objectstorage.errors import InvalidArgumentError
from objectstorage.metadata_utils import generate_metadata
from objectstorage.payload import Payload
from objectstorage.settings import settings_from_properties
from objectstorage.storage.s3 import S3ObjectStorageClient
from objectstorage.storage_object import StorageObject

pytestmark = pytest.mark.integration

TEXT = b"This is just some text to test storing data in S3..."
TEXT_MD5_BASE64 = "Fl6sF5ph/K/FRkP55hJ3Rw=="


@pytest.fixture(scope="module")
def live_client():
    path = os.getenv("OBJECTSTORAGE_IT_PROPERTIES")
    if not path:
        pytest.skip("OBJECTSTORAGE_IT_PROPERTIES not set")
    settings = settings_from_properties(path)
    if "production" in settings.bucket.lower():
        pytest.skip(f"Refusing to run integration tests against bucket {settings.bucket}")
    client = S3ObjectStorageClient.from_settings(settings)
    yield client
    client.close()


@pytest.fixture
def key(live_client):
    name = f"objectstorage-it/{uuid.uuid4().hex}.txt"
    yield name
    live_client.delete(name)


class TestLiveBucket:
    """Round trips against a real bucket."""

    def test_put_get_verify_delete(self, live_client, key):
        metadata = generate_metadata(TEXT)
        assert metadata.content_md5 == TEXT_MD5_BASE64
        metadata.content_type = "text/plain"
        metadata.set("purpose", "integration-test")

        etag = live_client.put_object(StorageObject(key, metadata=metadata, payload=Payload.from_bytes(TEXT)))
        assert etag

        assert live_client.exists(key)
        stored = live_client.get_metadata(key)
        assert stored.content_length == len(TEXT)
        assert stored.get("purpose") == "integration-test"

        fetched = live_client.get(key, verify=True)
        assert fetched.payload.read() == TEXT

        assert key in {o.name for o in live_client.list()}

        live_client.delete(key)
        assert not live_client.exists(key)
        assert live_client.get(key) is None

    def test_zero_length_upload_rejected(self, live_client, key):
        with pytest.raises(InvalidArgumentError):
            live_client.put(key, b"")
