"""
Tests for the Swift adapter beyond the shared contract.
"""
from __future__ import annotations

import hashlib
from unittest.mock import patch

import pytest
from swiftclient.exceptions import ClientException

from objectstorage.errors import InvalidArgumentError, ProviderAuthError, ProviderError
from objectstorage.payload import Payload
from objectstorage.settings import Settings
from objectstorage.storage.swift import SwiftObjectStorageClient
from objectstorage.storage_object import StorageObject

from .fakes.fake_swift_connection import STORAGE_URL

TEXT = b"This is just some text to test storing data in S3..."


class TestConstruction:
    """Test constructor validation and connection options."""

    @pytest.mark.parametrize("auth_url,user,key,container", [
        ("", "u", "k", "c"),
        ("https://keystone.example.com/v3", "", "k", "c"),
        ("https://keystone.example.com/v3", "u", "", "c"),
        ("https://keystone.example.com/v3", "u", "k", ""),
    ])
    def test_required_arguments(self, auth_url, user, key, container):
        with patch.object(SwiftObjectStorageClient, "_build_connection") as build:
            with pytest.raises(InvalidArgumentError):
                SwiftObjectStorageClient(auth_url, user, key, container)
            build.assert_not_called()

    def test_region_and_tenant_passed_as_os_options(self):
        with patch.object(SwiftObjectStorageClient, "_build_connection") as build:
            SwiftObjectStorageClient(
                "https://keystone.example.com/v3", "user", "key", "container",
                region="RegionOne", tenant="project", auth_version="2",
            )
        args = build.call_args.args
        assert args[3] == "2"
        assert args[4]["region_name"] == "RegionOne"
        assert args[4]["tenant_name"] == "project"

    def test_from_settings(self):
        settings = Settings(
            provider="swift",
            bucket="container",
            swift_auth_url="https://keystone.example.com/v3",
            swift_user="user",
            swift_key="key",
            swift_region="RegionOne",
            read_timeout_s=12.0,
        )
        with patch.object(SwiftObjectStorageClient, "_build_connection") as build:
            client = SwiftObjectStorageClient.from_settings(settings)
        assert client.bucket_name == "container"
        assert client.name == "Swift"
        assert build.call_args.args[5] == 12.0


class TestUploads:
    """Test Swift upload parameters."""

    def test_md5_sent_as_hex_etag(self, swift_client, fake_swift):
        """The server checks the upload against the etag parameter."""
        swift_client.put("text.txt", TEXT)
        kwargs = fake_swift.put_kwargs[-1]
        assert kwargs["etag"] == hashlib.md5(TEXT).hexdigest()
        assert kwargs["content_length"] == len(TEXT)

    def test_user_metadata_sent_as_object_meta_headers(self, swift_client, fake_swift):
        storage_object = StorageObject("text.txt", payload=Payload.from_bytes(TEXT))
        storage_object.metadata.set("project", "europeana")
        storage_object.metadata.content_encoding = "identity"
        swift_client.put_object(storage_object)

        headers = fake_swift.put_kwargs[-1]["headers"]
        assert headers["X-Object-Meta-project"] == "europeana"
        assert headers["Content-Encoding"] == "identity"

    def test_put_returns_etag(self, swift_client):
        assert swift_client.put("text.txt", TEXT) == hashlib.md5(TEXT).hexdigest()

    def test_rejected_checksum_is_provider_error(self, swift_client, fake_swift):
        fake_swift.fail_with = ClientException("Object PUT failed", http_status=422)
        with pytest.raises(ProviderError) as exc_info:
            swift_client.put("text.txt", TEXT)
        assert isinstance(exc_info.value.__cause__, ClientException)


class TestDownloads:
    """Test Swift response header mapping."""

    def test_user_metadata_does_not_shadow_server_headers(self, swift_client, fake_swift):
        etag = fake_swift.seed(
            "text.txt", TEXT, content_type="text/plain",
            headers={"X-Object-Meta-ETag": "bogus", "X-Object-Meta-Project": "europeana"},
        )
        metadata = swift_client.get_metadata("text.txt")
        assert metadata.etag == etag
        assert metadata.content_type == "text/plain"
        assert metadata.user_metadata() == {"project": "europeana"}


class TestLocations:
    """Test object URIs."""

    def test_uri_uses_storage_url(self, swift_client):
        assert swift_client.object_uri("dir/a b.txt") == f"{STORAGE_URL}/test-container/dir/a%20b.txt"

    def test_authenticates_when_storage_url_unknown(self, swift_client, fake_swift):
        fake_swift.url = None
        assert swift_client.object_uri("a.txt") == f"{STORAGE_URL}/test-container/a.txt"
        assert "get_auth" in fake_swift.calls


class TestErrorMapping:
    """Test translation of swiftclient exceptions."""

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_errors(self, swift_client, fake_swift, status):
        fake_swift.fail_with = ClientException("Unauthorized", http_status=status)
        with pytest.raises(ProviderAuthError):
            swift_client.get("text.txt")

    def test_server_error(self, swift_client, fake_swift):
        fake_swift.fail_with = ClientException("Object GET failed", http_status=503)
        with pytest.raises(ProviderError) as exc_info:
            swift_client.get_metadata("text.txt")
        assert not isinstance(exc_info.value, ProviderAuthError)

    def test_socket_error(self, swift_client, fake_swift):
        fake_swift.fail_with = ConnectionRefusedError("connection refused")
        with pytest.raises(ProviderError):
            swift_client.list()
        with pytest.raises(ProviderError):
            swift_client.delete("text.txt")

    def test_delete_server_error_raised(self, swift_client, fake_swift):
        fake_swift.fail_with = ClientException("Object DELETE failed", http_status=500)
        with pytest.raises(ProviderError):
            swift_client.delete("text.txt")
