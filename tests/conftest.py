"""Root pytest configuration for objectstorage tests."""
import os
from unittest.mock import patch

import pytest

from objectstorage.storage.s3 import S3ObjectStorageClient
from objectstorage.storage.swift import SwiftObjectStorageClient

from .storage.fakes import FakeS3Api, FakeSwiftConnection

IBM_ENDPOINT = "https://s3.eu-de.cloud-object-storage.appdomain.cloud"


# Configure pytest markers
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires a live bucket)"
    )


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer OBJECTSTORAGE_* variables out of unit tests."""
    for name in list(os.environ):
        if name.startswith("OBJECTSTORAGE_") and name != "OBJECTSTORAGE_IT_PROPERTIES":
            monkeypatch.delenv(name)


@pytest.fixture
def fake_s3():
    """In-memory S3 bucket."""
    return FakeS3Api(bucket="test-bucket")


@pytest.fixture
def s3_client(fake_s3):
    """S3 adapter against an S3-compatible endpoint, backed by the fake."""
    with patch.object(S3ObjectStorageClient, "_build_client", return_value=fake_s3):
        yield S3ObjectStorageClient(
            "test-key", "test-secret", "eu-de", "test-bucket", endpoint=IBM_ENDPOINT
        )


@pytest.fixture
def fake_swift():
    """In-memory Swift container."""
    return FakeSwiftConnection(container="test-container")


@pytest.fixture
def swift_client(fake_swift):
    """Swift adapter backed by the fake connection."""
    with patch.object(SwiftObjectStorageClient, "_build_connection", return_value=fake_swift):
        yield SwiftObjectStorageClient(
            "https://keystone.example.com/v3", "tester", "secret", "test-container",
            region="RegionOne", tenant="project",
        )


@pytest.fixture(params=["s3", "swift"])
def backend(request, fake_s3, fake_swift):
    """
    Parametrized (client, fake) pair for contract tests.

    The fake exposes ``seed``, ``corrupt``, ``objects``, ``calls`` and ``closed``
    with the same meaning on both backends.
    """
    if request.param == "s3":
        with patch.object(S3ObjectStorageClient, "_build_client", return_value=fake_s3):
            client = S3ObjectStorageClient(
                "test-key", "test-secret", "eu-de", "test-bucket", endpoint=IBM_ENDPOINT
            )
        yield client, fake_s3
    else:
        with patch.object(SwiftObjectStorageClient, "_build_connection", return_value=fake_swift):
            client = SwiftObjectStorageClient(
                "https://keystone.example.com/v3", "tester", "secret", "test-container"
            )
        yield client, fake_swift
