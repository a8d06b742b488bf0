"""
Sanity checks for the SDK fakes.

The contract tests are only meaningful if the fakes raise the same exception
types as the real SDKs.
"""
from __future__ import annotations

import pytest
from botocore.exceptions import ClientError
from swiftclient.exceptions import ClientException

from .fakes import FakeS3Api, FakeSwiftConnection


def test_fake_s3_raises_client_error_for_missing_key():
    fake = FakeS3Api()
    with pytest.raises(ClientError) as exc_info:
        fake.get_object(Bucket=fake.bucket, Key="missing")
    assert exc_info.value.response["Error"]["Code"] == "NoSuchKey"


def test_fake_s3_head_reports_bare_404():
    fake = FakeS3Api()
    with pytest.raises(ClientError) as exc_info:
        fake.head_object(Bucket=fake.bucket, Key="missing")
    assert exc_info.value.response["ResponseMetadata"]["HTTPStatusCode"] == 404


def test_fake_swift_raises_client_exception():
    fake = FakeSwiftConnection()
    with pytest.raises(ClientException) as exc_info:
        fake.head_object(fake.container, "missing")
    assert exc_info.value.http_status == 404


def test_fake_swift_listing_uses_markers():
    fake = FakeSwiftConnection(page_size=1)
    fake.seed("a", b"1")
    fake.seed("b", b"2")
    _, first = fake.get_container(fake.container)
    _, second = fake.get_container(fake.container, marker=first[-1]["name"])
    _, third = fake.get_container(fake.container, marker=second[-1]["name"])
    assert [e["name"] for e in first + second] == ["a", "b"]
    assert third == []
