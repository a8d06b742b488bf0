"""In-memory test doubles for the provider SDK clients."""
from .fake_s3_api import FakeS3Api, client_error
from .fake_swift_connection import FakeSwiftConnection

__all__ = ["FakeS3Api", "FakeSwiftConnection", "client_error"]
