"""Storage protocol and provider adapters."""

from .base import ObjectListing, ObjectStorageClient
from .factory import client_for
from .s3 import S3ObjectStorageClient
from .swift import SwiftObjectStorageClient

__all__ = [
    "ObjectListing",
    "ObjectStorageClient",
    "S3ObjectStorageClient",
    "SwiftObjectStorageClient",
    "client_for",
]
