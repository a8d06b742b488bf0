"""
Uniform client for object storage backends.

Store, retrieve, list and delete binary objects with HTTP-style metadata on
Amazon S3, S3-compatible services and OpenStack Swift through one contract.
"""
from .errors import (
    ContentValidationError,
    InvalidArgumentError,
    MetadataParseError,
    ObjectNotFoundError,
    ObjectStorageError,
    ProviderAuthError,
    ProviderError,
)
from .metadata import ObjectMetadata
from .metadata_utils import generate_metadata, generate_metadata_from_stream
from .payload import Payload
from .settings import Settings, create_settings_from_env, settings_from_properties
from .storage import (
    ObjectListing,
    ObjectStorageClient,
    S3ObjectStorageClient,
    SwiftObjectStorageClient,
    client_for,
)
from .storage_object import StorageObject
from .verification import verify_content

__version__ = "0.1.0"

__all__ = [
    "ContentValidationError",
    "InvalidArgumentError",
    "MetadataParseError",
    "ObjectNotFoundError",
    "ObjectStorageError",
    "ProviderAuthError",
    "ProviderError",
    "ObjectMetadata",
    "generate_metadata",
    "generate_metadata_from_stream",
    "Payload",
    "Settings",
    "create_settings_from_env",
    "settings_from_properties",
    "ObjectListing",
    "ObjectStorageClient",
    "S3ObjectStorageClient",
    "SwiftObjectStorageClient",
    "client_for",
    "StorageObject",
    "verify_content",
]
