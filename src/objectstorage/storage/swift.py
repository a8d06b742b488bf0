"""
OpenStack Swift storage adapter.

Uses python-swiftclient with Keystone authentication. Swift's lowercase
response headers are mapped onto ObjectMetadata; ``X-Object-Meta-*`` headers
carry user metadata.
"""
from __future__ import annotations

import base64
import io
import logging
from typing import Any, Dict, List, Mapping, Optional, Union
from urllib.parse import quote

from swiftclient.client import Connection
from swiftclient.exceptions import ClientException

from ..errors import InvalidArgumentError, ProviderAuthError, ProviderError
from ..metadata import (
    CACHE_CONTROL,
    CONTENT_DISPOSITION,
    CONTENT_ENCODING,
    CONTENT_LANGUAGE,
    CONTENT_LENGTH,
    CONTENT_RANGE,
    CONTENT_TYPE,
    ETAG,
    LAST_MODIFIED,
    STANDARD_HEADERS,
    ObjectMetadata,
)
from ..payload import Payload, close_quietly
from ..settings import Settings
from ..storage_object import StorageObject
from .helpers import as_storage_object, prepare_upload, verified_object

__all__ = ["SwiftObjectStorageClient"]

logger = logging.getLogger(__name__)

USER_METADATA_PREFIX = "x-object-meta-"

_RESPONSE_HEADERS = {
    "content-length": CONTENT_LENGTH,
    "content-type": CONTENT_TYPE,
    "content-encoding": CONTENT_ENCODING,
    "content-language": CONTENT_LANGUAGE,
    "content-disposition": CONTENT_DISPOSITION,
    "cache-control": CACHE_CONTROL,
    "content-range": CONTENT_RANGE,
    "etag": ETAG,
    "last-modified": LAST_MODIFIED,
}

# Sent as plain request headers; Content-Type and ETag have their own put_object arguments
_REQUEST_HEADERS = (CONTENT_ENCODING, CONTENT_LANGUAGE, CONTENT_DISPOSITION, CACHE_CONTROL)


def _provider_error(exc: Exception, action: str) -> ProviderError:
    status = getattr(exc, "http_status", None)
    if status in (401, 403):
        return ProviderAuthError(f"Swift {action} not authorized ({status}): {exc}")
    return ProviderError(f"Swift {action} failed: {exc}")


def _metadata_from_headers(headers: Mapping[str, Any]) -> ObjectMetadata:
    metadata = ObjectMetadata()
    for name, value in headers.items():
        lowered = name.lower()
        if lowered in _RESPONSE_HEADERS:
            header = _RESPONSE_HEADERS[lowered]
            if header == CONTENT_LENGTH:
                metadata.content_length = int(value)
            else:
                metadata.set(header, value)
        elif lowered.startswith(USER_METADATA_PREFIX):
            user_key = lowered[len(USER_METADATA_PREFIX):]
            # User metadata never shadows a header the server reported
            if user_key not in STANDARD_HEADERS:
                metadata.set(user_key, value)
    return metadata


def _md5_hex(content_md5: Optional[str]) -> Optional[str]:
    """Swift wants the upload checksum as hex, Content-MD5 carries base64."""
    if not content_md5:
        return None
    # ObjectMetadata only stores well-formed Content-MD5 values
    return base64.b64decode(content_md5).hex()


class SwiftObjectStorageClient:
    """
    ObjectStorageClient for an OpenStack Swift container.

    Uploads send their MD5 as the Swift ``etag`` parameter, so the server
    rejects content that was corrupted in transit.
    """

    def __init__(
        self,
        auth_url: str,
        user: str,
        key: str,
        container: str,
        *,
        region: Optional[str] = None,
        tenant: Optional[str] = None,
        auth_version: str = "3",
        timeout: Optional[float] = None,
    ) -> None:
        """
        Create a Swift client bound to one container.

        Args:
            auth_url: Keystone authentication URL
            user: User name
            key: Password or API key
            container: Container name
            region: Region name, for multi-region deployments
            tenant: Tenant (project) name
            auth_version: Keystone auth version
            timeout: Socket timeout in seconds

        Raises:
            InvalidArgumentError: If the auth URL, credentials or container are missing
        """
        if not auth_url:
            raise InvalidArgumentError("Swift auth URL is required")
        if not user or not key:
            raise InvalidArgumentError("Swift user and key are required")
        if not container:
            raise InvalidArgumentError("Swift container name is required")

        self._container = container
        os_options: Dict[str, str] = {}
        if region:
            os_options["region_name"] = region
        if tenant:
            os_options["tenant_name"] = tenant
            os_options["project_name"] = tenant

        self._conn = self._build_connection(auth_url, user, key, auth_version, os_options, timeout)
        logger.info(f"Created Swift client for container {container} at {auth_url}")

    @staticmethod
    def _build_connection(
        auth_url: str,
        user: str,
        key: str,
        auth_version: str,
        os_options: Dict[str, str],
        timeout: Optional[float],
    ) -> Any:
        """Create the swiftclient connection; authentication happens on first use."""
        return Connection(
            authurl=auth_url,
            user=user,
            key=key,
            auth_version=auth_version,
            tenant_name=os_options.get("tenant_name"),
            os_options=os_options,
            timeout=timeout,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> SwiftObjectStorageClient:
        """Create a client from validated settings."""
        return cls(
            settings.swift_auth_url,
            settings.swift_user,
            settings.swift_key,
            settings.bucket,
            region=settings.swift_region,
            tenant=settings.swift_tenant,
            auth_version=settings.swift_auth_version,
            timeout=settings.read_timeout_s,
        )

    @property
    def name(self) -> str:
        return "Swift"

    @property
    def bucket_name(self) -> str:
        return self._container

    def object_uri(self, key: str) -> str:
        """Location of ``key`` under the account's storage URL."""
        storage_url = self._conn.url
        if not storage_url:
            try:
                storage_url, _ = self._conn.get_auth()
            except (ClientException, OSError) as e:
                raise _provider_error(e, "authentication") from e
        return f"{storage_url.rstrip('/')}/{quote(self._container)}/{quote(key, safe='/')}"

    def list(self) -> List[StorageObject]:
        objects: List[StorageObject] = []
        marker: Optional[str] = None
        while True:
            try:
                _, entries = self._conn.get_container(self._container, marker=marker)
            except (ClientException, OSError) as e:
                raise _provider_error(e, f"list of container {self._container}") from e
            if not entries:
                return objects
            for entry in entries:
                objects.append(self._summary_object(entry))
            marker = entries[-1]["name"]

    def _summary_object(self, entry: Mapping[str, Any]) -> StorageObject:
        key = entry["name"]
        metadata = ObjectMetadata()
        metadata.etag = entry.get("hash")
        metadata.content_length = int(entry.get("bytes", 0))
        metadata.set(LAST_MODIFIED, entry.get("last_modified"))
        metadata.content_type = entry.get("content_type")
        return StorageObject(key, uri=self.object_uri(key), metadata=metadata)

    def _head(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            return self._conn.head_object(self._container, key)
        except ClientException as e:
            if e.http_status == 404:
                return None
            raise _provider_error(e, f"head of {key}") from e
        except OSError as e:
            raise _provider_error(e, f"head of {key}") from e

    def exists(self, key: str) -> bool:
        return self._head(key) is not None

    def get_metadata(self, key: str) -> Optional[ObjectMetadata]:
        headers = self._head(key)
        if headers is None:
            return None
        return _metadata_from_headers(headers)

    def get_without_body(self, key: str) -> Optional[StorageObject]:
        metadata = self.get_metadata(key)
        if metadata is None:
            return None
        return StorageObject(key, uri=self.object_uri(key), metadata=metadata)

    def get(self, key: str, *, verify: bool = False) -> Optional[StorageObject]:
        try:
            headers, content = self._conn.get_object(self._container, key)
        except ClientException as e:
            if e.http_status == 404:
                logger.debug(f"Object {key} not found in container {self._container}")
                return None
            raise _provider_error(e, f"get of {key}") from e
        except OSError as e:
            raise _provider_error(e, f"get of {key}") from e

        metadata = _metadata_from_headers(headers)
        uri = self.object_uri(key)
        if verify:
            return verified_object(key, uri, metadata, io.BytesIO(content))
        return StorageObject(key, uri=uri, metadata=metadata, payload=Payload.from_bytes(content))

    def get_content(self, key: str) -> bytes:
        storage_object = self.get(key)
        if storage_object is None:
            return b""
        with storage_object:
            return storage_object.payload.read()

    def put(self, key: str, payload: Union[Payload, bytes]) -> Optional[str]:
        return self.put_object(as_storage_object(key, payload))

    def put_object(self, storage_object: StorageObject) -> Optional[str]:
        key = storage_object.name
        try:
            body, metadata = prepare_upload(storage_object)

            headers: Dict[str, str] = {}
            for header in _REQUEST_HEADERS:
                value = metadata.get(header)
                if value:
                    headers[header] = str(value)
            for meta_key, meta_value in metadata.user_metadata().items():
                headers[f"X-Object-Meta-{meta_key}"] = meta_value

            try:
                etag = self._conn.put_object(
                    self._container,
                    key,
                    body,
                    content_length=metadata.content_length,
                    etag=_md5_hex(metadata.content_md5),
                    content_type=metadata.content_type,
                    headers=headers or None,
                )
            except (ClientException, OSError) as e:
                raise _provider_error(e, f"put of {key}") from e
        finally:
            if storage_object.payload is not None:
                storage_object.payload.close()

        logger.debug(f"Stored {key} ({metadata.content_length} bytes) in container {self._container}, etag {etag}")
        return etag

    def delete(self, key: str) -> None:
        try:
            self._conn.delete_object(self._container, key)
        except ClientException as e:
            if e.http_status == 404:
                return
            raise _provider_error(e, f"delete of {key}") from e
        except OSError as e:
            raise _provider_error(e, f"delete of {key}") from e
        logger.debug(f"Deleted {key} from container {self._container}")

    def close(self) -> None:
        logger.info(f"Shutting down connections to {self.name} ...")
        close_quietly(self._conn, f"Swift connection for container {self._container}")

    def __enter__(self) -> SwiftObjectStorageClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"SwiftObjectStorageClient(container={self._container!r})"
