"""
S3-family storage adapter.

Works with Amazon S3 and S3-compatible services (IBM Cloud Object Storage,
MinIO, Ceph RGW) through boto3. Provider exceptions are translated at this
boundary: not-found becomes an absent result, everything else a ProviderError.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union
from urllib.parse import quote, urlsplit

import boto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    NoCredentialsError,
    PartialCredentialsError,
)

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
    VERSION_ID,
    ObjectMetadata,
)
from ..payload import Payload, close_quietly
from ..settings import Settings
from ..storage_object import StorageObject
from .base import ObjectListing
from .helpers import as_storage_object, prepare_upload, verified_object

__all__ = ["S3ObjectStorageClient"]

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"

_NOT_FOUND_CODES = frozenset({"NoSuchKey", "NotFound", "404"})
_AUTH_CODES = frozenset({
    "AccessDenied",
    "InvalidAccessKeyId",
    "SignatureDoesNotMatch",
    "ExpiredToken",
    "InvalidToken",
    "401",
    "403",
})

# boto3 response field -> metadata header
_RESPONSE_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("LastModified", LAST_MODIFIED),
    ("ContentLength", CONTENT_LENGTH),
    ("ContentType", CONTENT_TYPE),
    ("ContentEncoding", CONTENT_ENCODING),
    ("ContentLanguage", CONTENT_LANGUAGE),
    ("ContentDisposition", CONTENT_DISPOSITION),
    ("CacheControl", CACHE_CONTROL),
    ("ContentRange", CONTENT_RANGE),
    ("ETag", ETAG),
    ("VersionId", VERSION_ID),
)

# metadata header -> put_object parameter
_REQUEST_FIELDS: Tuple[Tuple[str, str], ...] = (
    (CONTENT_TYPE, "ContentType"),
    (CONTENT_ENCODING, "ContentEncoding"),
    (CONTENT_LANGUAGE, "ContentLanguage"),
    (CONTENT_DISPOSITION, "ContentDisposition"),
    (CACHE_CONTROL, "CacheControl"),
)


def _error_info(exc: ClientError) -> Tuple[str, Optional[int]]:
    response = exc.response or {}
    code = str(response.get("Error", {}).get("Code", ""))
    status = response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return code, status


def _is_not_found(exc: ClientError) -> bool:
    code, status = _error_info(exc)
    # A missing bucket is a configuration fault, not an absent object
    if code == "NoSuchBucket":
        return False
    return code in _NOT_FOUND_CODES or status == 404


def _provider_error(exc: Exception, action: str) -> ProviderError:
    """Translate an SDK exception into the library's error taxonomy."""
    if isinstance(exc, ClientError):
        code, status = _error_info(exc)
        if code in _AUTH_CODES or status in (401, 403):
            return ProviderAuthError(f"S3 {action} not authorized ({code or status}): {exc}")
        return ProviderError(f"S3 {action} failed ({code or status}): {exc}")
    if isinstance(exc, (NoCredentialsError, PartialCredentialsError)):
        return ProviderAuthError(f"S3 {action} failed, credentials not usable: {exc}")
    return ProviderError(f"S3 {action} failed: {exc}")


def _metadata_from_response(response: Mapping[str, Any]) -> ObjectMetadata:
    metadata = ObjectMetadata()
    for response_field, header in _RESPONSE_FIELDS:
        value = response.get(response_field)
        if value is not None and value != "":
            metadata.set(header, value)
    for key, value in (response.get("Metadata") or {}).items():
        # User metadata never shadows a header the server reported
        if key.lower() not in STANDARD_HEADERS:
            metadata.set(key, value)
    return metadata


class S3ObjectStorageClient:
    """
    ObjectStorageClient for Amazon S3 and S3-compatible services.

    With a custom endpoint the client defaults to path-style addressing
    (``<endpoint>/<bucket>/<key>``), which IBM Cloud Object Storage and MinIO
    require. The addressing style belongs to this instance only.

    Example:
        >>> client = S3ObjectStorageClient("key", "secret", "eu-de", "my-bucket",
        ...     endpoint="https://s3.eu-de.cloud-object-storage.appdomain.cloud")
        >>> etag = client.put("report.csv", b"a,b\\n1,2\\n")
    """

    def __init__(
        self,
        access_key: str,
        secret_key: str,
        region: Optional[str],
        bucket: str,
        *,
        endpoint: Optional[str] = None,
        path_style: Optional[bool] = None,
        client_config: Optional[Config] = None,
    ) -> None:
        """
        Create an S3 client bound to one bucket.

        Args:
            access_key: Access key id
            secret_key: Secret access key
            region: Bucket region; may be omitted with a custom endpoint
            bucket: Bucket name
            endpoint: Full endpoint URL including scheme, for S3-compatible services
            path_style: Force path-style (True) or virtual-host (False) addressing;
                defaults to True when an endpoint is given
            client_config: botocore Config with timeouts, pool size, keep-alive

        Raises:
            InvalidArgumentError: If credentials, bucket or region are missing,
                or the endpoint has no scheme
        """
        if not access_key or not secret_key:
            raise InvalidArgumentError("S3 access key and secret key are required")
        if not bucket:
            raise InvalidArgumentError("S3 bucket name is required")
        if endpoint:
            parts = urlsplit(endpoint)
            if parts.scheme not in ("http", "https") or not parts.netloc:
                raise InvalidArgumentError(f"Endpoint scheme is missing or invalid: {endpoint}")
            endpoint = endpoint.rstrip("/")
        elif not region:
            raise InvalidArgumentError("S3 region is required when no endpoint is given")

        self._bucket = bucket
        self._region = region or DEFAULT_REGION
        self._endpoint = endpoint or None
        self._path_style = bool(endpoint) if path_style is None else path_style

        config = Config(s3={"addressing_style": "path" if self._path_style else "virtual"})
        if client_config is not None:
            config = client_config.merge(config)

        self._client = self._build_client(access_key, secret_key, self._region, self._endpoint, config)
        logger.info(
            f"Created {self.service_name} client for bucket {bucket} "
            f"({'path' if self._path_style else 'virtual-host'} style)"
        )

    @staticmethod
    def _build_client(
        access_key: str,
        secret_key: str,
        region: str,
        endpoint: Optional[str],
        config: Config,
    ) -> Any:
        """Create the boto3 S3 client."""
        return boto3.client(
            "s3",
            endpoint_url=endpoint,
            region_name=region,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            config=config,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> S3ObjectStorageClient:
        """Create a client from validated settings."""
        config = Config(
            connect_timeout=settings.connect_timeout_s,
            read_timeout=settings.read_timeout_s,
            max_pool_connections=settings.max_pool_connections,
            tcp_keepalive=settings.tcp_keepalive,
        )
        return cls(
            settings.s3_key,
            settings.s3_secret,
            settings.s3_region,
            settings.bucket,
            endpoint=settings.s3_endpoint,
            path_style=settings.s3_path_style,
            client_config=config,
        )

    # Identity

    @property
    def service_name(self) -> str:
        if self._endpoint:
            return f"S3-compatible ({self._endpoint})"
        return "Amazon S3"

    @property
    def name(self) -> str:
        return self.service_name

    @property
    def bucket_name(self) -> str:
        return self._bucket

    @property
    def path_style(self) -> bool:
        return self._path_style

    def object_uri(self, key: str) -> str:
        """Location of ``key`` under this client's addressing style."""
        quoted = quote(key, safe="/")
        if self._endpoint:
            if self._path_style:
                return f"{self._endpoint}/{self._bucket}/{quoted}"
            parts = urlsplit(self._endpoint)
            return f"{parts.scheme}://{self._bucket}.{parts.netloc}/{quoted}"
        if self._path_style:
            return f"https://s3.{self._region}.amazonaws.com/{self._bucket}/{quoted}"
        return f"https://{self._bucket}.s3.{self._region}.amazonaws.com/{quoted}"

    # Listing

    def list_page(
        self,
        continuation_token: Optional[str] = None,
        max_keys: Optional[int] = None,
    ) -> ObjectListing:
        """
        Fetch one page of the bucket listing.

        Args:
            continuation_token: Token from the previous page, None for the first page
            max_keys: Upper bound on the page size (the server may return fewer)

        Returns:
            ObjectListing with summary objects and the next token

        Raises:
            ProviderError: For backend faults
        """
        params: Dict[str, Any] = {"Bucket": self._bucket}
        if continuation_token:
            params["ContinuationToken"] = continuation_token
        if max_keys:
            params["MaxKeys"] = int(max_keys)

        try:
            response = self._client.list_objects_v2(**params)
        except (ClientError, BotoCoreError) as e:
            raise _provider_error(e, f"list of bucket {self._bucket}") from e

        objects = [self._summary_object(item) for item in response.get("Contents", [])]
        next_token = response.get("NextContinuationToken") if response.get("IsTruncated") else None
        return ObjectListing(objects=objects, next_token=next_token)

    def iter_objects(self, max_keys: Optional[int] = None) -> Iterator[StorageObject]:
        """Yield every object in the bucket, one page at a time."""
        token: Optional[str] = None
        while True:
            page = self.list_page(token, max_keys)
            yield from page.objects
            if page.next_token is None:
                return
            token = page.next_token

    def list(self) -> List[StorageObject]:
        return [obj for obj in self.iter_objects()]

    def _summary_object(self, item: Mapping[str, Any]) -> StorageObject:
        key = item["Key"]
        metadata = ObjectMetadata()
        metadata.etag = item.get("ETag")
        metadata.content_length = int(item.get("Size", 0))
        metadata.last_modified = item.get("LastModified")
        return StorageObject(key, uri=self.object_uri(key), metadata=metadata)

    # Reads

    def _head(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            return self._client.head_object(Bucket=self._bucket, Key=key)
        except ClientError as e:
            if _is_not_found(e):
                return None
            raise _provider_error(e, f"head of {key}") from e
        except BotoCoreError as e:
            raise _provider_error(e, f"head of {key}") from e

    def exists(self, key: str) -> bool:
        return self._head(key) is not None

    def get_metadata(self, key: str) -> Optional[ObjectMetadata]:
        response = self._head(key)
        if response is None:
            return None
        return _metadata_from_response(response)

    def get_without_body(self, key: str) -> Optional[StorageObject]:
        metadata = self.get_metadata(key)
        if metadata is None:
            return None
        return StorageObject(key, uri=self.object_uri(key), metadata=metadata)

    def get(self, key: str, *, verify: bool = False) -> Optional[StorageObject]:
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=key)
        except ClientError as e:
            if _is_not_found(e):
                logger.debug(f"Object {key} not found in bucket {self._bucket}")
                return None
            raise _provider_error(e, f"get of {key}") from e
        except BotoCoreError as e:
            raise _provider_error(e, f"get of {key}") from e

        metadata = _metadata_from_response(response)
        body = response["Body"]
        uri = self.object_uri(key)
        if verify:
            try:
                return verified_object(key, uri, metadata, body)
            except BotoCoreError as e:
                raise _provider_error(e, f"download of {key}") from e
        return StorageObject(
            key,
            uri=uri,
            metadata=metadata,
            payload=Payload(body, content_length=response.get("ContentLength")),
        )

    def get_content(self, key: str) -> bytes:
        storage_object = self.get(key)
        if storage_object is None:
            return b""
        with storage_object:
            try:
                return storage_object.payload.read()
            except BotoCoreError as e:
                raise _provider_error(e, f"download of {key}") from e

    # Writes

    def put(self, key: str, payload: Union[Payload, bytes]) -> Optional[str]:
        return self.put_object(as_storage_object(key, payload))

    def put_object(self, storage_object: StorageObject) -> Optional[str]:
        key = storage_object.name
        try:
            body, metadata = prepare_upload(storage_object)

            params: Dict[str, Any] = {
                "Bucket": self._bucket,
                "Key": key,
                "Body": body,
                "ContentLength": metadata.content_length,
            }
            if metadata.content_md5:
                params["ContentMD5"] = metadata.content_md5
            for header, param in _REQUEST_FIELDS:
                value = metadata.get(header)
                if value:
                    params[param] = str(value)
            user_metadata = metadata.user_metadata()
            if user_metadata:
                params["Metadata"] = user_metadata

            try:
                response = self._client.put_object(**params)
            except (ClientError, BotoCoreError) as e:
                raise _provider_error(e, f"put of {key}") from e
        finally:
            if storage_object.payload is not None:
                storage_object.payload.close()

        etag = response.get("ETag")
        logger.debug(f"Stored {key} ({metadata.content_length} bytes) in bucket {self._bucket}, etag {etag}")
        return etag

    def put_content(
        self,
        key: str,
        content_type: str,
        data: bytes,
        user_metadata: Optional[Mapping[str, str]] = None,
    ) -> Optional[str]:
        """
        Store bytes with an explicit content type.

        Args:
            key: Object name
            content_type: MIME type sent as Content-Type (required)
            data: Object content
            user_metadata: Custom metadata sent as x-amz-meta-* headers

        Returns:
            ETag assigned by the server

        Raises:
            InvalidArgumentError: If content_type is missing or data is empty
            ProviderError: For backend faults
        """
        if not content_type:
            raise InvalidArgumentError(f"Content type is required to store object {key!r}")
        storage_object = as_storage_object(key, data)
        storage_object.metadata.content_type = content_type
        for meta_key, meta_value in (user_metadata or {}).items():
            storage_object.metadata.set(meta_key, meta_value)
        return self.put_object(storage_object)

    def delete(self, key: str) -> None:
        try:
            self._client.delete_object(Bucket=self._bucket, Key=key)
        except ClientError as e:
            if _is_not_found(e):
                return
            raise _provider_error(e, f"delete of {key}") from e
        except BotoCoreError as e:
            raise _provider_error(e, f"delete of {key}") from e
        logger.debug(f"Deleted {key} from bucket {self._bucket}")

    # Lifecycle

    def close(self) -> None:
        logger.info(f"Closing {self.service_name} client for bucket {self._bucket}")
        close_quietly(self._client, f"S3 client for bucket {self._bucket}")

    def __enter__(self) -> S3ObjectStorageClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"S3ObjectStorageClient(service={self.service_name!r}, bucket={self._bucket!r})"
