"""
Operations Facade - Application service layer.

Provides a clean interface between the CLI and storage clients, centralizing
command orchestration and the policy of when a missing object is an error.
"""
from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..errors import ObjectNotFoundError
from ..metadata import ObjectMetadata
from ..metadata_utils import generate_metadata
from ..payload import Payload
from ..storage.base import ObjectStorageClient
from ..storage_object import StorageObject

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OpsConfig:
    """
    Configuration for Operations facade.

    Integrity policy applied to every download the facade performs.
    """
    verify: bool = False          # Verify downloads against the server checksum


class Operations:
    """
    Application service facade for CLI operations.

    One method per CLI verb. Storage clients report a missing object as an
    absent result; this facade turns that into ObjectNotFoundError where the
    command needs the object. Exceptions bubble up for central exit-code mapping.
    """

    def __init__(self, config: OpsConfig, client: ObjectStorageClient):
        """
        Initialize Operations facade.

        Args:
            config: Configuration settings
            client: Storage client the commands run against
        """
        self.cfg = config
        self.client = client

    def list_objects(self) -> List[StorageObject]:
        """
        List every object in the bucket, sorted by name.

        Returns:
            Summary objects without payload
        """
        return sorted(self.client.list())

    def put_file(self, key: str, path: Path, content_type: Optional[str] = None) -> Optional[str]:
        """
        Upload a local file.

        Args:
            key: Object name
            path: File to upload
            content_type: MIME type; guessed from the file name when omitted

        Returns:
            ETag assigned by the server

        Raises:
            FileNotFoundError: If the file does not exist
            InvalidArgumentError: If the file is empty
        """
        data = Path(path).read_bytes()
        metadata = generate_metadata(data)
        metadata.content_type = content_type or mimetypes.guess_type(str(path))[0]
        storage_object = StorageObject(key, metadata=metadata, payload=Payload.from_bytes(data))
        etag = self.client.put_object(storage_object)
        logger.info(f"Uploaded {path} to {self.client.bucket_name}/{key}")
        return etag

    def get_bytes(self, key: str) -> bytes:
        """
        Download an object's content.

        Raises:
            ObjectNotFoundError: If the object does not exist
            ContentValidationError: If verification is enabled and fails
        """
        storage_object = self.client.get(key, verify=self.cfg.verify)
        if storage_object is None:
            raise ObjectNotFoundError(f"Object not found: {self.client.bucket_name}/{key}")
        with storage_object:
            return storage_object.payload.read()

    def get_to_file(self, key: str, dest: Path) -> int:
        """
        Download an object into ``dest``.

        With verification enabled the file is only written after the checksum
        matched, so a corrupted download never lands on disk.

        Returns:
            Number of bytes written
        """
        data = self.get_bytes(key)
        Path(dest).write_bytes(data)
        return len(data)

    def head(self, key: str) -> ObjectMetadata:
        """
        Fetch an object's metadata.

        Raises:
            ObjectNotFoundError: If the object does not exist
        """
        metadata = self.client.get_metadata(key)
        if metadata is None:
            raise ObjectNotFoundError(f"Object not found: {self.client.bucket_name}/{key}")
        return metadata

    def exists(self, key: str) -> bool:
        return self.client.exists(key)

    def delete(self, key: str) -> None:
        self.client.delete(key)

    def close(self) -> None:
        self.client.close()
