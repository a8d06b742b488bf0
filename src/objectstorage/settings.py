"""
Settings and configuration for object storage clients.

Centralizes configuration values and provides validation with fail-fast behavior.
Settings come from environment variables or a properties file and are read once,
at adapter construction time; there is no reconfiguration afterwards.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

from .errors import InvalidArgumentError

__all__ = [
    "Settings",
    "create_settings_from_env",
    "load_properties",
    "settings_from_properties",
    "PROVIDERS",
]

PROVIDERS = ("s3", "swift")


@dataclass(frozen=True)
class Settings:
    """
    Configuration settings for object storage adapters.

    Common:
        provider: Backend type, "s3" or "swift"
        bucket: Bucket (S3) or container (Swift) name

    S3 Settings:
        s3_key: Access key
        s3_secret: Secret key
        s3_region: Bucket region
        s3_endpoint: Custom endpoint for S3-compatible services (IBM Cloud, MinIO)
        s3_path_style: Use path-style addressing; defaults to True when an
            endpoint is set and False for Amazon S3
        connect_timeout_s: Connection timeout in seconds
        read_timeout_s: Read timeout in seconds
        max_pool_connections: Size of the SDK connection pool
        tcp_keepalive: Enable TCP keep-alive to detect stale pooled connections

    Swift Settings:
        swift_auth_url: Keystone authentication URL
        swift_user: User name
        swift_key: Password / API key
        swift_tenant: Tenant (project) name
        swift_region: Region name
        swift_auth_version: Keystone auth version ("1", "2" or "3")
    """
    provider: str
    bucket: str

    # S3 settings
    s3_key: Optional[str] = None
    s3_secret: Optional[str] = None
    s3_region: Optional[str] = None
    s3_endpoint: Optional[str] = None
    s3_path_style: Optional[bool] = None
    connect_timeout_s: float = 60.0
    read_timeout_s: float = 60.0
    max_pool_connections: int = 10
    tcp_keepalive: bool = False

    # Swift settings
    swift_auth_url: Optional[str] = None
    swift_user: Optional[str] = None
    swift_key: Optional[str] = None
    swift_tenant: Optional[str] = None
    swift_region: Optional[str] = None
    swift_auth_version: str = "3"

    def __post_init__(self):
        """Validate settings on construction."""
        if self.provider not in PROVIDERS:
            raise InvalidArgumentError(
                f"Unsupported provider: {self.provider!r}. Expected one of: {', '.join(PROVIDERS)}"
            )

        if not self.bucket:
            raise InvalidArgumentError("bucket is required")

        if self.connect_timeout_s <= 0:
            raise InvalidArgumentError(f"connect_timeout_s must be positive, got {self.connect_timeout_s}")
        if self.read_timeout_s <= 0:
            raise InvalidArgumentError(f"read_timeout_s must be positive, got {self.read_timeout_s}")
        if self.max_pool_connections < 1:
            raise InvalidArgumentError(f"max_pool_connections must be at least 1, got {self.max_pool_connections}")

        if self.provider == "s3":
            if not self.s3_key or not self.s3_secret:
                raise InvalidArgumentError("S3 credentials not configured: need s3_key and s3_secret")
            if not self.s3_region and not self.s3_endpoint:
                raise InvalidArgumentError("S3 needs either s3_region or s3_endpoint")
            # Endpoint must be a full URL, e.g. https://s3.eu-de.cloud-object-storage.appdomain.cloud
            if self.s3_endpoint and not re.match(r"^https?://[^/\s]+", self.s3_endpoint):
                raise InvalidArgumentError(f"Endpoint scheme is missing or invalid: {self.s3_endpoint}")
        else:
            if not self.swift_auth_url:
                raise InvalidArgumentError("swift_auth_url is required for the swift provider")
            if not self.swift_user or not self.swift_key:
                raise InvalidArgumentError("Swift credentials not configured: need swift_user and swift_key")
            if self.swift_auth_version not in ("1", "2", "3"):
                raise InvalidArgumentError(f"Invalid swift_auth_version: {self.swift_auth_version}")

    @property
    def path_style(self) -> bool:
        """Effective addressing style for S3."""
        if self.s3_path_style is not None:
            return self.s3_path_style
        return bool(self.s3_endpoint)


def _str_to_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on")


def create_settings_from_env() -> Settings:
    """
    Load settings from environment variables.

    Environment Variables:
        Common:
        - OBJECTSTORAGE_PROVIDER (default: s3)
        - OBJECTSTORAGE_BUCKET (required)

        S3:
        - OBJECTSTORAGE_S3_KEY
        - OBJECTSTORAGE_S3_SECRET
        - OBJECTSTORAGE_S3_REGION
        - OBJECTSTORAGE_S3_ENDPOINT (optional, for S3-compatible services)
        - OBJECTSTORAGE_S3_PATH_STYLE (optional)
        - OBJECTSTORAGE_CONNECT_TIMEOUT (default: 60.0)
        - OBJECTSTORAGE_READ_TIMEOUT (default: 60.0)
        - OBJECTSTORAGE_MAX_POOL_CONNECTIONS (default: 10)
        - OBJECTSTORAGE_TCP_KEEPALIVE (default: false)

        Swift:
        - OBJECTSTORAGE_SWIFT_AUTH_URL
        - OBJECTSTORAGE_SWIFT_USER
        - OBJECTSTORAGE_SWIFT_KEY
        - OBJECTSTORAGE_SWIFT_TENANT
        - OBJECTSTORAGE_SWIFT_REGION
        - OBJECTSTORAGE_SWIFT_AUTH_VERSION (default: 3)

    Returns:
        Settings object with validated configuration

    Raises:
        InvalidArgumentError: If configuration is invalid or required values missing

    Note:
        Creates a fresh Settings instance every time (no caching).
    """
    def get_float(key: str, default: float) -> float:
        value = os.getenv(key)
        return float(value) if value else default

    def get_int(key: str, default: int) -> int:
        value = os.getenv(key)
        return int(value) if value else default

    bucket = os.getenv("OBJECTSTORAGE_BUCKET")
    if not bucket:
        raise InvalidArgumentError("OBJECTSTORAGE_BUCKET environment variable is required")

    path_style = os.getenv("OBJECTSTORAGE_S3_PATH_STYLE")

    return Settings(
        provider=os.getenv("OBJECTSTORAGE_PROVIDER", "s3").strip().lower(),
        bucket=bucket,
        s3_key=os.getenv("OBJECTSTORAGE_S3_KEY"),
        s3_secret=os.getenv("OBJECTSTORAGE_S3_SECRET"),
        s3_region=os.getenv("OBJECTSTORAGE_S3_REGION"),
        s3_endpoint=os.getenv("OBJECTSTORAGE_S3_ENDPOINT"),
        s3_path_style=_str_to_bool(path_style) if path_style else None,
        connect_timeout_s=get_float("OBJECTSTORAGE_CONNECT_TIMEOUT", 60.0),
        read_timeout_s=get_float("OBJECTSTORAGE_READ_TIMEOUT", 60.0),
        max_pool_connections=get_int("OBJECTSTORAGE_MAX_POOL_CONNECTIONS", 10),
        tcp_keepalive=_str_to_bool(os.getenv("OBJECTSTORAGE_TCP_KEEPALIVE", "false")),
        swift_auth_url=os.getenv("OBJECTSTORAGE_SWIFT_AUTH_URL"),
        swift_user=os.getenv("OBJECTSTORAGE_SWIFT_USER"),
        swift_key=os.getenv("OBJECTSTORAGE_SWIFT_KEY"),
        swift_tenant=os.getenv("OBJECTSTORAGE_SWIFT_TENANT"),
        swift_region=os.getenv("OBJECTSTORAGE_SWIFT_REGION"),
        swift_auth_version=os.getenv("OBJECTSTORAGE_SWIFT_AUTH_VERSION", "3"),
    )


def load_properties(path: Union[str, Path]) -> Dict[str, str]:
    """
    Parse a ``key=value`` properties file.

    Blank lines and lines starting with ``#`` or ``!`` are ignored; ``:`` is
    accepted as separator too. Values are stripped of surrounding whitespace.

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidArgumentError: If a line has no separator
    """
    properties: Dict[str, str] = {}
    text = Path(path).read_text(encoding="utf-8")
    for lineno, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped[0] in "#!":
            continue
        match = re.match(r"^([^=:\s]+)\s*[=:]\s*(.*)$", stripped)
        if not match:
            raise InvalidArgumentError(f"{path}:{lineno}: expected key=value, got {stripped!r}")
        properties[match.group(1)] = match.group(2).strip()
    return properties


def settings_from_properties(path: Union[str, Path]) -> Settings:
    """
    Build S3 settings from a properties file.

    Recognized keys: s3.key, s3.secret, s3.region, s3.bucket, s3.endpoint
    and the optional s3.path-style.
    """
    props = load_properties(path)
    path_style = props.get("s3.path-style")
    return Settings(
        provider="s3",
        bucket=props.get("s3.bucket", ""),
        s3_key=props.get("s3.key"),
        s3_secret=props.get("s3.secret"),
        s3_region=props.get("s3.region") or None,
        s3_endpoint=props.get("s3.endpoint") or None,
        s3_path_style=_str_to_bool(path_style) if path_style else None,
    )
