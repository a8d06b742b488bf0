"""
CLI Context for managing application dependencies.

Provides a clean way to manage CLI-level dependencies like settings and the
storage client, avoiding global state and enabling proper dependency injection.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .settings import Settings, create_settings_from_env, settings_from_properties
from .storage.base import ObjectStorageClient
from .storage.factory import client_for


@dataclass
class CLIContext:
    """
    Shared context for CLI commands.

    Settings are read once per command; the client is created lazily on first
    use and closed when the command finishes.
    """
    settings: Settings
    _client: Optional[ObjectStorageClient] = None

    @classmethod
    def load(cls, config: Optional[Path] = None) -> CLIContext:
        """
        Create CLI context from a properties file or the environment.

        Args:
            config: Properties file with s3.* keys; environment variables are
                used when omitted

        Returns:
            CLIContext with validated settings
        """
        if config is not None:
            return cls(settings=settings_from_properties(config))
        return cls(settings=create_settings_from_env())

    @property
    def client(self) -> ObjectStorageClient:
        if self._client is None:
            self._client = client_for(self.settings)
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
