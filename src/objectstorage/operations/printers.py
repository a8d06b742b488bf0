"""
Human-readable and JSON output formatting.

Centralizes all CLI output so commands stay thin. Human output goes through
rich; JSON output is rendered from pydantic models so field names and
timestamp formats are stable.
"""
from __future__ import annotations

import json
from datetime import datetime
from typing import Dict, List, Optional

import typer
from pydantic import BaseModel, Field
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..errors import ContentValidationError
from ..metadata import ObjectMetadata
from ..storage_object import StorageObject

_console = Console()
_err_console = Console(stderr=True)


class ObjectInfo(BaseModel):
    """Serializable summary of a stored object."""
    name: str = Field(..., description="Object key")
    size: int = Field(default=0, description="Content length in bytes")
    etag: Optional[str] = Field(default=None, description="Server-assigned ETag")
    last_modified: Optional[datetime] = Field(default=None, description="Last modification time")
    content_type: Optional[str] = Field(default=None, description="MIME type")
    uri: Optional[str] = Field(default=None, description="Object location")

    @classmethod
    def from_storage_object(cls, storage_object: StorageObject) -> ObjectInfo:
        metadata = storage_object.metadata
        return cls(
            name=storage_object.name,
            size=metadata.content_length,
            etag=metadata.etag,
            last_modified=metadata.last_modified,
            content_type=metadata.content_type,
            uri=storage_object.uri,
        )


class MetadataInfo(BaseModel):
    """Serializable view of an object's metadata."""
    name: str
    headers: Dict[str, str] = Field(default_factory=dict)


def print_listing(objects: List[StorageObject], as_json: bool = False) -> None:
    """
    Print a bucket listing.

    Args:
        objects: Summary objects to display
        as_json: Emit a JSON array instead of a table
    """
    infos = [ObjectInfo.from_storage_object(o) for o in objects]
    if as_json:
        typer.echo(json.dumps([info.model_dump(mode="json") for info in infos], indent=2))
        return

    if not infos:
        _console.print("[dim]No objects[/]")
        return

    table = Table(title=f"Objects ({len(infos)})")
    table.add_column("Name", style="cyan")
    table.add_column("Size", justify="right", style="yellow")
    table.add_column("Last modified")
    table.add_column("ETag", style="dim")
    for info in infos:
        table.add_row(
            info.name,
            _format_bytes(info.size),
            info.last_modified.isoformat() if info.last_modified else "-",
            info.etag or "-",
        )
    _console.print(table)


def print_metadata(key: str, metadata: ObjectMetadata, as_json: bool = False) -> None:
    """
    Print an object's headers.

    Args:
        key: Object name
        metadata: Metadata to display
        as_json: Emit a JSON object instead of a table
    """
    headers = {}
    for name, value in sorted(metadata.raw().items()):
        headers[name] = value.isoformat() if isinstance(value, datetime) else str(value)

    if as_json:
        typer.echo(MetadataInfo(name=key, headers=headers).model_dump_json(indent=2))
        return

    table = Table(title=key)
    table.add_column("Header", style="cyan")
    table.add_column("Value")
    for name, value in headers.items():
        table.add_row(name, value)
    _console.print(table)


def print_put_summary(key: str, bucket: str, etag: Optional[str]) -> None:
    _console.print(f"Stored [bold]{bucket}/{key}[/] (etag {etag or 'unknown'})", soft_wrap=True)


def print_download_summary(key: str, dest: str, size: int, verified: bool) -> None:
    suffix = ", checksum verified" if verified else ""
    _console.print(f"Downloaded [bold]{key}[/] to {dest} ({_format_bytes(size)}{suffix})", soft_wrap=True)


def print_error(exc: BaseException) -> None:
    """Print an error message to stderr."""
    _err_console.print(f"[red]Error:[/] {escape(str(exc))}", highlight=False, soft_wrap=True)
    if isinstance(exc, ContentValidationError) and exc.expected and exc.actual:
        _err_console.print(f"  expected {exc.expected}, got {exc.actual}", soft_wrap=True)


def _format_bytes(size_bytes: int) -> str:
    """
    Format byte count as human-readable string.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted string (e.g., "1.5 MB", "42 KB")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.1f} GB"
