"""
Object storage CLI

Implements 6 CLI verbs with Operations facade integration:
- ls: List objects in the bucket
- put: Upload a local file
- get: Download an object, optionally verifying its checksum
- head: Show object metadata
- exists: Exit 0 if the object exists, 1 otherwise
- rm: Delete an object

Connection settings come from OBJECTSTORAGE_* environment variables, or from
a properties file given with --config.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional, TypeVar

import typer

from .cli_context import CLIContext
from .operations import Operations, OpsConfig, run_and_exit
from .operations.printers import (
    print_download_summary, print_listing, print_metadata, print_put_summary
)

T = TypeVar('T')

app = typer.Typer(name="objectstorage", help="Object storage CLI (S3, S3-compatible, Swift)")


def _config_option():
    return typer.Option(
        None, "--config", "-c", exists=True, dir_okay=False,
        help="Properties file with s3.key, s3.secret, s3.region, s3.bucket, s3.endpoint",
    )


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Object storage CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _with_ops(config_path: Optional[Path], config: OpsConfig, action: Callable[[Operations], T]) -> T:
    """Run ``action`` against a freshly configured client and close it afterwards."""
    context = CLIContext.load(config_path)
    try:
        return action(Operations(config=config, client=context.client))
    finally:
        context.close()


@app.command("ls")
def list_objects(
    config: Optional[Path] = _config_option(),
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """List objects in the bucket."""

    def _ls() -> None:
        objects = _with_ops(config, OpsConfig(), lambda ops: ops.list_objects())
        print_listing(objects, as_json=json_output)

    run_and_exit(_ls)


@app.command()
def put(
    key: str = typer.Argument(..., help="Object name"),
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="File to upload"),
    content_type: Optional[str] = typer.Option(None, "--content-type", help="MIME type (guessed if omitted)"),
    config: Optional[Path] = _config_option(),
) -> None:
    """Upload a local file."""

    def _put() -> None:
        bucket_and_etag = _with_ops(
            config,
            OpsConfig(),
            lambda ops: (ops.client.bucket_name, ops.put_file(key, file, content_type)),
        )
        print_put_summary(key, *bucket_and_etag)

    run_and_exit(_put)


@app.command()
def get(
    key: str = typer.Argument(..., help="Object name"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to file instead of stdout"),
    verify: bool = typer.Option(False, "--verify", help="Verify content against the server checksum"),
    config: Optional[Path] = _config_option(),
) -> None:
    """Download an object."""

    def _get() -> None:
        cfg = OpsConfig(verify=verify)
        if output is not None:
            size = _with_ops(config, cfg, lambda ops: ops.get_to_file(key, output))
            print_download_summary(key, str(output), size, verify)
            return
        data = _with_ops(config, cfg, lambda ops: ops.get_bytes(key))
        stdout = typer.get_binary_stream("stdout")
        stdout.write(data)
        stdout.flush()

    run_and_exit(_get)


@app.command()
def head(
    key: str = typer.Argument(..., help="Object name"),
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
    config: Optional[Path] = _config_option(),
) -> None:
    """Show object metadata."""

    def _head() -> None:
        metadata = _with_ops(config, OpsConfig(), lambda ops: ops.head(key))
        print_metadata(key, metadata, as_json=json_output)

    run_and_exit(_head)


@app.command()
def exists(
    key: str = typer.Argument(..., help="Object name"),
    config: Optional[Path] = _config_option(),
) -> None:
    """Exit 0 if the object exists, 1 otherwise."""

    def _exists() -> None:
        found = _with_ops(config, OpsConfig(), lambda ops: ops.exists(key))
        typer.echo("yes" if found else "no")
        if not found:
            raise typer.Exit(code=1)

    run_and_exit(_exists)


@app.command()
def rm(
    key: str = typer.Argument(..., help="Object name"),
    config: Optional[Path] = _config_option(),
) -> None:
    """Delete an object. Deleting a missing object succeeds."""

    def _rm() -> None:
        _with_ops(config, OpsConfig(), lambda ops: ops.delete(key))
        typer.echo(f"Deleted {key}")

    run_and_exit(_rm)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
