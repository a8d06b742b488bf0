"""
Exception to exit code mapping for the CLI.

Codes are keyed by exception class name so the table reads the same as the
error taxonomy in objectstorage.errors.
"""
from __future__ import annotations

import typer
from typing import Callable, TypeVar

T = TypeVar('T')

EXIT_CODES = {
    "ObjectNotFoundError": 1,
    "FileNotFoundError": 1,
    "InvalidArgumentError": 2,
    "MetadataParseError": 2,
    "ValueError": 2,
    "ProviderError": 3,
    "ProviderAuthError": 4,
    "ContentValidationError": 5,
}


def exit_code_for(exc: BaseException) -> int:
    """
    Map exception to standardized exit code.

    Returns exit codes:
    - 0: Success
    - 1: Object or local file not found
    - 2: Invalid argument or malformed metadata
    - 3: Provider error or unknown error
    - 4: Authentication/authorization failure
    - 5: Downloaded content failed checksum verification

    Args:
        exc: Exception to map

    Returns:
        Exit code (1-5, with 3 as fallback for unknown exceptions)
    """
    return EXIT_CODES.get(type(exc).__name__, 3)


def run_and_exit(func: Callable[[], T]) -> T:
    """
    Run a CLI command body and convert failures into exit codes.

    The error is printed to stderr and re-raised as typer.Exit; an explicit
    typer.Exit from the command passes through unchanged.

    Args:
        func: Function to execute

    Returns:
        Function result if successful

    Raises:
        typer.Exit: With appropriate exit code if function raises exception
    """
    try:
        return func()
    except typer.Exit:
        raise
    except Exception as e:
        from .printers import print_error
        print_error(e)
        raise typer.Exit(code=exit_code_for(e)) from e
