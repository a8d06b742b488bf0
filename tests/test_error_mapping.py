"""
Test error mapping and CLI exit code functionality.

Validates that exceptions are correctly mapped to exit codes and that
the run_and_exit wrapper handles errors appropriately for CLI commands.
"""
from __future__ import annotations

import pytest
import typer

from objectstorage.errors import (
    ContentValidationError,
    InvalidArgumentError,
    MetadataParseError,
    ObjectNotFoundError,
    ProviderAuthError,
    ProviderError,
)
from objectstorage.operations.mappers import EXIT_CODES, exit_code_for, run_and_exit


class TestExitCodeMapping:
    """Test exception to exit code mapping."""

    @pytest.mark.parametrize("exc,code", [
        (ObjectNotFoundError("missing"), 1),
        (FileNotFoundError("no such file"), 1),
        (InvalidArgumentError("bad"), 2),
        (MetadataParseError("bad date", "yesterday"), 2),
        (ValueError("bad"), 2),
        (ProviderError("boom"), 3),
        (ProviderAuthError("denied"), 4),
        (ContentValidationError("mismatch", "a", "b"), 5),
    ])
    def test_known_exceptions(self, exc, code):
        assert exit_code_for(exc) == code

    def test_unknown_exception_maps_to_fallback(self):
        assert exit_code_for(RuntimeError("test")) == 3
        assert exit_code_for(PermissionError("test")) == 3

    def test_exit_code_completeness(self):
        """Every error a command can raise has an explicit code."""
        assert set(EXIT_CODES) == {
            "ObjectNotFoundError",
            "FileNotFoundError",
            "InvalidArgumentError",
            "MetadataParseError",
            "ValueError",
            "ProviderError",
            "ProviderAuthError",
            "ContentValidationError",
        }

    def test_auth_error_distinct_from_provider_error(self):
        """ProviderAuthError is a ProviderError but keeps its own exit code."""
        assert isinstance(ProviderAuthError("x"), ProviderError)
        assert exit_code_for(ProviderAuthError("x")) != exit_code_for(ProviderError("x"))


class TestRunAndExit:
    """Test run_and_exit wrapper functionality."""

    def test_successful_function_returns_result(self):
        assert run_and_exit(lambda: "success result") == "success result"

    def test_exception_raises_typer_exit(self):
        def failing_func():
            raise ObjectNotFoundError("Object not found: bucket/key")

        with pytest.raises(typer.Exit) as exc_info:
            run_and_exit(failing_func)
        assert exc_info.value.exit_code == 1

    def test_exception_chaining_preserved(self):
        original_error = ProviderError("original error")

        def failing_func():
            raise original_error

        with pytest.raises(typer.Exit) as exc_info:
            run_and_exit(failing_func)
        assert exc_info.value.__cause__ is original_error

    def test_typer_exit_passes_through(self):
        """Commands that choose their own exit code are not remapped."""
        def exit_func():
            raise typer.Exit(code=7)

        with pytest.raises(typer.Exit) as exc_info:
            run_and_exit(exit_func)
        assert exc_info.value.exit_code == 7

    def test_error_printed_to_stderr(self, capsys):
        def failing_func():
            raise ContentValidationError("Checksum mismatch for text.txt", expected="aaa", actual="bbb")

        with pytest.raises(typer.Exit) as exc_info:
            run_and_exit(failing_func)

        assert exc_info.value.exit_code == 5
        captured = capsys.readouterr()
        assert "Checksum mismatch for text.txt" in captured.err
        assert "expected aaa, got bbb" in captured.err
        assert captured.out == ""

    def test_markup_in_messages_not_interpreted(self, capsys):
        def failing_func():
            raise InvalidArgumentError("bad key [red]x[/red]")

        with pytest.raises(typer.Exit):
            run_and_exit(failing_func)
        assert "[red]x[/red]" in capsys.readouterr().err
