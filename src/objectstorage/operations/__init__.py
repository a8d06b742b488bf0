"""
Operations package - service layer between the CLI and storage clients.

The Operations facade runs one storage call per CLI verb; exit-code mapping
and output formatting live beside it so the typer commands stay thin.
"""
from .facade import Operations, OpsConfig
from .mappers import exit_code_for, run_and_exit

__all__ = ["Operations", "OpsConfig", "exit_code_for", "run_and_exit"]
