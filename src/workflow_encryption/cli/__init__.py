"""Typer-based command-line interface.

Usage:
    workflow-encryption --help
    workflow-encryption keygen --output master.key
    workflow-encryption encrypt payload.json --key-file master.key
"""

from workflow_encryption.cli._app import app

# Register command modules (side-effect imports)
import workflow_encryption.cli.cmd_keygen  # noqa: F401
import workflow_encryption.cli.cmd_crypt  # noqa: F401

__all__ = ["app"]
