"""Encrypt, decrypt and inspect commands for JSON payloads."""

from collections.abc import Mapping
from pathlib import Path
from typing import List

import typer

from workflow_encryption.cli._app import app
from workflow_encryption.cli._common import (
    build_service,
    exit_on_error,
    read_json_input,
    setup_logging,
    target_for,
)
from workflow_encryption.cli._console import output_table, write_json
from workflow_encryption.envelope import ENCRYPTION_MARKER, Envelope, decode_value
from workflow_encryption.errors import CryptoError, MalformedEnvelopeError


@app.command("encrypt", help="Encrypt a JSON document or selected top-level fields.")
def encrypt_cmd(
    ctx: typer.Context,
    input_file: Path = typer.Argument(None, help="JSON file to read (default: stdin)"),
    key: str = typer.Option(None, "--key", "-k", help="Passphrase, used as-is (default: $WORKFLOW_ENCRYPTION_KEY)"),
    key_file: Path = typer.Option(None, "--key-file", help="Key file from keygen (default: $WORKFLOW_ENCRYPTION_KEY_FILE)"),
    field: List[str] = typer.Option(None, "--field", "-f", help="Top-level field to process (repeatable)"),
):
    """Print the encrypted form of the input to stdout."""
    setup_logging(verbose=ctx.obj["verbose"], quiet=ctx.obj["quiet"])
    try:
        service = build_service(key, key_file)
        value = read_json_input(input_file)
        write_json(service.encrypt_value(value, target_for(field)))
    except (CryptoError, ValueError, OSError) as e:
        exit_on_error(e)


@app.command("decrypt", help="Decrypt a JSON document or selected top-level fields.")
def decrypt_cmd(
    ctx: typer.Context,
    input_file: Path = typer.Argument(None, help="JSON file to read (default: stdin)"),
    key: str = typer.Option(None, "--key", "-k", help="Passphrase, used as-is (default: $WORKFLOW_ENCRYPTION_KEY)"),
    key_file: Path = typer.Option(None, "--key-file", help="Key file from keygen (default: $WORKFLOW_ENCRYPTION_KEY_FILE)"),
    field: List[str] = typer.Option(None, "--field", "-f", help="Top-level field to process (repeatable)"),
    legacy: List[str] = typer.Option(
        None, "--legacy", help="Decrypt-only built-in strategy id (repeatable)"
    ),
):
    """Print the decrypted form of the input to stdout."""
    setup_logging(verbose=ctx.obj["verbose"], quiet=ctx.obj["quiet"])
    try:
        service = build_service(key, key_file, legacy)
        value = read_json_input(input_file)
        write_json(service.decrypt_value(value, target_for(field)))
    except (CryptoError, ValueError, OSError) as e:
        exit_on_error(e)


def _describe(path: str, value) -> dict:
    try:
        decoded = decode_value(value)
    except MalformedEnvelopeError as e:
        return {"path": path, "status": "malformed", "strategy": "", "detail": str(e)}
    if isinstance(decoded, Envelope):
        return {
            "path": path,
            "status": "encrypted",
            "strategy": decoded.strategy_id,
            "detail": f"{len(decoded.payload)} chars",
        }
    return {"path": path, "status": "plaintext", "strategy": "", "detail": type(value).__name__}


@app.command("inspect", help="Report which parts of a JSON document are encrypted.")
def inspect_cmd(
    ctx: typer.Context,
    input_file: Path = typer.Argument(None, help="JSON file to read (default: stdin)"),
):
    """Inspect envelopes without decrypting; no key needed."""
    setup_logging(verbose=ctx.obj["verbose"], quiet=ctx.obj["quiet"])
    try:
        value = read_json_input(input_file)
    except (ValueError, OSError) as e:
        exit_on_error(e)

    rows = [_describe("$", value)]
    if isinstance(value, Mapping) and value.get(ENCRYPTION_MARKER) is not True:
        rows.extend(_describe(f"$.{name}", item) for name, item in value.items())

    output_table(rows, ctx=ctx, title="Envelopes", columns=["path", "status", "strategy", "detail"])
