"""Keygen command: generate a fresh 256-bit key."""

import sys
from pathlib import Path

import typer

from workflow_encryption.cli._app import app
from workflow_encryption.cli._common import setup_logging
from workflow_encryption.cli._console import print_err, print_ok
from workflow_encryption.keys import encode_key, generate_key, generate_key_file


@app.command("keygen", help="Generate a new 32-byte key file (use with --key-file).")
def keygen_cmd(
    ctx: typer.Context,
    output: Path = typer.Option(
        None,
        "-o", "--output",
        help="Write the key to this file instead of stdout",
    ),
    format: str = typer.Option(
        "base64",
        "--format",
        help="Key encoding: raw, base64, or hex",
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing key file"),
):
    """Generate a key for --key-file or WORKFLOW_ENCRYPTION_KEY_FILE.

    The key is binary: keep it in a key file. Passing its text with --key
    treats that text as a passphrase and derives a different cipher key.
    """
    setup_logging(verbose=ctx.obj["verbose"], quiet=ctx.obj["quiet"])

    if output is None:
        if format == "raw":
            print_err("Raw keys can only be written to a file (use --output)")
            raise SystemExit(1)
        try:
            encoded = encode_key(generate_key(), format)
        except ValueError as e:
            print_err(str(e))
            raise SystemExit(1)
        sys.stdout.write(encoded.decode("ascii") + "\n")
        return

    if output.exists() and not force:
        print_err(f"Key file already exists: {output} (use --force to overwrite)")
        raise SystemExit(1)

    try:
        generate_key_file(output, format=format)
    except (ValueError, OSError) as e:
        print_err(str(e))
        raise SystemExit(1)
    print_ok(f"Wrote {format} key to {output}")
