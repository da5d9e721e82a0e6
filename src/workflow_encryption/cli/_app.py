"""Root Typer application and the options shared by every command."""

import sys

import typer

from workflow_encryption import __version__

app = typer.Typer(
    name="workflow-encryption",
    help="Encrypt, decrypt and inspect workflow payload envelopes.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=False,
)


def _show_version(value: bool) -> None:
    if value:
        sys.stdout.write(f"workflow-encryption {__version__}\n")
        raise typer.Exit()


@app.callback()
def cli_options(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug messages to stderr"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Log warnings and errors only"),
    json_output: bool = typer.Option(False, "--json", help="Write results as JSON to stdout"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_show_version,
        is_eager=True,
        help="Print the package version and exit",
    ),
):
    """Global options, stored on ``ctx.obj`` for the commands."""
    if verbose and quiet:
        raise typer.BadParameter("--verbose and --quiet are mutually exclusive")
    ctx.obj = {"verbose": verbose, "quiet": quiet, "json": json_output}
