"""Shared helpers for CLI commands."""

import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from workflow_encryption.config import EncryptionConfig
from workflow_encryption.errors import CryptoError
from workflow_encryption.service import EncryptionService
from workflow_encryption.target import EncryptionTarget

logger = logging.getLogger(__name__)


def setup_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Configure logging with Rich handler."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
        markup=True,
        rich_tracebacks=True,
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def build_service(
    key: Optional[str],
    key_file: Optional[Path],
    legacy: Optional[List[str]] = None,
) -> EncryptionService:
    """Build the service from CLI options, falling back to the environment.

    A ``.env`` file in the working directory is loaded first, without
    overriding variables that are already set.
    """
    load_dotenv(override=False)
    config = EncryptionConfig.from_env(
        key=key,
        key_file=key_file,
        legacy_strategy_ids=legacy or None,
    )
    service = config.build_service()
    logger.debug(f"Using {service.registry!r}")
    return service


def target_for(fields: Optional[List[str]]) -> EncryptionTarget:
    return EncryptionTarget.from_fields(fields or None)


def read_json_input(path: Optional[Path]) -> Any:
    """Read a JSON document from ``path`` or stdin ("-" or None)."""
    if path is None or str(path) == "-":
        text = sys.stdin.read()
    else:
        text = Path(path).read_text(encoding="utf-8")
    return json.loads(text)


def exit_on_error(error: Exception) -> None:
    """Print a one-line error and exit with status 1."""
    from workflow_encryption.cli._console import print_err

    if isinstance(error, CryptoError):
        print_err(f"{type(error).__name__}: {error}")
    else:
        print_err(str(error))
    raise SystemExit(1)
