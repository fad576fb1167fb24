"""
tsbundle CLI Utilities.

Shared utility functions used across CLI modules.
"""

import logging
import platform

import typer

from tsbundle._version import get_version


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"tsbundle version {get_version()}")
        typer.echo(f"Python: {platform.python_implementation()} {platform.python_version()}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Send log output to stderr; debug messages only with --verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
