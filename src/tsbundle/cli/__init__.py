"""
tsbundle CLI Package.

- bundle.py: bundle and order commands
- utils.py: Shared utilities
"""

import typer

from tsbundle.cli.bundle import bundle_command, order_command
from tsbundle.cli.utils import version_callback

app = typer.Typer(
    help="tsbundle – pack a compiled TypeScript module graph into one file",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
) -> None:
    """tsbundle CLI main callback for global options."""
    pass


app.command(name="bundle")(bundle_command)
app.command(name="order")(order_command)


def main() -> None:
    app()


__all__ = ["app", "main"]
