"""
Bundle commands for tsbundle CLI.

Commands:
- bundle: Assemble the bundle and write it to out_file
- order: Show module order, circular and absent modules
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from tsbundle.core.errors import TsBundleError
from tsbundle.core.project import create_assembler, load_project

from .utils import configure_logging

console = Console()

ORDER_FORMATS = ("table", "json")


def bundle_command(
    manifest: str = typer.Option("tsbundle.toml", "--manifest", "-m", help="Path to tsbundle.toml"),
    profile: str | None = typer.Option(None, "--profile", "-p", help="Configuration profile to apply"),
    bare: bool = typer.Option(False, "--bare", help="Emit only the module definition array"),
    verbose: bool = typer.Option(False, "--verbose", help="Print debug logs"),
) -> None:
    """Assemble the project bundle.

    Examples:
        tsbundle bundle                      # Default configuration
        tsbundle bundle --profile release    # Apply [profiles.release]
        tsbundle bundle --bare               # No loader, definitions only
    """
    configure_logging(verbose)
    manifest_path = Path(manifest).resolve()

    try:
        config, store = load_project(manifest_path.parent, manifest_path, profile)
        if bare:
            config.no_loader_code = True
        code = asyncio.run(create_assembler(config, store).produce_bundle())
    except TsBundleError as e:
        console.print(f"[red]Bundle was not produced:[/red] {e}")
        raise typer.Exit(code=1) from e

    console.print(f"[green]Bundle written:[/green] {config.out_file} ({len(code)} chars)")


def order_command(
    manifest: str = typer.Option("tsbundle.toml", "--manifest", "-m", help="Path to tsbundle.toml"),
    profile: str | None = typer.Option(None, "--profile", "-p", help="Configuration profile to apply"),
    output_format: str = typer.Option(
        "table",
        "--format",
        "-f",
        help="Output format: table (default) or json",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Print debug logs"),
) -> None:
    """Show the order modules would be bundled in."""
    configure_logging(verbose)
    if output_format not in ORDER_FORMATS:
        console.print(f"[red]Unknown format '{output_format}'. Use one of: {', '.join(ORDER_FORMATS)}[/red]")
        raise typer.Exit(code=1)
    manifest_path = Path(manifest).resolve()

    try:
        config, store = load_project(manifest_path.parent, manifest_path, profile)
        order = create_assembler(config, store).get_module_order()
    except TsBundleError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e

    if output_format == "json":
        console.print_json(json.dumps(order.to_dict()))
        return

    table = Table(title="Bundle order")
    table.add_column("#", justify="right")
    table.add_column("Module")
    table.add_column("Circular")
    for i, name in enumerate(order.modules, start=1):
        table.add_row(str(i), name, "yes" if name in order.circular_dependent_modules else "")
    console.print(table)

    if order.absent_modules:
        console.print(f"\n[dim]External modules: {', '.join(sorted(order.absent_modules))}[/dim]")
