"""moonbundle CLI - bundle the MoonLoader script into build/."""

import logging
import sys
from pathlib import Path

import click
from rich.table import Table

from . import __version__
from .build import BuildResult
from .build import run_build
from .config import load_config
from .console import console
from .console import err_console
from .logging_setup import init_json_logging
from .utils.error_format import escape_markup
from .utils.error_format import format_error_message

logger = logging.getLogger(__name__)


def _show_details(result: BuildResult) -> None:
    table = Table(title="Bundled Modules")
    table.add_column("Module", style="cyan")
    table.add_column("Source", style="dim")
    table.add_column("Requires", style="green")

    for module in result.bundle.modules:
        table.add_row(
            escape_markup(module.name),
            escape_markup(module.path),
            escape_markup(", ".join(module.requires) or "-"),
        )

    console.print(table)
    if result.bundle.ignored:
        ignored = ", ".join(result.bundle.ignored)
        console.print(f"[dim]Left to runtime host: {escape_markup(ignored)}[/dim]", soft_wrap=True, highlight=False)


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML file overriding the built-in bundle settings",
)
@click.option("--verbose", "-v", is_flag=True, help="List bundled modules and ignored references")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Append JSONL logs to this file (default: $MOONBUNDLE_LOG_PATH)",
)
@click.version_option(__version__, prog_name="moonbundle")
def cli(config_path: Path | None, verbose: bool, log_file: Path | None):
    """Bundle src/smsmenu.lua and its local modules into build/smsmenu.lua.

    Modules provided by MoonLoader at runtime (lib.moonloader, ffi, ...) are
    left as plain require calls.
    """
    try:
        init_json_logging(log_file)
        config = load_config(config_path)
        result = run_build(config)
    except Exception as e:
        message = format_error_message(e)
        logger.error(f"Bundling failed: {message}")
        err_console.print(f"[red]Bundling failed:[/red] {escape_markup(message)}", soft_wrap=True, highlight=False)
        sys.exit(1)

    if verbose:
        _show_details(result)
    console.print(
        f"[green]Successfully bundled to {escape_markup(result.output_path)}[/green]",
        soft_wrap=True,
        highlight=False,
    )


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
