"""renderlint CLI - Main entrypoint."""

import typer
from rich.console import Console
from rich.markup import escape

from renderlint import __version__
from renderlint.cli.commands import init_cmd, rules_cmd, scan_cmd
from renderlint.kernel.logging import configure_logging

# Create the main Typer app
app = typer.Typer(
    name="renderlint",
    help="renderlint - Static analysis of React rendering-performance anti-patterns.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=False,
)

# Create console for rich output
console = Console()

# Add subcommands
app.command(name=scan_cmd._CLI_NAME, help=scan_cmd._CLI_HELP)(scan_cmd.scan)
app.command(name=rules_cmd._CLI_NAME, help=rules_cmd._CLI_HELP)(rules_cmd.rules)
app.command(name=init_cmd._CLI_NAME, help=init_cmd._CLI_HELP)(init_cmd.init)

_LOG_LEVELS = {
    "trace": "TRACE",
    "debug": "DEBUG",
    "info": "INFO",
    "warn": "WARNING",
    "warning": "WARNING",
    "error": "ERROR",
}


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold blue]renderlint[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def callback(
    ctx: typer.Context,
    *,
    quiet: bool = typer.Option(False, "-q", "--quiet", help="Only log errors"),
    verbose: bool = typer.Option(False, "-V", "--verbose", help="Enable debug logging"),
    log_level: str = typer.Option(
        "warning", "--log-level", help="Log level: debug|info|warning|error"
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """renderlint - find unnecessary re-renders before they ship.

    Global flags are parsed here and stored on `ctx.obj` for subcommands.
    """
    if ctx.obj is None:
        ctx.obj = {}

    normalized = log_level.lower()
    if normalized not in _LOG_LEVELS:
        console.print(
            f"[red]Invalid log level '{escape(log_level)}'.[/red] "
            "Choose from: trace, debug, info, warning, error"
        )
        raise typer.Exit(scan_cmd.CONFIGURATION_EXIT_CODE)

    # Compute effective log level
    effective_level = _LOG_LEVELS[normalized]
    if quiet:
        effective_level = "ERROR"
    elif verbose:
        effective_level = "DEBUG"

    ctx.obj.update({
        "quiet": quiet,
        "verbose": verbose,
        "log_level": effective_level,
        "log_level_explicit": quiet or verbose or normalized != "warning",
        "version": __version__,
    })

    configure_logging(
        level=effective_level,  # type: ignore[arg-type]
        format="console",
        include_timestamp=False,
        force_reconfigure=True,
    )


def main() -> None:
    """Main CLI entrypoint."""
    app()


if __name__ == "__main__":
    main()
