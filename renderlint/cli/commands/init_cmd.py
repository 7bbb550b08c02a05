"""Initialize command for the renderlint CLI."""

from pathlib import Path
from typing import Annotated, Any

import typer
import yaml
from rich.console import Console

from renderlint.compiler.config_loader import CONFIG_FILE_NAMES
from renderlint.kernel.config.models import DEFAULT_EXCLUDE
from renderlint.kernel.linting.component_rules import ALL_COMPONENT_RULES

console = Console()

_CLI_NAME = "init"
_CLI_HELP = "Write a default renderlint.yaml"
_CLI_TYPE = "command"
_CLI_FUNC = "init"


def init(
    path: Annotated[
        Path | None,
        typer.Argument(
            help="Directory to initialize (defaults to current directory)",
        ),
    ] = None,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite existing configuration",
        ),
    ] = False,
) -> None:
    """Write a renderlint.yaml listing every rule at its default severity."""
    if path is None:
        path = Path.cwd()

    config_path = path / CONFIG_FILE_NAMES[0]

    if config_path.exists() and not force:
        console.print(
            f"[yellow]{config_path.name} already exists in {path}.[/yellow] "
            "Use --force to overwrite."
        )
        raise typer.Exit(1)

    path.mkdir(parents=True, exist_ok=True)
    config_path.write_text(_generate_config(), encoding="utf-8")
    console.print(f"[green]✓[/green] Created {config_path.name} in {path}")

    console.print("\n[bold]Next steps:[/bold]")
    console.print("1. Turn rules off or change their severity in renderlint.yaml")
    console.print("2. Run: renderlint scan .")


def _generate_config() -> str:
    """Generate renderlint.yaml with kind: Config format."""
    config: dict[str, Any] = {
        "kind": "Config",
        "metadata": {
            "name": "renderlint",
        },
        "spec": {
            "include": [],
            "exclude": list(DEFAULT_EXCLUDE),
            "rules": {rule.rule_id: str(rule.severity) for rule in ALL_COMPONENT_RULES},
            "logging": {
                "level": "WARNING",
                "format": "structured",
            },
        },
    }
    return yaml.safe_dump(config, sort_keys=False)
