"""Rule listing command for the renderlint CLI."""

from __future__ import annotations

import json
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from renderlint.kernel.linting.component_rules import ALL_COMPONENT_RULES
from renderlint.kernel.linting.models import PARSE_FAILURE, RULE_INTERNAL_ERROR, Severity

console = Console()

_CLI_NAME = "rules"
_CLI_HELP = "List the available rules"
_CLI_TYPE = "command"
_CLI_FUNC = "rules"

_SEVERITY_STYLE = {Severity.ERROR: "red", Severity.WARNING: "yellow", Severity.INFO: "blue"}

# Reported by the scanner itself; always on
_SCANNER_RULES = (
    (PARSE_FAILURE, Severity.WARNING, "File could not be read or parsed"),
    (RULE_INTERNAL_ERROR, Severity.WARNING, "A rule failed while analyzing a file"),
)


def rules(
    output_format: Annotated[
        str,
        typer.Option(
            "--format",
            "-f",
            help="Output format (text, json)",
        ),
    ] = "text",
) -> None:
    """List every rule with its default severity.

    Examples
    --------
    renderlint rules
    renderlint rules --format json
    """
    entries = [(r.rule_id, r.severity, r.description, True) for r in ALL_COMPONENT_RULES]
    entries += [(rule_id, sev, desc, False) for rule_id, sev, desc in _SCANNER_RULES]

    if output_format == "json":
        output = [
            {
                "rule_id": rule_id,
                "severity": str(severity),
                "description": description,
                "configurable": configurable,
            }
            for rule_id, severity, description, configurable in entries
        ]
        typer.echo(json.dumps(output, indent=2))
        return

    table = Table(show_header=True, border_style="dim")
    table.add_column("Rule", style="cyan", no_wrap=True)
    table.add_column("Severity", no_wrap=True)
    table.add_column("Description")

    for rule_id, severity, description, configurable in entries:
        style = _SEVERITY_STYLE[severity]
        label = description if configurable else f"{description} (always on)"
        table.add_row(rule_id, f"[{style}]{severity}[/{style}]", label)

    console.print(table)
