"""Scan command for the renderlint CLI."""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from renderlint.api.report import parse_report_formats, write_reports
from renderlint.api.scan import report_to_dict, scan_project
from renderlint.compiler.config_loader import load_config
from renderlint.kernel.config.models import RuleSetting
from renderlint.kernel.exceptions import ConfigurationError, ValidationError
from renderlint.kernel.linting.aggregate import exit_code, summarize
from renderlint.kernel.linting.models import Severity
from renderlint.kernel.logging import configure_logging

if TYPE_CHECKING:
    from renderlint.kernel.config.models import LoggingConfig, ScanConfig
    from renderlint.kernel.linting.models import Diagnostic, ScanReport

console = Console()

_CLI_NAME = "scan"
_CLI_HELP = "Scan a project for rendering-performance anti-patterns"
_CLI_TYPE = "command"
_CLI_FUNC = "scan"

CONFIGURATION_EXIT_CODE = 4

_OUTPUT_FORMATS = ("text", "json")
_SEVERITY_STYLE = {Severity.ERROR: "red", Severity.WARNING: "yellow", Severity.INFO: "blue"}


def scan(
    ctx: typer.Context,
    path: Annotated[
        Path,
        typer.Argument(
            help="Project directory or source file to scan",
            exists=True,
            file_okay=True,
            dir_okay=True,
            readable=True,
        ),
    ] = Path("."),
    manifest: Annotated[
        Path | None,
        typer.Option(
            "--manifest",
            "-m",
            help="package.json used for framework detection (defaults to PATH/package.json)",
        ),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="renderlint.yaml or pyproject.toml to load settings from",
        ),
    ] = None,
    output_format: Annotated[
        str,
        typer.Option(
            "--format",
            "-f",
            help="Output format (text, json)",
        ),
    ] = "text",
    severity: Annotated[
        str,
        typer.Option(
            "--severity",
            "-s",
            help="Minimum severity to display (info, warning, error); exit code is unaffected",
        ),
    ] = "info",
    disable: Annotated[
        str,
        typer.Option(
            "--disable",
            "-d",
            help="Comma-separated rule IDs to skip (e.g., unstable-literal-prop,index-as-key)",
        ),
    ] = "",
    workers: Annotated[
        int | None,
        typer.Option(
            "--workers",
            "-w",
            help="Number of files analyzed in parallel",
        ),
    ] = None,
    output_dir: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Also write report files (renderlint-report.<format>) into this directory",
        ),
    ] = None,
    report_format: Annotated[
        str,
        typer.Option(
            "--report-format",
            "-r",
            help="Report files to write with --output: all, or any of json,md,html",
        ),
    ] = "all",
) -> None:
    """Scan a project for unnecessary re-renders and unstable props.

    Exit codes: 0 clean or info only, 1 warnings, 2 errors, 3 nothing to
    scan, 4 invalid configuration.

    Examples
    --------
    renderlint scan ./web
    renderlint scan ./web --format json
    renderlint scan ./web --severity warning
    renderlint scan ./web --disable unstable-literal-prop
    renderlint scan ./web --output reports --report-format md,html
    """
    if output_format not in _OUTPUT_FORMATS:
        console.print(
            f"[red]Invalid format '{escape(output_format)}'.[/red] Choose from: text, json"
        )
        raise typer.Exit(CONFIGURATION_EXIT_CODE)
    try:
        min_severity = Severity(severity.lower())
    except ValueError:
        console.print(
            f"[red]Invalid severity '{escape(severity)}'.[/red] Choose from: info, warning, error"
        )
        raise typer.Exit(CONFIGURATION_EXIT_CODE) from None

    options: dict[str, Any] = ctx.obj or {}
    try:
        config = load_config(config_file)
        _apply_logging(config.logging, options)
        scan_config = _with_cli_overrides(config.scan, disable, workers)
        formats = parse_report_formats(report_format) if output_dir is not None else ()
        report = scan_project(path, manifest=manifest, config=scan_config)
        written = write_reports(report, output_dir, formats) if output_dir is not None else []
    except ConfigurationError as e:
        console.print(f"[red]Configuration Error:[/red] {escape(str(e))}")
        raise typer.Exit(CONFIGURATION_EXIT_CODE) from e

    shown = [d for d in report.diagnostics if d.severity.rank >= min_severity.rank]

    if output_format == "json":
        _print_json(report, shown)
    else:
        _print_text(path, report, shown)
        for report_path in written:
            console.print(f"[dim]Report written:[/dim] {escape(str(report_path))}")

    code = exit_code(report.outcome)
    if code:
        raise typer.Exit(code)


def _apply_logging(logging_config: LoggingConfig, options: dict[str, Any]) -> None:
    """Apply file-configured logging unless a global CLI flag already chose a level."""
    level = options["log_level"] if options.get("log_level_explicit") else logging_config.level
    configure_logging(
        level=level,
        format=logging_config.format,
        output_file=logging_config.output_file,
        use_color=logging_config.use_color,
        include_timestamp=False,
        force_reconfigure=True,
    )


def _with_cli_overrides(scan_config: ScanConfig, disable: str, workers: int | None) -> ScanConfig:
    """Layer --disable and --workers on top of the file configuration."""
    rules = dict(scan_config.rules)
    for rule_id in (r.strip().lower() for r in disable.split(",")):
        if rule_id:
            rules[rule_id] = dataclasses.replace(
                rules.get(rule_id, RuleSetting()), enabled=False
            )
    try:
        return dataclasses.replace(
            scan_config,
            rules=rules,
            max_workers=workers if workers is not None else scan_config.max_workers,
        )
    except ValidationError as e:
        raise ConfigurationError("--workers", str(e)) from e


def _print_text(path: Path, report: ScanReport, shown: list[Diagnostic]) -> None:
    """Print scan results as rich text."""
    console.print()

    if report.files_scanned == 0:
        console.print(f"[yellow]No source files found:[/yellow] {escape(str(path))}")
    elif not shown:
        console.print(
            f"[green]No issues found:[/green] {report.files_scanned} file(s) in {escape(str(path))}"
        )
    else:
        grouped: dict[str, list[Diagnostic]] = {}
        for diagnostic in shown:
            grouped.setdefault(diagnostic.file_path, []).append(diagnostic)
        for file_path, diagnostics in grouped.items():
            _print_file_table(file_path, diagnostics)

    _print_framework(report)

    summary = report.summary
    console.print(
        f"[bold]{report.files_scanned} file(s)[/bold]  "
        f"[red]{summary[Severity.ERROR]} error(s)[/red]  "
        f"[yellow]{summary[Severity.WARNING]} warning(s)[/yellow]  "
        f"[blue]{summary[Severity.INFO]} info[/blue]  "
        f"outcome: [bold]{report.outcome}[/bold]"
    )
    console.print()


def _print_file_table(file_path: str, diagnostics: list[Diagnostic]) -> None:
    console.print(f"[bold]{escape(file_path)}[/bold]")
    table = Table(show_header=True, border_style="dim")
    table.add_column("Location", style="green", no_wrap=True)
    table.add_column("Severity", no_wrap=True)
    table.add_column("Rule", style="cyan", no_wrap=True)
    table.add_column("Message")
    table.add_column("Suggestion", style="dim")

    for d in diagnostics:
        style = _SEVERITY_STYLE[d.severity]
        table.add_row(
            f"{d.line}:{d.column}",
            f"[{style}]{d.severity}[/{style}]",
            d.rule_id,
            escape(d.message),
            escape(d.suggestion or ""),
        )
    console.print(table)
    console.print()


def _print_framework(report: ScanReport) -> None:
    framework = report.framework
    if framework is None:
        return
    version = f" {framework.version}" if framework.version else ""
    features = f" ({', '.join(sorted(framework.features))})" if framework.features else ""
    console.print(f"[bold]Framework:[/bold] {framework.name}{version}{features}")
    if report.tips:
        console.print("[bold]Tips:[/bold]")
        for tip in report.tips:
            console.print(f"  - {tip}", markup=False)
    console.print()


def _print_json(report: ScanReport, shown: list[Diagnostic]) -> None:
    """Print scan results as JSON.

    ``summary`` counts the diagnostics actually listed; findings below
    ``--severity`` are counted under ``hidden``. ``outcome`` and ``exit_code``
    always describe the full report.
    """
    output = report_to_dict(report)
    shown_ids = {id(d) for d in shown}
    output["diagnostics"] = [
        entry
        for entry, diagnostic in zip(output["diagnostics"], report.diagnostics, strict=True)
        if id(diagnostic) in shown_ids
    ]
    hidden = [d for d in report.diagnostics if id(d) not in shown_ids]
    output["summary"] = {str(s): count for s, count in summarize(shown).items()}
    output["hidden"] = {str(s): count for s, count in summarize(hidden).items()}
    typer.echo(json.dumps(output, indent=2))
