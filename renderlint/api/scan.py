"""Scan API.

Provides the functions the CLI and embedding tools use to analyze a project:
discovery, rule scanning, framework detection, tips and aggregation in one
call.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from renderlint.compiler.discovery import discover_sources, read_sources
from renderlint.kernel.config.models import ScanConfig
from renderlint.kernel.framework.detector import FrameworkDetector
from renderlint.kernel.framework.models import FrameworkInfo
from renderlint.kernel.framework.tips import tips_for
from renderlint.kernel.linting.aggregate import aggregate, exit_code
from renderlint.kernel.linting.component_rules import default_catalog
from renderlint.kernel.linting.models import ScanReport, Severity
from renderlint.kernel.linting.scanner import Scanner
from renderlint.kernel.logging import get_logger

logger = get_logger(__name__)

MANIFEST_NAME = "package.json"


def _default_manifest(root: Path) -> Path:
    base = root.parent if root.is_file() else root
    return base / MANIFEST_NAME


def scan_sources(
    sources: Sequence[tuple[str, str | None]],
    manifest: str | Path | None = None,
    config: ScanConfig | None = None,
    cancel_event: threading.Event | None = None,
) -> ScanReport:
    """Scan in-memory sources.

    Parameters
    ----------
    sources : Sequence[tuple[str, str | None]]
        ``(path, text)`` pairs; the path selects the grammar
    manifest : str | Path | None
        ``package.json`` used for framework detection; None skips detection
    config : ScanConfig | None
        Rule settings and worker count; defaults apply when None
    cancel_event : threading.Event | None
        Set it from another thread to abandon the scan

    Returns
    -------
    ScanReport
        Aggregated report; ``no-input`` when ``sources`` is empty

    Raises
    ------
    ConfigurationError
        If the rule settings are invalid (raised before any file is read)
    ScanCancelledError
        If ``cancel_event`` is set before the scan finishes
    """
    config = config or ScanConfig()
    catalog = default_catalog(config.rules)
    scanner = Scanner(catalog, max_workers=config.max_workers)

    diagnostics = scanner.scan(sources, cancel_event=cancel_event)

    framework: FrameworkInfo | None = None
    if manifest is not None:
        framework = FrameworkDetector().detect(manifest)

    report = aggregate(
        diagnostics,
        framework,
        tips_for(framework),
        files_scanned=len(sources),
        rules=[rule.rule_id for rule in catalog.enabled_rules],
    )
    logger.info(
        "Scanned {files} file(s): {outcome} ({errors} error, {warnings} warning, {info} info)",
        files=report.files_scanned,
        outcome=report.outcome,
        errors=report.summary[Severity.ERROR],
        warnings=report.summary[Severity.WARNING],
        info=report.summary[Severity.INFO],
    )
    return report


def scan_project(
    root: str | Path,
    manifest: str | Path | None = None,
    config: ScanConfig | None = None,
    cancel_event: threading.Event | None = None,
) -> ScanReport:
    """Scan a project directory (or a single file).

    Parameters
    ----------
    root : str | Path
        Project directory or source file
    manifest : str | Path | None
        ``package.json`` path; defaults to ``config.manifest``, then to the
        manifest in ``root``. Detection is attempted even when no source
        files are found.
    config : ScanConfig | None
        Include/exclude globs, rule settings and worker count
    cancel_event : threading.Event | None
        Set it from another thread to abandon the scan

    Returns
    -------
    ScanReport
        Aggregated report

    Examples
    --------
    >>> report = scan_project("./my-app")  # doctest: +SKIP
    >>> report.outcome  # doctest: +SKIP
    <Outcome.ATTENTION: 'attention'>
    """
    config = config or ScanConfig()
    root_path = Path(root)
    manifest_path = Path(manifest or config.manifest or _default_manifest(root_path))

    paths = discover_sources(root_path, include=config.include, exclude=config.exclude)
    if not paths:
        logger.warning("No source files found under {}", root_path)
    return scan_sources(
        read_sources(paths), manifest=manifest_path, config=config, cancel_event=cancel_event
    )


def report_to_dict(report: ScanReport) -> dict[str, Any]:
    """Convert a report to a JSON-serializable dict.

    Returns
    -------
    dict
        Keys: outcome, exit_code, files_scanned, summary, framework, tips,
        rules, diagnostics
    """
    framework = report.framework
    return {
        "outcome": report.outcome.value,
        "exit_code": exit_code(report.outcome),
        "files_scanned": report.files_scanned,
        "summary": {severity.value: count for severity, count in report.summary.items()},
        "framework": (
            {
                "name": str(framework.name),
                "version": framework.version,
                "features": sorted(framework.features),
            }
            if framework is not None
            else None
        ),
        "tips": list(report.tips),
        "rules": list(report.rules),
        "diagnostics": [
            {
                "rule_id": d.rule_id,
                "severity": d.severity.value,
                "file": d.file_path,
                "line": d.line,
                "column": d.column,
                "message": d.message,
                "suggestion": d.suggestion,
            }
            for d in report.diagnostics
        ],
    }
