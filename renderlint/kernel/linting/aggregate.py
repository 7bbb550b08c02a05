"""Report aggregation: ordering, severity summary, outcome and exit code."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from typing import TYPE_CHECKING

from renderlint.kernel.linting.models import Diagnostic, Outcome, ScanReport, Severity

if TYPE_CHECKING:
    from renderlint.kernel.framework.models import FrameworkInfo

_EXIT_CODES: dict[Outcome, int] = {
    Outcome.CLEAN: 0,
    Outcome.ADVISORY: 0,
    Outcome.ATTENTION: 1,
    Outcome.FAILING: 2,
    Outcome.NO_INPUT: 3,
}


def summarize(diagnostics: Iterable[Diagnostic]) -> dict[Severity, int]:
    """Count diagnostics per severity, with every severity present."""
    counts = Counter(d.severity for d in diagnostics)
    return {severity: counts.get(severity, 0) for severity in Severity}


def classify(diagnostics: Iterable[Diagnostic], files_scanned: int) -> Outcome:
    """Classify a scan by the most severe diagnostic it produced."""
    if files_scanned == 0:
        return Outcome.NO_INPUT
    severities = {d.severity for d in diagnostics}
    if Severity.ERROR in severities:
        return Outcome.FAILING
    if Severity.WARNING in severities:
        return Outcome.ATTENTION
    if Severity.INFO in severities:
        return Outcome.ADVISORY
    return Outcome.CLEAN


def aggregate(
    diagnostics: Iterable[Diagnostic],
    framework: FrameworkInfo | None,
    tips: Iterable[str],
    files_scanned: int,
    rules: Iterable[str] = (),
) -> ScanReport:
    """Merge scanner output and framework advice into a report.

    Parameters
    ----------
    diagnostics : Iterable[Diagnostic]
        Findings in any order
    framework : FrameworkInfo | None
        Detected framework, if any
    tips : Iterable[str]
        Framework tips, already ordered
    files_scanned : int
        Number of source files handed to the scanner
    rules : Iterable[str]
        Ids of the rules that ran

    Returns
    -------
    ScanReport
        Diagnostics sorted by file, line, column and rule id, with counts per
        severity and the overall outcome
    """
    ordered = tuple(sorted(diagnostics, key=lambda d: d.sort_key))
    summary = summarize(ordered)
    return ScanReport(
        diagnostics=ordered,
        framework=framework,
        tips=tuple(tips),
        summary=summary,
        outcome=classify(ordered, files_scanned),
        files_scanned=files_scanned,
        rules=tuple(rules),
    )


def exit_code(outcome: Outcome) -> int:
    """Process exit code for an outcome."""
    return _EXIT_CODES[outcome]
