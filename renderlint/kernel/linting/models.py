"""Core models for the renderlint diagnostic engine."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from renderlint.kernel.framework.models import FrameworkInfo


class Severity(StrEnum):
    """Diagnostic severity, ordered info < warning < error."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        """Numeric rank; higher is more severe."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.INFO: 0, Severity.WARNING: 1, Severity.ERROR: 2}


class Outcome(StrEnum):
    """Aggregate classification of a scan, driving the exit-code contract."""

    CLEAN = "clean"
    ADVISORY = "advisory"
    ATTENTION = "attention"
    FAILING = "failing"
    NO_INPUT = "no-input"


PARSE_FAILURE = "parse-failure"
RULE_INTERNAL_ERROR = "rule-internal-error"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single finding located at a file/line/column."""

    rule_id: str
    severity: Severity
    file_path: str
    line: int
    column: int
    message: str
    suggestion: str | None = None

    @property
    def sort_key(self) -> tuple[str, int, int, str]:
        """Deterministic report ordering: path, line, column, rule id."""
        return (self.file_path, self.line, self.column, self.rule_id)


@dataclass(frozen=True, slots=True)
class ScanReport:
    """Aggregated, read-only result of one scan invocation."""

    diagnostics: tuple[Diagnostic, ...]
    framework: FrameworkInfo | None
    tips: tuple[str, ...]
    summary: Mapping[Severity, int]
    outcome: Outcome
    files_scanned: int = 0
    rules: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.summary, MappingProxyType):
            object.__setattr__(self, "summary", MappingProxyType(dict(self.summary)))

    @property
    def errors(self) -> list[Diagnostic]:
        """Diagnostics with severity 'error'."""
        return [d for d in self.diagnostics if d.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        """Diagnostics with severity 'warning'."""
        return [d for d in self.diagnostics if d.severity is Severity.WARNING]

    @property
    def info(self) -> list[Diagnostic]:
        """Diagnostics with severity 'info'."""
        return [d for d in self.diagnostics if d.severity is Severity.INFO]

    @property
    def is_clean(self) -> bool:
        """True if no diagnostics were produced."""
        return len(self.diagnostics) == 0

    @property
    def has_errors(self) -> bool:
        """True if any error-level diagnostics exist."""
        return self.outcome is Outcome.FAILING

    @property
    def highest_severity(self) -> Severity | None:
        """The most severe level present, or None for a clean report."""
        if not self.diagnostics:
            return None
        return max((d.severity for d in self.diagnostics), key=lambda s: s.rank)

    def by_file(self) -> dict[str, list[Diagnostic]]:
        """Group diagnostics by file path, preserving report order."""
        grouped: dict[str, list[Diagnostic]] = {}
        for diagnostic in self.diagnostics:
            grouped.setdefault(diagnostic.file_path, []).append(diagnostic)
        return grouped
