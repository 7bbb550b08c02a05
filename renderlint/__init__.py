"""renderlint - static analysis of React rendering-performance anti-patterns.

Examples
--------
>>> from renderlint import scan_project
>>> report = scan_project("./web")  # doctest: +SKIP
>>> report.outcome  # doctest: +SKIP
<Outcome.CLEAN: 'clean'>
"""

__version__ = "0.1.0"

from renderlint.api.report import write_reports  # noqa: E402
from renderlint.api.scan import report_to_dict, scan_project, scan_sources  # noqa: E402
from renderlint.kernel.exceptions import (  # noqa: E402
    ConfigurationError,
    ManifestReadError,
    ParseError,
    RenderLintError,
    RuleInternalError,
    ScanCancelledError,
    ValidationError,
)
from renderlint.kernel.linting.models import Diagnostic, Outcome, ScanReport, Severity  # noqa: E402

__all__ = [
    "__version__",
    "ConfigurationError",
    "Diagnostic",
    "ManifestReadError",
    "Outcome",
    "ParseError",
    "RenderLintError",
    "RuleInternalError",
    "ScanCancelledError",
    "ScanReport",
    "Severity",
    "ValidationError",
    "report_to_dict",
    "scan_project",
    "scan_sources",
    "write_reports",
]
