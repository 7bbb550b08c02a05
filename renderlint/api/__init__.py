"""Programmatic API for renderlint.

The CLI is a thin wrapper over these functions; editor integrations and CI
scripts can call them directly::

    from renderlint import api

    report = api.scan_project("./web")
    payload = api.report_to_dict(report)
    api.write_reports(report, "reports", formats=("json", "md"))
"""

from renderlint.api.report import REPORT_FORMATS, render_report, write_reports
from renderlint.api.scan import report_to_dict, scan_project, scan_sources

__all__ = [
    "REPORT_FORMATS",
    "render_report",
    "report_to_dict",
    "scan_project",
    "scan_sources",
    "write_reports",
]
