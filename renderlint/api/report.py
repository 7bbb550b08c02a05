"""Report API.

Renders a ScanReport as a standalone JSON, Markdown or HTML document and
writes report files for CI artifacts. Every format is built from
``report_to_dict`` so all of them carry the same data.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jinja2.sandbox import SandboxedEnvironment

from renderlint.api.scan import report_to_dict
from renderlint.kernel.exceptions import ConfigurationError
from renderlint.kernel.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from renderlint.kernel.linting.models import ScanReport

logger = get_logger(__name__)

REPORT_FORMATS: tuple[str, ...] = ("json", "md", "html")
REPORT_BASENAME = "renderlint-report"

_MARKDOWN_TEMPLATE = """\
# renderlint report

| Outcome | Files scanned | Errors | Warnings | Info |
|---|---|---|---|---|
| {{ outcome }} | {{ files_scanned }} | {{ summary.error }} | {{ summary.warning }} \
| {{ summary.info }} |

## Framework

{% if framework %}
**{{ framework.name }}**{% if framework.version %} {{ framework.version }}{% endif %}\
{% if framework.features %} ({{ framework.features | join(", ") }}){% endif %}


{% for tip in tips %}
- {{ tip }}
{% endfor %}
{% else %}
No React framework detected.
{% endif %}

## Diagnostics

{% for file, entries in diagnostics | groupby("file") %}
### `{{ file }}`

| Location | Severity | Rule | Message | Suggestion |
|---|---|---|---|---|
{% for d in entries %}
| {{ d.line }}:{{ d.column }} | {{ d.severity }} | `{{ d.rule_id }}` \
| {{ d.message | cell }} | {{ d.suggestion | cell }} |
{% endfor %}

{% else %}
No issues found.
{% endfor %}
"""

_HTML_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>renderlint report</title>
<style>
body { font-family: system-ui, sans-serif; margin: 2rem; color: #1f2328; }
table { border-collapse: collapse; margin-bottom: 1.5rem; }
th, td { border: 1px solid #d0d7de; padding: 0.3rem 0.6rem; text-align: left; }
.error { color: #cf222e; } .warning { color: #9a6700; } .info { color: #0969da; }
</style>
</head>
<body>
<h1>renderlint report</h1>
<p>Outcome: <strong>{{ outcome }}</strong> ({{ files_scanned }} file(s) scanned)</p>
<p>
<span class="error">{{ summary.error }} error(s)</span>,
<span class="warning">{{ summary.warning }} warning(s)</span>,
<span class="info">{{ summary.info }} info</span>
</p>
<h2>Framework</h2>
{% if framework %}
<p><strong>{{ framework.name }}</strong> {{ framework.version }}\
{% if framework.features %} ({{ framework.features | join(", ") }}){% endif %}</p>
<ul>
{% for tip in tips %}
<li>{{ tip }}</li>
{% endfor %}
</ul>
{% else %}
<p>No React framework detected.</p>
{% endif %}
<h2>Diagnostics</h2>
{% for file, entries in diagnostics | groupby("file") %}
<h3><code>{{ file }}</code></h3>
<table>
<tr><th>Location</th><th>Severity</th><th>Rule</th><th>Message</th><th>Suggestion</th></tr>
{% for d in entries %}
<tr><td>{{ d.line }}:{{ d.column }}</td><td class="{{ d.severity }}">{{ d.severity }}</td>\
<td><code>{{ d.rule_id }}</code></td><td>{{ d.message }}</td><td>{{ d.suggestion or "" }}</td></tr>
{% endfor %}
</table>
{% else %}
<p>No issues found.</p>
{% endfor %}
</body>
</html>
"""


def _markdown_cell(value: str | None) -> str:
    """Make text safe inside a Markdown table cell."""
    if not value:
        return ""
    return value.replace("\\", "\\\\").replace("|", "\\|").replace("\n", " ")


def _environment(autoescape: bool) -> SandboxedEnvironment:
    env = SandboxedEnvironment(
        autoescape=autoescape,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["cell"] = _markdown_cell
    return env


_MARKDOWN = _environment(autoescape=False).from_string(_MARKDOWN_TEMPLATE)
_HTML = _environment(autoescape=True).from_string(_HTML_TEMPLATE)


def render_report(report: ScanReport, report_format: str) -> str:
    """Render a report as one of ``REPORT_FORMATS``.

    Raises
    ------
    ConfigurationError
        If the format is unknown
    """
    context: dict[str, Any] = report_to_dict(report)
    if report_format == "json":
        return json.dumps(context, indent=2) + "\n"
    if report_format == "md":
        return _MARKDOWN.render(context)
    if report_format == "html":
        return _HTML.render(context)
    raise ConfigurationError(
        "report format",
        f"unknown format '{report_format}' (choose from {', '.join(REPORT_FORMATS)})",
    )


def parse_report_formats(value: str) -> tuple[str, ...]:
    """Parse a comma-separated format list; ``all`` selects every format.

    Raises
    ------
    ConfigurationError
        If the list is empty or names an unknown format
    """
    requested = [part.strip().lower() for part in value.split(",") if part.strip()]
    if "all" in requested:
        return REPORT_FORMATS
    unknown = [name for name in requested if name not in REPORT_FORMATS]
    if unknown or not requested:
        raise ConfigurationError(
            "report format",
            f"expected 'all' or any of {', '.join(REPORT_FORMATS)}, got '{value}'",
        )
    return tuple(dict.fromkeys(requested))


def write_reports(
    report: ScanReport,
    output_dir: str | Path,
    formats: Iterable[str] = REPORT_FORMATS,
) -> list[Path]:
    """Write ``renderlint-report.<format>`` files into ``output_dir``.

    The directory is created when missing and existing reports are replaced,
    so repeated CI runs always leave one report per format.

    Returns
    -------
    list[Path]
        Written files, in the order of ``formats``

    Raises
    ------
    ConfigurationError
        If a format is unknown or the directory cannot be written
    """
    directory = Path(output_dir)
    rendered = [(name, render_report(report, name)) for name in formats]
    written: list[Path] = []
    try:
        directory.mkdir(parents=True, exist_ok=True)
        for name, content in rendered:
            path = directory / f"{REPORT_BASENAME}.{name}"
            path.write_text(content, encoding="utf-8")
            written.append(path)
    except OSError as e:
        raise ConfigurationError("report output", f"cannot write to '{directory}': {e}") from e
    logger.info("Wrote {} report file(s) to {}", len(written), directory)
    return written
