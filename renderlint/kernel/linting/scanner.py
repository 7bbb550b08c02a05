"""Scanner: parses each source file and runs the rule catalog on it."""

from __future__ import annotations

import threading
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from renderlint.kernel.exceptions import ParseError, ScanCancelledError, ValidationError
from renderlint.kernel.linting.models import PARSE_FAILURE, Diagnostic, Severity
from renderlint.kernel.logging import get_logger
from renderlint.kernel.source.parser import parse_source

if TYPE_CHECKING:
    from renderlint.kernel.linting.rules import RuleCatalog

logger = get_logger(__name__)

# (path, text); text is None when the file could not be read
SourceInput = tuple[str, str | None]


def parse_failure_diagnostic(error: ParseError) -> Diagnostic:
    """Convert a parse failure into its diagnostic."""
    return Diagnostic(
        rule_id=PARSE_FAILURE,
        severity=Severity.WARNING,
        file_path=error.path,
        line=error.line,
        column=error.column,
        message=f"File could not be analyzed: {error.reason}",
        suggestion=None,
    )


class Scanner:
    """Runs a rule catalog over many source files.

    Files are analyzed independently on a thread pool. Results are merged in
    input order, so the output does not depend on scheduling.

    Parameters
    ----------
    catalog : RuleCatalog
        Rules to apply, with settings already resolved
    max_workers : int | None
        Thread pool size; None lets the executor pick a default
    """

    def __init__(self, catalog: RuleCatalog, max_workers: int | None = None) -> None:
        if max_workers is not None and max_workers < 1:
            raise ValidationError("max_workers", "must be >= 1", max_workers)
        self.catalog = catalog
        self.max_workers = max_workers

    def scan(
        self,
        sources: Sequence[SourceInput],
        cancel_event: threading.Event | None = None,
    ) -> list[Diagnostic]:
        """Analyze every source and return all diagnostics in input order.

        Parameters
        ----------
        sources : Sequence[tuple[str, str | None]]
            ``(path, text)`` pairs
        cancel_event : threading.Event | None
            Checked before each file; once set the scan stops

        Returns
        -------
        list[Diagnostic]
            Per-file diagnostics concatenated in input order (unsorted)

        Raises
        ------
        ScanCancelledError
            If ``cancel_event`` was set before every file was analyzed
        """
        if not sources:
            return []

        logger.debug(
            "Scanning {count} file(s) with {rules} rule(s)",
            count=len(sources),
            rules=len(self.catalog.enabled_rules),
        )
        with ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="renderlint-scan"
        ) as executor:
            futures = [
                executor.submit(self._scan_if_active, path, text, cancel_event)
                for path, text in sources
            ]
            results = [future.result() for future in futures]

        completed = [r for r in results if r is not None]
        if len(completed) != len(results):
            logger.info("Scan cancelled after {} of {} file(s)", len(completed), len(results))
            raise ScanCancelledError(len(completed), len(results))

        return [diagnostic for per_file in completed for diagnostic in per_file]

    def scan_file(self, path: str, text: str | None) -> list[Diagnostic]:
        """Analyze a single file.

        Parse failures and rule faults are reported as diagnostics; nothing
        about the file's content makes this raise.
        """
        if text is None:
            error = ParseError(path, "file could not be read")
            logger.warning("{}", error)
            return [parse_failure_diagnostic(error)]
        try:
            unit = parse_source(text, path)
        except ParseError as e:
            logger.warning("{}", e)
            return [parse_failure_diagnostic(e)]

        diagnostics = self.catalog.run(unit)
        logger.debug("{path}: {count} diagnostic(s)", path=path, count=len(diagnostics))
        return diagnostics

    def _scan_if_active(
        self, path: str, text: str | None, cancel_event: threading.Event | None
    ) -> list[Diagnostic] | None:
        if cancel_event is not None and cancel_event.is_set():
            return None
        return self.scan_file(path, text)
