"""Core exception hierarchy for renderlint.

All renderlint exceptions inherit from RenderLintError for easy exception
handling. Errors caused by the scanned project's content (ParseError,
RuleInternalError, ManifestReadError) are absorbed into the diagnostic stream
by the scanner and the framework detector. Errors caused by invalid engine
configuration (ConfigurationError, ValidationError) are raised before any file
is scanned.
"""

from __future__ import annotations

# ============================================================================
# Base Exception
# ============================================================================


class RenderLintError(Exception):
    """Base exception for all renderlint errors.

    Catch this to handle all renderlint errors.
    """

    pass


# ============================================================================
# Configuration & Validation Errors
# ============================================================================


class ConfigurationError(RenderLintError):
    """Raised when engine configuration is invalid.

    Examples
    --------
    Example usage::

        raise ConfigurationError("rule catalog", "duplicate rule id 'missing-list-key'")
    """

    def __init__(self, component: str, reason: str) -> None:
        """Initialize configuration error.

        Args
        ----
            component: Name of the component with invalid configuration
            reason: Explanation of what's wrong
        """
        super().__init__(f"Configuration error in '{component}': {reason}")
        self.component = component
        self.reason = reason


class ValidationError(RenderLintError):
    """Raised when a configuration value fails validation.

    Examples
    --------
    Example usage::

        raise ValidationError("max_workers", "must be positive", value=-1)
    """

    def __init__(self, field: str, constraint: str, value: object = None) -> None:
        """Initialize validation error.

        Args
        ----
            field: Name of the field that failed validation
            constraint: Description of the validation constraint
            value: The invalid value (optional)
        """
        if value is not None:
            msg = f"Validation failed for '{field}': {constraint} (got {value!r})"
        else:
            msg = f"Validation failed for '{field}': {constraint}"
        super().__init__(msg)
        self.field = field
        self.constraint = constraint
        self.value = value


# ============================================================================
# Scanned Content Errors
# ============================================================================


class ParseError(RenderLintError):
    """Raised when a source file cannot be read or parsed.

    ``line`` and ``column`` are 1-based and point at the first syntax error
    (1:1 when the file could not be read at all).

    Examples
    --------
    Example usage::

        raise ParseError("src/App.tsx", "unexpected token", line=12, column=5)
    """

    def __init__(self, path: str, reason: str, line: int = 1, column: int = 1) -> None:
        super().__init__(f"Cannot parse '{path}' at {line}:{column}: {reason}")
        self.path = path
        self.reason = reason
        self.line = line
        self.column = column


class RuleInternalError(RenderLintError):
    """Raised when a rule implementation faults on a source unit."""

    def __init__(self, rule_id: str, path: str, original_error: BaseException) -> None:
        self.rule_id = rule_id
        self.path = path
        self.original_error = original_error
        super().__init__(f"Rule '{rule_id}' failed on '{path}': {original_error!r}")


class ManifestReadError(RenderLintError):
    """Raised when the project manifest is missing or unparseable."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Cannot read manifest '{path}': {reason}")
        self.path = path
        self.reason = reason


# ============================================================================
# Scan Lifecycle Errors
# ============================================================================


class ScanCancelledError(RenderLintError):
    """Raised when a scan is cancelled before all files were processed.

    Partial results are discarded and never surfaced as a report.
    """

    def __init__(self, files_done: int, files_total: int) -> None:
        self.files_done = files_done
        self.files_total = files_total
        super().__init__(f"Scan cancelled after {files_done} of {files_total} file(s)")


__all__ = [
    # Base
    "RenderLintError",
    # Configuration & Validation
    "ConfigurationError",
    "ValidationError",
    # Scanned content
    "ParseError",
    "RuleInternalError",
    "ManifestReadError",
    # Lifecycle
    "ScanCancelledError",
]
