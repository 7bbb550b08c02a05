"""Configuration data models for renderlint."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from renderlint.kernel.exceptions import ValidationError
from renderlint.kernel.linting.models import Severity

if TYPE_CHECKING:
    from renderlint.kernel.logging import LogFormat, LogLevel

DEFAULT_EXCLUDE: tuple[str, ...] = ("**/*.test.*", "**/*.spec.*", "**/*.d.ts")


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Logging configuration for renderlint.

    Attributes
    ----------
    level : str, default="WARNING"
        Log level (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL)
    format : str, default="structured"
        Output format (console, json, structured, rich)
    output_file : str | None, default=None
        Optional file path to write logs to
    use_color : bool, default=True
        Use ANSI color codes (auto-disabled for non-TTY)
    include_timestamp : bool, default=True
        Include timestamp in log output

    Examples
    --------
    Environment variable overrides:

    ```bash
    export RENDERLINT_LOG_LEVEL=DEBUG
    export RENDERLINT_LOG_FORMAT=rich
    export RENDERLINT_LOG_FILE=/tmp/renderlint.log
    ```
    """

    level: LogLevel = "WARNING"
    format: LogFormat = "structured"
    output_file: str | None = None
    use_color: bool = True
    include_timestamp: bool = True


@dataclass(frozen=True, slots=True)
class RuleSetting:
    """Per-rule switch and severity override.

    Attributes
    ----------
    enabled : bool, default=True
        Whether the rule runs at all
    severity : Severity | None, default=None
        Replaces the rule's default severity when set
    """

    enabled: bool = True
    severity: Severity | None = None


@dataclass(frozen=True, slots=True)
class ScanConfig:
    """What to scan and which rules to apply.

    Attributes
    ----------
    include : tuple[str, ...]
        Glob patterns a file must match to be scanned (empty keeps everything)
    exclude : tuple[str, ...]
        Glob patterns of files to skip
    rules : Mapping[str, RuleSetting]
        Rule id -> setting; rules not listed run with their defaults
    max_workers : int | None
        Thread pool size for per-file analysis (None lets the executor decide)
    manifest : str | None
        Path to ``package.json``; defaults to the one in the scanned root
    """

    include: tuple[str, ...] = ()
    exclude: tuple[str, ...] = DEFAULT_EXCLUDE
    rules: Mapping[str, RuleSetting] = field(default_factory=dict)
    max_workers: int | None = None
    manifest: str | None = None

    def __post_init__(self) -> None:
        """Freeze the rule map and validate the worker count.

        Raises
        ------
        ValidationError
            If max_workers is not a positive integer
        """
        if self.max_workers is not None and self.max_workers < 1:
            raise ValidationError("max_workers", "must be >= 1", self.max_workers)
        if not isinstance(self.rules, MappingProxyType):
            object.__setattr__(self, "rules", MappingProxyType(dict(self.rules)))


@dataclass(frozen=True, slots=True)
class RenderLintConfig:
    """Complete renderlint configuration.

    Examples
    --------
    YAML configuration (``renderlint.yaml``):

    ```yaml
    kind: Config
    metadata:
      name: renderlint
    spec:
      exclude: ["**/*.stories.tsx"]
      rules:
        unstable-literal-prop: off
        index-as-key: error
      logging:
        level: INFO
    ```

    TOML configuration in pyproject.toml:

    ```toml
    [tool.renderlint]
    exclude = ["**/*.stories.tsx"]

    [tool.renderlint.rules]
    unstable-literal-prop = "off"
    ```
    """

    scan: ScanConfig = field(default_factory=ScanConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
