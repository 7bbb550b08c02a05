"""Configuration loader for renderlint.

Parses configuration into kernel config models. Supports two config sources:

1. **kind: Config YAML**: canonical format, loaded via explicit path,
   ``RENDERLINT_CONFIG_PATH`` or ``renderlint.yaml`` in the working directory.
2. **pyproject.toml [tool.renderlint]**: auto-discovery fallback (standard
   Python convention).

This is part of the compiler (userspace); the kernel never touches config
file formats directly.
"""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path
from typing import Any, cast, get_args

import yaml

from renderlint.kernel.config.models import (
    DEFAULT_EXCLUDE,
    LoggingConfig,
    RenderLintConfig,
    RuleSetting,
    ScanConfig,
)
from renderlint.kernel.exceptions import ConfigurationError, ValidationError
from renderlint.kernel.linting.models import Severity
from renderlint.kernel.logging import LogFormat, LogLevel, get_logger

CONFIG_FILE_NAMES = ("renderlint.yaml", "renderlint.yml")

# Constants for boolean environment variable parsing
_TRUTHY_VALUES = frozenset({"true", "1", "yes", "on", "enabled"})
_FALSY_VALUES = frozenset({"false", "0", "no", "off", "disabled"})

_LOG_LEVELS = frozenset(get_args(LogLevel))
_LOG_FORMATS = frozenset(get_args(LogFormat))

logger = get_logger(__name__)


def _parse_bool_env(value: str) -> bool:
    """Parse boolean from environment variable value.

    Raises
    ------
    ValueError
        If value is not a recognized boolean string
    """
    normalized = value.lower().strip()
    if normalized in _TRUTHY_VALUES:
        return True
    if normalized in _FALSY_VALUES:
        return False
    expected = sorted(_TRUTHY_VALUES | _FALSY_VALUES)
    raise ValueError(f"Invalid boolean value: {value!r}. Expected one of: {expected}")


def parse_rule_setting(rule_id: str, value: Any) -> RuleSetting:
    """Parse one ``rules`` entry.

    Accepted forms are ``"off"``, a severity name (``"info"``, ``"warning"``,
    ``"error"``), a boolean (YAML reads a bare ``off`` as False), or a mapping
    with optional ``enabled`` and ``severity`` keys.

    Raises
    ------
    ConfigurationError
        If the entry has any other shape
    """
    if isinstance(value, bool):
        return RuleSetting(enabled=value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in ("off", "disabled"):
            return RuleSetting(enabled=False)
        if normalized in ("on", "enabled"):
            return RuleSetting()
        return RuleSetting(severity=_parse_severity(rule_id, normalized))
    if isinstance(value, Mapping):
        unknown = set(value) - {"enabled", "severity"}
        if unknown:
            raise ConfigurationError(
                f"rules.{rule_id}", f"unknown key(s): {', '.join(sorted(unknown))}"
            )
        enabled = value.get("enabled", True)
        if not isinstance(enabled, bool):
            raise ConfigurationError(f"rules.{rule_id}", "'enabled' must be true or false")
        severity = value.get("severity")
        return RuleSetting(
            enabled=enabled,
            severity=_parse_severity(rule_id, str(severity).lower()) if severity else None,
        )
    raise ConfigurationError(
        f"rules.{rule_id}",
        f"expected 'off', a severity or a mapping, got {type(value).__name__}",
    )


def _parse_severity(rule_id: str, value: str) -> Severity:
    try:
        return Severity(value)
    except ValueError:
        choices = ", ".join(s.value for s in Severity)
        raise ConfigurationError(
            f"rules.{rule_id}", f"unknown severity '{value}' (expected off, {choices})"
        ) from None


@lru_cache(maxsize=32)
def _load_and_parse_cached(path_str: str) -> RenderLintConfig:
    """Cached configuration loader."""
    loader = ConfigLoader()
    return loader._load_and_parse(Path(path_str))


class ConfigLoader:
    """Loads and processes renderlint configuration files.

    Supports two config sources:

    1. ``kind: Config`` YAML manifests (explicit path, env var or ``renderlint.yaml``)
    2. ``pyproject.toml [tool.renderlint]`` (auto-discovery)
    """

    ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")

    def load_config_file(self, path: str | Path | None = None) -> RenderLintConfig:
        """Load configuration from YAML or pyproject.toml.

        Parameters
        ----------
        path : str | Path | None
            Path to config file. If None, searches using discovery order.

        Returns
        -------
        RenderLintConfig
            Parsed configuration with environment variables substituted

        Raises
        ------
        FileNotFoundError
            If discovery finds no configuration file
        ConfigurationError
            If an explicit path does not exist or the file content is invalid
        """
        config_path = self._find_config_file(path)
        return _load_and_parse_cached(str(config_path.absolute()))

    def _load_and_parse(self, config_path: Path) -> RenderLintConfig:
        """Load and parse configuration file (YAML or TOML)."""
        logger.info("Loading configuration from {path}", path=config_path)

        if config_path.suffix in (".yaml", ".yml"):
            return self._load_yaml_config(config_path)
        return self._load_toml_config(config_path)

    def _load_yaml_config(self, config_path: Path) -> RenderLintConfig:
        """Load and parse a kind: Config YAML file.

        Raises
        ------
        ConfigurationError
            If the YAML file is not a valid kind: Config manifest
        """
        try:
            with config_path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(config_path.name, f"invalid YAML: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(
                config_path.name, f"expected a mapping, got {type(data).__name__}"
            )

        kind = data.get("kind")
        if kind != "Config":
            raise ConfigurationError(
                config_path.name,
                f"YAML config file must use 'kind: Config' manifest format, got 'kind: {kind}'",
            )

        spec = data.get("spec") or {}
        if not isinstance(spec, dict):
            raise ConfigurationError(config_path.name, "'spec' field must be a mapping")

        spec = self._substitute_env_vars(spec)
        return self._parse_config(spec)

    def _load_toml_config(self, config_path: Path) -> RenderLintConfig:
        """Load and parse a TOML config file (pyproject.toml)."""
        try:
            with config_path.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(config_path.name, f"invalid TOML: {e}") from e

        if config_path.name == "pyproject.toml":
            renderlint_data = data.get("tool", {}).get("renderlint", {})
            if not renderlint_data:
                logger.warning(
                    "No [tool.renderlint] section found in pyproject.toml, using defaults"
                )
                return get_default_config()
        elif "tool" in data and "renderlint" in data.get("tool", {}):
            renderlint_data = data["tool"]["renderlint"]
        else:
            # Flat TOML file
            renderlint_data = data

        renderlint_data = self._substitute_env_vars(renderlint_data)
        return self._parse_config(renderlint_data)

    def _find_config_file(self, path: str | Path | None) -> Path:
        """Find configuration file.

        Discovery order:
        1. Explicit path argument
        2. ``RENDERLINT_CONFIG_PATH`` env var
        3. ``renderlint.yaml`` / ``renderlint.yml`` in CWD
        4. ``pyproject.toml`` with ``[tool.renderlint]`` in CWD or a parent directory

        Raises
        ------
        ConfigurationError
            If an explicit path does not exist
        FileNotFoundError
            If no configuration file is found
        """
        if path:
            config_path = Path(path)
            if not config_path.is_file():
                raise ConfigurationError(str(config_path), "configuration file not found")
            return config_path

        if env_path := os.getenv("RENDERLINT_CONFIG_PATH"):
            config_path = Path(env_path)
            if config_path.is_file():
                logger.debug("Using config from RENDERLINT_CONFIG_PATH: {}", config_path)
                return config_path
            logger.warning("RENDERLINT_CONFIG_PATH set but file not found: {}", config_path)

        for name in CONFIG_FILE_NAMES:
            if Path(name).is_file():
                return Path(name)

        current = Path.cwd()
        while True:
            pyproject = current / "pyproject.toml"
            if pyproject.is_file():
                try:
                    with pyproject.open("rb") as f:
                        data = tomllib.load(f)
                except tomllib.TOMLDecodeError as e:
                    logger.debug("Skipping unreadable {}: {}", pyproject, e)
                else:
                    if "renderlint" in data.get("tool", {}):
                        return pyproject
            if current == current.parent:
                break
            current = current.parent

        raise FileNotFoundError(
            "No configuration file found. Provide a kind: Config YAML path, "
            "set RENDERLINT_CONFIG_PATH, or add [tool.renderlint] to pyproject.toml"
        )

    def _substitute_env_vars(self, data: Any) -> Any:
        """Recursively substitute ``${VAR}`` placeholders from the environment."""
        if isinstance(data, str):

            def replacer(match: re.Match[str]) -> str:
                var_name = match.group(1)
                value = os.environ.get(var_name)
                if value is None:
                    logger.debug(
                        "Environment variable ${{{var_name}}} not found, keeping placeholder",
                        var_name=var_name,
                    )
                    return match.group(0)
                return value

            return self.ENV_VAR_PATTERN.sub(replacer, data)

        if isinstance(data, dict):
            return {key: self._substitute_env_vars(value) for key, value in data.items()}

        if isinstance(data, list):
            return [self._substitute_env_vars(item) for item in data]

        return data

    def _parse_config(self, data: dict[str, Any]) -> RenderLintConfig:
        """Parse format-agnostic configuration data into RenderLintConfig.

        Raises
        ------
        ConfigurationError
            If any section has the wrong shape
        """
        rules_data = data.get("rules") or {}
        if not isinstance(rules_data, dict):
            raise ConfigurationError("rules", "must be a mapping of rule id to setting")
        rules = {
            str(rule_id): parse_rule_setting(str(rule_id), value)
            for rule_id, value in rules_data.items()
        }
        if rules:
            logger.debug("Loaded {count} rule setting(s)", count=len(rules))

        max_workers = data.get("max_workers")
        if max_workers is not None and (
            isinstance(max_workers, bool) or not isinstance(max_workers, int)
        ):
            raise ConfigurationError("max_workers", "must be an integer")

        manifest = data.get("manifest")
        if manifest is not None and not isinstance(manifest, str):
            raise ConfigurationError("manifest", "must be a path string")

        logging_data = data.get("logging") or {}
        if not isinstance(logging_data, dict):
            raise ConfigurationError("logging", "must be a mapping")

        try:
            scan = ScanConfig(
                include=self._patterns(data, "include", ()),
                exclude=self._patterns(data, "exclude", DEFAULT_EXCLUDE),
                rules=rules,
                max_workers=max_workers,
                manifest=manifest,
            )
        except ValidationError as e:
            raise ConfigurationError("scan", str(e)) from e

        return RenderLintConfig(scan=scan, logging=self._parse_logging_config(logging_data))

    def _patterns(self, data: dict[str, Any], key: str, default: tuple[str, ...]) -> tuple[str, ...]:
        if key not in data:
            return default
        value = data[key]
        if isinstance(value, str):
            return (value,)
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigurationError(key, "must be a list of glob patterns")
        return tuple(value)

    def _parse_logging_config(self, logging_data: dict[str, Any]) -> LoggingConfig:
        """Parse logging configuration with environment variable overrides.

        Environment variables take precedence over config file values:
        - RENDERLINT_LOG_LEVEL: Log level (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL)
        - RENDERLINT_LOG_FORMAT: Output format (console, json, structured, rich)
        - RENDERLINT_LOG_FILE: Optional file path for log output
        - RENDERLINT_LOG_COLOR: Use color output (true/false)
        - RENDERLINT_LOG_TIMESTAMP: Include timestamp (true/false)
        """
        level = str(logging_data.get("level", "WARNING")).upper()
        format_type = str(logging_data.get("format", "structured")).lower()
        output_file = logging_data.get("output_file")
        use_color = logging_data.get("use_color", True)
        include_timestamp = logging_data.get("include_timestamp", True)

        if env_level := os.getenv("RENDERLINT_LOG_LEVEL"):
            level = env_level.upper()
            logger.debug("Overriding log level from env: {}", level)

        if env_format := os.getenv("RENDERLINT_LOG_FORMAT"):
            format_type = env_format.lower()
            logger.debug("Overriding log format from env: {}", format_type)

        if env_file := os.getenv("RENDERLINT_LOG_FILE"):
            output_file = env_file
            logger.debug("Overriding log file from env: {}", output_file)

        if env_color := os.getenv("RENDERLINT_LOG_COLOR"):
            try:
                use_color = _parse_bool_env(env_color)
            except ValueError as e:
                logger.warning("Invalid RENDERLINT_LOG_COLOR value: {}", e)

        if env_timestamp := os.getenv("RENDERLINT_LOG_TIMESTAMP"):
            try:
                include_timestamp = _parse_bool_env(env_timestamp)
            except ValueError as e:
                logger.warning("Invalid RENDERLINT_LOG_TIMESTAMP value: {}", e)

        if level not in _LOG_LEVELS:
            raise ConfigurationError("logging.level", f"unknown log level '{level}'")
        if format_type not in _LOG_FORMATS:
            raise ConfigurationError("logging.format", f"unknown log format '{format_type}'")

        return LoggingConfig(
            level=cast("LogLevel", level),
            format=cast("LogFormat", format_type),
            output_file=output_file,
            use_color=bool(use_color),
            include_timestamp=bool(include_timestamp),
        )


def load_config(path: str | Path | None = None) -> RenderLintConfig:
    """Load configuration from file or return defaults.

    Parameters
    ----------
    path : str | Path | None
        Path to configuration file or None to search

    Returns
    -------
    RenderLintConfig
        Loaded configuration or defaults if no file was found

    Raises
    ------
    ConfigurationError
        If an explicit path is missing or a configuration file is invalid
    """
    try:
        loader = ConfigLoader()
        return loader.load_config_file(path)
    except FileNotFoundError:
        logger.info("No configuration file found, using defaults")
        return get_default_config()


def clear_config_cache() -> None:
    """Clear all configuration caches.

    Useful for testing or when configuration files have been modified
    and you need to force a reload.
    """
    _load_and_parse_cached.cache_clear()


def get_default_config() -> RenderLintConfig:
    """Get default configuration: every rule enabled at its default severity."""
    return RenderLintConfig()
