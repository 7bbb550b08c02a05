"""Configuration models for renderlint."""

from renderlint.kernel.config.models import (
    DEFAULT_EXCLUDE,
    LoggingConfig,
    RenderLintConfig,
    RuleSetting,
    ScanConfig,
)


def __getattr__(name: str) -> object:
    """Lazy imports for config loader symbols (they live in renderlint.compiler.config_loader)."""
    _loader_names = {
        "ConfigLoader",
        "clear_config_cache",
        "get_default_config",
        "load_config",
    }
    if name in _loader_names:
        from renderlint.compiler import config_loader

        return getattr(config_loader, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "DEFAULT_EXCLUDE",
    "LoggingConfig",
    "RenderLintConfig",
    "RuleSetting",
    "ScanConfig",
]
