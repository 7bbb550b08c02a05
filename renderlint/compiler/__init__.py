"""Userspace glue: configuration loading and source discovery."""

from renderlint.compiler.config_loader import (
    ConfigLoader,
    clear_config_cache,
    get_default_config,
    load_config,
)
from renderlint.compiler.discovery import discover_sources, read_sources

__all__ = [
    "ConfigLoader",
    "clear_config_cache",
    "discover_sources",
    "get_default_config",
    "load_config",
    "read_sources",
]
