"""CLI command modules."""

from . import init_cmd, rules_cmd, scan_cmd

__all__ = [
    "init_cmd",
    "rules_cmd",
    "scan_cmd",
]
