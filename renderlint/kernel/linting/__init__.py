"""Detection engine: rules, rule catalog, scanner and report aggregation."""

from renderlint.kernel.linting.aggregate import aggregate, classify, exit_code, summarize
from renderlint.kernel.linting.component_rules import ALL_COMPONENT_RULES, default_catalog
from renderlint.kernel.linting.models import (
    PARSE_FAILURE,
    RULE_INTERNAL_ERROR,
    Diagnostic,
    Outcome,
    ScanReport,
    Severity,
)
from renderlint.kernel.linting.rules import PSEUDO_RULE_IDS, Rule, RuleCatalog, run_rules
from renderlint.kernel.linting.scanner import Scanner

__all__ = [
    "ALL_COMPONENT_RULES",
    "Diagnostic",
    "Outcome",
    "PARSE_FAILURE",
    "PSEUDO_RULE_IDS",
    "RULE_INTERNAL_ERROR",
    "Rule",
    "RuleCatalog",
    "ScanReport",
    "Scanner",
    "Severity",
    "aggregate",
    "classify",
    "default_catalog",
    "exit_code",
    "run_rules",
    "summarize",
]
