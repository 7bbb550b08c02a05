"""Rule protocol, rule catalog and fault-isolating rule runner."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import replace
from typing import TYPE_CHECKING, Protocol

from renderlint.kernel.exceptions import ConfigurationError, RuleInternalError
from renderlint.kernel.linting.models import (
    PARSE_FAILURE,
    RULE_INTERNAL_ERROR,
    Diagnostic,
    Severity,
)
from renderlint.kernel.logging import get_logger

if TYPE_CHECKING:
    from renderlint.kernel.config.models import RuleSetting
    from renderlint.kernel.source.nodes import SourceUnit

logger = get_logger(__name__)

PSEUDO_RULE_IDS = frozenset({PARSE_FAILURE, RULE_INTERNAL_ERROR})


class Rule(Protocol):
    """Protocol for a single detection rule.

    Rules are pure: they never mutate the unit and never depend on other
    rules having run.
    """

    rule_id: str
    severity: Severity
    description: str

    def detect(self, unit: SourceUnit) -> list[Diagnostic]:
        """Run this rule against one source unit and return its findings."""
        ...


class RuleCatalog:
    """The set of rules a scan applies, with per-rule settings resolved.

    Parameters
    ----------
    rules : Iterable[Rule]
        Every known rule
    settings : Mapping[str, RuleSetting] | None
        Per-rule switches and severity overrides keyed by rule id

    Raises
    ------
    ConfigurationError
        If two rules share an id or a setting names an unknown rule
    """

    def __init__(
        self, rules: Iterable[Rule], settings: Mapping[str, RuleSetting] | None = None
    ) -> None:
        self._rules: dict[str, Rule] = {}
        for rule in rules:
            if rule.rule_id in PSEUDO_RULE_IDS:
                raise ConfigurationError("rule catalog", f"rule id '{rule.rule_id}' is reserved")
            if rule.rule_id in self._rules:
                raise ConfigurationError("rule catalog", f"duplicate rule id '{rule.rule_id}'")
            self._rules[rule.rule_id] = rule

        self._settings = dict(settings or {})
        for rule_id in self._settings:
            if rule_id in PSEUDO_RULE_IDS:
                raise ConfigurationError("rules", f"'{rule_id}' is always reported")
            if rule_id not in self._rules:
                known = ", ".join(sorted(self._rules))
                raise ConfigurationError("rules", f"unknown rule id '{rule_id}' (known: {known})")

    @property
    def rule_ids(self) -> list[str]:
        """All registered rule ids, in registration order."""
        return list(self._rules)

    @property
    def rules(self) -> list[Rule]:
        """All registered rules, enabled or not."""
        return list(self._rules.values())

    @property
    def enabled_rules(self) -> list[Rule]:
        """Rules that will run, in registration order."""
        return [rule for rule in self._rules.values() if self.is_enabled(rule.rule_id)]

    def get(self, rule_id: str) -> Rule:
        """Look up a rule by id.

        Raises
        ------
        KeyError
            If no rule has this id
        """
        return self._rules[rule_id]

    def is_enabled(self, rule_id: str) -> bool:
        setting = self._settings.get(rule_id)
        return setting is None or setting.enabled

    def severity_for(self, rule_id: str) -> Severity:
        """Effective base severity of a rule after overrides."""
        setting = self._settings.get(rule_id)
        if setting is not None and setting.severity is not None:
            return setting.severity
        return self._rules[rule_id].severity

    def apply_overrides(self, rule: Rule, diagnostics: list[Diagnostic]) -> list[Diagnostic]:
        """Report diagnostics emitted at the rule's default level at the override level.

        Diagnostics a rule deliberately emits at another level (an escalated
        error, for example) keep their severity.
        """
        effective = self.severity_for(rule.rule_id)
        if effective == rule.severity:
            return diagnostics
        return [
            replace(d, severity=effective)
            if d.rule_id == rule.rule_id and d.severity == rule.severity
            else d
            for d in diagnostics
        ]

    def run(self, unit: SourceUnit) -> list[Diagnostic]:
        """Run every enabled rule on a unit with overrides applied, in registration order."""
        diagnostics: list[Diagnostic] = []
        for rule in self.enabled_rules:
            diagnostics.extend(self.apply_overrides(rule, run_rules([rule], unit)))
        return diagnostics


def run_rules(rules: Iterable[Rule], unit: SourceUnit) -> list[Diagnostic]:
    """Run rules against one unit, isolating each rule's failures.

    A rule that raises contributes a single ``rule-internal-error`` warning at
    1:1 of the unit instead of its findings; the remaining rules still run.
    """
    diagnostics: list[Diagnostic] = []
    for rule in rules:
        try:
            diagnostics.extend(rule.detect(unit))
        except Exception as e:
            diagnostics.append(rule_fault_diagnostic(RuleInternalError(rule.rule_id, unit.path, e)))
    return diagnostics


def rule_fault_diagnostic(error: RuleInternalError) -> Diagnostic:
    """Convert a rule fault into its diagnostic."""
    logger.opt(exception=error.original_error).warning(
        "Rule {rule} failed on {path}", rule=error.rule_id, path=error.path
    )
    return Diagnostic(
        rule_id=RULE_INTERNAL_ERROR,
        severity=Severity.WARNING,
        file_path=error.path,
        line=1,
        column=1,
        message=f"Rule '{error.rule_id}' failed: {type(error.original_error).__name__}: "
        f"{error.original_error}",
        suggestion=None,
    )
