"""Tests for renderlint.cli.commands.rules_cmd module."""

import json

from renderlint.cli.main import app
from renderlint.kernel.linting import ALL_COMPONENT_RULES


class TestRules:
    """Test the rules command."""

    def test_json_lists_every_rule(self, runner):
        """Test JSON output lists component rules and scanner rules."""
        result = runner.invoke(app, ["rules", "--format", "json"])
        assert result.exit_code == 0

        entries = json.loads(result.stdout)
        ids = [e["rule_id"] for e in entries]
        assert ids[: len(ALL_COMPONENT_RULES)] == [r.rule_id for r in ALL_COMPONENT_RULES]
        assert ids[-2:] == ["parse-failure", "rule-internal-error"]

        by_id = {e["rule_id"]: e for e in entries}
        assert by_id["missing-list-key"]["severity"] == "error"
        assert by_id["missing-list-key"]["configurable"] is True
        assert by_id["parse-failure"]["configurable"] is False

    def test_text_table(self, runner):
        """Test the default table output."""
        result = runner.invoke(app, ["rules"])
        assert result.exit_code == 0
        assert "missing-list-key" in result.stdout
        assert "always" in result.stdout
