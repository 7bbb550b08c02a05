"""Tests for renderlint.compiler.config_loader."""

from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest

from renderlint.compiler.config_loader import (
    ConfigLoader,
    clear_config_cache,
    get_default_config,
    load_config,
    parse_rule_setting,
)
from renderlint.kernel.config import RenderLintConfig, RuleSetting
from renderlint.kernel.exceptions import ConfigurationError
from renderlint.kernel.linting import Severity


def _write(path: Path, text: str) -> Path:
    path.write_text(dedent(text), encoding="utf-8")
    return path


class TestParseRuleSetting:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("off", RuleSetting(enabled=False)),
            ("disabled", RuleSetting(enabled=False)),
            (False, RuleSetting(enabled=False)),
            (True, RuleSetting()),
            ("on", RuleSetting()),
            ("error", RuleSetting(severity=Severity.ERROR)),
            ("Warning", RuleSetting(severity=Severity.WARNING)),
            ({"severity": "info"}, RuleSetting(severity=Severity.INFO)),
            ({"enabled": False}, RuleSetting(enabled=False)),
        ],
    )
    def test_accepted_forms(self, value: object, expected: RuleSetting) -> None:
        assert parse_rule_setting("index-as-key", value) == expected

    @pytest.mark.parametrize(
        ("value", "match"),
        [
            ("fatal", "unknown severity 'fatal'"),
            (3, "got int"),
            ({"level": "error"}, "unknown key"),
            ({"enabled": "yes"}, "'enabled' must be true or false"),
        ],
    )
    def test_rejected_forms(self, value: object, match: str) -> None:
        with pytest.raises(ConfigurationError, match=match):
            parse_rule_setting("index-as-key", value)


class TestYamlConfig:
    def test_full_config(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "renderlint.yaml",
            """\
            kind: Config
            metadata:
              name: web
            spec:
              include: ["src/**"]
              exclude: ["**/*.stories.tsx"]
              max_workers: 2
              manifest: web/package.json
              rules:
                unstable-literal-prop: off
                index-as-key: error
                missing-list-key:
                  severity: warning
              logging:
                level: debug
                format: rich
            """,
        )
        config = load_config(path)

        assert config.scan.include == ("src/**",)
        assert config.scan.exclude == ("**/*.stories.tsx",)
        assert config.scan.max_workers == 2
        assert config.scan.manifest == "web/package.json"
        assert dict(config.scan.rules) == {
            "unstable-literal-prop": RuleSetting(enabled=False),
            "index-as-key": RuleSetting(severity=Severity.ERROR),
            "missing-list-key": RuleSetting(severity=Severity.WARNING),
        }
        assert config.logging.level == "DEBUG"
        assert config.logging.format == "rich"

    def test_empty_spec_uses_defaults(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "renderlint.yaml", "kind: Config\n")
        assert load_config(path) == get_default_config()

    def test_wrong_kind(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "renderlint.yaml", "kind: Pipeline\nspec: {}\n")
        with pytest.raises(ConfigurationError, match="kind: Config"):
            load_config(path)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "renderlint.yaml", "kind: Config\nspec: [unclosed\n")
        with pytest.raises(ConfigurationError, match="invalid YAML"):
            load_config(path)

    @pytest.mark.parametrize(
        ("spec", "match"),
        [
            ("rules: [a, b]", "mapping of rule id"),
            ("max_workers: two", "must be an integer"),
            ("max_workers: 0", "max_workers"),
            ("exclude: [1, 2]", "glob patterns"),
            ("logging:\n    level: LOUD", "unknown log level"),
        ],
    )
    def test_invalid_sections(self, tmp_path: Path, spec: str, match: str) -> None:
        path = tmp_path / "renderlint.yaml"
        path.write_text(f"kind: Config\nspec:\n  {spec}\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match=match):
            load_config(path)

    def test_unknown_rule_ids_are_left_to_the_catalog(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "renderlint.yaml",
            """\
            kind: Config
            spec:
              rules:
                not-a-rule: off
            """,
        )
        assert "not-a-rule" in load_config(path).scan.rules

    def test_env_substitution(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WEB_ROOT", "apps/web")
        path = _write(
            tmp_path / "renderlint.yaml",
            """\
            kind: Config
            spec:
              manifest: ${WEB_ROOT}/package.json
              include: ["${MISSING_VAR}/**"]
            """,
        )
        config = load_config(path)
        assert config.scan.manifest == "apps/web/package.json"
        assert config.scan.include == ("${MISSING_VAR}/**",)


class TestTomlConfig:
    def test_pyproject_section(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "pyproject.toml",
            """\
            [tool.renderlint]
            exclude = ["**/legacy/**"]

            [tool.renderlint.rules]
            unstable-callback = "error"
            """,
        )
        config = load_config(path)
        assert config.scan.exclude == ("**/legacy/**",)
        assert config.scan.rules["unstable-callback"] == RuleSetting(severity=Severity.ERROR)

    def test_pyproject_without_section(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "pyproject.toml", '[project]\nname = "x"\n')
        assert load_config(path) == get_default_config()

    def test_flat_toml(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "renderlint.toml", "max_workers = 3\n")
        assert load_config(path).scan.max_workers == 3


class TestDiscovery:
    def test_explicit_missing_path(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="configuration file not found"):
            load_config(tmp_path / "nope.yaml")

    def test_nothing_found_returns_defaults(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        assert load_config() == RenderLintConfig()

    def test_yaml_in_working_directory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        _write(tmp_path / "renderlint.yml", "kind: Config\nspec:\n  max_workers: 5\n")
        monkeypatch.chdir(tmp_path)
        assert load_config().scan.max_workers == 5

    def test_env_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write(tmp_path / "custom.yaml", "kind: Config\nspec:\n  max_workers: 7\n")
        monkeypatch.setenv("RENDERLINT_CONFIG_PATH", str(path))
        monkeypatch.chdir(tmp_path)
        assert load_config().scan.max_workers == 7

    def test_pyproject_in_parent(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write(tmp_path / "pyproject.toml", "[tool.renderlint]\nmax_workers = 4\n")
        nested = tmp_path / "packages" / "web"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        found = ConfigLoader()._find_config_file(None)
        assert found.resolve() == (tmp_path / "pyproject.toml").resolve()
        assert load_config().scan.max_workers == 4

    def test_cache_is_cleared(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "renderlint.yaml", "kind: Config\nspec:\n  max_workers: 1\n")
        assert load_config(path).scan.max_workers == 1
        _write(path, "kind: Config\nspec:\n  max_workers: 2\n")
        assert load_config(path).scan.max_workers == 1
        clear_config_cache()
        assert load_config(path).scan.max_workers == 2


class TestLoggingOverrides:
    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write(
            tmp_path / "renderlint.yaml",
            "kind: Config\nspec:\n  logging:\n    level: ERROR\n",
        )
        monkeypatch.setenv("RENDERLINT_LOG_LEVEL", "info")
        monkeypatch.setenv("RENDERLINT_LOG_COLOR", "false")
        monkeypatch.setenv("RENDERLINT_LOG_TIMESTAMP", "maybe")
        logging_config = load_config(path).logging
        assert logging_config.level == "INFO"
        assert logging_config.use_color is False
        assert logging_config.include_timestamp is True

    @pytest.mark.parametrize("level", ["trace", "TRACE", "critical"])
    def test_every_logger_level_is_accepted(
        self, level: str, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = _write(tmp_path / "renderlint.yaml", "kind: Config\n")
        monkeypatch.setenv("RENDERLINT_LOG_LEVEL", level)
        assert load_config(path).logging.level == level.upper()

    def test_invalid_env_format(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write(tmp_path / "renderlint.yaml", "kind: Config\n")
        monkeypatch.setenv("RENDERLINT_LOG_FORMAT", "xml")
        with pytest.raises(ConfigurationError, match="unknown log format 'xml'"):
            load_config(path)
