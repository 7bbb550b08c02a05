"""Shared pytest fixtures for renderlint tests."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from renderlint.compiler.config_loader import clear_config_cache


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep tests independent of the developer's environment and config cache."""
    for var in (
        "RENDERLINT_CONFIG_PATH",
        "RENDERLINT_LOG_LEVEL",
        "RENDERLINT_LOG_FORMAT",
        "RENDERLINT_LOG_FILE",
        "RENDERLINT_LOG_COLOR",
        "RENDERLINT_LOG_TIMESTAMP",
    ):
        monkeypatch.delenv(var, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def write_manifest(tmp_path: Path) -> Callable[..., Path]:
    """Write a package.json into tmp_path and return its path."""

    def _write(
        dependencies: dict[str, str] | None = None,
        dev_dependencies: dict[str, str] | None = None,
        scripts: dict[str, str] | None = None,
    ) -> Path:
        data: dict[str, object] = {"name": "app", "dependencies": dependencies or {}}
        if dev_dependencies:
            data["devDependencies"] = dev_dependencies
        if scripts:
            data["scripts"] = scripts
        path = tmp_path / "package.json"
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_source(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a source file below tmp_path and return its path."""

    def _write(relative: str, text: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
