"""Tests for renderlint.compiler.discovery."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from renderlint.compiler import discover_sources, read_sources

WriteSource = Callable[[str, str], Path]


def _relative(paths: list[Path], root: Path) -> list[str]:
    return [p.relative_to(root).as_posix() for p in paths]


class TestDiscoverSources:
    def test_supported_files_sorted(self, tmp_path: Path, write_source: WriteSource) -> None:
        for name in ["src/b.tsx", "src/a.jsx", "lib/util.ts", "index.js", "README.md", "a.css"]:
            write_source(name, "")
        assert _relative(discover_sources(tmp_path), tmp_path) == [
            "index.js",
            "lib/util.ts",
            "src/a.jsx",
            "src/b.tsx",
        ]

    def test_dependency_and_build_directories_are_skipped(
        self, tmp_path: Path, write_source: WriteSource
    ) -> None:
        for name in [
            "node_modules/react/index.js",
            ".next/server/page.js",
            "dist/bundle.js",
            "src/components/node_modules/x.js",
            "src/App.tsx",
        ]:
            write_source(name, "")
        assert _relative(discover_sources(tmp_path), tmp_path) == ["src/App.tsx"]

    def test_default_excludes(self, tmp_path: Path, write_source: WriteSource) -> None:
        for name in ["App.test.tsx", "src/App.spec.ts", "types/env.d.ts", "src/App.tsx"]:
            write_source(name, "")
        assert _relative(discover_sources(tmp_path), tmp_path) == ["src/App.tsx"]

    def test_include_and_exclude(self, tmp_path: Path, write_source: WriteSource) -> None:
        for name in ["src/App.tsx", "src/App.stories.tsx", "scripts/build.js"]:
            write_source(name, "")
        found = discover_sources(tmp_path, include=["src/**"], exclude=["**/*.stories.tsx"])
        assert _relative(found, tmp_path) == ["src/App.tsx"]

    def test_single_file_root(self, write_source: WriteSource) -> None:
        path = write_source("App.tsx", "")
        assert discover_sources(path) == [path]

    def test_single_unsupported_file(self, write_source: WriteSource) -> None:
        assert discover_sources(write_source("notes.md", "")) == []

    def test_missing_root(self, tmp_path: Path) -> None:
        assert discover_sources(tmp_path / "nope") == []

    def test_empty_directory(self, tmp_path: Path) -> None:
        assert discover_sources(tmp_path) == []


class TestReadSources:
    def test_reads_text(self, write_source: WriteSource) -> None:
        path = write_source("App.tsx", "export {};\n")
        assert read_sources([path]) == [(str(path), "export {};\n")]

    def test_unreadable_files_yield_none(self, tmp_path: Path) -> None:
        binary = tmp_path / "Bad.tsx"
        binary.write_bytes(b"\xff\xfe\x00bad")
        missing = tmp_path / "Missing.tsx"
        assert read_sources([binary, missing]) == [(str(binary), None), (str(missing), None)]

    @pytest.mark.parametrize("count", [0, 3])
    def test_preserves_order(self, tmp_path: Path, count: int) -> None:
        paths = []
        for i in reversed(range(count)):
            path = tmp_path / f"F{i}.ts"
            path.write_text(str(i))
            paths.append(path)
        assert [p for p, _ in read_sources(paths)] == [str(p) for p in paths]
