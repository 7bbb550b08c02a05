"""Source file discovery for scans."""

from __future__ import annotations

import os
from collections.abc import Iterable, Sequence
from fnmatch import fnmatchcase
from pathlib import Path

from renderlint.kernel.config.models import DEFAULT_EXCLUDE
from renderlint.kernel.logging import get_logger
from renderlint.kernel.source.parser import SUPPORTED_EXTENSIONS

logger = get_logger(__name__)

# Directories holding dependencies, build output or tool state
EXCLUDED_DIRS = frozenset({
    "node_modules",
    ".next",
    ".nuxt",
    ".remix",
    ".cache",
    ".turbo",
    ".vercel",
    ".git",
    "dist",
    "build",
    "out",
    "coverage",
    "storybook-static",
    "public",
})


def _matches(relative: str, pattern: str) -> bool:
    if fnmatchcase(relative, pattern):
        return True
    # "**/x" also matches x at the top level
    return pattern.startswith("**/") and fnmatchcase(relative, pattern[3:])


def _selected(relative: str, include: Sequence[str], exclude: Sequence[str]) -> bool:
    if any(_matches(relative, pattern) for pattern in exclude):
        return False
    return not include or any(_matches(relative, pattern) for pattern in include)


def discover_sources(
    root: str | Path,
    include: Sequence[str] = (),
    exclude: Sequence[str] = DEFAULT_EXCLUDE,
) -> list[Path]:
    """Find the source files a scan should analyze.

    Parameters
    ----------
    root : str | Path
        Project directory, or a single file
    include : Sequence[str]
        Glob patterns relative to ``root``; when given, only matches are kept
    exclude : Sequence[str]
        Glob patterns relative to ``root`` for files to skip

    Returns
    -------
    list[Path]
        Sorted paths with a supported extension
    """
    root_path = Path(root)
    if root_path.is_file():
        return [root_path] if root_path.suffix.lower() in SUPPORTED_EXTENSIONS else []
    if not root_path.is_dir():
        logger.warning("Scan root does not exist: {}", root_path)
        return []

    found: list[Path] = []
    for directory, subdirs, files in os.walk(root_path):
        subdirs[:] = sorted(d for d in subdirs if d not in EXCLUDED_DIRS)
        for name in files:
            path = Path(directory) / name
            if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
                continue
            relative = path.relative_to(root_path).as_posix()
            if _selected(relative, include, exclude):
                found.append(path)

    found.sort()
    logger.debug("Discovered {count} source file(s) under {root}", count=len(found), root=root_path)
    return found


def read_sources(paths: Iterable[Path]) -> list[tuple[str, str | None]]:
    """Read files as UTF-8.

    Files that cannot be read or decoded yield ``None`` text so the scanner
    reports them as parse failures instead of aborting the scan.
    """
    sources: list[tuple[str, str | None]] = []
    for path in paths:
        try:
            text: str | None = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cannot read {path}: {error}", path=path, error=e)
            text = None
        sources.append((str(path), text))
    return sources
