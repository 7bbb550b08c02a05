"""Framework detection from the project manifest.

The manifest (``package.json``) is read once per ``detect`` call. Frameworks
are matched in a fixed priority order so that projects listing several
frameworks' packages resolve deterministically:

1. a framework-specific config file next to the manifest
2. a framework dependency
3. a fallback bundler dependency (``vite``)

Projects that depend on React without any of the above are reported as
``unknown``; projects without React are reported as no framework at all.
Feature tags come from auxiliary signals (directory conventions, sub-packages,
scripts) and never change the detected framework name.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from renderlint.kernel.exceptions import ManifestReadError
from renderlint.kernel.framework.models import FrameworkInfo, FrameworkName, PackageManifest
from renderlint.kernel.logging import get_logger

logger = get_logger(__name__)

_VERSION_RE = re.compile(r"\d+(?:\.\d+)*(?:-[0-9A-Za-z.-]+)?")

FeatureProbe = Callable[[PackageManifest, Path], bool]


@dataclass(frozen=True, slots=True)
class FrameworkSignature:
    """How to recognize one framework and its feature tags."""

    name: FrameworkName
    config_files: tuple[str, ...] = ()
    dependencies: tuple[str, ...] = ()
    features: tuple[tuple[str, FeatureProbe], ...] = field(default=())


def clean_version(spec: str | None) -> str:
    """Extract a plain version from a dependency range (``^14.0.0`` -> ``14.0.0``).

    Returns an empty string for non-numeric specs such as ``latest`` or
    ``workspace:*``.
    """
    if not spec:
        return ""
    match = _VERSION_RE.search(spec)
    return match.group(0) if match else ""


def _major(version: str) -> int | None:
    head = version.split(".", 1)[0]
    return int(head) if head.isdigit() else None


def _any_path(*relative: str) -> FeatureProbe:
    def probe(_: PackageManifest, root: Path) -> bool:
        return any((root / rel).exists() for rel in relative)

    return probe


def _any_dependency(*packages: str) -> FeatureProbe:
    def probe(manifest: PackageManifest, _: Path) -> bool:
        return manifest.has(*packages)

    return probe


def _script_contains(needle: str, script: str | None = None) -> FeatureProbe:
    def probe(manifest: PackageManifest, _: Path) -> bool:
        if script is not None:
            return needle in manifest.scripts.get(script, "")
        return any(needle in command for command in manifest.scripts.values())

    return probe


def _min_major(package: str, minimum: int) -> FeatureProbe:
    def probe(manifest: PackageManifest, _: Path) -> bool:
        major = _major(clean_version(manifest.all_dependencies.get(package)))
        return major is not None and major >= minimum

    return probe


SIGNATURES: tuple[FrameworkSignature, ...] = (
    FrameworkSignature(
        name=FrameworkName.NEXT,
        config_files=("next.config.js", "next.config.mjs", "next.config.ts", "next.config.cjs"),
        dependencies=("next",),
        features=(
            ("app-router", _any_path("app", "src/app")),
            ("pages-router", _any_path("pages", "src/pages")),
            (
                "middleware",
                _any_path("middleware.ts", "middleware.js", "src/middleware.ts", "src/middleware.js"),
            ),
            ("turbopack", _script_contains("--turbo")),
        ),
    ),
    FrameworkSignature(
        name=FrameworkName.REMIX,
        config_files=("remix.config.js", "remix.config.mjs"),
        dependencies=(
            "@remix-run/react",
            "@remix-run/node",
            "@remix-run/cloudflare",
            "@remix-run/dev",
        ),
        features=(
            ("v2-routes", _any_path("app/routes")),
            ("vite", _any_dependency("vite")),
        ),
    ),
    FrameworkSignature(
        name=FrameworkName.GATSBY,
        config_files=("gatsby-config.js", "gatsby-config.mjs", "gatsby-config.ts"),
        dependencies=("gatsby",),
        features=(
            ("v5", _min_major("gatsby", 5)),
            ("image", _any_dependency("gatsby-plugin-image")),
        ),
    ),
    FrameworkSignature(
        name=FrameworkName.CRA,
        dependencies=("react-scripts",),
        features=(
            ("typescript", _any_dependency("typescript")),
            ("testing-library", _any_dependency("@testing-library/react")),
        ),
    ),
    FrameworkSignature(
        name=FrameworkName.VITE,
        config_files=("vite.config.js", "vite.config.mjs", "vite.config.ts", "vite.config.mts"),
        features=(
            ("react-plugin", _any_dependency("@vitejs/plugin-react", "@vitejs/plugin-react-swc")),
            ("swc", _any_dependency("@vitejs/plugin-react-swc")),
            ("hmr", _script_contains("vite", script="dev")),
            (
                "ssr",
                lambda m, r: m.has("vite-plugin-ssr", "vike") or _script_contains("--ssr")(m, r),
            ),
        ),
    ),
)

# Checked only after every framework dependency failed to match
_FALLBACK_BUNDLERS: tuple[tuple[FrameworkName, str], ...] = ((FrameworkName.VITE, "vite"),)

_REACT_PACKAGES = ("react", "react-dom")


class FrameworkDetector:
    """Detects the rendering framework of a project from its manifest."""

    def __init__(self, signatures: tuple[FrameworkSignature, ...] = SIGNATURES) -> None:
        self._signatures = {s.name: s for s in signatures}
        self._order = tuple(s.name for s in signatures)

    def detect(self, manifest_path: str | Path) -> FrameworkInfo | None:
        """Detect the framework for the project owning ``manifest_path``.

        Parameters
        ----------
        manifest_path : str | Path
            Path to ``package.json``

        Returns
        -------
        FrameworkInfo | None
            Detected framework, or None when the manifest is unreadable or the
            project does not use React at all
        """
        path = Path(manifest_path)
        try:
            manifest = self.read_manifest(path)
        except ManifestReadError as e:
            logger.warning("Framework detection skipped: {}", e)
            return None

        info = self.match(manifest, path.parent)
        if info is None:
            logger.debug("No rendering framework detected in {}", path)
        else:
            logger.debug(
                "Detected framework {name} {version} features={features}",
                name=info.name,
                version=info.version or "?",
                features=sorted(info.features),
            )
        return info

    def read_manifest(self, path: Path) -> PackageManifest:
        """Read and validate a manifest file.

        Raises
        ------
        ManifestReadError
            If the file is missing, unreadable or not a valid manifest
        """
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise ManifestReadError(str(path), e.strerror or str(e)) from e
        try:
            return PackageManifest.model_validate_json(raw)
        except PydanticValidationError as e:
            raise ManifestReadError(str(path), f"invalid manifest ({e.error_count()} error(s))") from e

    def match(self, manifest: PackageManifest, root: Path) -> FrameworkInfo | None:
        """Apply the detection policy to an already-read manifest."""
        name = self._match_config_file(root) or self._match_dependency(manifest)
        if name is None:
            for fallback, package in _FALLBACK_BUNDLERS:
                if manifest.has(package):
                    name = fallback
                    break

        if name is None:
            if manifest.has(*_REACT_PACKAGES):
                react = manifest.all_dependencies.get("react") or manifest.all_dependencies.get(
                    "react-dom"
                )
                return FrameworkInfo(name=FrameworkName.UNKNOWN, version=clean_version(react))
            return None

        signature = self._signatures[name]
        return FrameworkInfo(
            name=name,
            version=self._version(signature, manifest),
            features=self._features(signature, manifest, root),
        )

    def _match_config_file(self, root: Path) -> FrameworkName | None:
        for name in self._order:
            for config_file in self._signatures[name].config_files:
                try:
                    found = (root / config_file).is_file()
                except OSError as e:
                    logger.debug("Cannot check {}: {}", root / config_file, e)
                    continue
                if found:
                    return name
        return None

    def _match_dependency(self, manifest: PackageManifest) -> FrameworkName | None:
        for name in self._order:
            if manifest.has(*self._signatures[name].dependencies):
                return name
        return None

    def _version(self, signature: FrameworkSignature, manifest: PackageManifest) -> str:
        deps = manifest.all_dependencies
        candidates = signature.dependencies or tuple(
            package for name, package in _FALLBACK_BUNDLERS if name == signature.name
        )
        for package in candidates:
            if package in deps:
                return clean_version(deps[package])
        return ""

    def _features(
        self, signature: FrameworkSignature, manifest: PackageManifest, root: Path
    ) -> frozenset[str]:
        features: set[str] = set()
        for feature, probe in signature.features:
            try:
                detected = probe(manifest, root)
            except OSError as e:
                logger.debug("Feature probe {} failed: {}", feature, e)
                continue
            if detected:
                features.add(feature)
        return frozenset(features)


def detect_framework(manifest_path: str | Path) -> FrameworkInfo | None:
    """Detect the framework for a manifest using the default signatures."""
    return FrameworkDetector().detect(manifest_path)
