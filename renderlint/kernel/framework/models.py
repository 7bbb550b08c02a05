"""Framework detection models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class FrameworkName(StrEnum):
    """Rendering frameworks the detector can recognize."""

    NEXT = "next"
    REMIX = "remix"
    VITE = "vite"
    CRA = "cra"
    GATSBY = "gatsby"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class FrameworkInfo:
    """Detected framework, its version and feature tags.

    ``version`` is empty when it could not be determined.
    """

    name: FrameworkName
    version: str = ""
    features: frozenset[str] = field(default_factory=frozenset)

    @property
    def major(self) -> int | None:
        """Major version number, or None when the version is unknown."""
        head = self.version.split(".", 1)[0]
        return int(head) if head.isdigit() else None


class PackageManifest(BaseModel):
    """The subset of ``package.json`` the detector reads.

    Unknown keys are ignored; declared sections must be string maps.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    name: str | None = None
    dependencies: dict[str, str] = Field(default_factory=dict)
    dev_dependencies: dict[str, str] = Field(default_factory=dict, alias="devDependencies")
    peer_dependencies: dict[str, str] = Field(default_factory=dict, alias="peerDependencies")
    scripts: dict[str, str] = Field(default_factory=dict)

    @property
    def all_dependencies(self) -> dict[str, str]:
        """Runtime, dev and peer dependencies merged (runtime wins)."""
        return {**self.peer_dependencies, **self.dev_dependencies, **self.dependencies}

    def has(self, *packages: str) -> bool:
        """True if any of ``packages`` is declared in any dependency section."""
        deps = self.all_dependencies
        return any(p in deps for p in packages)
