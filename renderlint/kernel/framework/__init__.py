"""Framework detection and framework-aware tips."""

from renderlint.kernel.framework.detector import FrameworkDetector, clean_version, detect_framework
from renderlint.kernel.framework.models import FrameworkInfo, FrameworkName, PackageManifest
from renderlint.kernel.framework.tips import tips_for

__all__ = [
    "FrameworkDetector",
    "FrameworkInfo",
    "FrameworkName",
    "PackageManifest",
    "clean_version",
    "detect_framework",
    "tips_for",
]
