"""Domain package exports for the updater install pipeline."""

from .errors import InstallError, InvocationError
from .install_models import (
    ArchivePayload,
    ExtractorKind,
    InstallResult,
    InstallState,
    InstallTarget,
    InvocationResult,
    Platform,
    UpdaterOutcome,
)
from .targets import detect_platform, target_for

__all__ = [
    "ArchivePayload",
    "ExtractorKind",
    "InstallError",
    "InstallResult",
    "InstallState",
    "InstallTarget",
    "InvocationError",
    "InvocationResult",
    "Platform",
    "UpdaterOutcome",
    "detect_platform",
    "target_for",
]
