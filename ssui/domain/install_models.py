"""Domain DTOs for the updater install-and-update pipeline."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ssui.domain.errors import InstallError, error_code


class Platform(str, Enum):
    WINDOWS = "windows"
    LINUX = "linux"


class ExtractorKind(str, Enum):
    """Archive encoding shipped for a platform."""

    TAR_GZ = "tar.gz"
    ZIP = "zip"


class InstallState(str, Enum):
    ABSENT = "absent"
    PREPARING = "preparing"
    ACQUIRING = "acquiring"
    EXTRACTING = "extracting"
    PERMISSIONING = "permissioning"
    VERIFYING = "verifying"
    INSTALLED = "installed"
    ALREADY_INSTALLED = "already_installed"
    ROLLED_BACK = "rolled_back"


READY_STATES = {InstallState.INSTALLED, InstallState.ALREADY_INSTALLED}


@dataclass(frozen=True)
class InstallTarget:
    """Where and how the updater tool is installed for one platform.

    Attributes:
        platform: Host platform this target belongs to.
        install_dir: Directory the archive is unpacked into.
        download_url: Absolute URL of the platform archive.
        extractor_kind: Archive encoding served at ``download_url``.
        tool_name: Executable stem inside ``install_dir``.
        executable_ext: Platform suffix appended to ``tool_name``.
        entry_points: Relative paths that must be executable after extraction.
        binary: Relative path whose presence proves a usable install.
        required_libraries: System packages the tool needs on the host.
        needs_permissions: Whether ``entry_points`` are chmod-ed after extraction.
        needs_dependencies: Whether ``required_libraries`` are installed first.
    """

    platform: Platform
    install_dir: Path
    download_url: str
    extractor_kind: ExtractorKind
    tool_name: str = "steamcmd"
    executable_ext: str = ""
    entry_points: Tuple[str, ...] = ()
    binary: str = ""
    required_libraries: Tuple[str, ...] = ()
    needs_permissions: bool = False
    needs_dependencies: bool = False

    @property
    def executable_path(self) -> Path:
        return self.install_dir / f"{self.tool_name}{self.executable_ext}"

    @property
    def binary_path(self) -> Path:
        return self.install_dir / self.binary


@dataclass(frozen=True)
class ArchivePayload:
    """Downloaded archive bytes plus the length the server delivered."""

    data: bytes
    length: int

    @classmethod
    def from_bytes(cls, data: bytes) -> "ArchivePayload":
        return cls(data=bytes(data), length=len(data))

    def reader(self) -> io.BytesIO:
        """Return a fresh random-access reader over the payload."""
        return io.BytesIO(self.data)


@dataclass
class InstallResult:
    """Terminal state of one install attempt."""

    state: InstallState
    install_dir: Path
    visited: List[InstallState] = field(default_factory=list)
    error: Optional[InstallError] = None

    @property
    def ready(self) -> bool:
        return self.state in READY_STATES and self.error is None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "state": self.state.value,
            "install_dir": str(self.install_dir),
            "visited": [state.value for state in self.visited],
        }
        if self.error is not None:
            payload["error"] = {
                "code": error_code(self.error),
                "message": self.error.message,
                "hint": self.error.hint,
            }
        return payload


@dataclass
class InvocationResult:
    argv: List[str]
    exit_code: Optional[int] = None
    error: Optional[InstallError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.exit_code == 0

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"argv": list(self.argv), "exit_code": self.exit_code}
        if self.error is not None:
            payload["error"] = {"code": error_code(self.error), "message": self.error.message}
        return payload


@dataclass
class UpdaterOutcome:
    """Terminal outcome of the whole pipeline, consumable by a notifier."""

    platform: Platform
    install: InstallResult
    invocation: Optional[InvocationResult] = None

    @property
    def ok(self) -> bool:
        return self.install.ready and self.invocation is not None and self.invocation.ok

    @property
    def status(self) -> str:
        if not self.ok:
            return "failed"
        if self.install.state is InstallState.ALREADY_INSTALLED:
            return "already_installed"
        return "installed"

    @property
    def error(self) -> Optional[InstallError]:
        if self.install.error is not None:
            return self.install.error
        if self.invocation is not None:
            return self.invocation.error
        return None

    @property
    def reason(self) -> str:
        err = self.error
        return str(err) if err is not None else ""

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable snapshot."""
        return {
            "platform": self.platform.value,
            "status": self.status,
            "reason": self.reason,
            "install": self.install.to_dict(),
            "invocation": self.invocation.to_dict() if self.invocation else None,
        }


__all__ = [
    "ArchivePayload",
    "ExtractorKind",
    "InstallResult",
    "InstallState",
    "InstallTarget",
    "InvocationResult",
    "Platform",
    "READY_STATES",
    "UpdaterOutcome",
]
