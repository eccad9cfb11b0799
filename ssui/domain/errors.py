"""Domain-level error types for the updater install pipeline.

Every pipeline step raises one of these with a stable ``code`` so the state
machine and the notifier can classify failures without inspecting messages.
Errors raised before the install is verified trigger a rollback of the
install directory; invocation errors do not, because the install itself
already succeeded.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class InstallError(RuntimeError):
    """Typed pipeline error with stable code/message/hint values."""

    triggers_rollback = True

    def __init__(self, code: str, message: str, hint: str = "") -> None:
        super().__init__(message)
        self.code = str(code)
        self.message = str(message)
        self.hint = str(hint or "")

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} ({self.hint})"
        return self.message


class UnsupportedPlatformError(InstallError):
    """Host OS has no install target."""

    def __init__(self, system_name: str) -> None:
        super().__init__(
            "install.unsupported_platform",
            f"Updater installation is not supported on this OS: {system_name or 'unknown'}",
            "Supported platforms are Windows and Linux.",
        )
        self.system_name = system_name


class InvalidURLError(InstallError):
    def __init__(self, url: str, hint: str = "") -> None:
        super().__init__("install.invalid_url", f"Invalid download URL: {url!r}", hint)
        self.url = url


class NetworkError(InstallError):
    """Connection failure or acquisition deadline exceeded."""

    def __init__(self, url: str, hint: str = "") -> None:
        super().__init__("install.network_failure", f"Error downloading {url}", hint)
        self.url = url


class HTTPStatusError(InstallError):
    def __init__(self, url: str, status: int, reason: str = "") -> None:
        status_text = f"{status} {reason}".strip()
        super().__init__(
            "install.http_status",
            f"Failed to download {url}: HTTP status {status_text}",
            "Expected HTTP 200.",
        )
        self.url = url
        self.status = int(status)


class ReadError(InstallError):
    def __init__(self, url: str, hint: str = "") -> None:
        super().__init__("install.read_failure", f"Error reading download body from {url}", hint)
        self.url = url


class ArchiveFormatError(InstallError):
    def __init__(self, message: str, hint: str = "") -> None:
        super().__init__("install.archive_format", message, hint)


class PathTraversalError(InstallError):
    """Archive entry would land outside the extraction root."""

    def __init__(self, entry_name: str, dest_dir: Path) -> None:
        super().__init__(
            "install.path_traversal",
            f"Archive entry escapes extraction directory: {entry_name}",
            f"destination={dest_dir}",
        )
        self.entry_name = entry_name


class UnknownEntryTypeError(InstallError):
    def __init__(self, entry_name: str, entry_type: str) -> None:
        super().__init__(
            "install.unknown_entry_type",
            f"Unknown archive entry type {entry_type!r} in {entry_name}",
        )
        self.entry_name = entry_name
        self.entry_type = entry_type


class FilesystemError(InstallError):
    """Create/chmod/stat/write failure on a concrete path."""

    def __init__(self, action: str, path: Path | str, hint: str = "") -> None:
        super().__init__("install.filesystem", f"Failed to {action} {path}", hint)
        self.action = action
        self.path = Path(path)


class BinaryNotFoundError(InstallError):
    def __init__(self, path: Path | str) -> None:
        super().__init__(
            "install.binary_not_found",
            f"Updater binary not found: {path}",
            "The downloaded archive did not contain the expected binary.",
        )
        self.path = Path(path)


class DependencyInstallError(InstallError):
    def __init__(self, library: str, hint: str = "") -> None:
        super().__init__(
            "install.dependency_failed",
            f"Failed to install required library {library}",
            hint,
        )
        self.library = library


class InvocationError(InstallError):
    """Failure while running an already installed updater."""

    triggers_rollback = False


class ProcessSpawnError(InvocationError):
    def __init__(self, command: str, hint: str = "") -> None:
        super().__init__("invoke.spawn_failed", f"Could not start {command}", hint)
        self.command = command


class ProcessExitError(InvocationError):
    def __init__(self, command: str, exit_code: int) -> None:
        super().__init__(
            "invoke.exit_status",
            f"{command} exited with status {exit_code}",
        )
        self.command = command
        self.exit_code = int(exit_code)


def error_code(exc: Optional[BaseException]) -> str:
    """Return the stable code for ``exc`` or an empty string."""
    if exc is None:
        return ""
    return getattr(exc, "code", "") or type(exc).__name__


__all__ = [
    "ArchiveFormatError",
    "BinaryNotFoundError",
    "DependencyInstallError",
    "FilesystemError",
    "HTTPStatusError",
    "InstallError",
    "InvalidURLError",
    "InvocationError",
    "NetworkError",
    "PathTraversalError",
    "ProcessExitError",
    "ProcessSpawnError",
    "ReadError",
    "UnknownEntryTypeError",
    "UnsupportedPlatformError",
    "error_code",
]
