"""Filesystem preparation for the updater install directory."""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Iterable, Optional

from ssui.domain.errors import BinaryNotFoundError, FilesystemError
from ssui.utils.reporting import PipelineReporter

EXECUTABLE_MODE = 0o755


class FilesystemPreparer:
    """Create, permission, verify and remove the install directory."""

    def __init__(self, reporter: Optional[PipelineReporter] = None) -> None:
        self.reporter = reporter or PipelineReporter()

    def create_install_dir(self, install_dir: Path) -> None:
        try:
            Path(install_dir).mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FilesystemError("create directory", install_dir, str(exc)) from exc
        self.reporter.progress("Created install directory: %s", install_dir)

    def set_executable_permissions(self, install_dir: Path, entry_points: Iterable[str]) -> None:
        """chmod 0755 each entry point; the first failure is fatal."""
        for relative in entry_points:
            path = Path(install_dir) / relative
            try:
                os.chmod(path, EXECUTABLE_MODE)
            except OSError as exc:
                raise FilesystemError("set executable permissions for", path, str(exc)) from exc
            self.reporter.progress("Set executable permissions for: %s", path)

    def verify_binary_present(self, install_dir: Path, binary: str) -> Path:
        path = Path(install_dir) / binary
        try:
            path.stat()
        except FileNotFoundError as exc:
            raise BinaryNotFoundError(path) from exc
        except OSError as exc:
            raise FilesystemError("stat", path, str(exc)) from exc
        self.reporter.progress("Verified updater binary: %s", path)
        return path

    def remove_install_dir(self, install_dir: Path) -> bool:
        """Recursively delete ``install_dir``; return whether it is gone."""
        path = Path(install_dir)
        if not os.path.lexists(path):
            return True
        try:
            if path.is_symlink() or not path.is_dir():
                path.unlink()
            else:
                shutil.rmtree(path)
        except OSError as exc:
            self.reporter.error("Failed to remove %s during rollback: %s", path, exc)
            return False
        return True


__all__ = ["EXECUTABLE_MODE", "FilesystemPreparer"]
