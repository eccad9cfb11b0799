"""Install state machine for the updater tool.

States run in a fixed order::

    ABSENT -> PREPARING -> ACQUIRING -> EXTRACTING -> PERMISSIONING -> VERIFYING -> INSTALLED

An existing install directory short-circuits to ``ALREADY_INSTALLED``
without looking at its contents. Once the directory has been created, a
``RollbackGuard`` owns it: unless the attempt reaches ``INSTALLED`` the whole
directory is removed before control returns, so a failed attempt always
leaves the target absent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import TracebackType
from typing import List, Optional, Type

from ssui.adapters.filesystem import FilesystemPreparer
from ssui.domain.errors import InstallError
from ssui.domain.install_models import InstallResult, InstallState, InstallTarget
from ssui.domain.ports import ArchiveExtractor, ArchiveSourcePort, DependencyInstallerPort
from ssui.utils.reporting import PipelineReporter


class RollbackGuard:
    """Remove ``install_dir`` on exit unless ``commit()`` was called."""

    def __init__(self, install_dir: Path, preparer: FilesystemPreparer, reporter: PipelineReporter) -> None:
        self.install_dir = Path(install_dir)
        self.preparer = preparer
        self.reporter = reporter
        self.success = False
        self.rolled_back = False

    def commit(self) -> None:
        self.success = True

    def __enter__(self) -> "RollbackGuard":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        if self.success:
            return None
        self.reporter.warning("Cleaning up %s due to failure...", self.install_dir)
        self.rolled_back = self.preparer.remove_install_dir(self.install_dir)
        return None


@dataclass
class InstallUpdater:
    """Use-case callable that installs the updater tool if it is absent."""

    target: InstallTarget
    source: ArchiveSourcePort
    extractor: ArchiveExtractor
    preparer: FilesystemPreparer
    dependencies: DependencyInstallerPort
    reporter: PipelineReporter = field(default_factory=PipelineReporter)

    def __call__(self) -> InstallResult:
        install_dir = self.target.install_dir
        visited: List[InstallState] = []

        if install_dir.exists():
            self.reporter.progress("Updater is already installed at %s.", install_dir)
            return InstallResult(
                state=InstallState.ALREADY_INSTALLED,
                install_dir=install_dir,
                visited=[InstallState.ALREADY_INSTALLED],
            )

        visited.append(InstallState.ABSENT)
        self.reporter.warning(
            "Updater not found for %s, downloading...", self.target.platform.value
        )

        visited.append(InstallState.PREPARING)
        try:
            self.preparer.create_install_dir(install_dir)
        except InstallError as exc:
            self.reporter.error("Error creating install directory: %s", exc)
            visited.append(InstallState.ROLLED_BACK)
            return InstallResult(InstallState.ROLLED_BACK, install_dir, visited, exc)

        guard = RollbackGuard(install_dir, self.preparer, self.reporter)
        error: Optional[InstallError] = None
        with guard:
            try:
                self._install_into(install_dir, visited)
                guard.commit()
            except InstallError as exc:
                error = exc
                self.reporter.error("%s", exc)
            except Exception as exc:
                error = InstallError("install.unexpected", "Updater install failed unexpectedly", str(exc))
                error.__cause__ = exc
                self.reporter.exception("Unexpected install failure in %s", install_dir)

        if guard.success:
            visited.append(InstallState.INSTALLED)
            self.reporter.success("Updater installed successfully.")
            return InstallResult(InstallState.INSTALLED, install_dir, visited)

        visited.append(InstallState.ROLLED_BACK)
        return InstallResult(InstallState.ROLLED_BACK, install_dir, visited, error)

    def _install_into(self, install_dir: Path, visited: List[InstallState]) -> None:
        if self.target.needs_dependencies:
            self.dependencies.ensure_installed(self.target.required_libraries)

        visited.append(InstallState.ACQUIRING)
        payload = self.source.fetch(self.target.download_url)

        visited.append(InstallState.EXTRACTING)
        self.extractor.extract(payload.reader(), payload.length, install_dir)
        del payload
        self.reporter.progress("Extracted archive into %s", install_dir)

        if self.target.needs_permissions:
            visited.append(InstallState.PERMISSIONING)
            self.preparer.set_executable_permissions(install_dir, self.target.entry_points)

        if self.target.binary:
            visited.append(InstallState.VERIFYING)
            self.preparer.verify_binary_present(install_dir, self.target.binary)


__all__ = ["InstallUpdater", "RollbackGuard"]
