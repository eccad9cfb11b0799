"""Debian package checks for the updater's 32-bit runtime libraries.

``dpkg -s`` decides whether a library is present; missing ones are installed
with ``sudo apt-get install -y`` and the package manager's output is shown
to the operator.
"""

from __future__ import annotations

from typing import Optional, Sequence

from ssui.domain.errors import DependencyInstallError, InstallError
from ssui.domain.ports import CommandRunnerPort, DependencyInstallerPort
from ssui.utils.reporting import PipelineReporter


class AptDependencyInstaller(DependencyInstallerPort):
    def __init__(
        self,
        runner: CommandRunnerPort,
        *,
        reporter: Optional[PipelineReporter] = None,
        use_sudo: bool = True,
    ) -> None:
        self.runner = runner
        self.reporter = reporter or PipelineReporter()
        self.use_sudo = use_sudo

    def is_installed(self, library: str) -> bool:
        try:
            return self.runner.run(["dpkg", "-s", library], quiet=True) == 0
        except InstallError:
            # No dpkg on this host: treat as missing and let apt-get decide.
            return False

    def install_command(self, library: str) -> list[str]:
        argv = ["apt-get", "install", "-y", library]
        return ["sudo", *argv] if self.use_sudo else argv

    def ensure_installed(self, libraries: Sequence[str]) -> None:
        """Install every missing library; stop at the first failure.

        Raises:
            DependencyInstallError: apt-get could not be started or exited non-zero.
        """
        for library in libraries:
            if self.is_installed(library):
                self.reporter.progress("Library already installed: %s", library)
                continue

            self.reporter.progress("Installing library: %s", library)
            try:
                code = self.runner.run(self.install_command(library))
            except InstallError as exc:
                raise DependencyInstallError(library, str(exc)) from exc
            if code != 0:
                raise DependencyInstallError(library, f"apt-get exited with status {code}")
            self.reporter.success("Installed library: %s", library)


class NoopDependencyInstaller(DependencyInstallerPort):
    """Dependency step for platforms whose archive is self-contained."""

    def ensure_installed(self, libraries: Sequence[str]) -> None:
        return None


__all__ = ["AptDependencyInstaller", "NoopDependencyInstaller"]
