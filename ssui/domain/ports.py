from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Optional, Protocol, Sequence

from ssui.domain.install_models import ArchivePayload


# ---- Ports (Hexagonal boundaries) ----
class ArchiveSourcePort(Protocol):
    """Fetch a complete archive into memory."""

    def fetch(self, url: str) -> ArchivePayload: ...


class ArchiveExtractor(Protocol):
    """Unpack a random-access archive buffer into ``dest_dir``.

    Implementations raise ``InstallError`` subclasses and stop at the first
    failing entry.
    """

    def extract(self, source: BinaryIO, length: int, dest_dir: Path) -> None: ...


class CommandRunnerPort(Protocol):
    """Run a child process and return its exit status."""

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Optional[Path] = None,
        quiet: bool = False,
    ) -> int: ...


class DependencyInstallerPort(Protocol):
    def ensure_installed(self, libraries: Sequence[str]) -> None: ...


class NotifierPort(Protocol):
    """Plain-text status channel for operators (chat bot, console, ...)."""

    def send(self, message: str) -> None: ...


class ConfigProvider(Protocol):
    """Read-only build/version/branch strings."""

    @property
    def version(self) -> str: ...

    @property
    def branch(self) -> str: ...
