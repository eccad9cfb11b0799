from __future__ import annotations

import io
import stat
import tarfile
import time
import zipfile
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ssui.domain.errors import InstallError
from ssui.domain.install_models import ArchivePayload

# (name, data-or-None, mode); None data means a directory entry.
TarMember = Tuple[str, Optional[bytes], int]

LINUX_TOOL_FILES: Dict[str, bytes] = {
    "steamcmd.sh": b"#!/bin/sh\nexec linux32/steamcmd \"$@\"\n",
    "linux32/steamcmd": b"\x7fELF fake steamcmd",
    "linux32/steamerrorreporter": b"\x7fELF fake reporter",
}


def make_tarball(
    members: Iterable[TarMember] = (),
    *,
    symlinks: Iterable[Tuple[str, str]] = (),
    extra: Iterable[tarfile.TarInfo] = (),
    links_first: bool = False,
) -> bytes:
    """Build a gzip tarball in memory from ``members`` and ``symlinks``.

    Symlinks follow the members unless ``links_first`` is set.
    """
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        if links_first:
            _add_symlinks(tar, symlinks)
        for name, data, mode in members:
            info = tarfile.TarInfo(name)
            info.mode = mode
            info.mtime = int(time.time())
            if data is None:
                info.type = tarfile.DIRTYPE
                tar.addfile(info)
            else:
                info.size = len(data)
                tar.addfile(info, io.BytesIO(data))
        if not links_first:
            _add_symlinks(tar, symlinks)
        for info in extra:
            tar.addfile(info)
    return buf.getvalue()


def _add_symlinks(tar: tarfile.TarFile, symlinks: Iterable[Tuple[str, str]]) -> None:
    for name, link in symlinks:
        info = tarfile.TarInfo(name)
        info.type = tarfile.SYMTYPE
        info.linkname = link
        tar.addfile(info)


def make_zip(entries: Iterable[Tuple[str, Optional[bytes], int]]) -> bytes:
    """Build a zip in memory; ``mode`` 0 leaves the unix attributes empty."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, data, mode in entries:
            info = zipfile.ZipInfo(name)
            if data is None:
                if mode:
                    info.external_attr = ((stat.S_IFDIR | mode) << 16) | 0x10
                archive.writestr(info, b"")
                _clear_default_mode(info, mode)
                continue
            if mode:
                info.external_attr = (stat.S_IFREG | mode) << 16
            info.compress_type = zipfile.ZIP_DEFLATED
            archive.writestr(info, data)
            _clear_default_mode(info, mode)
    return buf.getvalue()


def _clear_default_mode(info: zipfile.ZipInfo, mode: int) -> None:
    # writestr stamps 0o600 on entries without attributes; the central
    # directory is written on close, so resetting here yields a mode-less entry.
    if not mode:
        info.external_attr = 0x10 if info.is_dir() else 0


def linux_tool_tarball() -> bytes:
    members: List[TarMember] = [("linux32", None, 0o755)]
    members.extend((name, data, 0o644) for name, data in LINUX_TOOL_FILES.items())
    return make_tarball(members)


def windows_tool_zip() -> bytes:
    return make_zip([("steamcmd.exe", b"MZ fake steamcmd", 0)])


class FakeResponse:
    """Streaming response double for the archive downloader."""

    def __init__(
        self,
        status_code: int = 200,
        chunks: Sequence[Union[bytes, BaseException]] = (),
        reason: str = "",
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self._chunks = list(chunks)
        self.closed = False

    def iter_content(self, chunk_size: int = 1):
        _ = chunk_size
        for chunk in self._chunks:
            if isinstance(chunk, BaseException):
                raise chunk
            yield chunk

    def close(self) -> None:
        self.closed = True


class FakeSession:
    """``DownloadSession`` double returning one prepared response or raising."""

    def __init__(self, response: Optional[FakeResponse] = None, error: Optional[BaseException] = None) -> None:
        self.response = response
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def get(self, url: str, *, timeout: Optional[float] = None, stream: bool = True) -> FakeResponse:
        self.calls.append({"url": url, "timeout": timeout, "stream": stream})
        if self.error is not None:
            raise self.error
        if self.response is None:
            raise RuntimeError("No fake response configured")
        return self.response


class FakeSource:
    """``ArchiveSourcePort`` double serving fixed bytes or raising."""

    def __init__(self, data: bytes = b"", error: Optional[BaseException] = None) -> None:
        self.data = data
        self.error = error
        self.urls: List[str] = []

    def fetch(self, url: str) -> ArchivePayload:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return ArchivePayload.from_bytes(self.data)


class FakeRunner:
    """``CommandRunnerPort`` double.

    ``handler`` maps an argv list to an exit code (or raises); the default
    succeeds for every command.
    """

    def __init__(self, handler: Optional[Callable[[List[str]], int]] = None) -> None:
        self.handler = handler or (lambda argv: 0)
        self.calls: List[Dict[str, Any]] = []

    def run(self, argv: Sequence[str], *, cwd: Optional[Path] = None, quiet: bool = False) -> int:
        argv_list = [str(a) for a in argv]
        self.calls.append({"argv": argv_list, "cwd": cwd, "quiet": quiet})
        return self.handler(argv_list)

    def commands(self) -> List[List[str]]:
        return [call["argv"] for call in self.calls]


class RecordingDependencies:
    """``DependencyInstallerPort`` double recording requested libraries."""

    def __init__(self, error: Optional[InstallError] = None) -> None:
        self.error = error
        self.requested: List[Tuple[str, ...]] = []

    def ensure_installed(self, libraries: Sequence[str]) -> None:
        self.requested.append(tuple(libraries))
        if self.error is not None:
            raise self.error


__all__ = [
    "FakeResponse",
    "FakeRunner",
    "FakeSession",
    "FakeSource",
    "LINUX_TOOL_FILES",
    "RecordingDependencies",
    "linux_tool_tarball",
    "make_tarball",
    "make_zip",
    "windows_tool_zip",
]
