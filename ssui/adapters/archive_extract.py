"""Archive extraction for downloaded updater payloads.

Two encodings are supported behind the ``ArchiveExtractor`` port:

- ``TarGzExtractor`` for the Linux ``.tar.gz`` tarball,
- ``ZipExtractor`` for the Windows ``.zip`` archive.

Both create the destination directory first, process entries in archive
order, and stop at the first failing entry. Cleaning up a half-extracted
tree is left to the caller (the install state machine rolls back the whole
install directory).

Every entry path is joined onto the destination and checked twice: lexically,
and again after resolving symlinks already on disk. Tar symlinks must be
relative and stay inside the destination. An entry that would land outside
the destination aborts the extraction with ``PathTraversalError``.
"""

from __future__ import annotations

import gzip
import io
import logging
import os
import shutil
import stat
import tarfile
import zipfile
import zlib
from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Optional

from ssui.domain.errors import (
    ArchiveFormatError,
    FilesystemError,
    PathTraversalError,
    UnknownEntryTypeError,
)
from ssui.domain.install_models import ExtractorKind
from ssui.domain.ports import ArchiveExtractor

logger = logging.getLogger(__name__)

COPY_BUFFER_SIZE = 32 * 1024
DEFAULT_DIR_MODE = 0o777
DEFAULT_FILE_MODE = 0o666

# Decoder-side failures; anything else raised while copying is a local I/O error.
_CORRUPT_ARCHIVE_ERRORS = (
    tarfile.TarError,
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    gzip.BadGzipFile,
    zlib.error,
    EOFError,
)


def resolve_entry_path(dest_dir: Path, entry_name: str, *, allow_root: bool = False) -> Path:
    """Join ``entry_name`` onto ``dest_dir`` and reject lexical escapes.

    Absolute names and ``..`` segments that leave ``dest_dir`` raise
    ``PathTraversalError``. The destination itself is only accepted when
    ``allow_root`` is set (``./`` directory entries in tarballs).
    """
    root = os.path.normpath(str(dest_dir))
    joined = os.path.normpath(os.path.join(root, entry_name))
    if joined == root and allow_root:
        return Path(joined)
    if not joined.startswith(root.rstrip(os.sep) + os.sep):
        raise PathTraversalError(entry_name, dest_dir)
    return Path(joined)


def ensure_within(dest_dir: Path, entry_name: str, path: Path) -> None:
    """Reject ``path`` when, following symlinks, it lands outside ``dest_dir``."""
    try:
        root = Path(dest_dir).resolve()
        resolved = Path(path).resolve()
    except (OSError, RuntimeError) as exc:
        # RuntimeError: symlink loop on older interpreters.
        raise FilesystemError("resolve", path, str(exc)) from exc
    if root not in (resolved, *resolved.parents):
        raise PathTraversalError(entry_name, dest_dir)


def _check_link_target(dest_dir: Path, entry_name: str, linkname: str) -> None:
    """Symlinks must be relative and point inside ``dest_dir``."""
    if not linkname or os.path.isabs(linkname):
        raise PathTraversalError(f"{entry_name} -> {linkname}", dest_dir)
    target = os.path.join(os.path.dirname(entry_name), linkname)
    try:
        resolve_entry_path(dest_dir, target, allow_root=True)
    except PathTraversalError:
        raise PathTraversalError(f"{entry_name} -> {linkname}", dest_dir) from None


def _payload_size(source: BinaryIO) -> int:
    current = source.tell()
    size = source.seek(0, io.SEEK_END)
    source.seek(current)
    return size


class _ExtractorBase(ABC):
    kind: ExtractorKind

    def extract(self, source: BinaryIO, length: int, dest_dir: Path) -> None:
        """Unpack ``source`` into ``dest_dir``.

        Raises:
            ArchiveFormatError: Corrupt archive or ``length`` mismatch.
            PathTraversalError: Entry escapes ``dest_dir``.
            UnknownEntryTypeError: Unsupported entry type.
            FilesystemError: Directory/file/symlink creation failed.
        """
        dest = Path(dest_dir)
        actual = _payload_size(source)
        if int(length) != actual:
            raise ArchiveFormatError(
                f"Archive length mismatch: declared {length} bytes, buffer holds {actual}",
            )
        source.seek(0)
        _make_dirs(dest, DEFAULT_DIR_MODE)
        self._extract_entries(source, dest)

    @abstractmethod
    def _extract_entries(self, source: BinaryIO, dest: Path) -> None:
        """Process archive entries in order into ``dest``."""


def _make_dirs(path: Path, mode: int) -> None:
    try:
        path.mkdir(mode=mode, parents=True, exist_ok=True)
    except OSError as exc:
        raise FilesystemError("create directory", path, str(exc)) from exc


def _write_file(target: Path, reader: BinaryIO, mode: int) -> None:
    """Create ``target`` truncated with ``mode`` and copy ``reader`` into it."""
    try:
        fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    except OSError as exc:
        raise FilesystemError("create file", target, str(exc)) from exc
    with os.fdopen(fd, "wb") as handle:
        try:
            shutil.copyfileobj(reader, handle, COPY_BUFFER_SIZE)
        except _CORRUPT_ARCHIVE_ERRORS as exc:
            raise ArchiveFormatError(f"Corrupt archive member {target.name}", str(exc)) from exc
        except OSError as exc:
            raise FilesystemError("write file", target, str(exc)) from exc
    try:
        # os.open applies the umask; the archive's mode bits win.
        os.chmod(target, mode)
    except OSError as exc:
        raise FilesystemError("set mode on", target, str(exc)) from exc


class TarGzExtractor(_ExtractorBase):
    """Sequential gzip-compressed tarball extraction."""

    kind = ExtractorKind.TAR_GZ

    def _extract_entries(self, source: BinaryIO, dest: Path) -> None:
        try:
            tar = tarfile.open(fileobj=source, mode="r:gz")
        except _CORRUPT_ARCHIVE_ERRORS as exc:
            raise ArchiveFormatError("Could not open gzip tarball", str(exc)) from exc
        with tar:
            while True:
                member = self._next_member(tar)
                if member is None:
                    break
                self._extract_member(tar, member, dest)

    @staticmethod
    def _next_member(tar: tarfile.TarFile) -> Optional[tarfile.TarInfo]:
        try:
            return tar.next()
        except (*_CORRUPT_ARCHIVE_ERRORS, OSError) as exc:
            raise ArchiveFormatError("Could not read tarball entry", str(exc)) from exc

    def _extract_member(self, tar: tarfile.TarFile, member: tarfile.TarInfo, dest: Path) -> None:
        target = resolve_entry_path(dest, member.name, allow_root=member.isdir())

        if member.issym():
            _check_link_target(dest, member.name, member.linkname)
            ensure_within(dest, member.name, target.parent)
        else:
            ensure_within(dest, member.name, target)

        if member.isdir():
            _make_dirs(target, DEFAULT_DIR_MODE)
            logger.debug("tar dir %s", target)
            return

        if member.isreg():
            _make_dirs(target.parent, DEFAULT_DIR_MODE)
            reader = tar.extractfile(member)
            if reader is None:
                raise ArchiveFormatError(f"Tarball member has no data: {member.name}")
            with reader:
                _write_file(target, reader, member.mode & 0o7777)
            logger.debug("tar file %s mode=%o", target, member.mode & 0o7777)
            return

        if member.issym():
            _make_dirs(target.parent, DEFAULT_DIR_MODE)
            try:
                os.symlink(member.linkname, target)
            except OSError as exc:
                raise FilesystemError("create symlink", target, str(exc)) from exc
            logger.debug("tar symlink %s -> %s", target, member.linkname)
            return

        entry_type = member.type.decode("ascii", errors="replace") if isinstance(member.type, bytes) else str(member.type)
        raise UnknownEntryTypeError(member.name, entry_type)


class ZipExtractor(_ExtractorBase):
    """Random-access zip extraction with path containment checks."""

    kind = ExtractorKind.ZIP

    def _extract_entries(self, source: BinaryIO, dest: Path) -> None:
        try:
            archive = zipfile.ZipFile(source, "r")
        except (*_CORRUPT_ARCHIVE_ERRORS, OSError) as exc:
            raise ArchiveFormatError("Could not open zip archive", str(exc)) from exc
        with archive:
            for entry in archive.infolist():
                self._extract_entry(archive, entry, dest)

    def _extract_entry(self, archive: zipfile.ZipFile, entry: zipfile.ZipInfo, dest: Path) -> None:
        target = resolve_entry_path(dest, entry.filename, allow_root=entry.is_dir())
        ensure_within(dest, entry.filename, target)
        unix_mode = (entry.external_attr >> 16) & 0xFFFF
        if stat.S_ISLNK(unix_mode):
            raise UnknownEntryTypeError(entry.filename, "symlink")
        perm = unix_mode & 0o7777

        if entry.is_dir():
            _make_dirs(target, perm or DEFAULT_DIR_MODE)
            logger.debug("zip dir %s", target)
            return

        _make_dirs(target.parent, DEFAULT_DIR_MODE)
        try:
            reader = archive.open(entry, "r")
        except (*_CORRUPT_ARCHIVE_ERRORS, NotImplementedError) as exc:
            raise ArchiveFormatError(f"Could not open zip member {entry.filename}", str(exc)) from exc
        with reader:
            _write_file(target, reader, perm or DEFAULT_FILE_MODE)
        logger.debug("zip file %s mode=%o", target, perm or DEFAULT_FILE_MODE)


def extractor_for(kind: ExtractorKind) -> ArchiveExtractor:
    """Resolve the extractor variant for an archive encoding."""
    if kind is ExtractorKind.TAR_GZ:
        return TarGzExtractor()
    if kind is ExtractorKind.ZIP:
        return ZipExtractor()
    raise ValueError(f"Unsupported archive kind: {kind!r}")


__all__ = [
    "COPY_BUFFER_SIZE",
    "TarGzExtractor",
    "ZipExtractor",
    "extractor_for",
    "ensure_within",
    "resolve_entry_path",
]
