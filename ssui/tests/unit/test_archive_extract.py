"""Tests for the tar.gz and zip extractors."""

from __future__ import annotations

import io
import os
import stat
import tarfile
from pathlib import Path

import pytest

from ssui.adapters.archive_extract import (
    TarGzExtractor,
    ZipExtractor,
    _ExtractorBase,
    extractor_for,
    resolve_entry_path,
)
from ssui.domain.errors import ArchiveFormatError, PathTraversalError, UnknownEntryTypeError
from ssui.domain.install_models import ArchivePayload, ExtractorKind
from ssui.tests.helpers import make_tarball, make_zip


def _extract(extractor, data: bytes, dest: Path) -> None:
    payload = ArchivePayload.from_bytes(data)
    extractor.extract(payload.reader(), payload.length, dest)


def test_tar_extracts_dirs_files_and_symlinks_with_modes(tmp_path: Path) -> None:
    data = make_tarball(
        [
            ("bin", None, 0o755),
            ("bin/tool", b"payload-bytes", 0o644),
            ("bin/run.sh", b"#!/bin/sh\n", 0o750),
        ],
        symlinks=[("bin/latest", "tool")],
    )
    dest = tmp_path / "out"

    _extract(TarGzExtractor(), data, dest)

    assert (dest / "bin").is_dir()
    assert (dest / "bin" / "tool").read_bytes() == b"payload-bytes"
    assert stat.S_IMODE((dest / "bin" / "tool").stat().st_mode) == 0o644
    assert stat.S_IMODE((dest / "bin" / "run.sh").stat().st_mode) == 0o750
    assert os.readlink(dest / "bin" / "latest") == "tool"


def test_tar_creates_missing_parents_and_accepts_dot_root(tmp_path: Path) -> None:
    data = make_tarball([("./", None, 0o755), ("./deep/nested/file.txt", b"x", 0o600)])
    dest = tmp_path / "out"

    _extract(TarGzExtractor(), data, dest)

    assert (dest / "deep" / "nested" / "file.txt").read_bytes() == b"x"


def test_tar_rejects_parent_traversal(tmp_path: Path) -> None:
    data = make_tarball([("../escape.txt", b"evil", 0o644)])
    dest = tmp_path / "out"

    with pytest.raises(PathTraversalError):
        _extract(TarGzExtractor(), data, dest)

    assert not (tmp_path / "escape.txt").exists()


def test_tar_rejects_writes_through_an_archive_symlink(tmp_path: Path) -> None:
    outside = tmp_path / "outside"
    outside.mkdir()
    data = make_tarball(
        [("linux32/pwned.txt", b"evil", 0o644)],
        symlinks=[("linux32", str(outside))],
        links_first=True,
    )

    with pytest.raises(PathTraversalError):
        _extract(TarGzExtractor(), data, tmp_path / "out")

    assert list(outside.iterdir()) == []


def test_tar_rejects_writes_through_an_existing_symlink(tmp_path: Path) -> None:
    outside = tmp_path / "outside"
    outside.mkdir()
    dest = tmp_path / "out"
    dest.mkdir()
    (dest / "linux32").symlink_to(outside, target_is_directory=True)
    data = make_tarball([("linux32/sub/pwned.txt", b"evil", 0o644)])

    with pytest.raises(PathTraversalError):
        _extract(TarGzExtractor(), data, dest)

    assert list(outside.iterdir()) == []


@pytest.mark.parametrize("linkname", ["/etc", "../../outside", "a/../../.."])
def test_tar_rejects_symlinks_pointing_outside(tmp_path: Path, linkname: str) -> None:
    data = make_tarball(symlinks=[("bin/escape", linkname)])
    dest = tmp_path / "out"

    with pytest.raises(PathTraversalError):
        _extract(TarGzExtractor(), data, dest)

    assert not os.path.lexists(dest / "bin" / "escape")


def test_tar_rejects_unknown_entry_type(tmp_path: Path) -> None:
    fifo = tarfile.TarInfo("pipe")
    fifo.type = tarfile.FIFOTYPE
    data = make_tarball([("first.txt", b"ok", 0o644)], extra=[fifo])
    dest = tmp_path / "out"

    with pytest.raises(UnknownEntryTypeError) as excinfo:
        _extract(TarGzExtractor(), data, dest)

    assert excinfo.value.entry_name == "pipe"
    # Entries before the failing one stay; cleanup belongs to the caller.
    assert (dest / "first.txt").read_bytes() == b"ok"


def test_tar_rejects_non_gzip_payload(tmp_path: Path) -> None:
    with pytest.raises(ArchiveFormatError):
        _extract(TarGzExtractor(), b"definitely not a tarball", tmp_path / "out")


def test_zip_extracts_nested_tree_with_identical_bytes(tmp_path: Path) -> None:
    blob = bytes(range(256)) * 300
    data = make_zip(
        [
            ("package/", None, 0o755),
            ("package/tool.exe", blob, 0o755),
            ("package/sub/readme.txt", b"hello", 0),
        ]
    )
    dest = tmp_path / "out"

    _extract(ZipExtractor(), data, dest)

    assert (dest / "package" / "tool.exe").read_bytes() == blob
    assert (dest / "package" / "sub" / "readme.txt").read_bytes() == b"hello"
    assert stat.S_IMODE((dest / "package" / "tool.exe").stat().st_mode) == 0o755
    assert stat.S_IMODE((dest / "package" / "sub" / "readme.txt").stat().st_mode) == 0o666


def test_zip_entries_without_unix_mode_use_default_modes(tmp_path: Path) -> None:
    data = make_zip([("plain/", None, 0), ("plain/file.bin", b"data", 0)])
    dest = tmp_path / "out"

    _extract(ZipExtractor(), data, dest)

    assert (dest / "plain").is_dir()
    assert stat.S_IMODE((dest / "plain" / "file.bin").stat().st_mode) == 0o666


@pytest.mark.parametrize("entry_name", ["../../evil.txt", "/tmp/ssui-absolute-evil.txt"])
def test_zip_rejects_entries_outside_destination(tmp_path: Path, entry_name: str) -> None:
    data = make_zip([("safe.txt", b"ok", 0o644), (entry_name, b"evil", 0o644)])
    dest = tmp_path / "a" / "out"

    with pytest.raises(PathTraversalError) as excinfo:
        _extract(ZipExtractor(), data, dest)

    assert excinfo.value.code == "install.path_traversal"
    assert not (tmp_path / "evil.txt").exists()
    assert not Path("/tmp/ssui-absolute-evil.txt").exists()
    assert sorted(p.name for p in dest.iterdir()) == ["safe.txt"]


def test_zip_rejects_symlink_entries(tmp_path: Path) -> None:
    data = make_zip([("link", b"target", stat.S_IFLNK | 0o777)])

    with pytest.raises(UnknownEntryTypeError):
        _extract(ZipExtractor(), data, tmp_path / "out")


def test_zip_rejects_corrupt_payload(tmp_path: Path) -> None:
    with pytest.raises(ArchiveFormatError):
        _extract(ZipExtractor(), b"PK\x03\x04 truncated", tmp_path / "out")


def test_length_mismatch_is_rejected_before_writing(tmp_path: Path) -> None:
    data = make_zip([("a.txt", b"a", 0o644)])
    dest = tmp_path / "out"

    with pytest.raises(ArchiveFormatError):
        ZipExtractor().extract(io.BytesIO(data), len(data) + 1, dest)

    assert not dest.exists()


def test_resolve_entry_path_allows_root_only_when_requested(tmp_path: Path) -> None:
    assert resolve_entry_path(tmp_path, "./", allow_root=True) == tmp_path
    with pytest.raises(PathTraversalError):
        resolve_entry_path(tmp_path, "./")
    assert resolve_entry_path(tmp_path, "a/../b.txt") == tmp_path / "b.txt"


def test_extractor_for_dispatches_by_kind() -> None:
    assert isinstance(extractor_for(ExtractorKind.TAR_GZ), TarGzExtractor)
    assert isinstance(extractor_for(ExtractorKind.ZIP), ZipExtractor)


def test_extractor_base_requires_an_entry_loop() -> None:
    with pytest.raises(TypeError):
        _ExtractorBase()  # type: ignore[abstract]
