from __future__ import annotations

import stat
from pathlib import Path

import pytest

from ssui.adapters.filesystem import EXECUTABLE_MODE, FilesystemPreparer
from ssui.domain.errors import BinaryNotFoundError, FilesystemError


def test_create_install_dir_creates_parents(tmp_path: Path) -> None:
    target = tmp_path / "a" / "b" / "steamcmd"

    FilesystemPreparer().create_install_dir(target)

    assert target.is_dir()


def test_create_install_dir_under_a_file_fails(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")

    with pytest.raises(FilesystemError) as excinfo:
        FilesystemPreparer().create_install_dir(blocker / "steamcmd")

    assert excinfo.value.action == "create directory"


def test_set_executable_permissions_sets_0755(tmp_path: Path) -> None:
    (tmp_path / "linux32").mkdir()
    for rel in ("run.sh", "linux32/tool"):
        (tmp_path / rel).write_bytes(b"x")
        (tmp_path / rel).chmod(0o600)

    FilesystemPreparer().set_executable_permissions(tmp_path, ["run.sh", "linux32/tool"])

    for rel in ("run.sh", "linux32/tool"):
        assert stat.S_IMODE((tmp_path / rel).stat().st_mode) == EXECUTABLE_MODE


def test_set_executable_permissions_missing_entry_point_fails(tmp_path: Path) -> None:
    (tmp_path / "run.sh").write_bytes(b"x")

    with pytest.raises(FilesystemError) as excinfo:
        FilesystemPreparer().set_executable_permissions(tmp_path, ["run.sh", "missing"])

    assert excinfo.value.path == tmp_path / "missing"


def test_verify_binary_present(tmp_path: Path) -> None:
    (tmp_path / "linux32").mkdir()
    (tmp_path / "linux32" / "steamcmd").write_bytes(b"\x7fELF")

    found = FilesystemPreparer().verify_binary_present(tmp_path, "linux32/steamcmd")

    assert found == tmp_path / "linux32" / "steamcmd"
    with pytest.raises(BinaryNotFoundError):
        FilesystemPreparer().verify_binary_present(tmp_path, "linux32/missing")


def test_remove_install_dir_is_recursive_and_tolerates_absence(tmp_path: Path) -> None:
    target = tmp_path / "steamcmd"
    (target / "nested").mkdir(parents=True)
    (target / "nested" / "file").write_bytes(b"x")
    preparer = FilesystemPreparer()

    assert preparer.remove_install_dir(target) is True
    assert not target.exists()
    assert preparer.remove_install_dir(target) is True
