from __future__ import annotations

from pathlib import Path

import pytest
from go_fixtures import write_go_file

from errors import InvariantViolation, RenameError
from harness.renamer import FileRenamer


def _files(root: Path, *names: str) -> list[str]:
    return [str(write_go_file(root, name, "package p\n")) for name in names]


def test_rename_test_files_ledger(tmp_path: Path) -> None:
    files = _files(tmp_path, "a_test.go", "b.go", "c_test.go")
    renamer = FileRenamer()

    ledger = renamer.rename_test_files(files)

    assert ledger == {
        str(tmp_path / "a_test.go"): str(tmp_path / "a_libFuzzer.go"),
        str(tmp_path / "c_test.go"): str(tmp_path / "c_libFuzzer.go"),
    }
    assert (tmp_path / "b.go").exists()
    assert (tmp_path / "a_libFuzzer.go").exists()
    assert not (tmp_path / "a_test.go").exists()


def test_same_file_selected_twice_is_fatal(tmp_path: Path) -> None:
    files = _files(tmp_path, "a_test.go")
    renamer = FileRenamer()
    renamer.rename_test_files(files)

    with pytest.raises(InvariantViolation):
        renamer.rename_test_files(files)


def test_add_renamed_file_rejects_duplicates() -> None:
    renamer = FileRenamer()
    renamer.add_renamed_file("/x/a_test.go", "/x/a_libFuzzer.go")

    with pytest.raises(InvariantViolation):
        renamer.add_renamed_file("/x/a_test.go", "/x/other.go")


def test_existing_target_is_not_clobbered(tmp_path: Path) -> None:
    files = _files(tmp_path, "a_test.go")
    target = write_go_file(tmp_path, "a_libFuzzer.go", "package keep\n")

    with pytest.raises(RenameError) as exc_info:
        FileRenamer().rename_test_files(files)

    assert exc_info.value.operation == "rename"
    assert target.read_text(encoding="utf-8") == "package keep\n"
    assert (tmp_path / "a_test.go").exists()


def test_restore_undoes_renames(tmp_path: Path) -> None:
    files = _files(tmp_path, "a_test.go", "c_test.go")
    renamer = FileRenamer()
    renamer.rename_test_files(files)

    renamer.restore()

    assert renamer.renamed_files == {}
    assert all(Path(f).exists() for f in files)
    assert not (tmp_path / "a_libFuzzer.go").exists()


def test_custom_suffixes(tmp_path: Path) -> None:
    files = _files(tmp_path, "x_spec.go")

    ledger = FileRenamer("_spec.go", "_build.go").rename_test_files(files)

    assert ledger == {str(tmp_path / "x_spec.go"): str(tmp_path / "x_build.go")}
