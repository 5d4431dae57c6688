from __future__ import annotations

from pathlib import Path

import pytest
from go_fixtures import write_go_file

from errors import ParseError, RewriteError
from harness.materialize import (
    HARNESS_NOT_FOUND,
    NOT_FOUND,
    HarnessClone,
    find_and_clone_harness,
    harness_clone_path,
)

SHIM = "github.com/AdamKorcz/go-118-fuzz-build/testing"

FUZZ_SOURCE = """package module1

import "testing"

func FuzzX(f *testing.F) {
	f.Fuzz(func(t *testing.T, data []byte) {})
}
"""


def _clone(path: Path, name: str = "FuzzX") -> HarnessClone:
    return find_and_clone_harness(path, name, original_import="testing", shim_import=SHIM)


def test_clone_swaps_import_and_keeps_original(tmp_path: Path) -> None:
    path = write_go_file(tmp_path, "fuzz_test.go", FUZZ_SOURCE)

    clone = _clone(path)

    assert clone.found
    assert clone.original_path == str(path)
    assert clone.original_bytes == FUZZ_SOURCE.encode()
    assert clone.clone_path == str(tmp_path / "fuzz_test_fuzz.go")
    assert Path(clone.clone_path).read_text(encoding="utf-8") == (
        "package module1\n"
        "\n"
        f'import "{SHIM}"\n'
        "\n"
        "func FuzzX(f *testing.F) {\n"
        "\tf.Fuzz(func(t *testing.T, data []byte) {})\n"
        "}\n"
    )
    assert path.read_text(encoding="utf-8") == FUZZ_SOURCE


def test_clone_inserts_shim_into_import_list(tmp_path: Path) -> None:
    path = write_go_file(
        tmp_path,
        "fuzz_test.go",
        'package m\n\nimport (\n\t"bytes"\n\t"testing"\n)\n\n'
        "func FuzzX(f *testing.F) { _ = bytes.Compare }\n",
    )

    clone = _clone(path)

    text = Path(clone.clone_path).read_text(encoding="utf-8")
    assert f'import (\n\t"bytes"\n\n\t"{SHIM}"\n)\n' in text
    assert '"testing"' not in text


def test_clone_keeps_import_alias(tmp_path: Path) -> None:
    path = write_go_file(
        tmp_path,
        "fuzz_test.go",
        'package m\n\nimport tt "testing"\n\nfunc FuzzX(f *tt.F) {}\n',
    )

    clone = _clone(path)

    assert f'import tt "{SHIM}"' in Path(clone.clone_path).read_text(encoding="utf-8")


def test_missing_harness_returns_sentinel(tmp_path: Path) -> None:
    path = write_go_file(tmp_path, "fuzz_test.go", FUZZ_SOURCE)

    clone = _clone(path, "FuzzY")

    assert clone is NOT_FOUND
    assert not clone.found
    assert clone.original_path == ""
    assert clone.original_bytes == HARNESS_NOT_FOUND == b"NONE"
    assert not (tmp_path / "fuzz_test_fuzz.go").exists()


def test_methods_are_not_harnesses(tmp_path: Path) -> None:
    path = write_go_file(
        tmp_path,
        "fuzz_test.go",
        'package m\n\nimport "testing"\n\ntype S struct{}\n\n'
        "func (s *S) FuzzX(f *testing.F) {}\n",
    )

    assert _clone(path) is NOT_FOUND


def test_existing_clone_is_not_overwritten(tmp_path: Path) -> None:
    path = write_go_file(tmp_path, "fuzz_test.go", FUZZ_SOURCE)
    existing = write_go_file(tmp_path, "fuzz_test_fuzz.go", "package keep\n")

    with pytest.raises(RewriteError) as exc_info:
        _clone(path)

    assert exc_info.value.path == str(existing)
    assert existing.read_text(encoding="utf-8") == "package keep\n"


def test_unparsable_candidate_is_reported(tmp_path: Path) -> None:
    path = write_go_file(tmp_path, "fuzz_test.go", "package m\n\nfunc FuzzX( {\n")

    with pytest.raises(ParseError):
        _clone(path)


def test_harness_clone_path_custom_suffix() -> None:
    assert harness_clone_path("/src/fuzz_test.go") == "/src/fuzz_test_fuzz.go"
    assert harness_clone_path("/src/f.go", "_harness.go") == "/src/f_harness.go"
