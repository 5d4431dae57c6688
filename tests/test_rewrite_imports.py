from __future__ import annotations

from pathlib import Path

from go_fixtures import write_go_file

from parse.printer import print_tree
from parse.treesitter_go import SourceTree, parse_source
from rewrite.imports import (
    add_import,
    delete_import,
    drop_unused_import,
    has_import,
    rewrite_import_path,
)

SHIM = "github.com/AdamKorcz/go-118-fuzz-build/testing"


def _tree(source: str) -> SourceTree:
    return parse_source(Path("p.go"), source.encode("utf8"))


def test_rewrite_import_path_replaces_import(tmp_path: Path) -> None:
    original = """package fuzz

import (
	"fmt"
	"testing"
)

func FuzzX(f *testing.F) {
	fmt.Println()
}
"""
    path = write_go_file(tmp_path, "fuzz.go", original)

    result = rewrite_import_path(path, "testing", SHIM)

    expected = original.replace('\t"testing"', f'\t"{SHIM}"')
    assert result.changed
    assert result.before == original.encode()
    assert path.read_text(encoding="utf-8") == expected
    assert result.after == expected.encode()


def test_rewrite_import_path_is_idempotent(tmp_path: Path) -> None:
    path = write_go_file(tmp_path, "a.go", 'package a\n\nimport "testing"\n')

    rewrite_import_path(path, "testing", SHIM)
    first = path.read_bytes()
    second = rewrite_import_path(path, "testing", SHIM)

    assert not second.changed
    assert path.read_bytes() == first


def test_rewrite_import_path_without_match_leaves_file_alone(tmp_path: Path) -> None:
    # Non-canonical layout: a write would add a blank line after the package.
    original = 'package a\nimport "fmt"\n'
    path = write_go_file(tmp_path, "a.go", original)

    result = rewrite_import_path(path, "testing", SHIM)

    assert not result.changed
    assert path.read_text(encoding="utf-8") == original


def test_rewrite_import_path_keeps_alias(tmp_path: Path) -> None:
    path = write_go_file(tmp_path, "a.go", 'package a\n\nimport tt "testing"\n')

    rewrite_import_path(path, "testing", SHIM)

    assert path.read_text(encoding="utf-8") == f'package a\n\nimport tt "{SHIM}"\n'


def test_rewrite_import_path_skips_file_already_importing_shim(tmp_path: Path) -> None:
    original = f'package a\n\nimport (\n\t"testing"\n\tshim "{SHIM}"\n)\n'
    path = write_go_file(tmp_path, "a.go", original)

    result = rewrite_import_path(path, "testing", SHIM)

    assert not result.changed
    assert path.read_text(encoding="utf-8") == original


def test_rewrite_import_path_tolerates_broken_body(tmp_path: Path) -> None:
    path = write_go_file(
        tmp_path,
        "a.go",
        'package a\n\nimport "testing"\n\nfunc f() {\n\treturn 1 +\n}\n',
    )

    result = rewrite_import_path(path, "testing", SHIM)

    assert result.changed
    assert f'import "{SHIM}"'.encode() in result.after
    assert b"return 1 +" in result.after


def test_add_import_converts_single_spec_to_list() -> None:
    tree = _tree('package p\n\nimport "testing"\n')

    assert add_import(tree, "bytes")

    assert print_tree(tree) == b'package p\n\nimport (\n\t"bytes"\n\t"testing"\n)\n'


def test_add_import_to_file_without_imports() -> None:
    tree = _tree("package p\n\nfunc f() {}\n")

    assert add_import(tree, "fmt")

    assert print_tree(tree) == b'package p\n\nimport "fmt"\n\nfunc f() {}\n'


def test_add_import_inserts_in_sorted_position() -> None:
    tree = _tree('package p\n\nimport (\n\t"bytes"\n\t"strings"\n)\n')

    assert add_import(tree, "fmt", "f")
    assert not add_import(tree, "fmt", "f")

    assert print_tree(tree) == (
        b'package p\n\nimport (\n\t"bytes"\n\tf "fmt"\n\t"strings"\n)\n'
    )
    assert has_import(tree, "fmt")


def test_delete_sole_import_removes_declaration() -> None:
    tree = _tree('package p\n\nimport "testing"\n\nfunc f() {}\n')

    assert delete_import(tree, "testing") == [None]

    assert print_tree(tree) == b"package p\n\nfunc f() {}\n"


def test_delete_import_from_list_returns_alias() -> None:
    tree = _tree('package p\n\nimport (\n\t"fmt"\n\tt "testing" // shim\n)\n')

    assert delete_import(tree, "testing") == ["t"]

    assert print_tree(tree) == b'package p\n\nimport (\n\t"fmt"\n)\n'
    assert delete_import(tree, "testing") == []


def test_add_import_joins_matching_group() -> None:
    tree = _tree(
        'package p\n\nimport (\n\t"fmt"\n\t"os"\n\n\t"example.com/a"\n\t"golang.org/x/z"\n)\n'
    )

    assert add_import(tree, SHIM)

    assert print_tree(tree) == (
        b'package p\n\nimport (\n\t"fmt"\n\t"os"\n\n\t"example.com/a"\n'
        + f'\t"{SHIM}"\n'.encode()
        + b'\t"golang.org/x/z"\n)\n'
    )


def test_add_standard_import_opens_leading_group() -> None:
    tree = _tree('package p\n\nimport (\n\t"example.com/a"\n)\n')

    assert add_import(tree, "bytes")

    assert print_tree(tree) == b'package p\n\nimport (\n\t"bytes"\n\n\t"example.com/a"\n)\n'


def test_add_import_to_single_spec_separates_groups() -> None:
    tree = _tree('package p\n\nimport "fmt"\n')

    assert add_import(tree, "example.com/a")

    assert print_tree(tree) == b'package p\n\nimport (\n\t"fmt"\n\n\t"example.com/a"\n)\n'


def test_delete_import_removes_emptied_group() -> None:
    source = 'package p\n\nimport (\n\t"fmt"\n\n\t"example.com/a"\n)\n'
    trailing = _tree(source)
    leading = _tree(source)

    delete_import(trailing, "example.com/a")
    delete_import(leading, "fmt")

    assert print_tree(trailing) == b'package p\n\nimport (\n\t"fmt"\n)\n'
    assert print_tree(leading) == b'package p\n\nimport (\n\t"example.com/a"\n)\n'


def test_drop_unused_import_keeps_referenced_qualifier() -> None:
    tree = _tree(
        'package p\n\nimport (\n\t"fmt"\n\tt "testing"\n)\n\nfunc f() { fmt.Println() }\n'
    )

    assert drop_unused_import(tree, "fmt") == []
    assert drop_unused_import(tree, "t") == ["testing"]

    assert print_tree(tree) == (
        b'package p\n\nimport (\n\t"fmt"\n)\n\nfunc f() { fmt.Println() }\n'
    )
