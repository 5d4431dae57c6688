from __future__ import annotations

from pathlib import Path

import pytest
from go_fixtures import write_go_file

from errors import ParseError
from parse.go_decls import FunctionDeclaration, ImportDeclaration, parse_unit
from parse.printer import print_tree
from parse.treesitter_go import ParseMode, parse_file, parse_source

BROKEN_BODY = b"package p\n\nimport \"fmt\"\n\nfunc f() {\n\treturn 1 +\n}\n"


def test_parse_unit_extracts_imports_and_functions(tmp_path: Path) -> None:
    path = write_go_file(
        tmp_path,
        "demo.go",
        """package demo

import (
	"fmt"
	tt "testing"
)

type T struct{}

func (t *T) Method() {}

func Helper(x int) int { return x }
""",
    )

    unit = parse_unit(path)

    assert unit.package_name == "demo"
    assert unit.imports == [
        ImportDeclaration(path="fmt", alias=None, line=4),
        ImportDeclaration(path="testing", alias="tt", line=5),
    ]
    assert unit.functions == [
        FunctionDeclaration(name="Method", receiver="(t *T)", line=10),
        FunctionDeclaration(name="Helper", receiver=None, line=12),
    ]


def test_imports_only_mode_skips_declarations(tmp_path: Path) -> None:
    path = write_go_file(tmp_path, "demo.go", "package demo\n\nfunc F() {}\n")

    unit = parse_unit(path, ParseMode.IMPORTS_ONLY)

    assert unit.functions == []


def test_imports_only_tolerates_broken_body() -> None:
    tree = parse_source(Path("broken.go"), BROKEN_BODY, ParseMode.IMPORTS_ONLY)

    assert tree.top_level("import_declaration")


def test_full_mode_rejects_broken_body() -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_source(Path("broken.go"), BROKEN_BODY, ParseMode.FULL)

    assert exc_info.value.operation == "parse"
    assert exc_info.value.path == "broken.go"
    assert "syntax error" in exc_info.value.message


def test_missing_package_clause_rejected() -> None:
    with pytest.raises(ParseError, match="missing package clause"):
        parse_source(Path("nopkg.go"), b'import "fmt"\n', ParseMode.IMPORTS_ONLY)


def test_unreadable_file_reports_read(tmp_path: Path) -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_file(tmp_path / "missing.go")

    assert exc_info.value.operation == "read"


def test_non_utf8_source_reports_decode(tmp_path: Path) -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_source(Path("latin1.go"), b'package p\n\nvar s = "\xe9"\n')

    assert exc_info.value.operation == "decode"
    assert exc_info.value.path == "latin1.go"
    assert "byte 20" in exc_info.value.message

    path = tmp_path / "latin1.go"
    path.write_bytes(b'package p\n\nimport "testing"\n\nvar s = "\xe9"\n')
    with pytest.raises(ParseError, match="decode"):
        parse_file(path)


def test_printer_collapses_blank_lines_outside_raw_strings() -> None:
    source = b"package p\n\n\n\nvar s = `a  \n\n\nb`   \n\n\n\nfunc f() {}\n"

    printed = print_tree(parse_source(Path("p.go"), source))

    assert printed == b"package p\n\nvar s = `a  \n\n\nb`\n\nfunc f() {}\n"


def test_printer_separates_declaration_kinds() -> None:
    source = (
        b'package p\nimport "fmt"\n// A documents itself.\n'
        b"func A() { fmt.Println() }\nfunc B() {}\nfunc C() {}"
    )

    printed = print_tree(parse_source(Path("p.go"), source))

    assert printed == (
        b'package p\n\nimport "fmt"\n\n// A documents itself.\n'
        b"func A() { fmt.Println() }\nfunc B() {}\nfunc C() {}\n"
    )


def test_printer_keeps_trailing_comment_with_declaration() -> None:
    source = b"package p\n\nvar x = 1 // one\n\n\n\nvar y = 2\n"

    printed = print_tree(parse_source(Path("p.go"), source))

    assert printed == b"package p\n\nvar x = 1 // one\n\nvar y = 2\n"


def test_printer_is_idempotent() -> None:
    source = b"package p\nimport \"fmt\"\nfunc f() {\n\tfmt.Println()   \n}\n\n\n"

    once = print_tree(parse_source(Path("p.go"), source))
    twice = print_tree(parse_source(Path("p.go"), once))

    assert once == twice
    assert once == b"package p\n\nimport \"fmt\"\n\nfunc f() {\n\tfmt.Println()\n}\n"
