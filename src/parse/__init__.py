"""Parsing and printing of Go compilation units."""

from parse.go_decls import (
    CompilationUnit,
    FunctionDeclaration,
    ImportDeclaration,
    extract_functions,
    extract_imports,
    parse_unit,
)
from parse.printer import print_tree
from parse.treesitter_go import ParseMode, SourceTree, parse_file, parse_source

__all__ = [
    "CompilationUnit",
    "FunctionDeclaration",
    "ImportDeclaration",
    "ParseMode",
    "SourceTree",
    "extract_functions",
    "extract_imports",
    "parse_file",
    "parse_source",
    "parse_unit",
    "print_tree",
]
