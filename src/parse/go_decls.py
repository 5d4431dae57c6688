"""Import and declaration extraction for Go compilation units."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from parse.treesitter_go import ParseMode, SourceTree, parse_file
from utils import unquote_import_path

if TYPE_CHECKING:
    from tree_sitter import Node


@dataclass(frozen=True)
class ImportDeclaration:
    """One import spec: ``alias "path"``."""

    path: str
    alias: str | None = None
    line: int = 0


@dataclass(frozen=True)
class FunctionDeclaration:
    """A top-level ``func`` declaration; ``receiver`` is set for methods."""

    name: str
    receiver: str | None = None
    line: int = 0


@dataclass
class CompilationUnit:
    """A parsed Go source file and the metadata extracted from it."""

    path: Path
    tree: SourceTree
    mode: ParseMode
    imports: list[ImportDeclaration] = field(default_factory=list)
    functions: list[FunctionDeclaration] = field(default_factory=list)

    @property
    def package_name(self) -> str:
        for clause in self.tree.top_level("package_clause"):
            for child in clause.named_children:
                return self.tree.text(child)
        return ""


def iter_import_specs(tree: SourceTree) -> list[Node]:
    """Return every ``import_spec`` node of the file in source order."""
    specs: list[Node] = []
    for decl in tree.top_level("import_declaration"):
        for child in decl.named_children:
            if child.type == "import_spec":
                specs.append(child)
            elif child.type == "import_spec_list":
                specs.extend(
                    spec for spec in child.named_children if spec.type == "import_spec"
                )
    return specs


def import_spec_path(tree: SourceTree, spec: Node) -> str:
    path_node = spec.child_by_field_name("path")
    if path_node is None:
        return ""
    return unquote_import_path(tree.text(path_node))


def import_spec_alias(tree: SourceTree, spec: Node) -> str | None:
    name_node = spec.child_by_field_name("name")
    if name_node is None:
        return None
    return tree.text(name_node)


def extract_imports(tree: SourceTree) -> list[ImportDeclaration]:
    return [
        ImportDeclaration(
            path=import_spec_path(tree, spec),
            alias=import_spec_alias(tree, spec),
            line=spec.start_point[0] + 1,
        )
        for spec in iter_import_specs(tree)
    ]


def extract_functions(tree: SourceTree) -> list[FunctionDeclaration]:
    """Extract top-level function and method declarations.

    Function bodies are not searched; nested function literals are not
    declarations.
    """
    functions: list[FunctionDeclaration] = []
    for node in tree.top_level("function_declaration", "method_declaration"):
        name_node = node.child_by_field_name("name")
        if name_node is None:
            continue
        receiver_node = node.child_by_field_name("receiver")
        functions.append(
            FunctionDeclaration(
                name=tree.text(name_node),
                receiver=tree.text(receiver_node) if receiver_node else None,
                line=node.start_point[0] + 1,
            )
        )
    return functions


def parse_unit(path: str | Path, mode: ParseMode = ParseMode.FULL) -> CompilationUnit:
    """Parse a file into a ``CompilationUnit``.

    ``IMPORTS_ONLY`` skips declaration extraction; only import metadata is
    filled in.
    """
    tree = parse_file(path, mode)
    unit = CompilationUnit(path=tree.path, tree=tree, mode=mode)
    unit.imports = extract_imports(tree)
    if mode is ParseMode.FULL:
        unit.functions = extract_functions(tree)
    return unit


__all__ = [
    "CompilationUnit",
    "FunctionDeclaration",
    "ImportDeclaration",
    "extract_functions",
    "extract_imports",
    "import_spec_alias",
    "import_spec_path",
    "iter_import_specs",
    "parse_unit",
]
