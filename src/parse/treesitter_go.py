"""Tree-sitter based parsing of Go compilation units."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from tree_sitter import Language, Parser
from tree_sitter_go import language as get_go_language

from errors import ParseError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tree_sitter import Node, Tree

_PARSER: Parser | None = None

# Nodes that may appear before the first non-import declaration.
_HEADER_NODE_TYPES = frozenset({"package_clause", "import_declaration", "comment"})


class ParseMode(str, Enum):
    """How much of a file must be well-formed for a parse to succeed."""

    IMPORTS_ONLY = "imports_only"
    FULL = "full"


def _get_parser() -> Parser:
    """Initialize and return the Tree-sitter parser with the Go language."""
    global _PARSER
    if _PARSER is None:
        lang = Language(get_go_language())
        _PARSER = Parser(lang)

    return _PARSER


class SourceTree:
    """Source bytes of one Go file and the syntax tree parsed from them.

    Mutations are expressed as byte splices. Every splice re-parses the file so
    ``tree`` always describes ``source``.
    """

    def __init__(self, path: Path, source: bytes) -> None:
        self.path = path
        self.source = source
        self.tree: Tree = _get_parser().parse(source)

    @property
    def root(self) -> Node:
        return self.tree.root_node

    def text(self, node: Node) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf8")

    def splice(self, start: int, end: int, replacement: bytes) -> None:
        """Replace ``source[start:end]`` with ``replacement`` and re-parse."""
        self.source = self.source[:start] + replacement + self.source[end:]
        self.tree = _get_parser().parse(self.source)

    def top_level(self, *node_types: str) -> list[Node]:
        """Return named top-level nodes, optionally filtered by type."""
        nodes = self.root.named_children
        if not node_types:
            return list(nodes)
        return [node for node in nodes if node.type in node_types]

    def header_nodes(self) -> list[Node]:
        """Return the package clause, imports and comments leading the file."""
        header: list[Node] = []
        for node in self.root.named_children:
            if node.type not in _HEADER_NODE_TYPES:
                break
            header.append(node)
        return header

    def walk(self) -> Iterator[Node]:
        """Yield every node of the tree in document order."""
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


def _first_error(node: Node) -> Node | None:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current
        if current.has_error:
            stack.extend(reversed(current.children))
    return None


def _raise_for_errors(tree: SourceTree, nodes: list[Node]) -> None:
    for node in nodes:
        if node.type == "ERROR" or node.has_error:
            bad = _first_error(node) or node
            line = bad.start_point[0] + 1
            col = bad.start_point[1] + 1
            msg = f"syntax error at {line}:{col}"
            raise ParseError("parse", str(tree.path), msg)


def parse_source(path: Path, source: bytes, mode: ParseMode = ParseMode.FULL) -> SourceTree:
    """Parse Go source held in memory.

    Args:
        path: Path the source belongs to (used in error messages and writes)
        source: Raw file content
        mode: ``IMPORTS_ONLY`` only validates the package clause and imports;
            ``FULL`` validates the whole file

    Raises:
        ParseError: If the file is not UTF-8, the validated part of the file
            has syntax errors or the package clause is missing.
    """
    try:
        source.decode("utf8")
    except UnicodeDecodeError as exc:
        msg = f"not valid UTF-8 at byte {exc.start}"
        raise ParseError("decode", str(path), msg) from exc

    tree = SourceTree(path, source)

    if mode is ParseMode.FULL:
        _raise_for_errors(tree, [tree.root])
    else:
        header = tree.header_nodes()
        _raise_for_errors(tree, header)
        # A broken import declaration surfaces as an ERROR node ending the header.
        following = tree.root.named_children[len(header) : len(header) + 1]
        if (
            following
            and following[0].type == "ERROR"
            and tree.source[following[0].start_byte :].startswith(b"import")
        ):
            _raise_for_errors(tree, following)

    if not tree.top_level("package_clause"):
        raise ParseError("parse", str(path), "missing package clause")

    return tree


def parse_file(path: str | Path, mode: ParseMode = ParseMode.FULL) -> SourceTree:
    """Read and parse a Go source file."""
    file_path = Path(path)
    try:
        source = file_path.read_bytes()
    except OSError as exc:
        raise ParseError("read", str(file_path), str(exc)) from exc
    return parse_source(file_path, source, mode)


__all__ = ["ParseMode", "SourceTree", "parse_file", "parse_source"]
