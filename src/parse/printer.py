"""Deterministic printing of Go syntax trees.

The printer reproduces gofmt's declaration layout:

- the package clause is followed by one blank line;
- declarations of different kinds, and documented declarations, are
  separated by one blank line; otherwise the source spacing is kept, capped
  at one blank line;
- trailing whitespace is removed and blank-line runs are collapsed, except
  inside raw string literals;
- the output ends with exactly one newline.

Text inside a declaration is otherwise emitted as written.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from errors import ParseError

if TYPE_CHECKING:
    from tree_sitter import Node

    from parse.treesitter_go import SourceTree

_DECL_KINDS = {
    "package_clause": "package",
    "import_declaration": "import",
    "function_declaration": "func",
    "method_declaration": "func",
    "type_declaration": "type",
    "var_declaration": "var",
    "const_declaration": "const",
}

_COMMENT = "comment"
_MAX_NEWLINES = 2


@dataclass
class _Item:
    start: int
    end: int
    start_row: int
    end_row: int
    kind: str
    documented: bool = False


def _doc_block(pending: list[Node], decl_row: int) -> list[Node]:
    """Pop the comments that sit directly above a declaration."""
    doc: list[Node] = []
    row = decl_row
    while pending and pending[-1].end_point[0] == row - 1:
        doc.insert(0, pending.pop())
        row = doc[0].start_point[0]
    return doc


def _comment_item(node: Node) -> _Item:
    return _Item(
        start=node.start_byte,
        end=node.end_byte,
        start_row=node.start_point[0],
        end_row=node.end_point[0],
        kind=_COMMENT,
    )


def _layout_items(tree: SourceTree) -> list[_Item]:
    items: list[_Item] = []
    pending: list[Node] = []

    for node in tree.root.named_children:
        if node.type == _COMMENT:
            if items and not pending and node.start_point[0] == items[-1].end_row:
                # Trailing comment on the line a declaration ends on.
                items[-1].end = node.end_byte
                items[-1].end_row = node.end_point[0]
                continue
            pending.append(node)
            continue

        doc = _doc_block(pending, node.start_point[0])
        items.extend(_comment_item(comment) for comment in pending)
        pending = []

        first = doc[0] if doc else node
        items.append(
            _Item(
                start=first.start_byte,
                end=node.end_byte,
                start_row=first.start_point[0],
                end_row=node.end_point[0],
                kind=_DECL_KINDS.get(node.type, node.type),
                documented=bool(doc),
            )
        )

    items.extend(_comment_item(comment) for comment in pending)
    return items


def _raw_string_spans(tree: SourceTree) -> list[tuple[int, int]]:
    return [
        (node.start_byte, node.end_byte)
        for node in tree.walk()
        if node.type == "raw_string_literal"
    ]


def _inside(spans: list[tuple[int, int]], offset: int) -> bool:
    return any(start < offset < end for start, end in spans)


def _tidy(source: bytes, start: int, end: int, raw_spans: list[tuple[int, int]]) -> bytes:
    """Strip trailing whitespace and collapse blank-line runs in a span."""
    lines = source[start:end].split(b"\n")
    out: list[bytes] = []
    offset = start
    blank_run = 0
    for line in lines:
        line_end = offset + len(line)
        # Anything rstrip removes lies after a raw string that closes on this line.
        protected = _inside(raw_spans, line_end)
        if not protected:
            line = line.rstrip(b" \t")
        if not line and not protected:
            blank_run += 1
            if blank_run > 1:
                offset = line_end + 1
                continue
        else:
            blank_run = 0
        out.append(line)
        offset = line_end + 1
    return b"\n".join(out)


def _separator(gap: bytes, previous_kind: str | None, item: _Item) -> bytes:
    if gap.strip(b" \t\r\n"):
        # Explicit separators such as ';' are kept as written.
        return gap

    newlines = min(gap.count(b"\n"), _MAX_NEWLINES)
    if item.kind == _COMMENT:
        if newlines == 0:
            return gap
        return b"\n" * newlines

    minimum = 1
    if previous_kind != item.kind or item.documented:
        minimum = 2
    return b"\n" * max(newlines, minimum)


def print_tree(tree: SourceTree) -> bytes:
    """Serialize a (possibly mutated) tree back to canonical Go source."""
    if tree.root.type == "ERROR":
        raise ParseError("print", str(tree.path), "tree has no valid source file")

    items = _layout_items(tree)
    if not items:
        return b""

    source = tree.source
    raw_spans = _raw_string_spans(tree)

    chunks: list[bytes] = []
    previous: _Item | None = None
    previous_kind: str | None = None
    for item in items:
        if previous is not None:
            gap = source[previous.end : item.start]
            chunks.append(_separator(gap, previous_kind, item))
        chunks.append(_tidy(source, item.start, item.end, raw_spans))
        if item.kind != _COMMENT:
            previous_kind = item.kind
        previous = item

    return b"".join(chunks).rstrip(b"\n") + b"\n"


__all__ = ["print_tree"]
