"""Import path rewriting for Go compilation units."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from errors import RewriteError
from parse.go_decls import (
    extract_imports,
    import_spec_alias,
    import_spec_path,
    iter_import_specs,
)
from parse.printer import print_tree
from parse.treesitter_go import ParseMode, parse_file

if TYPE_CHECKING:
    from tree_sitter import Node

    from parse.treesitter_go import SourceTree

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RewriteResult:
    """Pre-image and post-image of one in-place rewrite."""

    path: Path
    before: bytes
    after: bytes

    @property
    def changed(self) -> bool:
        return self.before != self.after


def _spec_text(path: str, alias: str | None) -> bytes:
    quoted = f'"{path}"'
    return (f"{alias} {quoted}" if alias else quoted).encode("utf8")


def _line_start(source: bytes, offset: int) -> int:
    return source.rfind(b"\n", 0, offset) + 1


def _line_end(source: bytes, offset: int) -> int:
    end = source.find(b"\n", offset)
    return len(source) if end == -1 else end


def _find_spec(tree: SourceTree, path: str) -> Node | None:
    for spec in iter_import_specs(tree):
        if import_spec_path(tree, spec) == path:
            return spec
    return None


def has_import(tree: SourceTree, path: str) -> bool:
    return any(imp.path == path for imp in extract_imports(tree))


def replace_import_path(tree: SourceTree, from_path: str, to_path: str) -> int:
    """Point every import of ``from_path`` at ``to_path``, keeping aliases.

    Returns:
        Number of import specs rewritten.
    """
    if from_path == to_path:
        return 0

    count = 0
    while (spec := _find_spec(tree, from_path)) is not None:
        path_node = spec.child_by_field_name("path")
        if path_node is None:
            break
        tree.splice(path_node.start_byte, path_node.end_byte, f'"{to_path}"'.encode())
        count += 1
    return count


def is_standard_import(path: str) -> bool:
    """Standard library paths have no dot in their first element.

    Examples:
        >>> is_standard_import("net/http")
        True
        >>> is_standard_import("github.com/user/repo")
        False
    """
    return "." not in path.split("/", 1)[0]


def import_name(tree: SourceTree, spec: Node) -> str:
    """Name a spec is referenced by: its alias, else the last path element."""
    alias = import_spec_alias(tree, spec)
    if alias is not None:
        return alias
    return import_spec_path(tree, spec).rsplit("/", 1)[-1]


def _owned_line_span(source: bytes, spec: Node) -> tuple[int, int]:
    """Span of the line holding ``spec``, plus one blank line it would strand."""
    start = _line_start(source, spec.start_byte)
    end = min(_line_end(source, spec.end_byte) + 1, len(source))
    if start == 0:
        return start, end

    prev_start = _line_start(source, start - 1)
    prev_line = source[prev_start : start - 1].strip()
    next_end = _line_end(source, end)
    next_line = source[end:next_end].strip()
    if not next_line and next_end < len(source) and (not prev_line or prev_line.endswith(b"(")):
        end = next_end + 1
    elif not prev_line and next_line.startswith(b")"):
        start = prev_start
    return start, end


def _delete_spec(tree: SourceTree, spec: Node) -> None:
    source = tree.source
    parent = spec.parent
    if parent is None:
        return

    if parent.type == "import_spec_list":
        siblings = [child for child in parent.named_children if child.type == "import_spec"]
        if len(siblings) > 1:
            start = _line_start(source, spec.start_byte)
            end = _line_end(source, spec.end_byte)
            rest = source[spec.end_byte : end].strip()
            if source[start : spec.start_byte].strip() == b"" and (
                not rest or rest.startswith(b"//")
            ):
                # The spec owns its line (a trailing comment goes with it).
                tree.splice(*_owned_line_span(source, spec), b"")
            else:
                end = spec.end_byte
                while end < len(source) and source[end : end + 1] in (b" ", b";"):
                    end += 1
                tree.splice(spec.start_byte, end, b"")
            return
        parent = parent.parent
        if parent is None:
            return

    # Removing the only spec removes the whole declaration.
    end = _line_end(source, parent.end_byte)
    if source[parent.end_byte : end].strip() == b"":
        end = min(end + 1, len(source))
    else:
        end = parent.end_byte
    tree.splice(parent.start_byte, end, b"")


def delete_import(tree: SourceTree, path: str) -> list[str | None]:
    """Delete every import of ``path``.

    Returns:
        The alias of each deleted spec (``None`` for unaliased ones), in
        source order.
    """
    aliases: list[str | None] = []
    while (spec := _find_spec(tree, path)) is not None:
        aliases.append(import_spec_alias(tree, spec))
        _delete_spec(tree, spec)
    return aliases


def qualifier_in_use(tree: SourceTree, qualifier: str) -> bool:
    """Check whether any ``qualifier.X`` type or selector remains in the file."""
    for node in tree.walk():
        if node.type == "qualified_type":
            package = node.child_by_field_name("package")
        elif node.type == "selector_expression":
            package = node.child_by_field_name("operand")
        else:
            continue
        if (
            package is not None
            and package.type in ("package_identifier", "identifier")
            and tree.text(package) == qualifier
        ):
            return True
    return False


def drop_unused_import(tree: SourceTree, qualifier: str) -> list[str]:
    """Delete the imports named ``qualifier`` once nothing references them.

    Returns:
        Paths of the deleted specs; empty while ``qualifier`` is still used.
    """
    if qualifier_in_use(tree, qualifier):
        return []

    removed: list[str] = []
    while True:
        spec = next(
            (s for s in iter_import_specs(tree) if import_name(tree, s) == qualifier),
            None,
        )
        if spec is None:
            return removed
        removed.append(import_spec_path(tree, spec))
        _delete_spec(tree, spec)


def _import_groups(source: bytes, specs: list[Node]) -> list[list[Node]]:
    """Split specs into the blank-line separated groups gofmt sorts within."""
    groups: list[list[Node]] = []
    for spec in specs:
        if groups:
            gap = source[groups[-1][-1].end_byte : spec.start_byte]
            if b"\n\n" not in gap.replace(b" ", b"").replace(b"\t", b""):
                groups[-1].append(spec)
                continue
        groups.append([spec])
    return groups


def _insert_into_list(tree: SourceTree, spec_list: Node, spec_text: bytes, path: str) -> None:
    source = tree.source
    specs = [child for child in spec_list.named_children if child.type == "import_spec"]
    if not specs:
        tree.splice(spec_list.start_byte, spec_list.end_byte, b"(\n\t" + spec_text + b"\n)")
        return

    list_row = spec_list.start_point[0]
    close_row = spec_list.end_point[0]
    standard = is_standard_import(path)

    matching = [
        group
        for group in _import_groups(source, specs)
        if any(is_standard_import(import_spec_path(tree, spec)) == standard for spec in group)
    ]
    if not matching:
        # New group: standard library first, everything else last.
        if standard:
            _insert_before(tree, specs[0], list_row, spec_text, b"\n\n")
        else:
            _insert_after(tree, specs[-1], close_row, spec_text, b"\n\n")
        return

    group = matching[0] if standard else matching[-1]
    before = [spec for spec in group if import_spec_path(tree, spec) < path]
    if before:
        _insert_after(tree, before[-1], close_row, spec_text, b"\n")
    else:
        _insert_before(tree, group[0], list_row, spec_text, b"\n")


def _insert_after(
    tree: SourceTree, anchor: Node, close_row: int, spec_text: bytes, separator: bytes
) -> None:
    source = tree.source
    if anchor.end_point[0] == close_row:
        tree.splice(anchor.end_byte, anchor.end_byte, b"; " + spec_text)
        return
    indent = source[_line_start(source, anchor.start_byte) : anchor.start_byte]
    position = _line_end(source, anchor.end_byte)
    tree.splice(position, position, separator + indent + spec_text)


def _insert_before(
    tree: SourceTree, anchor: Node, list_row: int, spec_text: bytes, separator: bytes
) -> None:
    source = tree.source
    if anchor.start_point[0] == list_row:
        tree.splice(anchor.start_byte, anchor.start_byte, spec_text + b"; ")
        return
    line_start = _line_start(source, anchor.start_byte)
    indent = source[line_start : anchor.start_byte]
    tree.splice(line_start, line_start, indent + spec_text + separator)


def add_import(tree: SourceTree, path: str, alias: str | None = None) -> bool:
    """Add ``alias "path"`` to the file unless an equal spec already exists.

    The spec joins the first import declaration, sorted into the group of
    its kind (standard library or not) the way goimports groups them; a new
    group is opened when none exists. A single-spec declaration is converted
    to the parenthesized form. A file without imports gets a new declaration
    after the package clause.

    Returns:
        True if the tree was changed.
    """
    if any(imp.path == path and imp.alias == alias for imp in extract_imports(tree)):
        return False

    spec_text = _spec_text(path, alias)
    declarations = tree.top_level("import_declaration")
    if not declarations:
        clause = tree.top_level("package_clause")[0]
        position = _line_end(tree.source, clause.end_byte)
        tree.splice(position, position, b"\n\nimport " + spec_text)
        return True

    first = declarations[0]
    for child in first.named_children:
        if child.type == "import_spec_list":
            _insert_into_list(tree, child, spec_text, path)
            return True
        if child.type == "import_spec":
            existing_path = import_spec_path(tree, child)
            existing = tree.source[child.start_byte : child.end_byte]
            ordered = sorted(
                [(existing_path, existing), (path, spec_text)],
                key=lambda pair: (not is_standard_import(pair[0]), pair[0]),
            )
            separator = b"\n\t"
            if is_standard_import(existing_path) != is_standard_import(path):
                separator = b"\n\n\t"
            body = separator.join(text for _, text in ordered)
            tree.splice(child.start_byte, child.end_byte, b"(\n\t" + body + b"\n)")
            return True
    return False


def write_tree(tree: SourceTree, operation: str) -> bytes:
    """Print ``tree`` and overwrite its file in place."""
    output = print_tree(tree)
    try:
        tree.path.write_bytes(output)
    except OSError as exc:
        raise RewriteError(operation, str(tree.path), str(exc)) from exc
    return output


def rewrite_import_path(path: str | Path, from_path: str, to_path: str) -> RewriteResult:
    """Rewrite imports of ``from_path`` to ``to_path`` in one file, in place.

    Only the import section has to parse. The call is a no-op when
    ``to_path`` is already imported or ``from_path`` is not, so running it
    twice on the same file leaves the first result untouched.
    """
    tree = parse_file(path, ParseMode.IMPORTS_ONLY)
    before = tree.source

    if has_import(tree, to_path):
        logger.debug("%s already imports %s", tree.path, to_path)
        return RewriteResult(tree.path, before, before)

    if not replace_import_path(tree, from_path, to_path):
        return RewriteResult(tree.path, before, before)

    after = write_tree(tree, "rewrite-import")
    logger.debug("rewrote import %s -> %s in %s", from_path, to_path, tree.path)
    return RewriteResult(tree.path, before, after)


__all__ = [
    "RewriteResult",
    "add_import",
    "delete_import",
    "drop_unused_import",
    "has_import",
    "import_name",
    "is_standard_import",
    "qualifier_in_use",
    "replace_import_path",
    "rewrite_import_path",
    "write_tree",
]
