"""Retargeting of qualified pointer parameter types."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from parse.treesitter_go import ParseMode, parse_file
from rewrite.imports import RewriteResult, add_import, drop_unused_import, write_tree

if TYPE_CHECKING:
    from pathlib import Path

    from tree_sitter import Node

    from parse.treesitter_go import SourceTree

logger = logging.getLogger(__name__)


def _split_qualified(qualified_type_name: str) -> tuple[str, str]:
    qualifier, sep, member = qualified_type_name.partition(".")
    if not sep or not qualifier or not member or "." in member:
        msg = f"expected 'qualifier.Member', got {qualified_type_name!r}"
        raise ValueError(msg)
    return qualifier, member


def _matching_qualifiers(
    tree: SourceTree, params: Node, qualifier: str, member: str
) -> list[Node]:
    """Return the qualifier nodes of ``*qualifier.member`` parameters."""
    found: list[Node] = []
    for param in params.named_children:
        if param.type not in ("parameter_declaration", "variadic_parameter_declaration"):
            continue
        param_type = param.child_by_field_name("type")
        if param_type is None or param_type.type != "pointer_type":
            continue
        for pointee in param_type.named_children:
            if pointee.type != "qualified_type":
                continue
            package_node = pointee.child_by_field_name("package")
            name_node = pointee.child_by_field_name("name")
            if package_node is None or name_node is None:
                continue
            if tree.text(package_node) == qualifier and tree.text(name_node) == member:
                found.append(package_node)
    return found


def retarget_parameter_qualifier(
    path: str | Path,
    qualified_type_name: str,
    new_qualifier: str,
    *,
    import_path: str | None = None,
) -> RewriteResult:
    """Rewrite ``*qualifier.Member`` parameters to ``*new_qualifier.Member``.

    Every top-level function and method parameter list is searched. When at
    least one parameter was rewritten the file is printed and overwritten;
    otherwise it is left untouched.

    Args:
        path: Go source file
        qualified_type_name: Type to match, e.g. ``"testing.F"``
        new_qualifier: Replacement package qualifier
        import_path: If given, ``new_qualifier "import_path"`` is imported
            whenever a rewrite happened, so the new qualifier resolves.
            Imports named ``qualifier`` are then dropped unless other
            references still need them; in that case both names stay
            imported, even when they share a path.
    """
    qualifier, member = _split_qualified(qualified_type_name)
    tree = parse_file(path, ParseMode.FULL)
    before = tree.source

    targets: list[Node] = []
    for decl in tree.top_level("function_declaration", "method_declaration"):
        params = decl.child_by_field_name("parameters")
        if params is not None:
            targets.extend(_matching_qualifiers(tree, params, qualifier, member))

    if not targets:
        return RewriteResult(tree.path, before, before)

    spans = sorted(((node.start_byte, node.end_byte) for node in targets), reverse=True)
    for start, end in spans:
        tree.splice(start, end, new_qualifier.encode("utf8"))

    if import_path is not None:
        add_import(tree, import_path, new_qualifier)
        for dropped in drop_unused_import(tree, qualifier):
            logger.debug("dropped unused import %s from %s", dropped, tree.path)

    after = write_tree(tree, "retarget-params")
    logger.debug(
        "retargeted %d parameter(s) of %s to %s in %s",
        len(spans),
        qualified_type_name,
        new_qualifier,
        tree.path,
    )
    return RewriteResult(tree.path, before, after)


__all__ = ["retarget_parameter_qualifier"]
