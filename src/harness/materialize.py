"""Locating the fuzz harness and cloning it into a build-eligible file."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from errors import RewriteError
from parse.go_decls import extract_functions
from parse.printer import print_tree
from parse.treesitter_go import ParseMode, parse_file
from rewrite.imports import add_import, delete_import
from utils import GO_SOURCE_SUFFIX, replace_suffix

logger = logging.getLogger(__name__)

# Returned in place of file content when no harness was found.
HARNESS_NOT_FOUND = b"NONE"

DEFAULT_HARNESS_SUFFIX = "_fuzz.go"


@dataclass(frozen=True)
class HarnessClone:
    """Where the harness was found and what the file held before cloning."""

    original_path: str
    original_bytes: bytes
    clone_path: str | None = None

    @property
    def found(self) -> bool:
        return bool(self.original_path)


NOT_FOUND = HarnessClone(original_path="", original_bytes=HARNESS_NOT_FOUND)


def harness_clone_path(path: str | Path, suffix: str = DEFAULT_HARNESS_SUFFIX) -> str:
    """``dir/fuzz_test.go`` -> ``dir/fuzz_test_fuzz.go``."""
    return replace_suffix(path, GO_SOURCE_SUFFIX, suffix)


def find_and_clone_harness(
    path: str | Path,
    harness_name: str,
    *,
    original_import: str,
    shim_import: str,
    suffix: str = DEFAULT_HARNESS_SUFFIX,
) -> HarnessClone:
    """Clone the file declaring ``harness_name`` with its import swapped.

    The clone imports ``shim_import`` instead of ``original_import`` (the
    spec is deleted and re-added with the same alias, never edited as text)
    and is written next to the original. The original file is not modified.

    Returns:
        The original path, its bytes before anything was changed and the
        clone path; ``NOT_FOUND`` if the file has no such top-level function.

    Raises:
        ParseError: If the file does not parse.
        RewriteError: If the clone cannot be written or already exists.
    """
    tree = parse_file(path, ParseMode.FULL)
    if not any(
        fn.name == harness_name and fn.receiver is None for fn in extract_functions(tree)
    ):
        return NOT_FOUND

    original_bytes = tree.source

    aliases = delete_import(tree, original_import)
    for alias in dict.fromkeys(aliases):
        add_import(tree, shim_import, alias)

    clone_path = Path(harness_clone_path(tree.path, suffix))
    if clone_path.exists():
        raise RewriteError("clone-harness", str(clone_path), "clone target already exists")
    try:
        clone_path.write_bytes(print_tree(tree))
    except OSError as exc:
        raise RewriteError("clone-harness", str(clone_path), str(exc)) from exc

    logger.info("cloned harness %s from %s to %s", harness_name, tree.path, clone_path)
    return HarnessClone(
        original_path=str(tree.path),
        original_bytes=original_bytes,
        clone_path=str(clone_path),
    )


__all__ = [
    "DEFAULT_HARNESS_SUFFIX",
    "HARNESS_NOT_FOUND",
    "NOT_FOUND",
    "HarnessClone",
    "find_and_clone_harness",
    "harness_clone_path",
]
