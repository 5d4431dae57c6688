"""File listing for a dependency closure."""

from __future__ import annotations

from typing import TYPE_CHECKING

from utils import GO_SOURCE_SUFFIX, is_build_cache_file

if TYPE_CHECKING:
    from collections.abc import Iterable

    from loader.models import GoPackage


def _should_include_file(file_path: str, seen: set[str]) -> bool:
    """Check if a member file belongs in the rewrite set."""
    if not file_path.endswith(GO_SOURCE_SUFFIX):
        return False
    if is_build_cache_file(file_path):
        return False
    return file_path not in seen


def closure_source_files(closure: Iterable[GoPackage]) -> list[str]:
    """Flatten the member files of every package in closure order.

    A file shared by a package and its test-augmented variant is listed once.
    Generated files in the Go build cache (such as ``_testmain.go``) are
    skipped.
    """
    seen: set[str] = set()
    files: list[str] = []
    for pkg in closure:
        for file_path in pkg.files:
            if _should_include_file(file_path, seen):
                seen.add(file_path)
                files.append(file_path)
    return files


__all__ = ["closure_source_files"]
