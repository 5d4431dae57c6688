"""Shared utilities for fuzzbuild-core."""

from __future__ import annotations

from pathlib import Path

GO_SOURCE_SUFFIX = ".go"

# Compiled files such as _testmain.go are generated in the Go build cache.
BUILD_CACHE_MARKER = "/.cache/"


def strip_variant_suffix(import_path: str) -> str:
    """Drop the ``[p.test]`` variant marker ``go list`` appends to test builds.

    Examples:
        >>> strip_variant_suffix("example.com/m/sub [example.com/m/sub.test]")
        'example.com/m/sub'
        >>> strip_variant_suffix("example.com/m/sub")
        'example.com/m/sub'
    """
    return import_path.split(" [", 1)[0]


def same_import_path(left: str, right: str) -> bool:
    """Compare two import paths the way package identity is defined."""
    return left.casefold() == right.casefold()


def replace_suffix(file_path: str | Path, old_suffix: str, new_suffix: str) -> str:
    """Swap a filename suffix.

    Examples:
        >>> replace_suffix("/src/a_test.go", "_test.go", "_libFuzzer.go")
        '/src/a_libFuzzer.go'
        >>> replace_suffix("/src/a.go", ".go", "_fuzz.go")
        '/src/a_fuzz.go'
    """
    path_str = str(file_path)
    if not path_str.endswith(old_suffix):
        msg = f"{path_str!r} does not end with {old_suffix!r}"
        raise ValueError(msg)
    return path_str[: len(path_str) - len(old_suffix)] + new_suffix


def is_build_cache_file(file_path: str) -> bool:
    return BUILD_CACHE_MARKER in Path(file_path).as_posix()


def unquote_import_path(literal: str) -> str:
    """Strip the quotes of an interpreted or raw Go string literal."""
    if len(literal) >= 2 and literal[0] == literal[-1] and literal[0] in "\"`":
        return literal[1:-1]
    return literal
