"""Harness cloning and test-file renaming."""

from harness.materialize import (
    HARNESS_NOT_FOUND,
    NOT_FOUND,
    HarnessClone,
    find_and_clone_harness,
    harness_clone_path,
)
from harness.renamer import FileRenamer

__all__ = [
    "HARNESS_NOT_FOUND",
    "NOT_FOUND",
    "FileRenamer",
    "HarnessClone",
    "find_and_clone_harness",
    "harness_clone_path",
]
