"""Renaming of test-only files into build-eligible files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from errors import InvariantViolation, RenameError
from utils import replace_suffix

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

DEFAULT_TEST_SUFFIX = "_test.go"
DEFAULT_RENAMED_SUFFIX = "_libFuzzer.go"


class FileRenamer:
    """Renames ``*_test.go`` files and keeps a ledger of every rename."""

    def __init__(
        self,
        test_suffix: str = DEFAULT_TEST_SUFFIX,
        renamed_suffix: str = DEFAULT_RENAMED_SUFFIX,
    ) -> None:
        self.test_suffix = test_suffix
        self.renamed_suffix = renamed_suffix
        self.renamed_files: dict[str, str] = {}

    def renamed_path(self, file_path: str) -> str:
        return replace_suffix(file_path, self.test_suffix, self.renamed_suffix)

    def add_renamed_file(self, old_path: str, new_path: str) -> None:
        """Record a rename.

        Raises:
            InvariantViolation: If ``old_path`` was already renamed in this run.
        """
        if old_path in self.renamed_files:
            msg = f"{old_path} was already renamed to {self.renamed_files[old_path]}"
            raise InvariantViolation(msg)
        self.renamed_files[old_path] = new_path

    def rename_test_files(self, files: Iterable[str]) -> dict[str, str]:
        """Rename every test file in ``files``; other files are left alone.

        Returns:
            The full ledger (old path -> new path).

        Raises:
            InvariantViolation: If a file is selected for renaming twice.
            RenameError: If the target exists or the move fails.
        """
        for file_path in files:
            if not file_path.endswith(self.test_suffix):
                continue
            if file_path in self.renamed_files:
                msg = f"{file_path} selected for renaming twice"
                raise InvariantViolation(msg)

            new_path = self.renamed_path(file_path)
            if Path(new_path).exists():
                raise RenameError("rename", file_path, f"target {new_path} already exists")
            try:
                Path(file_path).rename(new_path)
            except OSError as exc:
                raise RenameError("rename", file_path, str(exc)) from exc

            self.add_renamed_file(file_path, new_path)
            logger.debug("renamed %s -> %s", file_path, new_path)

        return dict(self.renamed_files)

    def restore(self) -> None:
        """Undo every recorded rename, most recent first."""
        for old_path, new_path in reversed(list(self.renamed_files.items())):
            try:
                Path(new_path).rename(old_path)
            except OSError as exc:
                raise RenameError("restore", new_path, str(exc)) from exc
            del self.renamed_files[old_path]


__all__ = ["DEFAULT_RENAMED_SUFFIX", "DEFAULT_TEST_SUFFIX", "FileRenamer"]
