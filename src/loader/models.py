"""Package models for the ``go list -json`` output.

Only the fields the closure resolver needs are modelled; everything else in
the JSON stream is ignored.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field

from utils import strip_variant_suffix

PLAIN_RANK = 0
TEST_VARIANT_RANK = 1
XTEST_RANK = 2
TEST_MAIN_RANK = 3


class GoListError(BaseModel):
    """Per-package error reported by ``go list -e``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    err: str = Field(default="", alias="Err")
    pos: str = Field(default="", alias="Pos")


class GoPackage(BaseModel):
    """A Go package (module node of the dependency closure)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    import_path: str = Field(alias="ImportPath")
    name: str = Field(default="", alias="Name")
    dir: str = Field(default="", alias="Dir")
    go_files: list[str] = Field(default_factory=list, alias="GoFiles")
    imports: list[str] = Field(default_factory=list, alias="Imports")
    standard: bool = Field(default=False, alias="Standard")
    for_test: str = Field(default="", alias="ForTest")
    error: GoListError | None = Field(default=None, alias="Error")

    @property
    def pkg_path(self) -> str:
        """Identity of the package: its import path without variant marker."""
        return strip_variant_suffix(self.import_path)

    @property
    def files(self) -> list[str]:
        """Absolute paths of the member source files."""
        return [
            name if os.path.isabs(name) else os.path.join(self.dir, name)
            for name in self.go_files
        ]

    @property
    def import_paths(self) -> list[str]:
        """Imported package paths, variant markers removed, first-seen order."""
        seen: set[str] = set()
        paths: list[str] = []
        for raw in self.imports:
            path = strip_variant_suffix(raw)
            if path not in seen:
                seen.add(path)
                paths.append(path)
        return paths

    @property
    def variant_rank(self) -> int:
        """Order of variants: plain, test-augmented, external test, test main."""
        if self.name == "main" and self.pkg_path.endswith(".test"):
            return TEST_MAIN_RANK
        if self.pkg_path != self.import_path:
            if self.name.endswith("_test") and self.pkg_path.endswith("_test"):
                return XTEST_RANK
            return TEST_VARIANT_RANK
        return PLAIN_RANK

    @property
    def base_path(self) -> str:
        """Import path of the package this variant was built for."""
        rank = self.variant_rank
        if rank == XTEST_RANK:
            return self.pkg_path.removesuffix("_test")
        if rank == TEST_MAIN_RANK:
            return self.pkg_path.removesuffix(".test")
        return self.pkg_path


__all__ = ["GoListError", "GoPackage"]
