"""Package loading through ``go list``."""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import ValidationError

from errors import LoadError
from loader.models import GoPackage

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

logger = logging.getLogger(__name__)

FILE_QUERY_PREFIX = "file="

DEFAULT_BUILD_FLAGS: tuple[str, ...] = (
    "-buildmode=c-archive",
    "-trimpath",
    "-gcflags=all=-d=libfuzzer",
)


class PackageLoader(Protocol):
    """Resolves a query to the packages it names.

    ``pattern`` is either an import path or ``file=<path>``. A file query
    returns every package variant built from the file's directory; callers
    pick the variant(s) owning the file. ``work_dir`` is the directory that
    relative patterns resolve against.
    """

    def load(self, pattern: str, *, work_dir: Path) -> list[GoPackage]: ...


def _iter_json_objects(payload: str) -> Iterator[dict[str, Any]]:
    """Decode the concatenated JSON objects ``go list -json`` prints."""
    decoder = json.JSONDecoder()
    index = 0
    length = len(payload)
    while True:
        while index < length and payload[index].isspace():
            index += 1
        if index >= length:
            return
        obj, index = decoder.raw_decode(payload, index)
        if isinstance(obj, dict):
            yield obj


def order_variants(packages: Sequence[GoPackage]) -> list[GoPackage]:
    """Group variants under their package, in variant order.

    Packages keep the order in which their base package first appears.
    """
    first_seen: dict[str, int] = {}
    for pkg in packages:
        first_seen.setdefault(pkg.base_path.casefold(), len(first_seen))
    return sorted(
        packages,
        key=lambda pkg: (first_seen[pkg.base_path.casefold()], pkg.variant_rank),
    )


class GoListLoader:
    """``PackageLoader`` backed by ``go list -e -json -test``."""

    def __init__(
        self,
        go_binary: str = "go",
        build_flags: Sequence[str] = DEFAULT_BUILD_FLAGS,
    ) -> None:
        self.go_binary = go_binary
        self.build_flags = list(build_flags)

    def _command(self, query: str) -> list[str]:
        return [self.go_binary, "list", "-e", "-json", "-test", *self.build_flags, query]

    def load(self, pattern: str, *, work_dir: Path) -> list[GoPackage]:
        if pattern.startswith(FILE_QUERY_PREFIX):
            file_path = Path(pattern[len(FILE_QUERY_PREFIX) :])
            if not file_path.is_absolute():
                file_path = work_dir / file_path
            cwd = file_path.parent
            query = "."
        else:
            cwd = work_dir
            query = pattern

        command = self._command(query)
        logger.debug("running %s in %s", " ".join(command), cwd)
        try:
            result = subprocess.run(
                command,
                cwd=cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise LoadError("load", pattern, str(exc)) from exc

        if result.returncode != 0:
            detail = result.stderr.strip() or f"go list exited with status {result.returncode}"
            raise LoadError("load", pattern, detail)

        try:
            packages = [
                GoPackage.model_validate(obj) for obj in _iter_json_objects(result.stdout)
            ]
        except (json.JSONDecodeError, ValidationError) as exc:
            msg = f"unreadable go list output: {exc}"
            raise LoadError("load", pattern, msg) from exc

        for pkg in packages:
            if pkg.error is not None and pkg.error.err:
                logger.warning("%s: %s", pkg.import_path, pkg.error.err)

        return order_variants(packages)


__all__ = [
    "DEFAULT_BUILD_FLAGS",
    "FILE_QUERY_PREFIX",
    "GoListLoader",
    "PackageLoader",
    "order_variants",
]
