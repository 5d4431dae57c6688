"""Dependency closure of a Go source file."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from errors import InvariantViolation
from loader.go_list import FILE_QUERY_PREFIX

if TYPE_CHECKING:
    from collections.abc import Iterator

    from loader.go_list import PackageLoader
    from loader.models import GoPackage

logger = logging.getLogger(__name__)

# Never followed into the closure. Compared case-insensitively.
STDLIB_EXCLUDES: tuple[str, ...] = (
    "testing",
    "os",
    "reflect",
    "math/rand",
    "testing/internal/testdeps",
)

# Import paths that name no loadable package.
_PSEUDO_IMPORTS = frozenset({"C"})


def is_excluded(import_path: str) -> bool:
    if import_path in _PSEUDO_IMPORTS:
        return True
    folded = import_path.casefold()
    return any(folded == excluded.casefold() for excluded in STDLIB_EXCLUDES)


@dataclass
class DependencyClosure:
    """Deduplicated packages reachable from a root file, in discovery order.

    Order: the root package, then each import depth-first in the order the
    package lists its imports, each loaded variant in loader order; the
    root's external test package and its imports come last.
    """

    root_file: Path
    work_dir: Path
    modules: list[GoPackage] = field(default_factory=list)
    _seen: set[str] = field(default_factory=set, repr=False)

    @property
    def root(self) -> GoPackage:
        return self.modules[0]

    def contains(self, pkg_path: str) -> bool:
        return pkg_path.casefold() in self._seen

    def add(self, pkg: GoPackage) -> None:
        key = pkg.pkg_path.casefold()
        if key in self._seen:
            msg = f"package {pkg.pkg_path!r} added to the closure twice"
            raise InvariantViolation(msg)
        self._seen.add(key)
        self.modules.append(pkg)

    @property
    def pkg_paths(self) -> list[str]:
        return [pkg.pkg_path for pkg in self.modules]

    @property
    def names(self) -> list[str]:
        return [pkg.name for pkg in self.modules]

    def __iter__(self) -> Iterator[GoPackage]:
        return iter(self.modules)

    def __len__(self) -> int:
        return len(self.modules)

    def __getitem__(self, index: int) -> GoPackage:
        return self.modules[index]


class _Resolver:
    def __init__(self, loader: PackageLoader, closure: DependencyClosure) -> None:
        self.loader = loader
        self.closure = closure
        self._loaded: dict[str, list[GoPackage]] = {}

    def _load(self, import_path: str) -> list[GoPackage]:
        key = import_path.casefold()
        if key not in self._loaded:
            self._loaded[key] = self.loader.load(import_path, work_dir=self.closure.work_dir)
        return self._loaded[key]

    def append_imports(self, pkg: GoPackage) -> None:
        for import_path in pkg.import_paths:
            if is_excluded(import_path) or self.closure.contains(import_path):
                continue
            for dep in self._load(import_path):
                if dep.standard:
                    continue
                if self.closure.contains(dep.pkg_path):
                    continue
                self.closure.add(dep)
                self.append_imports(dep)


def _owns(pkg: GoPackage, real_root: str) -> bool:
    return any(os.path.realpath(name) == real_root for name in pkg.files)


def select_root(root_file: Path, candidates: list[GoPackage]) -> GoPackage:
    """Pick the single package that owns ``root_file``.

    A package and its test-augmented variant count as one owner; the variant
    listing more files (the one including test files) wins.

    Raises:
        InvariantViolation: If zero or several packages own the file.
    """
    real_root = os.path.realpath(root_file)
    owners: dict[str, GoPackage] = {}
    for pkg in candidates:
        if not _owns(pkg, real_root):
            continue
        key = pkg.pkg_path.casefold()
        current = owners.get(key)
        if current is None or len(pkg.files) > len(current.files):
            owners[key] = pkg

    if len(owners) != 1:
        found = ", ".join(sorted(owner.pkg_path for owner in owners.values())) or "none"
        msg = f"{root_file}: expected exactly one owning package, found {len(owners)} ({found})"
        raise InvariantViolation(msg)

    return next(iter(owners.values()))


def resolve_closure(root_file: str | Path, loader: PackageLoader) -> DependencyClosure:
    """Compute the dependency closure of the package owning ``root_file``.

    Loader calls run with the root file's directory as explicit working
    directory; the process working directory is never changed.

    Raises:
        LoadError: If the loader fails for any package.
        InvariantViolation: If the root file is owned by zero or several
            packages.
    """
    root_path = Path(root_file).resolve()
    work_dir = root_path.parent

    candidates = loader.load(f"{FILE_QUERY_PREFIX}{root_path}", work_dir=work_dir)
    root = select_root(root_path, candidates)

    closure = DependencyClosure(root_file=root_path, work_dir=work_dir)
    resolver = _Resolver(loader, closure)
    closure.add(root)
    resolver.append_imports(root)

    xtest_path = f"{root.pkg_path}_test"
    for pkg in candidates:
        if pkg.pkg_path.casefold() == xtest_path.casefold() and not closure.contains(
            pkg.pkg_path
        ):
            closure.add(pkg)
            resolver.append_imports(pkg)

    logger.info("resolved %d package(s) from %s", len(closure), root_path)
    return closure


__all__ = [
    "STDLIB_EXCLUDES",
    "DependencyClosure",
    "is_excluded",
    "resolve_closure",
    "select_root",
]
