"""End-to-end rewrite of a Go package tree into a fuzz build."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from graph.closure import resolve_closure
from harness.materialize import NOT_FOUND, find_and_clone_harness
from harness.renamer import FileRenamer
from rewrite.imports import rewrite_import_path
from rewrite.params import retarget_parameter_qualifier
from scan.files import closure_source_files

if TYPE_CHECKING:
    from graph.closure import DependencyClosure
    from harness.materialize import HarnessClone
    from loader.go_list import PackageLoader
    from rewrite.imports import RewriteResult
    from rules.config import FuzzBuildConfig

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    closure: DependencyClosure
    files: list[str]
    harness: HarnessClone
    rewrites: list[RewriteResult] = field(default_factory=list)
    renamed_files: dict[str, str] = field(default_factory=dict)

    def pre_images(self) -> dict[str, bytes]:
        """Content of every rewritten file before this run touched it."""
        images: dict[str, bytes] = {}
        for result in self.rewrites:
            images.setdefault(str(result.path), result.before)
        return images


def _locate_harness(files: list[str], config: FuzzBuildConfig) -> HarnessClone:
    for file_path in files:
        clone = find_and_clone_harness(
            file_path,
            config.harness_name,
            original_import=config.original_import,
            shim_import=config.shim_import,
            suffix=config.harness_suffix,
        )
        if clone.found:
            return clone
    logger.warning("no function named %s found in the closure", config.harness_name)
    return NOT_FOUND


class Pipeline:
    """Rewrite the closure of a root file for a libFuzzer build.

    Stages run strictly in order:

    1. resolve the dependency closure;
    2. clone the file declaring the harness (first match in closure order);
    3. rewrite the original import to the shim in every closure file;
    4. optionally retarget ``*testing.F`` parameters;
    5. rename test files to build-eligible names.

    The harness original is excluded from stages 3-5: its clone replaces it
    in the build and the original stays byte-for-byte intact.

    ``result`` is filled in as stages complete. When a stage fails it still
    records every mutation made so far, so a partial run can be undone.
    """

    def __init__(self, *, config: FuzzBuildConfig, loader: PackageLoader) -> None:
        self.config = config
        self.loader = loader
        self.result: PipelineResult | None = None

    def run(self, root_file: str | Path) -> PipelineResult:
        config = self.config
        closure = resolve_closure(root_file, self.loader)
        files = closure_source_files(closure)

        result = PipelineResult(closure=closure, files=files, harness=NOT_FOUND)
        self.result = result

        result.harness = _locate_harness(files, config)
        targets = [path for path in files if path != result.harness.original_path]

        for file_path in targets:
            rewrite = rewrite_import_path(file_path, config.original_import, config.shim_import)
            if rewrite.changed:
                result.rewrites.append(rewrite)

        if config.retarget_params:
            for file_path in targets:
                rewrite = retarget_parameter_qualifier(
                    file_path,
                    config.fuzz_type,
                    config.custom_qualifier,
                    import_path=config.shim_import,
                )
                if rewrite.changed:
                    result.rewrites.append(rewrite)

        renamer = FileRenamer(
            test_suffix=config.test_suffix,
            renamed_suffix=config.renamed_suffix,
        )
        # Shared with the renamer so renames done before a failure are kept.
        result.renamed_files = renamer.renamed_files
        renamer.rename_test_files(targets)

        logger.info(
            "rewrote %d file(s), renamed %d test file(s) across %d package(s)",
            len(result.pre_images()),
            len(result.renamed_files),
            len(closure),
        )
        return result


def run_pipeline(
    root_file: str | Path,
    *,
    config: FuzzBuildConfig,
    loader: PackageLoader,
) -> PipelineResult:
    """Run every stage of a ``Pipeline`` on ``root_file``."""
    return Pipeline(config=config, loader=loader).run(root_file)


__all__ = ["Pipeline", "PipelineResult", "run_pipeline"]
