"""Run ledger: everything needed to undo a pipeline run."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import orjson
from pydantic import BaseModel, Field, ValidationError

from errors import FuzzBuildError, ParseError, RenameError, RewriteError

if TYPE_CHECKING:
    from pipeline.run import PipelineResult

logger = logging.getLogger(__name__)

LEDGER_FILENAME = ".fuzzbuild-ledger.json"

# Schema version constant
SCHEMA_VERSION = 1


class RenameRecord(BaseModel):
    """One test file moved to a build-eligible name."""

    original_path: str
    new_path: str


class RewriteRecord(BaseModel):
    """Content of a file before the run rewrote it in place."""

    path: str
    original_content: str


class RunLedger(BaseModel):
    """Renames, rewrites and the harness clone of one pipeline run."""

    schema_version: int = Field(default=SCHEMA_VERSION)
    root_file: str
    harness_path: str = ""
    harness_clone_path: str | None = None
    renames: list[RenameRecord] = Field(default_factory=list)
    rewrites: list[RewriteRecord] = Field(default_factory=list)


def _pre_image_text(path: str, before: bytes) -> str:
    try:
        return before.decode("utf8")
    except UnicodeDecodeError as exc:
        msg = f"pre-image is not valid UTF-8 at byte {exc.start}"
        raise ParseError("decode", path, msg) from exc


def build_ledger(result: PipelineResult) -> RunLedger:
    return RunLedger(
        root_file=str(result.closure.root_file),
        harness_path=result.harness.original_path,
        harness_clone_path=result.harness.clone_path,
        renames=[
            RenameRecord(original_path=old, new_path=new)
            for old, new in result.renamed_files.items()
        ],
        rewrites=[
            RewriteRecord(path=path, original_content=_pre_image_text(path, before))
            for path, before in result.pre_images().items()
        ],
    )


def write_ledger(path: Path, ledger: RunLedger) -> None:
    opts = orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2
    try:
        path.write_bytes(orjson.dumps(ledger.model_dump(), option=opts))
    except OSError as exc:
        raise FuzzBuildError("write-ledger", str(path), str(exc)) from exc


def load_ledger(path: Path) -> RunLedger:
    try:
        payload = orjson.loads(path.read_bytes())
    except OSError as exc:
        raise FuzzBuildError("read-ledger", str(path), str(exc)) from exc
    except orjson.JSONDecodeError as exc:
        raise FuzzBuildError("read-ledger", str(path), f"invalid JSON: {exc}") from exc

    try:
        return RunLedger.model_validate(payload)
    except ValidationError as exc:
        raise FuzzBuildError("read-ledger", str(path), str(exc)) from exc


def restore_from_ledger(ledger: RunLedger) -> None:
    """Undo a run: reverse renames, write pre-images back, drop the clone.

    Renames are undone first because pre-images are keyed by the paths the
    files had before renaming.
    """
    for record in reversed(ledger.renames):
        new_path = Path(record.new_path)
        original_path = Path(record.original_path)
        if original_path.exists():
            raise RenameError("restore", record.new_path, f"{original_path} already exists")
        try:
            new_path.rename(original_path)
        except OSError as exc:
            raise RenameError("restore", record.new_path, str(exc)) from exc

    for record in ledger.rewrites:
        try:
            Path(record.path).write_bytes(record.original_content.encode("utf8"))
        except OSError as exc:
            raise RewriteError("restore", record.path, str(exc)) from exc

    if ledger.harness_clone_path:
        Path(ledger.harness_clone_path).unlink(missing_ok=True)

    logger.info(
        "restored %d rename(s) and %d rewrite(s)",
        len(ledger.renames),
        len(ledger.rewrites),
    )


__all__ = [
    "LEDGER_FILENAME",
    "SCHEMA_VERSION",
    "RenameRecord",
    "RewriteRecord",
    "RunLedger",
    "build_ledger",
    "load_ledger",
    "restore_from_ledger",
    "write_ledger",
]
