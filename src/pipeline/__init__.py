"""Pipeline orchestration and run ledger."""

from pipeline.ledger import (
    LEDGER_FILENAME,
    RenameRecord,
    RewriteRecord,
    RunLedger,
    build_ledger,
    load_ledger,
    restore_from_ledger,
    write_ledger,
)
from pipeline.run import Pipeline, PipelineResult, run_pipeline

__all__ = [
    "LEDGER_FILENAME",
    "Pipeline",
    "PipelineResult",
    "RenameRecord",
    "RewriteRecord",
    "RunLedger",
    "build_ledger",
    "load_ledger",
    "restore_from_ledger",
    "run_pipeline",
    "write_ledger",
]
