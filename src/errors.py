"""Error types for fuzzbuild-core.

There are two tiers:

- ``FuzzBuildError`` and its subclasses are ordinary failures (a file that does
  not parse, a ``go list`` that exits non-zero, a rename that cannot happen).
  They carry the operation and the path that failed and are reported by the CLI.
- ``InvariantViolation`` signals corrupted bookkeeping inside the pipeline. It
  does not derive from ``FuzzBuildError``; ``except FuzzBuildError`` handlers
  never catch it.
"""

from __future__ import annotations


class FuzzBuildError(Exception):
    """A recoverable failure tagged with the operation and path involved."""

    def __init__(self, operation: str, path: str, message: str) -> None:
        self.operation = operation
        self.path = path
        self.message = message
        super().__init__(f"{path}: {operation}: {message}")


class ParseError(FuzzBuildError):
    """Raised when a Go source file cannot be parsed."""


class LoadError(FuzzBuildError):
    """Raised when the package loader fails."""


class RewriteError(FuzzBuildError):
    """Raised when a rewritten file cannot be read or written."""


class RenameError(FuzzBuildError):
    """Raised when a test file cannot be renamed."""


class InvariantViolation(Exception):
    """Raised when the pipeline's internal uniqueness invariants are broken."""


__all__ = [
    "FuzzBuildError",
    "InvariantViolation",
    "LoadError",
    "ParseError",
    "RenameError",
    "RewriteError",
]
