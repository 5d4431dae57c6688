"""Command-line interface for fuzzbuild-core."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import orjson

from errors import FuzzBuildError, InvariantViolation
from graph.closure import resolve_closure
from loader.go_list import GoListLoader
from pipeline.ledger import (
    LEDGER_FILENAME,
    build_ledger,
    load_ledger,
    restore_from_ledger,
    write_ledger,
)
from pipeline.run import Pipeline
from rules.config import ConfigError, load_config
from scan.files import closure_source_files

EXIT_ERROR = 1
EXIT_CONFIG = 2
EXIT_INVARIANT = 3


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "file",
        help="Go source file declaring (or reachable from) the fuzz harness",
    )
    parser.add_argument(
        "--config-dir",
        default=None,
        help="Directory holding fuzzbuild.toml (default: .)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fuzzbuild")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    rewrite_parser = subparsers.add_parser(
        "rewrite", help="Rewrite the closure of a harness for a libFuzzer build"
    )
    _add_common_paths(rewrite_parser)
    rewrite_parser.add_argument(
        "--func",
        dest="harness_name",
        default=None,
        help="Fuzz entry function name (default: config harness_name)",
    )
    rewrite_parser.add_argument(
        "--ledger",
        default=None,
        help=f"Where to write the run ledger (default: <file dir>/{LEDGER_FILENAME})",
    )

    closure_parser = subparsers.add_parser(
        "closure", help="Print the dependency closure of a file as JSON lines"
    )
    _add_common_paths(closure_parser)

    restore_parser = subparsers.add_parser("restore", help="Undo a previous rewrite")
    restore_parser.add_argument("ledger", help="Ledger written by 'rewrite'")

    return parser


def _config_root(config_dir: str | None) -> Path:
    if config_dir is None:
        return Path.cwd()
    return Path(config_dir).expanduser().resolve()


def _handle_rewrite(
    file_path: Path,
    config_dir: str | None,
    harness_name: str | None,
    ledger: str | None,
) -> int:
    config = load_config(_config_root(config_dir), harness_name=harness_name)
    loader = GoListLoader(go_binary=config.go_binary, build_flags=config.build_flags)
    pipeline = Pipeline(config=config, loader=loader)

    ledger_path = (
        Path(ledger).expanduser().resolve()
        if ledger is not None
        else file_path.parent / LEDGER_FILENAME
    )
    try:
        result = pipeline.run(file_path)
    except (FuzzBuildError, InvariantViolation):
        if pipeline.result is not None:
            write_ledger(ledger_path, build_ledger(pipeline.result))
            sys.stderr.write(f"partial run recorded in ledger: {ledger_path}\n")
        raise
    write_ledger(ledger_path, build_ledger(result))

    if result.harness.found:
        sys.stdout.write(f"harness: {result.harness.original_path}\n")
        sys.stdout.write(f"clone: {result.harness.clone_path}\n")
    else:
        sys.stderr.write(f"warning: no function named {config.harness_name} found\n")
    for old_path, new_path in result.renamed_files.items():
        sys.stdout.write(f"renamed: {old_path} -> {new_path}\n")
    sys.stdout.write(f"ledger: {ledger_path}\n")
    return 0


def _handle_closure(file_path: Path, config_dir: str | None) -> int:
    config = load_config(_config_root(config_dir))
    loader = GoListLoader(go_binary=config.go_binary, build_flags=config.build_flags)
    closure = resolve_closure(file_path, loader)
    for pkg in closure:
        record = {
            "pkg_path": pkg.pkg_path,
            "name": pkg.name,
            "files": closure_source_files([pkg]),
        }
        sys.stdout.write(orjson.dumps(record, option=orjson.OPT_SORT_KEYS).decode())
        sys.stdout.write("\n")
    return 0


def _handle_restore(ledger: str) -> int:
    ledger_path = Path(ledger).expanduser().resolve()
    restore_from_ledger(load_ledger(ledger_path))
    return 0


def _dispatch(args: argparse.Namespace) -> int:
    if args.command == "restore":
        return _handle_restore(args.ledger)

    file_path = Path(args.file).expanduser().resolve()

    if args.command == "rewrite":
        return _handle_rewrite(file_path, args.config_dir, args.harness_name, args.ledger)

    if args.command == "closure":
        return _handle_closure(file_path, args.config_dir)

    raise AssertionError


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return _dispatch(args)
    except ConfigError as exc:
        sys.stderr.write(f"config: {exc}\n")
        return EXIT_CONFIG
    except FuzzBuildError as exc:
        sys.stderr.write(f"{exc.path}: {exc.operation}: {exc.message}\n")
        return EXIT_ERROR
    except InvariantViolation as exc:
        sys.stderr.write(f"fatal: internal invariant violated: {exc}\n")
        return EXIT_INVARIANT


if __name__ == "__main__":
    raise SystemExit(main())
