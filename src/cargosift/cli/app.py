# Copyright 2025 CrownOps Engineering
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""CLI entry point and orchestration for cargosift commands."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path
from typing import TYPE_CHECKING, Final, TypeAlias

from cargosift import __version__
from cargosift.config import load_config
from cargosift.core.model_types import CoverageTool, DiagnosticsMode, LogComponent
from cargosift.exceptions import CargosiftError
from cargosift.logging import LOG_FORMATS, LOG_LEVELS, configure_logging, structured_extra
from cargosift.pipeline import run_coverage, run_diagnostics
from cargosift.rendering import dump_coverage, dump_lines

from .helpers import SplitArgs, echo, read_input, split_passthrough

if TYPE_CHECKING:
    from collections.abc import Sequence

    from cargosift.config import SiftConfig

logger: logging.Logger = logging.getLogger("cargosift.cli")

CARGO_SUBCOMMAND: Final[str] = "sift"

CommandHandler: TypeAlias = Callable[[SplitArgs, "SiftConfig"], int]


def _register_input(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-i",
        "--input",
        metavar="FILE",
        help="Parse existing tool output from FILE (or '-' for stdin) instead of running cargo.",
    )


def _register_warnings(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--include-warnings",
        action="store_true",
        default=None,
        help="Report compiler warnings (severity 4) next to errors.",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Build the top-level parser with the check, test and coverage commands."""
    parser = argparse.ArgumentParser(
        prog="cargosift",
        allow_abbrev=False,
        description=(
            "Run cargo and condense its JSON output into a compact digest of errors, "
            "test failures or uncovered lines. Unrecognised options are passed to cargo."
        ),
    )
    parser.add_argument("--version", action="store_true", help="Print the cargosift version and exit.")
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Select logging output format (human-readable text or structured JSON).",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Set the minimum log level written to stderr.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Read configuration from this TOML file instead of searching the project.",
    )
    subparsers = parser.add_subparsers(dest="command")

    check = subparsers.add_parser(
        "check",
        allow_abbrev=False,
        help="Report compiler errors from `cargo check`.",
    )
    _register_input(check)
    _register_warnings(check)

    test = subparsers.add_parser(
        "test",
        allow_abbrev=False,
        help="Report failing tests and build errors from `cargo test`.",
    )
    _register_input(test)
    _register_warnings(test)
    test.add_argument(
        "--include-ignored",
        action="store_true",
        default=None,
        help="Report ignored tests as well.",
    )

    coverage = subparsers.add_parser(
        "coverage",
        allow_abbrev=False,
        help="Report uncovered line ranges from `cargo llvm-cov` or `cargo tarpaulin`.",
    )
    _register_input(coverage)
    coverage.add_argument(
        "-t",
        "--tool",
        choices=tuple(tool.value for tool in CoverageTool),
        default=None,
        help="Coverage backend (default: llvm-cov, or the configured coverage_tool).",
    )
    return parser


def _apply_overrides(config: SiftConfig, args: argparse.Namespace) -> SiftConfig:
    updated = config
    if getattr(args, "include_warnings", None):
        updated = replace(updated, include_warnings=True)
    if getattr(args, "include_ignored", None):
        updated = replace(updated, include_ignored=True)
    tool = getattr(args, "tool", None)
    if tool is not None:
        updated = replace(updated, coverage_tool=CoverageTool.from_str(tool))
    return updated


def _diagnostics_handler(mode: DiagnosticsMode) -> CommandHandler:
    def _handle(split: SplitArgs, config: SiftConfig) -> int:
        source: str | None = split.namespace.input
        result = run_diagnostics(
            mode,
            config,
            input_text=read_input(source) if source is not None else None,
            cargo_args=split.cargo_args,
            harness_args=split.harness_args,
        )
        echo(dump_lines(result.lines()))
        return 0

    return _handle


def _handle_coverage(split: SplitArgs, config: SiftConfig) -> int:
    source: str | None = split.namespace.input
    report = run_coverage(
        config.coverage_tool,
        config,
        input_text=read_input(source) if source is not None else None,
        cargo_args=[*split.cargo_args, *split.harness_args],
    )
    echo(dump_coverage(report))
    return 0


def _command_handlers() -> dict[str, CommandHandler]:
    return {
        "check": _diagnostics_handler(DiagnosticsMode.CHECK),
        "test": _diagnostics_handler(DiagnosticsMode.TEST),
        "coverage": _handle_coverage,
    }


def main(argv: Sequence[str] | None = None) -> int:
    """Main CLI entry point for cargosift.

    When installed as ``cargo-sift`` and invoked through ``cargo sift``, cargo
    passes the subcommand name as the first argument; it is dropped here.

    Args:
        argv: Command-line arguments to parse. If None, uses sys.argv.

    Returns:
        int: Exit code (0 on success, 1 when a fatal error was reported).
    """
    tokens = list(argv) if argv is not None else sys.argv[1:]
    if tokens and tokens[0] == CARGO_SUBCOMMAND:
        tokens = tokens[1:]
    parser = _build_parser()
    split = split_passthrough(parser, tokens)
    args = split.namespace
    if args.version:
        echo(f"cargosift {__version__}")
        return 0
    if args.command is None:
        parser.error("No command provided.")
    _ = configure_logging(args.log_format, log_level=args.log_level)
    handler = _command_handlers()[args.command]
    try:
        config = _apply_overrides(load_config(args.config), args)
        return handler(split, config)
    except CargosiftError as exc:
        logger.error(  # noqa: TRY400 - the message is the user-facing report
            "%s",
            exc,
            extra=structured_extra(LogComponent.CLI, tool=args.command),
        )
        return 1


__all__ = ["main"]
