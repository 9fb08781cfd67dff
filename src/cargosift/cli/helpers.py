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

"""I/O helpers for the cargosift CLI."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Final, TextIO

from cargosift.exceptions import InputReadError

if TYPE_CHECKING:
    from collections.abc import Sequence

STDIN_MARKER: Final[str] = "-"

__all__ = ["STDIN_MARKER", "SplitArgs", "echo", "read_input", "split_passthrough"]


def _select_stream(*, err: bool) -> TextIO:
    return sys.stderr if err else sys.stdout


def echo(message: str, *, newline: bool = True, err: bool = False) -> None:
    """Write a message to stdout/stderr."""
    stream = _select_stream(err=err)
    _ = stream.write(message)
    if newline:
        _ = stream.write("\n")


def read_input(source: str) -> str:
    """Read pre-captured tool output from a file, or from stdin for ``-``.

    Raises:
        InputReadError: If the source cannot be read.
    """
    if source == STDIN_MARKER:
        try:
            return sys.stdin.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise InputReadError("<stdin>", exc) from exc
    path = Path(source)
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise InputReadError(path, exc) from exc


@dataclass(slots=True, frozen=True)
class SplitArgs:
    """Command-line arguments split into cargosift's own and pass-through ones."""

    namespace: argparse.Namespace
    cargo_args: list[str]
    harness_args: list[str]


def split_passthrough(parser: argparse.ArgumentParser, argv: Sequence[str]) -> SplitArgs:
    """Parse ``argv`` and collect unknown options for cargo.

    Everything after the first ``--`` is kept verbatim for the test harness
    (or appended to the cargo arguments for commands without a harness).
    """
    tokens = list(argv)
    harness_args: list[str] = []
    if "--" in tokens:
        index = tokens.index("--")
        tokens, harness_args = tokens[:index], tokens[index + 1 :]
    namespace, unknown = parser.parse_known_args(tokens)
    return SplitArgs(namespace=namespace, cargo_args=unknown, harness_args=harness_args)
