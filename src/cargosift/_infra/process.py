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

"""Supervised subprocess execution with concurrent stdout/stderr draining.

The child's two pipes are each owned by exactly one reader: stderr by a
worker thread, stdout by the calling thread. Reading them one after the other
would deadlock as soon as the child blocks writing to the pipe nobody reads.
The worker is joined before the outcome is reported, so every forwarded
stderr line has been written by the time `ProcessSupervisor.run` returns.
"""

from __future__ import annotations

import logging
import os
import subprocess  # noqa: S404  # JUSTIFIED: centralised wrapper for supervised tool execution
import sys
import threading
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import IO, TYPE_CHECKING, Final, TypeAlias

from cargosift.core.model_types import LogComponent, SupervisorState
from cargosift.exceptions import (
    CargosiftTypeError,
    CargosiftValidationError,
    SupervisorStateError,
    ToolSpawnError,
)
from cargosift.logging import structured_extra

if TYPE_CHECKING:
    from pathlib import Path

    from cargosift.core.type_aliases import Command

logger: logging.Logger = logging.getLogger("cargosift.process")

DEFAULT_ALLOW_SUBSTRINGS: Final[tuple[str, ...]] = ("Blocking waiting for file lock",)
DEFAULT_DENY_PREFIXES: Final[tuple[str, ...]] = ("Running ",)

__all__ = [
    "DEFAULT_ALLOW_SUBSTRINGS",
    "DEFAULT_DENY_PREFIXES",
    "ErrorSink",
    "ProcessOutcome",
    "ProcessSupervisor",
    "StderrFilter",
    "write_to_stderr",
]

ErrorSink: TypeAlias = Callable[[str], None]


def write_to_stderr(line: str) -> None:
    """Forward one line to the operator's error channel."""
    _ = sys.stderr.write(line + "\n")
    sys.stderr.flush()


@dataclass(slots=True, frozen=True)
class StderrFilter:
    """Decide which stderr lines are forwarded live.

    A line containing any ``allow_substrings`` entry is always forwarded.
    Otherwise a line whose stripped text starts with one of
    ``deny_prefixes`` is suppressed. Everything else is forwarded.
    """

    allow_substrings: tuple[str, ...] = DEFAULT_ALLOW_SUBSTRINGS
    deny_prefixes: tuple[str, ...] = DEFAULT_DENY_PREFIXES

    def forwards(self, line: str) -> bool:
        if any(token in line for token in self.allow_substrings):
            return True
        return not line.strip().startswith(self.deny_prefixes)


def _default_lines() -> list[str]:
    return []


@dataclass(slots=True)
class ProcessOutcome:
    """Result of a completed child process.

    Attributes:
        command: Argument vector that was executed.
        exit_code: Exit status; negative values are POSIX signal numbers.
        duration_ms: Wall-clock runtime in milliseconds.
        stdout_lines: stdout lines in arrival order, without line terminators.
        stderr_lines: stderr lines accepted by the filter, in arrival order.
    """

    command: Command
    exit_code: int
    duration_ms: float
    stdout_lines: list[str] = field(default_factory=_default_lines)
    stderr_lines: list[str] = field(default_factory=_default_lines)

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    @property
    def stdout(self) -> str:
        return "\n".join(self.stdout_lines)


class ProcessSupervisor:
    """Run one external tool to completion while streaming both pipes.

    The supervisor moves through ``NOT_STARTED -> RUNNING`` and ends in
    ``COMPLETED`` (the child exited, whatever its status) or ``FAILED`` (the
    child could not be launched). It has no timeout of its own: a caller that
    needs one kills the child, which surfaces as an ordinary exit status.
    """

    def __init__(
        self,
        command: Iterable[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        stderr_filter: StderrFilter | None = None,
        sink: ErrorSink = write_to_stderr,
    ) -> None:
        argv: Command = list(command)
        if not argv:
            raise CargosiftValidationError("Process supervisor requires a non-empty command")
        if not all(argv):
            raise CargosiftTypeError("Process supervisor arguments must be non-empty strings")
        self.command: Command = argv
        self.cwd = cwd
        self.env = dict(env) if env else {}
        self.stderr_filter = stderr_filter or StderrFilter()
        self.sink = sink
        self.state = SupervisorState.NOT_STARTED

    def _child_env(self) -> dict[str, str] | None:
        if not self.env:
            return None
        return {**os.environ, **self.env}

    def _drain_stderr(self, stream: IO[str], collected: list[str]) -> None:
        for raw_line in stream:
            line = raw_line.rstrip("\r\n")
            if not self.stderr_filter.forwards(line):
                continue
            collected.append(line)
            try:
                self.sink(line)
            except OSError as exc:
                # Keep draining: a dead sink must not stall the child on a full pipe.
                logger.debug(
                    "Dropped forwarded stderr line: %s",
                    exc,
                    extra=structured_extra(LogComponent.PROCESS, tool=self.command[0]),
                )

    def run(self) -> ProcessOutcome:
        """Spawn the child, drain both pipes and wait for it to exit.

        Returns:
            The captured outcome; a non-zero exit is not an error here.

        Raises:
            SupervisorStateError: If the supervisor already ran.
            ToolSpawnError: If the executable cannot be launched.
        """
        if self.state is not SupervisorState.NOT_STARTED:
            raise SupervisorStateError(self.state)
        executable = self.command[0]
        logger.info(
            "Running %s",
            " ".join(self.command),
            extra=structured_extra(
                LogComponent.PROCESS,
                tool=executable,
                path=self.cwd or os.getcwd(),
                details={"env": sorted(self.env)},
            ),
        )
        start = time.perf_counter()
        try:
            process = subprocess.Popen(  # noqa: S603 - argv assembled by cargosift, never via a shell
                self.command,
                cwd=str(self.cwd) if self.cwd else None,
                env=self._child_env(),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            self.state = SupervisorState.FAILED
            logger.error(  # noqa: TRY400 - the exception is re-raised with context
                "Unable to launch %s: %s",
                executable,
                exc,
                extra=structured_extra(LogComponent.PROCESS, tool=executable),
            )
            raise ToolSpawnError(executable, exc) from exc

        self.state = SupervisorState.RUNNING
        stderr_lines: list[str] = []
        with process:
            assert process.stdout is not None
            assert process.stderr is not None
            worker = threading.Thread(
                target=self._drain_stderr,
                args=(process.stderr, stderr_lines),
                name=f"cargosift-stderr-{process.pid}",
                daemon=True,
            )
            worker.start()
            stdout_lines = [line.rstrip("\r\n") for line in process.stdout]
            exit_code = process.wait()
            worker.join()
        self.state = SupervisorState.COMPLETED

        outcome = ProcessOutcome(
            command=self.command,
            exit_code=exit_code,
            duration_ms=(time.perf_counter() - start) * 1000,
            stdout_lines=stdout_lines,
            stderr_lines=stderr_lines,
        )
        extra = structured_extra(
            LogComponent.PROCESS,
            tool=executable,
            exit_code=exit_code,
            duration_ms=outcome.duration_ms,
            details={"stdout_lines": len(stdout_lines), "stderr_lines": len(stderr_lines)},
        )
        if outcome.succeeded:
            logger.debug("%s exited cleanly", executable, extra=extra)
        else:
            logger.warning("Command failed (exit=%s): %s", exit_code, " ".join(self.command), extra=extra)
        return outcome
