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

"""Line-delimited event parsing and per-event dispatch."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from cargosift.core.model_types import EventKind, LogComponent
from cargosift.json import load_json_object
from cargosift.logging import structured_extra

if TYPE_CHECKING:
    from collections.abc import Iterator

    from cargosift.json import JSONMapping

logger: logging.Logger = logging.getLogger("cargosift.pipeline")

__all__ = ["classify_event", "parse_event_lines"]

_PROBLEM_KEYS = frozenset({"resource", "severity", "startLineNumber"})


def parse_event_lines(text: str) -> Iterator[JSONMapping]:
    """Yield every line of ``text`` that parses as a JSON object.

    Events are separated by line feeds only; serde_json leaves U+2028 and
    U+0085 unescaped inside strings. Blank lines are ignored and lines that
    are not JSON objects (build script chatter, interleaved human output) are
    skipped.
    """
    skipped = 0
    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if not line:
            continue
        event = load_json_object(line)
        if event is None:
            skipped += 1
            continue
        yield event
    if skipped:
        logger.debug(
            "Skipped %s non-JSON line(s)",
            skipped,
            extra=structured_extra(LogComponent.PIPELINE, details={"skipped": skipped}),
        )


def classify_event(event: JSONMapping) -> EventKind:
    """Resolve which translator an event belongs to from its discriminant fields."""
    if event.get("reason") == EventKind.COMPILER_MESSAGE.value:
        return EventKind.COMPILER_MESSAGE
    match event.get("type"):
        case "test":
            return EventKind.TEST
        case "suite":
            return EventKind.SUITE
        case _:
            pass
    if _PROBLEM_KEYS <= event.keys():
        return EventKind.PROBLEM
    return EventKind.UNRECOGNIZED
