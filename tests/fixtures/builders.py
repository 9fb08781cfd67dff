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

"""Builders for upstream cargo payloads used across the test suite."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from cargosift.json import JSONMapping, JSONValue

__all__ = [
    "build_compiler_message",
    "build_llvm_cov_document",
    "build_llvm_cov_file",
    "build_rustc_span",
    "build_tarpaulin_document",
    "build_tarpaulin_file",
    "build_test_event",
    "ndjson",
]


def build_rustc_span(
    file_name: str = "src/lib.rs",
    *,
    line_start: int = 10,
    column_start: int = 5,
    line_end: int = 10,
    column_end: int = 8,
) -> JSONMapping:
    return {
        "file_name": file_name,
        "line_start": line_start,
        "column_start": column_start,
        "line_end": line_end,
        "column_end": column_end,
    }


def build_compiler_message(
    *,
    level: str = "error",
    rendered: str | None = "mismatched types",
    spans: Sequence[JSONValue] | None = None,
    children: Sequence[JSONValue] = (),
) -> JSONMapping:
    message: JSONMapping = {
        "level": level,
        "message": "mismatched types",
        "spans": list(spans) if spans is not None else [build_rustc_span()],
        "children": list(children),
    }
    if rendered is not None:
        message["rendered"] = rendered
    return {"reason": "compiler-message", "message": message}


def build_test_event(event_type: str, event: str, **fields: JSONValue) -> JSONMapping:
    return {"type": event_type, "event": event, **fields}


def ndjson(events: Iterable[JSONMapping | str]) -> str:
    """Join events as newline-delimited JSON; strings are emitted verbatim."""
    return "\n".join(item if isinstance(item, str) else json.dumps(item) for item in events)


def build_llvm_cov_file(
    filename: str,
    segments: Sequence[Sequence[JSONValue]],
    *,
    count: int = 10,
    covered: int = 8,
    percent: float = 80.0,
) -> JSONMapping:
    return {
        "filename": filename,
        "segments": [list(segment) for segment in segments],
        "summary": {"lines": {"count": count, "covered": covered, "percent": percent}},
    }


def build_llvm_cov_document(files: Sequence[JSONMapping]) -> str:
    return json.dumps({
        "type": "llvm.coverage.json.export",
        "version": "2.0.1",
        "data": [
            {
                "files": list(files),
                "totals": {
                    "lines": {"count": 120, "covered": 90, "percent": 75.0},
                    "functions": {"count": 12, "covered": 10, "percent": 83.33333333333334},
                },
            },
        ],
    })


def build_tarpaulin_file(path: Sequence[str], hits: Sequence[tuple[int, int]]) -> JSONMapping:
    return {
        "path": list(path),
        "content": "",
        "traces": [
            {"line": line, "address": [], "length": 1, "stats": {"Line": count}}
            for line, count in hits
        ],
        "covered": sum(1 for _, count in hits if count > 0),
        "coverable": len(hits),
    }


def build_tarpaulin_document(files: Sequence[JSONMapping]) -> str:
    return json.dumps({"files": list(files), "coverage": 0.0, "covered": 0, "coverable": 0})
