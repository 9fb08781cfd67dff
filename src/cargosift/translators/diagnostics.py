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

"""Translate compiler diagnostics into canonical `DiagnosticRecord` values.

Two upstream shapes are understood:

* cargo's ``compiler-message`` events (``cargo check``/``cargo test`` with
  ``--message-format=json``), where rustc's message carries ``spans`` and
  nested ``children``;
* pre-normalized problem records (``resource``/``severity``/
  ``startLineNumber``...), as produced by editor problem matchers.

Every required field is checked for its JSON type. Anything that does not fit
yields ``None`` so a single malformed event never aborts a run.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from cargosift.core.model_types import Severity
from cargosift.core.type_aliases import ToolName
from cargosift.core.types import DiagnosticRecord, RelatedLocation, Span
from cargosift.json import as_list, as_mapping, opt_int, opt_str
from cargosift.ranges import normalize_message

if TYPE_CHECKING:
    from cargosift.json import JSONMapping

RUSTC_TOOL: Final[ToolName] = ToolName("rustc")
COMPILER_MESSAGE_REASON: Final[str] = "compiler-message"

__all__ = [
    "COMPILER_MESSAGE_REASON",
    "RUSTC_TOOL",
    "translate_compiler_message",
    "translate_problem_record",
]


def _rejects(severity: Severity, *, include_warnings: bool) -> bool:
    return severity is Severity.WARNING and not include_warnings


def _first_rustc_span(message: JSONMapping) -> tuple[str, Span] | None:
    spans = as_list(message.get("spans"))
    if not spans:
        return None
    span = as_mapping(spans[0])
    resource = opt_str(span.get("file_name"))
    start_line = opt_int(span.get("line_start"))
    start_col = opt_int(span.get("column_start"))
    end_col = opt_int(span.get("column_end"))
    if resource is None or start_line is None or start_col is None or end_col is None:
        return None
    return resource, Span(
        start_line=start_line,
        start_col=start_col,
        end_line=opt_int(span.get("line_end")),
        end_col=end_col,
    )


def _translate_child(child: object) -> RelatedLocation | None:
    payload = as_mapping(child)
    text = opt_str(payload.get("message"))
    located = _first_rustc_span(payload)
    if text is None or located is None:
        return None
    resource, span = located
    return RelatedLocation(message=normalize_message(text), resource=resource, span=span)


def translate_compiler_message(
    event: JSONMapping,
    *,
    include_warnings: bool = False,
) -> DiagnosticRecord | None:
    """Translate one cargo ``compiler-message`` event.

    Only the first span of the message is used; later spans on the same
    message are ignored. Child diagnostics (notes, help) are translated
    independently and a child without a usable span is dropped on its own.

    Args:
        event: One parsed JSON line from cargo.
        include_warnings: Keep ``warning`` level messages (severity 4).

    Returns:
        The translated record, or ``None`` when the event is filtered out or
        does not carry the required fields.
    """
    if event.get("reason") != COMPILER_MESSAGE_REASON:
        return None
    message = event.get("message")
    if not isinstance(message, dict):
        return None
    severity = Severity.from_level(message.get("level"))
    if severity is None or _rejects(severity, include_warnings=include_warnings):
        return None
    located = _first_rustc_span(message)
    if located is None:
        return None
    text = opt_str(message.get("rendered")) or opt_str(message.get("message"))
    if text is None:
        return None
    resource, span = located
    related = tuple(
        location
        for location in map(_translate_child, as_list(message.get("children")))
        if location is not None
    )
    return DiagnosticRecord(
        severity=severity,
        label=severity.label,
        source_tool=RUSTC_TOOL,
        resource=resource,
        span=span,
        message=normalize_message(text),
        related=related,
    )


def _problem_span(payload: JSONMapping) -> Span | None:
    start_line = opt_int(payload.get("startLineNumber"))
    start_col = opt_int(payload.get("startColumn"))
    end_col = opt_int(payload.get("endColumn"))
    if start_line is None or start_col is None or end_col is None:
        return None
    return Span(
        start_line=start_line,
        start_col=start_col,
        end_line=opt_int(payload.get("endLineNumber")),
        end_col=end_col,
    )


def _translate_related_problem(item: object) -> RelatedLocation | None:
    payload = as_mapping(item)
    resource = opt_str(payload.get("resource"))
    text = opt_str(payload.get("message"))
    span = _problem_span(payload)
    if resource is None or text is None or span is None:
        return None
    return RelatedLocation(message=normalize_message(text), resource=resource, span=span)


def translate_problem_record(
    event: JSONMapping,
    *,
    include_warnings: bool = False,
) -> DiagnosticRecord | None:
    """Translate an already-normalized problem record.

    Severity ``>= 5`` is an error and ``4`` a warning; lower severities
    (information, hints) are dropped.
    """
    raw_severity = opt_int(event.get("severity"))
    if raw_severity is None:
        return None
    severity = Severity.from_ordinal(raw_severity)
    if severity is None or _rejects(severity, include_warnings=include_warnings):
        return None
    resource = opt_str(event.get("resource"))
    text = opt_str(event.get("message"))
    span = _problem_span(event)
    if resource is None or text is None or span is None:
        return None
    related = tuple(
        location
        for location in map(_translate_related_problem, as_list(event.get("relatedInformation")))
        if location is not None
    )
    return DiagnosticRecord(
        severity=severity,
        label=severity.label,
        source_tool=ToolName(opt_str(event.get("source")) or "unknown"),
        resource=resource,
        span=span,
        message=normalize_message(text),
        related=related,
    )
