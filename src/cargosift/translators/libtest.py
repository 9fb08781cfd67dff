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

"""Translate libtest JSON events (``--format=json``) into failure records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cargosift.core.types import SuiteFailure, TestFailure, TestIgnored
from cargosift.json import opt_float, opt_int, opt_str
from cargosift.ranges import normalize_message

if TYPE_CHECKING:
    from cargosift.core.types import TestResultRecord
    from cargosift.json import JSONMapping

__all__ = ["translate_test_event"]


def _test_record(event: JSONMapping, *, include_ignored: bool) -> TestResultRecord | None:
    name = opt_str(event.get("name"))
    if name is None:
        return None
    match event.get("event"):
        case "failed":
            return TestFailure(
                name=name,
                exec_time_seconds=opt_float(event.get("exec_time")) or 0.0,
                captured_stdout=normalize_message(opt_str(event.get("stdout")) or ""),
            )
        case "ignored" if include_ignored:
            return TestIgnored(
                name=name,
                reason=normalize_message(opt_str(event.get("message")) or ""),
            )
        case _:
            return None


def _suite_record(event: JSONMapping) -> SuiteFailure | None:
    if event.get("event") != "failed":
        return None
    passed = opt_int(event.get("passed"))
    failed = opt_int(event.get("failed"))
    exec_time = opt_float(event.get("exec_time"))
    if passed is None or failed is None or exec_time is None:
        return None
    return SuiteFailure(passed_count=passed, failed_count=failed, exec_time_seconds=exec_time)


def translate_test_event(
    event: JSONMapping,
    *,
    include_ignored: bool = False,
) -> TestResultRecord | None:
    """Reduce one libtest event to a failure record.

    Only failures explain why a run is red, so passing tests, ``started``
    events and successful suites produce nothing. Ignored tests are reported
    only when ``include_ignored`` is set.

    Args:
        event: One parsed JSON line from the test harness.
        include_ignored: Report ``ignored`` test events as well.

    Returns:
        A `TestFailure`, `SuiteFailure` or `TestIgnored`, or ``None``.
    """
    match event.get("type"):
        case "test":
            return _test_record(event, include_ignored=include_ignored)
        case "suite":
            return _suite_record(event)
        case _:
            return None
