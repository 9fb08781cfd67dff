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

"""Property-based tests for range compaction and message minimization."""

from __future__ import annotations

import pytest
from hypothesis import given

from cargosift.ranges import compact_ranges, expand_ranges, normalize_message
from tests.property_based.strategies import line_sets, messages

pytestmark = [pytest.mark.unit, pytest.mark.property]


@given(line_sets())
def test_compaction_preserves_every_line(lines: list[int]) -> None:
    assert expand_ranges(compact_ranges(lines)) == lines


@given(line_sets())
def test_compacted_ranges_are_ordered_and_separated(lines: list[int]) -> None:
    bounds: list[tuple[int, int]] = []
    for item in compact_ranges(lines):
        head, _, tail = item.partition("-")
        start = int(head)
        end = int(tail) if tail else start
        assert start < end or not tail
        bounds.append((start, end))
    for (_, previous_end), (next_start, _) in zip(bounds, bounds[1:], strict=False):
        assert next_start > previous_end + 1


@given(messages())
def test_normalize_message_is_idempotent_and_single_spaced(text: str) -> None:
    once = normalize_message(text)
    assert normalize_message(once) == once
    assert "  " not in once
    assert "\n" not in once
    assert once == once.strip()
