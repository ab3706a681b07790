"""Unit tests for the pulse-indexed data model.

WHY: Every algorithm in the package relies on ByPulse staying sorted with
one value per pulse, and on Graph coercing numbers into GraphPoints. A
broken ordering invariant silently corrupts interpolation and baking.

HOW: Tests cover GraphValue defaults, GraphPoint coercion, ByPulse
ordering/replacement/deletion, the ordered query helpers, and the
section dataclasses.

RULES:
- Range helpers are half-open [start, end)
"""

import pytest

from kson_interchange.core.graph import (
    ByPulse,
    Graph,
    GraphCurveValue,
    GraphPoint,
    GraphValue,
    LaserSection,
)


class TestGraphValue:
    """GraphValue holds an arrival value and a departure value."""

    def test_single_value_sets_both(self):
        value = GraphValue(2.5)
        assert value.v == 2.5
        assert value.vf == 2.5
        assert not value.is_jump

    def test_two_values_encode_a_jump(self):
        value = GraphValue(1.0, 0.0)
        assert value.is_jump

    def test_equality_with_explicit_vf(self):
        assert GraphValue(1.0) == GraphValue(1.0, 1.0)

    def test_ints_become_floats(self):
        value = GraphValue(3)
        assert isinstance(value.v, float)
        assert isinstance(value.vf, float)


class TestGraphCurveValue:
    def test_default_is_linear(self):
        assert GraphCurveValue().is_linear()

    def test_equal_control_point_is_linear(self):
        assert GraphCurveValue(0.3, 0.3).is_linear()

    def test_ease_is_not_linear(self):
        assert not GraphCurveValue(1.0, 0.0).is_linear()


class TestGraphPointCoercion:
    """Graph assignment accepts numbers, GraphValues and GraphPoints."""

    def test_float_is_coerced(self):
        graph = Graph()
        graph[0] = 1.5
        assert graph[0] == GraphPoint(GraphValue(1.5))

    def test_graph_value_is_coerced(self):
        graph = Graph()
        graph[0] = GraphValue(1.0, 0.0)
        assert graph[0].v.vf == 0.0
        assert graph[0].curve.is_linear()

    def test_graph_point_is_kept(self):
        point = GraphPoint(GraphValue(0.0), GraphCurveValue(1.0, 0.0))
        graph = Graph()
        graph[0] = point
        assert graph[0] is point

    def test_strings_are_rejected(self):
        graph = Graph()
        with pytest.raises(TypeError):
            graph[0] = "1.0"


class TestByPulseOrdering:
    """Keys stay sorted regardless of insertion order."""

    def test_iteration_in_key_order(self):
        by_pulse = ByPulse()
        for pulse in (960, 0, 480, 240):
            by_pulse[pulse] = pulse
        assert list(by_pulse) == [0, 240, 480, 960]

    def test_reassignment_replaces_value(self):
        by_pulse = ByPulse({0: "a"})
        by_pulse[0] = "b"
        assert len(by_pulse) == 1
        assert by_pulse[0] == "b"

    def test_delete_keeps_order(self):
        by_pulse = ByPulse({0: 1, 100: 2, 200: 3})
        del by_pulse[100]
        assert list(by_pulse.items()) == [(0, 1), (200, 3)]

    def test_non_integer_key_rejected(self):
        by_pulse = ByPulse()
        with pytest.raises(TypeError):
            by_pulse[1.5] = 1
        with pytest.raises(TypeError):
            by_pulse[True] = 1

    def test_negative_pulse_allowed(self):
        by_pulse = ByPulse({-240: "pre", 0: "start"})
        assert by_pulse.first_item() == (-240, "pre")

    def test_equality_by_content(self):
        assert ByPulse({0: 1, 5: 2}) == ByPulse({5: 2, 0: 1})
        assert ByPulse({0: 1}) != ByPulse({0: 2})

    def test_copy_is_independent(self):
        original = Graph({0: 1.0})
        copied = original.copy()
        copied[100] = 2.0
        assert 100 not in original
        assert isinstance(copied, Graph)


class TestByPulseQueries:
    """Ordered lookups used by interpolation and the chart helpers."""

    @pytest.fixture
    def by_pulse(self):
        return ByPulse({0: "a", 240: "b", 480: "c"})

    def test_upper_bound(self, by_pulse):
        assert by_pulse.upper_bound(-1) == 0
        assert by_pulse.upper_bound(0) == 1
        assert by_pulse.upper_bound(300) == 2
        assert by_pulse.upper_bound(480) == 3

    def test_floor_item(self, by_pulse):
        assert by_pulse.floor_item(-1) is None
        assert by_pulse.floor_item(240) == (240, "b")
        assert by_pulse.floor_item(479) == (240, "b")

    def test_first_and_last(self, by_pulse):
        assert by_pulse.first_item() == (0, "a")
        assert by_pulse.last_item() == (480, "c")
        assert ByPulse().first_item() is None
        assert ByPulse().last_item() is None

    def test_value_at_or_default(self, by_pulse):
        assert by_pulse.value_at_or_default(-10, "z") == "z"
        assert by_pulse.value_at_or_default(250, "z") == "b"
        assert by_pulse.value_at_or_default(10000, "z") == "c"

    def test_count_in_range(self, by_pulse):
        assert by_pulse.count_in_range(0, 480) == 2
        assert by_pulse.count_in_range(0, 481) == 3
        assert by_pulse.count_in_range(1, 240) == 0
        assert by_pulse.count_in_range(100, 100) == 0

    def test_first_in_range(self, by_pulse):
        assert by_pulse.first_in_range(1, 480) == (240, "b")
        assert by_pulse.first_in_range(241, 480) is None
        assert by_pulse.first_in_range(600, 700) is None

    def test_items_in_range(self, by_pulse):
        assert by_pulse.items_in_range(0, 480) == [(0, "a"), (240, "b")]


class TestLaserSection:
    def test_default_width_is_normal(self):
        assert not LaserSection().wide()

    def test_wide_flag(self):
        assert LaserSection(w=2).wide()
