"""Unit tests for stop baking.

WHY: Baked scroll speed drives how far notes move during and around a
stop. A wrong boundary value or a surviving point inside a stop shows up
as notes drifting during a freeze.

HOW: merge_stop_ranges is tested in isolation first, then
bake_stop_into_scroll_speed with no stop, simple, multiple, overlapping,
touching stops, stops over a ramp, stops on a slam, and stops before a
later change.

RULES:
- Boundary values come from the original scroll speed curve
- Floating-point comparisons use pytest.approx
"""

import pytest

from kson_interchange.core.graph import ByPulse, Graph, GraphValue
from kson_interchange.core.interpolation import graph_value_at
from kson_interchange.core.stop import bake_stop_into_scroll_speed, merge_stop_ranges


class TestMergeStopRanges:
    def test_empty(self):
        assert merge_stop_ranges(ByPulse()) == []

    def test_disjoint_stops_stay_separate(self):
        assert merge_stop_ranges(ByPulse({200: 100, 500: 100})) == [(200, 300), (500, 600)]

    def test_overlapping_stops_merge(self):
        assert merge_stop_ranges(ByPulse({400: 200, 500: 300})) == [(400, 800)]

    def test_touching_stops_merge(self):
        assert merge_stop_ranges(ByPulse({0: 100, 100: 50})) == [(0, 150)]

    def test_contained_stop_keeps_outer_end(self):
        assert merge_stop_ranges(ByPulse({0: 500, 100: 50})) == [(0, 500)]

    def test_chain_of_merges(self):
        stops = ByPulse({0: 100, 80: 100, 170: 100, 400: 10})
        assert merge_stop_ranges(stops) == [(0, 270), (400, 410)]


class TestBakeStopIntoScrollSpeed:
    def test_no_stop_returns_equal_graph(self, empty_stops):
        scroll_speed = Graph({0: 1.0, 960: 2.0})
        result = bake_stop_into_scroll_speed(scroll_speed, empty_stops)
        assert result == scroll_speed
        assert result is not scroll_speed

    def test_simple_stop(self, constant_scroll_speed):
        result = bake_stop_into_scroll_speed(constant_scroll_speed, ByPulse({0: 192}))

        assert list(result) == [0, 192]
        assert result[0].v == GraphValue(1.0, 0.0)
        assert result[192].v == GraphValue(0.0, 1.0)

    def test_changes_inside_stop_are_dropped(self):
        scroll_speed = Graph({0: 1.0, 48: -1.0, 96: -1.0, 144: 1.0})

        result = bake_stop_into_scroll_speed(scroll_speed, ByPulse({0: 192}))

        assert 48 not in result
        assert 96 not in result
        assert 144 not in result
        assert result[0].v.v == pytest.approx(1.0)
        assert result[0].v.vf == pytest.approx(0.0)
        assert result[192].v.v == pytest.approx(0.0)
        assert result[192].v.vf == pytest.approx(1.0)

    def test_multiple_stops(self):
        scroll_speed = Graph({0: 2.0})

        result = bake_stop_into_scroll_speed(scroll_speed, ByPulse({200: 100, 500: 100}))

        assert list(result) == [0, 200, 300, 500, 600]
        assert result[200].v == GraphValue(2.0, 0.0)
        assert result[300].v == GraphValue(0.0, 2.0)
        assert result[500].v == GraphValue(2.0, 0.0)
        assert result[600].v == GraphValue(0.0, 2.0)

    def test_overlapping_stops(self, constant_scroll_speed):
        result = bake_stop_into_scroll_speed(constant_scroll_speed, ByPulse({400: 200, 500: 300}))

        assert list(result) == [0, 400, 800]
        assert 500 not in result
        assert 600 not in result
        assert result[400].v == GraphValue(1.0, 0.0)
        assert result[800].v == GraphValue(0.0, 1.0)

    def test_stop_during_transition(self):
        scroll_speed = Graph({0: 1.0, 1000: 3.0})

        result = bake_stop_into_scroll_speed(scroll_speed, ByPulse({400: 200}))

        assert result[400].v.v == pytest.approx(1.8)
        assert result[400].v.vf == 0.0
        assert result[600].v.v == 0.0
        assert result[600].v.vf == pytest.approx(2.2)
        assert result[1000].v.v == 3.0

    def test_stop_starting_on_a_slam(self, slam_graph):
        result = bake_stop_into_scroll_speed(slam_graph, ByPulse({100: 150}))

        # arrival value is the departure value of the existing slam
        assert result[100].v.v == pytest.approx(-1.0)
        assert result[100].v.vf == pytest.approx(0.0)
        assert 200 not in result
        assert result[250].v.v == pytest.approx(0.0)
        assert result[250].v.vf == pytest.approx(1.0)

    def test_change_after_stop(self):
        scroll_speed = Graph({0: 1.0, 1920: -10.0, 3840: 1.0})

        result = bake_stop_into_scroll_speed(scroll_speed, ByPulse({960: 480}))

        assert result[960].v.v == pytest.approx(-4.5)
        assert result[960].v.vf == pytest.approx(0.0)
        assert result[1440].v.v == pytest.approx(0.0)
        assert result[1440].v.vf == pytest.approx(-7.25)
        assert result[1920].v.v == pytest.approx(-10.0)
        assert result[3840].v.v == pytest.approx(1.0)

    def test_point_on_end_boundary_is_replaced(self):
        scroll_speed = Graph({0: 1.0, 200: GraphValue(2.0, 4.0)})

        result = bake_stop_into_scroll_speed(scroll_speed, ByPulse({100: 100}))

        assert list(result) == [0, 100, 200]
        assert result[100].v == GraphValue(1.5, 0.0)
        # resumes at the departure value of the replaced slam
        assert result[200].v == GraphValue(0.0, 4.0)

    def test_second_range_samples_original_curve(self):
        scroll_speed = Graph({0: 0.0, 1000: 10.0})

        result = bake_stop_into_scroll_speed(scroll_speed, ByPulse({100: 100, 500: 100}))

        assert result[500].v.v == pytest.approx(5.0)
        assert result[600].v.vf == pytest.approx(6.0)

    def test_zero_length_stop(self):
        scroll_speed = Graph({0: 1.0, 1000: 3.0})

        result = bake_stop_into_scroll_speed(scroll_speed, ByPulse({400: 0}))

        assert merge_stop_ranges(ByPulse({400: 0})) == [(400, 400)]
        assert list(result) == [0, 400, 1000]
        # the end slam overwrites the start slam at the same pulse
        assert result[400].v.v == 0.0
        assert result[400].v.vf == pytest.approx(1.8)
        # so the segment leading into the stop now ramps down to zero
        assert graph_value_at(result, 200) == pytest.approx(0.5)
        assert graph_value_at(result, 700) == pytest.approx(2.4)

    def test_inputs_are_not_mutated(self):
        scroll_speed = Graph({0: 1.0, 1000: 3.0})
        stops = ByPulse({400: 200})

        bake_stop_into_scroll_speed(scroll_speed, stops)

        assert list(scroll_speed) == [0, 1000]
        assert list(stops.items()) == [(400, 200)]

    def test_empty_scroll_speed_uses_default_speed(self):
        result = bake_stop_into_scroll_speed(Graph(), ByPulse({240: 240}))

        assert result[0].v == GraphValue(1.0)
        assert result[240].v == GraphValue(1.0, 0.0)
        assert result[480].v == GraphValue(0.0, 1.0)
