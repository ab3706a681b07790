"""Unit tests for easing curves and curve expansion.

WHY: Eased segments must be flattened before a linear-only writer sees
them; wrong sampling produces visibly different lasers and scroll speed.

HOW: Tests cover clamping in evaluate_curve, the linear shortcut, and
expand_curve_segments on Graph, GraphSection and LaserSection inputs.
"""

import pytest

from kson_interchange.config import CURVE_SUBDIVISION_INTERVAL
from kson_interchange.core.curve import (
    evaluate_curve,
    evaluate_curve_value,
    expand_curve_segments,
)
from kson_interchange.core.graph import (
    Graph,
    GraphCurveValue,
    GraphPoint,
    GraphSection,
    GraphValue,
    LaserSection,
)
from kson_interchange.core.interpolation import graph_value_at

EASE_IN = GraphCurveValue(1.0, 0.0)


class TestEvaluateCurve:
    def test_endpoints(self):
        assert evaluate_curve(1.0, 0.0, 0.0) == pytest.approx(0.0)
        assert evaluate_curve(1.0, 0.0, 1.0) == pytest.approx(1.0)

    def test_inputs_are_clamped(self):
        assert evaluate_curve(2.0, -1.0, 0.75) == pytest.approx(evaluate_curve(1.0, 0.0, 0.75))
        assert evaluate_curve(0.5, 1.0, 1.5) == pytest.approx(1.0)

    def test_stable_near_half(self):
        assert 0.0 <= evaluate_curve(0.5, 0.5, 0.3) <= 1.0

    def test_linear_curve_value_returns_x(self):
        assert evaluate_curve_value(GraphCurveValue(0.4, 0.4), 0.3) == 0.3


class TestExpandCurveSegments:
    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            expand_curve_segments(Graph({0: 0.0}), 0)
        with pytest.raises(ValueError):
            expand_curve_segments(Graph({0: 0.0}), -15)

    def test_empty_graph(self):
        assert len(expand_curve_segments(Graph(), 15)) == 0

    def test_linear_graph_is_unchanged(self, ramp_graph):
        assert expand_curve_segments(ramp_graph, 15) == ramp_graph

    def test_eased_segment_is_sampled(self):
        graph = Graph()
        graph[0] = GraphPoint(GraphValue(0.0), EASE_IN)
        graph[480] = 1.0

        expanded = expand_curve_segments(graph, 120)

        assert list(expanded) == [0, 120, 240, 360, 480]
        for pulse in (120, 240, 360):
            assert expanded[pulse].curve.is_linear()
            assert expanded[pulse].v.v == pytest.approx(graph_value_at(graph, pulse))
        assert expanded[480] == graph[480]

    def test_input_not_modified(self):
        graph = Graph()
        graph[0] = GraphPoint(GraphValue(0.0), EASE_IN)
        graph[100] = 1.0
        expand_curve_segments(graph, 10)
        assert list(graph) == [0, 100]

    def test_laser_section_keeps_width(self):
        section = LaserSection(
            v=Graph({0: GraphPoint(GraphValue(0.0), EASE_IN), 240: 1.0}),
            w=2,
        )
        expanded = expand_curve_segments(section, 60)
        assert isinstance(expanded, LaserSection)
        assert expanded.wide()
        assert list(expanded.v) == [0, 60, 120, 180, 240]

    def test_default_interval_is_a_64th_note(self):
        graph = Graph({0: GraphPoint(GraphValue(0.0), EASE_IN), 60: 1.0})
        expanded = expand_curve_segments(graph)
        assert CURVE_SUBDIVISION_INTERVAL == 15
        assert list(expanded) == [0, 15, 30, 45, 60]

    def test_graph_section(self):
        section = GraphSection(v=Graph({0: GraphPoint(GraphValue(0.0), EASE_IN), 30: 1.0}))
        expanded = expand_curve_segments(section, 15)
        assert isinstance(expanded, GraphSection)
        assert list(expanded.v) == [0, 15, 30]
