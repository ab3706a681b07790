"""Easing curves for graph segments and their expansion into linear points.

WHY: A segment leaving a key may be eased instead of linear. The legacy
KSH format (and some consumers) can only express straight lines for lasers
and scroll speed, so eased segments have to be flattened into many short
linear segments before they are written out.

HOW: The easing is a quadratic Bezier through (0, 0), (a, b), (1, 1).
evaluate_curve() solves for the Bezier parameter t at a given x and
returns y. expand_curve_segments() samples each eased segment every
``subdivision_interval`` pulses and inserts plain linear points.

RULES:
- a, b and x are clamped to [0, 1]; the result is clamped to [0, 1]
- A curve with a == b is linear and returns x unchanged
- Expansion interpolates from the left key's vf toward the right key's v
- subdivision_interval must be positive (ValueError otherwise); it defaults
  to CURVE_SUBDIVISION_INTERVAL (a 64th note)
"""

from __future__ import annotations

import math
from typing import Union

from kson_interchange.config import CURVE_SUBDIVISION_INTERVAL
from kson_interchange.core.graph import (
    Graph,
    GraphCurveValue,
    GraphPoint,
    GraphSection,
    GraphValue,
    LaserSection,
)


def _clamp01(x: float) -> float:
    return min(max(x, 0.0), 1.0)


def evaluate_curve(a: float, b: float, x: float) -> float:
    """Evaluate the easing curve with control point (a, b) at x.

    The curve is f(x) = 2(1-t)tb + t^2 where t solves the x coordinate.
    The direct formula for t breaks down near a = 0.5, so for a >= 0.25
    the conjugate form x / (a + sqrt(...)) is used instead.
    """
    a = _clamp01(a)
    b = _clamp01(b)
    x = _clamp01(x)

    discriminant = a * a + x - 2.0 * a * x
    d_sqrt = math.sqrt(discriminant) if discriminant >= 0.0 else 0.0

    if a < 0.25:
        t = (a - d_sqrt) / (-1.0 + 2.0 * a)
    else:
        t = x / (a + d_sqrt)

    return _clamp01(2.0 * (1.0 - t) * t * b + t * t)


def evaluate_curve_value(curve: GraphCurveValue, x: float) -> float:
    """Evaluate a GraphCurveValue at x; linear curves return x as-is."""
    if curve.is_linear():
        return x
    return evaluate_curve(curve.a, curve.b, x)


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def _expand_graph(graph: Graph, subdivision_interval: int) -> Graph:
    result = Graph()
    if not graph:
        return result

    items = list(graph.items())
    result[items[0][0]] = items[0][1]

    for (y1, point1), (y2, point2) in zip(items, items[1:]):
        if not point1.curve.is_linear():
            segment_length = y2 - y1
            ry = subdivision_interval
            while ry < segment_length:
                rate = evaluate_curve_value(point1.curve, ry / segment_length)
                value = lerp(point1.v.vf, point2.v.v, rate)
                result[y1 + ry] = GraphPoint(GraphValue(value))
                ry += subdivision_interval
        result[y2] = point2

    return result


def expand_curve_segments(
    graph: Union[Graph, GraphSection, LaserSection],
    subdivision_interval: int = CURVE_SUBDIVISION_INTERVAL,
) -> Union[Graph, GraphSection, LaserSection]:
    """Replace every eased segment with linear points spaced subdivision_interval apart.

    Accepts a Graph, a GraphSection, or a LaserSection and returns a new
    object of the same kind. The input is never modified. The left key of
    an expanded segment keeps its curve field.

    Raises:
        ValueError: if subdivision_interval is not positive.
    """
    if subdivision_interval <= 0:
        raise ValueError("subdivision_interval must be positive")

    if isinstance(graph, LaserSection):
        return LaserSection(v=_expand_graph(graph.v, subdivision_interval), w=graph.w)
    if isinstance(graph, GraphSection):
        return GraphSection(v=_expand_graph(graph.v, subdivision_interval))
    return _expand_graph(graph, subdivision_interval)
