"""Point queries over Graphs and section-based graphs.

WHY: Every consumer of a curve (scroll speed integration, camera, laser
position, stop baking) asks the same question: what is the curve's value
at pulse p? The answer has to respect slams, so it cannot be a plain
interpolation between two numbers per key.

HOW: graph_value_at() finds the key at or before p with bisect. Before the
first key the first arrival value is held; from the last key on, the last
departure value is held; in between, the departure value of the left key
is interpolated toward the arrival value of the right key, with the left
key's easing curve applied to the fraction.

RULES:
- Empty graph -> 0.0
- p before first key -> v of the first key
- p at or after the last key -> vf of the last key
- p exactly at a non-terminal key -> vf of that key
- Section queries return None outside [first key, last key) of the section
- manual_tilt_value_at has no pre-roll: None before the first tilt key
- All functions are pure; nothing here mutates its inputs
"""

from __future__ import annotations

from typing import Optional, Tuple, TypeVar, Union

from kson_interchange.core.curve import evaluate_curve_value, lerp
from kson_interchange.core.graph import ByPulse, Graph, GraphPoint, GraphSection, LaserSection

_Section = TypeVar("_Section", GraphSection, LaserSection)


def graph_value_at(graph: Graph, pulse: int) -> float:
    """Return the value of graph at pulse.

    Args:
        graph: The curve to evaluate.
        pulse: Absolute pulse (or relative pulse for section graphs).

    Returns:
        The curve value; 0.0 for an empty graph.
    """
    if not graph:
        return 0.0

    idx = graph.upper_bound(pulse)
    if idx == 0:
        # Pre-roll: hold the arrival value of the first key
        return graph.item_at(0)[1].v.v
    if idx == len(graph):
        return graph.item_at(-1)[1].v.vf

    pulse1, point1 = graph.item_at(idx - 1)
    pulse2, point2 = graph.item_at(idx)

    rate = (pulse - pulse1) / (pulse2 - pulse1)
    return lerp(point1.v.vf, point2.v.v, evaluate_curve_value(point1.curve, rate))


def graph_section_at(
    sections: ByPulse[_Section],
    pulse: int,
) -> Optional[Tuple[int, _Section]]:
    """Return (start_pulse, section) for the section in effect at pulse.

    Falls back to the first section when pulse precedes all of them, so
    callers must still range-check the relative pulse. None when empty.
    """
    if not sections:
        return None
    idx = sections.upper_bound(pulse)
    if idx > 0:
        idx -= 1
    return sections.item_at(idx)


def graph_section_value_at(
    sections: ByPulse[_Section],
    pulse: int,
) -> Optional[float]:
    """Return the section curve value at an absolute pulse, or None.

    RULES:
    - None when there are no sections
    - None when the section has fewer than two points
    - None when the relative pulse lies outside [first key, last key)
    """
    found = graph_section_at(sections, pulse)
    if found is None:
        return None

    start, section = found
    ry = pulse - start
    graph = section.v

    if len(graph) <= 1:
        return None
    if ry < graph.key_at(0) or ry >= graph.key_at(-1):
        return None

    return graph_value_at(graph, ry)


def graph_section_value_at_with_default(
    sections: ByPulse[_Section],
    pulse: int,
    default: float,
) -> float:
    value = graph_section_value_at(sections, pulse)
    if value is None:
        return default
    return value


def graph_point_at(
    sections: ByPulse[Union[GraphSection, LaserSection]],
    pulse: int,
) -> Optional[GraphPoint]:
    """Return the point defined exactly at an absolute pulse, if any."""
    found = graph_section_at(sections, pulse)
    if found is None:
        return None
    start, section = found
    return section.v.get(pulse - start)


def manual_tilt_value_at(tilt: Graph, pulse: int) -> Optional[float]:
    """Return the manual tilt value at pulse, or None before the first key.

    Unlike graph_value_at() there is no pre-roll: a chart without a tilt
    key yet has no manual tilt, and the caller falls back to auto tilt.
    """
    if not tilt or pulse < tilt.key_at(0):
        return None
    return graph_value_at(tilt, pulse)
