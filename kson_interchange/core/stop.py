"""Folding timing stops into the scroll-speed curve.

WHY: A stop freezes chart time for a number of pulses. Renderers that only
integrate scroll speed can show a stop if the scroll speed is pinned to zero
for that interval, so stops are baked into the scroll_speed Graph once when
a chart is normalized.

HOW: Two passes:
  1. merge_stop_ranges() turns the stop map into sorted, disjoint
     half-open ranges [start, end). Overlapping and touching stops merge.
  2. bake_stop_into_scroll_speed() copies the original points that lie
     outside every closed range [start, end], then adds one slam at each
     range boundary: (curve value -> 0) at start and (0 -> curve value)
     at end.

RULES:
- Two ranges I, J with I.start < J.start merge when J.start <= I.end
- Boundary values are sampled from the ORIGINAL scroll speed curve
- Original points strictly inside or exactly on a range boundary are dropped
- Empty stops -> an equal copy of scroll_speed
- Empty scroll_speed with stops -> baked against {0: DEFAULT_SCROLL_SPEED}
- A zero-length stop keeps only the (0 -> value) slam at its pulse, so the
  segment leading into it ramps down to zero
- Stop durations are assumed non-negative; they are not validated here
- Inputs are never mutated
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from kson_interchange.config import DEFAULT_SCROLL_SPEED
from kson_interchange.core.graph import ByPulse, Graph, GraphValue
from kson_interchange.core.interpolation import graph_value_at

logger = logging.getLogger(__name__)


def merge_stop_ranges(stops: ByPulse[int]) -> List[Tuple[int, int]]:
    """Merge stop events into sorted, disjoint [start, end) ranges.

    Args:
        stops: Stop start pulse -> stop length in pulses.

    Returns:
        List of (start, end) tuples, sorted by start, pairwise disjoint
        and non-touching.
    """
    merged: List[Tuple[int, int]] = []
    for start, length in sorted(stops.items()):
        end = start + length
        if not merged or merged[-1][1] < start:
            merged.append((start, end))
        else:
            prev_start, prev_end = merged[-1]
            merged[-1] = (prev_start, max(prev_end, end))
    return merged


def bake_stop_into_scroll_speed(scroll_speed: Graph, stops: ByPulse[int]) -> Graph:
    """Return a new scroll speed Graph with every stop pinned to zero speed.

    Args:
        scroll_speed: Original scroll speed curve.
        stops: Stop start pulse -> stop length in pulses.

    Returns:
        A new Graph; neither input is modified.
    """
    if not stops:
        return Graph(scroll_speed)

    base = scroll_speed
    if not base:
        base = Graph({0: GraphValue(DEFAULT_SCROLL_SPEED)})

    ranges = merge_stop_ranges(stops)
    logger.debug("Merged %d stops into %d ranges", len(stops), len(ranges))

    result = Graph()
    range_idx = 0
    for pulse, point in base.items():
        # Ranges are sorted, so skip every range that ends before this point
        while range_idx < len(ranges) and ranges[range_idx][1] < pulse:
            range_idx += 1
        if range_idx < len(ranges) and ranges[range_idx][0] <= pulse:
            continue
        result[pulse] = point

    for start, end in ranges:
        result[start] = GraphValue(graph_value_at(base, start), 0.0)
        result[end] = GraphValue(0.0, graph_value_at(base, end))

    return result
