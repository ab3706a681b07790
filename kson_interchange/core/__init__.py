"""Temporal graph engine: curve model, interpolation, stop baking and timing.

WHY: Scroll speed, camera and laser data are all pulse-indexed curves with
slams. Keeping their model and the few algorithms over it in one package
gives every consumer the same answer to "what is the value at pulse p".

HOW: graph.py defines the data structures, interpolation.py answers point
queries, curve.py evaluates and flattens eased segments, stop.py folds
stop intervals into a scroll speed curve, timing.py converts between
pulses, seconds and measures.

RULES:
- Functions here are pure; they return new objects instead of mutating
- No chart-format knowledge lives in this package
"""

from kson_interchange.core.graph import (
    ByMeasureIdx,
    ByPulse,
    ByRelPulse,
    Graph,
    GraphCurveValue,
    GraphPoint,
    GraphSection,
    GraphValue,
    LaserSection,
)
from kson_interchange.core.interpolation import graph_value_at, manual_tilt_value_at
from kson_interchange.core.stop import bake_stop_into_scroll_speed, merge_stop_ranges
from kson_interchange.core.timing import TimingCache, create_timing_cache

__all__ = [
    "ByMeasureIdx",
    "ByPulse",
    "ByRelPulse",
    "Graph",
    "GraphCurveValue",
    "GraphPoint",
    "GraphSection",
    "GraphValue",
    "LaserSection",
    "TimingCache",
    "bake_stop_into_scroll_speed",
    "create_timing_cache",
    "graph_value_at",
    "manual_tilt_value_at",
    "merge_stop_ranges",
]
