"""Pulse-indexed curve data model: GraphValue, GraphPoint, ByPulse, Graph.

WHY: Every time-varying chart quantity (scroll speed, camera zoom, laser
position) is a piecewise curve sampled on the integer pulse clock. Slams
(instantaneous jumps) must live inside a single ordered map, so each key
carries two values: the one the curve arrives at and the one it leaves with.

HOW: Five building blocks form the model:
  GraphValue      - (v, vf) pair: arrival value and departure value
  GraphCurveValue - easing control point for the outgoing segment
  GraphPoint      - one GraphValue plus its curve
  ByPulse         - ordered Pulse -> T mapping backed by a sorted key list
  Graph           - ByPulse[GraphPoint] that coerces plain numbers on insert

RULES:
- Keys are int pulses, strictly increasing, one value per pulse
- Assigning to an existing pulse replaces the value in place
- Iteration is always in key order
- An empty Graph stands for the constant 0
- GraphValue(x) means v == vf == x (no jump)
- GraphCurveValue(a, b) is linear when a == b; the default (0, 0) is linear
"""

from __future__ import annotations

from bisect import bisect_left, bisect_right, insort
from collections.abc import MutableMapping
from dataclasses import dataclass, field
from typing import Dict, Generic, Iterator, List, Optional, Tuple, TypeVar, Union

Pulse = int
RelPulse = int

T = TypeVar("T")


@dataclass(frozen=True)
class GraphValue:
    """A curve sample: the value arrived at (v) and the value left with (vf).

    RULES:
    - vf defaults to v
    - v != vf encodes a slam at this key
    """

    v: float
    vf: Optional[float] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "v", float(self.v))
        vf = self.v if self.vf is None else self.vf
        object.__setattr__(self, "vf", float(vf))

    @property
    def is_jump(self) -> bool:
        return self.v != self.vf


@dataclass(frozen=True)
class GraphCurveValue:
    """Quadratic Bezier control point (a, b) of the segment leaving a key."""

    a: float = 0.0
    b: float = 0.0

    def is_linear(self) -> bool:
        return self.a == self.b


@dataclass(frozen=True)
class GraphPoint:
    """One key of a Graph: its value pair and the curve of the outgoing segment."""

    v: GraphValue
    curve: GraphCurveValue = field(default_factory=GraphCurveValue)

    @classmethod
    def of(cls, value: "GraphPointLike") -> GraphPoint:
        """Coerce a number, GraphValue, or GraphPoint into a GraphPoint."""
        if isinstance(value, GraphPoint):
            return value
        if isinstance(value, GraphValue):
            return cls(v=value)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(
                "Cannot build a GraphPoint from {!r}".format(value)
            )
        return cls(v=GraphValue(float(value)))


GraphPointLike = Union[GraphPoint, GraphValue, float, int]


def _check_pulse(pulse: object) -> int:
    # bool is an int subclass but never a meaningful pulse
    if isinstance(pulse, bool) or not isinstance(pulse, int):
        raise TypeError("Pulse keys must be integers, got {!r}".format(pulse))
    return pulse


class ByPulse(MutableMapping, Generic[T]):
    """Ordered mapping from integer pulse to a value.

    WHY: Chart events (BPM changes, stops, long FX events, sections) are
    keyed by pulse and queried by "the entry in effect at pulse p".
    A plain dict loses ordering guarantees after deletions and has no
    floor/ceiling lookups.

    HOW: Values live in a dict; a parallel sorted list of keys answers
    order queries with bisect.

    RULES:
    - upper_bound(p) is the index of the first key strictly greater than p
    - Range helpers use half-open [start, end) intervals
    """

    def __init__(self, items: Optional[Union[Dict[int, T], "ByPulse[T]"]] = None) -> None:
        self._values: Dict[int, T] = {}
        self._keys: List[int] = []
        if items is not None:
            for pulse, value in items.items():
                self[pulse] = value

    # -- MutableMapping -----------------------------------------------------

    def __getitem__(self, pulse: int) -> T:
        return self._values[pulse]

    def __setitem__(self, pulse: int, value: T) -> None:
        _check_pulse(pulse)
        if pulse not in self._values:
            insort(self._keys, pulse)
        self._values[pulse] = self._coerce(value)

    def __delitem__(self, pulse: int) -> None:
        del self._values[pulse]
        del self._keys[bisect_left(self._keys, pulse)]

    def __iter__(self) -> Iterator[int]:
        return iter(list(self._keys))

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, pulse: object) -> bool:
        return pulse in self._values

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ByPulse):
            return NotImplemented
        return list(self.items()) == list(other.items())

    def __repr__(self) -> str:
        body = ", ".join("{}: {!r}".format(k, self._values[k]) for k in self._keys)
        return "{}({{{}}})".format(type(self).__name__, body)

    def _coerce(self, value: T) -> T:
        return value

    def copy(self) -> "ByPulse[T]":
        return type(self)(self)

    # -- ordered queries ----------------------------------------------------

    def keys_list(self) -> List[int]:
        return list(self._keys)

    def key_at(self, index: int) -> int:
        return self._keys[index]

    def item_at(self, index: int) -> Tuple[int, T]:
        pulse = self._keys[index]
        return pulse, self._values[pulse]

    def upper_bound(self, pulse: int) -> int:
        return bisect_right(self._keys, pulse)

    def first_item(self) -> Optional[Tuple[int, T]]:
        if not self._keys:
            return None
        return self.item_at(0)

    def last_item(self) -> Optional[Tuple[int, T]]:
        if not self._keys:
            return None
        return self.item_at(-1)

    def floor_item(self, pulse: int) -> Optional[Tuple[int, T]]:
        """Return the entry with the greatest key <= pulse, or None."""
        idx = self.upper_bound(pulse)
        if idx == 0:
            return None
        return self.item_at(idx - 1)

    def value_at_or_default(self, pulse: int, default: T) -> T:
        """Return the value in effect at pulse, or default before the first key."""
        found = self.floor_item(pulse)
        if found is None:
            return default
        return found[1]

    def count_in_range(self, start: int, end: int) -> int:
        """Number of keys in [start, end)."""
        return bisect_left(self._keys, end) - bisect_left(self._keys, start)

    def first_in_range(self, start: int, end: int) -> Optional[Tuple[int, T]]:
        """First entry in [start, end), or None."""
        idx = bisect_left(self._keys, start)
        if idx >= len(self._keys) or self._keys[idx] >= end:
            return None
        return self.item_at(idx)

    def items_in_range(self, start: int, end: int) -> List[Tuple[int, T]]:
        """All entries in [start, end), in key order."""
        lo = bisect_left(self._keys, start)
        hi = bisect_left(self._keys, end)
        return [(k, self._values[k]) for k in self._keys[lo:hi]]


ByRelPulse = ByPulse
ByMeasureIdx = ByPulse


class Graph(ByPulse[GraphPoint]):
    """Pulse-indexed piecewise curve.

    Values assigned to a Graph are coerced with GraphPoint.of, so
    ``graph[0] = 1.0`` and ``graph[0] = GraphValue(1.0)`` are equivalent.
    """

    def _coerce(self, value: GraphPointLike) -> GraphPoint:
        return GraphPoint.of(value)


@dataclass
class GraphSection:
    """A curve whose keys are relative to the section's start pulse."""

    v: Graph = field(default_factory=Graph)


LASER_X_SCALE_1X = 1
LASER_X_SCALE_2X = 2


@dataclass
class LaserSection:
    """A laser section: relative-pulse graph of positions in [0, 1] plus width flag."""

    v: Graph = field(default_factory=Graph)
    w: int = LASER_X_SCALE_1X

    def wide(self) -> bool:
        return self.w == LASER_X_SCALE_2X
