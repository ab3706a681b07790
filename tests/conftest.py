"""Shared test fixtures for the kson_interchange test suite.

WHY: Stop baking, interpolation and the fidelity checker tests all start
from the same few curves and a minimal chart. Centralizing them keeps the
expected values in one place.

HOW: Plain pytest fixtures build fresh objects per test, so tests may
mutate what they receive.

RULES:
- The minimal chart has BPM 120 at pulse 0 and nothing else
- Curves use GraphValue so slams are explicit
"""

import pytest

from kson_interchange.chart.models import ChartData
from kson_interchange.core.graph import ByPulse, Graph, GraphValue


@pytest.fixture
def minimal_chart():
    """A chart with only a BPM of 120 at pulse 0."""
    chart = ChartData()
    chart.beat.bpm[0] = 120.0
    return chart


@pytest.fixture
def ramp_graph():
    """Linear ramp 0.0 -> 1.0 over one 4/4 measure at resolution 240."""
    graph = Graph()
    graph[0] = 0.0
    graph[480] = 1.0
    return graph


@pytest.fixture
def slam_graph():
    """Three keys with a slam (1.0 -> -1.0) at pulse 100."""
    graph = Graph()
    graph[0] = GraphValue(1.0)
    graph[100] = GraphValue(1.0, -1.0)
    graph[200] = GraphValue(1.0)
    return graph


@pytest.fixture
def constant_scroll_speed():
    return Graph({0: GraphValue(1.0)})


@pytest.fixture
def empty_stops():
    return ByPulse()
