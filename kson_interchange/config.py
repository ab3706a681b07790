"""Configuration constants, KSH format limits, and .env loading.

WHY: The graph engine and the KSH fidelity checker both depend on a handful
of format constants (pulse resolution, the legacy laser grid, clamp limits).
Keeping them in one module as plain data makes them easy to find, and lets
tests and tools override the legacy grid without touching the checker.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level values. Values that a deployment may want to tune are read
from environment variables with documented defaults. load_laser_x_max()
gives a clear error when the override is malformed.

RULES:
- RESOLUTION is the number of pulses per quarter note (240)
- KSH_LASER_X_MAX is the legacy laser grid: positions are stored as n/50
- Clamp limits mirror what the KSH writer clamps to
- Constants here are defaults only; KshFidelityChecker takes them as
  constructor arguments so alternative resolutions stay testable
"""

from __future__ import annotations

import math
import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Pulse timeline
# ---------------------------------------------------------------------------

RESOLUTION = 240
"""Pulses per quarter note."""

RESOLUTION4 = RESOLUTION * 4
"""Pulses per 4/4 measure."""

CURVE_SUBDIVISION_INTERVAL = RESOLUTION // 16
"""Interval (in pulses) used when curve segments are pre-expanded into lines."""

DEFAULT_SCROLL_SPEED = 1.0
"""Scroll speed assumed when a chart defines no scroll_speed curve."""

# ---------------------------------------------------------------------------
# KSH (legacy format) limits
# ---------------------------------------------------------------------------

KSH_BPM_MAX = 65535.0
KSH_ZOOM_ABS_MAX = 65535.0
KSH_CENTER_SPLIT_ABS_MAX = 65535.0
KSH_ROTATION_DEG_ABS_MAX = 65535.0
KSH_MANUAL_TILT_ABS_MAX = 1000.0

KSH_VER_BPM_LIMIT_ADDED = 130
"""First KSH version whose reader clamps BPM to KSH_BPM_MAX."""


def load_float_tolerance() -> float:
    """Load the grid tolerance from the environment.

    Reads KSH_FLOAT_TOLERANCE, falling back to 1e-6.

    RULES:
    - Raises ValueError if the value is not a finite, non-negative number
    """
    raw = os.getenv("KSH_FLOAT_TOLERANCE", "1e-6").strip()
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(
            "KSH_FLOAT_TOLERANCE must be a non-negative number, got {!r}.".format(raw)
        ) from None
    if not math.isfinite(value) or value < 0.0:
        raise ValueError(
            "KSH_FLOAT_TOLERANCE must be a non-negative number, got {!r}.".format(raw)
        )
    return value


KSH_FLOAT_TOLERANCE = load_float_tolerance()
"""Absolute tolerance used when deciding whether a value sits on an integer grid."""


def load_laser_x_max() -> int:
    """Load the KSH laser grid resolution from the environment.

    WHY: The KSH format stores laser positions as integers 0..R. R is 50
    for every released KSH version, but the checker is written against an
    arbitrary R so alternate grids can be exercised.

    HOW: Reads KSH_LASER_X_MAX from os.environ (populated by python-dotenv),
    falling back to 50.

    RULES:
    - Raises ValueError if the value is not a positive integer
    """
    raw = os.getenv("KSH_LASER_X_MAX", "50").strip()
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(
            "KSH_LASER_X_MAX must be a positive integer, got {!r}.".format(raw)
        ) from None
    if value <= 0:
        raise ValueError(
            "KSH_LASER_X_MAX must be a positive integer, got {!r}.".format(raw)
        )
    return value


KSH_LASER_X_MAX = load_laser_x_max()
