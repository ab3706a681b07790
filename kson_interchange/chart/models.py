"""Chart-model dataclasses read by the timing utilities and the fidelity checker.

WHY: The KSON loader and the chart editor own the full chart model; the
interchange core only reads the handful of fields that timing queries and
KSH saving need. These dataclasses give those fields a stable, typed shape
that loaders fill in and the core consumes.

HOW: The hierarchy mirrors the KSON document layout:
  ChartData
    beat    -> BeatInfo    (bpm, time_sig, stop, scroll_speed)
    note    -> NoteInfo    (laser: two lanes of LaserSection)
    camera  -> CameraInfo  (cam.body graphs, manual tilt)
    audio   -> AudioInfo   (audio_effect.fx long events)
    compat  -> CompatInfo  (ksh_version of the source file)

RULES:
- Laser lanes are [left, right]
- Laser values are normalized to [0, 1]
- The core never mutates a ChartData
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from kson_interchange.chart.audio_effect import AudioInfo
from kson_interchange.core.graph import ByMeasureIdx, ByPulse, Graph, LaserSection

NUM_LASER_LANES = 2
LASER_LANE_NAMES = ("left", "right")


@dataclass(frozen=True)
class TimeSig:
    """Time signature n/d; one measure lasts RESOLUTION4 * n / d pulses."""

    n: int = 4
    d: int = 4


@dataclass
class BeatInfo:
    """Tempo and meter.

    bpm, stop and scroll_speed are keyed by pulse; time_sig is keyed by
    measure index.
    """

    bpm: ByPulse[float] = field(default_factory=ByPulse)
    time_sig: ByMeasureIdx[TimeSig] = field(default_factory=ByMeasureIdx)
    stop: ByPulse[int] = field(default_factory=ByPulse)
    scroll_speed: Graph = field(default_factory=Graph)


def _empty_laser_lanes() -> List[ByPulse[LaserSection]]:
    return [ByPulse() for _ in range(NUM_LASER_LANES)]


@dataclass
class NoteInfo:
    laser: List[ByPulse[LaserSection]] = field(default_factory=_empty_laser_lanes)


@dataclass
class CamGraphs:
    zoom_top: Graph = field(default_factory=Graph)
    zoom_bottom: Graph = field(default_factory=Graph)
    zoom_side: Graph = field(default_factory=Graph)
    center_split: Graph = field(default_factory=Graph)
    rotation_deg: Graph = field(default_factory=Graph)


@dataclass
class CamInfo:
    body: CamGraphs = field(default_factory=CamGraphs)


@dataclass
class CameraInfo:
    cam: CamInfo = field(default_factory=CamInfo)
    tilt: Graph = field(default_factory=Graph)  # manual tilt only


@dataclass
class CompatInfo:
    ksh_version: str = ""

    def is_ksh_version_older_than(self, version: int) -> bool:
        """True when the source KSH version is known and older than version.

        An empty version, or one below 100, means "not from a KSH file".
        """
        if not self.ksh_version:
            return False
        digits = ""
        for ch in self.ksh_version.strip():
            if not ch.isdigit():
                break
            digits += ch
        chart_version = int(digits) if digits else 0
        return 100 <= chart_version < version


@dataclass
class ChartData:
    beat: BeatInfo = field(default_factory=BeatInfo)
    note: NoteInfo = field(default_factory=NoteInfo)
    camera: CameraInfo = field(default_factory=CameraInfo)
    audio: AudioInfo = field(default_factory=AudioInfo)
    compat: CompatInfo = field(default_factory=CompatInfo)
