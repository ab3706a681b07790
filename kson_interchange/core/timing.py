"""Conversions between pulses, seconds and measures.

WHY: Charts are authored on the pulse clock, but audio is played in
seconds and editors navigate by measure. Every consumer needs the same
answers to "when does pulse p sound" and "which measure is pulse p in",
including across tempo and time signature changes.

HOW: create_timing_cache() walks the BPM and time signature changes once
and records, for each change, where it sits on the other axis (seconds
for BPM changes, pulses for time signature changes). Every conversion
then finds the nearest change at or before its input and extrapolates
linearly from there.

RULES:
- beat.bpm and beat.time_sig must both have an entry at 0 (ValueError)
- One measure of n/d lasts RESOLUTION4 * n // d pulses
- Inputs before the first change extrapolate from the first change
- Integer results truncate toward zero
- A cache is only valid for the BeatInfo it was built from
"""

from __future__ import annotations

import logging
from bisect import bisect_right
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Tuple

from kson_interchange.config import RESOLUTION, RESOLUTION4
from kson_interchange.core.graph import ByMeasureIdx, ByPulse

if TYPE_CHECKING:
    from kson_interchange.chart.models import BeatInfo, NoteInfo, TimeSig

logger = logging.getLogger(__name__)


@dataclass
class TimingCache:
    """Positions of every tempo and time signature change on the other axis.

    Attributes:
        bpm_change_sec: BPM change pulse -> seconds.
        bpm_change_secs, bpm_change_pulses: The same changes as parallel
            lists sorted by seconds, for reverse lookups.
        time_sig_change_pulse: Time signature change measure index -> pulse.
        time_sig_change_measure_idx: Time signature change pulse -> measure index.
    """

    bpm_change_sec: ByPulse[float] = field(default_factory=ByPulse)
    bpm_change_secs: List[float] = field(default_factory=list)
    bpm_change_pulses: List[int] = field(default_factory=list)
    time_sig_change_pulse: ByMeasureIdx[int] = field(default_factory=ByMeasureIdx)
    time_sig_change_measure_idx: ByPulse[int] = field(default_factory=ByPulse)

    def bpm_change_at_sec(self, sec: float) -> Tuple[float, int]:
        """Return (sec, pulse) of the last BPM change at or before sec."""
        idx = max(bisect_right(self.bpm_change_secs, sec) - 1, 0)
        return self.bpm_change_secs[idx], self.bpm_change_pulses[idx]


def _nearest(by_key: ByPulse, key: int) -> Tuple[int, object]:
    # Entry at or before key; the first entry when key precedes all of them
    found = by_key.floor_item(key)
    if found is None:
        return by_key.item_at(0)
    return found


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def time_sig_one_measure_pulse(time_sig: TimeSig) -> int:
    return RESOLUTION4 * time_sig.n // time_sig.d


def create_timing_cache(beat_info: BeatInfo) -> TimingCache:
    """Build the TimingCache for a BeatInfo.

    Raises:
        ValueError: if bpm or time_sig has no entry at 0.
    """
    if 0 not in beat_info.bpm:
        raise ValueError("beat.bpm must contain a tempo at pulse 0")
    if 0 not in beat_info.time_sig:
        raise ValueError("beat.time_sig must contain a time signature at measure 0")

    cache = TimingCache()

    sec = 0.0
    prev_pulse, prev_bpm = None, 0.0
    for pulse, bpm in beat_info.bpm.items():
        if prev_pulse is not None:
            sec += (pulse - prev_pulse) / RESOLUTION * 60.0 / prev_bpm
        cache.bpm_change_sec[pulse] = sec
        cache.bpm_change_secs.append(sec)
        cache.bpm_change_pulses.append(pulse)
        prev_pulse, prev_bpm = pulse, bpm

    pulse = 0
    prev_idx, prev_sig = None, None
    for measure_idx, time_sig in beat_info.time_sig.items():
        if prev_idx is not None:
            pulse += (measure_idx - prev_idx) * time_sig_one_measure_pulse(prev_sig)
        cache.time_sig_change_pulse[measure_idx] = pulse
        cache.time_sig_change_measure_idx[pulse] = measure_idx
        prev_idx, prev_sig = measure_idx, time_sig

    logger.debug(
        "Built timing cache: %d tempo change(s), %d time signature change(s)",
        len(beat_info.bpm), len(beat_info.time_sig),
    )
    return cache


# -- pulse <-> time -----------------------------------------------------------


def fractional_pulse_to_sec(pulse: float, beat_info: BeatInfo, cache: TimingCache) -> float:
    change_pulse, bpm = _nearest(beat_info.bpm, int(pulse))
    return cache.bpm_change_sec[change_pulse] + (pulse - change_pulse) / RESOLUTION * 60.0 / bpm


def fractional_pulse_to_ms(pulse: float, beat_info: BeatInfo, cache: TimingCache) -> float:
    return fractional_pulse_to_sec(pulse, beat_info, cache) * 1000.0


def pulse_to_sec(pulse: int, beat_info: BeatInfo, cache: TimingCache) -> float:
    return fractional_pulse_to_sec(pulse, beat_info, cache)


def pulse_to_ms(pulse: int, beat_info: BeatInfo, cache: TimingCache) -> float:
    return pulse_to_sec(pulse, beat_info, cache) * 1000.0


def sec_to_fractional_pulse(sec: float, beat_info: BeatInfo, cache: TimingCache) -> float:
    change_sec, change_pulse = cache.bpm_change_at_sec(sec)
    bpm = beat_info.bpm[change_pulse]
    return change_pulse + RESOLUTION * (sec - change_sec) * bpm / 60.0


def ms_to_fractional_pulse(ms: float, beat_info: BeatInfo, cache: TimingCache) -> float:
    return sec_to_fractional_pulse(ms / 1000.0, beat_info, cache)


def sec_to_pulse(sec: float, beat_info: BeatInfo, cache: TimingCache) -> int:
    change_sec, change_pulse = cache.bpm_change_at_sec(sec)
    bpm = beat_info.bpm[change_pulse]
    return change_pulse + int(RESOLUTION * (sec - change_sec) * bpm / 60.0)


def ms_to_pulse(ms: float, beat_info: BeatInfo, cache: TimingCache) -> int:
    return sec_to_pulse(ms / 1000.0, beat_info, cache)


# -- pulse <-> measure --------------------------------------------------------


def pulse_to_measure_idx(pulse: int, beat_info: BeatInfo, cache: TimingCache) -> int:
    change_pulse, change_idx = _nearest(cache.time_sig_change_measure_idx, pulse)
    one_measure = time_sig_one_measure_pulse(beat_info.time_sig[change_idx])
    return change_idx + _trunc_div(pulse - change_pulse, one_measure)


def sec_to_measure_idx(sec: float, beat_info: BeatInfo, cache: TimingCache) -> int:
    return pulse_to_measure_idx(sec_to_pulse(sec, beat_info, cache), beat_info, cache)


def ms_to_measure_idx(ms: float, beat_info: BeatInfo, cache: TimingCache) -> int:
    return sec_to_measure_idx(ms / 1000.0, beat_info, cache)


def measure_idx_to_pulse(measure_idx: int, beat_info: BeatInfo, cache: TimingCache) -> int:
    change_idx, change_pulse = _nearest(cache.time_sig_change_pulse, measure_idx)
    one_measure = time_sig_one_measure_pulse(beat_info.time_sig[change_idx])
    return change_pulse + (measure_idx - change_idx) * one_measure


def measure_value_to_fractional_pulse(
    measure_value: float, beat_info: BeatInfo, cache: TimingCache
) -> float:
    """Convert a fractional measure position (2.5 = halfway through measure 2)."""
    change_idx, change_pulse = _nearest(cache.time_sig_change_pulse, int(measure_value))
    one_measure = time_sig_one_measure_pulse(beat_info.time_sig[change_idx])
    return change_pulse + (measure_value - change_idx) * one_measure


def measure_value_to_pulse(measure_value: float, beat_info: BeatInfo, cache: TimingCache) -> int:
    change_idx, change_pulse = _nearest(cache.time_sig_change_pulse, int(measure_value))
    one_measure = time_sig_one_measure_pulse(beat_info.time_sig[change_idx])
    return change_pulse + int((measure_value - change_idx) * one_measure)


def measure_idx_to_sec(measure_idx: int, beat_info: BeatInfo, cache: TimingCache) -> float:
    return pulse_to_sec(measure_idx_to_pulse(measure_idx, beat_info, cache), beat_info, cache)


def measure_idx_to_ms(measure_idx: int, beat_info: BeatInfo, cache: TimingCache) -> float:
    return measure_idx_to_sec(measure_idx, beat_info, cache) * 1000.0


def measure_value_to_sec(measure_value: float, beat_info: BeatInfo, cache: TimingCache) -> float:
    return pulse_to_sec(measure_value_to_pulse(measure_value, beat_info, cache), beat_info, cache)


def measure_value_to_ms(measure_value: float, beat_info: BeatInfo, cache: TimingCache) -> float:
    return measure_value_to_sec(measure_value, beat_info, cache) * 1000.0


def is_bar_line_pulse(pulse: int, beat_info: BeatInfo, cache: TimingCache) -> bool:
    change_pulse, change_idx = _nearest(cache.time_sig_change_measure_idx, pulse)
    one_measure = time_sig_one_measure_pulse(beat_info.time_sig[change_idx])
    return (pulse - change_pulse) % one_measure == 0


# -- lookups --------------------------------------------------------------------


def tempo_at(pulse: int, beat_info: BeatInfo) -> float:
    """Return the BPM in effect at pulse (the first BPM before the first change).

    Raises:
        ValueError: if beat_info.bpm is empty.
    """
    if not beat_info.bpm:
        raise ValueError("beat.bpm is empty")
    return _nearest(beat_info.bpm, pulse)[1]


def time_sig_at(pulse: int, beat_info: BeatInfo, cache: TimingCache) -> TimeSig:
    change_idx = _nearest(cache.time_sig_change_measure_idx, pulse)[1]
    return beat_info.time_sig[change_idx]


def get_mode_bpm(beat_info: BeatInfo, last_pulse: int) -> float:
    """Return the BPM that lasts longest between pulse 0 and last_pulse.

    Durations of equal BPM values are summed. Ties go to the higher BPM.
    The last BPM lasts until last_pulse; changes at or after last_pulse
    do not count. When no BPM has a positive duration the first BPM is
    returned.

    Raises:
        ValueError: if beat_info.bpm is empty.
    """
    if not beat_info.bpm:
        raise ValueError("beat.bpm is empty")

    items = list(beat_info.bpm.items())
    if len(items) == 1:
        return items[0][1]

    totals: Dict[float, int] = {}
    ends = [pulse for pulse, _ in items[1:]] + [last_pulse]
    for (pulse, bpm), next_pulse in zip(items, ends):
        end = min(next_pulse, last_pulse)
        if end > pulse:
            totals[bpm] = totals.get(bpm, 0) + (end - pulse)

    if not totals:
        return items[0][1]
    return max(totals.items(), key=lambda kv: (kv[1], kv[0]))[0]


def last_laser_end_pulse(note_info: NoteInfo) -> int:
    """Return the pulse of the last laser point across both lanes (0 when empty)."""
    last = 0
    for lane in note_info.laser:
        found = lane.last_item()
        if found is None:
            continue
        start, section = found
        end = start
        last_point = section.v.last_item()
        if last_point is not None:
            end = start + last_point[0]
        last = max(last, end)
    return last
