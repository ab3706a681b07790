"""Which FX long-event parameters survive a KSH round trip.

WHY: KSH encodes an FX long note's effect as "Name;param1;param2" with
integer params whose meaning depends on the effect type. Only a few KSON
parameters map onto those integers, and only when their value is written
in a form the mapping understands. The fidelity checker needs that
knowledge as data so a new effect type is a table change, not new code.

HOW: PRESERVABLE_FX_PARAMS maps an AudioEffectType to {param name:
validator}. A validator takes (value, tolerance) and returns True when the
KSON string converts to the KSH integer without loss. Effect types missing
from the table keep no parameters at all.

RULES:
- retrigger / gate / wobble: wave_length as "1/N"
- echo: wave_length as "1/N", feedback_level as a rate
- pitch_shift: pitch as an integer
- bitcrusher: reduction as "N" or "Nsamples"
- tapestop: speed as a rate
- A rate survives as "N%", "1/N" with 100 % N == 0, or a decimal
  whose value x 100 is an integer
"""

from __future__ import annotations

import math
import re
from typing import Callable, Dict, List, Optional

from kson_interchange.chart.audio_effect import AudioEffectParams, AudioEffectType
from kson_interchange.config import KSH_FLOAT_TOLERANCE

ParamValidator = Callable[[str, float], bool]

_ONE_OVER_N_RE = re.compile(r"^1/([0-9]+)$")
_PERCENT_RE = re.compile(r"^([+-]?[0-9]+)%$")
_INTEGER_RE = re.compile(r"^[+-]?[0-9]+$")
_SAMPLES_RE = re.compile(r"^[0-9]+(samples)?$")


def _is_integral(value: float, tolerance: float) -> bool:
    return math.isclose(value, round(value), rel_tol=0.0, abs_tol=tolerance)


def _parse_float(value: str) -> Optional[float]:
    try:
        parsed = float(value)
    except ValueError:
        return None
    if not math.isfinite(parsed):
        return None
    return parsed


def is_wave_length(value: str, tolerance: float = KSH_FLOAT_TOLERANCE) -> bool:
    """A KSH wave length is written as 1/N with N >= 1.

    The form is exact, so tolerance is accepted only to share the
    validator signature.
    """
    match = _ONE_OVER_N_RE.match(value.strip())
    return match is not None and int(match.group(1)) > 0


def is_rate(value: str, tolerance: float = KSH_FLOAT_TOLERANCE) -> bool:
    """A KSH rate is an integer percentage."""
    text = value.strip()
    if _PERCENT_RE.match(text):
        return True
    match = _ONE_OVER_N_RE.match(text)
    if match is not None:
        denominator = int(match.group(1))
        return denominator > 0 and 100 % denominator == 0
    parsed = _parse_float(text)
    return parsed is not None and _is_integral(parsed * 100.0, tolerance)


def is_integer(value: str, tolerance: float = KSH_FLOAT_TOLERANCE) -> bool:
    text = value.strip()
    if _INTEGER_RE.match(text):
        return True
    parsed = _parse_float(text)
    return parsed is not None and _is_integral(parsed, tolerance)


def is_sample_count(value: str, tolerance: float = KSH_FLOAT_TOLERANCE) -> bool:
    return _SAMPLES_RE.match(value.strip()) is not None


PRESERVABLE_FX_PARAMS: Dict[AudioEffectType, Dict[str, ParamValidator]] = {
    AudioEffectType.RETRIGGER: {"wave_length": is_wave_length},
    AudioEffectType.GATE: {"wave_length": is_wave_length},
    AudioEffectType.WOBBLE: {"wave_length": is_wave_length},
    AudioEffectType.ECHO: {"wave_length": is_wave_length, "feedback_level": is_rate},
    AudioEffectType.PITCH_SHIFT: {"pitch": is_integer},
    AudioEffectType.BITCRUSHER: {"reduction": is_sample_count},
    AudioEffectType.TAPESTOP: {"speed": is_rate},
}


def supports_long_event_params(effect_type: AudioEffectType) -> bool:
    return effect_type in PRESERVABLE_FX_PARAMS


def lost_params(
    effect_type: AudioEffectType,
    params: AudioEffectParams,
    tolerance: float = KSH_FLOAT_TOLERANCE,
) -> List[str]:
    """Return the parameter names that KSH cannot carry, in sorted order.

    For an effect type without KSH parameters, every name is returned.
    tolerance is handed to every validator, so numeric forms are judged
    with the same tolerance as the rest of a fidelity check.
    """
    rules = PRESERVABLE_FX_PARAMS.get(effect_type, {})
    lost: List[str] = []
    for name in sorted(params):
        validator = rules.get(name)
        if validator is None or not validator(params[name], tolerance):
            lost.append(name)
    return lost
