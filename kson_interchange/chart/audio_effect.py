"""Audio effect types, definitions, and FX long-event tables.

WHY: FX long notes can carry an audio effect ("retrigger", "flanger", or a
user-defined effect built on one of those types) plus a per-note parameter
table. The KSH writer needs the effect TYPE to decide which parameters it
can carry over, so names have to resolve to types.

HOW: AudioEffectType enumerates the built-in effect types. A name resolves
through the chart's user definitions first and the preset names second.
AudioEffectFXInfo holds the user definitions and the long-event tables:
effect name -> [left lane, right lane] -> pulse -> {param: value}.

RULES:
- Preset names are the snake_case enum values ("pitch_shift")
- Unknown names resolve to UNSPECIFIED
- Parameter values are kept as the raw KSON strings ("1/8", "50%")
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from kson_interchange.core.graph import ByPulse

NUM_FX_LANES = 2

AudioEffectParams = Dict[str, str]


class AudioEffectType(str, enum.Enum):
    UNSPECIFIED = ""
    RETRIGGER = "retrigger"
    GATE = "gate"
    FLANGER = "flanger"
    PITCH_SHIFT = "pitch_shift"
    BITCRUSHER = "bitcrusher"
    PHASER = "phaser"
    WOBBLE = "wobble"
    TAPESTOP = "tapestop"
    ECHO = "echo"
    SIDECHAIN = "sidechain"
    SWITCH_AUDIO = "switch_audio"
    HIGH_PASS_FILTER = "high_pass_filter"
    LOW_PASS_FILTER = "low_pass_filter"
    PEAKING_FILTER = "peaking_filter"


def str_to_audio_effect_type(name: str) -> AudioEffectType:
    """Map a preset effect name to its type; unknown names -> UNSPECIFIED."""
    try:
        return AudioEffectType(name)
    except ValueError:
        return AudioEffectType.UNSPECIFIED


def audio_effect_type_to_str(effect_type: AudioEffectType) -> str:
    return effect_type.value


@dataclass
class AudioEffectDef:
    type: AudioEffectType = AudioEffectType.UNSPECIFIED
    v: AudioEffectParams = field(default_factory=dict)


def _empty_lanes() -> List[ByPulse[AudioEffectParams]]:
    return [ByPulse() for _ in range(NUM_FX_LANES)]


@dataclass
class AudioEffectFXInfo:
    """FX audio effect definitions and long-event parameter tables."""

    def_: List[Tuple[str, AudioEffectDef]] = field(default_factory=list)
    long_event: Dict[str, List[ByPulse[AudioEffectParams]]] = field(default_factory=dict)

    def def_contains(self, name: str) -> bool:
        return any(def_name == name for def_name, _ in self.def_)

    def def_by_name(self, name: str) -> AudioEffectDef:
        for def_name, effect_def in self.def_:
            if def_name == name:
                return effect_def
        raise LookupError(
            "audio.audio_effect.fx.def does not contain name '{}'".format(name)
        )

    def def_as_dict(self) -> Dict[str, AudioEffectDef]:
        return {name: effect_def for name, effect_def in self.def_}

    def long_event_lanes(self, name: str) -> List[ByPulse[AudioEffectParams]]:
        """Return (creating if needed) the per-lane long-event table for an effect."""
        if name not in self.long_event:
            self.long_event[name] = _empty_lanes()
        return self.long_event[name]

    def resolve_type(self, name: str) -> AudioEffectType:
        """Resolve an effect name to a type: user definitions first, then presets."""
        for def_name, effect_def in self.def_:
            if def_name == name:
                return effect_def.type
        return str_to_audio_effect_type(name)


@dataclass
class AudioEffectInfo:
    fx: AudioEffectFXInfo = field(default_factory=AudioEffectFXInfo)


@dataclass
class AudioInfo:
    audio_effect: AudioEffectInfo = field(default_factory=AudioEffectInfo)
