"""Diagnostics containers for chart loading and KSH saving.

WHY: Loading and saving charts never fail on questionable data; they do
their best and report what went wrong or what was lost. Callers (the KSH
writer, the KSON reader, editors, players) decide whether to show, log,
or ignore those reports, so the reports have to be plain data.

HOW: Each operation gets one container holding an append-only list of
warnings. A warning is {type, scope, message}; the type enum differs per
operation family. BaseDiag provides rendering and filtering; to_dict()
produces a JSON-friendly payload validated against diag_schema.json.

RULES:
- One container per load/save operation; nothing is persisted
- Warnings are kept in insertion order
- player_warnings() drops EDITOR_ONLY warnings; editor_warnings() keeps all
- to_dict() output must validate against diag_schema.json
"""

from __future__ import annotations

import enum
import json
from abc import ABC
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema

_SCHEMA_PATH = Path(__file__).resolve().parent / "diag_schema.json"

_CACHED_SCHEMA: Optional[Dict[str, Any]] = None


def _get_schema() -> Dict[str, Any]:
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


class WarningScope(str, enum.Enum):
    ALL = "all"
    EDITOR_ONLY = "editor_only"


class KshSavingWarningType(str, enum.Enum):
    BPM_CLAMPED = "BpmClamped"
    ZOOM_VALUE_CLAMPED = "ZoomValueClamped"
    CENTER_SPLIT_CLAMPED = "CenterSplitClamped"
    MANUAL_TILT_CLAMPED = "ManualTiltClamped"
    ROTATION_DEG_CLAMPED = "RotationDegClamped"
    ZOOM_FRACTION_LOST = "ZoomFractionLost"
    LASER_PRECISION_LOST = "LaserPrecisionLost"
    FX_LONG_EVENT_PARAMS_LOST = "FXLongEventParamsLost"


class KshLoadingWarningType(str, enum.Enum):
    TITLE_NOT_AT_BEGINNING = "TitleNotAtBeginning"
    MISSING_TIME_SIG_AT_ZERO = "MissingTimeSigAtZero"
    AUDIO_EFFECT_MISSING_TYPE = "AudioEffectMissingType"
    AUDIO_EFFECT_INVALID_TYPE = "AudioEffectInvalidType"
    UNCOMMITTED_BT_NOTE = "UncommittedBTNote"
    UNCOMMITTED_FX_NOTE = "UncommittedFXNote"
    UNDEFINED_AUDIO_EFFECT = "UndefinedAudioEffect"
    SUB_32ND_SLAM_LASERS = "Sub32ndSlamLasers"
    MEASURE_SPLIT_NOT_DIVISIBLE = "MeasureSplitNotDivisible"
    UNEXPECTED_ERROR = "UnexpectedError"


class KsonLoadingWarningType(str, enum.Enum):
    INVALID_GRAPH_VALUE_FORMAT = "InvalidGraphValueFormat"
    INVALID_BY_PULSE_ENTRY_FORMAT = "InvalidByPulseEntryFormat"
    INVALID_GRAPH_ENTRY_FORMAT = "InvalidGraphEntryFormat"
    INVALID_BY_MEASURE_IDX_ENTRY_FORMAT = "InvalidByMeasureIdxEntryFormat"
    INVALID_NOTE_ENTRY_FORMAT = "InvalidNoteEntryFormat"
    INVALID_LASER_SECTION_FORMAT = "InvalidLaserSectionFormat"
    MISSING_FORMAT_VERSION = "MissingFormatVersion"
    INVALID_FORMAT_VERSION = "InvalidFormatVersion"
    NEWER_FORMAT_VERSION = "NewerFormatVersion"
    JSON_PARSE_ERROR = "JsonParseError"
    JSON_TYPE_ERROR = "JsonTypeError"
    UNEXPECTED_ERROR = "UnexpectedError"


@dataclass
class DiagWarning:
    """One diagnostic record.

    Attributes:
        type: Category enum member (family depends on the container).
        message: Human-readable description naming the affected field(s).
        scope: Who should see it; EDITOR_ONLY warnings are hidden from players.
    """

    type: enum.Enum
    message: str
    scope: WarningScope = WarningScope.ALL

    def to_string(self) -> str:
        return "[{}] {}".format(self.type.value, self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "scope": self.scope.value,
            "message": self.message,
        }


@dataclass
class KshLoadingWarning(DiagWarning):
    line_no: int = -1

    def to_string(self) -> str:
        if self.line_no < 0:
            return super().to_string()
        return "[{}] line {}: {}".format(self.type.value, self.line_no, self.message)

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["line_no"] = self.line_no
        return data


class BaseDiag(ABC):
    """Append-only warning container shared by every diagnostics family.

    Subclasses set ``kind`` (the payload discriminator) and ``warning_type``
    (the enum accepted by add()).
    """

    kind: str = ""
    warning_type: type = enum.Enum

    def __init__(self) -> None:
        self.warnings: List[DiagWarning] = []

    def __len__(self) -> int:
        return len(self.warnings)

    def _make_warning(self, type_: enum.Enum, message: str, scope: WarningScope, **extra: Any) -> DiagWarning:
        return DiagWarning(type=type_, message=message, scope=scope)

    def add(
        self,
        type_: enum.Enum,
        message: str,
        scope: WarningScope = WarningScope.ALL,
        **extra: Any,
    ) -> DiagWarning:
        if not isinstance(type_, self.warning_type):
            raise TypeError(
                "{} does not accept warning type {!r}".format(type(self).__name__, type_)
            )
        warning = self._make_warning(type_, message, scope, **extra)
        self.warnings.append(warning)
        return warning

    def of_type(self, type_: enum.Enum) -> List[DiagWarning]:
        return [w for w in self.warnings if w.type == type_]

    def player_warnings(self) -> List[str]:
        return [w.to_string() for w in self.warnings if w.scope == WarningScope.ALL]

    def editor_warnings(self) -> List[str]:
        return [w.to_string() for w in self.warnings]

    def to_strings(self) -> List[str]:
        return self.editor_warnings()

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly payload, validated against diag_schema.json.

        Raises:
            jsonschema.ValidationError: if the payload does not match the schema.
        """
        data = {
            "kind": self.kind,
            "warnings": [w.to_dict() for w in self.warnings],
        }
        jsonschema.validate(instance=data, schema=_get_schema())
        return data


class KshSavingDiag(BaseDiag):
    kind = "ksh_saving"
    warning_type = KshSavingWarningType


class KshLoadingDiag(BaseDiag):
    kind = "ksh_loading"
    warning_type = KshLoadingWarningType

    def _make_warning(self, type_: enum.Enum, message: str, scope: WarningScope, **extra: Any) -> DiagWarning:
        return KshLoadingWarning(
            type=type_,
            message=message,
            scope=scope,
            line_no=extra.get("line_no", -1),
        )

    def has_sub_32nd_slam_lasers(self) -> bool:
        return bool(self.of_type(KshLoadingWarningType.SUB_32ND_SLAM_LASERS))


class KsonLoadingDiag(BaseDiag):
    kind = "kson_loading"
    warning_type = KsonLoadingWarningType
