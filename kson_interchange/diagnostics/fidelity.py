"""KSH save-time fidelity checks.

WHY: KSON stores floats where KSH stores integers: camera zoom is an
integer, laser positions sit on a 0..50 grid, and FX long notes carry at
most two integer effect params. Saving a KSON chart as KSH therefore
rounds, clamps, or drops data. Users need to know exactly what before
they overwrite a file, but the save itself must never fail because of it.

HOW: KshFidelityChecker walks the read-only ChartData once and appends
warnings to a KshSavingDiag. Each category is an independent private
check; the grid resolution, tolerance and clamp limits are constructor
arguments with defaults from config.

RULES:
- ZoomFractionLost: one warning naming every zoom graph with a
  non-integral v or vf
- LaserPrecisionLost: one warning per laser section with an off-grid v or
  vf; wide sections accept 0.25 and 0.75 exactly
- FXLongEventParamsLost: one warning per long event that loses params;
  unsupported effect types lose all params
- *Clamped: one warning per category naming the offending field
- The checker never mutates the chart and never raises for fidelity issues
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional, Tuple

from kson_interchange import config
from kson_interchange.chart.models import LASER_LANE_NAMES, ChartData
from kson_interchange.core.graph import Graph, LaserSection
from kson_interchange.diagnostics.diag import KshSavingDiag, KshSavingWarningType
from kson_interchange.diagnostics.ksh_params import lost_params, supports_long_event_params

logger = logging.getLogger(__name__)

# Legacy wide-laser centre positions with dedicated KSH characters
_WIDE_LASER_SPECIAL_VALUES = (0.25, 0.75)

_ZOOM_FIELDS = ("zoom_top", "zoom_bottom", "zoom_side")


def _graph_values(graph: Graph) -> Iterable[float]:
    for point in graph.values():
        yield point.v.v
        yield point.v.vf


def _quote_all(names: Iterable[str]) -> str:
    return ", ".join('"{}"'.format(name) for name in names)


class KshFidelityChecker:
    """Reports what a chart loses when it is written in KSH format.

    Args:
        laser_x_max: Legacy laser grid resolution R (positions are n/R).
        tolerance: Absolute tolerance for "is this value on the grid".
        zoom_abs_max, center_split_abs_max, rotation_deg_abs_max,
        manual_tilt_abs_max, bpm_max: Clamp limits of the KSH writer.
    """

    def __init__(
        self,
        laser_x_max: Optional[int] = None,
        tolerance: Optional[float] = None,
        zoom_abs_max: float = config.KSH_ZOOM_ABS_MAX,
        center_split_abs_max: float = config.KSH_CENTER_SPLIT_ABS_MAX,
        rotation_deg_abs_max: float = config.KSH_ROTATION_DEG_ABS_MAX,
        manual_tilt_abs_max: float = config.KSH_MANUAL_TILT_ABS_MAX,
        bpm_max: float = config.KSH_BPM_MAX,
    ) -> None:
        self.laser_x_max = config.KSH_LASER_X_MAX if laser_x_max is None else laser_x_max
        if self.laser_x_max <= 0:
            raise ValueError("laser_x_max must be positive")
        self.tolerance = config.KSH_FLOAT_TOLERANCE if tolerance is None else tolerance
        self.zoom_abs_max = zoom_abs_max
        self.center_split_abs_max = center_split_abs_max
        self.rotation_deg_abs_max = rotation_deg_abs_max
        self.manual_tilt_abs_max = manual_tilt_abs_max
        self.bpm_max = bpm_max

    # -- public API ---------------------------------------------------------

    def check(self, chart: ChartData) -> KshSavingDiag:
        """Run every check and return a fresh KshSavingDiag."""
        diag = KshSavingDiag()
        self.check_into(chart, diag)
        return diag

    def check_into(self, chart: ChartData, diag: KshSavingDiag) -> None:
        """Run every check and append the warnings to an existing container."""
        before = len(diag)
        self._check_bpm_clamp(chart, diag)
        self._check_camera_clamps(chart, diag)
        self._check_zoom_fraction(chart, diag)
        self._check_laser_precision(chart, diag)
        self._check_fx_long_event_params(chart, diag)
        logger.info("KSH fidelity check produced %d warning(s)", len(diag) - before)

    # -- helpers ------------------------------------------------------------

    def _is_integral(self, value: float) -> bool:
        return math.isclose(value, round(value), rel_tol=0.0, abs_tol=self.tolerance)

    def _is_on_laser_grid(self, value: float, wide: bool) -> bool:
        if wide and any(
            math.isclose(value, special, rel_tol=0.0, abs_tol=self.tolerance)
            for special in _WIDE_LASER_SPECIAL_VALUES
        ):
            return True
        return self._is_integral(value * self.laser_x_max)

    def _warn(self, diag: KshSavingDiag, type_: KshSavingWarningType, message: str) -> None:
        logger.debug("%s: %s", type_.value, message)
        diag.add(type_, message)

    # -- checks -------------------------------------------------------------

    def _check_bpm_clamp(self, chart: ChartData, diag: KshSavingDiag) -> None:
        if chart.compat.is_ksh_version_older_than(config.KSH_VER_BPM_LIMIT_ADDED):
            return
        clamped = [pulse for pulse, bpm in chart.beat.bpm.items() if bpm > self.bpm_max]
        if clamped:
            self._warn(
                diag,
                KshSavingWarningType.BPM_CLAMPED,
                "BPM values above {:g} at pulse(s) {} will be clamped in KSH format.".format(
                    self.bpm_max, ", ".join(str(p) for p in clamped),
                ),
            )

    def _check_camera_clamps(self, chart: ChartData, diag: KshSavingDiag) -> None:
        body = chart.camera.cam.body
        checks: List[Tuple[KshSavingWarningType, List[Tuple[str, Graph]], float]] = [
            (
                KshSavingWarningType.ZOOM_VALUE_CLAMPED,
                [(name, getattr(body, name)) for name in _ZOOM_FIELDS],
                self.zoom_abs_max,
            ),
            (
                KshSavingWarningType.CENTER_SPLIT_CLAMPED,
                [("center_split", body.center_split)],
                self.center_split_abs_max,
            ),
            (
                KshSavingWarningType.ROTATION_DEG_CLAMPED,
                [("rotation_deg", body.rotation_deg)],
                self.rotation_deg_abs_max,
            ),
            (
                KshSavingWarningType.MANUAL_TILT_CLAMPED,
                [("tilt", chart.camera.tilt)],
                self.manual_tilt_abs_max,
            ),
        ]
        for warning_type, graphs, abs_max in checks:
            names = [
                name for name, graph in graphs
                if any(abs(value) > abs_max for value in _graph_values(graph))
            ]
            if names:
                self._warn(
                    diag,
                    warning_type,
                    "Values of {} exceed +/-{:g} and will be clamped in KSH format.".format(
                        _quote_all(names), abs_max,
                    ),
                )

    def _check_zoom_fraction(self, chart: ChartData, diag: KshSavingDiag) -> None:
        body = chart.camera.cam.body
        names = [
            name for name in _ZOOM_FIELDS
            if not all(self._is_integral(value) for value in _graph_values(getattr(body, name)))
        ]
        if names:
            self._warn(
                diag,
                KshSavingWarningType.ZOOM_FRACTION_LOST,
                "Fractional values of {} will be rounded to integers in KSH format.".format(
                    _quote_all(names),
                ),
            )

    def _check_laser_precision(self, chart: ChartData, diag: KshSavingDiag) -> None:
        for lane_idx, lane in enumerate(chart.note.laser):
            lane_name = LASER_LANE_NAMES[lane_idx] if lane_idx < len(LASER_LANE_NAMES) else str(lane_idx)
            for start, section in lane.items():
                if self._section_is_on_grid(section):
                    continue
                self._warn(
                    diag,
                    KshSavingWarningType.LASER_PRECISION_LOST,
                    "Laser section at pulse {} on the {} lane has positions off the 1/{} grid; "
                    "they will be rounded in KSH format.".format(start, lane_name, self.laser_x_max),
                )

    def _section_is_on_grid(self, section: LaserSection) -> bool:
        wide = section.wide()
        return all(self._is_on_laser_grid(value, wide) for value in _graph_values(section.v))

    def _check_fx_long_event_params(self, chart: ChartData, diag: KshSavingDiag) -> None:
        fx = chart.audio.audio_effect.fx
        for effect_name in sorted(fx.long_event):
            effect_type = fx.resolve_type(effect_name)
            supported = supports_long_event_params(effect_type)
            for lane_idx, lane in enumerate(fx.long_event[effect_name]):
                for pulse, params in lane.items():
                    if not params:
                        continue
                    if not supported:
                        self._warn(
                            diag,
                            KshSavingWarningType.FX_LONG_EVENT_PARAMS_LOST,
                            'FX long event "{}" at pulse {} (lane {}): all parameters will be lost '
                            "in KSH format ({}).".format(
                                effect_name, pulse, lane_idx, _quote_all(sorted(params)),
                            ),
                        )
                        continue
                    lost = lost_params(effect_type, params, self.tolerance)
                    if lost:
                        self._warn(
                            diag,
                            KshSavingWarningType.FX_LONG_EVENT_PARAMS_LOST,
                            'FX long event "{}" at pulse {} (lane {}): parameter(s) {} will be lost '
                            "in KSH format.".format(effect_name, pulse, lane_idx, _quote_all(lost)),
                        )


def check_ksh_saving_fidelity(chart: ChartData, **kwargs) -> KshSavingDiag:
    """Convenience wrapper: build a KshFidelityChecker and run it once."""
    return KshFidelityChecker(**kwargs).check(chart)
