"""Diagnostics containers and the KSH save-time fidelity checker.

WHY: Loads and saves report questionable or lost data instead of failing.
This package holds the report containers and the one analysis pass that
fills them on KSH save.

HOW: diag.py defines warning types and containers, ksh_params.py holds the
table of FX parameters KSH can carry, fidelity.py runs the checks.
"""

from kson_interchange.diagnostics.diag import (
    KshLoadingDiag,
    KshSavingDiag,
    KshSavingWarningType,
    KsonLoadingDiag,
    WarningScope,
)
from kson_interchange.diagnostics.fidelity import KshFidelityChecker, check_ksh_saving_fidelity

__all__ = [
    "KshFidelityChecker",
    "KshLoadingDiag",
    "KshSavingDiag",
    "KshSavingWarningType",
    "KsonLoadingDiag",
    "WarningScope",
    "check_ksh_saving_fidelity",
]
