"""KSON interchange core: pulse-indexed curves and KSH fidelity diagnostics.

WHY: KSON charts describe timing, camera and laser data as piecewise curves
on an integer pulse clock, and they are routinely down-converted to the
legacy KSH text format, which stores much of that data as integers. This
package holds the pieces every loader, writer and editor shares: the curve
model, point queries, stop baking, and the report of what a KSH save loses.

HOW: Three layers, each independently testable:
  core         - Graph / ByPulse data model, interpolation, curves, stop baking
  chart        - the chart-model fields the core reads (interfaces only)
  diagnostics  - warning containers and the KSH fidelity checker

RULES:
- Nothing here parses or writes files; loaders and writers live elsewhere
- Graphs are treated as immutable by every core function
- Diagnostics inform; they never block or alter a load or save
"""

__version__ = "0.1.0"
