"""Chart-model shapes consumed by the interchange core.

WHY: The full chart model belongs to the KSON loader and the editor. The
core only reads a few fields (camera graphs, laser sections, FX long
events, BPM, compat version), so this package defines just those.

RULES:
- Dataclasses only; no parsing or serialization here
- The core treats every instance as read-only
"""
