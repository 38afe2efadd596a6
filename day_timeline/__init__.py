"""Top-level package for the day timeline layout engine."""

from __future__ import annotations

from .layout import GeometryMapper, PackedEvent, RawEvent, pack_events
from .timeline import Timeline

__all__ = [
    "__version__",
    "GeometryMapper",
    "PackedEvent",
    "RawEvent",
    "Timeline",
    "pack_events",
]

__version__ = "0.1.0"
