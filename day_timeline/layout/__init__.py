"""Geometry and overlap packing for the day timeline."""

from .geometry import DEFAULT_HOUR_HEIGHT, GeometryMapper, hours_since_midnight
from .packer import PackedEvent, RawEvent, pack_events, parse_timestamp

__all__ = [
    "DEFAULT_HOUR_HEIGHT",
    "GeometryMapper",
    "PackedEvent",
    "RawEvent",
    "hours_since_midnight",
    "pack_events",
    "parse_timestamp",
]
