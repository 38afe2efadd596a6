"""Overlap packing for events laid out on a single-day timeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, List, Mapping, Optional, Sequence

from ..config import InvalidConfigurationError, parse_bool
from .geometry import GeometryMapper, hours_since_midnight

LOGGER = logging.getLogger(__name__)

DEFAULT_EVENT_DURATION = timedelta(hours=1)

Timestamp = str | datetime | None


@dataclass(frozen=True)
class RawEvent:
    """An event as supplied by the caller.

    ``title``, ``summary``, ``color`` and ``disabled`` are display metadata and
    are carried through packing untouched.
    """

    start: Timestamp
    end: Timestamp
    title: str = ""
    summary: Optional[str] = None
    color: Optional[str] = None
    disabled: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RawEvent":
        return cls(
            start=data.get("start"),
            end=data.get("end"),
            title=str(data.get("title") or ""),
            summary=data.get("summary"),
            color=data.get("color"),
            disabled=_coerce_disabled(data.get("disabled")),
        )


@dataclass(frozen=True)
class PackedEvent:
    """Layout rectangle for one :class:`RawEvent`, in usable-width coordinates."""

    event: RawEvent
    index: int
    top: float
    height: float
    left: float
    width: float
    column: int = 0
    span: int = 1
    columns: int = 1
    degenerate: bool = False

    @property
    def start(self) -> Timestamp:
        return self.event.start

    @property
    def end(self) -> Timestamp:
        return self.event.end

    @property
    def title(self) -> str:
        return self.event.title

    @property
    def summary(self) -> Optional[str]:
        return self.event.summary

    @property
    def color(self) -> Optional[str]:
        return self.event.color

    @property
    def disabled(self) -> bool:
        return self.event.disabled

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "start": _serialize_timestamp(self.start),
            "end": _serialize_timestamp(self.end),
            "title": self.title,
            "summary": self.summary,
            "color": self.color,
            "disabled": self.disabled,
            "top": self.top,
            "height": self.height,
            "left": self.left,
            "width": self.width,
            "column": self.column,
            "span": self.span,
            "columns": self.columns,
            "degenerate": self.degenerate,
        }


@dataclass(frozen=True)
class _Interval:
    index: int
    start: datetime
    end: datetime

    def overlaps(self, other: "_Interval") -> bool:
        return self.start < other.end and other.start < self.end


def _coerce_disabled(value: Any) -> bool:
    if value is None or isinstance(value, bool):
        return bool(value)
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        try:
            return parse_bool(value)
        except ValueError:
            pass
    LOGGER.warning("Treating unrecognised disabled flag %r as false", value)
    return False


def parse_timestamp(value: Timestamp) -> Optional[datetime]:
    """Parse ``value`` into a naive wall-clock datetime.

    Accepts ``datetime`` objects and ISO-8601 strings (a trailing ``Z`` and a
    space separator are both allowed). Offsets are dropped rather than
    converted so every event is compared on the wall clock it was written in.
    Returns :data:`None` when the value cannot be parsed.
    """

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        cleaned = value.strip()
        if cleaned.endswith(("Z", "z")):
            cleaned = cleaned[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(cleaned)
        except ValueError:
            return None
    else:
        return None
    return parsed.replace(tzinfo=None)


def pack_events(
    events: Sequence[RawEvent],
    usable_width: float,
    *,
    start: float = 0,
    end: float = 24,
    canvas_height: float | None = None,
    gutter: float = 0.0,
) -> List[PackedEvent]:
    """Lay out ``events`` so that events overlapping in time never share space.

    All events are assumed to fall on the same day: ``top`` only reflects the
    time of day, so events on different dates that do not overlap each get
    the full width at the same height.

    Args:
        events: Events for a single day. Input order only matters as the final
            tie-breaker between events with identical timestamps.
        usable_width: Width in pixels available to event rectangles.
        start: First visible hour.
        end: Hour at which the visible range ends.
        canvas_height: Height in pixels of the visible range. Defaults to 100
            pixels per visible hour.
        gutter: Pixels trimmed from the right of every packed rectangle.
    Returns:
        One :class:`PackedEvent` per input event. Packed events come first,
        cluster by cluster in start order, followed by degenerate events in
        input order.
    Raises:
        InvalidConfigurationError: If the width, height or hour range is not
            usable.
    """

    if usable_width <= 0:
        raise InvalidConfigurationError(f"Usable width must be positive, got {usable_width}.")
    if gutter < 0:
        raise InvalidConfigurationError(f"Gutter must not be negative, got {gutter}.")
    mapper = GeometryMapper(start_hour=start, end_hour=end, canvas_height=canvas_height)

    intervals: List[_Interval] = []
    degenerate: List[PackedEvent] = []
    for index, event in enumerate(events):
        interval = _resolve_interval(index, event)
        if interval is None:
            degenerate.append(_degenerate_event(index, event, mapper, usable_width))
        else:
            intervals.append(interval)

    intervals.sort(key=lambda item: (item.start, item.end, item.index))

    packed: List[PackedEvent] = []
    for cluster in _clusters(intervals):
        packed.extend(_pack_cluster(cluster, events, mapper, usable_width, gutter))
    packed.extend(degenerate)
    return packed


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _resolve_interval(index: int, event: RawEvent) -> Optional[_Interval]:
    start = parse_timestamp(event.start)
    if start is None:
        LOGGER.warning("Event %d (%r) has an unparseable start %r", index, event.title, event.start)
        return None

    if event.end is None or (isinstance(event.end, str) and not event.end.strip()):
        end = start + DEFAULT_EVENT_DURATION
    else:
        end = parse_timestamp(event.end)
        if end is None:
            LOGGER.warning("Event %d (%r) has an unparseable end %r", index, event.title, event.end)
            return None

    if end <= start:
        LOGGER.warning("Event %d (%r) ends at or before its start", index, event.title)
        return None
    return _Interval(index=index, start=start, end=end)


def _degenerate_event(
    index: int,
    event: RawEvent,
    mapper: GeometryMapper,
    usable_width: float,
) -> PackedEvent:
    start = parse_timestamp(event.start)
    end = parse_timestamp(event.end)
    anchor = start or end
    top = mapper.offset_for_time(anchor) if anchor is not None else 0.0
    height = mapper.height_between(start, end) if start is not None and end is not None else 0.0
    return PackedEvent(
        event=event,
        index=index,
        top=top,
        height=min(height, 0.0),
        left=0.0,
        width=float(usable_width),
        column=0,
        span=1,
        columns=0,
        degenerate=True,
    )


def _clusters(intervals: Sequence[_Interval]) -> List[List[_Interval]]:
    clusters: List[List[_Interval]] = []
    current: List[_Interval] = []
    latest_end: Optional[datetime] = None

    for interval in intervals:
        if latest_end is not None and interval.start >= latest_end:
            clusters.append(current)
            current = []
            latest_end = None
        current.append(interval)
        if latest_end is None or interval.end > latest_end:
            latest_end = interval.end

    if current:
        clusters.append(current)
    return clusters


def _assign_columns(cluster: Sequence[_Interval]) -> List[int]:
    column_ends: List[datetime] = []
    assigned: List[int] = []
    for interval in cluster:
        for col, column_end in enumerate(column_ends):
            if column_end <= interval.start:
                column_ends[col] = interval.end
                assigned.append(col)
                break
        else:
            column_ends.append(interval.end)
            assigned.append(len(column_ends) - 1)
    return assigned


def _column_span(
    position: int,
    cluster: Sequence[_Interval],
    assigned: Sequence[int],
    column_count: int,
) -> int:
    interval = cluster[position]
    blocked = {
        assigned[other]
        for other, candidate in enumerate(cluster)
        if other != position and candidate.overlaps(interval)
    }
    span = 1
    for col in range(assigned[position] + 1, column_count):
        if col in blocked:
            break
        span += 1
    return span


def _pack_cluster(
    cluster: Sequence[_Interval],
    events: Sequence[RawEvent],
    mapper: GeometryMapper,
    usable_width: float,
    gutter: float,
) -> List[PackedEvent]:
    assigned = _assign_columns(cluster)
    column_count = max(assigned) + 1
    LOGGER.debug(
        "Packing cluster of %d events starting %s into %d columns",
        len(cluster),
        cluster[0].start.isoformat(),
        column_count,
    )

    packed: List[PackedEvent] = []
    for position, interval in enumerate(cluster):
        column = assigned[position]
        span = _column_span(position, cluster, assigned, column_count)
        left = usable_width * column / column_count
        width = max(usable_width * span / column_count - gutter, 0.0)
        packed.append(
            PackedEvent(
                event=events[interval.index],
                index=interval.index,
                top=mapper.offset_for_hours(hours_since_midnight(interval.start)),
                height=mapper.height_between(interval.start, interval.end),
                left=left,
                width=width,
                column=column,
                span=span,
                columns=column_count,
            )
        )
    return packed


def _serialize_timestamp(value: Timestamp) -> Optional[str]:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


__all__ = [
    "DEFAULT_EVENT_DURATION",
    "PackedEvent",
    "RawEvent",
    "pack_events",
    "parse_timestamp",
]
