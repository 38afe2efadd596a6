"""State container that keeps packed timeline layers in sync with their inputs."""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any, Callable, List, Optional, Sequence

from .config import InvalidConfigurationError, TimelineSettings
from .layout import GeometryMapper, PackedEvent, RawEvent, pack_events

LOGGER = logging.getLogger(__name__)

TEXT_LINE_HEIGHT = 17
CURRENT_TIME_SCROLL_PADDING = 10

_PACKING_INPUTS = (
    "events",
    "background_events",
    "working_hours",
    "start",
    "end",
    "usable_width",
    "hour_height",
    "gutter",
)
_DISPLAY_INPUTS = ("label_margin", "format_24h", "scroll_to_first", "scroll_to_current")


class Timeline:
    """Packed layout for a single day, recomputed whenever an input changes.

    Inputs are compared by identity, so callers replacing an event list with a
    new list trigger a repack while passing the same list again does not.
    ``start`` and ``end`` are whole hours since the grid draws one line per hour.
    """

    def __init__(
        self,
        events: Sequence[RawEvent],
        *,
        background_events: Sequence[RawEvent] = (),
        working_hours: Sequence[RawEvent] = (),
        start: int = 0,
        end: int = 24,
        usable_width: float,
        hour_height: float = 100.0,
        label_margin: float = 59.0,
        gutter: float = 0.0,
        format_24h: bool = True,
        scroll_to_first: bool = False,
        scroll_to_current: bool = False,
    ) -> None:
        self.events = events
        self.background_events = background_events
        self.working_hours = working_hours
        self.start = start
        self.end = end
        self.usable_width = usable_width
        self.hour_height = hour_height
        self.label_margin = label_margin
        self.gutter = gutter
        self.format_24h = format_24h
        self.scroll_to_first = scroll_to_first
        self.scroll_to_current = scroll_to_current

        self.packed_events: List[PackedEvent] = []
        self.packed_background_events: List[PackedEvent] = []
        self.packed_working_hours: List[PackedEvent] = []
        self._repack()

    @classmethod
    def from_settings(
        cls,
        settings: TimelineSettings,
        events: Sequence[RawEvent],
        **kwargs: Any,
    ) -> "Timeline":
        settings.validate()
        return cls(
            events,
            start=settings.start_hour,
            end=settings.end_hour,
            usable_width=settings.usable_width,
            hour_height=settings.hour_height,
            label_margin=settings.label_margin,
            gutter=settings.gutter,
            format_24h=settings.format_24h,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Packing
    # ------------------------------------------------------------------
    @property
    def canvas_height(self) -> float:
        return (self.end - self.start) * self.hour_height

    @property
    def geometry(self) -> GeometryMapper:
        return GeometryMapper(start_hour=self.start, end_hour=self.end, canvas_height=self.canvas_height)

    def update(self, **changes: Any) -> bool:
        """Apply ``changes`` and repack if any packing input changed identity.

        Returns ``True`` when the packed layers were recomputed. A change that
        fails validation raises :class:`InvalidConfigurationError` and leaves
        every input and packed layer as it was.
        """

        unknown = set(changes) - set(_PACKING_INPUTS) - set(_DISPLAY_INPUTS)
        if unknown:
            raise TypeError(f"Unknown timeline inputs: {', '.join(sorted(unknown))}")

        previous = {name: getattr(self, name) for name in changes}
        changed = False
        for name, value in changes.items():
            if previous[name] is not value:
                setattr(self, name, value)
                changed = changed or name in _PACKING_INPUTS

        if changed:
            try:
                self._repack()
            except InvalidConfigurationError:
                for name, value in previous.items():
                    setattr(self, name, value)
                raise
        return changed

    def _repack(self) -> None:
        for name in ("start", "end"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidConfigurationError(f"Visible {name} hour must be a whole hour, got {value!r}.")
        if self.hour_height <= 0:
            raise InvalidConfigurationError(f"Hour height must be positive, got {self.hour_height}.")
        options = dict(
            start=self.start,
            end=self.end,
            canvas_height=self.canvas_height,
            gutter=self.gutter,
        )
        working_hours = pack_events(self.working_hours, self.usable_width, **options)
        background_events = pack_events(self.background_events, self.usable_width, **options)
        events = pack_events(self.events, self.usable_width, **options)

        self.packed_working_hours = working_hours
        self.packed_background_events = background_events
        self.packed_events = events
        LOGGER.debug(
            "Packed %d events, %d background events and %d working-hour blocks",
            len(self.packed_events),
            len(self.packed_background_events),
            len(self.packed_working_hours),
        )

    # ------------------------------------------------------------------
    # Grid
    # ------------------------------------------------------------------
    def hour_labels(self) -> List[tuple[int, float, str]]:
        """Return ``(hour, offset, label)`` for every hour line in the visible range."""

        mapper = self.geometry
        return [
            (hour, mapper.offset_for_hours(hour), self._format_hour_label(hour))
            for hour in range(self.start, self.end + 1)
        ]

    def half_hour_offsets(self) -> List[float]:
        mapper = self.geometry
        return [mapper.offset_for_hours(hour + 0.5) for hour in range(self.start, self.end)]

    def _format_hour_label(self, hour: int) -> str:
        if hour == self.start:
            return ""
        if self.format_24h:
            return "23:59" if hour == 24 else f"{hour}:00"
        if hour < 12:
            return f"{hour} AM"
        if hour == 12:
            return "12 PM"
        if hour == 24:
            return "12 AM"
        return f"{hour - 12} PM"

    # ------------------------------------------------------------------
    # Scrolling
    # ------------------------------------------------------------------
    def first_event_offset(self) -> Optional[float]:
        """Offset that shows the first event with one hour of context above it."""

        tops = [packed.top for packed in self.packed_events if not packed.degenerate]
        if not tops:
            return None
        return min(tops) - self.geometry.pixels_per_hour

    def current_time_offset(self, now: datetime) -> float:
        return self.geometry.offset_for_time(now)

    def scroll_target(self, now: datetime) -> Optional[float]:
        if self.events and self.scroll_to_first:
            return self.first_event_offset()
        if not self.events and self.scroll_to_current:
            return self.current_time_offset(now) - CURRENT_TIME_SCROLL_PADDING
        return None

    # ------------------------------------------------------------------
    # Event helpers
    # ------------------------------------------------------------------
    def absolute_left(self, packed: PackedEvent) -> float:
        return self.label_margin + packed.left

    def event_for(self, packed: PackedEvent) -> Optional[RawEvent]:
        if 0 <= packed.index < len(self.events):
            return self.events[packed.index]
        return None

    def press(self, packed: PackedEvent, handler: Callable[[RawEvent], Any]) -> bool:
        """Invoke ``handler`` with the original event unless it is disabled."""

        event = self.event_for(packed)
        if event is None or event.disabled:
            return False
        handler(event)
        return True

    @staticmethod
    def visible_lines(packed: PackedEvent) -> int:
        if packed.height <= 0:
            return 0
        return math.floor(packed.height / TEXT_LINE_HEIGHT)


__all__ = ["TEXT_LINE_HEIGHT", "Timeline"]
