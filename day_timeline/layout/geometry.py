"""Vertical geometry for the day timeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Final

from ..config import InvalidConfigurationError

DEFAULT_HOUR_HEIGHT: Final[float] = 100.0


def hours_since_midnight(value: datetime | time) -> float:
    """Return the fractional hour of day for ``value``."""

    return value.hour + value.minute / 60 + value.second / 3600 + value.microsecond / 3_600_000_000


@dataclass(frozen=True)
class GeometryMapper:
    """Map times of day onto a canvas showing ``[start_hour, end_hour)``.

    Offsets are never clipped: events before ``start_hour`` produce a negative
    offset and events after ``end_hour`` extend past ``canvas_height``.
    """

    start_hour: float = 0
    end_hour: float = 24
    canvas_height: float | None = None

    def __post_init__(self) -> None:
        if self.end_hour <= self.start_hour:
            raise InvalidConfigurationError(
                f"Visible range end ({self.end_hour}) must be after start ({self.start_hour})."
            )
        if self.canvas_height is None:
            object.__setattr__(self, "canvas_height", self.hours_displayed * DEFAULT_HOUR_HEIGHT)
        elif self.canvas_height <= 0:
            raise InvalidConfigurationError(f"Canvas height must be positive, got {self.canvas_height}.")

    @property
    def hours_displayed(self) -> float:
        return self.end_hour - self.start_hour

    @property
    def pixels_per_hour(self) -> float:
        return self.canvas_height / self.hours_displayed  # type: ignore[operator]

    def offset_for_hours(self, hours: float) -> float:
        return (hours - self.start_hour) * self.pixels_per_hour

    def height_for_hours(self, duration: float) -> float:
        return duration * self.pixels_per_hour

    def offset_for_time(self, value: datetime | time) -> float:
        """Return the vertical offset for the time of day of ``value``."""

        return self.offset_for_hours(hours_since_midnight(value))

    def height_between(self, start: datetime, end: datetime) -> float:
        """Return the pixel height spanned by ``start`` to ``end``.

        The result is non-positive when ``end`` does not follow ``start``.
        """

        return self.height_for_hours((end - start).total_seconds() / 3600)


__all__ = ["DEFAULT_HOUR_HEIGHT", "GeometryMapper", "hours_since_midnight"]
