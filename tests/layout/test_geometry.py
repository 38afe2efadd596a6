from __future__ import annotations

from datetime import datetime, time

import pytest

from day_timeline.config import InvalidConfigurationError
from day_timeline.layout import GeometryMapper, hours_since_midnight


def test_default_canvas_is_one_hundred_pixels_per_hour() -> None:
    mapper = GeometryMapper()

    assert mapper.canvas_height == 2400
    assert mapper.pixels_per_hour == 100
    assert mapper.offset_for_time(time(9, 30)) == pytest.approx(950.0)


def test_offsets_are_relative_to_visible_start() -> None:
    mapper = GeometryMapper(start_hour=8, end_hour=20, canvas_height=600)

    assert mapper.pixels_per_hour == 50
    assert mapper.offset_for_hours(8) == 0
    assert mapper.offset_for_time(datetime(2024, 1, 15, 14, 15)) == pytest.approx(312.5)
    assert mapper.height_for_hours(1.5) == pytest.approx(75.0)


def test_offsets_are_not_clipped() -> None:
    mapper = GeometryMapper(start_hour=8, end_hour=18, canvas_height=1000)

    assert mapper.offset_for_time(time(6, 0)) == pytest.approx(-200.0)
    assert mapper.offset_for_time(time(19, 0)) == pytest.approx(1100.0)


def test_height_between_handles_reversed_ranges() -> None:
    mapper = GeometryMapper()
    start = datetime(2024, 1, 15, 10, 0)
    end = datetime(2024, 1, 15, 9, 15)

    assert mapper.height_between(end, start) == pytest.approx(75.0)
    assert mapper.height_between(start, end) == pytest.approx(-75.0)
    assert mapper.height_between(start, start) == 0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"start_hour": 9, "end_hour": 9},
        {"start_hour": 10, "end_hour": 8},
        {"canvas_height": 0},
        {"canvas_height": -50},
    ],
)
def test_invalid_configuration(kwargs: dict) -> None:
    with pytest.raises(InvalidConfigurationError):
        GeometryMapper(**kwargs)


def test_hours_since_midnight_includes_seconds() -> None:
    assert hours_since_midnight(time(6, 30, 36)) == pytest.approx(6.51)
