from __future__ import annotations

from datetime import datetime

import pytest

from day_timeline import RawEvent, Timeline
from day_timeline.config import InvalidConfigurationError, TimelineSettings


def _events() -> list[RawEvent]:
    return [
        RawEvent("2024-01-15T09:00:00", "2024-01-15T10:00:00", "Standup"),
        RawEvent("2024-01-15T09:30:00", "2024-01-15T10:30:00", "Review", disabled=True),
    ]


def test_layers_are_packed_independently() -> None:
    timeline = Timeline(
        _events(),
        background_events=[RawEvent("2024-01-15T09:00:00", "2024-01-15T12:00:00", "Focus")],
        working_hours=[RawEvent("2024-01-15T08:00:00", "2024-01-15T17:00:00", "Work")],
        usable_width=300,
    )

    assert [p.width for p in timeline.packed_events] == [150.0, 150.0]
    assert timeline.packed_background_events[0].width == 300.0
    assert timeline.packed_working_hours[0].top == pytest.approx(800.0)


def test_update_repacks_only_when_inputs_change_identity() -> None:
    events = _events()
    timeline = Timeline(events, usable_width=300)
    original = timeline.packed_events

    assert timeline.update(events=events, start=0) is False
    assert timeline.packed_events is original

    assert timeline.update(events=list(events)) is True
    assert timeline.packed_events is not original
    assert timeline.packed_events == original

    assert timeline.update(start=8, end=12) is True
    assert timeline.packed_events[0].top == pytest.approx(100.0)


def test_update_rejects_unknown_inputs() -> None:
    timeline = Timeline([], usable_width=300)

    with pytest.raises(TypeError):
        timeline.update(colour="red")


def test_update_with_display_only_changes_does_not_repack() -> None:
    timeline = Timeline(_events(), usable_width=300)
    original = timeline.packed_events

    assert timeline.update(label_margin=80, format_24h=False) is False
    assert timeline.packed_events is original
    assert timeline.label_margin == 80


def test_invalid_hour_height_raises() -> None:
    with pytest.raises(InvalidConfigurationError):
        Timeline([], usable_width=300, hour_height=0)


def test_hour_labels_in_24h_format() -> None:
    timeline = Timeline([], usable_width=300)

    labels = timeline.hour_labels()

    assert labels[0] == (0, 0.0, "")
    assert labels[9] == (9, 900.0, "9:00")
    assert labels[13] == (13, 1300.0, "13:00")
    assert labels[-1] == (24, 2400.0, "23:59")
    assert timeline.half_hour_offsets()[:2] == [50.0, 150.0]


def test_hour_labels_in_12h_format() -> None:
    timeline = Timeline([], usable_width=300, start=6, format_24h=False)

    labels = {hour: text for hour, _, text in timeline.hour_labels()}

    assert labels[6] == ""
    assert labels[7] == "7 AM"
    assert labels[12] == "12 PM"
    assert labels[15] == "3 PM"
    assert labels[24] == "12 AM"
    assert timeline.hour_labels()[1][1] == pytest.approx(100.0)


def test_scroll_targets() -> None:
    now = datetime(2024, 1, 15, 12, 0)
    with_events = Timeline(_events(), usable_width=300, scroll_to_first=True)
    empty = Timeline([], usable_width=300, scroll_to_current=True)
    idle = Timeline(_events(), usable_width=300, scroll_to_current=True)

    assert with_events.first_event_offset() == pytest.approx(800.0)
    assert with_events.scroll_target(now) == pytest.approx(800.0)
    assert empty.scroll_target(now) == pytest.approx(1190.0)
    assert idle.scroll_target(now) is None


def test_first_event_offset_ignores_degenerate_events() -> None:
    timeline = Timeline([RawEvent("bad", "worse", "Broken")], usable_width=300)

    assert timeline.first_event_offset() is None


def test_current_time_offset_follows_visible_range() -> None:
    timeline = Timeline([], usable_width=300, start=8, end=18, hour_height=60)

    assert timeline.current_time_offset(datetime(2024, 1, 15, 12, 30)) == pytest.approx(270.0)


def test_press_resolves_original_event_and_respects_disabled() -> None:
    events = _events()
    timeline = Timeline(events, usable_width=300)
    pressed: list[RawEvent] = []
    by_title = {p.title: p for p in timeline.packed_events}

    assert timeline.press(by_title["Standup"], pressed.append) is True
    assert timeline.press(by_title["Review"], pressed.append) is False
    assert pressed == [events[0]]
    assert pressed[0] is events[0]


def test_absolute_left_and_visible_lines() -> None:
    timeline = Timeline(_events(), usable_width=300, label_margin=59)
    review = next(p for p in timeline.packed_events if p.title == "Review")

    assert timeline.absolute_left(review) == pytest.approx(209.0)
    assert Timeline.visible_lines(review) == 5


def test_from_settings_applies_configuration() -> None:
    settings = TimelineSettings(start_hour=8, end_hour=20, usable_width=200, hour_height=50, gutter=4)

    timeline = Timeline.from_settings(settings, _events(), scroll_to_first=True)

    assert timeline.canvas_height == 600
    assert timeline.packed_events[0].top == pytest.approx(50.0)
    assert timeline.packed_events[0].width == pytest.approx(96.0)
    assert timeline.scroll_to_first is True


def test_failed_update_keeps_previous_inputs_and_layers() -> None:
    timeline = Timeline(_events(), start=8, end=18, usable_width=300)
    original = timeline.packed_events

    with pytest.raises(InvalidConfigurationError):
        timeline.update(end=6)

    assert timeline.end == 18
    assert timeline.packed_events is original
    assert timeline.hour_labels()[-1][0] == 18


@pytest.mark.parametrize("changes", [{"usable_width": 0}, {"hour_height": 0}, {"gutter": -1}])
def test_failed_update_restores_every_changed_input(changes: dict) -> None:
    events = _events()
    timeline = Timeline(events, usable_width=300)
    original = timeline.packed_events
    replacement = [RawEvent("2024-01-15T11:00:00", "2024-01-15T12:00:00", "Lunch")]

    with pytest.raises(InvalidConfigurationError):
        timeline.update(events=replacement, **changes)

    assert timeline.events is events
    assert (timeline.usable_width, timeline.hour_height, timeline.gutter) == (300, 100.0, 0.0)
    assert timeline.packed_events is original


@pytest.mark.parametrize("kwargs", [{"start": 8.5}, {"end": 17.5}, {"start": True}])
def test_fractional_visible_hours_are_rejected(kwargs: dict) -> None:
    with pytest.raises(InvalidConfigurationError):
        Timeline([], usable_width=300, **kwargs)


def test_update_to_fractional_end_hour_is_rejected() -> None:
    timeline = Timeline([], usable_width=300, start=8, end=18)

    with pytest.raises(InvalidConfigurationError):
        timeline.update(end=17.5)

    assert timeline.end == 18
