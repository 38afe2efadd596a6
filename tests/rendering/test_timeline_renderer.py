from __future__ import annotations

from datetime import datetime
from pathlib import Path

from day_timeline import RawEvent, Timeline
from day_timeline.rendering import RendererConfig, TimelineRenderer


def _timeline(events: list[RawEvent], **kwargs) -> Timeline:
    return Timeline(events, start=8, end=12, usable_width=200, label_margin=59, **kwargs)


def test_canvas_size_covers_margin_and_visible_hours() -> None:
    renderer = TimelineRenderer()
    image = renderer.render(_timeline([]))

    assert image.size == (259, 410)
    assert image.mode == "RGB"


def test_events_are_filled_with_their_color() -> None:
    timeline = _timeline([RawEvent("2024-01-15T09:00:00", "2024-01-15T10:00:00", "A", color="#ff0000")])

    image = TimelineRenderer().render(timeline)

    assert image.getpixel((250, 190)) == (255, 0, 0)
    assert image.getpixel((250, 90)) == (255, 255, 255)


def test_overlapping_events_are_drawn_side_by_side() -> None:
    timeline = _timeline(
        [
            RawEvent("2024-01-15T09:00:00", "2024-01-15T10:00:00", "A", color="#ff0000"),
            RawEvent("2024-01-15T09:00:00", "2024-01-15T10:00:00", "B", color="#0000ff"),
        ]
    )

    image = TimelineRenderer().render(timeline)

    assert image.getpixel((150, 190)) == (255, 0, 0)
    assert image.getpixel((250, 190)) == (0, 0, 255)


def test_invalid_color_falls_back_to_default() -> None:
    timeline = _timeline([RawEvent("2024-01-15T09:00:00", "2024-01-15T10:00:00", "A", color="not-a-color")])

    image = TimelineRenderer().render(timeline)

    assert image.getpixel((250, 190)) == (173, 216, 230)


def test_degenerate_events_are_not_drawn() -> None:
    timeline = _timeline([RawEvent("2024-01-15T10:00:00", "2024-01-15T09:00:00", "Backwards", color="#ff0000")])

    image = TimelineRenderer().render(timeline)

    assert image.getpixel((250, 190)) == (255, 255, 255)
    assert image.getpixel((250, 110)) == (255, 255, 255)


def test_working_hours_and_background_layers() -> None:
    config = RendererConfig()
    timeline = _timeline(
        [],
        working_hours=[RawEvent("2024-01-15T09:00:00", "2024-01-15T11:00:00", "Work")],
        background_events=[RawEvent("2024-01-15T10:00:00", "2024-01-15T11:00:00", "Focus")],
    )

    image = TimelineRenderer(config).render(timeline)

    assert image.getpixel((50, 125)) == config.working_hours_color
    assert image.getpixel((250, 290)) == config.background_event_color
    assert image.getpixel((50, 350)) == config.background_color


def test_current_marker_is_drawn_at_now() -> None:
    config = RendererConfig()
    timeline = _timeline([])

    image = TimelineRenderer(config).render(
        timeline,
        now=datetime(2024, 1, 15, 10, 15),
        show_current_marker=True,
    )

    assert image.getpixel((200, 225)) == config.current_marker_color


def test_preview_is_written_when_enabled(tmp_path: Path) -> None:
    config = RendererConfig(preview_output_dir=tmp_path / "previews")
    timeline = _timeline([RawEvent("2024-01-15T09:00:00", "2024-01-15T10:00:00", "A", summary="Room")])

    TimelineRenderer(config).render(timeline, preview_name="sample")

    assert (tmp_path / "previews" / "sample.png").exists()
