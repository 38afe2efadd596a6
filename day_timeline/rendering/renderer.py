"""Pillow renderer that draws a packed day timeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Sequence

from PIL import Image, ImageColor, ImageDraw, ImageFont

from ..layout import PackedEvent, parse_timestamp
from ..timeline import TEXT_LINE_HEIGHT, Timeline

LOGGER = logging.getLogger(__name__)

RGB = tuple[int, int, int]
DEFAULT_EVENT_COLOR = "#add8e6"


def _font_length(font: ImageFont.ImageFont, text: str) -> float:
    return float(font.getlength(text))


def _load_font(path_candidates: Sequence[Path], size: int) -> ImageFont.ImageFont:
    for candidate in path_candidates:
        if candidate and candidate.exists():
            return ImageFont.truetype(str(candidate), size=size)
    return ImageFont.load_default()


def _default_font_candidates(bold: bool) -> List[Path]:
    names = [
        "DejaVuSans-Bold.ttf" if bold else "DejaVuSans.ttf",
        "Arial Bold.ttf" if bold else "Arial.ttf",
    ]
    candidates: List[Path] = []
    search_dirs = [
        Path("/usr/share/fonts/truetype/dejavu"),
        Path("/usr/share/fonts"),
        Path("/Library/Fonts"),
        Path.home() / ".fonts",
    ]
    for name in names:
        for directory in search_dirs:
            candidates.append(directory / name)
    return candidates


def _parse_color(value: str | None, fallback: str = DEFAULT_EVENT_COLOR) -> RGB:
    if value:
        try:
            return ImageColor.getrgb(value)[:3]  # type: ignore[return-value]
        except ValueError:
            LOGGER.debug("Ignoring invalid event color %r", value)
    return ImageColor.getrgb(fallback)[:3]  # type: ignore[return-value]


@dataclass
class RendererConfig:
    """Fonts, colors and spacing used by :class:`TimelineRenderer`."""

    font_regular_path: Path | None = None
    font_bold_path: Path | None = None
    preview_output_dir: Path | None = None
    background_color: RGB = (255, 255, 255)
    line_color: RGB = (216, 216, 216)
    label_color: RGB = (170, 170, 170)
    text_color: RGB = (97, 91, 115)
    working_hours_color: RGB = (247, 247, 247)
    background_event_color: RGB = (236, 236, 236)
    background_event_text_color: RGB = (106, 109, 118)
    current_marker_color: RGB = (255, 0, 0)
    time_label_font_size: int = 10
    title_font_size: int = 12
    body_font_size: int = 11
    text_line_height: int = TEXT_LINE_HEIGHT
    event_padding: int = 4
    right_padding: int = 0
    bottom_padding: int = 10
    working_hours_overhang: int = 20
    background_event_bleed: int = 5

    def __post_init__(self) -> None:
        if self.preview_output_dir is not None:
            self.preview_output_dir = Path(self.preview_output_dir)
            self.preview_output_dir.mkdir(parents=True, exist_ok=True)

    def _font_candidates(self, bold: bool) -> List[Path]:
        provided = self.font_bold_path if bold else self.font_regular_path
        candidates: List[Path] = []
        if provided is not None:
            candidates.append(Path(provided))
        candidates.extend(_default_font_candidates(bold))
        return candidates

    def font(self, size: int, *, bold: bool = False) -> ImageFont.ImageFont:
        return _load_font(self._font_candidates(bold), size)


class TimelineRenderer:
    """Draw a :class:`~day_timeline.timeline.Timeline` onto a Pillow image."""

    def __init__(self, config: RendererConfig | None = None) -> None:
        self.config = config or RendererConfig()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def canvas_size(self, timeline: Timeline) -> tuple[int, int]:
        cfg = self.config
        width = int(round(timeline.label_margin + timeline.usable_width + cfg.right_padding))
        height = int(round(timeline.canvas_height + cfg.bottom_padding))
        return width, height

    def render(
        self,
        timeline: Timeline,
        *,
        now: datetime | None = None,
        show_current_marker: bool = False,
        preview_name: str | None = None,
    ) -> Image.Image:
        """Render the timeline.

        Args:
            timeline: Timeline whose packed layers are drawn.
            now: Timestamp used for the current-time marker.
            show_current_marker: Draw a line at ``now`` across the events area.
            preview_name: Optional file name for the preview PNG when preview
                mode is enabled.
        Returns:
            An RGB Pillow image.
        """

        cfg = self.config
        image = Image.new("RGB", self.canvas_size(timeline), color=cfg.background_color)
        draw = ImageDraw.Draw(image)

        self._draw_working_hours(draw, timeline)
        self._draw_lines(draw, timeline)
        self._draw_background_events(draw, timeline)
        self._draw_events(draw, timeline)
        if show_current_marker:
            self._draw_current_marker(draw, timeline, now or datetime.now())

        if cfg.preview_output_dir is not None:
            name = preview_name or (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
            output_path = cfg.preview_output_dir / f"{name}.png"
            image.save(output_path)
            LOGGER.info("Wrote timeline preview to %s", output_path)

        return image

    # ------------------------------------------------------------------
    # Rendering helpers
    # ------------------------------------------------------------------
    def _draw_working_hours(self, draw: ImageDraw.ImageDraw, timeline: Timeline) -> None:
        cfg = self.config
        for packed in timeline.packed_working_hours:
            if packed.degenerate or packed.height <= 0:
                continue
            right = packed.left + packed.width + timeline.label_margin + cfg.working_hours_overhang
            draw.rectangle(
                (packed.left, packed.top, right, packed.top + packed.height),
                fill=cfg.working_hours_color,
            )

    def _draw_lines(self, draw: ImageDraw.ImageDraw, timeline: Timeline) -> None:
        cfg = self.config
        label_font = cfg.font(cfg.time_label_font_size)
        right = timeline.label_margin + timeline.usable_width

        for hour, offset, label in timeline.hour_labels():
            if hour != timeline.start:
                draw.line((timeline.label_margin, offset, right, offset), fill=cfg.line_color, width=1)
            if label:
                draw.text(
                    (4, offset - cfg.time_label_font_size // 2),
                    label,
                    font=label_font,
                    fill=cfg.label_color,
                )
        for offset in timeline.half_hour_offsets():
            draw.line((timeline.label_margin, offset, right, offset), fill=cfg.line_color, width=1)

    def _draw_background_events(self, draw: ImageDraw.ImageDraw, timeline: Timeline) -> None:
        cfg = self.config
        font = cfg.font(cfg.title_font_size, bold=True)
        bleed = cfg.background_event_bleed
        for packed in timeline.packed_background_events:
            if packed.degenerate or packed.height <= 0:
                continue
            left = timeline.absolute_left(packed) - bleed
            right = left + packed.width + bleed * 2
            draw.rectangle(
                (left, packed.top, right, packed.top + packed.height),
                fill=cfg.background_event_color,
            )
            title = self._truncate_line(packed.title or "Event", font, int(packed.width))
            draw.text(
                (left + 10, packed.top + 10),
                title,
                font=font,
                fill=cfg.background_event_text_color,
            )

    def _draw_events(self, draw: ImageDraw.ImageDraw, timeline: Timeline) -> None:
        cfg = self.config
        title_font = cfg.font(cfg.title_font_size, bold=True)
        body_font = cfg.font(cfg.body_font_size)

        for packed in timeline.packed_events:
            if packed.degenerate or packed.height <= 0 or packed.width <= 0:
                continue
            left = timeline.absolute_left(packed)
            draw.rectangle(
                (left, packed.top, left + packed.width, packed.top + packed.height),
                fill=_parse_color(packed.color),
            )

            content_left = left + cfg.event_padding
            max_width = max(int(packed.width) - cfg.event_padding * 2, 1)
            y = packed.top + cfg.event_padding
            lines = timeline.visible_lines(packed)

            title = self._truncate_line(packed.title or "Event", title_font, max_width)
            draw.text((content_left, y), title, font=title_font, fill=cfg.text_color)
            y += cfg.text_line_height

            if lines > 1:
                summary_lines = self._wrap_text(
                    packed.summary or "",
                    body_font,
                    max_width=max_width,
                    max_lines=max(lines - 2, 1),
                )
                for line in summary_lines:
                    draw.text((content_left, y), line, font=body_font, fill=cfg.text_color)
                    y += cfg.text_line_height
            if lines > 2:
                draw.text(
                    (content_left, y),
                    self._format_event_time(packed, timeline.format_24h),
                    font=body_font,
                    fill=cfg.text_color,
                )

    def _format_event_time(self, packed: PackedEvent, format_24h: bool) -> str:
        start = parse_timestamp(packed.start)
        end = parse_timestamp(packed.end)
        pattern = "%H:%M" if format_24h else "%I:%M %p"
        start_text = start.strftime(pattern) if start else ""
        end_text = end.strftime(pattern) if end else ""
        return f"{start_text} - {end_text}"

    def _draw_current_marker(self, draw: ImageDraw.ImageDraw, timeline: Timeline, now: datetime) -> None:
        cfg = self.config
        y = timeline.current_time_offset(now)
        marker_left = 40
        draw.line(
            (marker_left, y, timeline.label_margin + timeline.usable_width, y),
            fill=cfg.current_marker_color,
            width=2,
        )

    def _wrap_text(
        self,
        text: str,
        font: ImageFont.ImageFont,
        *,
        max_width: int,
        max_lines: int,
    ) -> List[str]:
        words = text.split()
        if not words:
            return []
        lines: List[str] = []
        current = words[0]
        for word in words[1:]:
            candidate = f"{current} {word}"
            if _font_length(font, candidate) <= max_width:
                current = candidate
            else:
                lines.append(current)
                current = word
        lines.append(current)

        wrapped = [self._truncate_line(line, font, max_width) for line in lines]
        if len(wrapped) <= max_lines:
            return wrapped
        truncated = wrapped[:max_lines]
        truncated[-1] = self._truncate_line(truncated[-1] + "…", font, max_width)
        return truncated

    def _truncate_line(self, line: str, font: ImageFont.ImageFont, max_width: int) -> str:
        if _font_length(font, line) <= max_width:
            return line
        ellipsis = "…"
        current = line
        while current and _font_length(font, current + ellipsis) > max_width:
            current = current[:-1].rstrip()
        return (current + ellipsis) if current else ellipsis


__all__ = ["DEFAULT_EVENT_COLOR", "RendererConfig", "TimelineRenderer"]
