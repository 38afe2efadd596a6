#!/usr/bin/env python3
"""Render a sample day timeline with overlapping events to a PNG preview."""

from __future__ import annotations

import argparse
from datetime import datetime
from pathlib import Path
import sys

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from day_timeline import RawEvent, Timeline
from day_timeline.rendering import TimelineRenderer


PREVIEWS_DIR = PROJECT_ROOT / "previews"
DEFAULT_PNG_OUTPUT = PREVIEWS_DIR / "timeline_sample.png"

SAMPLE_EVENTS = [
    RawEvent("2024-01-15 08:30:00", "2024-01-15 09:15:00", "Standup", "Daily sync", "#c8e6c9"),
    RawEvent("2024-01-15 09:00:00", "2024-01-15 11:00:00", "Design review", "Room 4", "#ffe0b2"),
    RawEvent("2024-01-15 09:00:00", "2024-01-15 10:00:00", "Interview", "Backend candidate"),
    RawEvent("2024-01-15 10:00:00", "2024-01-15 11:00:00", "1:1", "Weekly check-in", "#f8bbd0"),
    RawEvent("2024-01-15 12:00:00", "2024-01-15 13:00:00", "Lunch", None, "#d1c4e9"),
    RawEvent("2024-01-15 14:00:00", "2024-01-15 15:30:00", "Planning", "Q1 roadmap"),
    RawEvent("2024-01-15 14:30:00", "2024-01-15 15:00:00", "Call", "Vendor", "#b3e5fc", True),
]
SAMPLE_WORKING_HOURS = [RawEvent("2024-01-15 09:00:00", "2024-01-15 17:00:00", "Working hours")]
SAMPLE_BACKGROUND = [RawEvent("2024-01-15 16:00:00", "2024-01-15 17:00:00", "Focus time")]


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_PNG_OUTPUT,
        help="Where to write the preview PNG (defaults to previews/timeline_sample.png).",
    )
    parser.add_argument("--start", type=int, default=7, help="First visible hour.")
    parser.add_argument("--end", type=int, default=19, help="Last visible hour.")
    parser.add_argument("--width", type=float, default=421.0, help="Usable width in pixels.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    args.output.parent.mkdir(parents=True, exist_ok=True)

    timeline = Timeline(
        SAMPLE_EVENTS,
        background_events=SAMPLE_BACKGROUND,
        working_hours=SAMPLE_WORKING_HOURS,
        start=args.start,
        end=args.end,
        usable_width=args.width,
    )
    image = TimelineRenderer().render(
        timeline,
        now=datetime(2024, 1, 15, 10, 20),
        show_current_marker=True,
    )
    image.save(args.output)

    print(f"Wrote preview to {args.output}")


if __name__ == "__main__":
    main()
