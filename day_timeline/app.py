"""Command line entry point that packs a day of events and writes the layout."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Sequence

from google.oauth2 import service_account

from .calendar import CalendarApiError, GoogleCalendarClient
from .config import ConfigError, TimelineSettings, load_env_file
from .layout import RawEvent
from .rendering import RendererConfig, TimelineRenderer
from .timeline import Timeline

LOGGER = logging.getLogger(__name__)
DEFAULT_TIMEZONE = "UTC"
CALENDAR_SCOPES = ("https://www.googleapis.com/auth/calendar.readonly",)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pack a day of calendar events into a timeline layout")
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Optional path to a .env file loaded before settings are resolved.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    source_group = parser.add_argument_group("Event sources")
    source_group.add_argument(
        "--events",
        type=Path,
        default=None,
        help="JSON file holding a list of events with start, end, title, summary, color and disabled keys.",
    )
    source_group.add_argument(
        "--background-events",
        type=Path,
        default=None,
        help="JSON file of background events drawn behind the main events.",
    )
    source_group.add_argument(
        "--working-hours",
        type=Path,
        default=None,
        help="JSON file of working-hour blocks shaded across the full row.",
    )
    source_group.add_argument(
        "--calendar-id",
        action="append",
        default=None,
        help="Google Calendar ID to fetch events from (repeatable).",
    )
    source_group.add_argument(
        "--credentials",
        type=Path,
        default=None,
        help="Service account JSON for Google Calendar (defaults to GOOGLE_APPLICATION_CREDENTIALS).",
    )
    source_group.add_argument(
        "--timezone",
        type=str,
        default=None,
        help="IANA timezone selecting which day is fetched from Google Calendar.",
    )
    source_group.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Day to fetch (YYYY-MM-DD). Defaults to today.",
    )

    layout_group = parser.add_argument_group("Layout options")
    layout_group.add_argument("--start", type=int, default=None, help="First visible hour.")
    layout_group.add_argument("--end", type=int, default=None, help="Hour at which the visible range ends.")
    layout_group.add_argument("--width", type=float, default=None, help="Usable width in pixels.")
    layout_group.add_argument("--hour-height", type=float, default=None, help="Pixels per hour.")
    layout_group.add_argument("--gutter", type=float, default=None, help="Pixels between adjacent columns.")
    layout_group.add_argument(
        "--format",
        choices=("24h", "12h"),
        default=None,
        help="Hour label format.",
    )

    output_group = parser.add_argument_group("Output options")
    output_group.add_argument(
        "--json",
        type=str,
        default="-",
        help="Where to write the packed layout as JSON ('-' for stdout).",
    )
    output_group.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Optional PNG path for a rendered preview.",
    )
    output_group.add_argument(
        "--current-marker",
        action="store_true",
        help="Draw the current-time marker on the rendered preview.",
    )

    return parser


def resolve_settings(args: argparse.Namespace) -> TimelineSettings:
    load_env_file(args.env_file)
    settings = TimelineSettings.from_env()
    overrides: dict[str, Any] = {}
    if args.start is not None:
        overrides["start_hour"] = args.start
    if args.end is not None:
        overrides["end_hour"] = args.end
    if args.width is not None:
        overrides["usable_width"] = args.width
    if args.hour_height is not None:
        overrides["hour_height"] = args.hour_height
    if args.gutter is not None:
        overrides["gutter"] = args.gutter
    if args.format is not None:
        overrides["format_24h"] = args.format == "24h"
    return replace(settings, **overrides).validate()


def load_events_file(path: Path | None) -> List[RawEvent]:
    """Read a JSON list of event mappings."""

    if path is None:
        return []
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, list):
        raise ConfigError(f"{path.name!r} must contain a JSON list of events.")
    events: List[RawEvent] = []
    for position, item in enumerate(payload):
        if not isinstance(item, dict):
            raise ConfigError(f"Event #{position} in {path.name!r} is not an object.")
        events.append(RawEvent.from_mapping(item))
    return events


def default_calendar_client_factory(
    calendar_ids: Sequence[str],
    *,
    credentials_path: Path | None,
    timezone: str,
) -> GoogleCalendarClient:
    path = credentials_path or os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
    if not path:
        raise ConfigError("Google Calendar credentials are not configured")
    credentials = service_account.Credentials.from_service_account_file(str(path), scopes=list(CALENDAR_SCOPES))
    return GoogleCalendarClient(credentials, calendar_ids, timezone)


def write_layout(timeline: Timeline, destination: str) -> None:
    payload = {
        "start": timeline.start,
        "end": timeline.end,
        "usable_width": timeline.usable_width,
        "canvas_height": timeline.canvas_height,
        "events": [packed.to_dict() for packed in timeline.packed_events],
        "background_events": [packed.to_dict() for packed in timeline.packed_background_events],
        "working_hours": [packed.to_dict() for packed in timeline.packed_working_hours],
    }
    text = json.dumps(payload, indent=2)
    if destination == "-":
        sys.stdout.write(text + "\n")
    else:
        Path(destination).write_text(text + "\n", encoding="utf-8")
        LOGGER.info("Wrote packed layout to %s", destination)


def main(
    argv: Optional[Iterable[str]] = None,
    *,
    calendar_client_factory: Callable[..., GoogleCalendarClient] = default_calendar_client_factory,
    renderer_factory: Callable[[], TimelineRenderer] = lambda: TimelineRenderer(RendererConfig()),
    now_provider: Callable[[], datetime] = datetime.now,
) -> None:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    if args.events is not None and args.calendar_id:
        parser.error("--events and --calendar-id are mutually exclusive")

    try:
        settings = resolve_settings(args)
        events = load_events_file(args.events)
        background_events = load_events_file(args.background_events)
        working_hours = load_events_file(args.working_hours)
    except (ConfigError, OSError, json.JSONDecodeError) as exc:
        parser.error(str(exc))

    if args.calendar_id:
        timezone = args.timezone or os.environ.get("TIMELINE_TIMEZONE") or DEFAULT_TIMEZONE
        try:
            client = calendar_client_factory(
                args.calendar_id,
                credentials_path=args.credentials,
                timezone=timezone,
            )
            events = client.fetch_day_events(args.date)
        except (CalendarApiError, ConfigError) as exc:
            LOGGER.exception("Failed to fetch events from Google Calendar")
            parser.error(str(exc))
        LOGGER.info("Fetched %d events from Google Calendar", len(events))

    timeline = Timeline.from_settings(
        settings,
        events,
        background_events=background_events,
        working_hours=working_hours,
    )
    write_layout(timeline, args.json)

    if args.output is not None:
        image = renderer_factory().render(
            timeline,
            now=now_provider(),
            show_current_marker=args.current_marker,
        )
        args.output.parent.mkdir(parents=True, exist_ok=True)
        image.save(args.output)
        LOGGER.info("Wrote timeline image to %s", args.output)


if __name__ == "__main__":
    main()
