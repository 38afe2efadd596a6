"""Calendar feeds that supply events to the day timeline."""

from .google_client import EVENT_COLORS, CalendarApiError, GoogleCalendarClient

__all__ = [
    "EVENT_COLORS",
    "GoogleCalendarClient",
    "CalendarApiError",
]
