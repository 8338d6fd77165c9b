"""
Google Calendar Module - Calendar API Integration

Features:
=========
- Create one-hour events from schedule drafts (Asia/Taipei by default)
- List the current month's events for the schedule view
"""

from app.environments.google.calendar.client import GoogleCalendarClient
from app.environments.google.calendar.schemas import (
    CalendarEvent,
    EventCreateResponse,
    EventDraft,
    EventTime,
    ScheduleEvent,
)

__all__ = [
    "GoogleCalendarClient",
    "CalendarEvent",
    "EventCreateResponse",
    "EventDraft",
    "EventTime",
    "ScheduleEvent",
]
