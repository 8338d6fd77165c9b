"""
Google Calendar API Client - Create and list dashboard events.

Key Features:
=============
1. Create one-hour events on the primary calendar from a schedule draft
2. List the events of a calendar month
3. Map API events into flat ScheduleEvent rows for the schedule view

Time Handling:
==============
Drafts carry a local wall-clock date and time. Events are sent as naive
"YYYY-MM-DDTHH:MM:SS" strings together with the configured IANA time zone
(Asia/Taipei by default), so Google interprets them as local time.

API Reference:
==============
- Events API: https://developers.google.com/calendar/api/v3/reference/events

Usage Example:
==============
    client = GoogleCalendarClient(bootstrap)
    created = await client.create_event(EventDraft(title="丈量", date="2025-06-01"))
    schedule = await client.fetch_schedule()
"""

import calendar as month_calendar
import logging
from datetime import datetime, timedelta
from typing import List, Optional, Tuple
from zoneinfo import ZoneInfo

from app.core.config import settings
from app.environments.base import CalendarClient, InputValidationError
from app.environments.google.auth.schemas import CALENDAR_SCOPES
from app.environments.google.bootstrap import GoogleClientBootstrap
from app.environments.google.calendar.schemas import (
    CalendarEvent,
    CalendarEventsResponse,
    EventCreateRequest,
    EventCreateResponse,
    EventDraft,
    ScheduleEvent,
)


logger = logging.getLogger("studio.environments.google.calendar")


# Events are created with a fixed length
EVENT_DURATION = timedelta(hours=1)

# Maximum page size accepted by events.list
MAX_RESULTS = 2500


class GoogleCalendarClient(CalendarClient):
    """
    Google Calendar API client.

    Attributes:
        bootstrap: Shared, lazily initialized Google client
        timezone: IANA time zone for created events and month bounds
        default_time: Start time used when a draft has none
    """

    # Service identification
    service_name = "calendar"
    required_scopes = CALENDAR_SCOPES

    def __init__(
        self,
        bootstrap: GoogleClientBootstrap,
        timezone: Optional[str] = None,
        default_time: Optional[str] = None,
        calendar_id: str = "primary",
    ):
        self.bootstrap = bootstrap
        self.timezone = timezone or settings.CALENDAR_TIMEZONE
        self.default_time = default_time or settings.DEFAULT_EVENT_TIME
        self.calendar_id = calendar_id

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        json_body: Optional[dict] = None,
    ) -> dict:
        return await self.bootstrap.request(
            "calendar",
            method,
            endpoint,
            params=params,
            json_body=json_body,
        )

    # -------------------------------------------------------------------------
    # EVENT CREATION
    # -------------------------------------------------------------------------

    def build_event_request(self, draft: EventDraft) -> EventCreateRequest:
        """
        Turn a draft into a one-hour EventCreateRequest.

        Raises:
            InputValidationError: Missing title/date or unparseable date/time
        """
        missing = draft.missing_fields()
        if missing:
            raise InputValidationError("請填寫標題和日期", fields=missing)

        time_text = (draft.time or "").strip() or self.default_time
        try:
            start = datetime.strptime(f"{draft.date.strip()} {time_text}", "%Y-%m-%d %H:%M")
        except ValueError:
            raise InputValidationError(
                f"Invalid date/time: {draft.date} {time_text}",
                fields=["date", "time"],
            )

        return EventCreateRequest(
            summary=draft.title.strip(),
            start_datetime=start,
            end_datetime=start + EVENT_DURATION,
            timezone=self.timezone,
            location=draft.location,
            description=self._build_description(draft),
        )

    @staticmethod
    def _build_description(draft: EventDraft) -> str:
        lines = []
        if draft.description:
            lines.append(draft.description)
        if draft.type:
            lines.append(f"類型：{draft.type}")
        if draft.related_id:
            lines.append(f"關聯ID：{draft.related_id}")
        return "\n".join(lines)

    async def create_event(self, draft: EventDraft) -> EventCreateResponse:
        """
        Create an event on the primary calendar.

        Validation happens before the bootstrap is touched, so invalid
        drafts never cause a remote call.

        Raises:
            InputValidationError: Draft is missing title or date
            APIError: Event creation failed
        """
        request = self.build_event_request(draft)

        logger.info(
            "Creating calendar event",
            extra={
                "summary": request.summary,
                "calendar_id": self.calendar_id,
                "start": request.start_datetime.isoformat(),
            }
        )

        response_data = await self._make_request(
            "POST",
            f"calendars/{self.calendar_id}/events",
            json_body=request.to_api_body(),
        )

        created = EventCreateResponse(
            event_id=response_data.get("id", ""),
            summary=response_data.get("summary", request.summary),
            start=request.start_datetime,
            end=request.end_datetime,
            html_link=response_data.get("htmlLink", ""),
            timezone=request.timezone,
            location=request.location,
        )

        logger.info(f"Created event: {created.event_id}")
        return created

    # -------------------------------------------------------------------------
    # EVENT LISTING
    # -------------------------------------------------------------------------

    def month_bounds(self, reference: Optional[datetime] = None) -> Tuple[datetime, datetime]:
        """
        First instant and last second of the month containing `reference`.

        Both bounds are aware datetimes in the calendar time zone.
        """
        tz = ZoneInfo(self.timezone)
        if reference is None:
            reference = datetime.now(tz)
        elif reference.tzinfo is None:
            reference = reference.replace(tzinfo=tz)
        else:
            reference = reference.astimezone(tz)

        last_day = month_calendar.monthrange(reference.year, reference.month)[1]
        start = datetime(reference.year, reference.month, 1, 0, 0, 0, tzinfo=tz)
        end = datetime(reference.year, reference.month, last_day, 23, 59, 59, tzinfo=tz)
        return start, end

    async def list_events(self, time_min: datetime, time_max: datetime) -> List[CalendarEvent]:
        """List single (expanded) events between two instants, by start time."""
        params = {
            "timeMin": time_min.isoformat(),
            "timeMax": time_max.isoformat(),
            "singleEvents": "true",
            "orderBy": "startTime",
            "maxResults": MAX_RESULTS,
        }

        logger.info(
            "Fetching calendar events",
            extra={
                "calendar_id": self.calendar_id,
                "time_min": params["timeMin"],
                "time_max": params["timeMax"],
            }
        )

        response_data = await self._make_request(
            "GET",
            f"calendars/{self.calendar_id}/events",
            params=params,
        )
        events_response = CalendarEventsResponse(**response_data)

        logger.info(f"Fetched {len(events_response.items)} calendar events")
        return events_response.items

    async def list_month_events(self, reference: Optional[datetime] = None) -> List[CalendarEvent]:
        time_min, time_max = self.month_bounds(reference)
        return await self.list_events(time_min, time_max)

    @staticmethod
    def to_schedule_events(events: List[CalendarEvent]) -> List[ScheduleEvent]:
        """Flatten API events; events without a usable date are dropped."""
        schedule = []
        for event in events:
            if event.start is None:
                continue
            event_date = event.start.get_date()
            if not event_date:
                continue
            schedule.append(ScheduleEvent(
                id=event.id,
                title=event.get_display_title(),
                date=event_date,
                time=event.start.get_time(),
            ))
        return schedule

    async def fetch_schedule(self, reference: Optional[datetime] = None) -> List[ScheduleEvent]:
        """Current month's events as ScheduleEvent rows."""
        events = await self.list_month_events(reference)
        return self.to_schedule_events(events)
