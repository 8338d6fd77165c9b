"""
Google Calendar Schemas - Data structures for calendar operations.

These Pydantic models represent Google Calendar API responses
in a clean, typed format for use throughout the application.

Reference: https://developers.google.com/calendar/api/v3/reference
"""

from datetime import datetime
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field


# Title shown for events without a summary
UNTITLED_EVENT = "(未命名行程)"


class EventTime(BaseModel):
    """
    Event start or end time.

    Google Calendar API returns times in one of two formats:
    - dateTime: For timed events (e.g., "2025-06-01T10:00:00+08:00")
    - date: For all-day events (e.g., "2025-06-01")
    """
    date_time: Optional[datetime] = Field(None, alias="dateTime")
    date: Optional[str] = Field(None)  # YYYY-MM-DD format for all-day events
    time_zone: Optional[str] = Field(None, alias="timeZone")

    def is_all_day(self) -> bool:
        """Check if this is an all-day event (date only, no time)."""
        return self.date is not None and self.date_time is None

    def get_date(self) -> Optional[str]:
        """YYYY-MM-DD in the event's own offset."""
        if self.date:
            return self.date
        if self.date_time:
            return self.date_time.strftime("%Y-%m-%d")
        return None

    def get_time(self) -> Optional[str]:
        """HH:MM wall-clock time, None for all-day events."""
        if self.date_time:
            return self.date_time.strftime("%H:%M")
        return None

    class Config:
        populate_by_name = True


class CalendarEvent(BaseModel):
    """
    A Google Calendar event.

    Contains the fields of the event resource the console reads.

    Reference: https://developers.google.com/calendar/api/v3/reference/events
    """
    id: str = Field(..., description="Unique event identifier")
    summary: Optional[str] = Field(None, description="Event title")
    description: Optional[str] = Field(None, description="Event description")
    location: Optional[str] = Field(None, description="Event location")

    # Times
    start: Optional[EventTime] = Field(None, description="Event start time")
    end: Optional[EventTime] = Field(None, description="Event end time")

    # Status
    status: Optional[str] = Field(None, description="confirmed, tentative, cancelled")

    html_link: Optional[str] = Field(None, alias="htmlLink")

    class Config:
        populate_by_name = True

    def is_all_day(self) -> bool:
        """Check if this is an all-day event."""
        if self.start:
            return self.start.is_all_day()
        return False

    def get_display_title(self) -> str:
        """Get a display-friendly title (with fallback)."""
        return self.summary or UNTITLED_EVENT


class CalendarEventsResponse(BaseModel):
    """
    Response from the Calendar Events list API.

    A month fits in one page (maxResults), so pagination fields are not read.
    """
    items: List[CalendarEvent] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# DASHBOARD EVENTS
# ---------------------------------------------------------------------------

class EventDraft(BaseModel):
    """
    Event as entered in the schedule form.

    Title and date are required but validated by the client, not here, so
    that a missing value is reported before any remote call.
    """
    title: Optional[str] = Field(None, description="Event title")
    date: Optional[str] = Field(None, description="YYYY-MM-DD")
    time: Optional[str] = Field(None, description="HH:MM, defaults to the configured start time")
    description: Optional[str] = Field(None)
    location: Optional[str] = Field(None)
    type: Optional[str] = Field(None, description="Event category, e.g. 丈量 or 施工")
    related_id: Optional[str] = Field(None, alias="relatedId", description="Linked project id")

    class Config:
        populate_by_name = True

    def missing_fields(self) -> List[str]:
        missing = []
        if not (self.title and self.title.strip()):
            missing.append("title")
        if not (self.date and self.date.strip()):
            missing.append("date")
        return missing


class ScheduleEvent(BaseModel):
    """Flattened event used by the schedule view."""
    id: str
    title: str
    date: str
    time: Optional[str] = None


# ---------------------------------------------------------------------------
# EVENT CREATION SCHEMAS
# ---------------------------------------------------------------------------

class EventCreateRequest(BaseModel):
    """
    Request schema for creating a timed calendar event.

    Example:
        EventCreateRequest(
            summary="丈量",
            start_datetime=datetime(2025, 6, 1, 10, 0),
            end_datetime=datetime(2025, 6, 1, 11, 0),
            timezone="Asia/Taipei",
        )
    """
    summary: str = Field(..., description="Event title/summary")
    start_datetime: datetime = Field(..., description="Local start time")
    end_datetime: datetime = Field(..., description="Local end time")
    timezone: str = Field(default="Asia/Taipei", description="IANA time zone of the wall-clock times")
    location: Optional[str] = Field(None, description="Event location")
    description: Optional[str] = Field(None, description="Event description")

    def to_api_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "summary": self.summary,
            "description": self.description or "",
            "start": {
                "dateTime": self.start_datetime.strftime("%Y-%m-%dT%H:%M:%S"),
                "timeZone": self.timezone,
            },
            "end": {
                "dateTime": self.end_datetime.strftime("%Y-%m-%dT%H:%M:%S"),
                "timeZone": self.timezone,
            },
        }
        if self.location:
            body["location"] = self.location
        return body


class EventCreateResponse(BaseModel):
    """
    Response schema after creating a calendar event.

    Contains the key details of the created event.
    """
    event_id: str = Field(..., description="Google Calendar event ID")
    summary: str = Field(..., description="Event title/summary")
    start: datetime = Field(..., description="Event start time")
    end: datetime = Field(..., description="Event end time")
    html_link: str = Field("", description="Link to view event in Google Calendar")
    timezone: Optional[str] = Field(None, description="Event timezone")
    location: Optional[str] = Field(None, description="Event location")
