"""
Tests for the Google Calendar client.

These tests verify:
- One-hour events at the default 10:00 start in Asia/Taipei
- Description lines for type and related id
- Validation before any remote call
- Month bounds and list parameters
- Mapping API events into schedule rows
"""

import pytest
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock
from zoneinfo import ZoneInfo

from app.environments.base import InputValidationError
from app.environments.google.calendar.client import GoogleCalendarClient
from app.environments.google.calendar.schemas import CalendarEvent, EventDraft


@pytest.fixture
def bootstrap() -> MagicMock:
    fake = MagicMock()
    fake.request = AsyncMock(return_value={
        "id": "evt-1",
        "summary": "丈量",
        "htmlLink": "https://calendar.google.com/event?eid=evt-1",
    })
    return fake


@pytest.fixture
def calendar(bootstrap) -> GoogleCalendarClient:
    return GoogleCalendarClient(bootstrap, timezone="Asia/Taipei", default_time="10:00")


# ---------------------------------------------------------------------------
# EVENT CREATION
# ---------------------------------------------------------------------------

class TestCreateEvent:
    """Tests for create_event() and build_event_request()."""

    @pytest.mark.asyncio
    async def test_default_time_and_one_hour_length(self, calendar, bootstrap):
        created = await calendar.create_event(EventDraft(title="丈量", date="2025-06-01"))

        body = bootstrap.request.call_args.kwargs["json_body"]
        assert body["start"] == {"dateTime": "2025-06-01T10:00:00", "timeZone": "Asia/Taipei"}
        assert body["end"] == {"dateTime": "2025-06-01T11:00:00", "timeZone": "Asia/Taipei"}
        assert created.end - created.start == timedelta(hours=1)
        assert created.event_id == "evt-1"

    @pytest.mark.asyncio
    async def test_inserts_into_primary_calendar(self, calendar, bootstrap):
        await calendar.create_event(EventDraft(title="丈量", date="2025-06-01"))

        api, method, endpoint = bootstrap.request.call_args.args
        assert (api, method, endpoint) == ("calendar", "POST", "calendars/primary/events")

    @pytest.mark.asyncio
    async def test_explicit_time_is_used(self, calendar, bootstrap):
        await calendar.create_event(EventDraft(title="施工", date="2025-06-01", time="14:30"))

        body = bootstrap.request.call_args.kwargs["json_body"]
        assert body["start"]["dateTime"] == "2025-06-01T14:30:00"
        assert body["end"]["dateTime"] == "2025-06-01T15:30:00"

    @pytest.mark.asyncio
    async def test_event_late_in_day_ends_next_day(self, calendar, bootstrap):
        await calendar.create_event(EventDraft(title="夜間施工", date="2025-06-01", time="23:30"))

        body = bootstrap.request.call_args.kwargs["json_body"]
        assert body["end"]["dateTime"] == "2025-06-02T00:30:00"

    @pytest.mark.asyncio
    async def test_description_carries_type_and_related_id(self, calendar, bootstrap):
        draft = EventDraft(
            title="丈量",
            date="2025-06-01",
            description="帶雷射測距儀",
            type="丈量",
            relatedId="p-1",
            location="台北市信義區",
        )

        await calendar.create_event(draft)

        body = bootstrap.request.call_args.kwargs["json_body"]
        assert body["description"] == "帶雷射測距儀\n類型：丈量\n關聯ID：p-1"
        assert body["location"] == "台北市信義區"

    @pytest.mark.asyncio
    async def test_missing_title_fails_before_remote_call(self, calendar, bootstrap):
        with pytest.raises(InputValidationError) as exc_info:
            await calendar.create_event(EventDraft(title="  ", date="2025-06-01"))

        assert exc_info.value.fields == ["title"]
        bootstrap.request.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_date_fails_before_remote_call(self, calendar, bootstrap):
        with pytest.raises(InputValidationError) as exc_info:
            await calendar.create_event(EventDraft(title="丈量"))

        assert exc_info.value.fields == ["date"]
        bootstrap.request.assert_not_called()

    @pytest.mark.asyncio
    async def test_unparseable_date_fails_before_remote_call(self, calendar, bootstrap):
        with pytest.raises(InputValidationError):
            await calendar.create_event(EventDraft(title="丈量", date="06/01/2025"))

        bootstrap.request.assert_not_called()


# ---------------------------------------------------------------------------
# EVENT LISTING
# ---------------------------------------------------------------------------

class TestListMonthEvents:
    """Tests for month_bounds() and list_month_events()."""

    def test_month_bounds_cover_whole_month(self, calendar):
        start, end = calendar.month_bounds(datetime(2025, 2, 14, 12, 0))

        tz = ZoneInfo("Asia/Taipei")
        assert start == datetime(2025, 2, 1, 0, 0, 0, tzinfo=tz)
        assert end == datetime(2025, 2, 28, 23, 59, 59, tzinfo=tz)

    def test_month_bounds_converts_aware_reference(self, calendar):
        # 2025-06-30 20:00 UTC is already July 1st in Taipei
        start, _ = calendar.month_bounds(datetime(2025, 6, 30, 20, 0, tzinfo=ZoneInfo("UTC")))

        assert (start.year, start.month) == (2025, 7)

    @pytest.mark.asyncio
    async def test_list_parameters(self, calendar, bootstrap):
        bootstrap.request.return_value = {"items": []}

        await calendar.list_month_events(datetime(2025, 6, 15))

        params = bootstrap.request.call_args.kwargs["params"]
        assert params["singleEvents"] == "true"
        assert params["orderBy"] == "startTime"
        assert params["maxResults"] == 2500
        assert params["timeMin"] == "2025-06-01T00:00:00+08:00"
        assert params["timeMax"] == "2025-06-30T23:59:59+08:00"

    @pytest.mark.asyncio
    async def test_fetch_schedule_maps_events(self, calendar, bootstrap):
        bootstrap.request.return_value = {"items": [
            {"id": "a", "summary": "丈量", "start": {"dateTime": "2025-06-03T09:15:00+08:00"}},
            {"id": "b", "start": {"date": "2025-06-04"}},
            {"id": "c", "summary": "No start"},
        ]}

        schedule = await calendar.fetch_schedule(datetime(2025, 6, 15))

        assert [(e.id, e.title, e.date, e.time) for e in schedule] == [
            ("a", "丈量", "2025-06-03", "09:15"),
            ("b", "(未命名行程)", "2025-06-04", None),
        ]


def test_untitled_event_display_title():
    event = CalendarEvent(id="x")

    assert event.get_display_title() == "(未命名行程)"
