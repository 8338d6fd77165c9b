"""
Tests for the StudioService facade.

These tests verify:
- load_all_data() fills the dashboard cache
- create_project(): validation first, folder + sheet write, cache only after success
- create_event(): event insert followed by a reload, a failed reload marks the cache stale
- logout() drops the cache
- search_projects() over name, client and code
"""

import re

import pytest
from unittest.mock import AsyncMock

from app.environments.base import APIError, InputValidationError
from app.environments.google.calendar.schemas import EventDraft
from app.services.projects import ProjectDraft


# ---------------------------------------------------------------------------
# LOADING
# ---------------------------------------------------------------------------

class TestLoadAllData:
    """Tests for load_all_data()."""

    @pytest.mark.asyncio
    async def test_loads_projects_and_schedule(self, studio, fake_google, project_rows):
        fake_google.sheet_values["projects"] = project_rows
        fake_google.events = [
            {"id": "e1", "summary": "丈量", "start": {"dateTime": "2025-06-03T10:00:00+08:00"}},
        ]

        state = await studio.load_all_data()

        assert state.is_loaded
        assert [p["id"] for p in state.projects] == ["p-1", "p-2"]
        assert state.calendar[0].title == "丈量"
        assert studio.state is state

    @pytest.mark.asyncio
    async def test_failure_leaves_cache_unchanged(self, studio, fake_google, project_rows):
        fake_google.sheet_values["projects"] = project_rows
        await studio.load_all_data()
        fake_google.fail["calendar"] = APIError("backend error", status_code=500)

        with pytest.raises(APIError):
            await studio.load_all_data()

        assert len(studio.state.projects) == 2


# ---------------------------------------------------------------------------
# PROJECTS
# ---------------------------------------------------------------------------

class TestCreateProject:
    """Tests for create_project()."""

    @pytest.mark.asyncio
    async def test_missing_name_fails_without_remote_calls(self, studio, fake_google):
        with pytest.raises(InputValidationError):
            await studio.create_project(ProjectDraft(name="   ", clientName="王小姐"))

        assert fake_google.calls == []

    @pytest.mark.asyncio
    async def test_creates_folder_and_appends_row(self, studio, fake_google, project_rows):
        fake_google.sheet_values["projects"] = project_rows
        await studio.load_all_data()

        project = await studio.create_project(ProjectDraft(
            name="大安區老屋翻新",
            clientName="陳先生",
            budget="1,500,000",
        ))

        assert fake_google.folders[0]["name"] == "大安區老屋翻新"
        assert project["driveFolder"] == fake_google.folders[0]["webViewLink"]
        assert project["status"] == "設計中"
        assert project["type"] == "翻修"
        assert project["budget"] == 1500000
        assert re.fullmatch(r"P-\d{5}", project["code"])
        assert project["id"].startswith("p-")

        rows = fake_google.sheet_values["projects"]
        assert len(rows) == 4
        assert rows[-1][rows[0].index("name")] == "大安區老屋翻新"
        assert studio.state.projects[-1] is project

    @pytest.mark.asyncio
    async def test_explicit_code_is_kept(self, studio, fake_google):
        project = await studio.create_project(ProjectDraft(name="Loft", code="P-99001"))

        assert project["code"] == "P-99001"

    @pytest.mark.asyncio
    async def test_loads_before_first_write(self, studio, fake_google, project_rows):
        fake_google.sheet_values["projects"] = project_rows

        await studio.create_project(ProjectDraft(name="Loft"))

        # existing rows are kept, not replaced by a one-row sheet
        assert len(fake_google.sheet_values["projects"]) == 4

    @pytest.mark.asyncio
    async def test_sheet_failure_leaves_cache_unchanged(self, studio, fake_google, project_rows):
        fake_google.sheet_values["projects"] = project_rows
        await studio.load_all_data()
        fake_google.fail["sheets"] = APIError("quota", status_code=429)

        with pytest.raises(APIError):
            await studio.create_project(ProjectDraft(name="Loft"))

        assert [p["id"] for p in studio.state.projects] == ["p-1", "p-2"]

    @pytest.mark.asyncio
    async def test_drive_failure_skips_sheet_write(self, studio, fake_google, project_rows):
        fake_google.sheet_values["projects"] = project_rows
        await studio.load_all_data()
        fake_google.fail["drive"] = APIError("forbidden", status_code=403)

        with pytest.raises(APIError):
            await studio.create_project(ProjectDraft(name="Loft"))

        assert fake_google.calls_for("sheets", "PUT") == []


# ---------------------------------------------------------------------------
# EVENTS
# ---------------------------------------------------------------------------

class TestCreateEvent:
    """Tests for create_event()."""

    @pytest.mark.asyncio
    async def test_creates_then_reloads(self, studio, fake_google):
        created = await studio.create_event(EventDraft(title="丈量", date="2025-06-01"))

        assert created.event_id == "evt-1"
        methods = [(c["api"], c["method"]) for c in fake_google.calls]
        assert methods[0] == ("calendar", "POST")
        assert ("sheets", "GET") in methods
        assert ("calendar", "GET") in methods
        assert studio.state.is_loaded
        assert studio.state.stale is False

    @pytest.mark.asyncio
    async def test_reload_failure_keeps_created_event(self, studio, fake_google):
        studio.calendar.list_month_events = AsyncMock(side_effect=APIError("backend error", status_code=500))

        created = await studio.create_event(EventDraft(title="丈量", date="2025-06-01"))

        assert created.event_id == "evt-1"
        assert fake_google.calls_for("calendar", "POST")
        assert studio.state.stale is True
        assert not studio.state.is_loaded

    @pytest.mark.asyncio
    async def test_validation_error_skips_reload(self, studio, fake_google):
        with pytest.raises(InputValidationError):
            await studio.create_event(EventDraft(date="2025-06-01"))

        assert fake_google.calls == []


# ---------------------------------------------------------------------------
# SESSION AND SEARCH
# ---------------------------------------------------------------------------

class TestSessionAndSearch:
    """Tests for logout() and search_projects()."""

    @pytest.mark.asyncio
    async def test_logout_clears_session_and_cache(self, studio, fake_google, project_rows):
        fake_google.sheet_values["projects"] = project_rows
        await studio.load_all_data()

        await studio.logout()

        assert studio.get_user() is None
        assert studio.is_signed_in() is False
        assert studio.state.is_loaded is False

    @pytest.mark.asyncio
    async def test_search_matches_name_client_and_code(self, studio, fake_google, project_rows):
        fake_google.sheet_values["projects"] = project_rows
        await studio.load_all_data()

        assert [p["id"] for p in studio.search_projects("acme")] == ["p-2"]
        assert [p["id"] for p in studio.search_projects("信義")] == ["p-1"]
        assert [p["id"] for p in studio.search_projects("p-25101")] == ["p-1"]
        assert len(studio.search_projects("")) == 2
