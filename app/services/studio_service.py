"""
Studio Service - Facade over the Google integrations for the dashboard.

All dashboard workflows go through this service: it owns the shared
GoogleSession, the lazily initialized bootstrap and one client per Google
API, and keeps the last loaded dashboard data as a best-effort cache.

Control Flow:
=============
    router -> StudioService -> session (token) -> bootstrap (client)
           -> sheets / calendar / drive client -> result

Cache Rules:
============
- load_all_data() replaces the cache with projects + current month
- create_project() updates the cache only after the sheet write succeeded
- create_event() reloads everything after the event was created; a failed
  reload keeps the old cache and marks it stale
- logout() drops the cache

Usage:
    from app.services.studio_service import studio_service

    await studio_service.init_client()
    profile = await studio_service.login()
    state = await studio_service.load_all_data()
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app.environments.base import EnvironmentError, TokenProvider, UserProfile
from app.environments.google.auth.client import GoogleAuthClient
from app.environments.google.auth.session import AuthSessionManager, GoogleSession
from app.environments.google.auth.token_provider import InstalledAppTokenProvider
from app.environments.google.bootstrap import GoogleClientBootstrap
from app.environments.google.calendar.client import GoogleCalendarClient
from app.environments.google.calendar.schemas import (
    CalendarEvent,
    EventCreateResponse,
    EventDraft,
    ScheduleEvent,
)
from app.environments.google.drive.client import GoogleDriveClient
from app.environments.google.drive.schemas import UploadResult
from app.environments.google.sheets.client import GoogleSheetsClient
from app.services.projects import (
    PROJECTS_SHEET,
    ProjectDraft,
    build_project,
    filter_projects,
)


logger = logging.getLogger("studio.services.studio")


@dataclass
class DashboardState:
    """Last loaded dashboard data."""
    projects: List[Dict[str, Any]] = field(default_factory=list)
    calendar: List[ScheduleEvent] = field(default_factory=list)
    loaded_at: Optional[datetime] = None
    stale: bool = False

    @property
    def is_loaded(self) -> bool:
        return self.loaded_at is not None


class StudioService:
    """
    Dashboard facade.

    Every collaborator can be injected, which is how tests substitute
    fakes; the defaults are the Google implementations configured from
    settings.
    """

    def __init__(
        self,
        session: Optional[GoogleSession] = None,
        bootstrap: Optional[GoogleClientBootstrap] = None,
        auth: Optional[AuthSessionManager] = None,
        token_provider: Optional[TokenProvider] = None,
        sheets: Optional[GoogleSheetsClient] = None,
        calendar: Optional[GoogleCalendarClient] = None,
        drive: Optional[GoogleDriveClient] = None,
    ):
        self.session = session or GoogleSession()
        self.bootstrap = bootstrap or GoogleClientBootstrap(self.session)

        if auth is None:
            auth_client = GoogleAuthClient()
            auth = AuthSessionManager(
                session=self.session,
                bootstrap=self.bootstrap,
                token_provider=token_provider or InstalledAppTokenProvider(auth_client),
                auth_client=auth_client,
            )
        self.auth = auth

        self.sheets = sheets or GoogleSheetsClient(self.bootstrap)
        self.calendar = calendar or GoogleCalendarClient(self.bootstrap)
        self.drive = drive or GoogleDriveClient(self.bootstrap)

        self.state = DashboardState()

    # -------------------------------------------------------------------------
    # SESSION
    # -------------------------------------------------------------------------

    async def init_client(self) -> bool:
        """Prepare the Google client; True if already signed in."""
        return await self.auth.initialize()

    async def login(self) -> UserProfile:
        return await self.auth.sign_in()

    def login_redirect(self, redirect_uri: Optional[str] = None) -> str:
        return self.auth.begin_redirect_sign_in(redirect_uri)

    async def complete_login_redirect(self, code: str, state: str) -> UserProfile:
        return await self.auth.complete_redirect_sign_in(code, state)

    async def logout(self) -> None:
        await self.auth.sign_out()
        self.state = DashboardState()

    def get_user(self) -> Optional[UserProfile]:
        return self.auth.current_user()

    def is_signed_in(self) -> bool:
        return self.session.is_active()

    # -------------------------------------------------------------------------
    # SHEETS
    # -------------------------------------------------------------------------

    async def fetch_sheet_data(self, sheet_name: str) -> List[List[Any]]:
        return await self.sheets.get_values(sheet_name)

    async def fetch_records(self, sheet_name: str) -> List[Dict[str, Any]]:
        return await self.sheets.fetch_records(sheet_name)

    async def sync_to_sheet(self, sheet_name: str, records: List[Dict[str, Any]]) -> bool:
        return await self.sheets.sync_records(sheet_name, records)

    # -------------------------------------------------------------------------
    # CALENDAR
    # -------------------------------------------------------------------------

    async def fetch_calendar_events(self, reference: Optional[datetime] = None) -> List[CalendarEvent]:
        return await self.calendar.list_month_events(reference)

    async def add_to_calendar(self, draft: EventDraft) -> EventCreateResponse:
        return await self.calendar.create_event(draft)

    # -------------------------------------------------------------------------
    # DRIVE
    # -------------------------------------------------------------------------

    async def upload_to_drive(self, file: Any, folder_name: Optional[str] = None) -> UploadResult:
        return await self.drive.upload_file(file, folder_name)

    async def create_drive_folder(self, name: Optional[str] = None) -> str:
        return await self.drive.create_folder(name)

    # -------------------------------------------------------------------------
    # WORKFLOWS
    # -------------------------------------------------------------------------

    async def load_all_data(self, reference: Optional[datetime] = None) -> DashboardState:
        """Reload projects and the month's schedule into the cache."""
        projects = await self.fetch_records(PROJECTS_SHEET)
        events = await self.fetch_calendar_events(reference)
        calendar = self.calendar.to_schedule_events(events)

        self.state = DashboardState(
            projects=projects,
            calendar=calendar,
            loaded_at=datetime.now(timezone.utc),
        )
        logger.info(
            "Dashboard data loaded",
            extra={"projects": len(projects), "events": len(calendar)}
        )
        return self.state

    async def create_project(self, draft: ProjectDraft) -> Dict[str, Any]:
        """
        Create a Drive folder and a new row in the projects sheet.

        Raises:
            InputValidationError: Name missing (nothing remote is touched)
            APIError / AuthenticationError: Remote step failed, cache unchanged
        """
        draft.validate_required()

        # never rewrite the sheet from an empty, never-loaded cache
        if not self.state.is_loaded:
            await self.load_all_data()

        drive_folder = await self.create_drive_folder(draft.name.strip())
        project = build_project(draft, drive_folder=drive_folder)

        updated = [*self.state.projects, project]
        await self.sync_to_sheet(PROJECTS_SHEET, updated)

        self.state.projects = updated
        logger.info(
            f"Project created: {project['code']}",
            extra={"project_id": project["id"]}
        )
        return project

    async def create_event(self, draft: EventDraft) -> EventCreateResponse:
        """
        Add the event, then reload so the schedule matches Google.

        The event already exists once the insert returns, so a failed
        reload only marks the cache as stale.

        Raises:
            InputValidationError: Title or date missing
            APIError / AuthenticationError: The insert itself failed
        """
        created = await self.add_to_calendar(draft)
        try:
            await self.load_all_data()
        except EnvironmentError as e:
            logger.warning(
                f"Reload after event creation failed: {e}",
                extra={"event_id": created.event_id}
            )
            self.state.stale = True
        return created

    def search_projects(self, query: str) -> List[Dict[str, Any]]:
        return filter_projects(self.state.projects, query)


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
studio_service = StudioService()
