"""
Test configuration and fixtures for pytest.

This module provides shared fixtures used across all tests:
- FakeGoogleAPI: in-memory stand-in for GoogleClientBootstrap.request()
- A signed-in GoogleSession
- A StudioService wired to the fake API
- A FastAPI TestClient with the service and access policy overridden
"""

import itertools
from datetime import datetime, timedelta, timezone
from typing import Generator
from unittest.mock import AsyncMock, MagicMock
from urllib.parse import unquote

import pytest
from fastapi.testclient import TestClient

from app.deps import get_access_policy, get_studio_service
from app.environments.base import UserProfile
from app.environments.google.auth.session import AuthSessionManager, GoogleSession
from app.environments.google.calendar.client import GoogleCalendarClient
from app.environments.google.drive.client import GoogleDriveClient, escape_query_value
from app.environments.google.drive.schemas import FOLDER_MIME_TYPE
from app.environments.google.sheets.client import GoogleSheetsClient
from app.main import app
from app.services.access import StaticAccessPolicy
from app.services.studio_service import StudioService


# ---------------------------------------------------------------------------
# FAKE GOOGLE API
# ---------------------------------------------------------------------------

class FakeGoogleAPI:
    """
    Replaces GoogleClientBootstrap in tests.

    Keeps sheet grids, calendar events and Drive files in memory and
    records every request in `calls`. Put an exception in `fail[api]` to
    make every call to that API raise it.
    """

    def __init__(self):
        self.calls = []
        self.fail = {}
        self.is_ready = True
        self.sheet_values = {}
        self.events = []
        self.folders = []
        self.files = []
        self._ids = itertools.count(1)

    async def ensure_ready(self) -> None:
        pass

    async def reset(self) -> None:
        pass

    def calls_for(self, api: str, method: str = None):
        return [
            c for c in self.calls
            if c["api"] == api and (method is None or c["method"] == method)
        ]

    async def request(
        self,
        api,
        method,
        endpoint,
        params=None,
        json_body=None,
        content=None,
        headers=None,
        upload=False,
    ):
        self.calls.append({
            "api": api,
            "method": method,
            "endpoint": endpoint,
            "params": params,
            "json_body": json_body,
            "content": content,
            "headers": headers,
            "upload": upload,
        })
        if api in self.fail:
            raise self.fail[api]

        handler = getattr(self, f"_{api}")
        return handler(method, endpoint, params, json_body)

    # --- sheets -------------------------------------------------------------

    def _sheets(self, method, endpoint, params, json_body):
        target = unquote(endpoint.split("/values/", 1)[1])
        sheet = target.split("!", 1)[0]
        if method == "GET":
            return {"values": self.sheet_values.get(sheet, [])}
        if method == "POST":
            self.sheet_values[sheet] = []
            return {}
        rows = json_body["values"]
        self.sheet_values[sheet] = rows
        return {"updatedCells": sum(len(r) for r in rows)}

    # --- calendar -----------------------------------------------------------

    def _calendar(self, method, endpoint, params, json_body):
        if method == "GET":
            return {"items": list(self.events)}
        event = {
            "id": f"evt-{next(self._ids)}",
            "summary": json_body["summary"],
            "start": json_body["start"],
            "end": json_body["end"],
            "htmlLink": "https://calendar.google.com/event?eid=abc",
        }
        self.events.append(event)
        return event

    # --- drive --------------------------------------------------------------

    def _drive(self, method, endpoint, params, json_body):
        if method == "GET":
            matches = [
                f for f in self.folders
                if f"name = '{escape_query_value(f['name'])}'" in params["q"]
            ]
            return {"files": matches[:1]}
        file_id = f"file-{next(self._ids)}"
        if json_body and json_body.get("mimeType") == FOLDER_MIME_TYPE:
            folder = {
                "id": file_id,
                "name": json_body["name"],
                "mimeType": FOLDER_MIME_TYPE,
                "webViewLink": f"https://drive.google.com/drive/folders/{file_id}",
            }
            self.folders.append(folder)
            return folder
        uploaded = {
            "id": file_id,
            "name": "upload",
            "webViewLink": f"https://drive.google.com/file/d/{file_id}/view",
        }
        self.files.append(uploaded)
        return uploaded


# ---------------------------------------------------------------------------
# SESSION FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def google_session() -> GoogleSession:
    """A signed-in session valid for one hour."""
    session = GoogleSession(
        access_token="ya29.test-token",
        expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
        scopes=["openid", "email"],
    )
    session.set_profile(UserProfile(name="林設計", email="designer@studio.tw", photo=""))
    return session


@pytest.fixture
def fake_google() -> FakeGoogleAPI:
    return FakeGoogleAPI()


@pytest.fixture
def fake_auth(google_session: GoogleSession) -> MagicMock:
    """AuthSessionManager double backed by the real session object."""
    auth = MagicMock(spec=AuthSessionManager)
    auth.session = google_session
    auth.auth_client = MagicMock(client_id="test-client-id")
    auth.initialize = AsyncMock(return_value=True)
    auth.sign_in = AsyncMock(return_value=google_session.profile)
    auth.sign_out = AsyncMock(side_effect=google_session.clear)
    auth.complete_redirect_sign_in = AsyncMock(return_value=google_session.profile)
    auth.begin_redirect_sign_in = MagicMock(
        return_value="https://accounts.google.com/o/oauth2/v2/auth?state=abc"
    )
    auth.current_user = MagicMock(
        side_effect=lambda: google_session.profile if google_session.is_active() else None
    )
    return auth


@pytest.fixture
def studio(google_session, fake_google, fake_auth) -> StudioService:
    """StudioService wired to the fake Google API."""
    return StudioService(
        session=google_session,
        bootstrap=fake_google,
        auth=fake_auth,
        sheets=GoogleSheetsClient(fake_google, spreadsheet_id="sheet-123"),
        calendar=GoogleCalendarClient(fake_google, timezone="Asia/Taipei", default_time="10:00"),
        drive=GoogleDriveClient(fake_google, root_folder_id="root-folder"),
    )


# ---------------------------------------------------------------------------
# TEST CLIENT
# ---------------------------------------------------------------------------

@pytest.fixture
def access_policy() -> StaticAccessPolicy:
    return StaticAccessPolicy(
        assignments={"designer@studio.tw": "admin", "guest@studio.tw": "viewer"},
        default_role="staff",
    )


@pytest.fixture
def client(studio: StudioService, access_policy: StaticAccessPolicy) -> Generator[TestClient, None, None]:
    """
    Test client with the dashboard service and access policy overridden.
    """
    app.dependency_overrides[get_studio_service] = lambda: studio
    app.dependency_overrides[get_access_policy] = lambda: access_policy

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# DATA FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def project_rows() -> list:
    """Raw "projects" sheet grid with two projects."""
    return [
        ["id", "code", "name", "clientName", "type", "status", "budget", "dueDate", "driveFolder"],
        ["p-1", "P-25101", "信義區三房翻修案", "王小姐", "翻修", "設計中", "1200000", "2025-09-30", ""],
        ["p-2", "P-25102", "Loft Office", "Acme", "新成屋", "施工中", "800000", "", ""],
    ]
