"""
Google Environment Module - Google Workspace Integration

This module provides integration with the Google services the studio
console depends on:
- Google Sheets (project database)
- Google Calendar (schedule)
- Google Drive (project folders, attachments)

Architecture:
=============
google/
├── __init__.py           # Module exports
├── bootstrap.py          # Lazy shared client + discovery documents
├── auth/                 # Shared OAuth authentication
│   ├── client.py         # OAuth endpoints (auth URL, token, userinfo, revoke)
│   ├── schemas.py        # Scopes and auth data structures
│   ├── session.py        # GoogleSession + AuthSessionManager
│   └── token_provider.py # Interactive consent flow
├── sheets/               # Sheets API + row/record mapper
├── calendar/             # Calendar API
└── drive/                # Drive API + mock storage

Key Design Decisions:
=====================
1. Shared Session: every client reads the token from one GoogleSession
2. Single Consent: all scopes are requested at sign-in
3. Lazy Bootstrap: discovery documents are loaded on the first API call

Usage:
======
    from app.environments.google import (
        GoogleSession, GoogleClientBootstrap, GoogleSheetsClient,
    )

    session = GoogleSession()
    bootstrap = GoogleClientBootstrap(session)
    sheets = GoogleSheetsClient(bootstrap)
    projects = await sheets.fetch_records("projects")
"""

from app.environments.google.auth import (
    AuthSessionManager,
    GoogleAuthClient,
    GoogleSession,
    InstalledAppTokenProvider,
    DASHBOARD_SCOPES,
)
from app.environments.google.bootstrap import BootstrapState, GoogleClientBootstrap
from app.environments.google.sheets import GoogleSheetsClient
from app.environments.google.calendar import GoogleCalendarClient, EventDraft, ScheduleEvent
from app.environments.google.drive import GoogleDriveClient, MockFileStorage, UploadResult

__all__ = [
    "AuthSessionManager",
    "GoogleAuthClient",
    "GoogleSession",
    "InstalledAppTokenProvider",
    "BootstrapState",
    "GoogleClientBootstrap",
    "GoogleSheetsClient",
    "GoogleCalendarClient",
    "GoogleDriveClient",
    "MockFileStorage",
    "EventDraft",
    "ScheduleEvent",
    "UploadResult",
    "DASHBOARD_SCOPES",
]
