"""
Google Auth Module - OAuth 2.0 Authentication for Google Services

One consent prompt requests every scope the console needs (profile,
Drive files, Sheets, Calendar). The resulting token lives in a shared
GoogleSession read by all API clients.

OAuth 2.0 Flow Overview:
========================
Interactive (operator machine):
1. InstalledAppTokenProvider opens the consent screen
2. google-auth-oauthlib receives the redirect on a local port
3. The token is stored in the GoogleSession

Redirect (browser):
1. GET /dashboard/login/redirect builds the auth URL (PKCE + state)
2. Google redirects to /dashboard/login/callback with a code
3. The code + verifier are exchanged through POST /api/google/token
4. The token is stored in the GoogleSession
"""

from app.environments.google.auth.client import GoogleAuthClient
from app.environments.google.auth.schemas import (
    GoogleTokenResponse,
    GoogleUserInfo,
    PendingAuthorization,
    TokenExchangeRequest,
    CALENDAR_SCOPES,
    DASHBOARD_SCOPES,
    DRIVE_SCOPES,
    PROFILE_SCOPES,
    SHEETS_SCOPES,
)
from app.environments.google.auth.session import AuthSessionManager, GoogleSession
from app.environments.google.auth.token_provider import InstalledAppTokenProvider

__all__ = [
    "GoogleAuthClient",
    "GoogleTokenResponse",
    "GoogleUserInfo",
    "PendingAuthorization",
    "TokenExchangeRequest",
    "AuthSessionManager",
    "GoogleSession",
    "InstalledAppTokenProvider",
    "CALENDAR_SCOPES",
    "DASHBOARD_SCOPES",
    "DRIVE_SCOPES",
    "PROFILE_SCOPES",
    "SHEETS_SCOPES",
]
