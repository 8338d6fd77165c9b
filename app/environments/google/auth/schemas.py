"""
Google OAuth Schemas - Data structures for Google authentication.

This module defines the data structures used in the Google OAuth flow.
Using Pydantic models ensures type safety and validation.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# OAUTH SCOPE CONSTANTS
# ---------------------------------------------------------------------------
# Reference: https://developers.google.com/identity/protocols/oauth2/scopes

# Profile scopes - basic user information for the dashboard header
PROFILE_SCOPES = [
    "openid",
    "email",
    "profile",
]

# Drive: only files created by this app (project folders + uploads)
DRIVE_SCOPES = [
    "https://www.googleapis.com/auth/drive.file",
]

# Sheets: read/write the project spreadsheet
SHEETS_SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
]

# Calendar: create and list events
CALENDAR_SCOPES = [
    "https://www.googleapis.com/auth/calendar",
]

# Everything the console needs, requested in a single consent prompt
DASHBOARD_SCOPES = PROFILE_SCOPES + DRIVE_SCOPES + SHEETS_SCOPES + CALENDAR_SCOPES


# ---------------------------------------------------------------------------
# TOKEN EXCHANGE
# ---------------------------------------------------------------------------

class TokenExchangeRequest(BaseModel):
    """
    Body accepted by the token relay endpoint.

    Fields are optional here so that a missing field produces the relay's own
    `invalid_request` error instead of a generic validation response.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    code: Optional[str] = Field(None, description="Authorization code from Google")
    code_verifier: Optional[str] = Field(None, alias="codeVerifier", description="PKCE verifier")
    redirect_uri: Optional[str] = Field(None, alias="redirectUri", description="Redirect URI used for the code")

    def missing_fields(self) -> List[str]:
        """Names (wire form) of the required fields that are empty."""
        missing = []
        if not self.code:
            missing.append("code")
        if not self.code_verifier:
            missing.append("codeVerifier")
        if not self.redirect_uri:
            missing.append("redirectUri")
        return missing


class GoogleTokenResponse(BaseModel):
    """
    Response from Google's token endpoint.

    Example response from Google:
    {
        "access_token": "ya29.a0AfB_byC...",
        "expires_in": 3599,
        "scope": "openid https://www.googleapis.com/auth/spreadsheets",
        "token_type": "Bearer",
        "id_token": "eyJhbGciOiJSUzI1NiIs..."
    }
    """
    access_token: str = Field(..., description="OAuth access token")
    token_type: str = Field(default="Bearer", description="Token type (usually Bearer)")
    expires_in: Optional[int] = Field(None, description="Seconds until expiration")
    refresh_token: Optional[str] = Field(None, description="Refresh token for renewal")
    scope: Optional[str] = Field(None, description="Space-separated scopes granted")
    id_token: Optional[str] = Field(None, description="JWT with user info (OpenID)")

    def get_scopes_list(self) -> List[str]:
        """Convert space-separated scope string to list."""
        if self.scope:
            return self.scope.split()
        return []

    def get_expires_at(self) -> Optional[datetime]:
        """Calculate expiration datetime from expires_in seconds."""
        if self.expires_in:
            return datetime.now(timezone.utc) + timedelta(seconds=self.expires_in)
        return None


# ---------------------------------------------------------------------------
# USER INFO
# ---------------------------------------------------------------------------

class GoogleUserInfo(BaseModel):
    """
    User information from the OpenID Connect userinfo endpoint.

    Example:
    {
        "sub": "123456789",
        "email": "designer@studio.tw",
        "name": "林設計",
        "picture": "https://lh3.googleusercontent.com/a/..."
    }
    """
    sub: Optional[str] = Field(None, description="Unique Google user ID")
    email: Optional[str] = Field(None, description="User's email address")
    email_verified: Optional[bool] = Field(None, description="Is email verified?")
    name: Optional[str] = Field(None, description="User's display name")
    picture: Optional[str] = Field(None, description="Profile picture URL")
    locale: Optional[str] = Field(None, description="User's locale (e.g., 'zh-TW')")


# ---------------------------------------------------------------------------
# REDIRECT FLOW STATE
# ---------------------------------------------------------------------------

class PendingAuthorization(BaseModel):
    """
    Data kept between the authorization redirect and the callback.

    The PKCE verifier never leaves the server; only its S256 challenge is
    sent to Google.
    """
    state: str = Field(..., description="CSRF token sent to Google")
    code_verifier: str = Field(..., description="PKCE verifier for the code exchange")
    redirect_uri: str = Field(..., description="Redirect URI used in the authorization URL")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the authorization URL was issued",
    )

    def is_expired(self, ttl: timedelta) -> bool:
        return datetime.now(timezone.utc) - self.created_at >= ttl
