"""
Base classes and interfaces for Environment integrations.

This module defines the error taxonomy, the shared value objects and the
capability interfaces that the Google integrations implement.

Capabilities:
=============
- TokenProvider: obtains and revokes OAuth access tokens
- SpreadsheetClient: reads/writes a grid of cells (the project store)
- CalendarClient: creates and lists calendar events
- FileStorageClient: creates folders and uploads binary attachments

Every capability has one production implementation under
app/environments/google/ and can be replaced by a test double.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence


# ---------------------------------------------------------------------------
# CUSTOM EXCEPTIONS
# ---------------------------------------------------------------------------
# Four families, handled differently by callers:
# - ConfigurationError: missing ids/secrets, fatal, raised before any network call
# - AuthenticationError: token denied/expired, recoverable by signing in again
# - APIError: remote call rejected, surfaced as a notice, local state unchanged
# - InputValidationError: missing user input, raised before any remote call


class EnvironmentError(Exception):
    """Base exception for all environment-related errors."""
    pass


class ConfigurationError(EnvironmentError):
    """Raised when required configuration (client id, API key, ...) is missing."""
    pass


class AuthenticationError(EnvironmentError):
    """Raised when authentication with a provider fails."""
    pass


class NotSignedInError(AuthenticationError):
    """Raised when an API call is attempted without an active session."""
    pass


class TokenExpiredError(AuthenticationError):
    """Raised when the access token has expired or was rejected."""
    pass


class TokenExchangeError(AuthenticationError):
    """
    Raised when the token endpoint rejects an authorization code.

    Carries the provider's status code and JSON body so the relay can
    pass them through unchanged.
    """

    def __init__(self, message: str, status_code: int, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class APIError(EnvironmentError):
    """Raised when an API call to the provider fails."""

    def __init__(self, message: str, status_code: Optional[int] = None, response: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class InputValidationError(EnvironmentError):
    """Raised when required user-entered fields are missing."""

    def __init__(self, message: str, fields: Sequence[str] = ()):
        super().__init__(message)
        self.fields = list(fields)


# ---------------------------------------------------------------------------
# DATA STRUCTURES
# ---------------------------------------------------------------------------


@dataclass
class OAuthTokens:
    """
    Standardized token data from the OAuth provider.

    Used to transfer token data between the token provider and the session.
    """
    access_token: str
    token_type: str = "Bearer"
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    scopes: Optional[List[str]] = None
    extra_data: Optional[Dict[str, Any]] = None


@dataclass
class UserProfile:
    """
    Signed-in user as shown in the dashboard header.

    Empty strings (not None) when the userinfo lookup failed.
    """
    name: str = ""
    email: str = ""
    photo: str = ""

    @classmethod
    def empty(cls) -> "UserProfile":
        return cls()

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "email": self.email, "photo": self.photo}


# ---------------------------------------------------------------------------
# CAPABILITY INTERFACES
# ---------------------------------------------------------------------------


class TokenProvider(ABC):
    """
    Obtains access tokens for the signed-in identity.

    The production implementation runs the interactive consent flow; tests
    substitute a stub that returns canned tokens.
    """

    provider_name: str = ""

    @abstractmethod
    async def prepare(self) -> None:
        """
        Make the provider ready to issue tokens.

        Raises:
            ConfigurationError: If the OAuth client is not configured
        """
        pass

    @abstractmethod
    async def request_access_token(self, prompt: str = "consent") -> OAuthTokens:
        """
        Request an access token, interactively if needed.

        Raises:
            AuthenticationError: If the user denied consent or the request failed
        """
        pass

    @abstractmethod
    async def revoke_token(self, token: str) -> bool:
        """Revoke a token on the provider side. Returns True on success."""
        pass


class EnvironmentService(ABC):
    """
    Abstract base class for API services within a provider.

    Each service (Sheets, Calendar, Drive) declares the scopes it needs so
    the sign-in flow can request all of them at once.
    """

    service_name: str = ""
    required_scopes: List[str] = []


class SpreadsheetClient(EnvironmentService):
    """Grid-of-cells storage addressed by sheet (tab) name."""

    @abstractmethod
    async def get_values(self, sheet_name: str) -> List[List[Any]]:
        """Return the raw cell grid of a sheet (may be ragged)."""
        pass

    @abstractmethod
    async def clear_values(self, sheet_name: str) -> None:
        """Clear every value in the sheet's data range."""
        pass

    @abstractmethod
    async def update_values(self, sheet_name: str, rows: List[List[str]]) -> Dict[str, Any]:
        """Write rows starting at the top-left cell of the sheet."""
        pass


class CalendarClient(EnvironmentService):
    """Event creation and month listing."""

    @abstractmethod
    async def create_event(self, draft: Any) -> Any:
        """Create an event from a draft. Validates before any remote call."""
        pass

    @abstractmethod
    async def list_month_events(self, reference: Optional[datetime] = None) -> List[Any]:
        """List the events of the month containing `reference` (default: now)."""
        pass


class FileStorageClient(EnvironmentService):
    """Folder provisioning and attachment upload."""

    @abstractmethod
    async def create_folder(self, name: Optional[str]) -> str:
        """Create a folder and return its user-facing link."""
        pass

    @abstractmethod
    async def upload_file(self, file: Any, folder_name: Optional[str]) -> Any:
        """Upload a file into the named folder and return an UploadResult."""
        pass
