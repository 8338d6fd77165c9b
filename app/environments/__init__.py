"""
Environments Module - External Service Integrations

Architecture Overview:
======================
environments/
├── __init__.py           # Module exports
├── base.py               # Errors, value objects, capability interfaces
└── google/               # Google Workspace integration
    ├── bootstrap.py      # Shared HTTP client + discovery documents
    ├── auth/             # OAuth client, token providers, session
    ├── sheets/           # Sheets API client + row/record mapper
    ├── calendar/         # Calendar API client
    └── drive/            # Drive API client + mock storage
"""

from app.environments.base import (
    EnvironmentService,
    EnvironmentError,
    ConfigurationError,
    AuthenticationError,
    NotSignedInError,
    TokenExpiredError,
    TokenExchangeError,
    APIError,
    InputValidationError,
    OAuthTokens,
    UserProfile,
    TokenProvider,
    SpreadsheetClient,
    CalendarClient,
    FileStorageClient,
)

__all__ = [
    "EnvironmentService",
    "EnvironmentError",
    "ConfigurationError",
    "AuthenticationError",
    "NotSignedInError",
    "TokenExpiredError",
    "TokenExchangeError",
    "APIError",
    "InputValidationError",
    "OAuthTokens",
    "UserProfile",
    "TokenProvider",
    "SpreadsheetClient",
    "CalendarClient",
    "FileStorageClient",
]
