"""
Configuration module - centralized settings for the entire application.
Uses pydantic-settings to load values from environment variables and .env file.
"""

from typing import Dict, List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Pydantic-settings automatically:
    1. Reads from environment variables (highest priority)
    2. Falls back to .env file values
    3. Uses default values if neither exists

    To override in production, set environment variables:
        export GOOGLE_CLIENT_ID=1234-abc.apps.googleusercontent.com
        export GOOGLE_SPREADSHEET_ID=1AbCdEf...
    """

    # ---------------------------------------------------------------------------
    # PYDANTIC SETTINGS CONFIGURATION
    # ---------------------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_file=".env",        # Load from .env file in project root
        env_file_encoding="utf-8",
        extra="ignore",         # Ignore extra env vars not defined here
    )

    # ---------------------------------------------------------------------------
    # APPLICATION SETTINGS
    # ---------------------------------------------------------------------------
    APP_NAME: str = "Studio Operations Console"

    # DEBUG: Enable debug mode (more verbose errors, auto-reload in dev)
    DEBUG: bool = False

    # LOG_LEVEL: Level for the "studio" logger hierarchy
    LOG_LEVEL: str = "INFO"

    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # ---------------------------------------------------------------------------
    # GOOGLE OAUTH SETTINGS
    # ---------------------------------------------------------------------------
    # Google Cloud Console: https://console.cloud.google.com/apis/credentials
    #
    # Setup Instructions:
    # 1. Enable the Sheets, Calendar and Drive APIs
    # 2. Configure the OAuth consent screen (add test users)
    # 3. Create an OAuth 2.0 Client ID (Web application) and an API key
    # 4. Add the dashboard callback URL as an authorized redirect URI

    # GOOGLE_CLIENT_ID: OAuth 2.0 Client ID (required for any Google access)
    GOOGLE_CLIENT_ID: str = ""

    # GOOGLE_CLIENT_SECRET: server-side only, used by the token relay.
    # Never log or echo this value.
    GOOGLE_CLIENT_SECRET: str = ""

    # GOOGLE_API_KEY: used to load the discovery documents
    GOOGLE_API_KEY: str = ""

    # GOOGLE_REDIRECT_URI: where Google sends users after authorization
    GOOGLE_REDIRECT_URI: str = "http://localhost:8000/dashboard/login/callback"

    # GOOGLE_TOKEN_RELAY_URL: token exchange endpoint used by the redirect flow
    GOOGLE_TOKEN_RELAY_URL: str = "http://localhost:8000/api/google/token"

    # ---------------------------------------------------------------------------
    # GOOGLE WORKSPACE TARGETS
    # ---------------------------------------------------------------------------
    # GOOGLE_SPREADSHEET_ID: the sheet used as the project database
    GOOGLE_SPREADSHEET_ID: str = ""

    # GOOGLE_DRIVE_ROOT_FOLDER_ID: parent for per-project folders
    # (empty = drive root)
    GOOGLE_DRIVE_ROOT_FOLDER_ID: str = ""

    # Calendar events are rendered in this named time zone
    CALENDAR_TIMEZONE: str = "Asia/Taipei"

    # Start time used when an event is created without a time
    DEFAULT_EVENT_TIME: str = "10:00"

    # ---------------------------------------------------------------------------
    # CORS
    # ---------------------------------------------------------------------------
    # Comma-separated list of origins allowed to call the API from a browser
    CORS_ALLOWED_ORIGINS: str = (
        "http://localhost:5173,"
        "http://localhost:5174,"
        "https://senteng-design-system.vercel.app"
    )

    # ---------------------------------------------------------------------------
    # ACCESS CONTROL
    # ---------------------------------------------------------------------------
    # Comma-separated "email:role" pairs, e.g. "boss@studio.tw:admin,pm@studio.tw:staff"
    ROLE_ASSIGNMENTS: str = ""

    # Role used for signed-in users not listed in ROLE_ASSIGNMENTS
    DEFAULT_ROLE: str = "staff"

    def get_cors_origins(self) -> List[str]:
        """Split CORS_ALLOWED_ORIGINS into a clean list."""
        return [o.strip() for o in self.CORS_ALLOWED_ORIGINS.split(",") if o.strip()]

    def get_role_assignments(self) -> Dict[str, str]:
        """Parse ROLE_ASSIGNMENTS into an email -> role mapping."""
        assignments: Dict[str, str] = {}
        for pair in self.ROLE_ASSIGNMENTS.split(","):
            if ":" not in pair:
                continue
            email, role = pair.split(":", 1)
            if email.strip() and role.strip():
                assignments[email.strip().lower()] = role.strip()
        return assignments


# ---------------------------------------------------------------------------
# GLOBAL SETTINGS INSTANCE
# ---------------------------------------------------------------------------
# Usage: from app.core.config import settings
settings = Settings()
