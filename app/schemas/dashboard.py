"""
Dashboard schemas - request/response models for the /dashboard API.

Every mutating endpoint answers with a Notice: a short user-facing
message (zh-TW) plus a level the UI renders as a toast.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from app.environments.google.calendar.schemas import ScheduleEvent


NoticeLevel = Literal["success", "error", "info"]


class Notice(BaseModel):
    """Toast message shown after an action."""
    level: NoticeLevel = Field(..., description="success, error or info")
    message: str = Field(..., description="User-facing message")

    @classmethod
    def success(cls, message: str) -> "Notice":
        return cls(level="success", message=message)

    @classmethod
    def error(cls, message: str) -> "Notice":
        return cls(level="error", message=message)

    @classmethod
    def info(cls, message: str) -> "Notice":
        return cls(level="info", message=message)


class UserProfileOut(BaseModel):
    name: str = ""
    email: str = ""
    photo: str = ""


class SessionResponse(BaseModel):
    """GET /dashboard/session"""
    signed_in: bool = Field(..., alias="signedIn")
    ready: bool = Field(..., description="Google client initialized")
    user: Optional[UserProfileOut] = None
    role: Optional[str] = None
    pages: List[str] = Field(default_factory=list)
    notice: Optional[Notice] = None

    class Config:
        populate_by_name = True


class LoginResponse(BaseModel):
    user: Optional[UserProfileOut] = None
    notice: Notice


class LogoutResponse(BaseModel):
    notice: Notice


class ProjectListResponse(BaseModel):
    projects: List[Dict[str, Any]] = Field(default_factory=list)
    notice: Optional[Notice] = None


class ProjectCreateResponse(BaseModel):
    project: Optional[Dict[str, Any]] = None
    notice: Notice


class ScheduleResponse(BaseModel):
    events: List[ScheduleEvent] = Field(default_factory=list)
    notice: Optional[Notice] = None


class EventCreateOut(BaseModel):
    event_id: Optional[str] = Field(None, alias="eventId")
    html_link: Optional[str] = Field(None, alias="htmlLink")
    events: List[ScheduleEvent] = Field(default_factory=list)
    notice: Notice

    class Config:
        populate_by_name = True


class UploadResponse(BaseModel):
    success: bool
    url: Optional[str] = None
    mock: bool = False
    notice: Notice
