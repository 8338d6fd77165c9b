"""
Dashboard Router - JSON data surface of the studio console.

Every action answers with a Notice the UI shows as a toast. Remote
failures leave the cached dashboard data unchanged.

Endpoints:
==========
- GET  /dashboard/session          → signed-in state, user, role, pages
- POST /dashboard/login            → interactive Google sign-in
- GET  /dashboard/login/redirect   → redirect to Google consent (PKCE)
- GET  /dashboard/login/callback   → finish redirect sign-in
- POST /dashboard/logout           → revoke + clear session
- GET  /dashboard/projects         → projects (optional ?q= search)
- POST /dashboard/projects         → create project (Drive folder + sheet row)
- GET  /dashboard/schedule         → this month's events
- POST /dashboard/schedule         → create event, then reload
- POST /dashboard/drive/upload     → upload attachment to a project folder

Status Codes:
=============
- 400: missing input (InputValidationError)
- 401: not signed in / token expired
- 403: page not allowed for the user's role
- 502: Google rejected the call (APIError)
- 503: Google client not configured (ConfigurationError)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import JSONResponse, RedirectResponse

from app.deps import get_access_policy, get_studio_service, require_page
from app.environments.base import (
    APIError,
    AuthenticationError,
    ConfigurationError,
    EnvironmentError,
    InputValidationError,
    NotSignedInError,
    TokenExpiredError,
)
from app.environments.google.calendar.schemas import EventDraft
from app.schemas.dashboard import (
    EventCreateOut,
    LoginResponse,
    LogoutResponse,
    Notice,
    ProjectCreateResponse,
    ProjectListResponse,
    ScheduleResponse,
    SessionResponse,
    UploadResponse,
    UserProfileOut,
)
from app.services.access import AccessPolicy
from app.services.projects import ProjectDraft
from app.services.studio_service import StudioService


logger = logging.getLogger("studio.routers.dashboard")


router = APIRouter(prefix="/dashboard", tags=["dashboard"])


# ---------------------------------------------------------------------------
# NOTICE MESSAGES
# ---------------------------------------------------------------------------
MSG_INIT_FAILED = "初始化 Google 服務失敗。"
MSG_LOGIN_OK = "Google 登入成功。"
MSG_LOGIN_FAILED = "登入失敗，請稍後再試。"
MSG_LOGOUT_OK = "已登出 Google 帳號。"
MSG_LOGOUT_FAILED = "登出時發生錯誤。"
MSG_LOAD_FAILED = "從 Google 載入資料失敗。"
MSG_PROJECT_NAME_REQUIRED = "請輸入專案名稱"
MSG_PROJECT_FAILED = "建立專案失敗，請稍後再試。"
MSG_EVENT_REQUIRED = "請填寫標題和日期"
MSG_EVENT_FAILED = "建立行程失敗，請稍後再試。"
MSG_EVENT_STALE = "行事曆重新載入失敗，顯示的行程可能不是最新的。"
MSG_UPLOAD_OK = "檔案已上傳至 Google Drive。"
MSG_UPLOAD_MOCK = "未提供檔案，已使用模擬上傳。"
MSG_UPLOAD_FAILED = "上傳檔案失敗，請稍後再試。"
MSG_SESSION_EXPIRED = "登入已失效，請重新登入。"
MSG_NOT_CONFIGURED = "Google 服務尚未設定。"


def _failure(error: EnvironmentError, message: str) -> JSONResponse:
    """Map an integration error to a status code and an error notice."""
    if isinstance(error, InputValidationError):
        status_code = 400
    elif isinstance(error, (NotSignedInError, TokenExpiredError)):
        status_code = 401
        message = MSG_SESSION_EXPIRED
    elif isinstance(error, AuthenticationError):
        status_code = 401
    elif isinstance(error, ConfigurationError):
        status_code = 503
        message = MSG_NOT_CONFIGURED
    elif isinstance(error, APIError):
        status_code = 502
    else:
        status_code = 500

    return JSONResponse(
        status_code=status_code,
        content={"notice": Notice.error(message).model_dump()},
    )


def _profile_out(profile) -> Optional[UserProfileOut]:
    if profile is None:
        return None
    return UserProfileOut(**profile.to_dict())


# ---------------------------------------------------------------------------
# SESSION
# ---------------------------------------------------------------------------


@router.get("/session", response_model=SessionResponse)
async def get_session(
    service: StudioService = Depends(get_studio_service),
    policy: AccessPolicy = Depends(get_access_policy),
):
    """
    Current sign-in state.

    Initializes the Google client on first call; initialization failures
    are reported as a notice, never as an error status.
    """
    signed_in = await service.init_client()
    ready = service.bootstrap.is_ready
    user = service.get_user()
    grant = policy.grant_for(user.email if user else None)

    return SessionResponse(
        signed_in=signed_in,
        ready=ready,
        user=_profile_out(user),
        role=grant.role if user else None,
        pages=grant.pages,
        notice=None if ready else Notice.error(MSG_INIT_FAILED),
    )


@router.post("/login", response_model=LoginResponse)
async def login(service: StudioService = Depends(get_studio_service)):
    """Interactive sign-in (consent prompt on the operator's machine)."""
    try:
        profile = await service.login()
    except EnvironmentError as e:
        logger.error(f"Login failed: {e}")
        return _failure(e, MSG_LOGIN_FAILED)

    return LoginResponse(user=_profile_out(profile), notice=Notice.success(MSG_LOGIN_OK))


@router.get("/login/redirect")
async def login_redirect(
    redirect_uri: Optional[str] = Query(None, description="Override the callback URL"),
    service: StudioService = Depends(get_studio_service),
):
    """Redirect the browser to Google's consent screen."""
    if not service.auth.auth_client.client_id:
        logger.error("Google OAuth not configured - missing GOOGLE_CLIENT_ID")
        return _failure(ConfigurationError("Missing GOOGLE_CLIENT_ID"), MSG_LOGIN_FAILED)

    auth_url = service.login_redirect(redirect_uri)
    return RedirectResponse(url=auth_url, status_code=302)


@router.get("/login/callback", response_model=LoginResponse)
async def login_callback(
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None, description="Set by Google when consent was denied"),
    service: StudioService = Depends(get_studio_service),
):
    """Finish the redirect sign-in with the code Google sent back."""
    if error or not code or not state:
        logger.warning(f"OAuth callback without code: {error or 'missing parameters'}")
        return _failure(AuthenticationError(error or "missing code"), MSG_LOGIN_FAILED)

    try:
        profile = await service.complete_login_redirect(code, state)
    except EnvironmentError as e:
        logger.error(f"Redirect sign-in failed: {e}")
        return _failure(e, MSG_LOGIN_FAILED)

    return LoginResponse(user=_profile_out(profile), notice=Notice.success(MSG_LOGIN_OK))


@router.post("/logout", response_model=LogoutResponse)
async def logout(service: StudioService = Depends(get_studio_service)):
    try:
        await service.logout()
    except Exception as e:
        logger.error(f"Logout failed: {e}")
        return JSONResponse(
            status_code=500,
            content={"notice": Notice.error(MSG_LOGOUT_FAILED).model_dump()},
        )
    return LogoutResponse(notice=Notice.info(MSG_LOGOUT_OK))


# ---------------------------------------------------------------------------
# PROJECTS
# ---------------------------------------------------------------------------


@router.get(
    "/projects",
    response_model=ProjectListResponse,
    dependencies=[Depends(require_page("projects"))],
)
async def list_projects(
    q: Optional[str] = Query(None, description="Search name, client or code"),
    refresh: bool = Query(False, description="Reload from Google first"),
    service: StudioService = Depends(get_studio_service),
):
    if refresh or not service.state.is_loaded:
        try:
            await service.load_all_data()
        except EnvironmentError as e:
            logger.error(f"Loading dashboard data failed: {e}")
            return _failure(e, MSG_LOAD_FAILED)

    return ProjectListResponse(projects=service.search_projects(q or ""))


@router.post(
    "/projects",
    response_model=ProjectCreateResponse,
    dependencies=[Depends(require_page("projects"))],
)
async def create_project(
    draft: ProjectDraft,
    service: StudioService = Depends(get_studio_service),
):
    try:
        project = await service.create_project(draft)
    except InputValidationError as e:
        return _failure(e, MSG_PROJECT_NAME_REQUIRED)
    except EnvironmentError as e:
        logger.error(f"Project creation failed: {e}")
        return _failure(e, MSG_PROJECT_FAILED)

    return ProjectCreateResponse(
        project=project,
        notice=Notice.success(f"專案「{project['name']}」建立完成，已建立 Drive 資料夾 + Sheets 紀錄。"),
    )


# ---------------------------------------------------------------------------
# SCHEDULE
# ---------------------------------------------------------------------------


@router.get(
    "/schedule",
    response_model=ScheduleResponse,
    dependencies=[Depends(require_page("schedule"))],
)
async def list_schedule(
    refresh: bool = Query(False, description="Reload from Google first"),
    service: StudioService = Depends(get_studio_service),
):
    if refresh or not service.state.is_loaded:
        try:
            await service.load_all_data()
        except EnvironmentError as e:
            logger.error(f"Loading dashboard data failed: {e}")
            return _failure(e, MSG_LOAD_FAILED)

    return ScheduleResponse(events=service.state.calendar)


@router.post(
    "/schedule",
    response_model=EventCreateOut,
    dependencies=[Depends(require_page("schedule"))],
)
async def create_schedule_event(
    draft: EventDraft,
    service: StudioService = Depends(get_studio_service),
):
    try:
        created = await service.create_event(draft)
    except InputValidationError as e:
        return _failure(e, MSG_EVENT_REQUIRED)
    except EnvironmentError as e:
        logger.error(f"Event creation failed: {e}")
        return _failure(e, MSG_EVENT_FAILED)

    message = f"行程「{created.summary}」已新增至 Google Calendar"
    if service.state.stale:
        message = f"{message}，但{MSG_EVENT_STALE}"

    return EventCreateOut(
        event_id=created.event_id,
        html_link=created.html_link,
        events=service.state.calendar,
        notice=Notice.success(message),
    )


# ---------------------------------------------------------------------------
# DRIVE
# ---------------------------------------------------------------------------


@router.post(
    "/drive/upload",
    response_model=UploadResponse,
    dependencies=[Depends(require_page("drive"))],
)
async def upload_attachment(
    file: Optional[UploadFile] = File(None),
    folder_name: Optional[str] = Form(None, alias="folderName"),
    service: StudioService = Depends(get_studio_service),
):
    """
    Upload an attachment into a project folder.

    Without a file part the upload runs in mock mode and nothing is sent
    to Google.
    """
    try:
        result = await service.upload_to_drive(file if file is not None else "", folder_name)
    except EnvironmentError as e:
        logger.error(f"Upload failed: {e}")
        return _failure(e, MSG_UPLOAD_FAILED)

    notice = Notice.info(MSG_UPLOAD_MOCK) if result.mock else Notice.success(MSG_UPLOAD_OK)
    return UploadResponse(success=result.success, url=result.url, mock=result.mock, notice=notice)
