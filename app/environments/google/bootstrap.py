"""
Google API Client Bootstrap - Shared HTTP client and discovery documents.

Every Sheets, Calendar and Drive call goes through this module. The
bootstrap is created once per process and initialized lazily the first
time an API call is made.

Initialization Sequence:
========================
1. Library load: create the shared httpx.AsyncClient
2. Client init: fetch the discovery document of each API (API key auth)
   and remember its base URL (rootUrl + servicePath)

State Machine:
==============
    UNINITIALIZED --ensure_ready()--> IN_PROGRESS --ok--> READY
          ^                               |
          +------------failure------------+

Concurrent callers of ensure_ready() during IN_PROGRESS await the same
in-flight initialization, so the library is loaded and the client is
initialized exactly once. A failed attempt returns to UNINITIALIZED and
every waiter of that attempt receives the same error.

Discovery Reference:
====================
https://developers.google.com/discovery/v1/reference/apis/getRest
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import httpx

from app.core.config import settings
from app.core.logging_config import mask_secret
from app.environments.base import APIError, ConfigurationError, TokenExpiredError
from app.environments.google.auth.session import GoogleSession


logger = logging.getLogger("studio.environments.google.bootstrap")


# ---------------------------------------------------------------------------
# DISCOVERY
# ---------------------------------------------------------------------------

DISCOVERY_URL = "https://www.googleapis.com/discovery/v1/apis/{api}/{version}/rest"

# api name -> version, loaded during client init
DISCOVERY_APIS = {
    "sheets": "v4",
    "calendar": "v3",
    "drive": "v3",
}


class BootstrapState(str, Enum):
    UNINITIALIZED = "uninitialized"
    IN_PROGRESS = "in_progress"
    READY = "ready"


@dataclass
class DiscoveryDocument:
    """The part of a discovery document needed to build request URLs."""
    name: str
    version: str
    root_url: str
    service_path: str

    @property
    def base_url(self) -> str:
        return f"{self.root_url}{self.service_path}"

    @property
    def upload_base_url(self) -> str:
        """Media upload endpoints live under {rootUrl}upload/{servicePath}."""
        return f"{self.root_url}upload/{self.service_path}"


class GoogleClientBootstrap:
    """
    Lazily initialized, shared Google API client.

    Attributes:
        session: The GoogleSession whose access token authorizes requests.
                 Shared by reference with the AuthSessionManager.
        state: Current BootstrapState

    Example:
        bootstrap = GoogleClientBootstrap(session)
        await bootstrap.ensure_ready()
        data = await bootstrap.request("sheets", "GET", "v4/spreadsheets/...")
    """

    def __init__(
        self,
        session: GoogleSession,
        client_id: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
    ):
        self.session = session
        self.client_id = client_id if client_id is not None else settings.GOOGLE_CLIENT_ID
        self.api_key = api_key if api_key is not None else settings.GOOGLE_API_KEY
        self.timeout = timeout

        self.state = BootstrapState.UNINITIALIZED
        self.documents: Dict[str, DiscoveryDocument] = {}
        self._http_client: Optional[httpx.AsyncClient] = None
        self._pending: Optional[asyncio.Future] = None

    @property
    def is_ready(self) -> bool:
        return self.state == BootstrapState.READY

    # -------------------------------------------------------------------------
    # INITIALIZATION
    # -------------------------------------------------------------------------

    def check_configuration(self) -> None:
        """
        Raise ConfigurationError if the client id or API key is missing.

        Runs before any network activity.
        """
        missing = []
        if not self.client_id:
            missing.append("GOOGLE_CLIENT_ID")
        if not self.api_key:
            missing.append("GOOGLE_API_KEY")
        if missing:
            logger.error(f"Google client is not configured: missing {', '.join(missing)}")
            raise ConfigurationError(f"Missing configuration: {', '.join(missing)}")

    async def ensure_ready(self) -> None:
        """
        Initialize the client once; later calls return immediately.

        Raises:
            ConfigurationError: Client id or API key missing
            APIError: A discovery document could not be loaded
        """
        if self.state == BootstrapState.READY:
            return

        if self._pending is None:
            self.check_configuration()
            self.state = BootstrapState.IN_PROGRESS
            self._pending = asyncio.ensure_future(self._initialize())

        # shield: a cancelled waiter must not cancel the shared initialization
        await asyncio.shield(self._pending)

    async def _initialize(self) -> None:
        try:
            await self._load_library()
            await self._init_client()
        except Exception:
            logger.warning("Google client initialization failed, state reset")
            self.state = BootstrapState.UNINITIALIZED
            self._pending = None
            raise

        self.state = BootstrapState.READY
        self._pending = None
        logger.info(
            "Google client ready",
            extra={"apis": sorted(self.documents)}
        )

    async def _load_library(self) -> None:
        """Create the shared HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.timeout)
        logger.debug("HTTP client created")

    async def _init_client(self) -> None:
        """Fetch the discovery document of every API."""
        logger.info(
            "Loading discovery documents",
            extra={"api_key": mask_secret(self.api_key)}
        )

        documents = {}
        for api, version in DISCOVERY_APIS.items():
            url = DISCOVERY_URL.format(api=api, version=version)
            try:
                response = await self._http_client.get(url, params={"key": self.api_key})
            except httpx.RequestError as e:
                logger.error(f"Network error loading {api} discovery document: {e}")
                raise APIError(f"Network error: {e}")

            if response.status_code != 200:
                logger.error(f"Discovery document for {api} {version} failed: {response.status_code}")
                raise APIError(
                    f"Failed to load {api} {version} discovery document",
                    status_code=response.status_code,
                    response=response.text,
                )

            doc = response.json()
            documents[api] = DiscoveryDocument(
                name=api,
                version=version,
                root_url=doc.get("rootUrl", "https://www.googleapis.com/"),
                service_path=doc.get("servicePath", ""),
            )

        self.documents = documents

    async def reset(self) -> None:
        """Return to UNINITIALIZED and close the HTTP client."""
        if self._http_client is not None:
            await self._http_client.aclose()
        self._http_client = None
        self._pending = None
        self.documents = {}
        self.state = BootstrapState.UNINITIALIZED

    # -------------------------------------------------------------------------
    # REQUESTS
    # -------------------------------------------------------------------------

    def get_base_url(self, api: str, upload: bool = False) -> str:
        document = self.documents.get(api)
        if document is None:
            raise ConfigurationError(f"API '{api}' has no discovery document loaded")
        return document.upload_base_url if upload else document.base_url

    async def request(
        self,
        api: str,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        json_body: Optional[dict] = None,
        content: Optional[bytes] = None,
        headers: Optional[dict] = None,
        upload: bool = False,
    ) -> Dict[str, Any]:
        """
        Make an authorized request to a discovered API.

        Args:
            api: "sheets", "calendar" or "drive"
            method: HTTP method
            endpoint: Path relative to the API's base URL
            params: Query parameters
            json_body: JSON request body
            content: Raw request body (multipart uploads)
            headers: Extra headers
            upload: Use the media upload base URL

        Returns:
            Parsed JSON response ({} for empty bodies)

        Raises:
            NotSignedInError: No active session
            TokenExpiredError: Token expired locally or rejected with 401
            APIError: Any other failure
        """
        await self.ensure_ready()

        token = self.session.require_token()
        request_headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
        if headers:
            request_headers.update(headers)

        url = f"{self.get_base_url(api, upload=upload)}{endpoint}"

        try:
            response = await self._http_client.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                content=content,
                headers=request_headers,
            )
        except httpx.RequestError as e:
            logger.error(f"Network error in {api} API: {e}")
            raise APIError(f"Network error: {e}")

        if response.status_code == 401:
            logger.error(f"{api} API: Unauthorized (token may be expired)")
            raise TokenExpiredError("Unauthorized - access token may be expired")

        if response.status_code == 403:
            logger.error(f"{api} API: Forbidden (scope may be missing)")
            raise APIError(
                f"Forbidden - {api} scope may not be granted",
                status_code=403,
                response=response.text,
            )

        if response.status_code < 200 or response.status_code >= 300:
            error_detail = response.text
            logger.error(f"{api} API error: {response.status_code} - {error_detail}")
            raise APIError(
                f"API request failed: {error_detail}",
                status_code=response.status_code,
                response=error_detail,
            )

        if not response.content:
            return {}
        return response.json()
