"""
Interactive token provider backed by google-auth-oauthlib.

InstalledAppFlow opens the consent screen in the operator's browser and
listens on a local port for the redirect. The flow is blocking, so it runs
in a worker thread to keep the event loop responsive.
"""

import asyncio
import logging
from datetime import timezone
from typing import Optional

from google_auth_oauthlib.flow import InstalledAppFlow

from app.environments.base import (
    AuthenticationError,
    ConfigurationError,
    OAuthTokens,
    TokenProvider,
)
from app.environments.google.auth.client import GoogleAuthClient
from app.environments.google.auth.schemas import DASHBOARD_SCOPES


logger = logging.getLogger("studio.environments.google.auth")


class InstalledAppTokenProvider(TokenProvider):
    """
    TokenProvider running the installed-app consent flow.

    Args:
        auth_client: Used for the client id/secret and for revocation
        scopes: Scopes requested in the single consent prompt
        port: Local redirect port (0 = any free port)
    """

    provider_name = "google"

    def __init__(
        self,
        auth_client: Optional[GoogleAuthClient] = None,
        scopes: Optional[list] = None,
        port: int = 0,
    ):
        self.auth_client = auth_client or GoogleAuthClient()
        self.scopes = scopes or DASHBOARD_SCOPES
        self.port = port

    def _client_config(self) -> dict:
        return {
            "installed": {
                "client_id": self.auth_client.client_id,
                "client_secret": self.auth_client.client_secret,
                "auth_uri": GoogleAuthClient.AUTHORIZATION_URL,
                "token_uri": GoogleAuthClient.TOKEN_URL,
                "redirect_uris": ["http://localhost"],
            }
        }

    async def prepare(self) -> None:
        if not self.auth_client.client_id:
            raise ConfigurationError("Missing configuration: GOOGLE_CLIENT_ID")

    async def request_access_token(self, prompt: str = "consent") -> OAuthTokens:
        await self.prepare()

        # run_local_server sets redirect_uri on the flow, so each sign-in gets its own
        flow = InstalledAppFlow.from_client_config(self._client_config(), self.scopes)

        logger.info(f"Requesting access token for {len(self.scopes)} scopes")
        try:
            creds = await asyncio.to_thread(
                flow.run_local_server,
                port=self.port,
                prompt=prompt,
            )
        except Exception as e:
            logger.error(f"Interactive sign-in failed: {e}")
            raise AuthenticationError(f"Sign-in failed: {e}")

        # google-auth stores expiry as naive UTC
        expires_at = creds.expiry.replace(tzinfo=timezone.utc) if creds.expiry else None

        return OAuthTokens(
            access_token=creds.token,
            refresh_token=creds.refresh_token,
            expires_at=expires_at,
            scopes=list(creds.scopes or self.scopes),
        )

    async def revoke_token(self, token: str) -> bool:
        return await self.auth_client.revoke_token(token)
