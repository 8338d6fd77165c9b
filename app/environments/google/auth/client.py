"""
Google OAuth Client - Handles OAuth 2.0 endpoints of Google.

Key Features:
=============
1. Authorization URL generation with PKCE (S256) for the redirect flow
2. Code-to-token exchange (used by the token relay endpoint)
3. User profile lookup from the OpenID Connect userinfo endpoint
4. Token revocation for sign-out

References:
===========
- OAuth 2.0: https://developers.google.com/identity/protocols/oauth2
- Token endpoint: https://oauth2.googleapis.com/token
- Userinfo: https://openidconnect.googleapis.com/v1/userinfo
"""

import base64
import hashlib
import logging
import secrets
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode

import httpx

from app.core.config import settings
from app.environments.base import (
    AuthenticationError,
    TokenExchangeError,
    UserProfile,
)
from app.environments.google.auth.schemas import GoogleUserInfo


logger = logging.getLogger("studio.environments.google.auth")


class GoogleAuthClient:
    """
    Google OAuth 2.0 endpoint client.

    The client secret is only needed for the code exchange, which runs on
    the server (token relay). It is never written to logs or responses.

    Example Usage:
        client = GoogleAuthClient()
        verifier, challenge = client.generate_pkce_pair()
        url = client.get_authorization_url(DASHBOARD_SCOPES, state, challenge)
        # ... user consents, Google redirects back with ?code=...
        payload = await client.exchange_code(code, verifier, redirect_uri)
        profile = await client.get_user_info(payload["access_token"])
    """

    provider_name = "google"

    # Google OAuth endpoints
    AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
    REVOKE_URL = "https://oauth2.googleapis.com/revoke"

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        redirect_uri: Optional[str] = None,
    ):
        """
        Initialize the Google OAuth client.

        Args:
            client_id: Google OAuth Client ID (defaults to settings)
            client_secret: Google OAuth Client Secret (defaults to settings)
            redirect_uri: OAuth callback URL (defaults to settings)
        """
        self.client_id = client_id if client_id is not None else settings.GOOGLE_CLIENT_ID
        self.client_secret = client_secret if client_secret is not None else settings.GOOGLE_CLIENT_SECRET
        self.redirect_uri = redirect_uri or settings.GOOGLE_REDIRECT_URI

    def is_configured(self) -> bool:
        """True when both client id and client secret are present."""
        return bool(self.client_id and self.client_secret)

    # -------------------------------------------------------------------------
    # AUTHORIZATION URL
    # -------------------------------------------------------------------------

    def get_authorization_url(
        self,
        scopes: List[str],
        state: str,
        code_challenge: str,
        redirect_uri: Optional[str] = None,
        prompt: str = "consent",
    ) -> str:
        """
        Generate the Google OAuth authorization URL (code flow + PKCE).

        Args:
            scopes: OAuth scopes to request
            state: CSRF protection token
            code_challenge: S256 challenge derived from the PKCE verifier
            redirect_uri: Override default callback URL
            prompt: "consent" forces the consent screen

        Returns:
            Full authorization URL to redirect the user to
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": redirect_uri or self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(scopes),
            "state": state,
            "code_challenge": code_challenge,
            "code_challenge_method": "S256",
            "include_granted_scopes": "true",
            "prompt": prompt,
        }

        auth_url = f"{self.AUTHORIZATION_URL}?{urlencode(params)}"

        logger.info(
            f"Generated Google auth URL with {len(scopes)} scopes",
            extra={"scopes": scopes}
        )

        return auth_url

    # -------------------------------------------------------------------------
    # TOKEN EXCHANGE
    # -------------------------------------------------------------------------

    async def exchange_code(
        self,
        code: str,
        code_verifier: str,
        redirect_uri: str,
    ) -> Dict[str, Any]:
        """
        Exchange an authorization code + PKCE verifier for tokens.

        Args:
            code: Authorization code from the Google redirect
            code_verifier: PKCE verifier matching the challenge sent earlier
            redirect_uri: Must match the redirect_uri used in authorization

        Returns:
            The provider's token JSON, unchanged

        Raises:
            TokenExchangeError: Provider rejected the exchange (status + body attached)
            AuthenticationError: Network failure talking to the token endpoint
        """
        token_data = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "code_verifier": code_verifier,
            "grant_type": "authorization_code",
            "redirect_uri": redirect_uri,
        }

        logger.info("Exchanging authorization code for tokens")

        async with httpx.AsyncClient() as client:
            try:
                response = await client.post(
                    self.TOKEN_URL,
                    data=token_data,
                    timeout=30.0,
                )
            except httpx.RequestError as e:
                logger.error(f"Network error during token exchange: {e}")
                raise AuthenticationError(f"Network error: {e}")

        try:
            payload = response.json()
        except ValueError:
            payload = {"error": "invalid_response", "error_description": response.text}

        if response.status_code != 200:
            error_msg = None
            if isinstance(payload, dict):
                error_msg = payload.get("error_description") or payload.get("error")
            logger.error(f"Token exchange failed: {response.status_code} {error_msg or ''}".rstrip())
            raise TokenExchangeError(
                f"Token exchange failed: {error_msg or response.status_code}",
                status_code=response.status_code,
                payload=payload,
            )

        logger.info(
            "Successfully obtained Google tokens",
            extra={"expires_in": payload.get("expires_in")}
        )

        return payload

    # -------------------------------------------------------------------------
    # USER INFO
    # -------------------------------------------------------------------------

    async def get_user_info(self, access_token: str) -> UserProfile:
        """
        Get the signed-in user's profile.

        Requires the openid/email/profile scopes to have been granted.

        Raises:
            AuthenticationError: If the lookup fails
        """
        logger.info("Fetching user info from Google")

        async with httpx.AsyncClient() as client:
            try:
                response = await client.get(
                    self.USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                    timeout=30.0,
                )
            except httpx.RequestError as e:
                logger.error(f"Network error fetching user info: {e}")
                raise AuthenticationError(f"Network error: {e}")

        if response.status_code != 200:
            logger.error(f"Failed to fetch user info: {response.status_code}")
            raise AuthenticationError("Failed to fetch user info")

        google_user = GoogleUserInfo(**response.json())

        return UserProfile(
            name=google_user.name or "",
            email=google_user.email or "",
            photo=google_user.picture or "",
        )

    # -------------------------------------------------------------------------
    # TOKEN REVOCATION
    # -------------------------------------------------------------------------

    async def revoke_token(self, token: str) -> bool:
        """
        Revoke an access or refresh token.

        Returns:
            True if revocation succeeded; network failures return False
        """
        logger.info("Revoking Google token")

        async with httpx.AsyncClient() as client:
            try:
                response = await client.post(
                    self.REVOKE_URL,
                    params={"token": token},
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                    timeout=30.0,
                )
            except httpx.RequestError as e:
                logger.error(f"Network error during token revocation: {e}")
                return False

        success = response.status_code == 200
        if success:
            logger.info("Access token revoked")
        else:
            logger.warning(f"Token revocation returned status {response.status_code}")
        return success

    # -------------------------------------------------------------------------
    # UTILITY METHODS
    # -------------------------------------------------------------------------

    @staticmethod
    def generate_state() -> str:
        """Cryptographically secure CSRF state parameter."""
        return secrets.token_urlsafe(32)

    @staticmethod
    def generate_pkce_pair() -> Tuple[str, str]:
        """
        Create a PKCE verifier and its S256 challenge.

        Returns:
            (code_verifier, code_challenge)
        """
        verifier = secrets.token_urlsafe(64)
        digest = hashlib.sha256(verifier.encode("ascii")).digest()
        challenge = base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
        return verifier, challenge
