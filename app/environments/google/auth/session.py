"""
Google Session - Signed-in state shared by every API client.

GoogleSession is a plain object passed by reference: the AuthSessionManager
writes it on sign-in/sign-out and the bootstrap reads the token from it on
every request. Nothing is persisted; a process restart requires signing in
again.

Sign-in Paths:
==============
1. Interactive: TokenProvider.request_access_token() (consent prompt)
2. Redirect: begin_redirect_sign_in() returns the Google URL, the callback
   calls complete_redirect_sign_in(code, state), which exchanges the code
   through the token relay. Unanswered states expire after PENDING_TTL

Both paths end in _establish(), which resolves the profile best-effort.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import httpx

from app.core.config import settings
from app.environments.base import (
    AuthenticationError,
    NotSignedInError,
    OAuthTokens,
    TokenExpiredError,
    TokenProvider,
    UserProfile,
)
from app.environments.google.auth.client import GoogleAuthClient
from app.environments.google.auth.schemas import (
    DASHBOARD_SCOPES,
    GoogleTokenResponse,
    PendingAuthorization,
)


logger = logging.getLogger("studio.environments.google.session")

# Unanswered authorization redirects are dropped after this long
PENDING_TTL = timedelta(minutes=10)
MAX_PENDING = 100


@dataclass
class GoogleSession:
    """In-memory session: access token, expiry and profile."""
    access_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    scopes: List[str] = field(default_factory=list)
    profile: Optional[UserProfile] = None

    def establish(self, tokens: OAuthTokens) -> None:
        self.access_token = tokens.access_token
        self.expires_at = tokens.expires_at
        self.scopes = list(tokens.scopes or [])
        self.profile = None

    def set_profile(self, profile: UserProfile) -> None:
        self.profile = profile

    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        return datetime.now(timezone.utc) >= self.expires_at

    def is_active(self) -> bool:
        return bool(self.access_token) and not self.is_expired()

    def require_token(self) -> str:
        """
        Return the access token for an API call.

        Raises:
            NotSignedInError: No token at all
            TokenExpiredError: Token present but past its expiry
        """
        if not self.access_token:
            raise NotSignedInError("Not signed in")
        if self.is_expired():
            raise TokenExpiredError("Access token has expired")
        return self.access_token

    def clear(self) -> None:
        self.access_token = None
        self.expires_at = None
        self.scopes = []
        self.profile = None


class AuthSessionManager:
    """
    Sign-in, sign-out and current-user for the dashboard.

    Args:
        session: Shared GoogleSession (same object the bootstrap reads)
        bootstrap: GoogleClientBootstrap to initialize alongside the provider
        token_provider: Interactive TokenProvider
        auth_client: OAuth endpoint client (userinfo, revoke, auth URL)
        relay_url: Token relay endpoint for the redirect flow
    """

    def __init__(
        self,
        session: GoogleSession,
        bootstrap,
        token_provider: TokenProvider,
        auth_client: Optional[GoogleAuthClient] = None,
        relay_url: Optional[str] = None,
    ):
        self.session = session
        self.bootstrap = bootstrap
        self.token_provider = token_provider
        self.auth_client = auth_client or GoogleAuthClient()
        self.relay_url = relay_url or settings.GOOGLE_TOKEN_RELAY_URL
        self._pending: Dict[str, PendingAuthorization] = {}

    # -------------------------------------------------------------------------
    # LIFECYCLE
    # -------------------------------------------------------------------------

    async def initialize(self) -> bool:
        """
        Prepare the bootstrap and token provider.

        Returns:
            True if a valid session already exists. Never raises; any
            failure degrades to "not signed in".
        """
        try:
            await self.bootstrap.ensure_ready()
            await self.token_provider.prepare()
        except Exception as e:
            logger.warning(f"Auth initialization failed, continuing signed out: {e}")
            return False
        return self.session.is_active()

    async def sign_in(self, prompt: str = "consent") -> UserProfile:
        """
        Interactive sign-in through the token provider.

        Raises:
            ConfigurationError: OAuth client not configured
            AuthenticationError: Consent denied or token request failed
        """
        await self.bootstrap.ensure_ready()
        await self.token_provider.prepare()
        tokens = await self.token_provider.request_access_token(prompt=prompt)
        return await self._establish(tokens)

    async def sign_out(self) -> None:
        """Revoke the token (best-effort) and always clear the session."""
        token = self.session.access_token
        if token:
            try:
                revoked = await self.token_provider.revoke_token(token)
                if not revoked:
                    logger.warning("Token revocation was not confirmed by Google")
            except Exception as e:
                logger.warning(f"Token revocation failed: {e}")
        self.session.clear()
        logger.info("Signed out")

    def current_user(self) -> Optional[UserProfile]:
        if not self.session.is_active():
            return None
        return self.session.profile or UserProfile.empty()

    # -------------------------------------------------------------------------
    # REDIRECT FLOW
    # -------------------------------------------------------------------------

    def begin_redirect_sign_in(self, redirect_uri: Optional[str] = None) -> str:
        """
        Start the authorization-code + PKCE flow.

        Returns:
            Google authorization URL to redirect the browser to
        """
        self._purge_pending()

        redirect_uri = redirect_uri or self.auth_client.redirect_uri
        state = self.auth_client.generate_state()
        verifier, challenge = self.auth_client.generate_pkce_pair()

        self._pending[state] = PendingAuthorization(
            state=state,
            code_verifier=verifier,
            redirect_uri=redirect_uri,
        )

        return self.auth_client.get_authorization_url(
            scopes=DASHBOARD_SCOPES,
            state=state,
            code_challenge=challenge,
            redirect_uri=redirect_uri,
        )

    async def complete_redirect_sign_in(self, code: str, state: str) -> UserProfile:
        """
        Finish the redirect flow via the token relay.

        Raises:
            AuthenticationError: Unknown state or rejected exchange
        """
        pending = self._pending.pop(state, None)
        if pending is None:
            logger.warning("Redirect sign-in with unknown or reused state")
            raise AuthenticationError("Invalid or expired state")
        if pending.is_expired(PENDING_TTL):
            logger.warning("Redirect sign-in with expired state")
            raise AuthenticationError("Invalid or expired state")

        payload = await self._exchange_via_relay(code, pending)
        token_response = GoogleTokenResponse(**payload)

        tokens = OAuthTokens(
            access_token=token_response.access_token,
            token_type=token_response.token_type,
            refresh_token=token_response.refresh_token,
            expires_at=token_response.get_expires_at(),
            scopes=token_response.get_scopes_list(),
        )
        return await self._establish(tokens)

    async def _exchange_via_relay(self, code: str, pending: PendingAuthorization) -> dict:
        body = {
            "code": code,
            "codeVerifier": pending.code_verifier,
            "redirectUri": pending.redirect_uri,
        }

        async with httpx.AsyncClient() as client:
            try:
                response = await client.post(self.relay_url, json=body, timeout=30.0)
            except httpx.RequestError as e:
                logger.error(f"Network error calling token relay: {e}")
                raise AuthenticationError(f"Network error: {e}")

        if response.status_code != 200:
            logger.error(f"Token relay rejected the code: {response.status_code}")
            raise AuthenticationError(f"Token exchange failed ({response.status_code})")

        return response.json()

    # -------------------------------------------------------------------------
    # HELPERS
    # -------------------------------------------------------------------------

    def _purge_pending(self) -> None:
        """Drop expired states, then the oldest until one more fits under MAX_PENDING."""
        expired = [s for s, p in self._pending.items() if p.is_expired(PENDING_TTL)]
        for state in expired:
            del self._pending[state]

        # dicts keep insertion order, so the first keys are the oldest
        overflow = len(self._pending) - (MAX_PENDING - 1)
        for state in list(self._pending)[:max(overflow, 0)]:
            del self._pending[state]

        if expired or overflow > 0:
            logger.debug(
                "Dropped pending authorizations",
                extra={"expired": len(expired), "evicted": max(overflow, 0)}
            )

    async def _establish(self, tokens: OAuthTokens) -> UserProfile:
        self.session.establish(tokens)

        try:
            profile = await self.auth_client.get_user_info(tokens.access_token)
        except Exception as e:
            logger.warning(f"Profile lookup failed, using empty profile: {e}")
            profile = UserProfile.empty()

        self.session.set_profile(profile)
        logger.info(
            "Signed in",
            extra={"email": profile.email, "scopes": len(self.session.scopes)}
        )
        return profile
