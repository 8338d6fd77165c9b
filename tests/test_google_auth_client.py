"""
Tests for the Google OAuth endpoint client.

These tests verify:
- Authorization URL parameters (PKCE S256)
- Code exchange success and provider error passthrough data
- Userinfo mapping to UserProfile
- Revocation results
"""

import base64
import hashlib
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from unittest.mock import AsyncMock, patch

from app.environments.base import AuthenticationError, TokenExchangeError, UserProfile
from app.environments.google.auth.client import GoogleAuthClient
from app.environments.google.auth.schemas import DASHBOARD_SCOPES


@pytest.fixture
def auth_client() -> GoogleAuthClient:
    return GoogleAuthClient(
        client_id="test-client-id",
        client_secret="test-secret",
        redirect_uri="http://localhost:8000/dashboard/login/callback",
    )


class TestAuthorizationUrl:
    """Tests for get_authorization_url() and PKCE helpers."""

    def test_url_parameters(self, auth_client):
        url = auth_client.get_authorization_url(DASHBOARD_SCOPES, state="s-1", code_challenge="chal")

        parsed = urlparse(url)
        query = parse_qs(parsed.query)
        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == GoogleAuthClient.AUTHORIZATION_URL
        assert query["state"] == ["s-1"]
        assert query["code_challenge"] == ["chal"]
        assert query["code_challenge_method"] == ["S256"]
        assert query["scope"] == [" ".join(DASHBOARD_SCOPES)]
        assert query["prompt"] == ["consent"]
        assert "client_secret" not in query

    def test_pkce_challenge_is_s256_of_verifier(self):
        verifier, challenge = GoogleAuthClient.generate_pkce_pair()

        expected = base64.urlsafe_b64encode(hashlib.sha256(verifier.encode()).digest()).rstrip(b"=").decode()
        assert challenge == expected

    def test_state_is_random(self):
        assert GoogleAuthClient.generate_state() != GoogleAuthClient.generate_state()

    def test_is_configured_requires_secret(self):
        assert GoogleAuthClient(client_id="id", client_secret="").is_configured() is False
        assert GoogleAuthClient(client_id="id", client_secret="s").is_configured() is True


class TestExchangeCode:
    """Tests for exchange_code()."""

    @pytest.mark.asyncio
    async def test_success_returns_provider_json(self, auth_client):
        token_json = {"access_token": "ya29.x", "expires_in": 3599, "token_type": "Bearer"}

        with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock,
                          return_value=httpx.Response(200, json=token_json)) as post:
            payload = await auth_client.exchange_code("code", "verifier", "https://app/cb")

        assert payload == token_json
        sent = post.call_args.kwargs["data"]
        assert sent["grant_type"] == "authorization_code"
        assert sent["code_verifier"] == "verifier"
        assert sent["client_secret"] == "test-secret"

    @pytest.mark.asyncio
    async def test_provider_error_keeps_status_and_body(self, auth_client):
        error_json = {"error": "invalid_grant", "error_description": "Bad Request"}

        with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock,
                          return_value=httpx.Response(400, json=error_json)):
            with pytest.raises(TokenExchangeError) as exc_info:
                await auth_client.exchange_code("code", "verifier", "https://app/cb")

        assert exc_info.value.status_code == 400
        assert exc_info.value.payload == error_json
        assert "test-secret" not in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_network_error(self, auth_client):
        with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock,
                          side_effect=httpx.ConnectError("offline")):
            with pytest.raises(AuthenticationError):
                await auth_client.exchange_code("code", "verifier", "https://app/cb")


class TestUserInfoAndRevoke:
    """Tests for get_user_info() and revoke_token()."""

    @pytest.mark.asyncio
    async def test_user_info_maps_profile(self, auth_client):
        userinfo = {"sub": "1", "email": "designer@studio.tw", "name": "林設計", "picture": "https://lh3/p.jpg"}

        with patch.object(httpx.AsyncClient, "get", new_callable=AsyncMock,
                          return_value=httpx.Response(200, json=userinfo)):
            profile = await auth_client.get_user_info("ya29.x")

        assert profile == UserProfile(name="林設計", email="designer@studio.tw", photo="https://lh3/p.jpg")

    @pytest.mark.asyncio
    async def test_user_info_missing_fields_are_empty_strings(self, auth_client):
        with patch.object(httpx.AsyncClient, "get", new_callable=AsyncMock,
                          return_value=httpx.Response(200, json={"sub": "1"})):
            profile = await auth_client.get_user_info("ya29.x")

        assert profile == UserProfile.empty()

    @pytest.mark.asyncio
    async def test_user_info_failure_raises(self, auth_client):
        with patch.object(httpx.AsyncClient, "get", new_callable=AsyncMock,
                          return_value=httpx.Response(401)):
            with pytest.raises(AuthenticationError):
                await auth_client.get_user_info("ya29.x")

    @pytest.mark.asyncio
    async def test_revoke(self, auth_client):
        with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock,
                          return_value=httpx.Response(200)):
            assert await auth_client.revoke_token("ya29.x") is True

        with patch.object(httpx.AsyncClient, "post", new_callable=AsyncMock,
                          return_value=httpx.Response(400)):
            assert await auth_client.revoke_token("ya29.x") is False
