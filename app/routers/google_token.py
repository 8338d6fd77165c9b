"""
Google Token Relay - Exchanges an authorization code for tokens.

The browser never sees the OAuth client secret: it posts the code and its
PKCE verifier here, and this endpoint calls Google's token endpoint with
the server-side credentials.

Endpoints:
==========
- POST    /api/google/token → provider token JSON (or error JSON)
- OPTIONS /api/google/token → 204
- other methods             → 405 {"error": "method_not_allowed"}

Request Body:
=============
    {"code": "4/0A...", "codeVerifier": "...", "redirectUri": "https://..."}

Errors:
=======
- 400 invalid_request: a field is missing
- 500 server_misconfigured: client id/secret not configured
- <provider status>: provider error body passed through unchanged
- 500 server_error: anything else

CORS: origins come from the app-wide CORSMiddleware allow-list; this
router adds the allowed methods and headers to its own responses.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.deps import get_google_auth_client
from app.environments.base import TokenExchangeError
from app.environments.google.auth.client import GoogleAuthClient
from app.environments.google.auth.schemas import TokenExchangeRequest


logger = logging.getLogger("studio.routers.google_token")


router = APIRouter(prefix="/api/google", tags=["google-token"])


RELAY_HEADERS = {
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def _json(status_code: int, content) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content, headers=RELAY_HEADERS)


@router.options("/token")
async def token_options():
    return Response(status_code=204, headers=RELAY_HEADERS)


@router.post("/token")
async def exchange_token(
    request: Request,
    auth_client: GoogleAuthClient = Depends(get_google_auth_client),
):
    """
    Exchange {code, codeVerifier, redirectUri} for Google tokens.

    The body is parsed by hand so that missing fields produce the relay's
    own error shape instead of a FastAPI validation error.
    """
    try:
        try:
            raw = await request.json()
        except ValueError:
            raw = {}
        if not isinstance(raw, dict):
            raw = {}

        try:
            body = TokenExchangeRequest(**raw)
            missing = body.missing_fields()
        except ValidationError:
            missing = ["code", "codeVerifier", "redirectUri"]

        if missing:
            logger.warning(
                "Token exchange rejected: missing fields",
                extra={"missing": missing}
            )
            return _json(400, {
                "error": "invalid_request",
                "error_description": "Missing code / codeVerifier / redirectUri",
            })

        if not auth_client.is_configured():
            logger.error("Token relay is not configured (client id or secret missing)")
            return _json(500, {
                "error": "server_misconfigured",
                "error_description": "Missing GOOGLE_CLIENT_ID or GOOGLE_CLIENT_SECRET",
            })

        try:
            payload = await auth_client.exchange_code(
                code=body.code,
                code_verifier=body.code_verifier,
                redirect_uri=body.redirect_uri,
            )
        except TokenExchangeError as e:
            return _json(e.status_code, e.payload)

        return _json(200, payload)

    except Exception as e:
        logger.exception("Token exchange failed unexpectedly")
        return _json(500, {
            "error": "server_error",
            "error_description": str(e),
        })


@router.api_route("/token", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def token_method_not_allowed():
    return _json(405, {"error": "method_not_allowed"})
