"""
Token issuance and liveness endpoints.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Request
from fastapi.responses import PlainTextResponse

from homehero_api.app.core.security import create_access_token
from homehero_api.app.schemas.auth import TokenResponse


router = APIRouter()


@router.get("/", response_class=PlainTextResponse, summary="Liveness check")
async def root() -> str:
    return "HomeHero Server is running!"


@router.post("/jwt", response_model=TokenResponse, summary="Issue a bearer token")
async def issue_token(request: Request, user: Dict[str, Any] = Body(...)) -> TokenResponse:
    """Sign the posted identity payload.

    The payload is not checked against any user store; the web client
    posts the identity its own sign-in provider returned.  The token
    expires after ``ACCESS_TOKEN_EXPIRE_DAYS`` days.
    """
    token = create_access_token(user, settings=request.app.state.settings)
    return TokenResponse(token=token)
