"""
Bearer-token authentication.

Tokens are HS256 JSON Web Tokens signed with the server secret via
``python-jose``.  The issuance endpoint signs whatever identity payload
the client posts (there is no user table to check it against) and
adds an ``exp`` claim seven days ahead.

Protected routes depend on ``get_current_user``, which distinguishes a
missing credential (401) from a present but invalid or expired one
(403).  Routes that act on "my" data additionally depend on
``require_email_match``, which compares the ``email`` query parameter
with the ``email`` claim of the verified token.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Depends, Query, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from .config import Settings, settings as default_settings
from .errors import ForbiddenError, UnauthorizedError


logger = logging.getLogger(__name__)


def create_access_token(
    data: Dict[str, Any],
    expires_delta: Optional[timedelta] = None,
    settings: Optional[Settings] = None,
) -> str:
    """Create a signed JWT carrying ``data`` plus an ``exp`` claim.

    Parameters
    ----------
    data : dict
        Identity claims to embed (e.g. ``{"email": "p@x.com"}``).
    expires_delta : Optional[timedelta]
        Token lifetime.  Defaults to ``settings.access_token_expire_days``.
    settings : Optional[Settings]
        Settings providing the secret and algorithm; the module-level
        settings are used when omitted.
    """
    settings = settings or default_settings
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=settings.access_token_expire_days))
    to_encode["exp"] = expire
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str, settings: Optional[Settings] = None) -> Optional[Dict[str, Any]]:
    """Verify signature and expiry; return the claims or ``None``."""
    settings = settings or default_settings
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        logger.debug("Rejected bearer token: %s", exc)
        return None


security = HTTPBearer(auto_error=False)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Dict[str, Any]:
    """Dependency returning the decoded claims of the caller's token.

    Raises ``UnauthorizedError`` when no Authorization header is sent
    and ``ForbiddenError`` when the credential is not a verifiable
    bearer token.
    """
    if credentials is None:
        # A non-Bearer Authorization header is a credential, just not a valid one.
        if request.headers.get("Authorization"):
            raise ForbiddenError()
        raise UnauthorizedError()
    app_settings = getattr(request.app.state, "settings", None)
    payload = decode_access_token(credentials.credentials, app_settings)
    if payload is None:
        raise ForbiddenError()
    return payload


def require_email_match(
    email: Optional[str] = Query(None, description="Email of the caller"),
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> str:
    """Dependency enforcing that ``?email=`` names the authenticated caller.

    Returns the verified email on success.
    """
    if not email or current_user.get("email") != email:
        logger.warning("Email mismatch: token=%s query=%s", current_user.get("email"), email)
        raise ForbiddenError()
    return email
