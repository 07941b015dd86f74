"""Bearer token verification."""
from __future__ import annotations

import logging
from typing import Dict

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from settings import get_settings

ALGORITHM = "HS256"
REQUIRED_CLAIMS = ("exp", "sub")
auth_scheme = HTTPBearer(auto_error=False)

logger = logging.getLogger(__name__)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token(token: str) -> Dict:
    settings = get_settings()
    if not settings.auth_secret:
        raise RuntimeError("TRAFFIC_AUTH_SECRET environment variable must be set to validate tokens.")
    return jwt.decode(
        token,
        settings.auth_secret,
        algorithms=[ALGORITHM],
        audience=settings.auth_audience,
        issuer=settings.auth_issuer,
        options={"require": list(REQUIRED_CLAIMS)},
    )


def verify_token(credentials: HTTPAuthorizationCredentials = Depends(auth_scheme)) -> str:
    """Return the caller's user id or reject the request with 401."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Unauthorized")

    try:
        payload = decode_token(credentials.credentials)
    except jwt.ExpiredSignatureError as exc:
        logger.warning("Rejected expired token", extra={"reason": "expired"})
        raise _unauthorized("Token expired") from exc
    except jwt.PyJWTError as exc:
        logger.warning("Rejected invalid token", extra={"reason": type(exc).__name__})
        raise _unauthorized("Invalid token") from exc

    return str(payload["sub"])
