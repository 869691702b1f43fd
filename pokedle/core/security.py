from __future__ import annotations

import secrets
from datetime import UTC, datetime, timedelta
from typing import Annotated, Any

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from loguru import logger
from sqlmodel.ext.asyncio.session import AsyncSession

from pokedle.core.config import settings
from pokedle.core.db import get_db
from pokedle.models.user import User

bearer_scheme = HTTPBearer(auto_error=False)


def _signing_key() -> str:
    """Key that signs and verifies access tokens.

    Without ``JWT_SECRET`` a random key is generated once per process, so tokens
    issued before a restart stop verifying.
    """
    if not settings.jwt_secret:
        logger.warning(
            "JWT_SECRET is not set, signing tokens with a random per-process key. "
            "Tokens will be rejected after a restart."
        )
        settings.jwt_secret = secrets.token_urlsafe(32)
    return settings.jwt_secret


def create_access_token(*, sub: str, is_admin: bool) -> str:
    """Issue an access token for a user id, valid for ``access_token_ttl_seconds``."""
    issued_at = datetime.now(UTC)
    expires_at = issued_at + timedelta(seconds=settings.access_token_ttl_seconds)
    claims: dict[str, Any] = {
        "sub": sub,
        "is_admin": is_admin,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(claims, _signing_key(), algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any]:
    return jwt.decode(token, _signing_key(), algorithms=[settings.jwt_algorithm])


def _user_id_from_token(token: str) -> int:
    try:
        claims = decode_access_token(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired") from None
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token") from None

    subject = claims.get("sub")
    if not subject or not str(subject).isdigit():
        raise HTTPException(status_code=401, detail="Invalid token subject")
    return int(subject)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Load the player named by the bearer token.

    Responds 401 for a missing or unusable token and 404 when the user row is gone.
    """
    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = await db.get(User, _user_id_from_token(credentials.credentials))
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def require_admin(user: Annotated[User, Depends(get_current_user)]) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin privileges required")
    return user
