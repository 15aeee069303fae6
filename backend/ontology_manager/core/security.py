"""
Security utilities for bearer-token authentication.

Tokens are HS256 JWTs signed with ``SECRET_KEY`` and scoped to the
``AUTH_JWT_AUDIENCE`` audience. The ``sub`` claim identifies the principal.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Header
from jose import jwt, JWTError
import logging

from ontology_manager.config import settings
from ontology_manager.errors import AuthenticationError
from ontology_manager.models.schemas import Principal

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def create_access_token(
    user_id: str,
    email: Optional[str] = None,
    full_name: Optional[str] = None,
    expires_minutes: Optional[int] = None
) -> str:
    """Create a short-lived signed access token for a principal."""
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {
        "sub": user_id,
        "email": email,
        "aud": settings.AUTH_JWT_AUDIENCE,
        "iat": now,
        "exp": expire,
        "user_metadata": {"full_name": full_name or ""},
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def verify_access_token(token: str) -> Principal:
    """
    Verify a bearer token and extract the principal.

    Raises:
        AuthenticationError: If the token is invalid, expired or lacks a subject
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[ALGORITHM],
            audience=settings.AUTH_JWT_AUDIENCE
        )
    except JWTError as e:
        logger.debug(f"JWT validation failed: {e}")
        raise AuthenticationError("Unauthorized - Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Unauthorized - Invalid token: missing user ID")

    return Principal(
        user_id=user_id,
        email=payload.get("email"),
        full_name=(payload.get("user_metadata") or {}).get("full_name", "")
    )


def parse_bearer_header(authorization: Optional[str]) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthenticationError("Unauthorized - No valid token provided")

    token = authorization[len("Bearer "):].strip()
    if not token:
        raise AuthenticationError("Unauthorized - No valid token provided")
    return token


async def require_principal(authorization: Optional[str] = Header(None)) -> Principal:
    """
    FastAPI dependency enforcing bearer-token authentication.

    Returns:
        Principal: The verified principal
    """
    token = parse_bearer_header(authorization)
    return verify_access_token(token)
