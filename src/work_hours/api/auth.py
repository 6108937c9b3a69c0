"""Authentication for the API.

Tokens are JWTs signed with the secret key from configuration. The ``sub``
claim carries the user identity that owns jobs and time entries.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from fastapi import Depends, HTTPException, Request, status  # type: ignore[import-untyped]
from fastapi.security import (  # type: ignore[import-untyped]
    HTTPAuthorizationCredentials,
    HTTPBearer,
)
from jose import JWTError, jwt  # type: ignore[import-untyped]

from work_hours.api.dependencies import get_config
from work_hours.core.config import ConfigManager

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

# A missing header is not an error: reads then return empty lists and
# writes are rejected by the core with 401.
security = HTTPBearer(auto_error=False)


def create_access_token(
    data: dict[str, Any], secret_key: str, expires_delta: Optional[timedelta] = None
) -> str:
    """Create a JWT access token.

    Args:
        data: Data to encode in the token
        secret_key: Secret key for encoding
        expires_delta: Optional expiration time delta

    Returns:
        Encoded JWT token string

    Example:
        >>> token = create_access_token(
        ...     data={"sub": "alice"},
        ...     secret_key="your-secret-key",
        ...     expires_delta=timedelta(hours=24)
        ... )
    """
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(hours=24))
    to_encode.update({"exp": expire, "iat": now})

    encoded_jwt: str = jwt.encode(to_encode, secret_key, algorithm=ALGORITHM)
    return encoded_jwt


def decode_token(token: str, secret_key: str) -> dict[str, Any]:
    """Decode and verify a token.

    Raises:
        HTTPException: 401 if the token is invalid, expired or has no subject
    """
    try:
        payload: dict[str, Any] = jwt.decode(token, secret_key, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"Rejected token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication credentials: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has no subject",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """Resolve the user identity of a request.

    Returns:
        The token subject, ``general.user_id`` when authentication is
        disabled, or None when the request carries no credentials

    Raises:
        HTTPException: If the token is invalid or no secret key is configured

    Note:
        This is a dependency function for FastAPI endpoints.
    """
    config = get_config(request)

    if not config.get("api.authentication.enabled", True):
        user_id: str = config.get("general.user_id", "local")
        return user_id

    if credentials is None:
        return None

    secret_key = config.get("api.authentication.secret_key")
    if not secret_key:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="API secret key not configured",
        )

    subject: str = decode_token(credentials.credentials, secret_key)["sub"]
    return subject


def get_token_expiry_seconds(config: ConfigManager) -> int:
    """Get token expiry time in seconds from config."""
    hours: int = config.get("api.authentication.token_expiry_hours", 24)
    return hours * 3600


def create_token_for_user(config: ConfigManager, user_id: Optional[str] = None) -> dict[str, Any]:
    """Create a complete token response.

    Args:
        config: Configuration manager
        user_id: Token subject. Defaults to ``general.user_id``

    Returns:
        Dictionary with access_token, token_type, and expires_in
    """
    secret_key = config.ensure_api_secret_key()
    subject = user_id or config.get("general.user_id", "local")

    expiry_hours = config.get("api.authentication.token_expiry_hours", 24)
    access_token = create_access_token(
        data={"sub": subject}, secret_key=secret_key, expires_delta=timedelta(hours=expiry_hours)
    )

    return {
        "access_token": access_token,
        "token_type": "bearer",
        "expires_in": get_token_expiry_seconds(config),
    }
