"""JWT bearer tokens for authentication."""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from app.core.config import settings
from app.core.exceptions import Unauthorized

ALGORITHM = "HS256"


class TokenPayload(BaseModel):
    """JWT token payload structure."""

    sub: str  # User ID
    exp: datetime
    iat: datetime
    type: str  # "access"
    jti: str  # JWT ID for blacklisting


class TokenBlacklist:
    """In-memory token blacklist for revoked tokens."""

    _blacklisted_tokens: set[str] = set()

    @classmethod
    def add(cls, jti: str) -> None:
        cls._blacklisted_tokens.add(jti)

    @classmethod
    def is_blacklisted(cls, jti: str) -> bool:
        return jti in cls._blacklisted_tokens

    @classmethod
    def clear(cls) -> None:
        """Clear all blacklisted tokens (for testing)."""
        cls._blacklisted_tokens.clear()


def create_token(
    user_id: uuid.UUID,
    token_type: str,
    expires_delta: timedelta,
) -> tuple[str, str]:
    """Create a JWT token.

    Args:
        user_id: User UUID
        token_type: Token type claim
        expires_delta: Token lifetime

    Returns:
        tuple[str, str]: (token, jti)
    """
    jti = str(uuid.uuid4())
    now = datetime.now(timezone.utc)

    payload = {
        "sub": str(user_id),
        "exp": now + expires_delta,
        "iat": now,
        "type": token_type,
        "jti": jti,
    }

    token = jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)
    return token, jti


def create_access_token(
    user_id: uuid.UUID,
    expires_delta: Optional[timedelta] = None,
) -> tuple[str, str]:
    """Create an access token; lifetime defaults to ACCESS_TOKEN_EXPIRE_MINUTES."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return create_token(user_id, "access", expires_delta)


def decode_token(token: str) -> TokenPayload | None:
    """Decode a JWT token, verifying signature and expiry.

    Returns:
        TokenPayload | None: Decoded payload if valid, None otherwise
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
        return TokenPayload(
            sub=payload["sub"],
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            type=payload["type"],
            jti=payload["jti"],
        )
    except (JWTError, KeyError, TypeError, ValueError):
        return None


def validate_token(token: str, expected_type: str = "access") -> TokenPayload | None:
    """Validate a JWT token's type and revocation status."""
    payload = decode_token(token)

    if payload is None:
        return None

    if payload.type != expected_type:
        return None

    if TokenBlacklist.is_blacklisted(payload.jti):
        return None

    return payload


def get_user_id_from_token(token: str) -> uuid.UUID | None:
    """Extract the user ID from a valid access token."""
    payload = validate_token(token, "access")
    if payload is None:
        return None

    try:
        return uuid.UUID(payload.sub)
    except ValueError:
        return None


def validate_credential(token: Optional[str]) -> uuid.UUID:
    """Resolve a bearer token to a user ID.

    Raises:
        Unauthorized: If the token is missing or invalid
    """
    if not token:
        raise Unauthorized("Missing bearer token")

    user_id = get_user_id_from_token(token)
    if user_id is None:
        raise Unauthorized("Invalid or expired token")
    return user_id


def revoke_token(token: Optional[str]) -> str:
    """Blacklist a valid access token so it is rejected from now on.

    Returns:
        str: The revoked token's jti

    Raises:
        Unauthorized: If the token is missing or already invalid
    """
    if not token:
        raise Unauthorized("Missing bearer token")

    payload = validate_token(token, "access")
    if payload is None:
        raise Unauthorized("Invalid or expired token")

    TokenBlacklist.add(payload.jti)
    return payload.jti


# FastAPI dependencies
bearer_scheme = HTTPBearer(auto_error=False)


async def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    """Raw bearer token from the Authorization header, if any."""
    if credentials is None:
        return None
    return credentials.credentials


async def get_current_user_id(
    token: Optional[str] = Depends(get_bearer_token),
) -> uuid.UUID:
    """Authenticated user ID; responds 401 when the token is missing or invalid."""
    try:
        return validate_credential(token)
    except Unauthorized as e:
        raise e.to_http()
