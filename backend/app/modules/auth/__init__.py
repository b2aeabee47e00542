"""Authentication module."""

from app.modules.auth.jwt import (
    TokenBlacklist,
    TokenPayload,
    create_access_token,
    decode_token,
    get_bearer_token,
    get_current_user_id,
    get_user_id_from_token,
    revoke_token,
    validate_credential,
    validate_token,
)
from app.modules.auth.router import router

__all__ = [
    "TokenBlacklist",
    "TokenPayload",
    "create_access_token",
    "decode_token",
    "get_bearer_token",
    "get_current_user_id",
    "get_user_id_from_token",
    "revoke_token",
    "router",
    "validate_credential",
    "validate_token",
]
