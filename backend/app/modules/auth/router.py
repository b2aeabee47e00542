"""Authentication router for token management."""

from typing import Optional

from fastapi import APIRouter, Depends, Response, status

from app.core.exceptions import Unauthorized
from app.modules.auth.jwt import get_bearer_token, revoke_token

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Logout",
    description="Revoke the bearer token used for this request.",
)
async def logout(
    token: Optional[str] = Depends(get_bearer_token),
) -> Response:
    """Revoke the caller's access token.

    Raises:
        HTTPException: 401 if the token is missing, invalid or already revoked
    """
    try:
        revoke_token(token)
    except Unauthorized as e:
        raise e.to_http()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
