from uuid import UUID
from fastapi import APIRouter, Depends, status

from src.api.error import ClientError, ServerError
from src.app.use_cases.auth import AuthErrorCode, RevokeSessionResponse, SessionAuthority
from src.depends import get_current_user, get_session_authority

router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_200_OK,
    response_model=RevokeSessionResponse,
)
async def revoke_session(
    session_id: UUID,
    current_user: dict = Depends(get_current_user),
    session_authority: SessionAuthority = Depends(get_session_authority),
):
    """
    Revoke Session (self-service)

    Revokes one of the caller's own sessions, e.g. to log out another device.
    Revoking an already revoked session succeeds with revoked=false.

    Raises:
        - 403 Forbidden: Session belongs to another account
        - 404 Not Found: Session not found
        - 500 Internal Server Error: Server error
    """
    result = await session_authority.revoke(
        session_id, requesting_user_account_id=UUID(current_user["sub"])
    )

    if result.is_err():
        error = result.error
        if error.code == AuthErrorCode.FORBIDDEN:
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        elif error.code == AuthErrorCode.SESSION_NOT_FOUND:
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value
