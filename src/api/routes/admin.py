"""
Admin API Routes - Session Administration Endpoints

Authentication is via Admin API Key, not member JWTs.
"""

from uuid import UUID
from fastapi import APIRouter, Depends, status

from src.api.error import ClientError, ServerError
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.use_cases.auth import AuthErrorCode, RevokeSessionResponse, SessionAuthority
from src.depends import get_session_authority

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post(
    "/sessions/{session_id}/revoke",
    status_code=status.HTTP_200_OK,
    response_model=RevokeSessionResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def revoke_session(
    session_id: UUID,
    session_authority: SessionAuthority = Depends(get_session_authority),
):
    """
    Revoke Session (admin)

    Revokes any session by its current session id. Idempotent.

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
        - 404 Not Found: SESSION_NOT_FOUND
        - 500 Internal Server Error: Server error
    """
    result = await session_authority.revoke(session_id)

    if result.is_err():
        error = result.error
        if error.code == AuthErrorCode.SESSION_NOT_FOUND:
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value
