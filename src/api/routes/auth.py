import logging
import re
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, EmailStr, Field, field_validator

from src.libs.result import Error, Result
from src.api.error import ClientError, ServerError
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.secret_hasher import ISecretHasher
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    AuthErrorCode,
    AuthorizedMemberResponse,
    JoinCommand,
    JoinUseCase,
    LoginUseCase,
    REFRESH_FAILURE_CODES,
    RefreshTokenResponse,
    RevokeSessionResponse,
    SessionAuthority,
)
from src.depends import (
    get_current_user,
    get_login_use_case,
    get_secret_hasher,
    get_session_authority,
    get_unit_of_work,
)
from src.domain.entities import SessionRole

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def client_metadata(request: Request) -> dict:
    return {
        "user_agent": request.headers.get("user-agent"),
        "ip_address": request.client.host if request.client else None,
    }


class JoinRequest(BaseModel):
    """
    Member join HTTP request payload

    Validates incoming HTTP request before converting to JoinCommand.
    """

    email: EmailStr = Field(..., description="Account email address")
    password: str = Field(..., min_length=8, description="Account password (min 8 chars)")
    nickname: str = Field(..., min_length=1, max_length=80, description="Public nickname")


class AdministratorJoinRequest(JoinRequest):
    """Administrator join payload; stricter password policy"""

    password: str = Field(
        ...,
        min_length=10,
        description="Min 10 chars with upper, lower, digit and special character",
    )

    @field_validator("password")
    @classmethod
    def password_complexity(cls, value: str) -> str:
        for pattern in (r"[A-Z]", r"[a-z]", r"[0-9]", r"[^A-Za-z0-9]"):
            if not re.search(pattern, value):
                raise ValueError(
                    "Password must contain upper and lower case letters, a digit and a special character"
                )
        return value


class LoginRequest(BaseModel):
    """Login HTTP request payload"""

    email: EmailStr = Field(..., description="Account email address")
    password: str = Field(..., description="Account password")


class RefreshRequest(BaseModel):
    """Refresh token HTTP request payload"""

    refresh_token: str = Field(..., description="Refresh token")


def _join_response(result: Result[AuthorizedMemberResponse]) -> AuthorizedMemberResponse:
    if result.is_err():
        error = result.error
        if error.code in (
            AuthErrorCode.EMAIL_ALREADY_EXISTS,
            AuthErrorCode.NICKNAME_ALREADY_TAKEN,
        ):
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        raise ServerError(error)

    return result.value


def _login_response(result: Result[AuthorizedMemberResponse]) -> AuthorizedMemberResponse:
    if result.is_err():
        error = result.error
        if error.code == AuthErrorCode.INVALID_CREDENTIALS:
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        elif error.code in (
            AuthErrorCode.ACCOUNT_NOT_ELIGIBLE,
            AuthErrorCode.EMAIL_NOT_VERIFIED,
            AuthErrorCode.MEMBER_NOT_FOUND,
            AuthErrorCode.ADMINISTRATOR_NOT_FOUND,
        ):
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    return result.value


def _refresh_response(result: Result[RefreshTokenResponse]) -> RefreshTokenResponse:
    if result.is_err():
        error = result.error
        if error.code in REFRESH_FAILURE_CODES:
            logger.warning(f"Refresh rejected: {error.code.value} ({error.message})")
            raise ClientError(
                Error("UNAUTHORIZED", "Refresh token is no longer valid, please log in again"),
                status_code=status.HTTP_401_UNAUTHORIZED,
            )
        raise ServerError(error)

    return result.value


@router.post(
    "/member/join",
    status_code=status.HTTP_201_CREATED,
    response_model=AuthorizedMemberResponse,
)
async def join(
    request: JoinRequest,
    http_request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    hasher: ISecretHasher = Depends(get_secret_hasher),
    session_authority: SessionAuthority = Depends(get_session_authority),
):
    """
    Member Join

    Registers an account with a member profile and starts a session.

    Raises:
        - 409 Conflict: Email already registered or nickname taken
        - 422 Unprocessable Entity: Invalid input (handled by FastAPI)
        - 500 Internal Server Error: Server error
    """
    command = JoinCommand(
        email=request.email, password=request.password, nickname=request.nickname
    )

    use_case = JoinUseCase(uow, hasher, session_authority)
    result = await use_case.execute(command, **client_metadata(http_request))

    return _join_response(result)


@router.post(
    "/member/login",
    status_code=status.HTTP_200_OK,
    response_model=AuthorizedMemberResponse,
)
async def login(
    request: LoginRequest,
    http_request: Request,
    use_case: LoginUseCase = Depends(get_login_use_case),
):
    """
    Member Login

    Authenticates a member and returns a new token pair.

    Raises:
        - 401 Unauthorized: Invalid credentials
        - 403 Forbidden: Account not active, email not verified or no member profile
        - 500 Internal Server Error: Server error
    """
    result = await use_case.execute(
        request.email, request.password, **client_metadata(http_request)
    )

    return _login_response(result)


@router.post(
    "/administrator/join",
    status_code=status.HTTP_201_CREATED,
    response_model=AuthorizedMemberResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def administrator_join(
    request: AdministratorJoinRequest,
    http_request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    hasher: ISecretHasher = Depends(get_secret_hasher),
    session_authority: SessionAuthority = Depends(get_session_authority),
):
    """
    Administrator Join

    Registers an account, member profile and administrator record and starts
    an administrator session.

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
        - 409 Conflict: Email already registered or nickname taken
        - 422 Unprocessable Entity: Invalid input or weak password
        - 500 Internal Server Error: Server error
    """
    command = JoinCommand(
        email=request.email, password=request.password, nickname=request.nickname
    )

    use_case = JoinUseCase(uow, hasher, session_authority)
    result = await use_case.execute(
        command, **client_metadata(http_request), role=SessionRole.administrator
    )

    return _join_response(result)


@router.post(
    "/administrator/login",
    status_code=status.HTTP_200_OK,
    response_model=AuthorizedMemberResponse,
)
async def administrator_login(
    request: LoginRequest,
    http_request: Request,
    use_case: LoginUseCase = Depends(get_login_use_case),
):
    """
    Administrator Login

    Authenticates an administrator and returns a new administrator token pair.

    Raises:
        - 401 Unauthorized: Invalid credentials
        - 403 Forbidden: Account not eligible or administrator privileges absent
        - 500 Internal Server Error: Server error
    """
    result = await use_case.execute(
        request.email,
        request.password,
        **client_metadata(http_request),
        role=SessionRole.administrator,
    )

    return _login_response(result)


@router.post("/refresh", status_code=status.HTTP_200_OK, response_model=RefreshTokenResponse)
async def refresh(
    request: RefreshRequest,
    session_authority: SessionAuthority = Depends(get_session_authority),
):
    """
    Refresh JWT Token

    Exchanges a refresh token of any role for a new token pair and rotates
    the session.

    Every failure answers the same 401 so unauthenticated clients cannot tell
    which check failed; the specific reason is logged.

    Raises:
        - 401 Unauthorized: Token invalid, session gone/revoked/expired, or
          account not eligible
        - 500 Internal Server Error: Server error
    """
    result = await session_authority.refresh(request.refresh_token)

    return _refresh_response(result)


@router.post(
    "/administrator/refresh",
    status_code=status.HTTP_200_OK,
    response_model=RefreshTokenResponse,
)
async def administrator_refresh(
    request: RefreshRequest,
    session_authority: SessionAuthority = Depends(get_session_authority),
):
    """
    Refresh Administrator Token

    Like /auth/refresh, but only accepts tokens issued for administrator
    sessions, and fails once the administrator record is gone.

    Raises:
        - 401 Unauthorized: Any refresh failure, including a member token
        - 500 Internal Server Error: Server error
    """
    result = await session_authority.refresh(
        request.refresh_token, role=SessionRole.administrator
    )

    return _refresh_response(result)


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=RevokeSessionResponse)
async def logout(
    current_user: dict = Depends(get_current_user),
    session_authority: SessionAuthority = Depends(get_session_authority),
):
    """
    Logout

    Revokes the session the presented access token belongs to.

    Raises:
        - 401 Unauthorized: Invalid access token
        - 404 Not Found: Session already rotated away or unknown
        - 500 Internal Server Error: Server error
    """
    result = await session_authority.revoke(
        UUID(current_user["sid"]),
        requesting_user_account_id=UUID(current_user["sub"]),
    )

    if result.is_err():
        error = result.error
        if error.code == AuthErrorCode.SESSION_NOT_FOUND:
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        elif error.code == AuthErrorCode.FORBIDDEN:
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    return result.value
