"""
Authentication Use Cases

Session lifecycle and the identity flows that start sessions.
"""

from .error_codes import AuthErrorCode, REFRESH_FAILURE_CODES
from .session_authority import SessionAuthority
from .join_use_case import JoinUseCase
from .login_use_case import LoginUseCase
from .dtos import (
    AdministratorInfo,
    AuthorizedMemberResponse,
    IssuedSession,
    JoinCommand,
    MemberInfo,
    RefreshTokenResponse,
    RevokeSessionResponse,
)

__all__ = [
    # Use Cases
    "SessionAuthority",
    "JoinUseCase",
    "LoginUseCase",
    # Errors
    "AuthErrorCode",
    "REFRESH_FAILURE_CODES",
    # DTOs - Commands
    "JoinCommand",
    # DTOs - Responses
    "IssuedSession",
    "RefreshTokenResponse",
    "RevokeSessionResponse",
    "AuthorizedMemberResponse",
    "MemberInfo",
    "AdministratorInfo",
]
