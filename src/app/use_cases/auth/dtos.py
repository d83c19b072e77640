"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
Provides type safety and clear contracts between layers.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


# ============================================================================
# Command DTOs
# ============================================================================


class JoinCommand(BaseModel):
    """
    Join command - validated member registration intent

    Created by API layer after request validation passes.
    """

    email: str
    password: str
    nickname: str


# ============================================================================
# Response DTOs
# ============================================================================


class IssuedSession(BaseModel):
    """Token pair issued for a session, plus expiry times for client scheduling"""

    access_token: str
    refresh_token: str
    session_id: str
    expires_at: datetime
    access_expires_at: datetime


class RefreshTokenResponse(IssuedSession):
    """Response for refresh token use case"""


class RevokeSessionResponse(BaseModel):
    """Response for session revocation; revoked is False when nothing changed"""

    session_id: str
    revoked: bool


class MemberInfo(BaseModel):
    """Member profile in authentication responses"""

    id: str
    user_account_id: str
    nickname: str
    status: str
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class AdministratorInfo(BaseModel):
    """Administrator record in authentication responses"""

    id: str
    member_id: str
    escalated_by_administrator_id: Optional[str] = None
    escalated_at: datetime
    status: str
    revoked_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class AuthorizedMemberResponse(BaseModel):
    """
    Response for join and login use cases

    administrator is only set for sessions issued with the administrator role.
    """

    member: MemberInfo
    administrator: Optional[AdministratorInfo] = None
    token: IssuedSession
