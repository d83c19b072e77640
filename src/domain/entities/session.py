"""
Session Entity

Stores the current refresh token of a session lineage.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import SessionRole


class Session(SQLModel, table=True):
    """
    Session entity - one row per rotation lineage.

    Business Rules:
    - session_id is embedded in every token of the lineage and is
      replaced on each refresh; the old value never validates again
    - Refresh tokens are stored hashed (bcrypt), never raw
    - revoked_at and deleted_at are never cleared once set
    - Never hard-deleted
    - role is fixed at issue and decides the refresh eligibility rule
    """

    __tablename__ = "jwt_sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    session_id: UUID = Field(default_factory=uuid4, unique=True, index=True)

    user_account_id: UUID = Field(
        foreign_key="user_accounts.id", nullable=False, index=True
    )
    role: SessionRole = Field(default=SessionRole.member)

    refresh_token_hash: str = Field(max_length=60)  # Bcrypt output
    user_agent: Optional[str] = Field(default=None, max_length=512)
    ip_address: Optional[str] = Field(default=None, max_length=45)

    issued_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime))
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    deleted_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_jwt_session_expires_at", "expires_at"),
        Index("idx_jwt_session_revoked_at", "revoked_at"),
    )
