"""
Member Entity

Discussion board profile attached to a user account.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import text
from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import MemberStatus


class Member(SQLModel, table=True):
    """
    Member entity - one profile per user account.

    Business Rules:
    - Nickname must be unique across non-deleted members
    - Soft-deleted via deleted_at
    """

    __tablename__ = "members"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_account_id: UUID = Field(
        foreign_key="user_accounts.id", nullable=False, unique=True, index=True
    )
    nickname: str = Field(max_length=80)
    status: MemberStatus = Field(default=MemberStatus.active)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    deleted_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index(
            "uq_member_nickname_live",
            "nickname",
            unique=True,
            sqlite_where=text("deleted_at IS NULL"),
            postgresql_where=text("deleted_at IS NULL"),
        ),
    )
