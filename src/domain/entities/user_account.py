"""
UserAccount Entity

Login identity of a discussion board participant.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import text
from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow
from .enums import AccountStatus


class UserAccount(SQLModel, table=True):
    """
    UserAccount entity - credentials and status of a person.

    Business Rules:
    - Email must be unique across non-deleted accounts
    - Password stored as bcrypt hash
    - Only status=active accounts may log in or refresh sessions
    - Soft-deleted via deleted_at, never removed
    """

    __tablename__ = "user_accounts"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(max_length=255)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    status: AccountStatus = Field(default=AccountStatus.active)
    email_verified: bool = Field(default=False)

    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    deleted_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_user_account_status", "status"),
        # Unique among non-deleted accounts
        Index(
            "uq_user_account_email_live",
            "email",
            unique=True,
            sqlite_where=text("deleted_at IS NULL"),
            postgresql_where=text("deleted_at IS NULL"),
        ),
    )

    def is_eligible(self) -> bool:
        return self.deleted_at is None and self.status == AccountStatus.active
