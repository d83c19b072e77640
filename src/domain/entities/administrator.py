"""
Administrator Entity

Administrative privileges granted to a member.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from src.domain.base import utcnow
from .enums import AdministratorStatus


class Administrator(SQLModel, table=True):
    """
    Administrator entity - at most one per member.

    Business Rules:
    - escalated_by_administrator_id is the granting administrator; a
      self-registered administrator points at itself
    - Privileges end when revoked_at or deleted_at is set, or status is not active
    """

    __tablename__ = "administrators"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    member_id: UUID = Field(
        foreign_key="members.id", nullable=False, unique=True, index=True
    )
    escalated_by_administrator_id: Optional[UUID] = Field(default=None)
    escalated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    status: AdministratorStatus = Field(default=AdministratorStatus.active)
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    deleted_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    def is_eligible(self) -> bool:
        return (
            self.deleted_at is None
            and self.revoked_at is None
            and self.status == AdministratorStatus.active
        )
