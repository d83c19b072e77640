from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.errors import DuplicateEntryError
from src.app.repositories.member_repository import IMemberRepository
from src.domain.entities import Member


class MemberRepository(IMemberRepository):
    """Member repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_user_account_id(self, user_account_id: UUID) -> Optional[Member]:
        """Get the non-deleted member profile of an account"""
        stmt = select(Member).where(
            Member.user_account_id == user_account_id, Member.deleted_at.is_(None)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_nickname(self, nickname: str) -> Optional[Member]:
        """Get non-deleted member by nickname"""
        stmt = select(Member).where(
            Member.nickname == nickname, Member.deleted_at.is_(None)
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def create(self, member: Member) -> Member:
        """Create a new member; raises DuplicateEntryError for a live nickname"""
        self.session.add(member)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise DuplicateEntryError("nickname") from e
        await self.session.refresh(member)
        return member
