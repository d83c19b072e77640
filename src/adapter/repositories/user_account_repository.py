from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.errors import DuplicateEntryError
from src.app.repositories.user_account_repository import IUserAccountRepository
from src.domain.entities import UserAccount


class UserAccountRepository(IUserAccountRepository):
    """UserAccount repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_email(self, email: str) -> Optional[UserAccount]:
        """Get non-deleted account by email address"""
        stmt = select(UserAccount).where(
            UserAccount.email == email, UserAccount.deleted_at.is_(None)
        )
        result = await self.session.exec(stmt)
        return result.first()

    async def get_by_id(self, user_account_id: UUID) -> Optional[UserAccount]:
        """Get account by ID, including soft-deleted accounts"""
        stmt = select(UserAccount).where(UserAccount.id == user_account_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, user_account: UserAccount) -> UserAccount:
        """Create a new account; raises DuplicateEntryError for a live email"""
        self.session.add(user_account)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise DuplicateEntryError("email") from e
        await self.session.refresh(user_account)
        return user_account

    async def update(self, user_account: UserAccount) -> UserAccount:
        """Update existing account"""
        self.session.add(user_account)
        await self.session.flush()
        await self.session.refresh(user_account)
        return user_account
