from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import UserAccount


class IUserAccountRepository(ABC):
    """UserAccount repository interface - application layer"""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[UserAccount]:
        """Get non-deleted account by email address"""
        pass

    @abstractmethod
    async def get_by_id(self, user_account_id: UUID) -> Optional[UserAccount]:
        """Get account by ID, including soft-deleted accounts"""
        pass

    @abstractmethod
    async def create(self, user_account: UserAccount) -> UserAccount:
        """Create a new account; raises DuplicateEntryError for a live email"""
        pass

    @abstractmethod
    async def update(self, user_account: UserAccount) -> UserAccount:
        """Update existing account"""
        pass
