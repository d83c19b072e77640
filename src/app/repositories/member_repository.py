from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import Member


class IMemberRepository(ABC):
    """Member repository interface - application layer"""

    @abstractmethod
    async def get_by_user_account_id(self, user_account_id: UUID) -> Optional[Member]:
        """Get the non-deleted member profile of an account"""
        pass

    @abstractmethod
    async def get_by_nickname(self, nickname: str) -> Optional[Member]:
        """Get non-deleted member by nickname"""
        pass

    @abstractmethod
    async def create(self, member: Member) -> Member:
        """Create a new member; raises DuplicateEntryError for a live nickname"""
        pass
