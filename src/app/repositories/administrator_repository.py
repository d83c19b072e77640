from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import Administrator


class IAdministratorRepository(ABC):
    """Administrator repository interface - application layer"""

    @abstractmethod
    async def get_by_member_id(self, member_id: UUID) -> Optional[Administrator]:
        """Get the non-deleted administrator record of a member"""
        pass

    @abstractmethod
    async def create(self, administrator: Administrator) -> Administrator:
        """Create a new administrator"""
        pass
