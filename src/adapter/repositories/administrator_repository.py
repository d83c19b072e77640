from typing import Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.administrator_repository import IAdministratorRepository
from src.domain.entities import Administrator


class AdministratorRepository(IAdministratorRepository):
    """Administrator repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_member_id(self, member_id: UUID) -> Optional[Administrator]:
        stmt = select(Administrator).where(
            Administrator.member_id == member_id, Administrator.deleted_at.is_(None)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, administrator: Administrator) -> Administrator:
        self.session.add(administrator)
        await self.session.flush()
        await self.session.refresh(administrator)
        return administrator
