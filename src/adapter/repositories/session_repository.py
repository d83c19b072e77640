from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.session_repository import ISessionRepository
from src.domain.entities import Session


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, id: UUID) -> Optional[Session]:
        """Get session by row ID"""
        stmt = (
            select(Session)
            .where(Session.id == id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_session_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by the identifier embedded in its tokens"""
        stmt = (
            select(Session)
            .where(Session.session_id == session_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, session_obj: Session) -> Session:
        """Create a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def rotate(
        self,
        session_obj: Session,
        new_session_id: UUID,
        new_refresh_token_hash: str,
        issued_at: datetime,
        expires_at: datetime,
    ) -> Optional[Session]:
        """
        Compare-and-swap the rotation fields.

        The WHERE clause pins the row to the session_id and hash that were
        read, so two concurrent refreshes of the same token cannot both
        match; the loser sees rowcount 0.
        """
        stmt = (
            update(Session)
            .where(
                Session.id == session_obj.id,
                Session.session_id == session_obj.session_id,
                Session.refresh_token_hash == session_obj.refresh_token_hash,
                Session.revoked_at.is_(None),
                Session.deleted_at.is_(None),
            )
            .values(
                session_id=new_session_id,
                refresh_token_hash=new_refresh_token_hash,
                issued_at=issued_at,
                expires_at=expires_at,
                updated_at=issued_at,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            return None
        await self.session.flush()

        stmt = (
            select(Session)
            .where(Session.id == session_obj.id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one()

    async def revoke(self, session_obj: Session, revoked_at: datetime) -> bool:
        """Set revoked_at on the lineage row unless already revoked or deleted"""
        stmt = (
            update(Session)
            .where(
                Session.id == session_obj.id,
                Session.revoked_at.is_(None),
                Session.deleted_at.is_(None),
            )
            .values(revoked_at=revoked_at, updated_at=revoked_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0
