from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from src.domain.entities import Session


class ISessionRepository(ABC):
    """Session repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, id: UUID) -> Optional[Session]:
        """Get session by row ID"""
        pass

    @abstractmethod
    async def get_by_session_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by the identifier embedded in its tokens"""
        pass

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Create a new session"""
        pass

    @abstractmethod
    async def rotate(
        self,
        session: Session,
        new_session_id: UUID,
        new_refresh_token_hash: str,
        issued_at: datetime,
        expires_at: datetime,
    ) -> Optional[Session]:
        """
        Atomically replace the rotation fields of a session.

        The write only applies while the stored session_id and
        refresh_token_hash still equal the values on ``session`` and the
        session is neither revoked nor deleted. Returns the updated session,
        or None if another writer got there first.
        """
        pass

    @abstractmethod
    async def revoke(self, session: Session, revoked_at: datetime) -> bool:
        """
        Set revoked_at on the row of ``session`` if it is still neither
        revoked nor deleted.

        Matches by row id, so a rotation that replaced session_id after
        ``session`` was read does not stop the revocation. Returns True if
        a row changed.
        """
        pass
