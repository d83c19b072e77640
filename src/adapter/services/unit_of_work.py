from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.administrator_repository import AdministratorRepository
from src.adapter.repositories.audit_event_repository import AuditEventRepository
from src.adapter.repositories.member_repository import MemberRepository
from src.adapter.repositories.session_repository import SessionRepository
from src.adapter.repositories.user_account_repository import UserAccountRepository
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.user_accounts = UserAccountRepository(self.session)
        self.members = MemberRepository(self.session)
        self.administrators = AdministratorRepository(self.session)
        self.sessions = SessionRepository(self.session)
        self.audit_events = AuditEventRepository(self.session)
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
