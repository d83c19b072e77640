from abc import ABC, abstractmethod

from src.app.repositories.administrator_repository import IAdministratorRepository
from src.app.repositories.audit_event_repository import IAuditEventRepository
from src.app.repositories.member_repository import IMemberRepository
from src.app.repositories.session_repository import ISessionRepository
from src.app.repositories.user_account_repository import IUserAccountRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    user_accounts: IUserAccountRepository
    members: IMemberRepository
    administrators: IAdministratorRepository
    sessions: ISessionRepository
    audit_events: IAuditEventRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
