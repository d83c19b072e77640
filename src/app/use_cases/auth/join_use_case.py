"""
Join Use Case

Registers a new discussion board member, optionally with administrator
privileges, and issues a session.
"""

from typing import Optional

from src.libs.result import Error, Result, Return
from src.app.repositories.errors import DuplicateEntryError
from src.app.services.secret_hasher import ISecretHasher
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import (
    AccountStatus,
    Administrator,
    AdministratorStatus,
    AuditEvent,
    Member,
    MemberStatus,
    SessionRole,
    UserAccount,
)
from .dtos import AdministratorInfo, AuthorizedMemberResponse, JoinCommand, MemberInfo
from .error_codes import AuthErrorCode
from .session_authority import SessionAuthority

_DUPLICATE_ERRORS = {
    "email": Error(AuthErrorCode.EMAIL_ALREADY_EXISTS, "Email already registered"),
    "nickname": Error(AuthErrorCode.NICKNAME_ALREADY_TAKEN, "Nickname already taken"),
}


class JoinUseCase:
    """
    Join Use Case

    Business Logic:
    1. Reject emails used by a non-deleted account
    2. Reject nicknames used by a non-deleted member
    3. Hash password, create active UserAccount (email unverified)
    4. Create active Member profile
    5. For role=administrator, create an active Administrator escalated by itself
    6. Create AuditEvent with action=member_join or administrator_join
    7. Commit, then issue a session for the role through SessionAuthority

    Steps 1 and 2 are re-checked by the store's unique indexes; a concurrent
    join that wins the race surfaces as the same error.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        hasher: ISecretHasher,
        session_authority: SessionAuthority,
    ):
        self.uow = uow
        self.hasher = hasher
        self.session_authority = session_authority

    async def execute(
        self,
        command: JoinCommand,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
        role: SessionRole = SessionRole.member,
    ) -> Result[AuthorizedMemberResponse]:
        """
        Execute join use case

        Args:
            command: JoinCommand with validated email, password, nickname
            user_agent: Client user agent, stored on the session
            ip_address: Client IP, stored on the session
            role: SessionRole.administrator also grants administrator privileges

        Returns:
            Result[AuthorizedMemberResponse] with member profile and tokens,
            or Error(EMAIL_ALREADY_EXISTS / NICKNAME_ALREADY_TAKEN)
        """
        async with self.uow:
            if await self.uow.user_accounts.get_by_email(command.email):
                return Return.err(_DUPLICATE_ERRORS["email"])

            if await self.uow.members.get_by_nickname(command.nickname):
                return Return.err(_DUPLICATE_ERRORS["nickname"])

            password_hash = await self.hasher.hash(command.password)
            now = utcnow()

            try:
                account = await self.uow.user_accounts.create(
                    UserAccount(
                        email=command.email,
                        password_hash=password_hash,
                        status=AccountStatus.active,
                        email_verified=False,
                        created_at=now,
                        updated_at=now,
                    )
                )
                member = await self.uow.members.create(
                    Member(
                        user_account_id=account.id,
                        nickname=command.nickname,
                        status=MemberStatus.active,
                        created_at=now,
                        updated_at=now,
                    )
                )
            except DuplicateEntryError as e:
                return Return.err(_DUPLICATE_ERRORS[e.field])

            administrator = None
            if role == SessionRole.administrator:
                administrator = Administrator(
                    member_id=member.id,
                    status=AdministratorStatus.active,
                    escalated_at=now,
                    created_at=now,
                    updated_at=now,
                )
                administrator.escalated_by_administrator_id = administrator.id
                administrator = await self.uow.administrators.create(administrator)

            audit = AuditEvent(
                user_account_id=account.id,
                action=f"{role.value}_join",
                event_metadata={"email": command.email, "nickname": command.nickname},
            )
            await self.uow.audit_events.create(audit)

            await self.uow.commit()

            member_info = MemberInfo(
                id=str(member.id),
                user_account_id=str(account.id),
                nickname=member.nickname,
                status=member.status.value,
                created_at=member.created_at,
                updated_at=member.updated_at,
            )
            administrator_info = (
                administrator_to_info(administrator) if administrator else None
            )

        token = await self.session_authority.issue(
            account.id, user_agent=user_agent, ip_address=ip_address, role=role
        )

        return Return.ok(
            AuthorizedMemberResponse(
                member=member_info, administrator=administrator_info, token=token
            )
        )


def administrator_to_info(administrator: Administrator) -> AdministratorInfo:
    return AdministratorInfo(
        id=str(administrator.id),
        member_id=str(administrator.member_id),
        escalated_by_administrator_id=(
            str(administrator.escalated_by_administrator_id)
            if administrator.escalated_by_administrator_id
            else None
        ),
        escalated_at=administrator.escalated_at,
        status=administrator.status.value,
        revoked_at=administrator.revoked_at,
        created_at=administrator.created_at,
        updated_at=administrator.updated_at,
        deleted_at=administrator.deleted_at,
    )
