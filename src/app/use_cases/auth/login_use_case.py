"""
Login Use Case

Authenticates a member or administrator by email and password and issues a
session.
"""

import logging
from typing import Optional
from uuid import UUID

from src.libs.result import Error, Result, Return
from src.app.services.secret_hasher import ISecretHasher
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuditEvent, MemberStatus, SessionRole
from .dtos import AuthorizedMemberResponse, MemberInfo
from .error_codes import AuthErrorCode
from .join_use_case import administrator_to_info
from .session_authority import SessionAuthority

logger = logging.getLogger(__name__)


class LoginUseCase:
    """
    Use case for member and administrator login and JWT issuance.

    Business Rules:
    - Unknown, deleted or wrong-password logins are indistinguishable
    - A hash is computed even when the account is unknown (timing)
    - Account must have status=active
    - With require_email_verification, the email must be verified
    - Account must have a live member profile
    - role=administrator also requires active, unrevoked administrator privileges
    - Every failed attempt is recorded as a login_failed audit event
    - Updates user_account.last_login_at
    - Issues a new session lineage for the role through SessionAuthority
    """

    def __init__(
        self,
        uow: UnitOfWork,
        hasher: ISecretHasher,
        session_authority: SessionAuthority,
        require_email_verification: bool = False,
    ):
        self.uow = uow
        self.hasher = hasher
        self.session_authority = session_authority
        self.require_email_verification = require_email_verification

    async def execute(
        self,
        email: str,
        password: str,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
        role: SessionRole = SessionRole.member,
    ) -> Result[AuthorizedMemberResponse]:
        """
        Execute login use case.

        Args:
            email: Account email
            password: Plain text password
            user_agent: Client user agent, stored on the session
            ip_address: Client IP, stored on the session
            role: Role the session is requested for

        Returns:
            Result with AuthorizedMemberResponse, or Error
        """
        async with self.uow:
            account = await self.uow.user_accounts.get_by_email(email)

            if account is None:
                await self.hasher.hash(password)
                return await self._reject(
                    Error(AuthErrorCode.INVALID_CREDENTIALS, "Invalid email or password"),
                    None, email, ip_address, role,
                )

            if not await self.hasher.verify(password, account.password_hash):
                return await self._reject(
                    Error(AuthErrorCode.INVALID_CREDENTIALS, "Invalid email or password"),
                    account.id, email, ip_address, role,
                )

            if not account.is_eligible():
                return await self._reject(
                    Error(
                        AuthErrorCode.ACCOUNT_NOT_ELIGIBLE,
                        f"Account not eligible for login: status is '{account.status.value}'",
                    ),
                    account.id, email, ip_address, role,
                )

            if self.require_email_verification and not account.email_verified:
                return await self._reject(
                    Error(AuthErrorCode.EMAIL_NOT_VERIFIED, "Email is not verified"),
                    account.id, email, ip_address, role,
                )

            member = await self.uow.members.get_by_user_account_id(account.id)
            if member is None or member.status != MemberStatus.active:
                return await self._reject(
                    Error(AuthErrorCode.MEMBER_NOT_FOUND, "No active member profile for this account"),
                    account.id, email, ip_address, role,
                )

            administrator = None
            if role == SessionRole.administrator:
                administrator = await self.uow.administrators.get_by_member_id(member.id)
                if administrator is None or not administrator.is_eligible():
                    return await self._reject(
                        Error(
                            AuthErrorCode.ADMINISTRATOR_NOT_FOUND,
                            "Administrator privileges not present or revoked",
                        ),
                        account.id, email, ip_address, role,
                    )

            now = utcnow()
            account.last_login_at = now
            account.updated_at = now
            await self.uow.user_accounts.update(account)

            audit = AuditEvent(
                user_account_id=account.id,
                action="login",
                event_metadata={"email": email, "ip_address": ip_address, "role": role.value},
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
                deleted_at=member.deleted_at,
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

    async def _reject(
        self,
        error: Error,
        user_account_id: Optional[UUID],
        email: str,
        ip_address: Optional[str],
        role: SessionRole,
    ) -> Result[AuthorizedMemberResponse]:
        audit = AuditEvent(
            user_account_id=user_account_id,
            action="login_failed",
            event_metadata={
                "email": email,
                "ip_address": ip_address,
                "role": role.value,
                "reason": error.code.value,
            },
        )
        await self.uow.audit_events.create(audit)
        await self.uow.commit()

        logger.info(f"Login failed for {role.value}: {error.code.value}")
        return Return.err(error)
