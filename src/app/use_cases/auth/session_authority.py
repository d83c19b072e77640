"""
Session Authority

Issues, refreshes (with rotation) and revokes access/refresh token pairs.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional
from uuid import UUID, uuid4

from src.libs.result import Error, Result, Return
from src.app.services.secret_hasher import ISecretHasher
from src.app.services.token_signer import InvalidTokenError, ITokenSigner
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuditEvent, Session, SessionRole
from .dtos import IssuedSession, RefreshTokenResponse, RevokeSessionResponse
from .error_codes import AuthErrorCode

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class SessionAuthority:
    """
    Owns the lifecycle of session token pairs.

    Business Rules:
    - Every token carries the session's current session_id (sid claim)
    - Refresh rotates session_id and the refresh token hash in one
      conditional write; the old refresh token never works again
    - Refresh checks run in a fixed order and stop at the first failure:
      token signature, session lookup, hash, revoked, deleted, expired,
      account eligibility (and administrator privileges for administrator
      sessions)
    - Expiry is judged lazily against the session record, now >= expires_at
      counts as expired
    - Revoking is idempotent; revoked_at is never cleared
    """

    def __init__(
        self,
        uow: UnitOfWork,
        signer: ITokenSigner,
        hasher: ISecretHasher,
        access_ttl: timedelta = timedelta(hours=1),
        refresh_ttl: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = utcnow,
    ):
        if access_ttl <= timedelta(0) or refresh_ttl <= timedelta(0):
            raise ValueError("Token lifetimes must be positive")
        self.uow = uow
        self.signer = signer
        self.hasher = hasher
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.clock = clock

    async def issue(
        self,
        user_account_id: UUID,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
        role: SessionRole = SessionRole.member,
    ) -> IssuedSession:
        """
        Start a new session lineage for an already authenticated account.

        Args:
            user_account_id: Account the session belongs to
            user_agent: Client user agent, stored for audit
            ip_address: Client IP, stored for audit
            role: Role carried in the tokens; fixed for the lineage

        Returns:
            IssuedSession with both tokens and their expiry times
        """
        now = self.clock()
        session_id = uuid4()
        issued = self._sign_pair(user_account_id, session_id, role, now)
        refresh_token_hash = await self.hasher.hash(issued.refresh_token)

        async with self.uow:
            session = Session(
                session_id=session_id,
                user_account_id=user_account_id,
                role=role,
                refresh_token_hash=refresh_token_hash,
                user_agent=user_agent,
                ip_address=ip_address,
                issued_at=now,
                expires_at=issued.expires_at,
                created_at=now,
                updated_at=now,
            )
            await self.uow.sessions.create(session)

            audit = AuditEvent(
                user_account_id=user_account_id,
                action="session_issue",
                event_metadata={
                    "session_id": str(session_id),
                    "role": role.value,
                    "user_agent": user_agent,
                    "ip_address": ip_address,
                },
            )
            await self.uow.audit_events.create(audit)

            await self.uow.commit()

        logger.info(
            f"Issued {role.value} session {session_id} for account {user_account_id}"
        )
        return issued

    async def refresh(
        self, refresh_token: str, role: Optional[SessionRole] = None
    ) -> Result[RefreshTokenResponse]:
        """
        Exchange a refresh token for a new token pair.

        Args:
            refresh_token: The refresh token to verify and rotate
            role: When given, tokens issued for another role are rejected
                as INVALID_TOKEN before any lookup

        Returns:
            Result with RefreshTokenResponse bound to a new session_id, or
            Error with one of the session lifecycle codes
        """
        try:
            claims = self.signer.verify(refresh_token, verify_expiry=False)
        except InvalidTokenError:
            return Return.err(
                Error(AuthErrorCode.INVALID_TOKEN, "Invalid refresh token")
            )

        if claims.get("typ") != REFRESH_TOKEN_TYPE:
            return Return.err(
                Error(AuthErrorCode.INVALID_TOKEN, "Token is not a refresh token")
            )

        if role is not None and claims.get("role") != role.value:
            return Return.err(
                Error(AuthErrorCode.INVALID_TOKEN, f"Token was not issued for {role.value}")
            )

        session_id = _parse_uuid(claims.get("sid"))
        if session_id is None:
            return Return.err(
                Error(AuthErrorCode.INVALID_TOKEN, "Malformed refresh token")
            )

        async with self.uow:
            session = await self.uow.sessions.get_by_session_id(session_id)
            if session is None:
                return Return.err(
                    Error(AuthErrorCode.SESSION_NOT_FOUND, "Session not found")
                )

            if not await self.hasher.verify(refresh_token, session.refresh_token_hash):
                return Return.err(
                    Error(AuthErrorCode.TOKEN_MISMATCH, "Refresh token mismatch")
                )

            now = self.clock()
            if session.revoked_at is not None:
                return Return.err(
                    Error(AuthErrorCode.SESSION_REVOKED, "Session has been revoked")
                )
            if session.deleted_at is not None:
                return Return.err(
                    Error(AuthErrorCode.SESSION_DELETED, "Session has been deleted")
                )
            if now >= session.expires_at:
                return Return.err(
                    Error(AuthErrorCode.SESSION_EXPIRED, "Session has expired")
                )

            account = await self.uow.user_accounts.get_by_id(session.user_account_id)
            if account is None or not account.is_eligible():
                return Return.err(
                    Error(
                        AuthErrorCode.ACCOUNT_NOT_ELIGIBLE,
                        "User account is deleted or not active",
                    )
                )

            if session.role == SessionRole.administrator:
                if not await self._has_administrator_privileges(account.id):
                    return Return.err(
                        Error(
                            AuthErrorCode.ACCOUNT_NOT_ELIGIBLE,
                            "Administrator privileges are no longer present",
                        )
                    )

            # Rotation
            new_session_id = uuid4()
            issued = self._sign_pair(
                session.user_account_id, new_session_id, session.role, now
            )
            new_refresh_token_hash = await self.hasher.hash(issued.refresh_token)

            rotated = await self.uow.sessions.rotate(
                session,
                new_session_id,
                new_refresh_token_hash,
                issued_at=now,
                expires_at=issued.expires_at,
            )
            if rotated is None:
                logger.warning(
                    f"Lost rotation race for session {session_id}, "
                    "refresh token was already used"
                )
                return Return.err(
                    Error(AuthErrorCode.SESSION_NOT_FOUND, "Session not found")
                )

            audit = AuditEvent(
                user_account_id=session.user_account_id,
                action="token_refresh",
                event_metadata={
                    "previous_session_id": str(session_id),
                    "session_id": str(new_session_id),
                },
            )
            await self.uow.audit_events.create(audit)

            await self.uow.commit()

        logger.info(f"Rotated session {session_id} -> {new_session_id}")
        return Return.ok(RefreshTokenResponse(**issued.model_dump()))

    async def revoke(
        self,
        session_id: UUID,
        requesting_user_account_id: Optional[UUID] = None,
    ) -> Result[RevokeSessionResponse]:
        """
        Revoke a session permanently.

        Args:
            session_id: Current session_id of the session to revoke
            requesting_user_account_id: For self-service revocation, the
                caller's account; None for administrative revocation

        Returns:
            Result with RevokeSessionResponse (revoked=False if the session was
            already revoked or deleted), or Error(SESSION_NOT_FOUND/FORBIDDEN)
        """
        async with self.uow:
            session = await self.uow.sessions.get_by_session_id(session_id)
            if session is None:
                return Return.err(
                    Error(AuthErrorCode.SESSION_NOT_FOUND, "Session not found")
                )

            if (
                requesting_user_account_id is not None
                and session.user_account_id != requesting_user_account_id
            ):
                return Return.err(
                    Error(
                        AuthErrorCode.FORBIDDEN,
                        "Session does not belong to current user",
                    )
                )

            if session.revoked_at is not None or session.deleted_at is not None:
                return Return.ok(
                    RevokeSessionResponse(session_id=str(session_id), revoked=False)
                )

            revoked = await self.uow.sessions.revoke(session, self.clock())

            if revoked:
                audit = AuditEvent(
                    user_account_id=session.user_account_id,
                    action="session_revoke",
                    event_metadata={
                        "session_id": str(session_id),
                        "is_self": requesting_user_account_id is not None,
                    },
                )
                await self.uow.audit_events.create(audit)
                await self.uow.commit()
                logger.info(f"Revoked session {session_id}")

            return Return.ok(
                RevokeSessionResponse(session_id=str(session_id), revoked=revoked)
            )

    def verify_access_token(self, access_token: str) -> Optional[dict]:
        """
        Verify an access token statelessly.

        Returns:
            Decoded claims, or None if the token is invalid, expired or not
            an access token
        """
        try:
            claims = self.signer.verify(access_token)
        except InvalidTokenError:
            return None
        if claims.get("typ") != ACCESS_TOKEN_TYPE:
            return None
        if _parse_uuid(claims.get("sub")) is None or _parse_uuid(claims.get("sid")) is None:
            return None
        return claims

    async def _has_administrator_privileges(self, user_account_id: UUID) -> bool:
        member = await self.uow.members.get_by_user_account_id(user_account_id)
        if member is None:
            return False
        administrator = await self.uow.administrators.get_by_member_id(member.id)
        return administrator is not None and administrator.is_eligible()

    def _sign_pair(
        self,
        user_account_id: UUID,
        session_id: UUID,
        role: SessionRole,
        now: datetime,
    ) -> IssuedSession:
        claims = {
            "sub": str(user_account_id),
            "sid": str(session_id),
            "role": role.value,
        }
        access_token = self.signer.sign(
            {**claims, "typ": ACCESS_TOKEN_TYPE, "jti": uuid4().hex},
            self.access_ttl,
            issued_at=now,
        )
        refresh_token = self.signer.sign(
            {**claims, "typ": REFRESH_TOKEN_TYPE, "jti": uuid4().hex},
            self.refresh_ttl,
            issued_at=now,
        )
        return IssuedSession(
            access_token=access_token,
            refresh_token=refresh_token,
            session_id=str(session_id),
            expires_at=now + self.refresh_ttl,
            access_expires_at=now + self.access_ttl,
        )


def _parse_uuid(value) -> Optional[UUID]:
    if not isinstance(value, str):
        return None
    try:
        return UUID(value)
    except ValueError:
        return None
