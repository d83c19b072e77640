"""
Unit tests for SessionAuthority
"""

from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import pytest

from src.app.use_cases.auth import AuthErrorCode, SessionAuthority
from src.domain.entities import (
    AccountStatus,
    Administrator,
    AdministratorStatus,
    Member,
    Session,
    SessionRole,
    UserAccount,
)


@pytest.fixture
def session_mocks(mock_uow):
    mock_uow.sessions = MagicMock()
    mock_uow.sessions.create = AsyncMock(side_effect=lambda s: s)
    mock_uow.sessions.get_by_session_id = AsyncMock()
    mock_uow.sessions.rotate = AsyncMock()
    mock_uow.sessions.revoke = AsyncMock(return_value=True)

    mock_uow.user_accounts = MagicMock()
    mock_uow.user_accounts.get_by_id = AsyncMock()

    mock_uow.members = MagicMock()
    mock_uow.members.get_by_user_account_id = AsyncMock(return_value=None)
    mock_uow.administrators = MagicMock()
    mock_uow.administrators.get_by_member_id = AsyncMock(return_value=None)

    mock_uow.audit_events = MagicMock()
    mock_uow.audit_events.create = AsyncMock()
    return mock_uow


@pytest.fixture
def authority(session_mocks, signer, hasher, clock):
    return SessionAuthority(session_mocks, signer, hasher, clock=clock)


async def issue_and_capture(authority, uow, user_account_id, role=SessionRole.member):
    """Issue a session and return (issued, stored Session)"""
    issued = await authority.issue(user_account_id, role=role)
    stored = uow.sessions.create.call_args.args[0]
    uow.sessions.get_by_session_id.return_value = stored
    uow.commit.reset_mock()
    uow.audit_events.create.reset_mock()
    return issued, stored


def active_account(user_account_id):
    return UserAccount(
        id=user_account_id,
        email="member@board.io",
        password_hash="hash",
        status=AccountStatus.active,
    )


@pytest.mark.asyncio
async def test_issue_persists_hashed_session(authority, session_mocks, signer, hasher, clock):
    """Issue stores a session with a hashed refresh token and signs both tokens"""
    user_account_id = uuid4()

    issued = await authority.issue(user_account_id, user_agent="pytest", ip_address="10.0.0.1")

    session_mocks.sessions.create.assert_called_once()
    stored = session_mocks.sessions.create.call_args.args[0]
    assert isinstance(stored, Session)
    assert stored.user_account_id == user_account_id
    assert str(stored.session_id) == issued.session_id
    assert stored.refresh_token_hash != issued.refresh_token
    assert await hasher.verify(issued.refresh_token, stored.refresh_token_hash)
    assert stored.issued_at == clock.now
    assert stored.expires_at == clock.now + timedelta(days=7)
    assert stored.issued_at < stored.expires_at
    assert stored.user_agent == "pytest"
    assert stored.ip_address == "10.0.0.1"
    assert stored.role == SessionRole.member

    assert issued.expires_at == clock.now + timedelta(days=7)
    assert issued.access_expires_at == clock.now + timedelta(hours=1)

    access_claims = signer.verify(issued.access_token, verify_expiry=False)
    refresh_claims = signer.verify(issued.refresh_token, verify_expiry=False)
    assert access_claims["sub"] == str(user_account_id)
    assert access_claims["sid"] == issued.session_id
    assert access_claims["typ"] == "access"
    assert access_claims["iss"] == "autobe"
    assert refresh_claims["sid"] == issued.session_id
    assert refresh_claims["typ"] == "refresh"
    assert access_claims["role"] == refresh_claims["role"] == "member"

    session_mocks.audit_events.create.assert_called_once()
    assert session_mocks.audit_events.create.call_args.args[0].action == "session_issue"
    session_mocks.commit.assert_called_once()


@pytest.mark.asyncio
async def test_issue_generates_distinct_session_ids(authority):
    """Each issue starts a new lineage"""
    user_account_id = uuid4()

    first = await authority.issue(user_account_id)
    second = await authority.issue(user_account_id)

    assert first.session_id != second.session_id
    assert first.refresh_token != second.refresh_token


@pytest.mark.asyncio
async def test_issue_propagates_store_failure(authority, session_mocks):
    """Infrastructure errors are raised unchanged"""
    session_mocks.sessions.create.side_effect = ConnectionError("database unavailable")

    with pytest.raises(ConnectionError):
        await authority.issue(uuid4())

    session_mocks.commit.assert_not_called()


def test_rejects_non_positive_ttl(session_mocks, signer, hasher):
    with pytest.raises(ValueError):
        SessionAuthority(session_mocks, signer, hasher, refresh_ttl=timedelta(0))


@pytest.mark.asyncio
async def test_refresh_rotates_session(authority, session_mocks, hasher, clock):
    """Successful refresh rotates session_id and hash in one conditional write"""
    user_account_id = uuid4()
    issued, stored = await issue_and_capture(authority, session_mocks, user_account_id)
    session_mocks.user_accounts.get_by_id.return_value = active_account(user_account_id)
    session_mocks.sessions.rotate.side_effect = lambda s, sid, h, issued_at, expires_at: Session(
        id=s.id,
        session_id=sid,
        user_account_id=s.user_account_id,
        refresh_token_hash=h,
        issued_at=issued_at,
        expires_at=expires_at,
    )
    clock.advance(timedelta(minutes=30))

    result = await authority.refresh(issued.refresh_token)

    assert result.is_ok()
    data = result.value
    assert data.session_id != issued.session_id
    assert data.refresh_token != issued.refresh_token
    assert data.expires_at == clock.now + timedelta(days=7)
    assert data.access_expires_at == clock.now + timedelta(hours=1)

    session_mocks.sessions.rotate.assert_called_once()
    args = session_mocks.sessions.rotate.call_args
    assert args.args[0] is stored
    assert str(args.args[1]) == data.session_id
    assert await hasher.verify(data.refresh_token, args.args[2])
    assert args.kwargs["issued_at"] == clock.now
    assert args.kwargs["issued_at"] < args.kwargs["expires_at"]

    assert session_mocks.audit_events.create.call_args.args[0].action == "token_refresh"
    session_mocks.commit.assert_called_once()


@pytest.mark.asyncio
async def test_refresh_malformed_token_skips_lookup(authority, session_mocks):
    """A string that is not a signed token never reaches the store"""
    result = await authority.refresh("not-a-token")

    assert result.is_err()
    assert result.error.code == AuthErrorCode.INVALID_TOKEN
    session_mocks.sessions.get_by_session_id.assert_not_called()
    assert session_mocks.sessions.get_by_session_id.call_count == 0


@pytest.mark.asyncio
async def test_refresh_rejects_foreign_signature(authority, session_mocks, clock):
    """Tokens signed with another key are invalid"""
    from src.adapter.services.jwt_token_signer import JoseTokenSigner

    forger = JoseTokenSigner(secret="other-secret", issuer="autobe")
    token = forger.sign(
        {"sub": str(uuid4()), "sid": str(uuid4()), "typ": "refresh"},
        timedelta(days=7),
        issued_at=clock.now,
    )

    result = await authority.refresh(token)

    assert result.error.code == AuthErrorCode.INVALID_TOKEN
    session_mocks.sessions.get_by_session_id.assert_not_called()


@pytest.mark.asyncio
async def test_refresh_rejects_other_issuer(authority, session_mocks, clock):
    from src.adapter.services.jwt_token_signer import JoseTokenSigner

    other = JoseTokenSigner(secret="unit-test-secret", issuer="someone-else")
    token = other.sign(
        {"sub": str(uuid4()), "sid": str(uuid4()), "typ": "refresh"},
        timedelta(days=7),
        issued_at=clock.now,
    )

    result = await authority.refresh(token)

    assert result.error.code == AuthErrorCode.INVALID_TOKEN
    session_mocks.sessions.get_by_session_id.assert_not_called()


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(authority, session_mocks):
    """An access token cannot be used to refresh"""
    issued = await authority.issue(uuid4())

    result = await authority.refresh(issued.access_token)

    assert result.error.code == AuthErrorCode.INVALID_TOKEN
    session_mocks.sessions.get_by_session_id.assert_not_called()


@pytest.mark.asyncio
async def test_refresh_without_session_claim(authority, session_mocks, signer, clock):
    token = signer.sign(
        {"sub": str(uuid4()), "typ": "refresh"}, timedelta(days=7), issued_at=clock.now
    )

    result = await authority.refresh(token)

    assert result.error.code == AuthErrorCode.INVALID_TOKEN
    session_mocks.sessions.get_by_session_id.assert_not_called()


@pytest.mark.asyncio
async def test_refresh_session_not_found(authority, session_mocks):
    issued = await authority.issue(uuid4())
    session_mocks.sessions.get_by_session_id.return_value = None

    result = await authority.refresh(issued.refresh_token)

    assert result.error.code == AuthErrorCode.SESSION_NOT_FOUND
    session_mocks.sessions.get_by_session_id.assert_called_once_with(
        UUID(issued.session_id)
    )


@pytest.mark.asyncio
async def test_refresh_token_mismatch(authority, session_mocks, hasher):
    """Valid signature but a different secret than the stored hash"""
    issued, stored = await issue_and_capture(authority, session_mocks, uuid4())
    stored.refresh_token_hash = await hasher.hash("some-other-token")

    result = await authority.refresh(issued.refresh_token)

    assert result.error.code == AuthErrorCode.TOKEN_MISMATCH
    session_mocks.sessions.rotate.assert_not_called()


@pytest.mark.asyncio
async def test_refresh_revoked_session(authority, session_mocks, clock):
    issued, stored = await issue_and_capture(authority, session_mocks, uuid4())
    stored.revoked_at = clock.now

    result = await authority.refresh(issued.refresh_token)

    assert result.error.code == AuthErrorCode.SESSION_REVOKED
    session_mocks.sessions.rotate.assert_not_called()
    session_mocks.commit.assert_not_called()


@pytest.mark.asyncio
async def test_refresh_revoked_takes_precedence_over_deleted_and_expired(
    authority, session_mocks, clock
):
    issued, stored = await issue_and_capture(authority, session_mocks, uuid4())
    stored.revoked_at = clock.now
    stored.deleted_at = clock.now
    clock.advance(timedelta(days=30))

    result = await authority.refresh(issued.refresh_token)

    assert result.error.code == AuthErrorCode.SESSION_REVOKED


@pytest.mark.asyncio
async def test_refresh_deleted_session(authority, session_mocks, clock):
    issued, stored = await issue_and_capture(authority, session_mocks, uuid4())
    stored.deleted_at = clock.now
    clock.advance(timedelta(days=30))

    result = await authority.refresh(issued.refresh_token)

    assert result.error.code == AuthErrorCode.SESSION_DELETED


@pytest.mark.asyncio
async def test_refresh_exactly_at_expiry_is_expired(authority, session_mocks, clock):
    """now == expires_at counts as expired"""
    issued, stored = await issue_and_capture(authority, session_mocks, uuid4())
    clock.now = stored.expires_at

    result = await authority.refresh(issued.refresh_token)

    assert result.error.code == AuthErrorCode.SESSION_EXPIRED
    session_mocks.user_accounts.get_by_id.assert_not_called()


@pytest.mark.asyncio
async def test_refresh_just_before_expiry_succeeds(authority, session_mocks, clock):
    user_account_id = uuid4()
    issued, stored = await issue_and_capture(authority, session_mocks, user_account_id)
    session_mocks.user_accounts.get_by_id.return_value = active_account(user_account_id)
    session_mocks.sessions.rotate.return_value = stored
    clock.now = stored.expires_at - timedelta(seconds=1)

    result = await authority.refresh(issued.refresh_token)

    assert result.is_ok()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status, deleted",
    [
        (AccountStatus.suspended, False),
        (AccountStatus.banned, False),
        (AccountStatus.pending, False),
        (AccountStatus.active, True),
    ],
)
async def test_refresh_account_not_eligible(authority, session_mocks, clock, status, deleted):
    user_account_id = uuid4()
    issued, _ = await issue_and_capture(authority, session_mocks, user_account_id)
    account = active_account(user_account_id)
    account.status = status
    account.deleted_at = clock.now if deleted else None
    session_mocks.user_accounts.get_by_id.return_value = account

    result = await authority.refresh(issued.refresh_token)

    assert result.error.code == AuthErrorCode.ACCOUNT_NOT_ELIGIBLE
    session_mocks.sessions.rotate.assert_not_called()


@pytest.mark.asyncio
async def test_refresh_account_missing(authority, session_mocks):
    issued, _ = await issue_and_capture(authority, session_mocks, uuid4())
    session_mocks.user_accounts.get_by_id.return_value = None

    result = await authority.refresh(issued.refresh_token)

    assert result.error.code == AuthErrorCode.ACCOUNT_NOT_ELIGIBLE


@pytest.mark.asyncio
async def test_refresh_rejects_token_of_other_role(authority, session_mocks):
    """A member token on the administrator refresh fails before any lookup"""
    issued, _ = await issue_and_capture(authority, session_mocks, uuid4())

    result = await authority.refresh(issued.refresh_token, role=SessionRole.administrator)

    assert result.error.code == AuthErrorCode.INVALID_TOKEN
    session_mocks.sessions.get_by_session_id.assert_not_called()


def grant_administrator(uow, user_account_id, **fields):
    member = Member(user_account_id=user_account_id, nickname="root")
    uow.members.get_by_user_account_id.return_value = member
    uow.administrators.get_by_member_id.return_value = Administrator(
        member_id=member.id, **fields
    )
    return member


@pytest.mark.asyncio
async def test_refresh_administrator_session_keeps_role(authority, session_mocks, signer):
    user_account_id = uuid4()
    issued, stored = await issue_and_capture(
        authority, session_mocks, user_account_id, role=SessionRole.administrator
    )
    session_mocks.user_accounts.get_by_id.return_value = active_account(user_account_id)
    grant_administrator(session_mocks, user_account_id)
    session_mocks.sessions.rotate.return_value = stored

    result = await authority.refresh(issued.refresh_token, role=SessionRole.administrator)

    assert result.is_ok()
    claims = signer.verify(result.value.access_token, verify_expiry=False)
    assert claims["role"] == "administrator"


@pytest.mark.asyncio
@pytest.mark.parametrize("fields", [
    {"status": AdministratorStatus.suspended},
    {"revoked_at": datetime(2026, 2, 1)},
    {"deleted_at": datetime(2026, 2, 1)},
])
async def test_refresh_administrator_session_without_privileges(authority, session_mocks, fields):
    user_account_id = uuid4()
    issued, _ = await issue_and_capture(
        authority, session_mocks, user_account_id, role=SessionRole.administrator
    )
    session_mocks.user_accounts.get_by_id.return_value = active_account(user_account_id)
    grant_administrator(session_mocks, user_account_id, **fields)

    result = await authority.refresh(issued.refresh_token)

    assert result.error.code == AuthErrorCode.ACCOUNT_NOT_ELIGIBLE
    session_mocks.sessions.rotate.assert_not_called()


@pytest.mark.asyncio
async def test_refresh_administrator_session_without_record(authority, session_mocks):
    user_account_id = uuid4()
    issued, _ = await issue_and_capture(
        authority, session_mocks, user_account_id, role=SessionRole.administrator
    )
    session_mocks.user_accounts.get_by_id.return_value = active_account(user_account_id)

    result = await authority.refresh(issued.refresh_token)

    assert result.error.code == AuthErrorCode.ACCOUNT_NOT_ELIGIBLE
    session_mocks.sessions.rotate.assert_not_called()


@pytest.mark.asyncio
async def test_refresh_lost_rotation_race(authority, session_mocks):
    """When the conditional write matches nothing, the refresh fails"""
    user_account_id = uuid4()
    issued, _ = await issue_and_capture(authority, session_mocks, user_account_id)
    session_mocks.user_accounts.get_by_id.return_value = active_account(user_account_id)
    session_mocks.sessions.rotate.return_value = None

    result = await authority.refresh(issued.refresh_token)

    assert result.error.code == AuthErrorCode.SESSION_NOT_FOUND
    session_mocks.audit_events.create.assert_not_called()
    session_mocks.commit.assert_not_called()


@pytest.mark.asyncio
async def test_revoke_sets_revoked_at(authority, session_mocks, clock):
    _, stored = await issue_and_capture(authority, session_mocks, uuid4())

    result = await authority.revoke(stored.session_id)

    assert result.is_ok()
    assert result.value.revoked is True
    assert result.value.session_id == str(stored.session_id)
    session_mocks.sessions.revoke.assert_called_once_with(stored, clock.now)
    assert session_mocks.audit_events.create.call_args.args[0].action == "session_revoke"
    session_mocks.commit.assert_called_once()


@pytest.mark.asyncio
async def test_revoke_already_revoked_is_noop(authority, session_mocks, clock):
    _, stored = await issue_and_capture(authority, session_mocks, uuid4())
    stored.revoked_at = clock.now

    result = await authority.revoke(stored.session_id)

    assert result.is_ok()
    assert result.value.revoked is False
    session_mocks.sessions.revoke.assert_not_called()
    session_mocks.commit.assert_not_called()


@pytest.mark.asyncio
async def test_revoke_deleted_session_is_noop(authority, session_mocks, clock):
    _, stored = await issue_and_capture(authority, session_mocks, uuid4())
    stored.deleted_at = clock.now

    result = await authority.revoke(stored.session_id)

    assert result.is_ok()
    assert result.value.revoked is False
    session_mocks.sessions.revoke.assert_not_called()


@pytest.mark.asyncio
async def test_revoke_unknown_session(authority, session_mocks):
    session_mocks.sessions.get_by_session_id.return_value = None

    result = await authority.revoke(uuid4())

    assert result.is_err()
    assert result.error.code == AuthErrorCode.SESSION_NOT_FOUND


@pytest.mark.asyncio
async def test_revoke_other_users_session_forbidden(authority, session_mocks):
    _, stored = await issue_and_capture(authority, session_mocks, uuid4())

    result = await authority.revoke(stored.session_id, requesting_user_account_id=uuid4())

    assert result.error.code == AuthErrorCode.FORBIDDEN
    session_mocks.sessions.revoke.assert_not_called()


@pytest.mark.asyncio
async def test_revoke_own_session(authority, session_mocks):
    user_account_id = uuid4()
    _, stored = await issue_and_capture(authority, session_mocks, user_account_id)

    result = await authority.revoke(
        stored.session_id, requesting_user_account_id=user_account_id
    )

    assert result.value.revoked is True


@pytest.mark.asyncio
async def test_verify_access_token(session_mocks, signer, hasher):
    authority = SessionAuthority(session_mocks, signer, hasher)
    user_account_id = uuid4()
    issued = await authority.issue(user_account_id)

    claims = authority.verify_access_token(issued.access_token)

    assert claims["sub"] == str(user_account_id)
    assert claims["sid"] == issued.session_id
    assert authority.verify_access_token(issued.refresh_token) is None
    assert authority.verify_access_token("garbage") is None
