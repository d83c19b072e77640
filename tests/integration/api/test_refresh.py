from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlmodel import select

from src.domain.base import utcnow
from src.domain.entities import Session


async def load_session(db_session, session_id: str) -> Session:
    from uuid import UUID

    result = await db_session.exec(
        select(Session).where(Session.session_id == UUID(session_id))
    )
    return result.one()


@pytest.mark.asyncio
async def test_successful_token_refresh(client: AsyncClient, joined_member, db_session):
    """Refresh rotates the session id and the refresh token"""
    old = joined_member["token"]

    response = await client.post("/auth/refresh", json={"refresh_token": old["refresh_token"]})

    assert response.status_code == 200
    data = response.json()
    assert data["access_token"] != old["access_token"]
    assert data["refresh_token"] != old["refresh_token"]
    assert data["session_id"] != old["session_id"]
    assert data["expires_at"] and data["access_expires_at"]

    session = await load_session(db_session, data["session_id"])
    assert session.issued_at < session.expires_at

    result = await db_session.exec(select(Session))
    assert len(result.all()) == 1


@pytest.mark.asyncio
async def test_replayed_refresh_token_rejected(client: AsyncClient, joined_member):
    """The same refresh token works exactly once"""
    refresh_token = joined_member["token"]["refresh_token"]

    first = await client.post("/auth/refresh", json={"refresh_token": refresh_token})
    assert first.status_code == 200

    second = await client.post("/auth/refresh", json={"refresh_token": refresh_token})
    assert second.status_code == 401
    assert second.json()["error"]["code"] == "UNAUTHORIZED"

    # The rotated token still works
    third = await client.post(
        "/auth/refresh", json={"refresh_token": first.json()["refresh_token"]}
    )
    assert third.status_code == 200


@pytest.mark.asyncio
async def test_refresh_with_expired_session(client: AsyncClient, joined_member, db_session):
    session = await load_session(db_session, joined_member["token"]["session_id"])
    session.expires_at = utcnow() - timedelta(days=1)
    db_session.add(session)
    await db_session.commit()

    response = await client.post(
        "/auth/refresh", json={"refresh_token": joined_member["token"]["refresh_token"]}
    )

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_refresh_with_deleted_session(client: AsyncClient, joined_member, db_session):
    session = await load_session(db_session, joined_member["token"]["session_id"])
    session.deleted_at = utcnow()
    db_session.add(session)
    await db_session.commit()

    response = await client.post(
        "/auth/refresh", json={"refresh_token": joined_member["token"]["refresh_token"]}
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_refresh_with_garbage_token(client: AsyncClient):
    response = await client.post("/auth/refresh", json={"refresh_token": "not-a-token"})

    assert response.status_code == 401
    error = response.json()["error"]
    assert error["code"] == "UNAUTHORIZED"
    assert "message" in error


@pytest.mark.asyncio
async def test_refresh_with_access_token(client: AsyncClient, joined_member):
    response = await client.post(
        "/auth/refresh", json={"refresh_token": joined_member["token"]["access_token"]}
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_refresh_missing_body(client: AsyncClient):
    response = await client.post("/auth/refresh", json={})

    assert response.status_code == 422
