"""Tests for the identity gateway and auth routes."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

from realm.errors import AuthenticationError, EmailTakenError, InvalidRequestError
from server.auth import get_identity, session_for
from tests.conftest import MASTER_EMAIL, auth_header, signup


@pytest.mark.asyncio
async def test_sign_up_and_current_user(store):
    identity = get_identity()
    user, token = await identity.sign_up("Ana@Example.com", "segredo123", "Ana")
    assert user.email == "ana@example.com"
    current = await identity.current_user(token)
    assert current == user


@pytest.mark.asyncio
async def test_duplicate_email(store):
    identity = get_identity()
    await identity.sign_up("ana@example.com", "segredo123")
    with pytest.raises(EmailTakenError):
        await identity.sign_up("ANA@example.com", "outrasenha")


@pytest.mark.asyncio
async def test_short_password(store):
    with pytest.raises(InvalidRequestError):
        await get_identity().sign_up("ana@example.com", "123")


@pytest.mark.asyncio
async def test_sign_in_and_out(store):
    identity = get_identity()
    await identity.sign_up("ana@example.com", "segredo123")
    with pytest.raises(AuthenticationError):
        await identity.sign_in("ana@example.com", "errada")
    with pytest.raises(AuthenticationError):
        await identity.sign_in("ninguem@example.com", "segredo123")
    user, token = await identity.sign_in("ana@example.com", "segredo123")
    assert await identity.current_user(token) == user
    await identity.sign_out(token)
    assert await identity.current_user(token) is None


@pytest.mark.asyncio
async def test_session_change_notifications(store):
    identity = get_identity()
    seen = []
    unsubscribe = identity.on_session_change(seen.append)
    user, token = await identity.sign_up("ana@example.com", "segredo123")
    await identity.sign_out(token)
    unsubscribe()
    await identity.sign_in("ana@example.com", "segredo123")
    assert seen == [user, None]


@pytest.mark.asyncio
async def test_master_session(store):
    identity = get_identity()
    user, _ = await identity.sign_up(MASTER_EMAIL, "segredo123")
    assert session_for(user).is_master is True
    other, _ = await identity.sign_up("ana@example.com", "segredo123")
    assert session_for(other).is_master is False


@pytest.mark.asyncio
async def test_auth_routes(client: AsyncClient):
    account = await signup(client, "ana@example.com")
    assert account["token"].startswith("ses-")
    assert account["is_master"] is False

    resp = await client.get("/auth/me", headers=auth_header(account["token"]))
    assert resp.status_code == 200
    assert resp.json()["email"] == "ana@example.com"

    resp = await client.post("/auth/signin", json={"email": "ana@example.com", "password": "errada1"})
    assert resp.status_code == 401

    resp = await client.post("/auth/signout", headers=auth_header(account["token"]))
    assert resp.status_code == 200
    resp = await client.get("/auth/me", headers=auth_header(account["token"]))
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_duplicate_signup_route(client: AsyncClient):
    await signup(client, "ana@example.com")
    resp = await client.post("/auth/signup", json={"email": "ana@example.com", "password": "segredo123"})
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_missing_auth_header(client: AsyncClient):
    resp = await client.get("/profiles/me")
    assert resp.status_code == 401
    resp = await client.get("/profiles/me", headers=auth_header("ses-bogus"))
    assert resp.status_code == 401
